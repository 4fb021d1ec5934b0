"""Cluster grouping, drag handling and snapping for a jigsaw board.

The engine never mutates pieces in place. Every state change computes a new
:class:`BoardSnapshot` and publishes it in a single assignment, so consumers
only ever observe a complete piece set.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple

from jigsaw_shapes import PieceOutline, PieceSides, SideKind

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
CoordinateMapper = Callable[[Any], Point]


class PieceNotFoundError(KeyError):
    """Raised when a drag starts on a piece id the board does not contain."""


class DragState(Enum):
    """Phase of the pointer interaction."""

    IDLE = "idle"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class Piece:
    """One grid cell as seen by the engine."""

    id: int
    row: int
    col: int
    cluster_id: int
    sides: PieceSides
    position: Point
    target: Point
    outline: Optional[PieceOutline] = None
    solved: bool = False

    @property
    def kinds(self) -> Tuple[SideKind, SideKind, SideKind, SideKind]:
        return self.sides.kinds

    def translated(self, dx: float, dy: float) -> "Piece":
        return replace(self, position=(self.position[0] + dx, self.position[1] + dy))

    def is_adjacent(self, other: "Piece") -> bool:
        """True when the two cells share a border on the grid."""
        return abs(self.row - other.row) + abs(self.col - other.col) == 1


@dataclass(frozen=True)
class BoardSnapshot:
    """Immutable state of a board at one instant.

    ``pieces`` is indexed by piece id. ``paint_order`` lists piece ids from
    bottom to top.
    """

    pieces: Tuple[Piece, ...]
    paint_order: Tuple[int, ...]
    cleared: bool = False

    @classmethod
    def from_pieces(cls, pieces: Iterable[Piece]) -> "BoardSnapshot":
        ordered = tuple(sorted(pieces, key=lambda p: p.id))
        return cls(pieces=ordered, paint_order=tuple(p.id for p in ordered))

    def piece(self, piece_id: int) -> Piece:
        if not 0 <= piece_id < len(self.pieces) or self.pieces[piece_id].id != piece_id:
            raise PieceNotFoundError(piece_id)
        return self.pieces[piece_id]

    def painted(self) -> List[Piece]:
        """Pieces in paint order."""
        return [self.pieces[piece_id] for piece_id in self.paint_order]

    def members(self, cluster_id: int) -> List[Piece]:
        """Pieces of one cluster, in paint order."""
        return [p for p in self.painted() if p.cluster_id == cluster_id]

    def clusters(self) -> Dict[int, FrozenSet[int]]:
        """Partition of piece ids by cluster identity."""
        groups: Dict[int, set] = {}
        for piece in self.pieces:
            groups.setdefault(piece.cluster_id, set()).add(piece.id)
        return {cluster_id: frozenset(ids) for cluster_id, ids in groups.items()}


@dataclass(frozen=True)
class DragSession:
    """The active drag: which cluster moves and the last pointer sample."""

    cluster_id: int
    last_point: Point


@dataclass(frozen=True)
class SnapEvent:
    """A cluster merge."""

    cluster_id: int
    absorbed_cluster_id: int
    piece_ids: FrozenSet[int]
    correction: Point


@dataclass(frozen=True)
class ClearEvent:
    """Global completion of the board."""

    piece_count: int


@dataclass(frozen=True)
class ReleaseResult:
    """Outcome of a drag release."""

    merged: bool = False
    cleared: bool = False
    snap: Optional[SnapEvent] = None


def default_screen_to_local(raw: Any) -> Point:
    """Accept an (x, y) pair or any object with ``x`` and ``y`` attributes."""
    if hasattr(raw, "x") and hasattr(raw, "y"):
        return (float(raw.x), float(raw.y))
    x, y = raw
    return (float(x), float(y))


def within(deviation: float, tolerance: float) -> bool:
    """Per-axis tolerance test on absolute distance."""
    return abs(deviation) < tolerance


class SnapEngine:
    """Drag state machine and cluster merging for one board."""

    def __init__(
        self,
        snapshot: BoardSnapshot,
        cell_size: float,
        snap_threshold: float,
        screen_to_local: Optional[CoordinateMapper] = None,
        on_snap: Optional[Callable[[SnapEvent], None]] = None,
        on_clear: Optional[Callable[[ClearEvent], None]] = None,
    ):
        """Initialize the engine.

        Args:
            snapshot: Initial board state.
            cell_size: Lattice spacing between neighbouring targets.
            snap_threshold: Maximum per-axis deviation for a snap or completion.
            screen_to_local: Maps raw pointer events to board-local (x, y).
            on_snap: Called after every cluster merge.
            on_clear: Called once when the board is completed.
        """
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        if snap_threshold <= 0:
            raise ValueError(f"snap_threshold must be positive, got {snap_threshold}")
        self.cell_size = float(cell_size)
        self.snap_threshold = float(snap_threshold)
        self.screen_to_local = screen_to_local or default_screen_to_local
        self.on_snap = on_snap
        self.on_clear = on_clear
        self._snapshot = snapshot
        self._session: Optional[DragSession] = None

    @property
    def snapshot(self) -> BoardSnapshot:
        return self._snapshot

    @property
    def state(self) -> DragState:
        return DragState.DRAGGING if self._session is not None else DragState.IDLE

    @property
    def session(self) -> Optional[DragSession]:
        return self._session

    @property
    def cleared(self) -> bool:
        return self._snapshot.cleared

    def clusters(self) -> Dict[int, FrozenSet[int]]:
        return self._snapshot.clusters()

    def reset(self, snapshot: BoardSnapshot) -> None:
        """Replace the whole board, dropping any drag in progress."""
        self._session = None
        self._snapshot = snapshot

    def drag_start(self, piece_id: int, raw_event: Any) -> bool:
        """Start dragging the cluster of a piece.

        Returns:
            False if the board is already cleared, True otherwise.

        Raises:
            PieceNotFoundError: If the piece id is unknown.
        """
        if self._snapshot.cleared:
            logger.debug("Ignoring drag start on piece %d: board is cleared", piece_id)
            return False

        self._snapshot.piece(piece_id)
        if self._session is not None:
            # A new pointer-down always gets a fresh session
            self.drag_end()
            if self._snapshot.cleared:
                logger.debug("Ignoring drag start on piece %d: releasing cleared the board", piece_id)
                return False

        # The release may have merged this piece into another cluster
        cluster_id = self._snapshot.piece(piece_id).cluster_id
        order = self._snapshot.paint_order
        others = tuple(i for i in order if self._snapshot.pieces[i].cluster_id != cluster_id)
        group = tuple(i for i in order if self._snapshot.pieces[i].cluster_id == cluster_id)
        self._snapshot = replace(self._snapshot, paint_order=others + group)
        self._session = DragSession(cluster_id=cluster_id, last_point=self.screen_to_local(raw_event))
        return True

    def drag_move(self, raw_event: Any) -> bool:
        """Move the active cluster by the pointer delta since the previous sample.

        Returns:
            True if a cluster moved, False when no drag is active.
        """
        if self._session is None:
            logger.debug("Ignoring drag move without an active drag")
            return False

        x, y = self.screen_to_local(raw_event)
        last_x, last_y = self._session.last_point
        dx, dy = x - last_x, y - last_y
        cluster_id = self._session.cluster_id

        pieces = tuple(p.translated(dx, dy) if p.cluster_id == cluster_id else p for p in self._snapshot.pieces)
        self._snapshot = replace(self._snapshot, pieces=pieces)
        self._session = replace(self._session, last_point=(x, y))
        return True

    def drag_end(self, raw_event: Any = None) -> ReleaseResult:
        """Release the active cluster and run the snap check.

        If a raw event is given it is applied as a final move sample first.
        """
        if self._session is None:
            logger.debug("Ignoring release without an active drag")
            return ReleaseResult()

        if raw_event is not None:
            self.drag_move(raw_event)

        cluster_id = self._session.cluster_id
        self._session = None

        snap = self._snap_cluster(cluster_id)
        cleared = self.check_completion()
        return ReleaseResult(merged=snap is not None, cleared=cleared, snap=snap)

    def drag_cancel(self, raw_event: Any = None) -> ReleaseResult:
        """Cancelled drags release exactly like normal ones."""
        return self.drag_end(raw_event)

    def find_snap(self, cluster_id: int) -> Optional[Tuple[Piece, Piece]]:
        """First (active, foreign) pair of adjacent pieces aligned within tolerance."""
        painted = self._snapshot.painted()
        active = [p for p in painted if p.cluster_id == cluster_id]
        foreign = [p for p in painted if p.cluster_id != cluster_id]

        for a in active:
            for b in foreign:
                if not a.is_adjacent(b):
                    continue
                ideal_x = (a.col - b.col) * self.cell_size
                ideal_y = (a.row - b.row) * self.cell_size
                actual_x = a.position[0] - b.position[0]
                actual_y = a.position[1] - b.position[1]
                if within(actual_x - ideal_x, self.snap_threshold) and within(
                    actual_y - ideal_y, self.snap_threshold
                ):
                    return a, b
        return None

    def _snap_cluster(self, cluster_id: int) -> Optional[SnapEvent]:
        pair = self.find_snap(cluster_id)
        if pair is None:
            return None

        a, b = pair
        target_cluster = b.cluster_id
        correction = (
            b.position[0] + (a.col - b.col) * self.cell_size - a.position[0],
            b.position[1] + (a.row - b.row) * self.cell_size - a.position[1],
        )

        pieces = []
        merged_ids = set()
        for piece in self._snapshot.pieces:
            if piece.cluster_id == cluster_id:
                piece = replace(
                    piece.translated(*correction),
                    cluster_id=target_cluster,
                    solved=True,
                )
            elif piece.cluster_id == target_cluster:
                piece = replace(piece, solved=True)
            else:
                pieces.append(piece)
                continue
            merged_ids.add(piece.id)
            pieces.append(piece)

        self._snapshot = replace(self._snapshot, pieces=tuple(pieces))

        event = SnapEvent(
            cluster_id=target_cluster,
            absorbed_cluster_id=cluster_id,
            piece_ids=frozenset(merged_ids),
            correction=correction,
        )
        logger.info(
            "Cluster %d snapped onto cluster %d (%d pieces)",
            cluster_id,
            target_cluster,
            len(merged_ids),
        )
        self._notify(self.on_snap, event)
        return event

    def is_complete(self) -> bool:
        """True when every piece is within tolerance of its target on both axes."""
        return all(
            within(p.position[0] - p.target[0], self.snap_threshold)
            and within(p.position[1] - p.target[1], self.snap_threshold)
            for p in self._snapshot.pieces
        )

    def check_completion(self) -> bool:
        """Clear the board if it is complete.

        On completion every piece lands exactly on its target and is marked
        solved.

        Returns:
            Whether the board is cleared.
        """
        if self._snapshot.cleared:
            return True
        if not self.is_complete():
            return False

        pieces = tuple(replace(p, position=p.target, solved=True) for p in self._snapshot.pieces)
        self._snapshot = replace(self._snapshot, pieces=pieces, cleared=True)
        self._session = None
        logger.info("Board cleared (%d pieces)", len(pieces))
        self._notify(self.on_clear, ClearEvent(piece_count=len(pieces)))
        return True

    def _notify(self, listener: Optional[Callable[[Any], None]], event: Any) -> None:
        if listener is None:
            return
        try:
            listener(event)
        except Exception:
            logger.exception("Event listener failed for %s", type(event).__name__)
