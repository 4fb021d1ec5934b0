"""Service for building playable jigsaw boards."""

import logging
from typing import Callable, Optional

from jigsaw_shapes import OutlineBuilder, ScatterOptions, plan_board

from app.config import settings
from app.services.snap_engine import BoardSnapshot, ClearEvent, CoordinateMapper, Piece, SnapEngine, SnapEvent

logger = logging.getLogger(__name__)


class BoardBuilder:
    """Plans a board, cuts every piece outline and wraps the result in a SnapEngine."""

    def __init__(self, scatter: Optional[ScatterOptions] = None):
        """Initialize the board builder.

        Args:
            scatter: Scatter band options. Defaults come from settings.
        """
        self.scatter = scatter or ScatterOptions(
            band_rows=settings.SCATTER_BAND_ROWS,
            gap_ratio=settings.SCATTER_GAP_RATIO,
        )

    def build_snapshot(
        self,
        rows: int,
        cols: int,
        cell_size: float,
        seed: Optional[int] = None,
    ) -> BoardSnapshot:
        """Build a fresh board state.

        Every piece starts as its own cluster at its scatter position.

        Raises:
            BoardConfigError: If the dimensions are not positive.
        """
        plan = plan_board(rows, cols, cell_size, seed=seed, scatter=self.scatter)

        # One profile cache per build; both sides of a border hit the same entry
        outlines = OutlineBuilder(cell_size=cell_size)

        pieces = [
            Piece(
                id=p.id,
                row=p.row,
                col=p.col,
                cluster_id=p.id,
                sides=p.sides,
                position=p.position,
                target=p.target,
                outline=outlines.build(p.sides),
            )
            for p in plan.pieces
        ]
        logger.info(
            "Built %dx%d board (%d pieces, %d edge profiles, %d cache hits, %d misses)",
            rows,
            cols,
            len(pieces),
            len(outlines.cache),
            outlines.cache.hits,
            outlines.cache.misses,
        )
        return BoardSnapshot.from_pieces(pieces)

    def build(
        self,
        rows: int,
        cols: int,
        cell_size: float,
        snap_threshold: float,
        seed: Optional[int] = None,
        screen_to_local: Optional[CoordinateMapper] = None,
        on_snap: Optional[Callable[[SnapEvent], None]] = None,
        on_clear: Optional[Callable[[ClearEvent], None]] = None,
    ) -> SnapEngine:
        """Build a board and the engine that plays it."""
        snapshot = self.build_snapshot(rows, cols, cell_size, seed=seed)
        return SnapEngine(
            snapshot,
            cell_size=cell_size,
            snap_threshold=snap_threshold,
            screen_to_local=screen_to_local,
            on_snap=on_snap,
            on_clear=on_clear,
        )

    def rebuild(self, engine: SnapEngine, rows: int, cols: int, seed: Optional[int] = None) -> None:
        """Replace an engine's board in one step, keeping its size and threshold."""
        snapshot = self.build_snapshot(rows, cols, engine.cell_size, seed=seed)
        engine.reset(snapshot)


# Singleton instance
_board_builder: Optional[BoardBuilder] = None


def get_board_builder() -> BoardBuilder:
    """Get the singleton BoardBuilder instance."""
    global _board_builder
    if _board_builder is None:
        _board_builder = BoardBuilder()
    return _board_builder
