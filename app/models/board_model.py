"""Data models for board-related operations."""

from typing import List, Optional

from pydantic import BaseModel, Field

from app.config import get_settings
from app.services.snap_engine import BoardSnapshot, Piece, ReleaseResult


class Position(BaseModel):
    """Model representing a position in 2D space."""

    x: float
    y: float


class BuildBoardRequest(BaseModel):
    """Request model for building a board."""

    rows: int = Field(
        default_factory=lambda: get_settings().DEFAULT_ROWS, ge=1, description="Number of rows in the grid"
    )
    cols: int = Field(
        default_factory=lambda: get_settings().DEFAULT_COLS, ge=1, description="Number of columns in the grid"
    )
    cell_size: float = Field(
        default_factory=lambda: get_settings().PIECE_SIZE, gt=0.0, description="Side length of one cell"
    )
    snap_threshold: float = Field(
        default_factory=lambda: get_settings().SNAP_THRESHOLD, gt=0.0, description="Per-axis snap tolerance"
    )
    seed: Optional[int] = Field(default=None, description="Random seed for a reproducible board")


class DragStartRequest(BaseModel):
    """Pointer-down on a piece, in board-local coordinates."""

    piece_id: int = Field(..., ge=0)
    x: float
    y: float


class PointerRequest(BaseModel):
    """Pointer sample in board-local coordinates."""

    x: float
    y: float


class PieceState(BaseModel):
    """Rendering view of one piece."""

    id: int
    row: int
    col: int
    cluster_id: int
    sides: List[str] = Field(..., description="Side kinds as (top, right, bottom, left)")
    path: str = Field(..., description="SVG path data in the cell's local frame")
    position: Position
    correct_position: Position
    solved: bool

    @classmethod
    def from_piece(cls, piece: Piece) -> "PieceState":
        return cls(
            id=piece.id,
            row=piece.row,
            col=piece.col,
            cluster_id=piece.cluster_id,
            sides=[kind.value for kind in piece.kinds],
            path=piece.outline.to_svg_path() if piece.outline is not None else "",
            position=Position(x=piece.position[0], y=piece.position[1]),
            correct_position=Position(x=piece.target[0], y=piece.target[1]),
            solved=piece.solved,
        )


class BoardResponse(BaseModel):
    """Response model for a board snapshot."""

    board_id: str
    rows: int
    cols: int
    cell_size: float
    snap_threshold: float
    cleared: bool
    dragging: bool = False
    paint_order: List[int]
    pieces: List[PieceState]

    @classmethod
    def from_snapshot(
        cls,
        board_id: str,
        snapshot: BoardSnapshot,
        rows: int,
        cols: int,
        cell_size: float,
        snap_threshold: float,
        dragging: bool = False,
    ) -> "BoardResponse":
        return cls(
            board_id=board_id,
            rows=rows,
            cols=cols,
            cell_size=cell_size,
            snap_threshold=snap_threshold,
            cleared=snapshot.cleared,
            dragging=dragging,
            paint_order=list(snapshot.paint_order),
            pieces=[PieceState.from_piece(p) for p in snapshot.pieces],
        )


class ReleaseResponse(BaseModel):
    """Response model for a drag release."""

    merged: bool
    cleared: bool
    cluster_id: Optional[int] = Field(default=None, description="Cluster that absorbed the released one")
    board: BoardResponse

    @classmethod
    def from_result(cls, result: ReleaseResult, board: BoardResponse) -> "ReleaseResponse":
        return cls(
            merged=result.merged,
            cleared=result.cleared,
            cluster_id=result.snap.cluster_id if result.snap is not None else None,
            board=board,
        )


class Level(BaseModel):
    """A preset board configuration."""

    id: int
    title: str
    rows: int = Field(..., ge=1)
    cols: int = Field(..., ge=1)
    snap_threshold: float = Field(..., gt=0.0)


LEVELS: List[Level] = [
    Level(id=1, title="LEVEL 1", rows=6, cols=4, snap_threshold=25),
    Level(id=2, title="LEVEL 2", rows=8, cols=6, snap_threshold=25),
    Level(id=3, title="LEVEL 3", rows=10, cols=8, snap_threshold=30),
]
