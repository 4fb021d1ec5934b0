"""Main FastAPI application module for the jigsaw board service."""

import logging
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional

from app.config import settings
from app.models.board_model import (
    LEVELS,
    BoardResponse,
    BuildBoardRequest,
    DragStartRequest,
    Level,
    PointerRequest,
    ReleaseResponse,
)
from app.services.board_builder import get_board_builder
from app.services.snap_engine import PieceNotFoundError, SnapEngine
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from jigsaw_shapes import BoardConfigError

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(title=settings.PROJECT_NAME)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@dataclass
class BoardSession:
    """A live board and the parameters it was built with."""

    engine: SnapEngine
    rows: int
    cols: int

    def response(self, board_id: str) -> BoardResponse:
        return BoardResponse.from_snapshot(
            board_id,
            self.engine.snapshot,
            rows=self.rows,
            cols=self.cols,
            cell_size=self.engine.cell_size,
            snap_threshold=self.engine.snap_threshold,
            dragging=self.engine.session is not None,
        )


# Store boards in memory for demo
boards: Dict[str, BoardSession] = {}


def _get_board(board_id: str) -> BoardSession:
    if board_id not in boards:
        raise HTTPException(status_code=404, detail="Board not found")
    return boards[board_id]


def _create_board(rows: int, cols: int, cell_size: float, snap_threshold: float, seed: Optional[int]) -> BoardResponse:
    try:
        engine = get_board_builder().build(rows, cols, cell_size, snap_threshold, seed=seed)
    except BoardConfigError as e:
        raise HTTPException(status_code=400, detail=str(e))

    board_id = str(uuid.uuid4())
    boards[board_id] = BoardSession(engine=engine, rows=rows, cols=cols)
    logger.info("Created board %s", board_id)
    return boards[board_id].response(board_id)


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/api/v1/levels", response_model=List[Level])
def list_levels() -> List[Level]:
    """List the preset levels."""
    return LEVELS


@app.post("/api/v1/boards", response_model=BoardResponse)
def build_board(request: BuildBoardRequest) -> BoardResponse:
    """Build a new board.

    Args:
        request: Grid size, cell size, snap tolerance and optional seed.

    Returns:
        BoardResponse: The freshly scattered board.

    Raises:
        HTTPException: If the board dimensions are invalid.
    """
    return _create_board(request.rows, request.cols, request.cell_size, request.snap_threshold, request.seed)


@app.post("/api/v1/boards/levels/{level_id}", response_model=BoardResponse)
def build_level(level_id: int, seed: Optional[int] = None) -> BoardResponse:
    """Build a board from a preset level.

    Raises:
        HTTPException: If the level does not exist.
    """
    level = next((lv for lv in LEVELS if lv.id == level_id), None)
    if level is None:
        raise HTTPException(status_code=404, detail="Level not found")
    return _create_board(level.rows, level.cols, settings.PIECE_SIZE, level.snap_threshold, seed)


@app.get("/api/v1/boards/{board_id}", response_model=BoardResponse)
def get_board(board_id: str) -> BoardResponse:
    """Get the current state of a board."""
    return _get_board(board_id).response(board_id)


@app.post("/api/v1/boards/{board_id}/restart", response_model=BoardResponse)
def restart_board(board_id: str, seed: Optional[int] = None) -> BoardResponse:
    """Rebuild a board in place with the same parameters."""
    session = _get_board(board_id)
    get_board_builder().rebuild(session.engine, session.rows, session.cols, seed=seed)
    return session.response(board_id)


@app.delete("/api/v1/boards/{board_id}")
def delete_board(board_id: str) -> dict[str, str]:
    """Discard a board and free its state.

    Raises:
        HTTPException: If the board does not exist.
    """
    _get_board(board_id)
    del boards[board_id]
    logger.info("Deleted board %s", board_id)
    return {"status": "deleted"}


@app.post("/api/v1/boards/{board_id}/drag/start", response_model=BoardResponse)
def drag_start(board_id: str, request: DragStartRequest) -> BoardResponse:
    """Start dragging the cluster of a piece.

    Raises:
        HTTPException: If the board or piece is unknown, or the board is cleared.
    """
    session = _get_board(board_id)
    try:
        started = session.engine.drag_start(request.piece_id, (request.x, request.y))
    except PieceNotFoundError:
        raise HTTPException(status_code=404, detail="Piece not found")
    if not started:
        raise HTTPException(status_code=409, detail="Board is already cleared")
    return session.response(board_id)


@app.post("/api/v1/boards/{board_id}/drag/move", response_model=BoardResponse)
def drag_move(board_id: str, request: PointerRequest) -> BoardResponse:
    """Move the active cluster to a new pointer sample."""
    session = _get_board(board_id)
    session.engine.drag_move((request.x, request.y))
    return session.response(board_id)


@app.post("/api/v1/boards/{board_id}/drag/end", response_model=ReleaseResponse)
def drag_end(board_id: str, request: Optional[PointerRequest] = None) -> ReleaseResponse:
    """Release the active cluster and snap it if it lines up with a neighbour."""
    session = _get_board(board_id)
    result = session.engine.drag_end((request.x, request.y) if request is not None else None)
    return ReleaseResponse.from_result(result, session.response(board_id))


@app.post("/api/v1/boards/{board_id}/drag/cancel", response_model=ReleaseResponse)
def drag_cancel(board_id: str) -> ReleaseResponse:
    """Cancel the active drag; handled exactly like a release."""
    session = _get_board(board_id)
    result = session.engine.drag_cancel()
    return ReleaseResponse.from_result(result, session.response(board_id))
