"""Test module for the FastAPI jigsaw board application."""

from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

from app.config import get_settings
from app.main import app, boards

client = TestClient(app)


def build_board(rows: int = 2, cols: int = 2, seed: int = 1, **extra: Any) -> Dict[str, Any]:
    payload = {"rows": rows, "cols": cols, "cell_size": 100.0, "snap_threshold": 20.0, "seed": seed, **extra}
    response = client.post("/api/v1/boards", json=payload)
    assert response.status_code == 200
    return response.json()


def test_health_check() -> None:
    """Test the health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_list_levels() -> None:
    """Test listing the preset levels."""
    response = client.get("/api/v1/levels")
    assert response.status_code == 200
    levels = response.json()
    assert [(lv["rows"], lv["cols"]) for lv in levels] == [(6, 4), (8, 6), (10, 8)]


def test_build_board() -> None:
    """Test building a board returns one scattered piece per cell."""
    board = build_board(rows=2, cols=3)
    assert board["rows"] == 2
    assert board["cols"] == 3
    assert not board["cleared"]
    assert len(board["pieces"]) == 6
    assert board["board_id"] in boards

    for piece in board["pieces"]:
        assert piece["cluster_id"] == piece["id"]
        assert piece["path"].startswith("M 0.0 0.0")
        assert piece["path"].endswith("Z")
        assert piece["correct_position"] == {"x": piece["col"] * 100.0, "y": piece["row"] * 100.0}
        assert not piece["solved"]

    corner = board["pieces"][0]
    assert corner["sides"][0] == "flat"
    assert corner["sides"][3] == "flat"


def test_build_board_is_reproducible() -> None:
    """Test the same seed yields the same outlines and scatter."""
    first = build_board(seed=99)
    second = build_board(seed=99)
    assert first["pieces"] == second["pieces"]


def test_build_board_rejects_zero_rows() -> None:
    """Test a board with no rows is rejected before anything is stored."""
    count = len(boards)
    response = client.post("/api/v1/boards", json={"rows": 0, "cols": 3})
    assert response.status_code == 422
    assert len(boards) == count


def test_build_board_rejects_zero_cols() -> None:
    """Test a board with no columns is rejected before anything is stored."""
    count = len(boards)
    response = client.post("/api/v1/boards", json={"rows": 3, "cols": 0})
    assert response.status_code == 422
    assert len(boards) == count


def test_build_level() -> None:
    """Test building a board from a preset level."""
    response = client.post("/api/v1/boards/levels/1", params={"seed": 3})
    assert response.status_code == 200
    board = response.json()
    assert (board["rows"], board["cols"]) == (6, 4)
    assert board["snap_threshold"] == 25.0


def test_build_unknown_level() -> None:
    """Test building an unknown level."""
    response = client.post("/api/v1/boards/levels/99")
    assert response.status_code == 404
    assert response.json()["detail"] == "Level not found"


def test_get_unknown_board() -> None:
    """Test fetching a board that does not exist."""
    response = client.get("/api/v1/boards/missing")
    assert response.status_code == 404
    assert response.json()["detail"] == "Board not found"


def test_drag_and_snap() -> None:
    """Test dragging a piece next to its neighbour merges the two."""
    board = build_board(seed=5)
    board_id = board["board_id"]
    first = board["pieces"][0]["position"]
    second = board["pieces"][1]["position"]

    response = client.post(
        f"/api/v1/boards/{board_id}/drag/start",
        json={"piece_id": 1, "x": second["x"], "y": second["y"]},
    )
    assert response.status_code == 200
    assert response.json()["dragging"]
    assert response.json()["paint_order"][-1] == 1

    target = {"x": first["x"] + 100.0 + 3.0, "y": first["y"] - 2.0}
    response = client.post(f"/api/v1/boards/{board_id}/drag/move", json=target)
    assert response.status_code == 200

    response = client.post(f"/api/v1/boards/{board_id}/drag/end")
    assert response.status_code == 200
    result = response.json()
    assert result["merged"]
    assert result["cluster_id"] == 0
    assert not result["board"]["dragging"]

    pieces = result["board"]["pieces"]
    assert pieces[1]["cluster_id"] == 0
    assert pieces[0]["solved"] and pieces[1]["solved"]
    assert pieces[1]["position"]["x"] - pieces[0]["position"]["x"] == pytest.approx(100.0)
    assert pieces[1]["position"]["y"] == pytest.approx(pieces[0]["position"]["y"])


def test_drag_unknown_piece() -> None:
    """Test starting a drag on a piece that does not exist."""
    board_id = build_board()["board_id"]
    response = client.post(f"/api/v1/boards/{board_id}/drag/start", json={"piece_id": 10, "x": 0, "y": 0})
    assert response.status_code == 404
    assert response.json()["detail"] == "Piece not found"


def test_release_without_drag_is_noop() -> None:
    """Test releasing and cancelling with no active drag."""
    board = build_board()
    board_id = board["board_id"]

    response = client.post(f"/api/v1/boards/{board_id}/drag/end")
    assert response.status_code == 200
    assert not response.json()["merged"]

    response = client.post(f"/api/v1/boards/{board_id}/drag/cancel")
    assert response.status_code == 200
    assert not response.json()["merged"]
    assert response.json()["board"]["pieces"] == board["pieces"]


def test_restart_board() -> None:
    """Test restarting a board keeps its id and size."""
    board = build_board(rows=2, cols=3, seed=1)
    response = client.post(f"/api/v1/boards/{board['board_id']}/restart", params={"seed": 2})
    assert response.status_code == 200
    restarted = response.json()
    assert restarted["board_id"] == board["board_id"]
    assert len(restarted["pieces"]) == 6
    assert restarted["pieces"] != board["pieces"]


def test_delete_board() -> None:
    """Test deleting a board removes it from the store."""
    board_id = build_board()["board_id"]

    response = client.delete(f"/api/v1/boards/{board_id}")
    assert response.status_code == 200
    assert response.json() == {"status": "deleted"}
    assert board_id not in boards

    assert client.get(f"/api/v1/boards/{board_id}").status_code == 404
    assert client.delete(f"/api/v1/boards/{board_id}").status_code == 404


def test_second_drag_start_that_clears_board_is_rejected() -> None:
    """Test a pointer-down whose implicit release clears the board gets a 409."""
    board = build_board(rows=1, cols=1)
    board_id = board["board_id"]
    start = board["pieces"][0]["position"]

    client.post(f"/api/v1/boards/{board_id}/drag/start", json={"piece_id": 0, **start})
    client.post(f"/api/v1/boards/{board_id}/drag/move", json={"x": 0.0, "y": 0.0})

    response = client.post(f"/api/v1/boards/{board_id}/drag/start", json={"piece_id": 0, "x": 0.0, "y": 0.0})
    assert response.status_code == 409

    state = client.get(f"/api/v1/boards/{board_id}").json()
    assert state["cleared"]
    assert not state["dragging"]


@pytest.fixture
def board_defaults(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DEFAULT_ROWS", "3")
    monkeypatch.setenv("DEFAULT_COLS", "2")
    monkeypatch.setenv("SNAP_THRESHOLD", "12.5")
    get_settings.cache_clear()
    yield
    monkeypatch.undo()
    get_settings.cache_clear()


def test_build_board_defaults_from_settings(board_defaults: None) -> None:
    """Test an empty build request takes its size and tolerance from settings."""
    response = client.post("/api/v1/boards", json={})
    assert response.status_code == 200
    board = response.json()
    assert (board["rows"], board["cols"]) == (3, 2)
    assert board["snap_threshold"] == 12.5
    assert board["cell_size"] == 100.0
    assert len(board["pieces"]) == 6
