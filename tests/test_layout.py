"""Tests for board layout planning."""

import logging
import random

import pytest

from jigsaw_shapes import (
    BoardConfigError,
    ScatterOptions,
    SideKind,
    generate_border_lattices,
    perimeter_slots,
    plan_board,
    scatter_positions,
)


def rects_overlap(a, b, size: float) -> bool:
    """Axis-aligned overlap test for two square slots of the same size."""
    return abs(a[0] - b[0]) < size - 1e-9 and abs(a[1] - b[1]) < size - 1e-9


class TestBorderLattices:
    """Tests for the vertical and horizontal border lattices."""

    def test_lattice_shapes(self) -> None:
        vertical, horizontal = generate_border_lattices(3, 5, random.Random(0))
        assert len(vertical) == 3
        assert all(len(row) == 6 for row in vertical)
        assert len(horizontal) == 4
        assert all(len(row) == 5 for row in horizontal)

    def test_boundary_slots_are_flat(self) -> None:
        vertical, horizontal = generate_border_lattices(3, 5, random.Random(0))
        for row in vertical:
            assert row[0].kind is SideKind.FLAT and row[0].seed == 0
            assert row[-1].kind is SideKind.FLAT and row[-1].seed == 0
        for border in horizontal[0] + horizontal[-1]:
            assert border.kind is SideKind.FLAT and border.seed == 0

    @pytest.mark.parametrize("rows,cols", [(1, 1), (2, 2), (3, 5), (6, 4)])
    def test_interior_seeds_unique_and_positive(self, rows: int, cols: int) -> None:
        vertical, horizontal = generate_border_lattices(rows, cols, random.Random(1))
        seeds = [b.seed for row in vertical + horizontal for b in row if not b.is_flat]
        assert len(seeds) == rows * (cols - 1) + (rows - 1) * cols
        assert len(set(seeds)) == len(seeds)
        assert all(seed > 0 for seed in seeds)

    def test_interior_kinds_are_tab_or_slot(self) -> None:
        vertical, horizontal = generate_border_lattices(6, 6, random.Random(2))
        interior = [row[c] for row in vertical for c in range(1, 6)]
        interior += [b for row in horizontal[1:-1] for b in row]
        kinds = {b.kind for b in interior}
        assert kinds == {SideKind.TAB, SideKind.SLOT}


class TestPlanBoard:
    """Tests for per-cell side resolution and positions."""

    @pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
    def test_inversion_invariant(self, seed: int) -> None:
        plan = plan_board(4, 5, 100.0, seed=seed)
        for r in range(plan.rows):
            for c in range(plan.cols):
                piece = plan.piece_at(r, c)
                if r + 1 < plan.rows:
                    below = plan.piece_at(r + 1, c)
                    border = plan.horizontal[r + 1][c]
                    assert piece.sides.bottom.kind is border.kind
                    assert below.sides.top.kind is border.kind.inverse()
                    assert piece.sides.bottom.seed == below.sides.top.seed == border.seed
                    assert not piece.sides.bottom.reversed
                    assert below.sides.top.reversed
                if c + 1 < plan.cols:
                    beside = plan.piece_at(r, c + 1)
                    border = plan.vertical[r][c + 1]
                    assert piece.sides.right.kind is border.kind
                    assert beside.sides.left.kind is border.kind.inverse()
                    assert piece.sides.right.seed == beside.sides.left.seed == border.seed
                    assert not piece.sides.right.reversed
                    assert beside.sides.left.reversed

    def test_boundary_sides_are_flat(self) -> None:
        plan = plan_board(3, 4, 100.0, seed=9)
        for piece in plan.pieces:
            top, right, bottom, left = piece.sides
            assert (top.kind is SideKind.FLAT) == (piece.row == 0)
            assert (bottom.kind is SideKind.FLAT) == (piece.row == plan.rows - 1)
            assert (left.kind is SideKind.FLAT) == (piece.col == 0)
            assert (right.kind is SideKind.FLAT) == (piece.col == plan.cols - 1)
            for side in piece.sides:
                if side.kind is SideKind.FLAT:
                    assert side.seed == 0

    def test_single_cell_board(self) -> None:
        plan = plan_board(1, 1, 50.0, seed=0)
        assert len(plan.pieces) == 1
        assert plan.pieces[0].kinds == (SideKind.FLAT,) * 4

    def test_targets_and_ids(self) -> None:
        plan = plan_board(3, 4, 80.0, seed=3)
        assert len(plan.pieces) == 12
        for piece in plan.pieces:
            assert piece.id == piece.row * 4 + piece.col
            assert piece.target == (piece.col * 80.0, piece.row * 80.0)

    def test_same_seed_same_plan(self) -> None:
        assert plan_board(4, 4, 100.0, seed=77) == plan_board(4, 4, 100.0, seed=77)

    @pytest.mark.parametrize(
        "rows,cols,cell_size",
        [(0, 3, 100.0), (3, 0, 100.0), (-1, 2, 100.0), (2, 2, 0.0), (2, 2, -5.0)],
    )
    def test_invalid_dimensions_rejected(self, rows: int, cols: int, cell_size: float) -> None:
        with pytest.raises(BoardConfigError):
            plan_board(rows, cols, cell_size)

    def test_non_integer_rows_rejected(self) -> None:
        with pytest.raises(BoardConfigError, match="integer"):
            plan_board(2.5, 2, 100.0)  # type: ignore[arg-type]

    def test_config_error_is_value_error(self) -> None:
        assert issubclass(BoardConfigError, ValueError)


class TestScatter:
    """Tests for the initial scattered placement."""

    @pytest.mark.parametrize("rows,cols", [(2, 2), (3, 3), (6, 4)])
    def test_perimeter_slots_do_not_overlap(self, rows: int, cols: int) -> None:
        size = 100.0
        slots = perimeter_slots(rows, cols, size, ScatterOptions())
        for i, a in enumerate(slots):
            for b in slots[i + 1 :]:
                assert not rects_overlap(a, b, size)

    @pytest.mark.parametrize("rows,cols", [(2, 2), (3, 3), (6, 4)])
    def test_perimeter_slots_stay_off_the_board(self, rows: int, cols: int) -> None:
        size = 100.0
        width, height = cols * size, rows * size
        for x, y in perimeter_slots(rows, cols, size, ScatterOptions()):
            inside = x < width and x + size > 0 and y < height and y + size > 0
            assert not inside

    def test_perimeter_slots_within_canvas(self) -> None:
        size = 100.0
        options = ScatterOptions(band_rows=2, gap_ratio=0.1)
        margin = 2 * size * 1.1
        for x, y in perimeter_slots(3, 3, size, options):
            assert x >= -margin - 1e-9
            assert y >= -margin - 1e-9
            assert x + size <= 3 * size + margin + 1e-9
            assert y + size <= 3 * size + margin + 1e-9

    def test_one_position_per_piece(self) -> None:
        plan = plan_board(3, 3, 100.0, seed=5)
        positions = [p.position for p in plan.pieces]
        assert len(set(positions)) == 9
        slots = set(perimeter_slots(3, 3, 100.0, ScatterOptions()))
        assert set(positions) <= slots

    def test_shortfall_falls_back_to_random_positions(self, caplog: pytest.LogCaptureFixture) -> None:
        size = 100.0
        options = ScatterOptions(band_rows=1, gap_ratio=0.1)
        slots = perimeter_slots(10, 10, size, options)
        assert len(slots) < 100

        with caplog.at_level(logging.WARNING, logger="jigsaw_shapes.layout"):
            positions = scatter_positions(10, 10, size, random.Random(3), options)

        assert len(positions) == 100
        assert "fallback" in caplog.text
        margin = size * 1.1
        for x, y in positions:
            assert -margin - 1e-9 <= x <= 10 * size + margin - size + 1e-9
            assert -margin - 1e-9 <= y <= 10 * size + margin - size + 1e-9

    def test_scatter_is_shuffled(self) -> None:
        a = scatter_positions(4, 4, 100.0, random.Random(1))
        b = scatter_positions(4, 4, 100.0, random.Random(2))
        assert a != b
