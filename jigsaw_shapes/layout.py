"""Board layout: border lattices, per-cell sides, scatter and target positions."""

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .models import PieceSides, Point, SideKind, SideSpec

logger = logging.getLogger(__name__)


class BoardConfigError(ValueError):
    """Raised when board dimensions cannot produce a valid piece set."""


@dataclass(frozen=True)
class Border:
    """One slot of a border lattice.

    ``kind`` is the kind authored for the owning side, which is the cell below
    a horizontal border or the cell to the left of a vertical border.
    """

    kind: SideKind
    seed: int = 0

    @property
    def is_flat(self) -> bool:
        return self.kind is SideKind.FLAT


FLAT_BORDER = Border(SideKind.FLAT, 0)

Lattice = List[List[Border]]


@dataclass(frozen=True)
class ScatterOptions:
    """Controls for the initial scattered placement."""

    # Number of parallel slot rows on each side of the board
    band_rows: int = 2

    # Gap between neighbouring slots (relative to cell size)
    gap_ratio: float = 0.1


@dataclass(frozen=True)
class PiecePlan:
    """Everything the planner decides about one cell."""

    id: int
    row: int
    col: int
    sides: PieceSides
    position: Point
    target: Point

    @property
    def kinds(self) -> Tuple[SideKind, SideKind, SideKind, SideKind]:
        return self.sides.kinds


@dataclass(frozen=True)
class BoardPlan:
    """Full layout of a board."""

    rows: int
    cols: int
    cell_size: float
    vertical: Tuple[Tuple[Border, ...], ...]
    horizontal: Tuple[Tuple[Border, ...], ...]
    pieces: Tuple[PiecePlan, ...]

    @property
    def width(self) -> float:
        return self.cols * self.cell_size

    @property
    def height(self) -> float:
        return self.rows * self.cell_size

    def piece_at(self, row: int, col: int) -> PiecePlan:
        """Return the plan of the cell at (row, col)."""
        return self.pieces[row * self.cols + col]


def validate_dimensions(rows: int, cols: int, cell_size: float) -> None:
    """Reject board dimensions before any layout work happens.

    Raises:
        BoardConfigError: If rows, cols or cell_size is not positive.
    """
    for name, value in (("rows", rows), ("cols", cols)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise BoardConfigError(f"{name} must be an integer, got {value!r}")
        if value <= 0:
            raise BoardConfigError(f"{name} must be positive, got {value}")
    if not cell_size > 0:
        raise BoardConfigError(f"cell_size must be positive, got {cell_size}")


def random_kind(rng: random.Random) -> SideKind:
    """Pick Tab or Slot uniformly."""
    return SideKind.TAB if rng.random() < 0.5 else SideKind.SLOT


def generate_border_lattices(rows: int, cols: int, rng: random.Random) -> Tuple[Lattice, Lattice]:
    """Generate the vertical and horizontal border lattices.

    The vertical lattice has ``rows x (cols + 1)`` slots and the horizontal one
    ``(rows + 1) x cols``. Only interior slots get a kind and a seed; seeds are
    unique across both lattices and start at 1.

    Returns:
        Tuple of (vertical, horizontal) lattices.
    """
    next_seed = 1
    vertical: Lattice = [[FLAT_BORDER] * (cols + 1) for _ in range(rows)]
    horizontal: Lattice = [[FLAT_BORDER] * cols for _ in range(rows + 1)]

    for r in range(rows):
        for c in range(1, cols):
            vertical[r][c] = Border(random_kind(rng), next_seed)
            next_seed += 1

    for r in range(1, rows):
        for c in range(cols):
            horizontal[r][c] = Border(random_kind(rng), next_seed)
            next_seed += 1

    return vertical, horizontal


def owned_side(border: Border) -> SideSpec:
    """Side spec for the cell that owns a border (authored kind, forward)."""
    if border.is_flat:
        return SideSpec.flat()
    return SideSpec(border.kind, border.seed, reversed=False)


def adjoining_side(border: Border) -> SideSpec:
    """Side spec for the cell across the border (inverse kind, retraced)."""
    if border.is_flat:
        return SideSpec.flat()
    return SideSpec(border.kind.inverse(), border.seed, reversed=True)


def resolve_piece_sides(vertical: Lattice, horizontal: Lattice, row: int, col: int) -> PieceSides:
    """Resolve the four sides of cell (row, col) from the lattices.

    Outer boundary sides are forced flat regardless of lattice contents.
    """
    rows = len(vertical)
    cols = len(horizontal[0])

    top = SideSpec.flat() if row == 0 else adjoining_side(horizontal[row][col])
    left = SideSpec.flat() if col == 0 else adjoining_side(vertical[row][col])
    bottom = SideSpec.flat() if row == rows - 1 else owned_side(horizontal[row + 1][col])
    right = SideSpec.flat() if col == cols - 1 else owned_side(vertical[row][col + 1])
    return PieceSides(top=top, right=right, bottom=bottom, left=left)


def target_position(row: int, col: int, cell_size: float) -> Point:
    """Lattice position a cell must end up on."""
    return (col * cell_size, row * cell_size)


def scatter_margin(cell_size: float, options: ScatterOptions) -> float:
    """Width of the scatter band around the board."""
    return options.band_rows * cell_size * (1 + options.gap_ratio)


def perimeter_slots(rows: int, cols: int, cell_size: float, options: ScatterOptions) -> List[Point]:
    """Candidate slot positions in a band around the board.

    Top and bottom bands span the whole canvas width, left and right bands
    span the board height, so no two slots overlap each other or the board.
    """
    gap = cell_size * options.gap_ratio
    step = cell_size + gap
    margin = scatter_margin(cell_size, options)
    width = cols * cell_size
    height = rows * cell_size

    slots: List[Point] = []
    for k in range(options.band_rows):
        top_y = -(k + 1) * step
        bottom_y = height + gap + k * step
        x = -margin
        while x + cell_size <= width + margin + 1e-9:
            slots.append((x, top_y))
            slots.append((x, bottom_y))
            x += step

        left_x = -(k + 1) * step
        right_x = width + gap + k * step
        y = 0.0
        while y + cell_size <= height + 1e-9:
            slots.append((left_x, y))
            slots.append((right_x, y))
            y += step

    return slots


def scatter_positions(
    rows: int,
    cols: int,
    cell_size: float,
    rng: random.Random,
    options: ScatterOptions = ScatterOptions(),
) -> List[Point]:
    """Assign one shuffled scatter position per piece.

    When the perimeter band is too small, the remaining positions are sampled
    uniformly over the canvas, never below its minimum corner.
    """
    count = rows * cols
    slots = perimeter_slots(rows, cols, cell_size, options)
    rng.shuffle(slots)

    if len(slots) < count:
        shortfall = count - len(slots)
        logger.warning(
            "Scatter band holds %d slots for %d pieces; sampling %d fallback positions",
            len(slots),
            count,
            shortfall,
        )
        margin = scatter_margin(cell_size, options)
        max_x = cols * cell_size + margin - cell_size
        max_y = rows * cell_size + margin - cell_size
        for _ in range(shortfall):
            slots.append((rng.uniform(-margin, max_x), rng.uniform(-margin, max_y)))

    return slots[:count]


def plan_board(
    rows: int,
    cols: int,
    cell_size: float,
    seed: Optional[int] = None,
    scatter: ScatterOptions = ScatterOptions(),
) -> BoardPlan:
    """Plan a full board.

    Args:
        rows: Number of rows in the grid.
        cols: Number of columns in the grid.
        cell_size: Side length of one cell.
        seed: Random seed for reproducible kinds and scatter.
        scatter: Scatter band options.

    Returns:
        The board plan with one PiecePlan per cell in row-major order.

    Raises:
        BoardConfigError: If the dimensions are not positive.
    """
    validate_dimensions(rows, cols, cell_size)
    rng = random.Random(seed)

    vertical, horizontal = generate_border_lattices(rows, cols, rng)
    positions = scatter_positions(rows, cols, cell_size, rng, scatter)

    pieces = []
    for r in range(rows):
        for c in range(cols):
            piece_id = r * cols + c
            pieces.append(
                PiecePlan(
                    id=piece_id,
                    row=r,
                    col=c,
                    sides=resolve_piece_sides(vertical, horizontal, r, c),
                    position=positions[piece_id],
                    target=target_position(r, c, cell_size),
                )
            )

    logger.debug("Planned %dx%d board with cell size %s", rows, cols, cell_size)
    return BoardPlan(
        rows=rows,
        cols=cols,
        cell_size=float(cell_size),
        vertical=tuple(tuple(row) for row in vertical),
        horizontal=tuple(tuple(row) for row in horizontal),
        pieces=tuple(pieces),
    )
