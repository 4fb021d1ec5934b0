"""Compose the closed outline of one piece from its four sides."""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .edge_profile import EdgeProfileCache
from .models import BezierCurve, PieceSides, Point, SideKind, SideSpec

DEFAULT_CELL_SIZE = 100.0

SideCurves = Tuple[BezierCurve, ...]


def side_frames(size: float) -> List[Tuple[Point, Point]]:
    """Start point and unit direction of each side, clockwise from the top-left corner.

    Coordinates are screen-like (y grows downward), so the left-hand normal of
    every direction points into the cell body.
    """
    return [
        ((0.0, 0.0), (1.0, 0.0)),  # Top: left to right
        ((size, 0.0), (0.0, 1.0)),  # Right: top to bottom
        ((size, size), (-1.0, 0.0)),  # Bottom: right to left
        ((0.0, size), (0.0, -1.0)),  # Left: bottom to top
    ]


def polarity(kind: SideKind) -> int:
    """Sign applied to the base profile's y for a side traced clockwise.

    Tabs protrude away from the cell body, slots cut into it.
    """
    if kind is SideKind.TAB:
        return -1
    if kind is SideKind.SLOT:
        return 1
    raise ValueError(f"Flat sides have no profile polarity: {kind}")


def flip_curves(curves: Sequence[BezierCurve]) -> SideCurves:
    """Mirror every curve across the local x axis."""
    return tuple(curve.flipped() for curve in curves)


def reverse_curves(curves: Sequence[BezierCurve], length: float) -> SideCurves:
    """Retrace a local profile from its far end.

    Segment order is reversed and each segment is reflected about the side
    midpoint with its control pair swapped.
    """
    return tuple(curve.retraced(length) for curve in reversed(curves))


def transform_curves(curves: Sequence[BezierCurve], start: Point, direction: Point) -> SideCurves:
    """Rotate and translate local curves onto a side of the cell.

    Args:
        curves: Curves in the side's local frame (x along the side).
        start: Global start point of the side.
        direction: Unit vector along the side.

    Returns:
        The curves in the cell's frame.
    """
    sx, sy = start
    ux, uy = direction
    nx, ny = -uy, ux

    def to_global(point: Point) -> Point:
        lx, ly = point
        return (sx + lx * ux + ly * nx, sy + lx * uy + ly * ny)

    return tuple(BezierCurve(*(to_global(p) for p in curve.points)) for curve in curves)


def _format_number(value: float, precision: int) -> str:
    text = f"{value:.{precision}f}"
    if float(text) == 0:
        text = f"{0.0:.{precision}f}"
    return text


@dataclass(frozen=True)
class PieceOutline:
    """A closed piece outline in the cell's local frame.

    ``sides`` holds one tuple of curves per side in clockwise order (top,
    right, bottom, left). Flat sides are a single curve with its controls on
    the chord.
    """

    kinds: Tuple[SideKind, SideKind, SideKind, SideKind]
    sides: Tuple[SideCurves, SideCurves, SideCurves, SideCurves]
    size: float = DEFAULT_CELL_SIZE

    @property
    def curves(self) -> List[BezierCurve]:
        """All curves of the outline in drawing order."""
        return [curve for side in self.sides for curve in side]

    def to_svg_path(self, precision: int = 1) -> str:
        """Render the outline as SVG path data starting at the top-left corner."""

        def fmt(point: Point) -> str:
            return f"{_format_number(point[0], precision)} {_format_number(point[1], precision)}"

        parts = ["M " + fmt(self.sides[0][0].p0)]
        for kind, curves in zip(self.kinds, self.sides):
            if kind is SideKind.FLAT:
                parts.append("L " + fmt(curves[-1].p3))
                continue
            for curve in curves:
                parts.append(f"C {fmt(curve.p1)}, {fmt(curve.p2)}, {fmt(curve.p3)}")
        parts.append("Z")
        return " ".join(parts)

    def sample(self, points_per_curve: int = 20) -> np.ndarray:
        """Sample the outline into a closed polygon of shape (N, 2)."""
        points = []
        for curve in self.curves:
            # Drop the last point of each curve to avoid duplicating the next start
            points.append(curve.get_points(points_per_curve)[:-1])
        polygon = np.concatenate(points)
        return np.vstack([polygon, polygon[:1]])

    def bounds(self, points_per_curve: int = 20) -> Tuple[float, float, float, float]:
        """Bounding box (min_x, min_y, max_x, max_y) including tab overhang."""
        polygon = self.sample(points_per_curve)
        min_x, min_y = polygon.min(axis=0)
        max_x, max_y = polygon.max(axis=0)
        return (float(min_x), float(min_y), float(max_x), float(max_y))


class OutlineBuilder:
    """Build piece outlines from side specs, sharing one profile cache."""

    def __init__(self, cell_size: float = DEFAULT_CELL_SIZE, cache: Optional[EdgeProfileCache] = None):
        """Initialize the builder.

        Args:
            cell_size: Side length of the canonical cell frame.
            cache: Profile cache to use. A fresh one is created if omitted.
        """
        if cell_size <= 0:
            raise ValueError(f"Cell size must be positive, got {cell_size}")
        self.cell_size = float(cell_size)
        self.cache = cache if cache is not None else EdgeProfileCache()

    def side_curves(self, side: SideSpec, start: Point, direction: Point) -> SideCurves:
        """Curves for one side, already placed in the cell frame."""
        length = self.cell_size
        if side.kind is SideKind.FLAT:
            end = (start[0] + direction[0] * length, start[1] + direction[1] * length)
            return (BezierCurve(start, start, end, end),)

        local: SideCurves = self.cache.get(side.seed, length)
        if polarity(side.kind) < 0:
            local = flip_curves(local)
        if side.reversed:
            local = reverse_curves(local, length)
        return transform_curves(local, start, direction)

    def build(self, sides: PieceSides) -> PieceOutline:
        """Compose the closed outline of a cell, clockwise from the top-left corner."""
        placed = tuple(
            self.side_curves(side, start, direction)
            for side, (start, direction) in zip(sides, side_frames(self.cell_size))
        )
        return PieceOutline(kinds=sides.kinds, sides=placed, size=self.cell_size)  # type: ignore[arg-type]
