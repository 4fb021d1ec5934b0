"""Data models for jigsaw piece outlines."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Tuple

import numpy as np

Point = Tuple[float, float]


class SideKind(Enum):
    """Kind of one side of a grid cell."""

    FLAT = "flat"
    TAB = "tab"
    SLOT = "slot"

    def inverse(self) -> "SideKind":
        """Return the kind seen from the other side of the same border."""
        if self is SideKind.TAB:
            return SideKind.SLOT
        if self is SideKind.SLOT:
            return SideKind.TAB
        return SideKind.FLAT


@dataclass(frozen=True)
class BezierCurve:
    """A cubic Bezier curve defined by 4 control points."""

    p0: Point  # Start point
    p1: Point  # Control point 1
    p2: Point  # Control point 2
    p3: Point  # End point

    def evaluate(self, t: float) -> Point:
        """Evaluate the curve at parameter t (0 to 1)."""
        t2 = t * t
        t3 = t2 * t
        mt = 1 - t
        mt2 = mt * mt
        mt3 = mt2 * mt

        x = mt3 * self.p0[0] + 3 * mt2 * t * self.p1[0] + 3 * mt * t2 * self.p2[0] + t3 * self.p3[0]
        y = mt3 * self.p0[1] + 3 * mt2 * t * self.p1[1] + 3 * mt * t2 * self.p2[1] + t3 * self.p3[1]
        return (x, y)

    def get_points(self, num_points: int = 50) -> np.ndarray:
        """Generate points along the curve."""
        t_values = np.linspace(0, 1, num_points)
        points = [self.evaluate(t) for t in t_values]
        return np.array(points)

    def flipped(self) -> "BezierCurve":
        """Mirror the curve across the local x axis (y -> -y)."""
        p0, p1, p2, p3 = ((x, -y) for x, y in self.points)
        return BezierCurve(p0, p1, p2, p3)

    def retraced(self, length: float) -> "BezierCurve":
        """Return the same local curve traced from the other end.

        Points are reflected about the side midpoint (x -> length - x) and the
        control pair swaps roles, so the result is an exact retrace once the
        side is laid out in the opposite direction.
        """
        p3, p2, p1, p0 = ((length - x, y) for x, y in self.points)
        return BezierCurve(p0, p1, p2, p3)

    @property
    def points(self) -> Tuple[Point, Point, Point, Point]:
        """All four control points in order."""
        return (self.p0, self.p1, self.p2, self.p3)


@dataclass(frozen=True)
class SideSpec:
    """One side of a cell: its kind, shared border seed and traversal direction."""

    kind: SideKind
    seed: int = 0
    reversed: bool = False

    @classmethod
    def flat(cls) -> "SideSpec":
        """Straight boundary side."""
        return cls(SideKind.FLAT, 0, False)


@dataclass(frozen=True)
class PieceSides:
    """The four sides of a cell in clockwise order starting at the top."""

    top: SideSpec
    right: SideSpec
    bottom: SideSpec
    left: SideSpec

    def __iter__(self) -> Iterator[SideSpec]:
        return iter((self.top, self.right, self.bottom, self.left))

    @property
    def kinds(self) -> Tuple[SideKind, SideKind, SideKind, SideKind]:
        """Resolved kinds as (top, right, bottom, left)."""
        return (self.top.kind, self.right.kind, self.bottom.kind, self.left.kind)
