"""Seeded tab/slot edge profiles.

A profile is the shape of one interior border in its own local frame: it runs
from ``(0, 0)`` to ``(length, 0)`` and always bulges toward ``+y``. Both cells
that share a border ask for the profile of the same seed, so they get exactly
the same control points and only differ in how they flip and lay it out.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .models import BezierCurve

logger = logging.getLogger(__name__)

EdgeProfile = Tuple[BezierCurve, BezierCurve, BezierCurve, BezierCurve]

# Draw offsets, one independent scalar per shape control
HEIGHT_OFFSET = 1
NECK_OFFSET = 2
HEAD_OFFSET = 3
SKEW_OFFSET = 4

# Absolute bend of the neck control handles, in local units
NECK_HANDLE = 2.0


@dataclass(frozen=True)
class ProfileParameters:
    """Shape controls of a tab profile (fractions of the side length unless noted)."""

    # Protrusion height
    tab_height: float = 0.28

    # Width of the neck where the tab leaves the edge
    neck_width: float = 0.22

    # Width of the head (bulb)
    head_width: float = 0.35

    # Maximum per-parameter perturbation drawn from the seed
    jitter: float = 0.04

    # Maximum sideways shift of the head, in local units
    skew_limit: float = 2.0


DEFAULT_PARAMETERS = ProfileParameters()


def seed_random(seed: int, offset: int) -> float:
    """Deterministic float in [0, 1) derived from a seed and a draw offset."""
    x = math.sin(seed * 999 + offset) * 10000
    return x - math.floor(x)


def seed_range(seed: int, offset: int) -> float:
    """Deterministic float in [-1, 1) derived from a seed and a draw offset."""
    return seed_random(seed, offset) * 2 - 1


def generate_edge_profile(
    seed: int,
    length: float,
    params: ProfileParameters = DEFAULT_PARAMETERS,
) -> EdgeProfile:
    """Generate the base profile of a border using 4 cubic Bezier curves.

    The curves trace shoulder-out to the neck, the left half of the head, the
    right half of the head, and the neck back down to the far shoulder.

    Args:
        seed: Border identity. Must be non-zero; seed 0 marks flat sides.
        length: Side length in local units. Must be positive.
        params: Shape controls.

    Returns:
        Four BezierCurve objects from (0, 0) to (length, 0), bulging toward +y.

    Raises:
        ValueError: If the seed is 0 or the length is not positive.
    """
    if seed == 0:
        raise ValueError("Seed 0 is reserved for flat sides")
    if length <= 0:
        raise ValueError(f"Side length must be positive, got {length}")

    height = length * (params.tab_height + seed_range(seed, HEIGHT_OFFSET) * params.jitter)
    neck_w = length * (params.neck_width + seed_range(seed, NECK_OFFSET) * params.jitter)
    head_w = length * (params.head_width + seed_range(seed, HEAD_OFFSET) * params.jitter)
    skew = seed_range(seed, SKEW_OFFSET) * params.skew_limit

    mid = length / 2
    neck_left = mid - neck_w / 2
    neck_right = mid + neck_w / 2
    head_x = mid + skew

    shoulder_y = height * 0.15
    neck_y = height * 0.22

    # Curve 1: corner out along the shoulder and into the left neck
    c1 = BezierCurve(
        (0.0, 0.0),
        (length * 0.2, 0.0),
        (neck_left - NECK_HANDLE, shoulder_y),
        (neck_left, neck_y),
    )
    # Curve 2: left neck up and over to the top of the head
    c2 = BezierCurve(
        c1.p3,
        (neck_left - NECK_HANDLE, height * 0.4),
        (head_x - head_w * 0.8, height),
        (head_x, height),
    )
    # Curve 3: top of the head down to the right neck
    c3 = BezierCurve(
        c2.p3,
        (head_x + head_w * 0.8, height),
        (neck_right + NECK_HANDLE, height * 0.4),
        (neck_right, neck_y),
    )
    # Curve 4: right neck out along the shoulder to the far corner
    c4 = BezierCurve(
        c3.p3,
        (neck_right + NECK_HANDLE, shoulder_y),
        (length * 0.8, 0.0),
        (float(length), 0.0),
    )
    return (c1, c2, c3, c4)


class EdgeProfileCache:
    """Memoisation table of base profiles keyed by (seed, length).

    Entries are immutable tuples of frozen curves, so any number of sides can
    share one entry and transform their own copies of it.
    """

    def __init__(self, params: ProfileParameters = DEFAULT_PARAMETERS):
        """Initialize an empty cache.

        Args:
            params: Shape controls used for every profile in this cache.
        """
        self.params = params
        self._profiles: Dict[Tuple[int, float], EdgeProfile] = {}
        self.hits = 0
        self.misses = 0

    def get(self, seed: int, length: float) -> EdgeProfile:
        """Return the base profile for a border, generating it on first use."""
        key = (seed, float(length))
        profile: Optional[EdgeProfile] = self._profiles.get(key)
        if profile is not None:
            self.hits += 1
            return profile

        self.misses += 1
        logger.debug("Generating edge profile for seed=%d length=%s", seed, length)
        profile = generate_edge_profile(seed, length, self.params)
        self._profiles[key] = profile
        return profile

    def clear(self) -> None:
        """Drop every cached profile."""
        self._profiles.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._profiles)

    def __contains__(self, key: object) -> bool:
        return key in self._profiles
