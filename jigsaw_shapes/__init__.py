"""Jigsaw shapes - seeded piece outlines and board layouts.

This package provides tools for generating interlocking jigsaw piece outlines
from cubic Bezier edge profiles and for planning the board they are cut from.
"""

from .edge_profile import (
    DEFAULT_PARAMETERS,
    EdgeProfile,
    EdgeProfileCache,
    ProfileParameters,
    generate_edge_profile,
    seed_random,
    seed_range,
)
from .layout import (
    BoardConfigError,
    BoardPlan,
    Border,
    PiecePlan,
    ScatterOptions,
    generate_border_lattices,
    perimeter_slots,
    plan_board,
    resolve_piece_sides,
    scatter_positions,
    target_position,
    validate_dimensions,
)
from .models import BezierCurve, PieceSides, SideKind, SideSpec
from .outline import (
    DEFAULT_CELL_SIZE,
    OutlineBuilder,
    PieceOutline,
    flip_curves,
    reverse_curves,
    side_frames,
    transform_curves,
)

__all__ = [
    # Models
    "BezierCurve",
    "SideKind",
    "SideSpec",
    "PieceSides",
    # Edge profiles
    "DEFAULT_PARAMETERS",
    "EdgeProfile",
    "EdgeProfileCache",
    "ProfileParameters",
    "generate_edge_profile",
    "seed_random",
    "seed_range",
    # Outlines
    "DEFAULT_CELL_SIZE",
    "OutlineBuilder",
    "PieceOutline",
    "flip_curves",
    "reverse_curves",
    "side_frames",
    "transform_curves",
    # Layout
    "BoardConfigError",
    "BoardPlan",
    "Border",
    "PiecePlan",
    "ScatterOptions",
    "generate_border_lattices",
    "perimeter_slots",
    "plan_board",
    "resolve_piece_sides",
    "scatter_positions",
    "target_position",
    "validate_dimensions",
]
