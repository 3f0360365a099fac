"""Curve representation, fitting and search routines behind the spline engine."""

from .bspline import (
    CurveData,
    CurveKind,
    build_curve,
    clamp,
    concatenate,
    elevate_degree,
    recollocate,
    reverse,
    translate,
)
from .differential import curvature, frenet_frame, normalize_angle, variation_of_curvature
from .fitting import arc_length, chord_length_parameters, interpolate_points, simplify_curve
from .search import closest_points, intersect, local_closest_point, sample_parameters

__all__ = [
    "CurveData",
    "CurveKind",
    "build_curve",
    "clamp",
    "concatenate",
    "elevate_degree",
    "recollocate",
    "reverse",
    "translate",
    "curvature",
    "frenet_frame",
    "normalize_angle",
    "variation_of_curvature",
    "arc_length",
    "chord_length_parameters",
    "interpolate_points",
    "simplify_curve",
    "closest_points",
    "intersect",
    "local_closest_point",
    "sample_parameters",
]
