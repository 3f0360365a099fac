"""
Pytest configuration and shared fixtures for trajspline tests.
"""

import numpy as np
import pytest

from trajspline import CurveKind, Spline


@pytest.fixture
def straight_line():
    """Order-2 line from (0,0,0) to (10,0,0); chord-length parameter equals x."""
    spline = Spline(dimension=3, curve_order=2, geometric_resolution=0.01)
    spline.interpolate([[0.0, 0.0, 0.0], [10.0, 0.0, 0.0]])
    return spline


@pytest.fixture
def parabola():
    """Quadratic Bezier with C(u) = (u, u^2) on [0, 1]."""
    spline = Spline(dimension=2, curve_order=3, geometric_resolution=1e-3)
    spline.reset([0.0, 0.0, 0.5, 0.0, 1.0, 1.0], [0, 0, 0, 1, 1, 1], CurveKind.POLYNOMIAL_BEZIER)
    return spline


@pytest.fixture
def valley():
    """Quadratic Bezier tracing y = x^2 for x in [-1, 1] (x = 2u - 1)."""
    spline = Spline(dimension=2, curve_order=3, geometric_resolution=1e-3)
    spline.reset([-1.0, 1.0, 0.0, -1.0, 1.0, 1.0], [0, 0, 0, 1, 1, 1], CurveKind.POLYNOMIAL_BEZIER)
    return spline


@pytest.fixture
def quarter_circle():
    """Exact unit quarter circle from (1,0) to (0,1) as a rational Bezier."""
    s = np.sqrt(2.0) / 2.0
    spline = Spline(dimension=2, curve_order=3, geometric_resolution=1e-3)
    spline.reset([1.0, 0.0, 1.0, s, s, s, 0.0, 1.0, 1.0], [0, 0, 0, 1, 1, 1], CurveKind.RATIONAL_BEZIER)
    return spline


@pytest.fixture
def s_curve_waypoints():
    """Planar S-shaped waypoints in 3-D."""
    return np.array([
        [0.0, 0.0, 0.0],
        [2.0, 1.0, 0.0],
        [4.0, 0.0, 0.0],
        [6.0, -1.0, 0.0],
        [8.0, 0.0, 0.0],
        [10.0, 1.0, 0.0],
        [12.0, 0.0, 0.0],
    ])


@pytest.fixture
def s_curve(s_curve_waypoints):
    spline = Spline(dimension=3, curve_order=4, geometric_resolution=0.01)
    spline.interpolate(s_curve_waypoints)
    return spline
