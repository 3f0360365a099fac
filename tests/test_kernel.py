"""
Unit tests for the curve representation in trajspline.kernel.bspline.
"""

import numpy as np
import pytest

from trajspline.kernel.bspline import (
    CurveData,
    CurveKind,
    basis_matrix,
    build_curve,
    clamp,
    concatenate,
    elevate_degree,
    reverse,
    translate,
)

S = np.sqrt(2.0) / 2.0


@pytest.fixture
def parabola_curve():
    return CurveData([0, 0, 0, 1, 1, 1], [[0.0, 0.0], [0.5, 0.0], [1.0, 1.0]], 3, CurveKind.POLYNOMIAL_BEZIER)


@pytest.fixture
def circle_curve():
    return CurveData(
        [0, 0, 0, 1, 1, 1],
        [[1.0, 0.0, 1.0], [S, S, S], [0.0, 1.0, 1.0]],
        3,
        CurveKind.RATIONAL_BEZIER,
    )


class TestCurveData:
    """Tests for CurveData validation and evaluation."""

    def test_properties(self, circle_curve):
        assert circle_curve.degree == 2
        assert circle_curve.point_count == 3
        assert circle_curve.is_rational
        assert circle_curve.stride == 3
        assert circle_curve.dimension == 2
        assert circle_curve.start_param == 0.0
        assert circle_curve.end_param == 1.0
        assert circle_curve.is_clamped

    def test_wrong_knot_count_rejected(self):
        with pytest.raises(ValueError, match="knots"):
            CurveData([0, 0, 1, 1, 1], [[0.0, 0.0], [1.0, 0.0], [2.0, 0.0]], 3)

    def test_decreasing_knots_rejected(self):
        with pytest.raises(ValueError, match="non-decreasing"):
            CurveData([0, 0, 1, 0.5, 1, 1], [[0.0, 0.0], [1.0, 0.0], [2.0, 0.0]], 3)

    def test_nonpositive_weight_rejected(self):
        with pytest.raises(ValueError, match="weights"):
            CurveData([0, 0, 1, 1], [[0.0, 0.0, 1.0], [1.0, 0.0, 0.0]], 2, CurveKind.RATIONAL_BSPLINE)

    def test_derivative_shapes(self, parabola_curve):
        assert parabola_curve.derivatives(0.5, 2).shape == (3, 2)
        assert parabola_curve.derivatives(np.linspace(0, 1, 7), 3).shape == (4, 7, 2)

    def test_polynomial_derivatives(self, parabola_curve):
        d = parabola_curve.derivatives(0.5, 3)
        np.testing.assert_allclose(d[0], [0.5, 0.25], atol=1e-12)
        np.testing.assert_allclose(d[1], [1.0, 1.0], atol=1e-12)
        np.testing.assert_allclose(d[2], [0.0, 2.0], atol=1e-12)
        np.testing.assert_allclose(d[3], [0.0, 0.0], atol=1e-12)

    def test_rational_points_on_circle(self, circle_curve):
        u = np.linspace(0, 1, 21)
        d = circle_curve.derivatives(u, 1)
        np.testing.assert_allclose(np.linalg.norm(d[0], axis=1), 1.0, atol=1e-12)
        # position and velocity are perpendicular on a circle centred at the origin
        np.testing.assert_allclose(np.sum(d[0] * d[1], axis=1), 0.0, atol=1e-12)

    def test_control_points_projected(self, circle_curve):
        np.testing.assert_allclose(circle_curve.control_points(), [[1, 0], [1, 1], [0, 1]], atol=1e-12)

    def test_copy_is_independent(self, parabola_curve):
        other = parabola_curve.copy()
        other.coefficients[0, 0] = 5.0
        assert parabola_curve.coefficients[0, 0] == 0.0


class TestBasis:
    def test_partition_of_unity(self):
        knots = np.array([0, 0, 0, 0, 1, 2, 3, 3, 3, 3], dtype=float)
        matrix = basis_matrix(knots, 3, np.linspace(0, 3, 31))
        np.testing.assert_allclose(matrix.sum(axis=1), 1.0, atol=1e-12)


class TestBuildCurve:
    def test_order_inferred(self):
        result = build_curve([0, 0, 1, 0, 2, 1], [0, 0, 0, 1, 1, 1], 2, CurveKind.POLYNOMIAL_BSPLINE)
        assert result["status"] == 0
        assert result["curve"].order == 3

    def test_stride_mismatch(self):
        result = build_curve([0, 0, 1, 0, 2], [0, 0, 1, 1], 2, CurveKind.POLYNOMIAL_BSPLINE)
        assert result["status"] == -1

    def test_invalid_curve(self):
        result = build_curve([0, 0, 1, 0, 2, 1], [0, 0, 1], 2, CurveKind.POLYNOMIAL_BSPLINE)
        assert result["status"] == -2
        assert "message" in result


class TestTransforms:
    """Tests for reversal, translation, clamping, elevation and concatenation."""

    def test_reverse(self, circle_curve):
        backwards = reverse(circle_curve)
        u = np.linspace(0, 1, 11)
        np.testing.assert_allclose(backwards.point(1.0 - u), circle_curve.point(u), atol=1e-12)

    def test_translate_rational(self, circle_curve):
        moved = translate(circle_curve, [2.0, -1.0])
        u = np.linspace(0, 1, 11)
        np.testing.assert_allclose(moved.point(u), circle_curve.point(u) + [2.0, -1.0], atol=1e-12)

    def test_clamp_preserves_shape(self):
        curve = CurveData(np.arange(8.0), [[0, 0], [1, 2], [3, 2], [4, 0]], 4)
        assert not curve.is_clamped
        clamped = clamp(curve)
        assert clamped.is_clamped
        u = np.linspace(3, 4, 11)
        np.testing.assert_allclose(clamped.point(u), curve.point(u), atol=1e-10)

    def test_elevate_degree(self, parabola_curve):
        elevated = elevate_degree(parabola_curve, 4)
        assert elevated.degree == 4
        u = np.linspace(0, 1, 11)
        np.testing.assert_allclose(elevated.point(u), parabola_curve.point(u), atol=1e-10)

    def test_elevate_rational(self, circle_curve):
        elevated = elevate_degree(circle_curve, 3)
        u = np.linspace(0, 1, 11)
        np.testing.assert_allclose(elevated.point(u), circle_curve.point(u), atol=1e-10)

    def test_cannot_lower_degree(self, parabola_curve):
        with pytest.raises(ValueError):
            elevate_degree(parabola_curve, 1)

    def test_concatenate(self, parabola_curve):
        line = CurveData([0, 0, 1, 1], [[0.0, 0.0], [1.0, 0.0]], 2)
        result = concatenate(line, parabola_curve)
        assert result["status"] == 0
        joined = result["curve"]
        assert joined.degree == 2
        assert joined.start_param == 0.0
        assert joined.end_param == pytest.approx(2.0)
        np.testing.assert_allclose(joined.point(0.5), [0.5, 0.0], atol=1e-10)
        # second curve translated so it starts at (1, 0)
        np.testing.assert_allclose(joined.point(1.5), [1.5, 0.25], atol=1e-10)
        np.testing.assert_allclose(joined.point(2.0), [2.0, 1.0], atol=1e-10)

    def test_concatenate_rational_with_polynomial(self, circle_curve, parabola_curve):
        result = concatenate(parabola_curve, circle_curve)
        assert result["status"] == 0
        joined = result["curve"]
        assert joined.is_rational
        # the arc keeps unit radius around its translated centre (0, 1)
        u = np.linspace(1.0, 2.0, 11)
        radius = np.linalg.norm(joined.point(u) - [0.0, 1.0], axis=1)
        np.testing.assert_allclose(radius, 1.0, atol=1e-10)

    def test_concatenate_dimension_mismatch(self, parabola_curve):
        line = CurveData([0, 0, 1, 1], [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]], 2)
        assert concatenate(line, parabola_curve)["status"] == -1
