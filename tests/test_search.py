"""
Tests for closest-point and intersection searches, at the kernel level
(trajspline.kernel.search) and through the Spline engine.
"""

import numpy as np
import pytest

from trajspline import CurveKind, Spline, SplineConfig
from trajspline.errors import DimensionMismatchError, NumericalError
from trajspline.kernel.search import closest_points, intersect, local_closest_point, sample_parameters

# closest points of y = x^2 (x = 2u - 1) to (0, 1) are at x = +-1/sqrt(2)
VALLEY_MINIMA = [(1 - 1 / np.sqrt(2)) / 2, (1 + 1 / np.sqrt(2)) / 2]


def make_line(start, end, resolution=0.1):
    spline = Spline(dimension=len(start), curve_order=2, geometric_resolution=resolution)
    spline.interpolate([start, end])
    return spline


class TestSampleParameters:
    def test_covers_domain(self, straight_line):
        params = sample_parameters(straight_line._rep, 0.1)

        assert params[0] == 0.0
        assert params[-1] == 10.0
        assert np.all(np.diff(params) > 0)
        assert len(params) >= 101

    def test_sample_cap(self, straight_line):
        assert len(sample_parameters(straight_line._rep, 0.001, max_samples=50)) <= 50


class TestClosestPoints:
    """Tests for the global closest-point search."""

    def test_line_projection(self, straight_line):
        result = closest_points(straight_line._rep, [5.0, 1.0, 0.0], 0.01)

        assert result["status"] == 0
        assert result["points"] == [pytest.approx(5.0, abs=1e-8)]
        assert result["intervals"] == []

    def test_beyond_end(self, straight_line):
        points, intervals = straight_line.find_closest_points([12.0, 1.0, 0.0])
        assert points == [pytest.approx(10.0)]
        assert intervals == []

    def test_before_start(self, straight_line):
        points, _ = straight_line.find_closest_points([-3.0, 0.5, 0.0])
        assert points == [pytest.approx(0.0)]

    def test_two_interior_minima(self, valley):
        points, intervals = valley.find_closest_points([0.0, 1.0])

        np.testing.assert_allclose(points, VALLEY_MINIMA, atol=1e-8)
        assert intervals == []

    def test_two_endpoint_minima(self, valley):
        points, _ = valley.find_closest_points([0.0, 2.0])
        np.testing.assert_allclose(points, [0.0, 1.0], atol=1e-12)

    def test_circle_centre_gives_interval(self, quarter_circle):
        points, intervals = quarter_circle.find_closest_points([0.0, 0.0])

        assert points == []
        assert len(intervals) == 1
        assert intervals[0][0] == pytest.approx(0.0)
        assert intervals[0][1] == pytest.approx(1.0)

    def test_empty_and_singleton(self):
        spline = Spline(dimension=2)
        assert spline.find_closest_points([1.0, 1.0]) == ([0.0], [])
        spline.interpolate([[3.0, 3.0]])
        assert spline.find_closest_points([1.0, 1.0]) == ([0.0], [])

    def test_reference_dimension_checked(self, straight_line):
        with pytest.raises(DimensionMismatchError):
            straight_line.find_closest_points([1.0, 2.0])


class TestFindOneClosestPoint:
    def test_nearest_to_guess(self, valley):
        assert valley.find_one_closest_point([0.0, 1.0], 0.9) == pytest.approx(VALLEY_MINIMA[1], abs=1e-8)
        assert valley.find_one_closest_point([0.0, 1.0], 0.1) == pytest.approx(VALLEY_MINIMA[0], abs=1e-8)

    def test_tie_keeps_first_candidate(self, valley):
        assert valley.find_one_closest_point([0.0, 2.0], 0.5) == 0.0

    def test_guess_inside_interval_unchanged(self, quarter_circle):
        assert quarter_circle.find_one_closest_point([0.0, 0.0], 0.37) == 0.37

    def test_stationary_curve_is_one_interval(self):
        spline = Spline(dimension=2)
        spline.reset([1.0, 1.0, 1.0, 1.0], [0.0, 0.0, 1.0, 1.0], CurveKind.POLYNOMIAL_BSPLINE)

        points, intervals = spline.find_closest_points([0.0, 0.0])

        assert points == []
        assert intervals == [(0.0, 1.0)]
        assert spline.find_one_closest_point([0.0, 0.0], 0.5) == 0.5

    def test_empty_curve_returns_start(self):
        assert Spline(dimension=3).find_one_closest_point([1.0, 2.0, 3.0], 4.0) == 0.0


class TestLocalClosestPointSearch:
    """Tests for the bounded Newton refinement."""

    def test_kernel_converges(self, valley):
        result = local_closest_point(valley._rep, [0.0, 1.0], 1e-3, 0.9)

        assert result["status"] == 0
        assert result["param"] == pytest.approx(VALLEY_MINIMA[1], abs=1e-8)

    def test_zero_tolerance_converges(self, valley):
        result = local_closest_point(valley._rep, [0.0, 1.0], 0.0, 0.9)

        assert result["status"] == 0
        assert result["param"] == pytest.approx(VALLEY_MINIMA[1], abs=1e-8)

    def test_refines_within_bounds(self, valley):
        param = valley.local_closest_point_search([0.0, 1.0], 0.9, 0.5, 1.0)
        assert param == pytest.approx(VALLEY_MINIMA[1], abs=1e-8)

    def test_reversed_bounds(self, valley):
        param = valley.local_closest_point_search([0.0, 1.0], 0.9, 1.0, 0.5)
        assert param == pytest.approx(VALLEY_MINIMA[1], abs=1e-8)

    def test_result_clamped_to_bounds(self, valley):
        param = valley.local_closest_point_search([0.0, 1.0], 0.95, 0.9, 1.0)
        assert param == pytest.approx(0.9)

    def test_non_convergence_raises(self):
        config = SplineConfig(dimension=2, curve_order=3, geometric_resolution=1e-3, newton_iterations=1)
        spline = Spline.from_config(config)
        spline.reset([-1.0, 1.0, 0.0, -1.0, 1.0, 1.0], [0, 0, 0, 1, 1, 1], 3)

        with pytest.raises(NumericalError):
            spline.local_closest_point_search([0.0, 1.0], 0.6, 0.0, 1.0)

    def test_empty_curve_returns_start(self):
        assert Spline(dimension=2).local_closest_point_search([1.0, 1.0], 0.5, 0.0, 1.0) == 0.0


class TestIntersection:
    """Tests for Spline.test_intersection and the kernel intersect routine."""

    def test_crossing_lines(self):
        a = make_line([0.0, 0.0], [10.0, 0.0])
        b = make_line([5.0, -5.0], [5.0, 5.0])

        result = intersect(a._rep, b._rep, 0.1)
        assert result["status"] == 0
        u, v = result["pairs"][0]
        np.testing.assert_allclose(a.point_at(u), b.point_at(v), atol=0.1)
        assert a.test_intersection(b)

    def test_crossing_curves_refined(self, s_curve):
        line = make_line([3.0, -5.0, 0.0], [3.0, 5.0, 0.0], resolution=0.01)
        assert s_curve.test_intersection(line)

    def test_parallel_lines(self):
        a = make_line([0.0, 0.0], [10.0, 0.0])
        b = make_line([0.0, 1.0], [10.0, 1.0])
        assert not a.test_intersection(b)
        assert a.test_intersection(b, resolution=1.5)

    def test_empty_never_intersects(self):
        a = make_line([0.0, 0.0], [10.0, 0.0])
        assert not a.test_intersection(Spline(dimension=2))
        assert not Spline(dimension=2).test_intersection(a)

    def test_singleton_on_curve(self):
        line = make_line([0.0, 0.0], [10.0, 0.0])
        point = Spline(dimension=2, geometric_resolution=0.1)
        point.interpolate([[5.0, 0.05]])

        assert line.test_intersection(point)
        assert point.test_intersection(line)

    def test_singleton_off_curve(self):
        line = make_line([0.0, 0.0], [10.0, 0.0])
        point = Spline(dimension=2)
        point.interpolate([[5.0, 1.0]])
        assert not line.test_intersection(point)

    def test_two_singletons(self):
        a = Spline(dimension=2)
        a.interpolate([[0.0, 0.0]])
        b = Spline(dimension=2)
        b.interpolate([[0.0, 0.05]])
        assert a.test_intersection(b)
        assert not a.test_intersection(b, resolution=0.01)

    def test_dimension_mismatch(self):
        a = make_line([0.0, 0.0], [10.0, 0.0])
        b = make_line([0.0, 0.0, 0.0], [10.0, 0.0, 0.0])
        with pytest.raises(DimensionMismatchError):
            a.test_intersection(b)
