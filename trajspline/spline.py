"""
Spline engine.

A :class:`Spline` owns one curve of fixed dimension and is always in exactly
one of three states: empty, a singleton (one fixed point with no extent) or a
genuine parametric curve. Queries validate their parameter against
``[start_param, end_param]`` first and then fail with
:class:`InvalidOperationError` when the current state cannot answer them.

Example
-------
    from trajspline import Spline

    spline = Spline(dimension=3, curve_order=4, geometric_resolution=0.05)
    spline.interpolate([[0, 0, 0], [5, 2, 0], [10, 0, 0]])
    d_err, h_err, param = spline.pose_error([5.0, 1.5, 0.0], heading=0.1, guess=5.0)
"""

from __future__ import annotations

import enum
import logging
import math
import warnings
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np

from trajspline.config import SplineConfig
from trajspline.errors import (
    CurveFitError,
    DimensionMismatchError,
    InvalidOperationError,
    LogicError,
    NumericalError,
    OutOfRangeError,
)
from trajspline.kernel import bspline
from trajspline.kernel.bspline import CurveData, CurveKind
from trajspline.kernel.differential import (
    curvature,
    frenet_frame,
    normalize_angle,
    variation_of_curvature,
)
from trajspline.kernel.fitting import arc_length, interpolate_points, simplify_curve
from trajspline.kernel.search import closest_points, intersect, local_closest_point

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Empty:
    pass


@dataclass(frozen=True, eq=False)
class _Singleton:
    point: np.ndarray


_Representation = Union[_Empty, _Singleton, CurveData]


class _Shape(enum.Enum):
    EMPTY = "empty"
    SINGLETON = "singleton"
    CURVE = "curve"


def _shape_of(rep: _Representation) -> _Shape:
    if isinstance(rep, CurveData):
        return _Shape.CURVE
    if isinstance(rep, _Singleton):
        return _Shape.SINGLETON
    return _Shape.EMPTY


def _copy_representation(rep: _Representation) -> _Representation:
    if isinstance(rep, CurveData):
        return rep.copy()
    if isinstance(rep, _Singleton):
        return _Singleton(rep.point.copy())
    return _Empty()


def _unit(vector: np.ndarray) -> Optional[np.ndarray]:
    norm = np.linalg.norm(vector)
    return vector / norm if norm > 0 else None


class Spline:
    """
    Parametric curve with cached length and maximum curvature.

    Parameters
    ----------
    dimension : int
        Spatial dimension of the curve points (2 or 3 for frame queries)
    curve_order : int
        Polynomial order used for fitting (4 = cubic)
    geometric_resolution : float
        Tolerance of length integration, curvature sampling, closest-point
        search and default simplification
    config : SplineConfig, optional
        Complete settings; when given the other arguments are ignored
    """

    def __init__(
        self,
        dimension: int = 3,
        curve_order: int = 4,
        geometric_resolution: float = 0.1,
        config: Optional[SplineConfig] = None,
    ):
        if config is None:
            config = SplineConfig(
                dimension=dimension,
                curve_order=curve_order,
                geometric_resolution=geometric_resolution,
            )
        self._config = config
        self._rep: _Representation = _Empty()
        self._length: Optional[float] = None
        self._curvature_max: Optional[float] = None

    @classmethod
    def from_config(cls, config: SplineConfig) -> "Spline":
        """Create an empty spline with the given settings."""
        return cls(config=config)

    # -- settings ------------------------------------------------------------

    @property
    def config(self) -> SplineConfig:
        return self._config

    @property
    def dimension(self) -> int:
        return self._config.dimension

    @property
    def curve_order(self) -> int:
        return self._config.curve_order

    @property
    def geometric_resolution(self) -> float:
        return self._config.geometric_resolution

    def set_geometric_resolution(self, resolution: float):
        """Change the geometric resolution; cached length and curvature are dropped."""
        self._config = self._config.with_resolution(resolution)
        self._invalidate_caches()

    # -- state ---------------------------------------------------------------

    def _invalidate_caches(self):
        self._length = None
        self._curvature_max = None
        if isinstance(self._rep, _Singleton):
            self._length = 0.0

    def _set_representation(self, rep: _Representation):
        """Single mutation path: every state change goes through here."""
        self._rep = rep
        self._invalidate_caches()

    @property
    def _shape(self) -> _Shape:
        return _shape_of(self._rep)

    def _curve(self, operation: str) -> CurveData:
        if isinstance(self._rep, CurveData):
            return self._rep
        raise InvalidOperationError(f"{operation}() called on a {self._shape.value} curve")

    def _check_param(self, param: float):
        if not self.start_param <= param <= self.end_param:
            raise OutOfRangeError(
                f"parameter {param} outside curve domain [{self.start_param}, {self.end_param}]"
            )

    def _check_dimension(self, other: "Spline", operation: str):
        if other.dimension != self.dimension:
            raise DimensionMismatchError(
                f"incompatible dimensions in {operation}(): {self.dimension} vs {other.dimension}"
            )

    def _as_points(self, points) -> np.ndarray:
        """Points as an (n, dimension) array; flat input is split into tuples."""
        arr = np.asarray(points, dtype=float)
        if arr.size == 0:
            return np.empty((0, self.dimension))
        if arr.ndim == 1:
            if arr.size % self.dimension:
                raise DimensionMismatchError(
                    f"{arr.size} coordinates is not a multiple of dimension {self.dimension}"
                )
            return arr.reshape(-1, self.dimension)
        if arr.ndim == 2 and arr.shape[1] == self.dimension:
            return arr
        raise DimensionMismatchError(f"expected points of dimension {self.dimension}, got shape {arr.shape}")

    def _as_point(self, point) -> np.ndarray:
        arr = np.asarray(point, dtype=float).ravel()
        if arr.size != self.dimension:
            raise DimensionMismatchError(f"expected a point of dimension {self.dimension}, got {arr.size} values")
        return arr

    # -- construction --------------------------------------------------------

    def interpolate(self, points, parameters=None):
        """
        Fit a curve of order ``curve_order`` through ``points``.

        Parameters
        ----------
        points : array_like
            Either an (n, dimension) array or a flat sequence of coordinates
        parameters : array_like, optional
            Strictly increasing parameter value per point; chord length when omitted

        Raises
        ------
        DimensionMismatchError
            If the points do not match the spline dimension
        CurveFitError
            If the fit is rejected (coincident points, bad parameters, ...)
        """
        points = self._as_points(points)
        if len(points) == 0:
            self._set_representation(_Empty())
            return
        if len(points) == 1:
            self._set_representation(_Singleton(points[0].copy()))
            return

        result = interpolate_points(points, self.curve_order, parameters)
        if result["status"] < 0:
            raise CurveFitError(
                f"cannot interpolate {len(points)} points: {result['message']}",
                {"point_count": len(points), "curve_order": self.curve_order},
            )
        curve = result["curve"]
        logger.debug(
            "Interpolated %d points: order %d, %d control points, domain [%g, %g]",
            len(points), curve.order, curve.point_count, curve.start_param, curve.end_param,
        )
        self._set_representation(curve)

    def reset(self, coordinates, knots, kind: Optional[CurveKind] = None):
        """
        Rebuild the curve from control-point coordinates and a knot vector.

        Parameters
        ----------
        coordinates : array_like
            Flat coefficient array, ``coordinates_stride`` values per control point
        knots : array_like
            Knot vector; the order is ``len(knots) - point_count``
        kind : CurveKind, optional
            Curve kind; the current one is kept when omitted
        """
        coords = np.asarray(coordinates, dtype=float).ravel()
        if coords.size == 0:
            self._set_representation(_Empty())
            return

        if coords.size == self.dimension:
            self._set_representation(_Singleton(coords.copy()))
            return

        if kind is None:
            if not isinstance(self._rep, CurveData):
                raise InvalidOperationError(f"cannot keep the kind of a {self._shape.value} curve")
            kind = self._rep.kind
        kind = CurveKind(kind)

        stride = self.dimension + 1 if kind.is_rational else self.dimension
        if coords.size == stride:
            point = coords[: self.dimension] / coords[-1] if kind.is_rational else coords
            self._set_representation(_Singleton(point.copy()))
            return

        result = bspline.build_curve(coords, knots, self.dimension, kind)
        if result["status"] < 0:
            raise CurveFitError(
                f"cannot rebuild curve: {result['message']}",
                {"coordinates": coords.size, "knots": np.size(knots), "kind": kind.name},
            )
        self._set_representation(result["curve"])

    def clear(self):
        self._set_representation(_Empty())

    # -- accessors -----------------------------------------------------------

    @property
    def point_count(self) -> int:
        if isinstance(self._rep, CurveData):
            return self._rep.point_count
        return 1 if isinstance(self._rep, _Singleton) else 0

    @property
    def is_empty(self) -> bool:
        return isinstance(self._rep, _Empty)

    @property
    def is_singleton(self) -> bool:
        return isinstance(self._rep, _Singleton)

    @property
    def start_param(self) -> float:
        return self._rep.start_param if isinstance(self._rep, CurveData) else 0.0

    @property
    def end_param(self) -> float:
        return self._rep.end_param if isinstance(self._rep, CurveData) else 0.0

    @property
    def kind(self) -> Optional[CurveKind]:
        return self._rep.kind if isinstance(self._rep, CurveData) else None

    @property
    def coordinates_stride(self) -> int:
        return self.dimension + 1 if self.is_rational() else self.dimension

    def coordinates(self) -> np.ndarray:
        """Flat control-point coefficients (homogeneous for rational curves)."""
        if isinstance(self._rep, CurveData):
            return self._rep.coefficients.ravel().copy()
        if isinstance(self._rep, _Singleton):
            return self._rep.point.copy()
        return np.empty(0)

    def knots(self) -> np.ndarray:
        if isinstance(self._rep, CurveData):
            return self._rep.knots.copy()
        return np.empty(0)

    def is_rational(self) -> bool:
        return isinstance(self._rep, CurveData) and self._rep.is_rational

    def describe(self) -> str:
        """Multi-line summary of the curve properties."""
        lines = [
            f"points:     {self.point_count}",
            f"order:      {self._rep.order if isinstance(self._rep, CurveData) else self.curve_order}",
            f"dimension:  {self.dimension}",
            f"kind:       {self.kind.name if self.kind is not None else self._shape.value}",
            f"range:      [{self.start_param:g}, {self.end_param:g}]",
        ]
        if not self.is_empty:
            lines.append(f"length:     {self.curve_length():g}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"Spline(dimension={self.dimension}, curve_order={self.curve_order}, "
            f"{self._shape.value}, points={self.point_count}, "
            f"range=[{self.start_param:g}, {self.end_param:g}])"
        )

    # -- copying -------------------------------------------------------------

    def copy(self) -> "Spline":
        """Deep copy; the new spline shares nothing with this one."""
        other = Spline(config=self._config)
        other._rep = _copy_representation(self._rep)
        other._length = self._length
        other._curvature_max = self._curvature_max
        return other

    def __copy__(self) -> "Spline":
        return self.copy()

    def __deepcopy__(self, memo: Dict[int, Any]) -> "Spline":
        return self.copy()

    # -- point queries -------------------------------------------------------

    def point_at(self, param: float) -> np.ndarray:
        self._check_param(param)
        if isinstance(self._rep, _Singleton):
            return self._rep.point.copy()
        return self._curve("point_at").point(param)

    def point_and_tangent_at(self, param: float) -> np.ndarray:
        """Position followed by the first derivative; a singleton has zero tangent."""
        self._check_param(param)
        if isinstance(self._rep, _Singleton):
            return np.concatenate([self._rep.point, np.zeros(self.dimension)])
        d = self._curve("point_and_tangent_at").derivatives(param, 1)
        return np.concatenate([d[0], d[1]])

    def tangent_at(self, param: float) -> np.ndarray:
        return self.point_and_tangent_at(param)[self.dimension :]

    def sample(self, num_points: int = 100) -> Tuple[np.ndarray, np.ndarray]:
        """Evenly spaced parameters over the domain and the matching points."""
        if isinstance(self._rep, _Singleton):
            return np.zeros(num_points), np.tile(self._rep.point, (num_points, 1))
        curve = self._curve("sample")
        params = np.linspace(curve.start_param, curve.end_param, num_points)
        return params, curve.point(params)

    # -- curvature and length ------------------------------------------------

    def curvature_at(self, param: float) -> float:
        self._check_param(param)
        return curvature(self._curve("curvature_at"), param)

    def variation_of_curvature_at(self, param: float) -> float:
        """Derivative of the curvature with respect to arc length."""
        self._check_param(param)
        return variation_of_curvature(self._curve("variation_of_curvature_at"), param)

    def curvature_max(self) -> float:
        """
        Maximum curvature over the curve, sampled every
        ``unit_parameter() * geometric_resolution`` in parameter space.

        This is a sampled approximation and can miss sharp peaks between
        samples. The value is cached until the curve changes.
        """
        curve = self._curve("curvature_max")
        if self._curvature_max is None:
            step = self.unit_parameter() * self.geometric_resolution
            if step > 0:
                params = np.append(np.arange(curve.start_param, curve.end_param, step), curve.end_param)
            else:
                params = np.array([curve.start_param])
            self._curvature_max = float(np.max(curvature(curve, params)))
        return self._curvature_max

    def curve_length(self) -> float:
        """Arc length, integrated to ``geometric_resolution`` and cached."""
        if isinstance(self._rep, _Empty):
            raise InvalidOperationError("curve_length() called on an empty curve")
        if self._length is None:
            result = arc_length(self._rep, self.geometric_resolution)
            if result["status"] < 0:
                raise NumericalError(result["message"])
            self._length = result["length"]
        return self._length

    def unit_parameter(self) -> float:
        """Parameter span per unit of arc length, 0 on a degenerate range."""
        span = self.end_param - self.start_param
        if span <= 0:
            return 0.0
        length = self.curve_length()
        if length <= 0:
            return 0.0
        return span / length

    # -- closest-point search ------------------------------------------------

    def find_closest_points(
        self, reference, tolerance: Optional[float] = None
    ) -> Tuple[List[float], List[Tuple[float, float]]]:
        """
        All local closest points between the curve and ``reference``.

        Returns
        -------
        points : list of float
            Isolated closest-point parameters, sorted
        intervals : list of (float, float)
            Parameter ranges along which the curve keeps a constant distance
            from ``reference`` (within ``tolerance``)
        """
        if not isinstance(self._rep, CurveData):
            return [self.start_param], []
        reference = self._as_point(reference)
        tolerance = self.geometric_resolution if tolerance is None else tolerance
        result = closest_points(self._rep, reference, tolerance, self._config.max_search_samples)
        if result["status"] < 0:
            raise NumericalError(result["message"])
        return result["points"], result["intervals"]

    def find_one_closest_point(self, reference, guess: float, tolerance: Optional[float] = None) -> float:
        """
        The closest point nearest (in parameter) to ``guess``.

        ``guess`` itself is returned when it lies inside a constant-distance
        interval. On ties the first candidate wins.
        """
        if not isinstance(self._rep, CurveData):
            return self.start_param
        points, intervals = self.find_closest_points(reference, tolerance)
        for start, end in intervals:
            if start <= guess <= end:
                return guess

        candidates = list(points) + [bound for interval in intervals for bound in interval]
        if not candidates:
            raise LogicError(f"closest-point search returned no result on a curve with {self.point_count} points")

        best = candidates[0]
        for candidate in candidates[1:]:
            if abs(candidate - guess) < abs(best - guess):
                best = candidate
        return best

    def local_closest_point_search(
        self,
        reference,
        guess: float,
        start: float,
        end: float,
        tolerance: Optional[float] = None,
    ) -> float:
        """
        Newton refinement of the closest point from ``guess`` within ``[start, end]``.

        Reversed bounds are swapped. The result is always clamped into the
        bounds so a poor guess cannot push it outside.

        Raises
        ------
        NumericalError
            If the iteration fails or does not converge
        """
        if not isinstance(self._rep, CurveData):
            return self.start_param
        if start > end:
            start, end = end, start
        reference = self._as_point(reference)
        tolerance = self.geometric_resolution if tolerance is None else tolerance

        curve = self._rep
        lo, hi = max(start, curve.start_param), min(end, curve.end_param)
        bounds = (lo, hi) if lo <= hi else None
        result = local_closest_point(
            curve, reference, tolerance, guess, self._config.newton_iterations, bounds=bounds
        )
        if result["status"] < 0:
            raise NumericalError(f"local closest-point search failed: {result['message']}")
        return float(np.clip(result["param"], start, end))

    def _distance_to(self, point: np.ndarray, tolerance: float) -> float:
        points, intervals = self.find_closest_points(point, tolerance)
        candidates = list(points) + [start for start, _ in intervals]
        if not candidates:
            raise LogicError("closest-point search returned no result on a non-empty curve")
        return min(float(np.linalg.norm(self.point_at(u) - point)) for u in candidates)

    # -- composition ---------------------------------------------------------

    def append(self, other: "Spline"):
        """
        Concatenate ``other`` onto the end of this curve.

        ``other`` is translated so that its start meets this curve's end; no
        bridging segment is inserted.
        """
        self._check_dimension(other, "append")
        if self.is_empty:
            self._set_representation(_copy_representation(other._rep))
            return
        if not isinstance(other._rep, CurveData):
            return
        if self.is_singleton:
            raise InvalidOperationError("cannot append a curve to a singleton")

        result = bspline.concatenate(self._rep, other._rep)
        if result["status"] < 0:
            raise CurveFitError(f"failed to append the curves: {result['message']}")
        self._set_representation(result["curve"])

    def join(self, other: "Spline", tolerance: float = 0.0):
        """
        Connect ``other`` to the end of this curve.

        When the gap between this curve's end and ``other``'s start is within
        ``tolerance`` the curves are appended. Otherwise a bridging curve of
        order ``curve_order`` is fitted between the two end points, matching
        the unit end tangents of whichever sides are genuine curves, and the
        result is ``self + bridge + other``.

        Raises
        ------
        DimensionMismatchError
            If the dimensions differ
        CurveFitError
            If the bridging curve cannot be fitted; ``context`` holds the
            gap, both parameter ranges and singleton flags and the bridge points
        """
        tolerance = max(tolerance, 0.0)
        self._check_dimension(other, "join")
        if self.is_empty:
            self._set_representation(_copy_representation(other._rep))
            return
        if other.is_empty:
            return

        points, tangents = _BRIDGES[(self._shape, other._shape)](self._rep, other._rep)
        gap = float(np.linalg.norm(points[1] - points[0]))
        if gap <= tolerance:
            if self.is_singleton and other.is_singleton:
                return
            self.append(other)
            return

        result = interpolate_points(points, self.curve_order, tangents=tangents)
        if result["status"] < 0:
            context = {
                "gap": gap,
                "range": (self.start_param, self.end_param),
                "singleton": self.is_singleton,
                "other_range": (other.start_param, other.end_param),
                "other_singleton": other.is_singleton,
                "points": points.tolist(),
                "tangents": {k: v.tolist() for k, v in tangents.items()},
            }
            logger.error("Failed to generate the bridging curve: %s", context)
            raise CurveFitError(f"cannot generate the bridging curve: {result['message']}", context)

        bridge = result["curve"]
        logger.debug("Bridging gap of %g with %d control points", gap, bridge.point_count)
        if self.is_singleton:
            self._set_representation(bridge)
        else:
            concatenated = bspline.concatenate(self._rep, bridge)
            if concatenated["status"] < 0:
                raise CurveFitError(f"failed to append the bridging curve: {concatenated['message']}")
            self._set_representation(concatenated["curve"])
        self.append(other)

    def reverse(self):
        """Reverse the traversal direction in place; no-op without extent."""
        if isinstance(self._rep, CurveData):
            self._set_representation(bspline.reverse(self._rep))

    def simplify(self, tolerance=None) -> np.ndarray:
        """
        Replace the curve by an approximation with fewer control points.

        Parameters
        ----------
        tolerance : float or array_like, optional
            Per-axis error bound, ``geometric_resolution`` by default

        Returns
        -------
        np.ndarray
            Achieved maximum error per axis (``[0.0]`` for empty and singleton curves)
        """
        if not isinstance(self._rep, CurveData):
            return np.array([0.0])
        tolerance = self.geometric_resolution if tolerance is None else tolerance

        result = simplify_curve(self._rep, tolerance, self._config.simplify_iterations)
        if result["status"] < 0:
            raise CurveFitError(f"simplification failed: {result['message']}", {"tolerance": tolerance})
        if result["status"] == 2:
            warnings.warn(
                f"simplify stopped after {result['iterations']} iterations with error "
                f"{result['max_error']} above tolerance {tolerance}",
                UserWarning,
            )
        if result["status"] != 1:
            logger.debug(
                "Simplified %d -> %d control points", self._rep.point_count, result["curve"].point_count
            )
            self._set_representation(result["curve"])
        return result["max_error"]

    def test_intersection(self, other: "Spline", resolution: Optional[float] = None) -> bool:
        """
        Whether the two curves come within ``resolution`` of each other.

        A singleton intersects a curve when its point lies within
        ``resolution`` of the curve, and another singleton when the two points
        are within ``resolution``. Empty curves intersect nothing.
        """
        if self.is_empty or other.is_empty:
            return False
        self._check_dimension(other, "test_intersection")
        resolution = self.geometric_resolution if resolution is None else resolution

        shapes = (self._shape, other._shape)
        if shapes == (_Shape.SINGLETON, _Shape.SINGLETON):
            return bool(np.linalg.norm(self._rep.point - other._rep.point) <= resolution)
        if shapes == (_Shape.CURVE, _Shape.SINGLETON):
            return self._distance_to(other._rep.point, resolution) <= resolution
        if shapes == (_Shape.SINGLETON, _Shape.CURVE):
            return other._distance_to(self._rep.point, resolution) <= resolution

        result = intersect(
            self._rep, other._rep, resolution, self._config.max_search_samples, first_only=True
        )
        if result["status"] < 0:
            raise NumericalError(result["message"])
        return bool(result["pairs"])

    # -- frames and trajectory errors ---------------------------------------

    def frenet_frame(self, param: float) -> np.ndarray:
        """3x3 matrix with the tangent, normal and binormal as rows."""
        self._check_param(param)
        curve = self._curve("frenet_frame")
        if self.dimension not in (2, 3):
            raise InvalidOperationError(f"frenet_frame() needs a 2-D or 3-D curve, got dimension {self.dimension}")
        return frenet_frame(curve, param)

    def heading(self, param: float) -> float:
        """Angle of the tangent projected on the xy-plane, in (-pi, pi]."""
        tangent = self.frenet_frame(param)[0]
        return normalize_angle(math.atan2(tangent[1], tangent[0]))

    def heading_error(self, actual_heading: float, param: float) -> float:
        return normalize_angle(actual_heading - self.heading(param))

    def distance_error(self, point, param: float) -> float:
        """
        Signed lateral distance from ``point`` to the curve point at ``param``.

        Only the xy components are used. The distance is positive when the
        point lies to the left of the heading direction.
        """
        error = np.asarray(point, dtype=float).ravel()[:2] - self.point_at(param)[:2]
        distance = float(np.linalg.norm(error))
        if distance == 0.0:
            return 0.0
        angle = normalize_angle(math.atan2(error[1], error[0]) - self.heading(param))
        return distance if angle >= 0.0 else -distance

    def pose_error(self, position, heading: float, guess: float) -> Tuple[float, float, float]:
        """
        Errors of a robot pose with respect to the curve.

        Parameters
        ----------
        position : array_like
            Robot position; components beyond ``dimension`` are ignored
        heading : float
            Robot heading in radians
        guess : float
            Parameter near which to look for the closest point

        Returns
        -------
        (distance_error, heading_error, param)
        """
        position = np.asarray(position, dtype=float).ravel()
        param = self.find_one_closest_point(position[: self.dimension], guess, self.geometric_resolution)
        return self.distance_error(position, param), self.heading_error(heading, param), param


def _end_condition(curve: CurveData, param: float) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    d = curve.derivatives(param, 1)
    return d[0], _unit(d[1])


def _tangent_conditions(**tangents: Optional[np.ndarray]) -> Dict[int, np.ndarray]:
    index = {"start": 0, "end": 1}
    return {index[k]: v for k, v in tangents.items() if v is not None}


def _bridge_points(first: _Singleton, second: _Singleton):
    return np.vstack([first.point, second.point]), {}


def _bridge_curve_to_point(first: CurveData, second: _Singleton):
    point, tangent = _end_condition(first, first.end_param)
    return np.vstack([point, second.point]), _tangent_conditions(start=tangent)


def _bridge_point_to_curve(first: _Singleton, second: CurveData):
    point, tangent = _end_condition(second, second.start_param)
    return np.vstack([first.point, point]), _tangent_conditions(end=tangent)


def _bridge_curves(first: CurveData, second: CurveData):
    start, start_tangent = _end_condition(first, first.end_param)
    end, end_tangent = _end_condition(second, second.start_param)
    return np.vstack([start, end]), _tangent_conditions(start=start_tangent, end=end_tangent)


# (self, other) -> bridge points and unit tangent conditions, for Spline.join
_BRIDGES = {
    (_Shape.SINGLETON, _Shape.SINGLETON): _bridge_points,
    (_Shape.CURVE, _Shape.SINGLETON): _bridge_curve_to_point,
    (_Shape.SINGLETON, _Shape.CURVE): _bridge_point_to_curve,
    (_Shape.CURVE, _Shape.CURVE): _bridge_curves,
}


def interpolate(
    points,
    dimension: int = 3,
    curve_order: int = 4,
    parameters=None,
    geometric_resolution: float = 0.1,
) -> Spline:
    """Fit a new :class:`Spline` through ``points``."""
    spline = Spline(dimension=dimension, curve_order=curve_order, geometric_resolution=geometric_resolution)
    spline.interpolate(points, parameters)
    return spline
