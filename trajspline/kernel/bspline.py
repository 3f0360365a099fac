from __future__ import annotations

import enum
from dataclasses import dataclass, field
from math import comb
from typing import Any, Dict

import numpy as np
import scipy.linalg
from scipy.interpolate import BSpline


class CurveKind(enum.IntEnum):
    """Curve kinds, numbered as in the classic SISL curve library."""

    POLYNOMIAL_BSPLINE = 1
    RATIONAL_BSPLINE = 2
    POLYNOMIAL_BEZIER = 3
    RATIONAL_BEZIER = 4

    @property
    def is_rational(self) -> bool:
        return self in (CurveKind.RATIONAL_BSPLINE, CurveKind.RATIONAL_BEZIER)


@dataclass(eq=False)
class CurveData:
    """
    A B-spline or NURBS curve.

    Rational curves store homogeneous coefficients ``(w*x, w*y, ..., w)`` so a
    coefficient row is one element longer than the spatial dimension.

    The parameter domain is ``[knots[order - 1], knots[point_count]]``.
    Instances are treated as immutable; every kernel routine returns new ones.
    """

    knots: np.ndarray
    coefficients: np.ndarray
    order: int
    kind: CurveKind = CurveKind.POLYNOMIAL_BSPLINE
    _spline: BSpline | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        self.knots = np.array(self.knots, dtype=float).ravel()
        self.coefficients = np.array(self.coefficients, dtype=float)
        self.order = int(self.order)
        self.kind = CurveKind(self.kind)

        if self.coefficients.ndim != 2:
            raise ValueError(f"coefficients must be 2-D, got shape {self.coefficients.shape}")
        n = self.coefficients.shape[0]
        if self.order < 2:
            raise ValueError(f"order must be at least 2, got {self.order}")
        if n < self.order:
            raise ValueError(f"need at least {self.order} coefficients for order {self.order}, got {n}")
        if self.knots.size != n + self.order:
            raise ValueError(
                f"expected {n} coefficients + order {self.order} = {n + self.order} knots, got {self.knots.size}"
            )
        if np.any(np.diff(self.knots) < 0):
            raise ValueError("knot vector must be non-decreasing")
        if not self.start_param < self.end_param:
            raise ValueError(f"empty parameter domain [{self.start_param}, {self.end_param}]")
        if not np.all(np.isfinite(self.coefficients)):
            raise ValueError("coefficients must be finite")
        if self.is_rational:
            if self.coefficients.shape[1] < 2:
                raise ValueError("rational coefficients need at least one coordinate and a weight")
            if np.any(self.coefficients[:, -1] <= 0):
                raise ValueError("rational weights must be positive")

    # -- shape ---------------------------------------------------------------

    @property
    def degree(self) -> int:
        return self.order - 1

    @property
    def point_count(self) -> int:
        return self.coefficients.shape[0]

    @property
    def is_rational(self) -> bool:
        return self.kind.is_rational

    @property
    def stride(self) -> int:
        return self.coefficients.shape[1]

    @property
    def dimension(self) -> int:
        return self.stride - 1 if self.is_rational else self.stride

    @property
    def start_param(self) -> float:
        return float(self.knots[self.order - 1])

    @property
    def end_param(self) -> float:
        return float(self.knots[self.point_count])

    @property
    def is_clamped(self) -> bool:
        return bool(
            np.all(self.knots[: self.order] == self.start_param)
            and np.all(self.knots[-self.order :] == self.end_param)
        )

    def copy(self) -> "CurveData":
        return CurveData(self.knots.copy(), self.coefficients.copy(), self.order, self.kind)

    def control_points(self) -> np.ndarray:
        """Control points in space (homogeneous coefficients projected)."""
        if not self.is_rational:
            return self.coefficients.copy()
        return self.coefficients[:, :-1] / self.coefficients[:, -1:]

    def homogeneous(self) -> np.ndarray:
        """Coefficients in homogeneous form, with unit weights for polynomial curves."""
        if self.is_rational:
            return self.coefficients.copy()
        return np.hstack([self.coefficients, np.ones((self.point_count, 1))])

    # -- evaluation ----------------------------------------------------------

    def _bspline(self) -> BSpline:
        if self._spline is None:
            self._spline = BSpline(self.knots, self.coefficients, self.degree, extrapolate=True)
        return self._spline

    def derivatives(self, u, count: int = 0) -> np.ndarray:
        """
        Position and derivatives up to ``count`` at parameter(s) ``u``.

        Returns an array of shape ``(count + 1, dimension)`` for a scalar
        ``u`` and ``(count + 1, len(u), dimension)`` for an array.
        """
        u_arr = np.asarray(u, dtype=float)
        spline = self._bspline()
        raw = []
        for nu in range(count + 1):
            if nu > self.degree:
                raw.append(np.zeros(u_arr.shape + (self.stride,)))
            else:
                raw.append(spline(u_arr, nu=nu))
        raw = np.stack(raw)
        if not self.is_rational:
            return raw
        return _project_rational(raw)

    def point(self, u) -> np.ndarray:
        return self.derivatives(u, 0)[0]


def _project_rational(homogeneous: np.ndarray) -> np.ndarray:
    """
    Derivatives of C = A / w from the derivatives of the homogeneous curve,
    using C^(k) = (A^(k) - sum_i binom(k, i) w^(i) C^(k-i)) / w.
    """
    weights = homogeneous[..., -1:]
    numerators = homogeneous[..., :-1]
    result = np.empty_like(numerators)
    for k in range(homogeneous.shape[0]):
        acc = numerators[k].copy()
        for i in range(1, k + 1):
            acc -= comb(k, i) * weights[i] * result[k - i]
        result[k] = acc / weights[0]
    return result


def basis_matrix(knots: np.ndarray, degree: int, x, nu: int = 0) -> np.ndarray:
    """Values of every B-spline basis function (or its derivative) at ``x``."""
    n = len(knots) - degree - 1
    identity = BSpline(knots, np.eye(n), degree, extrapolate=True)
    return np.atleast_2d(identity(np.asarray(x, dtype=float), nu=nu))


def greville_abscissae(knots: np.ndarray, degree: int) -> np.ndarray:
    n = len(knots) - degree - 1
    return np.array([knots[i + 1 : i + degree + 1].mean() for i in range(n)])


def build_curve(coordinates, knots, dimension: int, kind) -> Dict[str, Any]:
    """
    Build a curve from a flat coefficient array and a knot vector.

    The order is inferred as ``len(knots) - point_count``.

    Returns
    -------
    dict with keys status, curve (on success) or message (on failure)
    """
    try:
        kind = CurveKind(kind)
        stride = dimension + 1 if kind.is_rational else dimension
        coords = np.asarray(coordinates, dtype=float).ravel()
        if coords.size % stride != 0:
            return {
                "status": -1,
                "message": f"{coords.size} coordinates is not a multiple of the stride {stride}",
            }
        n = coords.size // stride
        knots = np.asarray(knots, dtype=float).ravel()
        curve = CurveData(knots, coords.reshape(n, stride), knots.size - n, kind)
    except ValueError as e:
        return {"status": -2, "message": str(e)}
    return {"status": 0, "curve": curve}


def recollocate(curve: CurveData, knots: np.ndarray, degree: int) -> CurveData:
    """
    Re-express ``curve`` on another knot vector and degree.

    The curve is interpolated at the Greville abscissae of the new basis. This
    is exact whenever the new spline space contains the curve, which is the
    case for clamping and degree elevation.
    """
    knots = np.asarray(knots, dtype=float)
    sites = greville_abscissae(knots, degree)
    collocation = basis_matrix(knots, degree, sites)
    values = curve._bspline()(sites)
    coefficients = scipy.linalg.solve(collocation, values)
    return CurveData(knots, coefficients, degree + 1, curve.kind)


def clamp(curve: CurveData) -> CurveData:
    """Equivalent curve whose end knots have full multiplicity."""
    if curve.is_clamped:
        return curve.copy()
    start, end = curve.start_param, curve.end_param
    inner = curve.knots[curve.order : curve.point_count]
    inner = inner[(inner > start) & (inner < end)]
    knots = np.concatenate([np.full(curve.order, start), inner, np.full(curve.order, end)])
    return recollocate(curve, knots, curve.degree)


def elevate_degree(curve: CurveData, degree: int) -> CurveData:
    """Exact degree elevation of a clamped curve."""
    if degree < curve.degree:
        raise ValueError(f"cannot lower degree {curve.degree} to {degree}")
    if degree == curve.degree:
        return curve.copy()
    raise_by = degree - curve.degree
    values, counts = np.unique(curve.knots, return_counts=True)
    knots = []
    for i, (value, count) in enumerate(zip(values, counts)):
        if i == 0 or i == len(values) - 1:
            knots.extend([value] * (degree + 1))
        else:
            knots.extend([value] * (count + raise_by))
    return recollocate(curve, np.array(knots), degree)


def reverse(curve: CurveData) -> CurveData:
    """Same curve traversed backwards over the same parameter domain."""
    knots = (curve.start_param + curve.end_param) - curve.knots[::-1]
    return CurveData(knots, curve.coefficients[::-1].copy(), curve.order, curve.kind)


def translate(curve: CurveData, offset: np.ndarray) -> CurveData:
    offset = np.asarray(offset, dtype=float)
    coefficients = curve.coefficients.copy()
    if curve.is_rational:
        coefficients[:, :-1] += coefficients[:, -1:] * offset
    else:
        coefficients += offset
    return CurveData(curve.knots.copy(), coefficients, curve.order, curve.kind)


def _as_rational(curve: CurveData) -> CurveData:
    if curve.is_rational:
        return curve
    return CurveData(curve.knots.copy(), curve.homogeneous(), curve.order, CurveKind.RATIONAL_BSPLINE)


def concatenate(first: CurveData, second: CurveData) -> Dict[str, Any]:
    """
    Join ``second`` onto the end of ``first`` with a C0 joint.

    ``second`` is translated so that its start point coincides with the end
    point of ``first`` and reparameterised to start at ``first.end_param``.
    The lower-degree curve is degree-elevated first.

    Returns
    -------
    dict with keys status, curve (on success) or message (on failure)
    """
    if first.dimension != second.dimension:
        return {
            "status": -1,
            "message": f"dimension mismatch: {first.dimension} vs {second.dimension}",
        }

    try:
        a = clamp(first)
        b = clamp(second)
        degree = max(a.degree, b.degree)
        a = elevate_degree(a, degree)
        b = elevate_degree(b, degree)
    except (np.linalg.LinAlgError, ValueError) as e:
        return {"status": -2, "message": f"cannot bring curves to a common basis: {e}"}

    b = translate(b, a.point(a.end_param) - b.point(b.start_param))

    rational = a.is_rational or b.is_rational
    if rational:
        a = _as_rational(a)
        b = _as_rational(b)
        scale = a.coefficients[-1, -1] / b.coefficients[0, -1]
        b = CurveData(b.knots, b.coefficients * scale, b.order, b.kind)

    shifted = b.knots - b.start_param + a.end_param
    knots = np.concatenate([a.knots[:-1], shifted[degree + 1 :]])
    coefficients = np.vstack([a.coefficients, b.coefficients[1:]])
    kind = CurveKind.RATIONAL_BSPLINE if rational else CurveKind.POLYNOMIAL_BSPLINE
    return {"status": 0, "curve": CurveData(knots, coefficients, degree + 1, kind)}
