from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import numpy as np
import scipy.integrate
import scipy.linalg
from scipy.interpolate import make_lsq_spline

from .bspline import CurveData, CurveKind, basis_matrix


def chord_length_parameters(points: np.ndarray, start: float = 0.0) -> np.ndarray:
    """Cumulative distance between consecutive points, offset by ``start``."""
    steps = np.linalg.norm(np.diff(points, axis=0), axis=1)
    return start + np.concatenate(([0.0], np.cumsum(steps)))


def _averaged_knots(sites: np.ndarray, degree: int) -> np.ndarray:
    """Clamped knot vector whose interior knots average ``degree`` consecutive sites."""
    n = len(sites)
    inner = [sites[j : j + degree].mean() for j in range(1, n - degree)]
    return np.concatenate([np.full(degree + 1, sites[0]), inner, np.full(degree + 1, sites[-1])])


def interpolate_points(
    points,
    order: int,
    parameters=None,
    tangents: Optional[Mapping[int, Any]] = None,
) -> Dict[str, Any]:
    """
    Fit a curve through ``points`` (one row per point).

    Parameters
    ----------
    points : array (n_points, dim)
        Points to interpolate, in traversal order.
    order : int
        Requested order. The fitted degree is ``min(order - 1, n_conditions - 1)``.
    parameters : array (n_points,), optional
        Strictly increasing parameter value per point. Chord-length
        parameterisation starting at 0 when omitted.
    tangents : mapping[int, array (dim,)], optional
        First-derivative condition attached to the point of the given index.
        Ignored for linear fits.

    Returns
    -------
    dict with keys status, curve, parameters (on success) or message (on failure)
    """
    points = np.asarray(points, dtype=float)
    if points.ndim != 2 or points.shape[0] < 2:
        return {"status": -1, "message": f"need at least 2 points, got array of shape {points.shape}"}
    n_points = points.shape[0]

    if parameters is None:
        params = chord_length_parameters(points)
    else:
        params = np.asarray(parameters, dtype=float).ravel()
        if params.size != n_points:
            return {"status": -2, "message": f"expected {n_points} parameters, got {params.size}"}

    if not np.all(np.isfinite(params)) or not np.all(np.isfinite(points)):
        return {"status": -3, "message": "points and parameters must be finite"}
    if np.any(np.diff(params) <= 0):
        return {
            "status": -3,
            "message": "parameters must be strictly increasing (coincident consecutive points?)",
        }

    tangents = {} if (tangents is None or order <= 2) else dict(tangents)

    sites, orders, values = [], [], []
    for i in range(n_points):
        sites.append(params[i])
        orders.append(0)
        values.append(points[i])
        if i in tangents:
            sites.append(params[i])
            orders.append(1)
            values.append(np.asarray(tangents[i], dtype=float).reshape(points.shape[1]))
    sites = np.array(sites)
    orders = np.array(orders)
    values = np.array(values)

    n = len(sites)
    degree = min(order - 1, n - 1)
    knots = _averaged_knots(sites, degree)

    collocation = np.empty((n, n))
    for nu in np.unique(orders):
        rows = orders == nu
        collocation[rows] = basis_matrix(knots, degree, sites[rows], nu=int(nu))

    try:
        coefficients = scipy.linalg.solve(collocation, values)
    except np.linalg.LinAlgError as e:
        return {"status": -4, "message": f"singular interpolation system: {e}"}
    if not np.all(np.isfinite(coefficients)):
        return {"status": -4, "message": "interpolation produced non-finite coefficients"}

    curve = CurveData(knots, coefficients, degree + 1, CurveKind.POLYNOMIAL_BSPLINE)
    return {"status": 0, "curve": curve, "parameters": params}


def domain_breaks(curve: CurveData) -> np.ndarray:
    """Distinct knot values inside the parameter domain."""
    return np.unique(curve.knots[curve.order - 1 : curve.point_count + 1])


def arc_length(curve: CurveData, tolerance: float) -> Dict[str, Any]:
    """
    Arc length by adaptive quadrature of the speed over every knot span.

    The absolute error budget ``tolerance`` is shared among the spans.
    """
    breaks = domain_breaks(curve)
    budget = tolerance / max(len(breaks) - 1, 1)

    def speed(u):
        return float(np.linalg.norm(curve.derivatives(u, 1)[1]))

    total = 0.0
    for a, b in zip(breaks[:-1], breaks[1:]):
        value, _ = scipy.integrate.quad(speed, a, b, epsabs=budget, epsrel=1e-10, limit=200)
        total += value

    if not np.isfinite(total):
        return {"status": -1, "message": "non-finite curve length"}
    return {"status": 0, "length": total}


def simplify_curve(curve: CurveData, tolerance, max_iterations: int = 10) -> Dict[str, Any]:
    """
    Approximate ``curve`` with as few control points as possible.

    Starting from a single polynomial span of the same degree, the curve is
    refitted by weighted least squares on a dense sampling; spans whose
    per-axis error exceeds ``tolerance`` are split in half and the fit is
    repeated, for at most ``max_iterations`` passes. Endpoints carry a large
    weight so they stay put.

    Returns
    -------
    dict with keys:
        status : 0 converged, 1 no reduction possible (curve returned
            unchanged), 2 iteration cap reached above tolerance, < 0 failure
        curve : CurveData
        max_error : array (dim,) achieved maximum error per axis
        iterations : int
    """
    tol = np.broadcast_to(np.asarray(tolerance, dtype=float), (curve.dimension,)).copy()
    if np.any(~(tol > 0)):
        return {"status": -1, "message": f"tolerance must be positive, got {tol}"}

    degree = curve.degree
    start, end = curve.start_param, curve.end_param
    breaks = domain_breaks(curve)
    per_span = 8 * (degree + 1)
    x = np.unique(
        np.concatenate(
            [np.linspace(start, end, 1024)]
            + [np.linspace(a, b, per_span) for a, b in zip(breaks[:-1], breaks[1:])]
        )
    )
    y = curve.point(x)
    weights = np.ones(len(x))
    weights[0] = weights[-1] = 1e3

    interior: list[float] = []
    candidate = None
    max_error = None
    iterations = 0
    for iterations in range(1, max_iterations + 1):
        knots = np.concatenate([np.full(degree + 1, start), interior, np.full(degree + 1, end)])
        try:
            fit = make_lsq_spline(x, y, knots, k=degree, w=weights)
        except (ValueError, np.linalg.LinAlgError) as e:
            return {"status": -2, "message": f"least-squares refit failed: {e}"}

        residual = np.abs(fit(x) - y)
        max_error = residual.max(axis=0)
        candidate = CurveData(knots, fit.c, degree + 1, CurveKind.POLYNOMIAL_BSPLINE)
        if np.all(max_error <= tol):
            break

        spans = np.concatenate([[start], interior, [end]])
        bad = np.any(residual > tol, axis=1)
        span_index = np.clip(np.searchsorted(spans, x[bad], side="right") - 1, 0, len(spans) - 2)
        split = []
        for j in np.unique(span_index):
            a, b = spans[j], spans[j + 1]
            if np.count_nonzero((x > a) & (x < b)) >= 2 * (degree + 1):
                split.append(0.5 * (a + b))
        if not split:
            break
        interior = sorted(interior + split)

    if candidate.point_count >= curve.point_count:
        return {
            "status": 1,
            "curve": curve.copy(),
            "max_error": np.zeros(curve.dimension),
            "iterations": iterations,
        }

    status = 0 if np.all(max_error <= tol) else 2
    return {"status": status, "curve": candidate, "max_error": max_error, "iterations": iterations}
