from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import scipy.optimize
from scipy.spatial import cKDTree

from .bspline import CurveData
from .fitting import domain_breaks

# |d(along-track offset)/ds| below which a stretch runs at constant distance
_FLAT_SLOPE = 1e-4


def sample_parameters(
    curve: CurveData,
    spacing: float,
    max_samples: int = 4096,
    min_per_span: int = 4,
) -> np.ndarray:
    """
    Parameter samples roughly ``spacing`` apart along the curve.

    The length of the control polygon supporting each knot span bounds the
    arc length of that span, so it is used to size the per-span sampling.
    The total is scaled down to about ``max_samples``.
    """
    spacing = max(spacing, 1e-12)
    breaks = domain_breaks(curve)
    spans = list(zip(breaks[:-1], breaks[1:]))
    control = curve.control_points()

    counts = []
    for a, _ in spans:
        i = np.searchsorted(curve.knots, a, side="right") - 1
        local = control[max(i - curve.degree, 0) : i + 1]
        length = float(np.sum(np.linalg.norm(np.diff(local, axis=0), axis=1)))
        counts.append(max(min_per_span, int(np.ceil(length / spacing)) + 1))
    counts = np.array(counts)

    total = counts.sum()
    if total > max_samples:
        counts = np.maximum(2, (counts * (max_samples / total)).astype(int))

    return np.unique(np.concatenate([np.linspace(a, b, c) for (a, b), c in zip(spans, counts)]))


def _runs(mask: np.ndarray) -> List[Tuple[int, int]]:
    """(first, last) indices of the runs of True in ``mask``."""
    padded = np.concatenate([[False], mask, [False]]).astype(int)
    edges = np.diff(padded)
    starts = np.flatnonzero(edges == 1)
    stops = np.flatnonzero(edges == -1) - 1
    return list(zip(starts, stops))


def closest_points(
    curve: CurveData,
    point,
    tolerance: float,
    max_samples: int = 4096,
) -> Dict[str, Any]:
    """
    Local closest points between a curve and a point.

    The squared distance has derivative ``2 g(u)`` with
    ``g(u) = (C(u) - P) . C'(u)``. Isolated closest points are the sign
    changes of ``g`` from negative to positive, refined with Brent's method,
    plus a curve end when the distance grows away from it. Stretches where
    the along-track offset ``g / |C'|`` stays within ``tolerance`` *and* does
    not change along the arc are returned as parameter intervals: there the
    curve runs at constant distance from the point (e.g. an arc centred on it).

    Returns
    -------
    dict with keys status, points (sorted list of parameters),
    intervals (sorted list of (start, end) pairs)
    """
    point = np.asarray(point, dtype=float)
    u = sample_parameters(curve, tolerance, max_samples)
    d = curve.derivatives(u, 2)
    r = d[0] - point
    a, b = d[1], d[2]
    aa = np.sum(a * a, axis=1)
    g = np.sum(r * a, axis=1)

    if not (np.all(np.isfinite(g)) and np.all(np.isfinite(aa))):
        return {"status": -1, "message": "non-finite values while sampling the distance function"}

    with np.errstate(divide="ignore", invalid="ignore"):
        speed = np.sqrt(aa)
        along = np.where(speed > 0, g / speed, 0.0)
        # a stationary sample keeps its distance, so it counts as flat
        slope = np.where(
            aa > 0,
            (aa + np.sum(r * b, axis=1)) / aa - g * np.sum(a * b, axis=1) / aa**2,
            0.0,
        )
    flat = (np.abs(along) <= tolerance) & (np.abs(slope) <= _FLAT_SLOPE)

    intervals = []
    in_interval = np.zeros(len(u), dtype=bool)
    for first, last in _runs(flat):
        if last > first:
            intervals.append((float(u[first]), float(u[last])))
            in_interval[first : last + 1] = True

    def half_gradient(x):
        dx = curve.derivatives(x, 1)
        return float((dx[0] - point) @ dx[1])

    points = []
    if not in_interval[0] and (g[0] > 0 or (g[0] == 0 and g[1] > 0)):
        points.append(float(u[0]))
    for i in range(len(u) - 1):
        if in_interval[i] and in_interval[i + 1]:
            continue
        if g[i] < 0 <= g[i + 1]:
            if g[i + 1] == 0:
                points.append(float(u[i + 1]))
            else:
                points.append(float(scipy.optimize.brentq(half_gradient, u[i], u[i + 1], xtol=1e-12)))
    if not in_interval[-1] and g[-1] < 0:
        points.append(float(u[-1]))

    return {"status": 0, "points": sorted(set(points)), "intervals": intervals}


def local_closest_point(
    curve: CurveData,
    point,
    tolerance: float,
    guess: float,
    max_iterations: int = 50,
    bounds: Optional[Tuple[float, float]] = None,
) -> Dict[str, Any]:
    """
    Newton refinement of the closest point near ``guess``.

    Iterates on ``g(u) = (C(u) - P) . C'(u) = 0`` inside ``bounds`` (the
    curve domain by default).
    Where the distance is locally concave the step falls back to the
    projection on the tangent line, and steps that increase the distance are
    halved.

    Returns
    -------
    dict with keys:
        status : 0 converged, 1 stopped on a bound, -1 non-finite
            values, -2 iteration cap reached
        param : float (when status >= 0)
        iterations : int
    """
    point = np.asarray(point, dtype=float)
    lo, hi = (curve.start_param, curve.end_param) if bounds is None else bounds
    u = float(np.clip(guess, lo, hi))
    eps = max(1e-6 * tolerance, 1e-12)

    for iteration in range(1, max_iterations + 1):
        d = curve.derivatives(u, 2)
        r = d[0] - point
        a, b = d[1], d[2]
        aa = float(a @ a)
        g = float(r @ a)
        h = aa + float(r @ b)
        if not (np.isfinite(g) and np.isfinite(h)):
            return {"status": -1, "message": "non-finite values in Newton iteration", "iterations": iteration}
        if g == 0.0:
            return {"status": 0, "param": u, "iterations": iteration}

        if h > 0:
            step = -g / h
        elif aa > 0:
            step = -g / aa
        else:
            return {"status": -1, "message": f"zero speed at u={u} and no descent direction", "iterations": iteration}

        speed = np.sqrt(aa)
        current = float(r @ r)
        for _ in range(20):
            target = u + step
            u_new = min(max(target, lo), hi)
            r_new = curve.point(u_new) - point
            if float(r_new @ r_new) <= current or abs(step) * speed <= eps:
                break
            step *= 0.5

        moved = abs(u_new - u) * speed
        u = u_new
        if moved <= eps:
            status = 1 if target != u_new else 0
            return {"status": status, "param": u, "iterations": iteration}

    return {
        "status": -2,
        "message": f"no convergence after {max_iterations} iterations",
        "param": u,
        "iterations": max_iterations,
    }


def intersect(
    curve_a: CurveData,
    curve_b: CurveData,
    tolerance: float,
    max_samples: int = 4096,
    max_refinements: int = 16,
    first_only: bool = False,
) -> Dict[str, Any]:
    """
    Parameter pairs where two curves come within ``tolerance`` of each other.

    Both curves are sampled into polylines; sample pairs closer than the
    tolerance plus the sampling chord lengths are refined by bounded
    minimisation of ``|A(u) - B(v)|^2``.

    Returns
    -------
    dict with keys status, pairs (list of (u, v))
    """
    if curve_a.dimension != curve_b.dimension:
        return {"status": -1, "message": f"dimension mismatch: {curve_a.dimension} vs {curve_b.dimension}"}

    ua = sample_parameters(curve_a, tolerance, max_samples // 2)
    ub = sample_parameters(curve_b, tolerance, max_samples // 2)
    pa = curve_a.point(ua)
    pb = curve_b.point(ub)
    chord_a = float(np.max(np.linalg.norm(np.diff(pa, axis=0), axis=1)))
    chord_b = float(np.max(np.linalg.norm(np.diff(pb, axis=0), axis=1)))

    tree = cKDTree(pb)
    dist, idx = tree.query(pa, distance_upper_bound=tolerance + chord_a + chord_b)
    candidates = np.flatnonzero(np.isfinite(dist))
    candidates = candidates[np.argsort(dist[candidates])]

    def objective(x):
        da = curve_a.derivatives(x[0], 1)
        db = curve_b.derivatives(x[1], 1)
        diff = da[0] - db[0]
        return float(diff @ diff), np.array([2.0 * diff @ da[1], -2.0 * diff @ db[1]])

    bounds = [(curve_a.start_param, curve_a.end_param), (curve_b.start_param, curve_b.end_param)]
    pairs = []
    refined = []
    for i in candidates:
        if len(refined) >= max_refinements:
            break
        j = idx[i]
        if any(abs(i - ri) <= 1 and abs(j - rj) <= 1 for ri, rj in refined):
            continue
        refined.append((i, j))

        if dist[i] <= tolerance:
            pairs.append((float(ua[i]), float(ub[j])))
        else:
            result = scipy.optimize.minimize(
                objective, x0=[ua[i], ub[j]], jac=True, method="L-BFGS-B", bounds=bounds
            )
            if np.sqrt(max(result.fun, 0.0)) > tolerance:
                continue
            pairs.append((float(result.x[0]), float(result.x[1])))
        if first_only:
            break

    return {"status": 0, "pairs": pairs}
