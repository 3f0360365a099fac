"""
Differential geometry of curves: curvature, its variation along the arc and
the Frenet frame.

All functions take a :class:`CurveData` and parameter value(s) already known
to be inside the curve domain.
"""

from __future__ import annotations

import math

import numpy as np

from .bspline import CurveData

# Below this curvature a curve stretch is treated as straight
_STRAIGHT_CURVATURE = 1e-9


def normalize_angle(angle: float) -> float:
    """Wrap ``angle`` into (-pi, pi]."""
    wrapped = math.remainder(angle, 2.0 * math.pi)
    if wrapped <= -math.pi:
        wrapped += 2.0 * math.pi
    return wrapped


def _dot(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    return np.sum(x * y, axis=-1)


def curvature(curve: CurveData, u):
    """
    Unsigned curvature ``|C' x C''| / |C'|^3`` at parameter(s) ``u``.

    The cross product norm is computed as ``sqrt(|a|^2 |b|^2 - (a.b)^2)`` so
    the formula holds in any dimension. Zero-speed points report 0.
    """
    d = curve.derivatives(u, 2)
    a, b = d[1], d[2]
    aa, bb, ab = _dot(a, a), _dot(b, b), _dot(a, b)
    cross_sq = np.maximum(aa * bb - ab**2, 0.0)
    speed = np.sqrt(aa)
    with np.errstate(divide="ignore", invalid="ignore"):
        value = np.where(speed > 0, np.sqrt(cross_sq) / speed**3, 0.0)
    return float(value) if np.ndim(value) == 0 else value


def variation_of_curvature(curve: CurveData, u):
    """
    Derivative of the curvature with respect to arc length, d(kappa)/ds.

    With a = C', b = C'', c = C''' and N = |a|^2 |b|^2 - (a.b)^2:

        d(kappa)/du = N' / (2 sqrt(N) |a|^3) - 3 sqrt(N) (a.b) / |a|^5
        N'          = 2 (a.b)|b|^2 + 2 |a|^2 (b.c) - 2 (a.b)(|b|^2 + a.c)

    and d(kappa)/ds = d(kappa)/du / |a|. Straight stretches report 0.
    """
    d = curve.derivatives(u, 3)
    a, b, c = d[1], d[2], d[3]
    aa, bb, ab = _dot(a, a), _dot(b, b), _dot(a, b)
    bc, ac = _dot(b, c), _dot(a, c)
    n = np.maximum(aa * bb - ab**2, 0.0)
    dn = 2.0 * ab * bb + 2.0 * aa * bc - 2.0 * ab * (bb + ac)
    root = np.sqrt(n)
    speed = np.sqrt(aa)
    with np.errstate(divide="ignore", invalid="ignore"):
        dk_du = dn / (2.0 * root * speed**3) - 3.0 * root * ab / speed**5
        value = np.where((root > 0) & (speed > 0), dk_du / speed, 0.0)
    return float(value) if np.ndim(value) == 0 else value


def _embed3(vector: np.ndarray) -> np.ndarray:
    out = np.zeros(3)
    out[: min(3, vector.size)] = vector[:3]
    return out


def _unit(vector: np.ndarray) -> np.ndarray:
    return vector / np.linalg.norm(vector)


def frenet_frame(curve: CurveData, u: float) -> np.ndarray:
    """
    Frenet frame at ``u`` as a 3x3 matrix with rows (tangent, normal, binormal).

    2-D curves are embedded in the z = 0 plane. On straight stretches the
    normal is the left normal in the xy-plane, so planar trajectories always
    get a binormal along +z.
    """
    d = curve.derivatives(u, 2)
    a = _embed3(d[1])
    b = _embed3(d[2])

    speed = np.linalg.norm(a)
    if speed > 0:
        tangent = a / speed
    elif np.linalg.norm(b) > 0:
        # cusp: the curve leaves along the second derivative
        tangent = _unit(b)
    else:
        tangent = np.array([1.0, 0.0, 0.0])

    cross = np.cross(a, b)
    bending = np.linalg.norm(cross) / speed**3 if speed > 0 else 0.0
    if bending > _STRAIGHT_CURVATURE:
        binormal = cross / np.linalg.norm(cross)
        normal = np.cross(binormal, tangent)
    else:
        up = np.array([0.0, 0.0, 1.0])
        if abs(tangent @ up) < 1.0 - 1e-9:
            normal = _unit(np.cross(up, tangent))
        else:
            normal = _unit(np.cross(tangent, np.array([1.0, 0.0, 0.0])))
    binormal = np.cross(tangent, normal)
    return np.vstack([tangent, _unit(normal), _unit(binormal)])
