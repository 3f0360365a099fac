"""
Matplotlib helpers to inspect splines and the pose errors derived from them.
"""

import numpy as np
import matplotlib.pyplot as plt

from trajspline.spline import Spline


def _control_points(spline: Spline) -> np.ndarray:
    coords = spline.coordinates().reshape(-1, spline.coordinates_stride)
    if spline.is_rational():
        return coords[:, :-1] / coords[:, -1:]
    return coords


def plot_spline(spline: Spline, ax=None, num_points=200, show_control_points=False, frames=0):
    """
    Draw a 2-D or 3-D spline.

    Parameters:
        spline              : Spline to draw (not empty)
        ax                  : matplotlib axes, created when None (3-D axes for 3-D splines)
        num_points          : number of evaluation points along the curve
        show_control_points : also draw the control polygon
        frames              : number of Frenet frames drawn at evenly spaced parameters
                              (tangent red, normal green, binormal blue)

    Returns:
        ax
    """
    three_d = spline.dimension == 3
    if ax is None:
        fig = plt.figure(figsize=(8, 6))
        ax = fig.add_subplot(projection='3d') if three_d else fig.add_subplot()

    _, points = spline.sample(num_points)
    if spline.is_singleton:
        ax.plot(*points[:1].T, 'bo', label='spline')
        return ax
    ax.plot(*points.T, 'b', label='spline')

    if show_control_points:
        ax.plot(*_control_points(spline).T, 'o--', color='gray', alpha=0.6, label='control polygon')

    if frames > 0 and spline.dimension in (2, 3):
        scale = 0.1 * spline.curve_length()
        for u in np.linspace(spline.start_param, spline.end_param, frames):
            frame = spline.frenet_frame(u)
            p = spline.point_at(u)
            for axis, color in zip(frame, ('r', 'g', 'b')):
                if three_d:
                    ax.quiver(*p, *axis, length=scale, color=color)
                else:
                    ax.quiver(p[0], p[1], axis[0], axis[1], color=color,
                              angles='xy', scale_units='xy', scale=1.0 / scale)

    ax.set_xlabel('x, m')
    ax.set_ylabel('y, m')
    if three_d:
        ax.set_zlabel('z, m')
    else:
        ax.set_aspect('equal', adjustable='datalim')
    return ax


def plot_pose_error(spline: Spline, position, heading, guess, ax=None):
    """
    Draw, in the xy-plane, a robot pose together with the curve point that
    ``Spline.pose_error`` projects it on.

    Returns:
        ax
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 6))

    position = np.asarray(position, dtype=float).ravel()
    d_err, h_err, param = spline.pose_error(position, heading, guess)
    closest = spline.point_at(param)

    _, points = spline.sample(200)
    ax.plot(points[:, 0], points[:, 1], 'b', label='spline')
    ax.plot(position[0], position[1], 'ko', label='robot')
    ax.plot([position[0], closest[0]], [position[1], closest[1]], 'r--', label='distance error')

    arrow = 0.05 * max(spline.curve_length(), 1e-3)
    ax.arrow(position[0], position[1], arrow * np.cos(heading), arrow * np.sin(heading),
             width=0.1 * arrow, color='k')
    path_heading = spline.heading(param)
    ax.arrow(closest[0], closest[1], arrow * np.cos(path_heading), arrow * np.sin(path_heading),
             width=0.1 * arrow, color='b')

    ax.set_title(f'd = {d_err:.3f} m, heading error = {np.degrees(h_err):.1f} deg, u = {param:.3f}')
    ax.set_xlabel('x, m')
    ax.set_ylabel('y, m')
    ax.set_aspect('equal', adjustable='datalim')
    ax.legend()
    return ax
