#!/usr/bin/env python3
"""
Example: Following a spline path with a unicycle robot.

This script demonstrates the control-loop workflow:
1. Load the spline settings from YAML
2. Fit a reference path through waypoints
3. Close the loop on pose_error (distance, heading, parameter)
4. Plot the path, the robot trace and one projection

Usage:
    python follow_path.py
"""

from pathlib import Path

import numpy as np
import matplotlib.pyplot as plt

from trajspline import Spline, SplineConfig, Trajectory
from trajspline.plotting import plot_pose_error, plot_spline

# Path setup
SCRIPT_DIR = Path(__file__).parent
OUTPUT_DIR = SCRIPT_DIR / "results"

WAYPOINTS = np.array([
    [0.0, 0.0, 0.0],
    [4.0, 2.0, 0.0],
    [8.0, 0.0, 0.0],
    [12.0, -2.0, 0.0],
    [16.0, 0.0, 0.0],
])


def build_trajectory():
    """Fit the reference path with the YAML settings."""
    config = SplineConfig.from_yaml(SCRIPT_DIR / "spline.yaml")
    spline = Spline.from_config(config)
    spline.interpolate(WAYPOINTS)
    print(spline.describe())
    print(f"  max curvature: {spline.curvature_max():.3f} 1/m")
    return Trajectory(spline=spline, speed=1.0)


def simulate(trajectory, dt=0.05, k_distance=1.5, k_heading=2.0):
    """Unicycle with a proportional steering law on the pose errors."""
    spline = trajectory.spline
    position = np.array([0.0, -0.5, 0.0])
    heading = 0.3
    param = spline.start_param

    trace = [np.r_[position, heading, param]]
    while param < spline.end_param - 1e-3:
        d_err, h_err, param = spline.pose_error(position, heading, param)
        # signed curvature: the binormal points up on left turns
        curvature = spline.curvature_at(param) * np.sign(spline.frenet_frame(param)[2, 2])
        omega = trajectory.speed * curvature - k_distance * d_err - k_heading * h_err
        heading += omega * dt
        position[:2] += trajectory.speed * dt * np.array([np.cos(heading), np.sin(heading)])
        trace.append(np.r_[position, heading, param])
    return np.array(trace)


def main():
    trajectory = build_trajectory()
    trace = simulate(trajectory)
    print(f"Reached u={trace[-1, 4]:.2f} after {len(trace)} steps")

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 6))
    spline_2d = Spline(dimension=2, geometric_resolution=0.01)
    spline_2d.interpolate(WAYPOINTS[:, :2])
    plot_spline(spline_2d, ax=ax1, show_control_points=True, frames=5)
    ax1.plot(trace[:, 0], trace[:, 1], 'k', label='robot')
    ax1.legend()
    sample = trace[len(trace) // 3]
    plot_pose_error(trajectory.spline, sample[:3], sample[3], sample[4], ax=ax2)

    OUTPUT_DIR.mkdir(exist_ok=True)
    fig.savefig(OUTPUT_DIR / "follow_path.png", dpi=120)
    print(f"  -> Saved figure to {OUTPUT_DIR / 'follow_path.png'}")


if __name__ == "__main__":
    main()
