from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import numpy as np

from trajspline.spline import Spline


@dataclass
class Trajectory:
    """A path to follow plus the signed speed along it."""

    spline: Spline = field(default_factory=lambda: Spline(dimension=3))
    speed: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    def drive_forward(self) -> bool:
        """True when the path is traversed in increasing parameter direction."""
        return self.speed >= 0

    @classmethod
    def from_waypoints(
        cls,
        waypoints,
        speed: float = 0.0,
        geometric_resolution: float = 0.1,
        parameters: Optional[np.ndarray] = None,
    ) -> "Trajectory":
        """Fit a cubic 3-D path through ``waypoints``."""
        spline = Spline(dimension=3, curve_order=4, geometric_resolution=geometric_resolution)
        spline.interpolate(waypoints, parameters)
        return cls(spline=spline, speed=speed)
