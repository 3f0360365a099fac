"""
Spline configuration - YAML-backed numerical settings.

Example usage:
    from trajspline.config import SplineConfig
    from trajspline import Spline

    config = SplineConfig.from_yaml("spline.yaml")
    spline = Spline.from_config(config)
"""

from trajspline.config.spline_config import SplineConfig

__all__ = ["SplineConfig"]
