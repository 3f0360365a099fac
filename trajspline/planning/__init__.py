"""Trajectory planning utilities."""

from .trajectory import Trajectory

__all__ = [
    "Trajectory",
]
