"""
Spline Engine Configuration.

This module defines the YAML schema for the numerical settings of a spline
engine: its dimension, fitting order, geometric resolution and the iteration
caps of the bounded iterative algorithms.

Example YAML format:
    spline:
      dimension: 3             # 2 or 3 for robot trajectories
      curve_order: 4           # polynomial order (4 = cubic)
      geometric_resolution: 0.1

      # Bounded iterative algorithms
      simplify_iterations: 10  # refinement passes in Spline.simplify
      newton_iterations: 50    # local closest-point refinement
      max_search_samples: 4096 # sampling cap of global searches

The top-level ``spline`` key is optional.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Dict, Union

import yaml


@dataclass
class SplineConfig:
    """
    Numerical settings of one spline engine.

    Attributes
    ----------
    dimension : int
        Spatial dimension of the curve points
    curve_order : int
        Polynomial order used when fitting (degree + 1)
    geometric_resolution : float
        Tolerance of length integration, curvature sampling, closest-point
        search and default simplification
    simplify_iterations : int
        Maximum number of refinement passes in ``Spline.simplify``
    newton_iterations : int
        Maximum number of Newton steps in the local closest-point search
    max_search_samples : int
        Upper bound on the number of parameter samples used by the global
        closest-point and intersection searches
    """

    dimension: int = 3
    curve_order: int = 4
    geometric_resolution: float = 0.1
    simplify_iterations: int = 10
    newton_iterations: int = 50
    max_search_samples: int = 4096

    def __post_init__(self):
        if self.dimension < 1:
            raise ValueError(f"Dimension must be positive, got {self.dimension}")
        if self.curve_order < 2:
            raise ValueError(f"Curve order must be at least 2, got {self.curve_order}")
        if not self.geometric_resolution > 0:
            raise ValueError(
                f"Geometric resolution must be positive, got {self.geometric_resolution}"
            )
        if self.simplify_iterations < 1:
            raise ValueError(f"Need at least 1 simplify iteration, got {self.simplify_iterations}")
        if self.newton_iterations < 1:
            raise ValueError(f"Need at least 1 Newton iteration, got {self.newton_iterations}")
        if self.max_search_samples < 16:
            raise ValueError(f"Need at least 16 search samples, got {self.max_search_samples}")

    def with_resolution(self, geometric_resolution: float) -> "SplineConfig":
        """Copy of this configuration with another geometric resolution."""
        return replace(self, geometric_resolution=float(geometric_resolution))

    def to_dict(self) -> Dict[str, Any]:
        return {"spline": asdict(self)}

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "SplineConfig":
        """
        Load a spline configuration from a YAML file.

        Parameters
        ----------
        path : str or Path
            Path to the YAML file

        Returns
        -------
        SplineConfig
            Parsed configuration

        Raises
        ------
        FileNotFoundError
            If the file doesn't exist
        ValueError
            If a value is out of range or a key is unknown
        """
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_yaml_str(cls, yaml_str: str) -> "SplineConfig":
        """Load from a YAML string."""
        data = yaml.safe_load(yaml_str)
        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SplineConfig":
        """
        Create SplineConfig from a parsed dictionary.

        Parameters
        ----------
        data : dict
            Parsed YAML data, with or without the top-level ``spline`` key

        Returns
        -------
        SplineConfig
        """
        section = data.get("spline", data)
        if section is None:
            section = {}

        valid_keys = set(cls.__dataclass_fields__)
        unknown = set(section) - valid_keys
        if unknown:
            raise ValueError(f"Unknown spline configuration keys: {sorted(unknown)}. Valid: {sorted(valid_keys)}")

        return cls(
            dimension=int(section.get("dimension", 3)),
            curve_order=int(section.get("curve_order", 4)),
            geometric_resolution=float(section.get("geometric_resolution", 0.1)),
            simplify_iterations=int(section.get("simplify_iterations", 10)),
            newton_iterations=int(section.get("newton_iterations", 50)),
            max_search_samples=int(section.get("max_search_samples", 4096)),
        )
