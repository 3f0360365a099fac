__version__ = "0.1.0"
__license__ = "Apache-2.0"


# Plotting pulls in matplotlib; load it only when accessed.
import importlib
from typing import Any

__all__ = [
    "Spline",
    "SplineConfig",
    "Trajectory",
    "CurveKind",
    "interpolate",
    "config",
    "errors",
    "kernel",
    "planning",
    "plotting",
]

_SUBMODULES = {
    "plotting": "trajspline.plotting",
}


def __getattr__(name: str) -> Any:
    if name in _SUBMODULES:
        module = importlib.import_module(_SUBMODULES[name])
        globals()[name] = module
        return module
    raise AttributeError(f"module {__name__} has no attribute {name!r}")


# Explicitly import key modules
from . import config
from . import errors
from . import kernel
from . import planning
from .config import SplineConfig
from .kernel.bspline import CurveKind
from .planning import Trajectory
from .spline import Spline, interpolate
