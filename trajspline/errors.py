"""
Exceptions raised by the spline engine.

Every error derives from :class:`SplineError` and from the builtin exception
closest in meaning, so callers may catch either ``SplineError`` or e.g.
``ValueError``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SplineError(Exception):
    """Base class for all spline engine errors."""


class OutOfRangeError(SplineError, ValueError):
    """A curve parameter lies outside ``[start_param, end_param]``."""


class InvalidOperationError(SplineError, RuntimeError):
    """The operation is undefined for the current curve representation."""


class DimensionMismatchError(SplineError, ValueError):
    """Two curves (or a curve and its input data) disagree on dimension."""


class CurveFitError(SplineError, RuntimeError):
    """
    The fitting kernel rejected its input.

    Attributes
    ----------
    context : dict
        Diagnostic payload. For bridge failures in ``Spline.join`` it holds
        the gap distance, the parameter ranges and singleton flags of both
        curves and the bridging points.
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = dict(context or {})

    def __str__(self) -> str:
        base = super().__str__()
        if not self.context:
            return base
        details = ", ".join(f"{key}={value!r}" for key, value in self.context.items())
        return f"{base} ({details})"


class NumericalError(SplineError, ArithmeticError):
    """An iterative kernel routine did not converge."""


class LogicError(SplineError, RuntimeError):
    """The kernel returned a result that violates an engine invariant."""


__all__ = [
    "SplineError",
    "OutOfRangeError",
    "InvalidOperationError",
    "DimensionMismatchError",
    "CurveFitError",
    "NumericalError",
    "LogicError",
]
