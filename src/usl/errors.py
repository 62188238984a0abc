"""Exception hierarchy for fitting and evaluating USL models."""

from __future__ import annotations

from typing import Any, Dict, Optional


class USLError(Exception):
    """Base class for every error raised by the usl package."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}


class InsufficientDataError(USLError, ValueError):
    """Too few measurements to estimate three coefficients."""

    def __init__(self, count: int, required: int):
        super().__init__(
            f"need at least {required} measurements, got {count}",
            context={"count": count, "required": required},
        )
        self.count = count
        self.required = required


class NonConvergenceError(USLError):
    """The least-squares solver stopped without meeting a convergence test."""

    def __init__(self, message: str, iterations: int = 0, **kwargs):
        super().__init__(message, **kwargs)
        self.iterations = iterations


class FitDidNotConvergeError(USLError):
    """A model could not be built because the solver failed.

    The solver error is available as ``__cause__``.
    """


class UndefinedForLimitlessSystemError(USLError, ZeroDivisionError):
    """Peak values were requested from a model with zero coherency cost."""


class MalformedInputError(USLError, ValueError):
    """Measurement input could not be parsed."""

    def __init__(self, message: str, line: Optional[int] = None,
                 column: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.line = line
        self.column = column
