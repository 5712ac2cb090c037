"""Errors raised by stepwise itself. Failures from user steps pass through unmodified."""

from __future__ import annotations

from typing import Any


class StepwiseError(Exception):
    """Base exception for all stepwise errors."""

    pass


class OperationCancelled(StepwiseError):
    """Raised when a component checks a cancelled signal.

    Only ``CancelSignal.raise_if_cancelled()`` raises this. The composition
    operators never check the signal on their own.

    Attributes:
        reason: Whatever the caller passed to ``CancelSource.cancel()``.
    """

    def __init__(self, reason: Any = None) -> None:
        self.reason = reason
        message = "Operation was cancelled"
        if reason is not None:
            message = f"{message}: {reason}"
        super().__init__(message)


class CompositionError(StepwiseError, TypeError):
    """Raised when an operand of ``then`` is neither a step nor a layer."""

    def __init__(self, operator: str, operand: object) -> None:
        self.operator = operator
        self.operand = operand
        super().__init__(
            f"{operator}() cannot compose {type(operand).__name__!r}; "
            "expected a Step or a Layer"
        )
