"""Kernel layer - the step, layer and effect contracts plus cancellation and tracing."""

from stepwise.kernel.cancel import CancelSignal, CancelSource
from stepwise.kernel.contracts import (
    Effect,
    Endo,
    EndoLayer,
    Layer,
    Step,
    contract,
    expand,
    identity,
)
from stepwise.kernel.errors import CompositionError, OperationCancelled, StepwiseError
from stepwise.kernel.trace import Evidence, Trace

__all__ = [
    "Step",
    "Endo",
    "Effect",
    "Layer",
    "EndoLayer",
    "expand",
    "contract",
    "identity",
    # Cancellation
    "CancelSignal",
    "CancelSource",
    # Errors
    "StepwiseError",
    "OperationCancelled",
    "CompositionError",
    # Tracing
    "Evidence",
    "Trace",
]
