"""Stepwise - an algebra of async steps, layers and effects.

Build a pipeline with ``then``, observe it with ``tap``/``tap_input`` and run
it with ``with_``:

    pipeline = parse.then(double).then(fmt)
    result = await with_("21", pipeline)
"""

import logging

from .combinators import (
    Resolved,
    as_effect,
    as_endo,
    as_step,
    chain,
    effect,
    endo,
    endo_layer,
    ignore,
    layer,
    resolved,
    stack,
    step,
    tap,
    tap_input,
    then,
    with_,
)
from .kernel import (
    CancelSignal,
    CancelSource,
    CompositionError,
    Effect,
    Endo,
    EndoLayer,
    Evidence,
    Layer,
    OperationCancelled,
    Step,
    StepwiseError,
    Trace,
    contract,
    expand,
    identity,
)
from .runtime import log_effect, logged, traced
from .structured import CastError, cast

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Contracts
    "Step",
    "Endo",
    "Effect",
    "Layer",
    "EndoLayer",
    # Operators
    "then",
    "tap",
    "tap_input",
    "ignore",
    "with_",
    "chain",
    "stack",
    "expand",
    "contract",
    "identity",
    # Adapters
    "as_step",
    "as_endo",
    "as_effect",
    "resolved",
    "Resolved",
    "step",
    "endo",
    "effect",
    "layer",
    "endo_layer",
    # Cancellation
    "CancelSignal",
    "CancelSource",
    # Errors
    "StepwiseError",
    "OperationCancelled",
    "CompositionError",
    "CastError",
    # Structured
    "cast",
    # Observability
    "logged",
    "log_effect",
    "traced",
    "Trace",
    "Evidence",
]
