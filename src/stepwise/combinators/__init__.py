"""Combinators - composition operators and adapters for steps, layers and effects."""

from stepwise.combinators.adapters import (
    Resolved,
    as_effect,
    as_endo,
    as_step,
    effect,
    endo,
    endo_layer,
    layer,
    resolved,
    step,
)
from stepwise.combinators.ops import chain, ignore, stack, tap, tap_input, then, with_

__all__ = [
    # Operators
    "then",
    "tap",
    "tap_input",
    "ignore",
    "with_",
    "chain",
    "stack",
    # Adapters
    "as_step",
    "as_endo",
    "as_effect",
    "resolved",
    "Resolved",
    # Decorators
    "step",
    "endo",
    "effect",
    "layer",
    "endo_layer",
]
