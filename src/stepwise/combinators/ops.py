"""Combinator primitives: then, tap, tap_input, ignore, with_, chain, stack.

Free-function spellings of the operators defined on Step and Layer, plus the
invocation operator and two variadic folds.

Combinators satisfy the following algebraic laws:

1. Identity: identity().then(s) == s == s.then(identity())
2. Associativity: a.then(b).then(c) == a.then(b.then(c))
3. Round trip: contract(expand(e)) == e and expand(contract(s)) == s
4. Tap transparency: s.tap(e) and s.tap_input(e) return exactly what s returns
5. Onion order: inner.then(outer) runs outer-before, inner-before,
   inner-after, outer-after around the core
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from functools import reduce
from typing import Any, TypeVar

from stepwise.kernel.cancel import CancelSignal
from stepwise.kernel.contracts import Effect, Layer, Step
from stepwise.kernel.errors import CompositionError

I = TypeVar("I")
O = TypeVar("O")
R = TypeVar("R")


def then(first: Step[I, Any] | Layer[I, O], second: Step[Any, R] | Layer[I, O]) -> Any:
    """Compose two operands by shape. Same as ``first.then(second)``.

    Args:
        first: A step, or the inner layer of a layer pair.
        second: The step to run next, the layer to apply, or the outer layer.

    Returns:
        Step or Layer, following the shape rules of ``Step.then`` and ``Layer.then``.
    """
    if not isinstance(first, (Step, Layer)):
        raise CompositionError("then", first)
    return first.then(second)  # type: ignore[arg-type]


def tap(step: Step[I, O], effect: Effect[O] | Callable[[O, CancelSignal], Awaitable[Any]]) -> Step[I, O]:
    """Observe the step's result with ``effect``. Same as ``step.tap(effect)``."""
    return step.tap(effect)


def tap_input(step: Step[I, O], effect: Effect[I] | Callable[[I, CancelSignal], Awaitable[Any]]) -> Step[I, O]:
    """Observe the step's input with ``effect``. Same as ``step.tap_input(effect)``."""
    return step.tap_input(effect)


def ignore(step: Step[I, Any]) -> Effect[I]:
    """Run the step for its side effects only."""
    return step.ignore()


async def with_(
    value: I,
    step: Step[I, O] | Callable[[I, CancelSignal], Awaitable[O]],
    cancel: CancelSignal | None = None,
) -> O:
    """Feed ``value`` into ``step`` and await its result.

    The entry point of every pipeline: ``await with_(value, pipeline, cancel)``.
    Named with a trailing underscore because ``with`` is a keyword.

    Args:
        value: Input for the first stage.
        step: The step or composed pipeline to run.
        cancel: Signal threaded through every stage. Defaults to a signal
            that is never cancelled.

    Returns:
        Whatever the pipeline resolves to.

    Raises:
        TypeError: If ``cancel`` is not a CancelSignal.
    """
    if cancel is None:
        cancel = CancelSignal.NONE
    elif not isinstance(cancel, CancelSignal):
        raise TypeError(f"cancel must be a CancelSignal, got {type(cancel).__name__}")
    return await step(value, cancel)


def chain(first: Step[Any, Any] | Layer[Any, Any], *rest: Step[Any, Any] | Layer[Any, Any]) -> Any:
    """Left fold of ``then``: ``chain(a, b, c) == a.then(b).then(c)``."""
    return reduce(then, rest, first)


def stack(*layers: Layer[I, O]) -> Layer[I, O]:
    """Compose layers innermost first: ``stack(a, b, c)(core) == c(b(a(core)))``.

    Raises:
        ValueError: If no layers are given.
        CompositionError: If any operand is not a layer.
    """
    if not layers:
        raise ValueError("stack() requires at least one layer")
    for layer in layers:
        if not isinstance(layer, Layer):
            raise CompositionError("stack", layer)
    return reduce(lambda inner, outer: inner.then(outer), layers)
