"""Adapters from plain Python callables and values to steps, effects and layers."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Generator
from typing import Any, Generic, TypeVar

from stepwise.kernel.cancel import CancelSignal
from stepwise.kernel.contracts import Effect, Endo, EndoLayer, Layer, Step

I = TypeVar("I")
O = TypeVar("O")
T = TypeVar("T")


class Resolved(Generic[T]):
    """An awaitable that completes with ``value`` without suspending.

    Unlike a coroutine it can be awaited any number of times.
    """

    __slots__ = ("value",)

    def __init__(self, value: T) -> None:
        self.value = value

    def __await__(self) -> Generator[Any, None, T]:
        return self.value
        yield  # unreachable, marks a generator

    def __repr__(self) -> str:
        return f"Resolved({self.value!r})"


def resolved(value: T) -> Resolved[T]:
    """Wrap a bare value as an already-completed awaitable.

    Handy in step bodies that have nothing to await:
    ``Step(lambda value, cancel: resolved(len(value)))``.
    """
    return Resolved(value)


def as_step(fn: Callable[[I], O]) -> Step[I, O]:
    """Lift a synchronous function into a step.

    ``fn`` runs when the step is awaited, so its exceptions surface as the
    awaited failure rather than escaping from the call itself.
    """

    async def run(value: I, cancel: CancelSignal) -> O:
        return fn(value)

    return Step(run)


def as_endo(fn: Callable[[T], T]) -> Endo[T]:
    """Lift a synchronous same-type function into an Endo."""

    async def run(value: T, cancel: CancelSignal) -> T:
        return fn(value)

    return Endo(run)


def as_effect(fn: Callable[[T], Any]) -> Effect[T]:
    """Lift a synchronous procedure into an effect. Its return value is dropped."""

    async def run(value: T, cancel: CancelSignal) -> None:
        fn(value)

    return Effect(run)


def step(fn: Callable[..., Awaitable[O]]) -> Step[Any, O]:
    """Decorator to create a step from an async function.

        @step
        async def fetch(url: str, cancel: CancelSignal) -> bytes: ...

        @step
        async def strip(text: str) -> str: ...

        @step
        async def poll(url: str, retries: int = 3, *, cancel: CancelSignal) -> bytes: ...

    The signal is passed positionally when the function has a second
    required positional parameter (or one named ``cancel``), and by keyword
    when it has a keyword-only ``cancel``. Otherwise the function is called
    without it; the signal is still forwarded to every other stage.
    """
    return Step(_accepting_cancel(fn, "step"))


def endo(fn: Callable[..., Awaitable[T]]) -> Endo[T]:
    """Decorator to create an Endo from a same-type async function."""
    return Endo(_accepting_cancel(fn, "endo"))


def effect(fn: Callable[..., Awaitable[Any]]) -> Effect[Any]:
    """Decorator to create an effect from an async function."""
    return Effect(_accepting_cancel(fn, "effect"))


def layer(fn: Callable[[Step[I, O]], Any]) -> Layer[I, O]:
    """Decorator to create a layer from a ``next_step -> step`` function.

        @layer
        def bracket(next_step):
            async def run(value, cancel):
                return f"[{await next_step(value, cancel)}]"
            return run
    """
    if not callable(fn):
        raise TypeError(f"@layer requires a callable, got {type(fn).__name__}")
    return Layer(fn)


def endo_layer(fn: Callable[[Endo[T]], Any]) -> EndoLayer[T]:
    """Decorator to create a layer over Endo steps."""
    if not callable(fn):
        raise TypeError(f"@endo_layer requires a callable, got {type(fn).__name__}")
    return EndoLayer(fn)


def _accepting_cancel(fn: Callable[..., Awaitable[Any]], decorator: str) -> Callable[[Any, CancelSignal], Awaitable[Any]]:
    if not inspect.iscoroutinefunction(fn):
        name = getattr(fn, "__name__", type(fn).__name__)
        raise TypeError(
            f"@{decorator} requires an async function, got {type(fn).__name__}. "
            f"Hint: add 'async' before 'def {name}'."
        )
    params = list(inspect.signature(fn).parameters.values())
    if _takes_cancel_positionally(params):
        return fn

    keyword = next((p.name for p in params if p.kind is p.KEYWORD_ONLY and _is_cancel(p)), None)
    if keyword is not None:

        async def run_with_keyword(value: Any, cancel: CancelSignal) -> Any:
            return await fn(value, **{keyword: cancel})

        return run_with_keyword

    async def run(value: Any, cancel: CancelSignal) -> Any:
        return await fn(value)

    return run


def _takes_cancel_positionally(params: list[inspect.Parameter]) -> bool:
    # Optional extras like ``factor=3`` never receive the signal.
    positional = [p for p in params if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)]
    if any(p.kind is p.VAR_POSITIONAL for p in params):
        return True
    if sum(1 for p in positional if p.default is p.empty) >= 2:
        return True
    return len(positional) >= 2 and _is_cancel(positional[1])


def _is_cancel(param: inspect.Parameter) -> bool:
    return param.name == "cancel" or param.annotation in (CancelSignal, "CancelSignal")
