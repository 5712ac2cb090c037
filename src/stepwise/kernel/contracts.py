"""Step, Layer and Effect - the three shapes a pipeline is built from.

A ``Step`` wraps an async function ``(value, cancel) -> result``. ``Endo`` is
the same shape restricted to one type (input type == output type); it exists
only so that ``then`` can pick the homomorphic rules. ``expand`` and
``contract`` convert between the two without touching behavior.

Composition never awaits anything itself: ``then``, ``tap`` and friends only
wire functions together. Every failure raised while the wired pipeline runs
reaches the caller unchanged.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, overload

from stepwise.kernel.cancel import CancelSignal
from stepwise.kernel.errors import CompositionError

I = TypeVar("I")
O = TypeVar("O")
R = TypeVar("R")
T = TypeVar("T")


Run = Callable[[I, CancelSignal], Awaitable[O]]


@dataclass(frozen=True)
class Step(Generic[I, O]):
    """An async unary transform from ``I`` to ``O``.

    Steps are plain values: stateless, shareable, callable any number of
    times. Composition returns new steps and never mutates its operands.
    """

    _run: Run[I, O]

    async def __call__(self, value: I, cancel: CancelSignal | None = None) -> O:
        """Run the step with ``value`` and forward ``cancel`` untouched.

        ``None`` stands for ``CancelSignal.NONE``, as it does for ``with_``.
        """
        return await self._run(value, CancelSignal.NONE if cancel is None else cancel)

    def _create(self, run_func: Run[I, O]) -> Step[I, O]:
        """Create a step of the same shape as this one."""
        return Step(run_func)

    @overload
    def then(self, other: Layer[I, O]) -> Step[I, O]: ...

    @overload
    def then(self, other: Step[O, R]) -> Step[I, R]: ...

    def then(self, other: Any) -> Any:
        """Sequence another step after this one, or wrap this step in a layer.

        Args:
            other: A ``Step`` fed with this step's result, or a ``Layer``
                applied to this step

        Returns:
            A new step. It is an ``Endo`` only when both operands are.

        Raises:
            CompositionError: If ``other`` is neither a step nor a layer
        """
        if isinstance(other, Layer):
            return _apply(self, other)
        if isinstance(other, Step):
            return _sequence(self, other)
        raise CompositionError("then", other)

    def __rshift__(self, other: Any) -> Any:
        if not isinstance(other, (Step, Layer)):
            return NotImplemented
        return self.then(other)

    def tap(self, effect: Effect[O] | Callable[[O, CancelSignal], Awaitable[Any]]) -> Step[I, O]:
        """Run ``effect`` on this step's result, then return that result.

        The effect runs strictly after the step. If the step fails the effect
        never runs; if the effect fails its failure propagates.
        """
        observer = _as_effect(effect)

        async def tapped(value: I, cancel: CancelSignal) -> O:
            result = await self(value, cancel)
            await observer(result, cancel)
            return result

        return self._create(tapped)

    def tap_input(self, effect: Effect[I] | Callable[[I, CancelSignal], Awaitable[Any]]) -> Step[I, O]:
        """Run ``effect`` on the input, then run this step on the same input.

        If the effect fails the step never runs.
        """
        observer = _as_effect(effect)

        async def tapped(value: I, cancel: CancelSignal) -> O:
            await observer(value, cancel)
            return await self(value, cancel)

        return self._create(tapped)

    def ignore(self) -> Effect[I]:
        """Turn this step into an effect that runs it and drops the result."""
        return Effect(self)


class Endo(Step[T, T]):
    """A step whose input and output share one type.

    Runtime behavior is identical to ``Step``; the class is a tag that keeps
    homomorphic results homomorphic through ``then``, ``tap`` and layers.
    """

    def _create(self, run_func: Run[T, T]) -> Endo[T]:
        return Endo(run_func)

    @overload
    def then(self, other: Endo[T]) -> Endo[T]: ...

    @overload
    def then(self, other: Layer[T, T]) -> Endo[T]: ...

    @overload
    def then(self, other: Step[T, R]) -> Step[T, R]: ...

    def then(self, other: Any) -> Any:
        return super().then(other)


@dataclass(frozen=True)
class Effect(Generic[T]):
    """An async observer: consumes a value, produces nothing.

    Whatever the wrapped callable returns is discarded; awaiting an effect
    only conveys completion or failure.
    """

    _run: Callable[[T, CancelSignal], Awaitable[Any]]

    async def __call__(self, value: T, cancel: CancelSignal | None = None) -> None:
        await self._run(value, CancelSignal.NONE if cancel is None else cancel)


@dataclass(frozen=True)
class Layer(Generic[I, O]):
    """Middleware: a function from the next step to a decorated step.

    The wrapping function decides what runs before ``next_step``, whether
    ``next_step`` runs at all, and what happens to its result or failure.
    It may return a ``Step`` or any async callable ``(value, cancel)``.
    """

    _wrap: Callable[[Step[I, O]], Any]

    def __call__(self, next_step: Step[I, O]) -> Step[I, O]:
        return self._coerce(self._wrap(next_step))

    def _coerce(self, wrapped: Any) -> Step[I, O]:
        if isinstance(wrapped, Step):
            return wrapped
        if callable(wrapped):
            return Step(wrapped)
        raise CompositionError("Layer", wrapped)

    def then(self, other: Layer[I, O]) -> Layer[I, O]:
        """Compose two layers. ``self`` is the inner layer, ``other`` the outer.

        ``self.then(other)(core)`` is ``other(self(core))``, so the outer
        layer's pre-logic runs first and its post-logic runs last.

        Raises:
            CompositionError: If ``other`` is not a layer
        """
        if not isinstance(other, Layer):
            raise CompositionError("then", other)
        inner, outer = self, other

        def wrap(core: Step[I, O]) -> Step[I, O]:
            return _apply(_apply(core, inner), outer)

        if isinstance(inner, EndoLayer) and isinstance(outer, EndoLayer):
            return EndoLayer(wrap)
        return Layer(wrap)

    def __rshift__(self, other: Any) -> Any:
        if not isinstance(other, Layer):
            return NotImplemented
        return self.then(other)


class EndoLayer(Layer[T, T]):
    """A layer over ``Endo`` steps. It always receives and returns an ``Endo``."""

    def __call__(self, next_step: Step[T, T]) -> Endo[T]:
        if not isinstance(next_step, Endo):
            next_step = contract(next_step)
        return self._coerce(self._wrap(next_step))

    def _coerce(self, wrapped: Any) -> Endo[T]:
        step = super()._coerce(wrapped)
        if isinstance(step, Endo):
            return step
        return contract(step)


def expand(step: Endo[T]) -> Step[T, T]:
    """Widen an ``Endo`` into a plain ``Step``. Calls go straight through."""
    return Step(step._run)


def contract(step: Step[T, T]) -> Endo[T]:
    """Narrow a same-typed ``Step`` into an ``Endo``. Inverse of ``expand``."""
    return Endo(step._run)


async def _pass_through(value: Any, cancel: CancelSignal) -> Any:
    return value


_IDENTITY: Endo[Any] = Endo(_pass_through)


def identity() -> Endo[T]:
    """The neutral element of ``then``: resolves with its input unchanged.

    The signal is accepted but never inspected, so a cancelled signal does
    not make identity fail.
    """
    return _IDENTITY


def _sequence(first: Step[Any, Any], second: Step[Any, Any]) -> Step[Any, Any]:
    async def sequenced(value: Any, cancel: CancelSignal) -> Any:
        return await second(await first(value, cancel), cancel)

    if isinstance(first, Endo) and isinstance(second, Endo):
        return Endo(sequenced)
    return Step(sequenced)


def _apply(core: Step[Any, Any], layer: Layer[Any, Any]) -> Step[Any, Any]:
    # Bridge mismatched shapes so the result keeps the shape of the core.
    homomorphic_core = isinstance(core, Endo)
    homomorphic_layer = isinstance(layer, EndoLayer)
    if homomorphic_core and not homomorphic_layer:
        return contract(layer(expand(core)))
    if homomorphic_layer and not homomorphic_core:
        return expand(layer(contract(core)))
    wrapped = layer(core)
    # A plain layer may hand back an Endo; a plain core stays plain.
    if not homomorphic_core and isinstance(wrapped, Endo):
        return expand(wrapped)
    return wrapped


def _as_effect(effect: Any) -> Effect[Any]:
    if isinstance(effect, Effect):
        return effect
    if callable(effect):
        return Effect(effect)
    raise TypeError(f"Expected an Effect or async callable, got {type(effect).__name__}")
