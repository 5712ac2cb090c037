"""Casting step: turn raw pipeline input into a validated, typed value."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from stepwise.kernel.cancel import CancelSignal
from stepwise.kernel.contracts import Step
from stepwise.structured.errors import CastError
from stepwise.structured.parser import parse_json_if_needed

T = TypeVar("T")


def cast(target: type[T] | Any, *, parse_json: bool = True) -> Step[Any, T]:
    """Create a step that validates its input against ``target``.

    ``target`` is anything pydantic can build a TypeAdapter for: a BaseModel
    subclass, a dataclass, a TypedDict, or a plain type such as ``int`` or
    ``list[str]``. The adapter is built once, here, and shared by every run.

    Args:
        target: The type to validate into
        parse_json: Parse ``str``/``bytes`` input as JSON before validating.
            Turn this off when the target itself is textual.

    Returns:
        A step resolving to the validated value

    Raises:
        CastError: At run time, when parsing or validation fails
    """
    adapter: TypeAdapter[T] = TypeAdapter(target)
    name = getattr(target, "__name__", repr(target))

    async def run(value: Any, cancel: CancelSignal) -> T:
        raw = parse_json_if_needed(value) if parse_json else value
        try:
            return adapter.validate_python(raw)
        except ValidationError as e:
            raise CastError(
                f"Value does not match {name}: {e.error_count()} validation error(s)\n{e}",
                value,
            ) from e

    return Step(run)
