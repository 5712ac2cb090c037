"""Opt-in observability: logging and tracing layers, and a logging effect.

The composition operators never log or trace on their own. Attach these
where you want visibility:

    pipeline = parse.then(logged("parse")).then(fmt).then(traced(trace, "fmt"))
"""

from __future__ import annotations

import logging
import time
from typing import Any

from stepwise.kernel.cancel import CancelSignal
from stepwise.kernel.contracts import Effect, Layer, Step
from stepwise.kernel.errors import OperationCancelled
from stepwise.kernel.trace import Trace


def logged(name: str, logger: logging.Logger | None = None, level: int = logging.DEBUG) -> Layer[Any, Any]:
    """Layer that logs when the wrapped step starts, finishes or fails.

    Failures are logged at WARNING (cancellation at ``level``) and re-raised
    unchanged.

    Args:
        name: Label used in every log line
        logger: Target logger; defaults to this module's logger
        level: Level for start/finish lines
    """
    log = logger if logger is not None else logging.getLogger(__name__)

    def wrap(next_step: Step[Any, Any]) -> Step[Any, Any]:
        async def run(value: Any, cancel: CancelSignal) -> Any:
            log.log(level, "Step %s started", name)
            start_time = time.perf_counter()
            try:
                result = await next_step(value, cancel)
            except OperationCancelled as exc:
                log.log(level, "Step %s cancelled: %s", name, exc.reason)
                raise
            except Exception as exc:
                duration_ms = (time.perf_counter() - start_time) * 1000
                log.warning(
                    "Step %s failed after %.2fms: %s: %s",
                    name,
                    duration_ms,
                    type(exc).__name__,
                    exc,
                )
                raise
            duration_ms = (time.perf_counter() - start_time) * 1000
            log.log(level, "Step %s finished in %.2fms", name, duration_ms)
            return result

        return Step(run)

    return Layer(wrap)


def log_effect(message: str, logger: logging.Logger | None = None, level: int = logging.INFO) -> Effect[Any]:
    """Effect that logs ``message % value``. Use with ``tap`` or ``tap_input``."""
    log = logger if logger is not None else logging.getLogger(__name__)

    async def run(value: Any, cancel: CancelSignal) -> None:
        log.log(level, message, value)

    return Effect(run)


def traced(trace: Trace, name: str) -> Layer[Any, Any]:
    """Layer that records step_begin / step_end / step_error evidence.

    Events recorded by nested traced steps get the enclosing step_begin as
    their parent. Failures are recorded and re-raised unchanged.
    """

    def wrap(next_step: Step[Any, Any]) -> Step[Any, Any]:
        async def run(value: Any, cancel: CancelSignal) -> Any:
            if not trace.enabled:
                return await next_step(value, cancel)

            step_id = trace.record("step_begin", info={"step": name})
            token = trace.push(step_id)
            start_time = time.perf_counter()
            try:
                result = await next_step(value, cancel)
            except Exception as exc:
                trace.record(
                    "step_error",
                    info={"step": name, "error": repr(exc)},
                    parent_id=step_id,
                )
                raise
            finally:
                trace.pop(token)
            duration_ms = (time.perf_counter() - start_time) * 1000
            trace.record(
                "step_end",
                info={"step": name},
                parent_id=step_id,
                duration_ms=duration_ms,
            )
            return result

        return Step(run)

    return Layer(wrap)
