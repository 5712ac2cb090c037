"""
Simple pipeline: parse -> double -> format, with a guard layer, taps and a timeout.

Run with: python examples/simple.py
"""

import asyncio
import logging

from stepwise import (
    CancelSignal,
    CancelSource,
    Step,
    Trace,
    as_endo,
    as_step,
    layer,
    log_effect,
    logged,
    traced,
    with_,
)

parse = as_step(int)
double = as_endo(lambda v: v * 2)
fmt = as_step(lambda v: f"Result: {v}")


@layer
def guard(next_step: Step[int, str]):
    """Short-circuit negative inputs without running the core."""

    async def run(value: int, cancel: CancelSignal) -> str:
        if value < 0:
            return "negative"
        return await next_step(value, cancel)

    return run


async def main() -> None:
    trace = Trace()

    pipeline = (
        parse.tap(log_effect("parsed %r"))
        .then(double.then(traced(trace, "double")))
        .then(fmt)
        .then(logged("pipeline", level=logging.INFO))
    )
    print(await with_("21", pipeline))

    guarded = fmt.then(guard)
    print(await with_(-1, guarded))
    print(await with_(5, guarded))

    source = CancelSource()
    source.cancel_after(1.0)
    print(await with_("4", pipeline, source.signal))

    for event in trace.get_events():
        print(f"{event.id} {event.action} parent={event.parent_id} {event.info}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
