import asyncio
import logging

import pytest

from stepwise import (
    CancelSignal,
    CancelSource,
    Endo,
    OperationCancelled,
    Step,
    Trace,
    as_endo,
    as_step,
    log_effect,
    logged,
    resolved,
    traced,
    with_,
)
from fakes import Boom, failing_step

LOGGER_NAME = "tests.observe"


def test_logged_records_start_and_finish(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger(LOGGER_NAME)
    pipeline = as_step(lambda v: v + 1).then(logged("increment", logger=logger))

    with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
        result = asyncio.run(with_(1, pipeline))

    assert result == 2
    messages = [r.getMessage() for r in caplog.records if r.name == LOGGER_NAME]
    assert messages[0] == "Step increment started"
    assert messages[1].startswith("Step increment finished in ")


def test_logged_logs_failure_and_reraises(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger(LOGGER_NAME)
    error = Boom("bad input")
    pipeline = failing_step(error).then(logged("fragile", logger=logger))

    with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
        with pytest.raises(Boom) as exc_info:
            asyncio.run(with_(1, pipeline))

    assert exc_info.value is error
    warnings = [r for r in caplog.records if r.name == LOGGER_NAME and r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "Step fragile failed" in warnings[0].getMessage()
    assert "Boom: bad input" in warnings[0].getMessage()


def test_logged_reports_cancellation(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger(LOGGER_NAME)
    source = CancelSource()
    source.cancel("user abort")

    def checking(value: int, cancel: CancelSignal):
        cancel.raise_if_cancelled()
        return resolved(value)

    pipeline = Step(checking).then(logged("checked", logger=logger, level=logging.INFO))

    with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
        with pytest.raises(OperationCancelled):
            asyncio.run(with_(1, pipeline, source.signal))

    messages = [r.getMessage() for r in caplog.records if r.name == LOGGER_NAME]
    assert "Step checked cancelled: user abort" in messages
    assert not any(r.levelno == logging.WARNING for r in caplog.records)


def test_logged_keeps_endo_shape() -> None:
    assert isinstance(as_endo(lambda v: v).then(logged("noop")), Endo)


def test_log_effect_with_tap(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger(LOGGER_NAME)
    pipeline = as_step(lambda v: v * 2).tap(log_effect("doubled to %s", logger=logger))

    with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
        assert asyncio.run(with_(21, pipeline)) == 42

    assert [r.getMessage() for r in caplog.records if r.name == LOGGER_NAME] == ["doubled to 42"]


def test_traced_records_begin_and_end() -> None:
    trace = Trace()
    pipeline = as_step(str).then(traced(trace, "to_string"))

    assert asyncio.run(with_(3, pipeline)) == "3"

    actions = [e.action for e in trace.get_events()]
    assert actions == ["step_begin", "step_end"]
    begin, end = trace.get_events()
    assert end.parent_id == begin.id
    assert end.info == {"step": "to_string"}
    assert end.duration_ms is not None and end.duration_ms >= 0


def test_traced_nests_inner_steps_under_outer() -> None:
    trace = Trace()
    inner = as_step(lambda v: v + 1).then(traced(trace, "inner"))
    outer = inner.then(as_step(lambda v: v * 2)).then(traced(trace, "outer"))

    assert asyncio.run(with_(1, outer)) == 4

    outer_begin = trace.find_all(action="step_begin", step="outer")[0]
    inner_begin = trace.find_all(action="step_begin", step="inner")[0]
    assert inner_begin.parent_id == outer_begin.id
    assert outer_begin.parent_id is None


def test_traced_records_error_and_reraises() -> None:
    trace = Trace()
    pipeline = failing_step(Boom("trace me")).then(traced(trace, "broken"))

    with pytest.raises(Boom):
        asyncio.run(with_(1, pipeline))

    errors = trace.find_all(action="step_error")
    assert len(errors) == 1
    assert "trace me" in errors[0].info["error"]
    assert trace.find_all(action="step_end") == []


def test_traced_concurrent_runs_keep_separate_parents() -> None:
    trace = Trace()

    async def pause(value: int, cancel: CancelSignal) -> int:
        await asyncio.sleep(0.01)
        return value

    inner = Step(pause).then(traced(trace, "inner"))
    outer = inner.then(traced(trace, "outer"))

    async def run_both() -> list[int]:
        return await asyncio.gather(with_(1, outer), with_(2, outer))

    assert asyncio.run(run_both()) == [1, 2]

    outer_ids = {e.id for e in trace.find_all(action="step_begin", step="outer")}
    inner_parents = {e.parent_id for e in trace.find_all(action="step_begin", step="inner")}
    assert len(outer_ids) == 2
    assert inner_parents == outer_ids


def test_disabled_trace_records_nothing() -> None:
    trace = Trace(enabled=False)
    pipeline = as_step(str).then(traced(trace, "quiet"))

    assert asyncio.run(with_(1, pipeline)) == "1"
    assert len(trace) == 0
