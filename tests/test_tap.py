import asyncio

import pytest

from stepwise import Endo, Effect, as_effect, as_step, ignore, tap, tap_input, with_
from fakes import Boom, Recorder, failing_step


def test_tap_runs_effect_after_step_with_result() -> None:
    recorder = Recorder()
    tapped = recorder.step("step", lambda v: v * 2).tap(recorder.effect("effect"))

    result = asyncio.run(with_(5, tapped))

    assert result == 10
    assert recorder.events == ["step", "effect"]
    assert recorder.values == [5, 10]


def test_tap_returns_the_identical_result_object() -> None:
    payload = {"key": "value"}
    tapped = as_step(lambda _: payload).tap(as_effect(lambda v: None))

    assert asyncio.run(with_(None, tapped)) is payload


def test_tap_effect_not_run_when_step_fails() -> None:
    recorder = Recorder()
    tapped = failing_step(Boom("nope")).tap(recorder.effect("effect"))

    with pytest.raises(Boom):
        asyncio.run(with_(1, tapped))

    assert recorder.events == []


def test_tap_effect_failure_propagates() -> None:
    async def broken(value: int, cancel: object) -> None:
        raise Boom("effect broke")

    tapped = as_step(lambda v: v).tap(Effect(broken))

    with pytest.raises(Boom, match="effect broke"):
        asyncio.run(with_(1, tapped))


def test_tap_input_runs_effect_before_step_with_input() -> None:
    recorder = Recorder()
    tapped = recorder.step("step", lambda v: v + 1).tap_input(recorder.effect("effect"))

    result = asyncio.run(with_(3, tapped))

    assert result == 4
    assert recorder.events == ["effect", "step"]
    assert recorder.values == [3, 3]


def test_tap_input_effect_failure_prevents_step() -> None:
    recorder = Recorder()

    async def broken(value: int, cancel: object) -> None:
        raise Boom("blocked")

    tapped = recorder.step("step").tap_input(Effect(broken))

    with pytest.raises(Boom):
        asyncio.run(with_(1, tapped))

    assert recorder.events == []


def test_endo_tap_input_runs_effect_before_step_with_input() -> None:
    recorder = Recorder()
    tapped = recorder.endo("step", lambda v: v + 1).tap_input(recorder.effect("effect"))

    result = asyncio.run(with_(3, tapped))

    assert isinstance(tapped, Endo)
    assert result == 4
    assert recorder.events == ["effect", "step"]
    assert recorder.values == [3, 3]


def test_endo_tap_runs_effect_after_step_with_result() -> None:
    recorder = Recorder()
    tapped = recorder.endo("step", lambda v: v * 3).tap(recorder.effect("effect"))

    result = asyncio.run(with_(2, tapped))

    assert isinstance(tapped, Endo)
    assert result == 6
    assert recorder.events == ["step", "effect"]
    assert recorder.values == [2, 6]


def test_endo_tap_input_failure_prevents_step() -> None:
    recorder = Recorder()

    async def broken(value: int, cancel: object) -> None:
        raise Boom("blocked")

    tapped = recorder.endo("step").tap_input(Effect(broken))

    with pytest.raises(Boom):
        asyncio.run(with_(1, tapped))

    assert recorder.events == []


def test_tap_discards_effect_return_value() -> None:
    async def returns_something(value: int, cancel: object) -> str:
        return "ignored"

    tapped = as_step(lambda v: v * 2).tap(returns_something)

    assert asyncio.run(with_(4, tapped)) == 8


def test_free_function_taps() -> None:
    recorder = Recorder()
    step = recorder.step("step", str)

    pipeline = tap(tap_input(step, recorder.effect("in")), recorder.effect("out"))

    assert asyncio.run(with_(7, pipeline)) == "7"
    assert recorder.events == ["in", "step", "out"]
    assert recorder.values == [7, 7, "7"]


def test_ignore_runs_step_and_discards_result() -> None:
    recorder = Recorder()
    effect = ignore(recorder.step("step", lambda v: v * 100))

    assert isinstance(effect, Effect)
    assert asyncio.run(effect(2)) is None
    assert recorder.events == ["step"]


def test_ignore_propagates_failure() -> None:
    effect = failing_step(Boom("inside")).ignore()

    with pytest.raises(Boom):
        asyncio.run(effect(1))


def test_ignored_step_as_tap_effect() -> None:
    recorder = Recorder()
    audit = recorder.step("audit", lambda v: f"audited {v}").ignore()

    pipeline = as_step(lambda v: v + 1).tap(audit)

    assert asyncio.run(with_(1, pipeline)) == 2
    assert recorder.values == [2]
