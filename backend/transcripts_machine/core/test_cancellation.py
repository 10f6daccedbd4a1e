import asyncio

import pytest

from transcripts_machine.core.cancellation import CancelToken
from transcripts_machine.core.errors import (
    ExtractionCancelled,
    ExtractionError,
    StepTimeoutError,
)


async def _value_after(delay: float, value):
    await asyncio.sleep(delay)
    return value


def test_guard_returns_result():
    async def scenario():
        token = CancelToken()
        return await token.guard(_value_after(0, "done"), timeout=1, step="quick")

    assert asyncio.run(scenario()) == "done"


def test_guard_times_out_with_typed_error():
    async def scenario():
        token = CancelToken()
        await token.guard(_value_after(5, "late"), timeout=0.05, step="slow")

    with pytest.raises(StepTimeoutError) as excinfo:
        asyncio.run(scenario())
    assert isinstance(excinfo.value, TimeoutError)
    assert excinfo.value.step == "slow"


def test_guard_stops_when_token_fires():
    started = []
    finished = []

    async def work():
        started.append(True)
        await asyncio.sleep(5)
        finished.append(True)

    async def scenario():
        token = CancelToken()
        asyncio.get_running_loop().call_later(0.05, token.cancel, "superseded")
        await token.guard(work(), timeout=10, step="observe")

    with pytest.raises(ExtractionCancelled, match="superseded"):
        asyncio.run(scenario())
    assert started == [True]
    assert finished == []


def test_guard_refuses_work_after_cancellation():
    calls = []

    async def work():
        calls.append(True)

    async def scenario():
        token = CancelToken()
        token.cancel("user cleared the page")
        await token.guard(work(), timeout=1, step="navigate")

    with pytest.raises(ExtractionCancelled, match="before 'navigate'"):
        asyncio.run(scenario())
    assert calls == []


def test_guard_propagates_work_errors():
    async def failing():
        raise RuntimeError("boom")

    async def scenario():
        await CancelToken().guard(failing(), timeout=1, step="click")

    with pytest.raises(RuntimeError, match="boom"):
        asyncio.run(scenario())


def test_cancel_keeps_first_reason():
    token = CancelToken()
    token.cancel("first")
    token.cancel("second")
    assert token.cancelled
    assert token.reason == "first"


def test_cancellation_is_an_extraction_error():
    token = CancelToken()
    token.cancel()
    with pytest.raises(ExtractionError):
        token.raise_if_cancelled("structure")
