import asyncio

import pytest

from core.batch import run_in_batches


@pytest.mark.asyncio
async def test_outcomes_keep_input_order():
    async def worker(n):
        # Later items finish first
        await asyncio.sleep(0.01 * (5 - n))
        return n * 10

    outcomes = await run_in_batches([1, 2, 3, 4], worker, batch_size=2)

    assert [o.item for o in outcomes] == [1, 2, 3, 4]
    assert [o.value for o in outcomes] == [10, 20, 30, 40]
    assert all(o.success for o in outcomes)


@pytest.mark.asyncio
async def test_failure_is_isolated_to_its_item():
    async def worker(n):
        if n == 2:
            raise RuntimeError("boom")
        return n

    outcomes = await run_in_batches([1, 2, 3], worker, batch_size=3)

    assert [o.success for o in outcomes] == [True, False, True]
    assert outcomes[1].error_message == "boom"
    assert outcomes[0].value == 1 and outcomes[2].value == 3


@pytest.mark.asyncio
async def test_error_without_message_uses_type_name():
    async def worker(n):
        raise TimeoutError()

    outcomes = await run_in_batches([1], worker)
    assert outcomes[0].error_message == "TimeoutError"


@pytest.mark.asyncio
async def test_batches_never_exceed_batch_size():
    running = 0
    peak = 0

    async def worker(n):
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.01)
        running -= 1
        return n

    await run_in_batches(list(range(7)), worker, batch_size=3)
    assert peak == 3


@pytest.mark.asyncio
async def test_delay_between_batches_only(monkeypatch):
    sleeps = []
    real_sleep = asyncio.sleep

    async def fake_sleep(seconds):
        sleeps.append(seconds)
        await real_sleep(0)

    monkeypatch.setattr("core.batch.asyncio.sleep", fake_sleep)

    async def worker(n):
        return n

    await run_in_batches(list(range(5)), worker, batch_size=2, delay_seconds=0.5)
    # 3 batches -> 2 pauses
    assert sleeps == [0.5, 0.5]


@pytest.mark.asyncio
async def test_progress_callback_counts_every_item():
    calls = []

    async def worker(n):
        if n == 1:
            raise ValueError("bad")
        return n

    await run_in_batches(["a", 1, "b"], worker, batch_size=2, on_progress=lambda d, t, i: calls.append((d, t, i)))
    assert calls == [(1, 3, "a"), (2, 3, 1), (3, 3, "b")]


@pytest.mark.asyncio
async def test_empty_input():
    async def worker(n):
        return n

    assert await run_in_batches([], worker) == []


def test_invalid_batch_size():
    async def worker(n):
        return n

    with pytest.raises(ValueError):
        asyncio.run(run_in_batches([1], worker, batch_size=0))
