import asyncio

import pytest

from monkey.monkey_timers import TimerRegistry


async def _forever():
    while True:
        await asyncio.sleep(1)


async def _quick():
    await asyncio.sleep(0)
    return 1


@pytest.mark.asyncio
async def test_register_hands_out_increasing_handles():
    timers = TimerRegistry()
    a = timers.register(asyncio.create_task(_forever()))
    b = timers.register(asyncio.create_task(_forever()))
    assert (a, b) == (1, 2)
    assert len(timers) == 2
    timers.cancel_all()
    await asyncio.sleep(0)
    assert len(timers) == 0


@pytest.mark.asyncio
async def test_cancel_unknown_handle():
    timers = TimerRegistry()
    assert timers.cancel(7) is False


@pytest.mark.asyncio
async def test_finished_tasks_remove_themselves():
    timers = TimerRegistry()
    timers.register(asyncio.create_task(_quick()))
    await asyncio.wait_for(timers.wait_idle(), timeout=1)
    assert len(timers) == 0


@pytest.mark.asyncio
async def test_wait_idle_returns_once_cancelled():
    timers = TimerRegistry()
    handle = timers.register(asyncio.create_task(_forever()))

    async def stop_soon():
        await asyncio.sleep(0.01)
        assert timers.cancel(handle) is True

    stopper = asyncio.create_task(stop_soon())
    await asyncio.wait_for(timers.wait_idle(), timeout=1)
    await stopper
    assert len(timers) == 0
