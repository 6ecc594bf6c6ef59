import asyncio
from datetime import timezone

from src.gamification.clock import system_clock


def test_now_is_aware_utc():
    assert system_clock.now().tzinfo == timezone.utc


def test_schedule_repeats_until_cancelled():
    calls = []

    async def run():
        loop = system_clock.schedule(0.01, lambda: calls.append(1))
        await asyncio.sleep(0.1)
        loop.cancel()
        seen = len(calls)
        await asyncio.sleep(0.05)
        return seen

    seen = asyncio.run(run())

    assert seen >= 2
    assert len(calls) == seen


def test_failing_callback_keeps_the_schedule_alive():
    calls = []

    def flaky():
        calls.append(1)
        raise RuntimeError('boom')

    async def run():
        loop = system_clock.schedule(0.01, flaky)
        await asyncio.sleep(0.1)
        loop.cancel()

    asyncio.run(run())

    assert len(calls) >= 2
