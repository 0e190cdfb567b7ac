"""Tests for the simulated progress timer."""

import asyncio
import random

from eco_scan.services.progress import ProgressTimer


class _FixedRandom(random.Random):
    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


def test_advance_caps_at_ceiling() -> None:
    timer = ProgressTimer(max_step=7.0, ceiling=96.0, rng=_FixedRandom(0.9))

    assert timer.advance(10.0) == 10.0 + 0.9 * 7.0
    assert timer.advance(95.0) == 96.0
    assert timer.advance(96.0) == 96.0


def test_timer_ticks_monotonically_below_ceiling() -> None:
    timer = ProgressTimer(interval=0, max_step=50.0, rng=random.Random(7))
    values: list[float] = []

    async def run():  # type: ignore[no-untyped-def]
        handle = timer.start(values.append)
        for _ in range(40):
            await asyncio.sleep(0)
        handle.cancel()
        await asyncio.gather(handle.task, return_exceptions=True)
        return handle

    handle = asyncio.run(run())

    assert values
    assert values == sorted(values)
    assert max(values) <= 96.0
    assert handle.task.cancelled()


def test_handle_cancels_only_once() -> None:
    timer = ProgressTimer(interval=0.01)

    async def run() -> tuple[bool, bool, int]:
        handle = timer.start(lambda value: None)
        first = handle.cancel()
        second = handle.cancel()
        return first, second, handle.stops

    first, second, stops = asyncio.run(run())

    assert first is True
    assert second is False
    assert stops == 1
