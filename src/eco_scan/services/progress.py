"""Simulated scan progress."""

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field


@dataclass
class ProgressHandle:
    """Single cancellation handle for one running progress timer."""

    task: asyncio.Task[None]
    stops: int = 0

    @property
    def stopped(self) -> bool:
        return self.stops > 0

    def cancel(self) -> bool:
        """Stop ticking. Only the first call has an effect."""
        if self.stops:
            return False
        self.stops += 1
        self.task.cancel()
        return True


@dataclass
class ProgressTimer:
    """Ticks a pseudo-random progress ramp that stalls below completion."""

    interval: float = 0.18
    max_step: float = 7.0
    ceiling: float = 96.0
    rng: random.Random = field(default_factory=random.Random)
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    def start(self, on_tick: Callable[[float], None]) -> ProgressHandle:
        """Start ticking on the running loop and return its handle."""
        task = asyncio.get_running_loop().create_task(self._run(on_tick))
        return ProgressHandle(task=task)

    def advance(self, value: float) -> float:
        return min(self.ceiling, value + self.rng.random() * self.max_step)

    async def _run(self, on_tick: Callable[[float], None]) -> None:
        value = 0.0
        while True:
            await self.sleep(self.interval)
            value = self.advance(value)
            on_tick(value)
