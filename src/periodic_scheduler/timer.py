"""Timer capability for the scheduler.

The scheduler only needs two things from a timer: "run callback C no earlier
than D milliseconds from now, and give me a handle to cancel it", and a
monotonic clock to measure execution durations.
"""
import asyncio
import time
from typing import Callable, Protocol

from loguru import logger

logger = logger.bind(module="periodic_scheduler.timer")


def epoch_ms() -> int:
    """Wall-clock Unix timestamp in milliseconds, for event timestamps."""
    return int(time.time() * 1000)


class TimerHandle(Protocol):
    """Cancellable handle of an armed timer."""

    def cancel(self) -> None:
        ...


class Timer(Protocol):
    """Protocol for the timer capability."""

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """Schedule ``callback`` to run no earlier than ``delay_ms`` from now."""
        ...

    def now_ms(self) -> float:
        """Monotonic clock reading in milliseconds."""
        ...


class AsyncioTimer:
    """Timer backed by the running asyncio event loop.

    A delay of 0 runs the callback on a later loop iteration, never inline.
    Negative delays are handed to the loop as is, which runs them as soon as possible.
    """

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = asyncio.get_running_loop()
        logger.debug(f"Timer armed for {delay_ms}ms")
        return loop.call_later(delay_ms / 1000.0, callback)

    def now_ms(self) -> float:
        return time.monotonic() * 1000.0
