"""
Scheduler Test Fixtures.

- ManualTimer: fires armed callbacks only when told to, with a simulated clock
- ControlledJob: a job whose executions stay pending until completed or failed
"""

import asyncio
from typing import Callable
from unittest.mock import MagicMock

import pytest

from periodic_scheduler import NO_PREVIOUS_EXECUTION, PreviousExecutionMetadata


class ManualHandle:
    """Handle returned by ManualTimer.call_later."""

    def __init__(self, due_ms: float, delay_ms: float, callback: Callable[[], None]):
        self.due_ms = due_ms
        self.delay_ms = delay_ms
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimer:
    """
    Timer capability with a simulated clock.

    Starts at 0ms and advances only when explicitly told to.
    """

    def __init__(self):
        self.current_ms = 0.0
        self.handles: list[ManualHandle] = []

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self.current_ms + max(0, delay_ms), delay_ms, callback)
        self.handles.append(handle)
        return handle

    def now_ms(self) -> float:
        return self.current_ms

    def advance(self, ms: float) -> None:
        self.current_ms += ms

    @property
    def armed_delays(self) -> list[float]:
        """Delays of every call_later, in call order."""
        return [handle.delay_ms for handle in self.handles]

    @property
    def pending(self) -> list[ManualHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def run_pending(self) -> int:
        """Fire currently armed timers in due order, advancing the clock to each due time."""
        due = sorted(self.pending, key=lambda h: h.due_ms)
        for handle in due:
            self.current_ms = max(self.current_ms, handle.due_ms)
            handle.fired = True
            handle.callback()
        return len(due)


class ControlledJob:
    """Job whose executions stay pending until completed or failed from the test."""

    def __init__(self):
        self.executions: list[asyncio.Future] = []
        self.tasks: list[asyncio.Task] = []
        self.running = 0
        self.max_running = 0

    async def __call__(self) -> None:
        execution = asyncio.get_running_loop().create_future()
        self.executions.append(execution)
        self.tasks.append(asyncio.current_task())
        self.running += 1
        self.max_running = max(self.max_running, self.running)
        try:
            await execution
        finally:
            self.running -= 1

    @property
    def calls(self) -> int:
        return len(self.executions)

    def complete(self) -> None:
        self.executions[-1].set_result(None)

    def fail(self, error: BaseException) -> None:
        self.executions[-1].set_exception(error)

    def cancel(self) -> None:
        """Cancel the future the job awaits, so the job itself raises CancelledError."""
        self.executions[-1].cancel()


class CustomJobError(Exception):
    """Error raised by failing test jobs."""

    def __init__(self, job_id: int):
        super().__init__(f"Job no. {job_id} has failed")
        self.job_id = job_id


FIRST_DELAY_MS = 500
FAILURE_DELAY_MS = 3000
INTERVAL_MS = 5000


def interval_policy(metadata: PreviousExecutionMetadata) -> float:
    """Fixed interval between starts, shorter delay after failures."""
    if metadata.duration_ms == NO_PREVIOUS_EXECUTION:
        return FIRST_DELAY_MS
    if metadata.error is not None:
        return FAILURE_DELAY_MS
    return INTERVAL_MS - (metadata.duration_ms % INTERVAL_MS)


async def let_execution_begin() -> None:
    """Yield to the event loop so a freshly created run task reaches the job."""
    await asyncio.sleep(0)


@pytest.fixture
def timer() -> ManualTimer:
    return ManualTimer()


@pytest.fixture
def job() -> ControlledJob:
    return ControlledJob()


@pytest.fixture
def compute_next_delay() -> MagicMock:
    return MagicMock(side_effect=interval_policy)
