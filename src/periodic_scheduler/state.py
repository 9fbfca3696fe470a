"""State management for the periodic job scheduler.

Contains the runtime state of a single scheduler instance.
"""
import asyncio
from dataclasses import dataclass

from .timer import TimerHandle
from .types import ActivityStatus


@dataclass
class SchedulerState:
    """Runtime state of a scheduler instance."""
    status: ActivityStatus = ActivityStatus.INACTIVE
    # Armed and not yet fired or cancelled
    pending_timer: TimerHandle | None = None
    # Run routine of the execution in flight, set synchronously when the timer fires
    current_execution: asyncio.Task | None = None
    # Exception that halted the last session, if any
    last_fault: BaseException | None = None

    def cancel_pending_timer(self) -> None:
        """Cancel the armed timer, if any."""
        if self.pending_timer is not None:
            self.pending_timer.cancel()
            self.pending_timer = None
