"""Core type definitions for the periodic job scheduler.

This module defines:
- The "no previous execution" sentinel
- Activity status of a scheduler instance
- Metadata handed to the delay calculator
- Event types for the event system
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable


# Duration reported to the delay calculator before the first execution of a session.
NO_PREVIOUS_EXECUTION = -1


# ============== Status Types ==============

class ActivityStatus(str, Enum):
    """Activity status of a scheduler instance."""
    ACTIVE = "active"              # Managing recurring executions
    INACTIVE = "inactive"          # No timer armed, nothing in flight
    TERMINATING = "terminating"    # Stopped, last execution still in flight


# ============== Execution Metadata ==============

@dataclass(frozen=True)
class PreviousExecutionMetadata:
    """Runtime metadata of the just-finished execution.

    A fresh instance is built before every call to the delay calculator.
    For the first execution of a session, ``duration_ms`` equals
    ``NO_PREVIOUS_EXECUTION`` and ``error`` is None.
    """
    duration_ms: int
    error: BaseException | None = None

    @property
    def is_first_execution(self) -> bool:
        return self.duration_ms == NO_PREVIOUS_EXECUTION

    @property
    def failed(self) -> bool:
        return self.error is not None


# The job: a zero-argument coroutine function.
PeriodicJob = Callable[[], Awaitable[None]]

# Delay in milliseconds, measured from the end of one execution to the start of the next.
# Must never raise; if it does, the scheduler halts the session.
ComputeNextDelay = Callable[[PreviousExecutionMetadata], float]


# ============== Event Types ==============

@dataclass
class SchedulerEvent:
    """Event emitted by the scheduler."""
    type: str
    scheduler_name: str
    timestamp_ms: int
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "scheduler_name": self.scheduler_name,
            "timestamp_ms": self.timestamp_ms,
            "payload": self.payload,
        }
