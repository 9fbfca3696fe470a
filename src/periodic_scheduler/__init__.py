"""Non-overlapping periodic job scheduler for asyncio.

This module provides a single-job scheduler with:
- Non-overlapping executions
- Deterministic (graceful) teardown
- Dynamic delay computed after each execution
- Lifecycle events
- asyncio-based timer
"""
# Core types
from .types import (
    NO_PREVIOUS_EXECUTION,
    ActivityStatus,
    PreviousExecutionMetadata,
    PeriodicJob,
    ComputeNextDelay,
    SchedulerEvent,
)

# Scheduler
from .scheduler import NonOverlappingPeriodicJobScheduler

# Timer
from .timer import Timer, TimerHandle, AsyncioTimer, epoch_ms

# Events
from .events import EventEmitter, EventTypes

# Delay policies
from .delays import (
    fixed_delay,
    fixed_interval_between_starts,
    delay_by_outcome,
    policy_from_settings,
)

# Config
from .config import Settings

__all__ = [
    # Core types
    "NO_PREVIOUS_EXECUTION",
    "ActivityStatus",
    "PreviousExecutionMetadata",
    "PeriodicJob",
    "ComputeNextDelay",
    "SchedulerEvent",
    # Scheduler
    "NonOverlappingPeriodicJobScheduler",
    # Timer
    "Timer",
    "TimerHandle",
    "AsyncioTimer",
    "epoch_ms",
    # Events
    "EventEmitter",
    "EventTypes",
    # Delay policies
    "fixed_delay",
    "fixed_interval_between_starts",
    "delay_by_outcome",
    "policy_from_settings",
    # Config
    "Settings",
]
