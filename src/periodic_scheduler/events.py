"""Event system for the scheduler.

Emits events for session and execution lifecycle changes.
"""
from typing import Any, Callable

from loguru import logger

from .timer import epoch_ms
from .types import SchedulerEvent

logger = logger.bind(module="periodic_scheduler.events")


# Type alias for event handlers
EventHandler = Callable[[SchedulerEvent], None]


class EventEmitter:
    """Fans scheduler events out to subscribed handlers.

    Handlers run synchronously, in subscription order, inside the state
    machine's transitions. A failing handler is logged and skipped so it
    cannot corrupt the scheduler's state.
    """

    def __init__(self):
        self._handlers: list[EventHandler] = []

    @property
    def handlers(self) -> tuple[EventHandler, ...]:
        return tuple(self._handlers)

    def add_handler(self, handler: EventHandler) -> None:
        """Subscribe a handler; subscribing it twice has no effect."""
        if handler not in self._handlers:
            self._handlers.append(handler)

    def remove_handler(self, handler: EventHandler) -> None:
        """Unsubscribe a handler, if subscribed."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def emit(self, event: SchedulerEvent) -> None:
        # Snapshot: a handler may unsubscribe itself while being called
        for handler in self.handlers:
            try:
                handler(event)
            except Exception as e:
                logger.opt(exception=e).warning(
                    f"Handler {handler!r} failed on '{event.type}' "
                    f"from scheduler '{event.scheduler_name}'"
                )


def emit_scheduler_event(
    emitter: EventEmitter,
    event_type: str,
    scheduler_name: str,
    payload: dict[str, Any] | None = None,
) -> None:
    """Emit a scheduler event.

    Args:
        emitter: Event emitter instance
        event_type: Type of event (e.g., "execution.started", "scheduler.stopped")
        scheduler_name: Name of the emitting scheduler
        payload: Additional event payload
    """
    event = SchedulerEvent(
        type=event_type,
        scheduler_name=scheduler_name,
        timestamp_ms=epoch_ms(),
        payload=payload or {},
    )
    emitter.emit(event)


# Event type constants
class EventTypes:
    """Constants for event types."""

    # Session lifecycle
    SCHEDULER_STARTED = "scheduler.started"
    SCHEDULER_TERMINATING = "scheduler.terminating"
    SCHEDULER_STOPPED = "scheduler.stopped"
    SCHEDULER_FAULTED = "scheduler.faulted"

    # Execution lifecycle
    EXECUTION_STARTED = "execution.started"
    EXECUTION_COMPLETED = "execution.completed"
    EXECUTION_FAILED = "execution.failed"
    EXECUTION_SCHEDULED = "execution.scheduled"
