"""Non-overlapping periodic job scheduler.

A slim single-job scheduler focused on three aspects naive timer loops miss:
- Non-overlapping executions
- Deterministic (graceful) teardown
- Dynamic delay between executions

The delay calculator is invoked at the *end* of each execution with the
duration of the just-finished run and the exception it raised, if any.
Job exceptions are never propagated to callers of ``start``/``stop``; they are
only forwarded to the delay calculator.
"""
from __future__ import annotations

import asyncio

from loguru import logger

from .events import EventEmitter, EventTypes, emit_scheduler_event
from .state import SchedulerState
from .timer import AsyncioTimer, Timer
from .types import (
    NO_PREVIOUS_EXECUTION,
    ActivityStatus,
    ComputeNextDelay,
    PeriodicJob,
    PreviousExecutionMetadata,
)

logger = logger.bind(module="periodic_scheduler.scheduler")


class NonOverlappingPeriodicJobScheduler:
    """Runs a single async job periodically, never concurrently with itself.

    The instance moves between ``inactive``, ``active`` and ``terminating``
    through ``start`` and ``stop``. Each ``start``-``stop`` pair is a session;
    an instance may run any number of sessions.

    Example:
        scheduler = NonOverlappingPeriodicJobScheduler(
            sync_inventory,
            lambda metadata: 3000 if metadata.failed else 5000,
        )
        await scheduler.start()
        ...
        await scheduler.stop()  # returns once the last execution has settled
    """

    def __init__(
        self,
        periodic_job: PeriodicJob,
        compute_next_delay: ComputeNextDelay,
        *,
        timer: Timer | None = None,
        name: str = "periodic-job",
    ):
        """Initialize the scheduler.

        Args:
            periodic_job: The async job to execute periodically
            compute_next_delay: Returns the delay in milliseconds until the next execution,
                based on the duration and exception of the previous one
            timer: Timer capability (defaults to the running asyncio loop)
            name: Label used in log lines and events
        """
        self._periodic_job = periodic_job
        self._compute_next_delay = compute_next_delay
        self._timer: Timer = timer or AsyncioTimer()
        self._name = name
        self._events = EventEmitter()
        self._state = SchedulerState()

    @property
    def name(self) -> str:
        return self._name

    @property
    def events(self) -> EventEmitter:
        return self._events

    @property
    def status(self) -> ActivityStatus:
        """Current status.

        - ``active``: managing recurring executions
        - ``inactive``: not managing any executions
        - ``terminating``: a stop was requested, the last execution is still ongoing
        """
        return self._state.status

    @property
    def is_currently_executing(self) -> bool:
        """Whether the job is running, as opposed to being between executions."""
        return self._state.current_execution is not None

    @property
    def last_fault(self) -> BaseException | None:
        """Exception that halted the last session, if any.

        Either the delay calculator raised, or the run was aborted by a
        ``BaseException`` (e.g. the run task itself was cancelled).
        """
        return self._state.last_fault

    async def start(self) -> None:
        """Start scheduling executions.

        Idempotent: calling it while ``active`` does nothing. Called while
        ``terminating``, it first waits for the last execution of the previous
        session to settle, then re-evaluates: a concurrent ``start`` may have
        already re-activated the instance.

        Raises:
            Exception: whatever the delay calculator raises for the first execution.
                The instance stays ``inactive`` in that case.
        """
        while self._state.status is ActivityStatus.TERMINATING:
            logger.debug(f"Scheduler '{self._name}' is terminating, waiting before start")
            await self._complete_termination()

        if self._state.status is ActivityStatus.ACTIVE:
            logger.debug(f"Scheduler '{self._name}' already active")
            return

        first_delay_ms = self._compute_next_delay(
            PreviousExecutionMetadata(duration_ms=NO_PREVIOUS_EXECUTION)
        )
        self._state.last_fault = None
        self._state.status = ActivityStatus.ACTIVE
        self._state.pending_timer = self._timer.call_later(
            first_delay_ms, self._initiate_execution_cycle
        )

        emit_scheduler_event(
            self._events,
            EventTypes.SCHEDULER_STARTED,
            self._name,
            {"first_delay_ms": first_delay_ms},
        )
        logger.info(f"Scheduler '{self._name}' started, first execution in {first_delay_ms}ms")

    async def stop(self) -> None:
        """Stop scheduling executions.

        If an execution is in progress, returns only after it completes.
        Idempotent: does nothing while ``inactive``; while ``terminating`` it
        only waits for the ongoing execution.
        """
        if self._state.status is ActivityStatus.INACTIVE:
            return

        if self._state.status is ActivityStatus.ACTIVE:
            self._state.cancel_pending_timer()
            self._state.status = ActivityStatus.TERMINATING
            if self.is_currently_executing:
                emit_scheduler_event(self._events, EventTypes.SCHEDULER_TERMINATING, self._name)
                logger.info(f"Scheduler '{self._name}' terminating, waiting for the ongoing execution")

        await self._complete_termination()

    async def wait_until_current_execution_completes(self) -> None:
        """Wait for the ongoing execution, if any, regardless of its outcome.

        Does not alter the status or cancel anything.
        """
        execution = self._state.current_execution
        if execution is None:
            return
        # asyncio.wait neither raises the task's exception nor cancels the task
        # when this waiter is cancelled.
        await asyncio.wait([execution])

    async def _complete_termination(self) -> None:
        await self.wait_until_current_execution_completes()

        # Any waiter may finalize; a concurrent start may already have re-activated.
        if self._state.status is ActivityStatus.TERMINATING:
            self._state.status = ActivityStatus.INACTIVE
            emit_scheduler_event(self._events, EventTypes.SCHEDULER_STOPPED, self._name)
            logger.info(f"Scheduler '{self._name}' stopped")

    def _initiate_execution_cycle(self) -> None:
        # Not a coroutine: the run task must be stored before returning, so that
        # stop() and observers always find the execution they have to wait for.
        self._state.pending_timer = None
        execution = asyncio.create_task(self._run_and_schedule_next())
        execution.add_done_callback(self._on_execution_done)
        self._state.current_execution = execution

    async def _run_and_schedule_next(self) -> None:
        error: BaseException | None = None
        started_ms = self._timer.now_ms()
        emit_scheduler_event(self._events, EventTypes.EXECUTION_STARTED, self._name)

        try:
            try:
                await self._periodic_job()
            except asyncio.CancelledError as e:
                if asyncio.current_task().cancelling():
                    # The run task itself was cancelled; nothing can be rescheduled.
                    self._halt_session(e)
                    raise
                error = e
            except Exception as e:
                error = e
            except BaseException as e:
                self._halt_session(e)
                raise
        finally:
            self._state.current_execution = None

        duration_ms = max(0, int(self._timer.now_ms() - started_ms))
        logger.debug(f"Execution of '{self._name}' finished in {duration_ms}ms")
        if error is None:
            emit_scheduler_event(
                self._events,
                EventTypes.EXECUTION_COMPLETED,
                self._name,
                {"duration_ms": duration_ms},
            )
        else:
            emit_scheduler_event(
                self._events,
                EventTypes.EXECUTION_FAILED,
                self._name,
                {"duration_ms": duration_ms, "error_type": type(error).__name__},
            )

        if self._state.status is not ActivityStatus.ACTIVE:
            return

        try:
            delay_ms = self._compute_next_delay(
                PreviousExecutionMetadata(duration_ms=duration_ms, error=error)
            )
        except Exception as e:
            # The delay calculator must never raise; halt the session loudly.
            self._halt_session(e)
            raise

        self._state.pending_timer = self._timer.call_later(
            delay_ms, self._initiate_execution_cycle
        )
        emit_scheduler_event(
            self._events,
            EventTypes.EXECUTION_SCHEDULED,
            self._name,
            {"delay_ms": delay_ms},
        )

    def _halt_session(self, fault: BaseException) -> None:
        """End an active session that cannot continue, keeping the fault observable."""
        if self._state.status is not ActivityStatus.ACTIVE:
            # stop() owns the transition
            return

        self._state.cancel_pending_timer()
        self._state.status = ActivityStatus.INACTIVE
        self._state.last_fault = fault
        logger.opt(exception=fault).error(
            f"Scheduler '{self._name}' halted by {type(fault).__name__}: {fault!r}"
        )
        emit_scheduler_event(
            self._events,
            EventTypes.SCHEDULER_FAULTED,
            self._name,
            {"error_type": type(fault).__name__, "error": str(fault)},
        )

    @staticmethod
    def _on_execution_done(execution: asyncio.Task) -> None:
        # Faults were already surfaced by _halt_session; mark them retrieved.
        if not execution.cancelled():
            execution.exception()
