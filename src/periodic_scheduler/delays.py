"""Delay calculation policies.

Ready-made ``ComputeNextDelay`` functions for common interval strategies.
The delay is measured from the *end* of the previous execution to the *start*
of the next one. Any plain function works too, e.g. ``lambda _: 5000``.
"""
from .config import Settings
from .types import ComputeNextDelay, PreviousExecutionMetadata


def _require_non_negative(**values: float) -> None:
    for key, value in values.items():
        if value < 0:
            raise ValueError(f"{key} must be non-negative, got {value}")


def fixed_delay(delay_ms: float, first_delay_ms: float | None = None) -> ComputeNextDelay:
    """Constant gap between the end of one execution and the start of the next.

    Args:
        delay_ms: Gap between executions
        first_delay_ms: Delay before the first execution (defaults to ``delay_ms``)
    """
    if first_delay_ms is None:
        first_delay_ms = delay_ms
    _require_non_negative(delay_ms=delay_ms, first_delay_ms=first_delay_ms)

    def compute(metadata: PreviousExecutionMetadata) -> float:
        if metadata.is_first_execution:
            return first_delay_ms
        return delay_ms

    return compute


def fixed_interval_between_starts(
    interval_ms: float,
    first_delay_ms: float = 0,
) -> ComputeNextDelay:
    """Keep a fixed interval between *start* timestamps, like ``setInterval``.

    If the last execution took 1000ms out of a 5000ms interval, the next one
    starts in 4000ms. An execution that overruns the interval is aligned to the
    next interval bucket: ``interval - (duration % interval)``.
    """
    _require_non_negative(first_delay_ms=first_delay_ms)
    if interval_ms <= 0:
        raise ValueError(f"interval_ms must be positive, got {interval_ms}")

    def compute(metadata: PreviousExecutionMetadata) -> float:
        if metadata.is_first_execution:
            return first_delay_ms
        return interval_ms - (metadata.duration_ms % interval_ms)

    return compute


def delay_by_outcome(
    success_delay_ms: float,
    failure_delay_ms: float,
    first_delay_ms: float = 0,
) -> ComputeNextDelay:
    """Use a different delay after failed executions (e.g. retry sooner)."""
    _require_non_negative(
        success_delay_ms=success_delay_ms,
        failure_delay_ms=failure_delay_ms,
        first_delay_ms=first_delay_ms,
    )

    def compute(metadata: PreviousExecutionMetadata) -> float:
        if metadata.is_first_execution:
            return first_delay_ms
        if metadata.failed:
            return failure_delay_ms
        return success_delay_ms

    return compute


def policy_from_settings(settings: Settings) -> ComputeNextDelay:
    """Build a ``delay_by_outcome`` policy from settings."""
    return delay_by_outcome(
        success_delay_ms=settings.interval_ms,
        failure_delay_ms=settings.failure_delay_ms,
        first_delay_ms=settings.first_delay_ms,
    )
