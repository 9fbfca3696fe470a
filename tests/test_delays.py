"""
Delay Policy Tests.

Covers the ready-made ComputeNextDelay factories and the settings-backed policy.
"""

import pytest

from periodic_scheduler import (
    NO_PREVIOUS_EXECUTION,
    PreviousExecutionMetadata,
    Settings,
    delay_by_outcome,
    fixed_delay,
    fixed_interval_between_starts,
    policy_from_settings,
)

FIRST = PreviousExecutionMetadata(duration_ms=NO_PREVIOUS_EXECUTION)


class TestFixedDelay:
    def test_first_delay_defaults_to_delay(self):
        compute = fixed_delay(2000)
        assert compute(FIRST) == 2000
        assert compute(PreviousExecutionMetadata(duration_ms=750)) == 2000

    def test_explicit_first_delay(self):
        compute = fixed_delay(2000, first_delay_ms=0)
        assert compute(FIRST) == 0
        assert compute(PreviousExecutionMetadata(duration_ms=0, error=ValueError())) == 2000

    def test_rejects_negative_values(self):
        with pytest.raises(ValueError, match="delay_ms"):
            fixed_delay(-1)


class TestFixedIntervalBetweenStarts:
    def test_subtracts_duration(self):
        compute = fixed_interval_between_starts(5000, first_delay_ms=500)
        assert compute(FIRST) == 500
        assert compute(PreviousExecutionMetadata(duration_ms=1000)) == 4000
        assert compute(PreviousExecutionMetadata(duration_ms=0)) == 5000

    def test_overrunning_execution_aligns_to_next_bucket(self):
        compute = fixed_interval_between_starts(5000)
        assert compute(PreviousExecutionMetadata(duration_ms=7000)) == 3000
        assert compute(PreviousExecutionMetadata(duration_ms=10000)) == 5000

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError, match="interval_ms"):
            fixed_interval_between_starts(0)


class TestDelayByOutcome:
    def test_delays_per_outcome(self):
        compute = delay_by_outcome(success_delay_ms=5000, failure_delay_ms=3000, first_delay_ms=100)
        assert compute(FIRST) == 100
        assert compute(PreviousExecutionMetadata(duration_ms=20)) == 5000
        assert compute(PreviousExecutionMetadata(duration_ms=20, error=RuntimeError("boom"))) == 3000

    def test_rejects_negative_values(self):
        with pytest.raises(ValueError, match="failure_delay_ms"):
            delay_by_outcome(success_delay_ms=5000, failure_delay_ms=-3000)


def test_policy_from_settings():
    settings = Settings(first_delay_ms=10, interval_ms=60000, failure_delay_ms=1000)
    compute = policy_from_settings(settings)

    assert compute(FIRST) == 10
    assert compute(PreviousExecutionMetadata(duration_ms=5)) == 60000
    assert compute(PreviousExecutionMetadata(duration_ms=5, error=OSError())) == 1000


def test_metadata_flags():
    assert FIRST.is_first_execution is True
    assert FIRST.failed is False

    failed = PreviousExecutionMetadata(duration_ms=3, error=KeyError("x"))
    assert failed.is_first_execution is False
    assert failed.failed is True
