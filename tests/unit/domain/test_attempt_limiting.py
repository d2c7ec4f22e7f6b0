"""
Unit tests for password attempt limiting.
"""

from datetime import datetime, timedelta, timezone

import pytest

from sharebox.domain.attempt_limiting.entities import AttemptState
from sharebox.domain.attempt_limiting.services import CounterAttemptPolicy, NoAttemptLimit
from sharebox.domain.attempt_limiting.value_objects import AttemptLimit, ClientIP
from sharebox.domain.errors import ErrorCategory, TooManyAttemptsError
from tests.fixtures import MockAttemptRepository


@pytest.fixture
def attempt_repository():
    return MockAttemptRepository()


@pytest.fixture
def policy(attempt_repository):
    return CounterAttemptPolicy(
        attempt_repository,
        AttemptLimit(max_attempts=3, window_seconds=60),
        whitelist=["10.0.0.1"],
    )


class TestAttemptState:
    """Test attempt state arithmetic."""

    def _state(self, failures):
        return AttemptState(
            project_id="p1",
            client_ip=ClientIP("1.2.3.4"),
            failures=failures,
            limit=3,
            reset_at=datetime.now(timezone.utc) + timedelta(seconds=60),
        )

    def test_remaining(self):
        assert self._state(1).remaining() == 2
        assert self._state(5).remaining() == 0

    def test_locked_at_limit(self):
        assert self._state(2).is_locked() is False
        assert self._state(3).is_locked() is True

    def test_headers_include_retry_after_only_when_locked(self):
        assert "Retry-After" not in self._state(1).to_headers()

        headers = self._state(3).to_headers()
        assert headers["X-Attempts-Remaining"] == "0"
        assert 0 < int(headers["Retry-After"]) <= 60


class TestCounterAttemptPolicy:
    """Test lockout after repeated failures."""

    def test_fresh_client_passes(self, policy):
        policy.check("p1", "1.2.3.4")

    def test_locks_after_limit(self, policy):
        for _ in range(3):
            policy.record_failure("p1", "1.2.3.4")

        with pytest.raises(TooManyAttemptsError) as exc_info:
            policy.check("p1", "1.2.3.4")

        error = exc_info.value
        assert error.http_status_code == 429
        assert error.category == ErrorCategory.TOO_MANY_ATTEMPTS
        assert error.context["retry_after"] > 0

    def test_counters_are_per_project_and_client(self, policy):
        for _ in range(3):
            policy.record_failure("p1", "1.2.3.4")

        policy.check("p2", "1.2.3.4")
        policy.check("p1", "5.6.7.8")

    def test_reset_clears_counter(self, policy):
        for _ in range(3):
            policy.record_failure("p1", "1.2.3.4")

        policy.reset("p1", "1.2.3.4")

        policy.check("p1", "1.2.3.4")

    def test_record_failure_returns_state(self, policy):
        state = policy.record_failure("p1", "1.2.3.4")

        assert state.failures == 1
        assert state.remaining() == 2

    def test_whitelisted_client_never_counted(self, policy, attempt_repository):
        for _ in range(5):
            assert policy.record_failure("p1", "10.0.0.1") is None

        policy.check("p1", "10.0.0.1")
        assert attempt_repository.calls_to("record_failure") == []

    def test_unparseable_address_shares_unknown_bucket(self, policy, attempt_repository):
        policy.record_failure("p1", "unknown")

        assert attempt_repository.calls_to("record_failure")[0]["args"]["client_ip"] == "0.0.0.0"


class TestNoAttemptLimit:
    """Test the permissive policy."""

    def test_never_locks(self):
        policy = NoAttemptLimit()

        for _ in range(100):
            assert policy.record_failure("p1", "1.2.3.4") is None
        policy.check("p1", "1.2.3.4")
