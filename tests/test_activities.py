"""Tests for the activity retry policy."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from pr_assistant.core.exceptions import ActivityError
from pr_assistant.services.assistant.activities import ActivityProxy, RetryPolicy


class FlakyActivities:
    def __init__(self, failures: int):
        self.failures = failures
        self.attempts = 0

    async def fetch_issue(self, org, repo, number):
        self.attempts += 1
        if self.attempts <= self.failures:
            raise ConnectionError("502 Bad Gateway")
        return {"title": "ok"}

    async def slow(self):
        await asyncio.sleep(10)


class TestRetryPolicy:
    """Tests for RetryPolicy."""

    def test_defaults(self):
        policy = RetryPolicy()

        assert policy.start_to_close_timeout == 300.0
        assert policy.maximum_attempts == 3

    def test_exponential_delay(self):
        policy = RetryPolicy(initial_interval=5.0, backoff_coefficient=2.0, maximum_interval=3000.0)

        assert [policy.delay(n) for n in (1, 2, 3)] == [5.0, 10.0, 20.0]

    def test_delay_capped(self):
        policy = RetryPolicy(initial_interval=5.0, backoff_coefficient=10.0, maximum_interval=60.0)

        assert policy.delay(4) == 60.0


class TestActivityProxy:
    """Tests for ActivityProxy."""

    def test_retries_until_success(self):
        activities = FlakyActivities(failures=2)
        proxy = ActivityProxy(activities, RetryPolicy(initial_interval=0.0))

        result = asyncio.run(proxy.fetch_issue("vertesia", "studio", 1))

        assert result == {"title": "ok"}
        assert activities.attempts == 3

    def test_raises_after_exhaustion(self):
        activities = FlakyActivities(failures=5)
        proxy = ActivityProxy(activities, RetryPolicy(initial_interval=0.0, maximum_attempts=3))

        with pytest.raises(ActivityError) as exc_info:
            asyncio.run(proxy.fetch_issue("vertesia", "studio", 1))

        assert exc_info.value.activity == "fetch_issue"
        assert exc_info.value.attempts == 3
        assert isinstance(exc_info.value.cause, ConnectionError)
        assert activities.attempts == 3

    def test_timeout_per_attempt(self):
        proxy = ActivityProxy(
            FlakyActivities(failures=0),
            RetryPolicy(start_to_close_timeout=0.01, initial_interval=0.0, maximum_attempts=2),
        )

        with pytest.raises(ActivityError) as exc_info:
            asyncio.run(proxy.slow())

        assert isinstance(exc_info.value.cause, asyncio.TimeoutError)
        assert exc_info.value.attempts == 2

    def test_backoff_between_attempts(self):
        activities = FlakyActivities(failures=2)
        proxy = ActivityProxy(activities, RetryPolicy(initial_interval=5.0, backoff_coefficient=2.0))

        with patch("pr_assistant.services.assistant.activities.asyncio.sleep", new=AsyncMock()) as sleep:
            asyncio.run(proxy.fetch_issue("vertesia", "studio", 1))

        assert [c.args[0] for c in sleep.await_args_list] == [5.0, 10.0]

    def test_non_retryable_error(self):
        activities = FlakyActivities(failures=5)
        policy = RetryPolicy(initial_interval=0.0, non_retryable_error_types=(ConnectionError,))

        with pytest.raises(ActivityError):
            asyncio.run(ActivityProxy(activities, policy).fetch_issue("vertesia", "studio", 1))

        assert activities.attempts == 1

    def test_unknown_activity(self):
        with pytest.raises(AttributeError):
            ActivityProxy(FlakyActivities(failures=0), RetryPolicy()).does_not_exist
