import pytest
from selenium.common.exceptions import (
    InvalidSelectorException,
    StaleElementReferenceException,
)

from mobile_e2e.core.retry import RetryPolicy
from mobile_e2e.infrastructure.appium_error_handler import SessionUnavailableError


class Flaky:
    """Raises the queued errors, then returns value."""

    def __init__(self, errors, value='done'):
        self.errors = list(errors)
        self.value = value
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.value


class TestRetryPolicy:

    def test_rejects_non_positive_attempts(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)

    def test_success_on_first_attempt_does_not_sleep(self, fake_clock):
        action = Flaky([])

        assert RetryPolicy(3, 1.0, fake_clock).execute(action) == 'done'
        assert action.calls == 1
        assert fake_clock.sleeps == []

    def test_retries_with_fixed_delay(self, fake_clock):
        action = Flaky([StaleElementReferenceException("stale"), StaleElementReferenceException("stale")])

        assert RetryPolicy(3, 1.5, fake_clock).execute(action) == 'done'
        assert action.calls == 3
        assert fake_clock.sleeps == [1.5, 1.5]

    def test_never_exceeds_max_attempts_and_raises_last_error(self, fake_clock):
        errors = [StaleElementReferenceException(f"stale {n}") for n in range(5)]
        last = errors[2]
        action = Flaky(errors)

        with pytest.raises(StaleElementReferenceException) as exc_info:
            RetryPolicy(3, 1.0, fake_clock).execute(action)

        assert action.calls == 3
        assert exc_info.value is last
        assert fake_clock.sleeps == [1.0, 1.0]

    @pytest.mark.parametrize("error", [
        InvalidSelectorException("bad xpath"),
        SessionUnavailableError("gone"),
    ])
    def test_non_retryable_errors_raise_immediately(self, fake_clock, error):
        action = Flaky([error])

        with pytest.raises(type(error)):
            RetryPolicy(3, 1.0, fake_clock).execute(action)

        assert action.calls == 1
        assert fake_clock.sleeps == []

    def test_execute_until_true_counts_false_as_failure(self, fake_clock):
        results = iter([False, False, True])
        calls = []

        def action():
            calls.append(1)
            return next(results)

        assert RetryPolicy(3, 2.0, fake_clock).execute_until_true(action) is True
        assert len(calls) == 3
        assert fake_clock.sleeps == [2.0, 2.0]

    def test_execute_until_true_gives_up(self, fake_clock):
        calls = []

        def action():
            calls.append(1)
            if len(calls) == 1:
                raise StaleElementReferenceException("stale")
            return False

        assert RetryPolicy(2, 2.0, fake_clock).execute_until_true(action) is False
        assert len(calls) == 2
        assert fake_clock.sleeps == [2.0]
