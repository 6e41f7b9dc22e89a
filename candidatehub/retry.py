"""
Backoff and circuit breaking for the Firestore backend.

Only Google API errors that describe a temporary condition are retried.
The breaker sits in front of the retries: once the backend has failed
enough times in a row, calls are refused outright and the repository
falls back to its cache without waiting on timeouts.
"""

import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Tuple, Type

from google.api_core import exceptions as api_exceptions

TRANSIENT_ERRORS: Tuple[Type[Exception], ...] = (
    api_exceptions.ServiceUnavailable,
    api_exceptions.DeadlineExceeded,
    api_exceptions.TooManyRequests,
    api_exceptions.InternalServerError,
    api_exceptions.Aborted,
)


class RetryError(Exception):
    """Every attempt failed with a transient error."""

    def __init__(self, attempts: int, last_error: Exception):
        super().__init__(f"Gave up after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class CircuitOpenError(Exception):
    """The call was refused without reaching the backend."""
    pass


@dataclass
class RetryPolicy:
    """
    Exponential backoff schedule for transient errors.

    max_retries counts retries after the first attempt, so max_retries=2
    makes at most three calls.
    """

    max_retries: int = 3
    base_delay: float = 0.5
    max_delay: float = 8.0
    multiplier: float = 2.0

    def delays(self) -> Iterator[float]:
        delay = self.base_delay
        for _ in range(self.max_retries):
            yield min(delay, self.max_delay)
            delay *= self.multiplier

    def call(
        self,
        func: Callable,
        *args,
        on_retry: Optional[Callable[[int, Exception, float], None]] = None,
        sleep: Optional[Callable[[float], None]] = None,
        **kwargs,
    ):
        """
        Call func, retrying transient errors on this policy's schedule.

        Any other exception propagates from the attempt that raised it.
        on_retry(attempt, error, delay) runs before each pause.

        Raises:
            RetryError: When the schedule is exhausted
        """
        schedule = self.delays()
        attempt = 1
        while True:
            try:
                return func(*args, **kwargs)
            except TRANSIENT_ERRORS as e:
                delay = next(schedule, None)
                if delay is None:
                    raise RetryError(attempt, e) from e
                if on_retry:
                    on_retry(attempt, e, delay)
                (sleep or time.sleep)(delay)
                attempt += 1


class CircuitBreaker:
    """
    Refuses calls for recovery_timeout seconds after failure_threshold
    consecutive failures.

    The first call once that window has passed goes through as a trial. If
    it succeeds the circuit closes, if it fails the window starts again.
    Only exceptions listed in `counts` are failures; anything else passes
    through without touching the state.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60,
        counts: Tuple[Type[Exception], ...] = (Exception,),
        clock: Callable[[], float] = time.monotonic,
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.counts = counts
        self._clock = clock

        self.failure_count = 0
        self.opened_at: Optional[float] = None

    @property
    def state(self) -> str:
        if self.opened_at is None:
            return self.CLOSED
        if self._clock() - self.opened_at >= self.recovery_timeout:
            return self.HALF_OPEN
        return self.OPEN

    def call(self, func: Callable, *args, **kwargs):
        state = self.state
        if state == self.OPEN:
            remaining = self.recovery_timeout - (self._clock() - self.opened_at)
            raise CircuitOpenError(f"Circuit breaker is OPEN, next attempt in {remaining:.0f}s")

        try:
            result = func(*args, **kwargs)
        except self.counts:
            self.failure_count += 1
            if state == self.HALF_OPEN or self.failure_count >= self.failure_threshold:
                self.opened_at = self._clock()
            raise

        self.failure_count = 0
        self.opened_at = None
        return result
