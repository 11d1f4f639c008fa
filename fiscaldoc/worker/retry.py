import time
from collections.abc import Callable
from typing import Any, TypeVar

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from fiscaldoc.config.settings import Settings
from fiscaldoc.logging.logger import Log
from fiscaldoc.worker.exceptions import RetryExhaustedError

T = TypeVar("T")

SleepFn = Callable[[float], None]


class RetryPolicy:
    """Fixed-count retry with exponential backoff, independent of what it wraps.

    The delay after failed attempt ``n`` is ``backoff_base_seconds * 2 ** (n - 1)``
    (2, 4, 8, 16 s for the defaults). ``sleep`` performs the wait; pass the broker
    connection's sleep when the policy runs on the consuming thread so heartbeats
    keep flowing.
    """

    def __init__(
        self,
        max_attempts: int,
        backoff_base_seconds: float = 2.0,
        retry_on: tuple[type[Exception], ...] = (Exception,),
        sleep: SleepFn = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.backoff_base_seconds = backoff_base_seconds
        self._retry_on = retry_on
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings, sleep: SleepFn = time.sleep) -> "RetryPolicy":
        return cls(
            max_attempts=settings.consumer_max_attempts,
            backoff_base_seconds=settings.consumer_backoff_base_seconds,
            sleep=sleep,
        )

    def execute(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Call ``fn`` until it returns, sleeping between failed attempts.

        Exceptions outside ``retry_on`` propagate immediately.

        Raises:
            RetryExhaustedError: after ``max_attempts`` failures, chained to
                the last exception raised by ``fn``.
        """
        retryer = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_base_seconds),
            retry=retry_if_exception_type(self._retry_on),
            sleep=self._sleep,
            before_sleep=self._log_retry,
        )
        try:
            return retryer(fn, *args, **kwargs)
        except RetryError as exc:
            last_error = exc.last_attempt.exception() or exc
            raise RetryExhaustedError(self.max_attempts, last_error) from last_error

    def _log_retry(self, retry_state: RetryCallState) -> None:
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        error = retry_state.outcome.exception() if retry_state.outcome else None
        Log.warning(
            f"Attempt {retry_state.attempt_number}/{self.max_attempts} failed: {error}. "
            f"Retrying in {delay:g}s",
            attempt=retry_state.attempt_number,
            delay_seconds=delay,
        )
