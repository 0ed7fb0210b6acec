"""Retry policy for flaky runtime operations.

A :class:`RetryPolicy` owns the attempt budget, the error classifier and
the sleep function. Components describe *what* is retryable through the
classifier; the policy decides *when* to stop. The sleep function is
injectable so tests can run backoff loops without real delay.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryDecision:
    """Classifier verdict for a single failed attempt."""
    retry: bool
    delay: float = 0.0
    reason: str = ""


def constant_backoff(delay: float) -> Callable[[Exception], RetryDecision]:
    """Classifier that retries every failure after a fixed delay."""
    def classify(error: Exception) -> RetryDecision:
        return RetryDecision(retry=True, delay=delay)
    return classify


class RetryError(Exception):
    """Raised when a retried operation gives up."""

    def __init__(self, attempts: int, last_error: Exception, aborted: bool = False, reason: str = ""):
        self.attempts = attempts
        self.last_error = last_error
        self.aborted = aborted
        self.reason = reason
        state = "aborted" if aborted else "exhausted"
        super().__init__(f"Retries {state} after {attempts} attempt(s): {last_error}")


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry loop with classifier-driven backoff."""
    max_attempts: int = 3
    classify: Callable[[Exception], RetryDecision] = field(default_factory=lambda: constant_backoff(3.0))
    sleep: Callable[[float], None] = time.sleep
    retry_on: tuple = (Exception,)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")

    def with_attempts(self, max_attempts: int) -> "RetryPolicy":
        """Copy of this policy with a different attempt budget."""
        return RetryPolicy(
            max_attempts=max_attempts,
            classify=self.classify,
            sleep=self.sleep,
            retry_on=self.retry_on,
        )

    def run(self, operation: Callable[[], T], description: str = "operation") -> T:
        """Run ``operation`` until it succeeds or the policy gives up.

        Exceptions outside ``retry_on`` propagate untouched. Otherwise the
        last error is wrapped in :class:`RetryError`. No sleep happens after
        the final attempt.
        """
        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return operation()
            except self.retry_on as e:
                last_error = e
                decision = self.classify(e)
                
                if not decision.retry:
                    logger.debug(f"{description} not retryable: {decision.reason or e}")
                    raise RetryError(attempt, e, aborted=True, reason=decision.reason) from e
                    
                if attempt < self.max_attempts:
                    logger.warning(
                        f"{description} failed ({decision.reason or e}), "
                        f"retrying in {decision.delay:g}s ({attempt}/{self.max_attempts})..."
                    )
                    self.sleep(decision.delay)
                    
        raise RetryError(self.max_attempts, last_error) from last_error
