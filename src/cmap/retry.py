"""
Bounded retry for transient transport failures.
"""

import random
import time
from typing import Callable, TypeVar

from .errors import TransportError
from .logging import http_logger as logger

T = TypeVar("T")


class RetryPolicy:
    """
    Retry a call on TransportError with exponential backoff.

    Server errors and validation errors propagate immediately; only failures
    to reach the server are retried.

    Args:
        max_retries: Retries after the first attempt (0 disables retrying)
        backoff_factor: Exponential backoff multiplier
        base_delay: Delay in seconds before the first retry
    """

    def __init__(self, max_retries: int = 0, backoff_factor: float = 2.0, base_delay: float = 1.0,
                 sleep: Callable[[float], None] = time.sleep):
        if max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.base_delay = base_delay
        self._sleep = sleep

    def delay_for(self, attempt: int) -> float:
        """Backoff before retry number ``attempt`` (1-based), with jitter."""
        delay = self.base_delay * (self.backoff_factor ** (attempt - 1))
        return delay + random.uniform(0.1, 0.3) * delay

    def call(self, func: Callable[[], T]) -> T:
        attempt = 0
        while True:
            try:
                return func()
            except TransportError:
                if attempt >= self.max_retries:
                    raise
                logger.warning(f"transport failure, will retry | attempt:{attempt + 1}")

            attempt += 1
            total_delay = self.delay_for(attempt)
            logger.info(f"retry attempt {attempt}/{self.max_retries} | delay:{total_delay:.1f}s")
            self._sleep(total_delay)
