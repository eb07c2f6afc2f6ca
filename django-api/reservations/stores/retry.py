"""Fixed-backoff retry for calls into external resources."""

import logging
import time
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def call_with_retries(
    operation: Callable[[], T],
    *,
    attempts: int,
    delay: float,
    retry_on: tuple[type[BaseException], ...],
    description: str,
) -> T:
    """Run ``operation``, retrying on ``retry_on`` up to ``attempts`` times.

    The last exception is re-raised once the attempts are exhausted.
    """
    attempts = max(1, attempts)
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except retry_on as exc:
            if attempt == attempts:
                raise
            logger.warning(
                "%s failed (attempt %d/%d): %s", description, attempt, attempts, exc
            )
            time.sleep(delay)
    raise AssertionError("unreachable")
