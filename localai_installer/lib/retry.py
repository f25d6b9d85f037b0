from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, TypeVar

from ..errors import RetryError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryOutcome:
    action: str
    attempts: int
    success: bool
    last_error: Optional[BaseException] = None


def retry_outcome(
    action: str,
    fn: Callable[[], T],
    *,
    attempts: int,
    delay: float,
    sleep: Callable[[float], None] = time.sleep,
) -> Tuple[RetryOutcome, Optional[T]]:
    """Run fn up to `attempts` times, sleeping `delay` seconds between failures.

    Returns (outcome, result). result is None when every attempt failed.
    """

    if attempts < 1:
        raise ValueError(f"attempts must be >= 1, got {attempts}")

    last_error: Optional[BaseException] = None
    for attempt in range(1, attempts + 1):
        logger.info("%s (attempt %d/%d)", action, attempt, attempts)
        try:
            result = fn()
        except Exception as e:
            last_error = e
            logger.warning("%s failed on attempt %d/%d: %s", action, attempt, attempts, e)
            if attempt < attempts:
                logger.info("Retrying %s in %ss", action, delay)
                sleep(delay)
            continue

        logger.info("%s succeeded", action)
        return RetryOutcome(action=action, attempts=attempt, success=True), result

    logger.error("%s failed after %d attempt(s)", action, attempts)
    return RetryOutcome(action=action, attempts=attempts, success=False, last_error=last_error), None


def retry(
    action: str,
    fn: Callable[[], T],
    *,
    attempts: int,
    delay: float,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Like retry_outcome(), but raises RetryError once attempts are exhausted."""

    outcome, result = retry_outcome(action, fn, attempts=attempts, delay=delay, sleep=sleep)
    if not outcome.success:
        raise RetryError(outcome) from outcome.last_error
    return result  # type: ignore[return-value]
