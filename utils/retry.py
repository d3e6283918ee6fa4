"""Bounded retry with exponential backoff for upstream inference calls."""
import time
from typing import Callable, Tuple, TypeVar

from utils.logger import get_logger

logger = get_logger("retry")

T = TypeVar("T")


def retry_with_backoff(
    operation: Callable[[], T],
    *,
    attempts: int = 1,
    delay: float = 1.0,
    backoff: float = 2.0,
    exceptions: Tuple[type, ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run `operation` up to `attempts` times, sleeping between failures.

    With the default `attempts=1` the operation runs exactly once and any
    exception propagates unchanged.

    Args:
        operation: Zero-argument callable to execute
        attempts: Total number of tries (values below 1 are treated as 1)
        delay: Seconds to wait after the first failure
        backoff: Multiplier applied to the delay after each failure
        exceptions: Exception types that trigger a retry
        sleep: Sleep function (injectable for tests)

    Returns:
        Whatever `operation` returns on its first successful call
    """
    attempts = max(1, attempts)
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except exceptions as exc:
            if attempt == attempts:
                raise
            logger.warning(f"Attempt {attempt}/{attempts} failed: {exc}; retrying in {delay:.2f}s")
            sleep(delay)
            delay *= backoff
    raise RuntimeError("unreachable")
