"""
Bounded retry for async store operations.

The default policy retries immediately: ``retries`` extra attempts after the
first one, first success wins. A positive ``base_delay`` switches on
exponential backoff between attempts, optionally with jitter.

Usage:
    from asset_publisher.utils.retry import RetryPolicy, retry_async

    policy = RetryPolicy(retries=2)
    result = await retry_async(lambda: store.put_object(key, data, None), policy)
"""

import asyncio
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

from asset_publisher.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    Configuration for retry behavior.

    Attributes:
        retries: Retries after the first attempt (total attempts = retries + 1)
        base_delay: Initial delay between attempts in seconds (0 = immediate)
        max_delay: Maximum delay between attempts in seconds
        backoff_multiplier: Multiplier for exponential backoff
        jitter: Whether to randomize delays by +/-50%
        exceptions: Exception types that trigger a retry
    """

    retries: int = 0
    base_delay: float = 0.0
    max_delay: float = 30.0
    backoff_multiplier: float = 2.0
    jitter: bool = False
    exceptions: Tuple[Type[BaseException], ...] = (Exception,)

    @property
    def max_attempts(self) -> int:
        return max(self.retries, 0) + 1


class RetryExhausted(Exception):
    """Raised when every attempt failed; wraps the last failure."""

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        super().__init__(f"failed after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


def calculate_backoff_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    multiplier: float,
    jitter: bool,
) -> float:
    """
    Calculate delay for exponential backoff with optional jitter.

    Formula:
        delay = min(base_delay * (multiplier ** attempt), max_delay)
        if jitter:
            delay = delay * random.uniform(0.5, 1.5)

    Args:
        attempt: Number of failed attempts so far, minus one (0-indexed)
        base_delay: Base delay in seconds
        max_delay: Maximum delay cap
        multiplier: Exponential multiplier
        jitter: Whether to add random jitter

    Returns:
        Delay in seconds (0.0 when base_delay is 0)

    Example:
        >>> calculate_backoff_delay(2, base_delay=1.0, max_delay=60.0,
        ...                         multiplier=2.0, jitter=False)
        4.0
    """
    if base_delay <= 0:
        return 0.0

    delay = min(base_delay * (multiplier ** attempt), max_delay)

    if jitter:
        delay = delay * random.uniform(0.5, 1.5)

    return delay


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    on_attempt: Optional[Callable[[int, Optional[BaseException]], None]] = None,
    name: str = "operation",
) -> T:
    """
    Run ``operation`` until it succeeds or the policy is exhausted.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per call
        policy: Retry policy
        on_attempt: Called after every attempt with (attempt, error or None)
        name: Label used in log messages

    Returns:
        The first successful result

    Raises:
        RetryExhausted: After policy.max_attempts failures
    """
    attempt = 1
    while True:
        try:
            if attempt > 1:
                logger.debug(f"Retry {attempt - 1}/{policy.retries} for {name}")
            result = await operation()
        except policy.exceptions as e:
            if on_attempt:
                on_attempt(attempt, e)

            if attempt > policy.retries:
                logger.warning(f"{name} failed after {attempt} attempts. Last error: {e}")
                raise RetryExhausted(attempt, e) from e

            delay = calculate_backoff_delay(
                attempt=attempt - 1,
                base_delay=policy.base_delay,
                max_delay=policy.max_delay,
                multiplier=policy.backoff_multiplier,
                jitter=policy.jitter,
            )
            logger.debug(
                f"{name} failed on attempt {attempt}: {e}. "
                f"Retrying in {delay:.2f}s..."
            )
            if delay > 0:
                await asyncio.sleep(delay)
            attempt += 1
            continue

        if on_attempt:
            on_attempt(attempt, None)
        if attempt > 1:
            logger.info(f"{name} succeeded on attempt {attempt}")
        return result
