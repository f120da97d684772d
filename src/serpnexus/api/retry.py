import asyncio
import logging
import random
from typing import Awaitable, Callable, Sequence, Type, TypeVar

from ..config import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(policy: RetryPolicy, attempt: int) -> float:
    """Exponential delay with jitter before retry number ``attempt`` (1-based)."""
    delay = min(policy.max_delay, policy.base_delay * (2 ** (attempt - 1)))
    return delay * (0.8 + 0.4 * random.random())


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    retry_on: Sequence[Type[BaseException]],
    policy: RetryPolicy,
    label: str = "request",
) -> T:
    attempt = 0
    while True:
        try:
            return await fn()
        except tuple(retry_on) as e:
            attempt += 1
            if attempt >= policy.max_attempts:
                raise
            delay = backoff_delay(policy, attempt)
            logger.warning(
                "%s failed (attempt %d/%d): %s; retrying in %.2fs",
                label, attempt, policy.max_attempts, e, delay,
            )
            await asyncio.sleep(delay)
