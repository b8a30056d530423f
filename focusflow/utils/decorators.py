import asyncio
import functools
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_RETRIES = 3
INITIAL_RETRY_DELAY = 1.0  # seconds


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    retries: int = MAX_RETRIES,
    delay: float = INITIAL_RETRY_DELAY,
) -> T:
    """
    Run ``operation``; on failure wait ``delay`` seconds and try again with
    the delay doubled, at most ``retries`` more times.

    Every exception is retried the same way. When retries run out the last
    exception propagates unchanged. Only pass idempotent operations: there
    is no deduplication, so a retried insert can write a second row.
    """
    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as e:
            if retries <= 0:
                raise
            logger.warning(f"Attempt {attempt} failed: {e}. Retrying in {delay:.2f}s")
            await asyncio.sleep(delay)
            retries -= 1
            delay *= 2
            attempt += 1


def with_retry(retries: int = MAX_RETRIES, delay: float = INITIAL_RETRY_DELAY):
    """Decorator form of ``retry_with_backoff`` for async functions"""
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            return await retry_with_backoff(
                lambda: func(*args, **kwargs),
                retries=retries,
                delay=delay,
            )
        return wrapper
    return decorator
