"""
Helpers for running store I/O inside the event loop.
"""
from __future__ import annotations

import asyncio
import logging
from functools import wraps
from typing import Awaitable, Callable, List, TypeVar

from sentrydash.core.errors import DependencyError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_async(
    max_attempts: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    exceptions: tuple = (Exception,),
):
    """
    Decorator that retries a coroutine function.

    Args:
        max_attempts: Maximum number of attempts
        delay: Initial delay between attempts
        backoff: Multiplier applied to the delay after each failure
        exceptions: Exceptions that trigger another attempt
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            current_delay = delay
            last_exception = None

            for attempt in range(max_attempts):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e
                    if attempt < max_attempts - 1:
                        logger.warning(
                            f"Attempt {attempt + 1} failed for {func.__name__}: {e}. "
                            f"Retrying in {current_delay}s..."
                        )
                        await asyncio.sleep(current_delay)
                        current_delay *= backoff
                    else:
                        logger.error(
                            f"All {max_attempts} attempts failed for {func.__name__}"
                        )

            raise last_exception

        return wrapper
    return decorator


async def run_blocking(
    func: Callable[..., T],
    *args,
    timeout: float,
    operation: str,
) -> T:
    """
    Run a blocking call in a worker thread with a deadline.

    A timeout is reported as a DependencyError. The underlying call may still
    complete after the deadline, so callers must re-read instead of assuming
    the write did not happen.
    """
    try:
        return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.error(f"{operation} timed out after {timeout}s")
        raise DependencyError(
            f"Store did not answer in time during {operation}; outcome unknown",
            operation=operation,
        ) from exc


async def gather_with_errors(
    *coros: Awaitable[T],
    return_exceptions: bool = True,
) -> List[T | Exception]:
    """
    Run coroutines concurrently and return results even when some fail.

    Args:
        *coros: Coroutines to run
        return_exceptions: If True, exceptions are returned as results

    Returns:
        List of results or exceptions
    """
    results = await asyncio.gather(*coros, return_exceptions=return_exceptions)
    return list(results)
