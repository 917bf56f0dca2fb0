"""
Bounded retry with a fixed delay.

Wraps any zero-argument callable. A call counts as failed when it raises one
of ``retry_on``; anything else propagates immediately.

Example:
    retry(10, 5.0, lambda: runner.run_silent("kubectl", "cluster-info"))
"""

from __future__ import annotations

import functools
import logging
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from kubeboot.errors import RetryExhausted
from kubeboot.logger import CommandLogger

logger = logging.getLogger(__name__)

T = TypeVar("T")

__all__ = ["retry", "retrying"]


def retry(
    attempts: int,
    delay: float,
    operation: Callable[[], T],
    *,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
    command_logger: Optional[CommandLogger] = None,
) -> T:
    """
    Invoke ``operation`` up to ``attempts`` times.

    The delay is applied only between attempts. With ``attempts == 0`` the
    operation is never invoked.

    Args:
        attempts: Attempt limit (>= 0)
        delay: Seconds to wait after a failed attempt that will be retried
        operation: Zero-argument callable
        retry_on: Exception types treated as a failed attempt
        sleep: Sleep function (injectable for tests)
        command_logger: Structured event logger

    Returns:
        The operation's return value from the first successful attempt

    Raises:
        RetryExhausted: Every attempt failed; chained from the last failure
        ValueError: Negative attempts or delay
    """
    if attempts < 0:
        raise ValueError(f"attempts must be >= 0, got {attempts}")
    if delay < 0:
        raise ValueError(f"delay must be >= 0, got {delay}")

    events = command_logger or CommandLogger()
    last_error: Optional[BaseException] = None

    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except retry_on as e:
            last_error = e
            if attempt == attempts:
                break
            events.log_attempt_failed(attempt, attempts, e)
            logger.debug("Attempt %d/%d failed, retrying in %ss: %s", attempt, attempts, delay, e)
            sleep(delay)

    events.log_exhausted(attempts, last_error)
    raise RetryExhausted(attempts, last_error) from last_error


def retrying(
    attempts: int,
    delay: float,
    *,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator form of ``retry`` for functions that take arguments."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            return retry(
                attempts,
                delay,
                lambda: func(*args, **kwargs),
                retry_on=retry_on,
            )

        return wrapper

    return decorator
