"""Retry utilities for async operations."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed attempt budget with linearly increasing backoff."""

    max_attempts: int = 3
    base_delay: float = 0.2

    def get_delay(self, attempt: int) -> float:
        """Delay after the given attempt (1-indexed)."""
        return self.base_delay * attempt


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    *,
    retry_on: tuple[Type[BaseException], ...] = (),
    retry_if: Optional[Callable[[T], bool]] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or the attempt budget is spent.

    An attempt is retried when it raises one of ``retry_on`` or when its
    result satisfies ``retry_if``. Once attempts run out, the last result is
    returned or the last exception is re-raised.

    Usage:
        response = await retry_async(
            lambda: client.post(url, json=payload),
            RetryPolicy(max_attempts=3, base_delay=0.2),
            retry_on=(httpx.TransportError,),
            retry_if=lambda r: r.status_code in {502, 503, 504},
        )
    """
    if policy is None:
        policy = RetryPolicy()
    if policy.max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(1, policy.max_attempts + 1):
        is_last = attempt == policy.max_attempts
        try:
            result = await operation()
        except retry_on as e:
            if is_last:
                logger.error(
                    f"All {policy.max_attempts} attempts failed: {type(e).__name__}: {e}"
                )
                raise
            reason = f"{type(e).__name__}: {e}"
        else:
            if retry_if is None or not retry_if(result):
                return result
            if is_last:
                logger.error(
                    f"All {policy.max_attempts} attempts returned a retryable result"
                )
                return result
            reason = f"retryable result {result!r}"

        delay = policy.get_delay(attempt)
        logger.warning(
            f"Attempt {attempt}/{policy.max_attempts} failed ({reason}). "
            f"Waiting {delay:.1f}s..."
        )
        await sleep(delay)

    raise AssertionError("unreachable")
