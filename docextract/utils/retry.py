"""Outer retry handler for units of work

Implements exponential backoff between full unit-processing attempts.

Features:
- Configurable attempt ceiling and delays
- Exponential backoff: delay = base * 2^(attempt - 1)
- Optional jitter for request spreading
- Respects retry-after hints from rate limit errors
- Callback support for retry notifications
- Typed exhaustion error carrying the attempt count
"""

import asyncio
import random
from typing import Awaitable, Callable, Optional, Set, Type, TypeVar

from docextract.models.batch import RetryConfig
from docextract.observability.logging import get_logger
from docextract.utils.exceptions import RateLimitError, RetryExhaustedError

logger = get_logger("retry")


T = TypeVar("T")


class RetryHandler:
    """Async retry handler with exponential backoff.

    Only exceptions in ``retryable_exceptions`` consume an attempt and back
    off; anything else propagates immediately. When every attempt fails with a
    retryable error, ``RetryExhaustedError`` is raised.
    """

    def __init__(
        self,
        config: RetryConfig,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize retry handler with configuration.

        Args:
            config: Retry configuration with max_attempts, delays, and jitter
            sleep: Awaitable sleep used between attempts
        """
        self.config = config
        self._sleep = sleep

    def calculate_delay(
        self, attempt: int, retry_after: Optional[float] = None
    ) -> float:
        """Calculate delay after a failed attempt.

        Args:
            attempt: The attempt that just failed (1-indexed)
            retry_after: Optional retry-after value from error

        Returns:
            Delay in seconds to wait before next attempt
        """
        if retry_after is not None and retry_after > 0:
            base_delay = retry_after
        else:
            base_delay = self.config.base_delay_seconds * (2 ** (attempt - 1))

        jitter = base_delay * self.config.jitter_factor
        delay = base_delay + random.uniform(-jitter, jitter) if jitter else base_delay

        return max(0.0, min(delay, self.config.max_delay_seconds))

    async def execute(
        self,
        func: Callable[[], Awaitable[T]],
        retryable_exceptions: Optional[Set[Type[Exception]]] = None,
        on_retry: Optional[Callable[[int, Exception, float], None]] = None,
    ) -> T:
        """Execute function with retry logic.

        Args:
            func: Async function to execute
            retryable_exceptions: Exception types that should trigger retry
                (defaults to RateLimitError)
            on_retry: Optional callback called before each retry with
                     (attempt_number, exception, delay_seconds)

        Returns:
            Result of successful function execution

        Raises:
            RetryExhaustedError: If every attempt failed with a retryable error
            Exception: Any non-retryable exception, unchanged
        """
        if retryable_exceptions is None:
            retryable_exceptions = {RateLimitError}
        max_attempts = self.config.max_attempts

        for attempt in range(1, max_attempts + 1):
            try:
                return await func()
            except Exception as e:
                if not any(isinstance(e, t) for t in retryable_exceptions):
                    raise

                if attempt >= max_attempts:
                    logger.warning(
                        "retries_exhausted",
                        attempts=attempt,
                        error_type=type(e).__name__,
                        error_message=str(e),
                    )
                    raise RetryExhaustedError(attempt, e) from e

                retry_after = getattr(e, "retry_after", None)
                delay = self.calculate_delay(attempt, retry_after)

                logger.warning(
                    "retry_attempt",
                    attempt=attempt,
                    max_attempts=max_attempts,
                    error_type=type(e).__name__,
                    error_message=str(e),
                    delay_seconds=delay,
                    retry_after=retry_after,
                )

                if on_retry is not None:
                    on_retry(attempt, e, delay)

                await self._sleep(delay)

        # max_attempts >= 1 so the loop always returns or raises
        raise RuntimeError(  # pragma: no cover
            "Retry loop completed without result or exception"
        )
