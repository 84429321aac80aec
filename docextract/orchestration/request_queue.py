"""Rate-limited, concurrency-bounded request execution.

Composes a TokenBucket (request volume) and a ConcurrencyGate (request
concurrency) into one admission protocol:

1. Acquire a concurrency permit and hold it for the whole retry loop
2. Wait for a token, polling the bucket without invoking the task
3. Invoke the task
   - success: return the value
   - RateLimitError: sleep and retry, up to max_rate_limit_retries
   - anything else: propagate immediately
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from docextract.models.queue import QueueConfig
from docextract.observability.logging import get_logger
from docextract.observability.metrics import (
    IN_FLIGHT_REQUESTS,
    RATE_LIMIT_RETRIES,
    REMOTE_CALLS,
    TOKENS_AVAILABLE,
)
from docextract.utils.concurrency import ConcurrencyGate
from docextract.utils.exceptions import RateLimitError
from docextract.utils.rate_limiter import TokenBucket

logger = get_logger("request_queue")

T = TypeVar("T")


class RequestQueue:
    """Admission control for remote calls shared by all unit tasks.

    Safe for concurrent callers: the bucket is lock-protected and the gate is
    a semaphore.
    """

    def __init__(
        self,
        config: QueueConfig,
        token_bucket: Optional[TokenBucket] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config
        self.token_bucket = token_bucket or TokenBucket.from_config(config)
        self.gate = ConcurrencyGate(config.max_concurrent_requests)
        self._sleep = sleep

        TOKENS_AVAILABLE.set(self.token_bucket.tokens)

        logger.info(
            "request_queue_initialized",
            max_tokens=config.max_tokens,
            refill_tokens=config.refill_tokens,
            refill_interval_seconds=config.refill_interval_seconds,
            max_concurrent_requests=config.max_concurrent_requests,
            max_rate_limit_retries=config.max_rate_limit_retries,
        )

    async def execute(self, task: Callable[[], Awaitable[T]]) -> T:
        """Run ``task`` under the concurrency gate and token budget.

        Args:
            task: Zero-argument coroutine function performing one remote call

        Returns:
            The task's result

        Raises:
            RateLimitError: If the task is still rate limited after
                max_rate_limit_retries retries
            Exception: Any other task failure, on first occurrence
        """
        async with self.gate.permit():
            IN_FLIGHT_REQUESTS.inc()
            try:
                retrying = AsyncRetrying(
                    retry=retry_if_exception_type(RateLimitError),
                    stop=stop_after_attempt(self.config.max_rate_limit_retries + 1),
                    wait=wait_fixed(self.config.rate_limit_retry_delay_seconds),
                    before_sleep=self._log_rate_limited,
                    sleep=self._sleep,
                    reraise=True,
                )
                async for attempt in retrying:
                    with attempt:
                        await self._acquire_token()
                        result = await self._invoke(task)
                return result
            finally:
                IN_FLIGHT_REQUESTS.dec()

    async def _acquire_token(self) -> None:
        """Block the calling task until the bucket yields a token."""
        waited = 0
        while not self.token_bucket.try_consume():
            if waited == 0:
                logger.debug("token_bucket_empty_waiting")
            waited += 1
            await self._sleep(self.config.token_poll_interval_seconds)

        TOKENS_AVAILABLE.set(self.token_bucket.tokens)
        if waited:
            logger.debug("token_acquired_after_wait", polls=waited)

    async def _invoke(self, task: Callable[[], Awaitable[T]]) -> T:
        try:
            result = await task()
        except RateLimitError:
            REMOTE_CALLS.labels(outcome="rate_limited").inc()
            raise
        except Exception:
            REMOTE_CALLS.labels(outcome="error").inc()
            raise
        REMOTE_CALLS.labels(outcome="success").inc()
        return result

    def _log_rate_limited(self, retry_state: RetryCallState) -> None:
        RATE_LIMIT_RETRIES.labels(layer="inner").inc()
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "rate_limited_retrying",
            attempt=retry_state.attempt_number,
            max_retries=self.config.max_rate_limit_retries,
            delay_seconds=self.config.rate_limit_retry_delay_seconds,
            error=str(error),
        )

    def available_tokens(self) -> int:
        """Current token count, after crediting elapsed refills."""
        return self.token_bucket.available
