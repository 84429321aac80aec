import threading
import time
from typing import Callable

from docextract.models.queue import QueueConfig
from docextract.observability.logging import get_logger

logger = get_logger("rate_limiter")


class TokenBucket:
    """Token bucket used as a local proxy for the remote request quota.

    Refill is lazy: whole elapsed intervals since the last refill are credited
    on access, and ``last_refill`` advances by exactly those intervals so the
    fractional remainder carries over to the next evaluation.
    """

    def __init__(
        self,
        capacity: int,
        refill_amount: int,
        refill_interval: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        if refill_interval <= 0:
            raise ValueError("refill_interval must be positive")

        self.capacity = capacity
        self.refill_amount = refill_amount
        self.refill_interval = refill_interval
        self._clock = clock
        self._lock = threading.Lock()
        self.tokens = capacity
        self.last_refill = clock()

    @classmethod
    def from_config(
        cls, config: QueueConfig, clock: Callable[[], float] = time.monotonic
    ) -> "TokenBucket":
        return cls(
            capacity=config.max_tokens,
            refill_amount=config.refill_tokens,
            refill_interval=config.refill_interval_seconds,
            clock=clock,
        )

    def _refill_locked(self) -> None:
        elapsed = self._clock() - self.last_refill
        intervals = int(elapsed // self.refill_interval)
        if intervals >= 1:
            before = self.tokens
            self.tokens = min(
                self.capacity, self.tokens + intervals * self.refill_amount
            )
            self.last_refill += intervals * self.refill_interval
            logger.debug(
                "token_bucket_refilled",
                intervals=intervals,
                tokens_before=before,
                tokens_after=self.tokens,
            )

    def refill(self) -> None:
        """Credit any whole refill intervals that have elapsed."""
        with self._lock:
            self._refill_locked()

    def try_consume(self) -> bool:
        """Take one token if available. Never blocks."""
        with self._lock:
            self._refill_locked()
            if self.tokens > 0:
                self.tokens -= 1
                return True
            return False

    @property
    def available(self) -> int:
        with self._lock:
            self._refill_locked()
            return self.tokens
