"""Request queue configuration models.

Defines the token bucket budget, the concurrency gate size and the inner
rate-limit retry policy used by the RequestQueue.
"""

from pydantic import BaseModel, ConfigDict, Field


class QueueConfig(BaseModel):
    """Admission control configuration for remote calls"""

    # Token bucket settings
    max_tokens: int = Field(
        default=1_000_000, ge=1, description="Maximum tokens held by the bucket"
    )
    refill_tokens: int = Field(
        default=100_000, ge=1, description="Tokens added per refill interval"
    )
    refill_interval_seconds: float = Field(
        default=60.0, gt=0.0, description="Seconds between refill ticks"
    )

    # Concurrency gate
    max_concurrent_requests: int = Field(default=3, ge=1, le=100)

    # Inner retry settings
    token_poll_interval_seconds: float = Field(
        default=0.1,
        gt=0.0,
        le=60.0,
        description="Sleep between token checks when the bucket is empty",
    )
    rate_limit_retry_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=300.0,
        description="Sleep after a remote rate-limit rejection",
    )
    max_rate_limit_retries: int = Field(
        default=10,
        ge=0,
        le=1000,
        description="Rate-limit retries inside one execute() call",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "max_tokens": 1000000,
                "refill_tokens": 100000,
                "refill_interval_seconds": 60.0,
                "max_concurrent_requests": 3,
                "token_poll_interval_seconds": 0.1,
                "rate_limit_retry_delay_seconds": 1.0,
                "max_rate_limit_retries": 10,
            }
        }
    )
