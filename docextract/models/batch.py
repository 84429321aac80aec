"""Batch run data models

This module defines the data structures for:
- Outer retry policy (attempts, exponential backoff)
- Batch configuration (directories, extension filter, fan-out limit)
- Units of work discovered from the input tree
- Run statistics and the final batch result
"""

from pathlib import Path
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RetryConfig(BaseModel):
    """Configuration for outer retries with exponential backoff

    Delay before attempt ``n + 1`` is ``base_delay_seconds * 2^(n - 1)``,
    capped at ``max_delay_seconds`` and optionally spread by jitter.
    """

    max_attempts: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Maximum outer attempts per unit (1 initial + N-1 retries)",
    )
    base_delay_seconds: float = Field(
        default=2.0,
        ge=0.0,
        le=60.0,
        description="Base delay for exponential backoff",
    )
    max_delay_seconds: float = Field(
        default=120.0,
        ge=0.0,
        le=3600.0,
        description="Maximum delay cap",
    )
    jitter_factor: float = Field(
        default=0.0,
        ge=0.0,
        le=0.5,
        description="Jitter factor for randomization",
    )


class BatchConfig(BaseModel):
    """Configuration for one batch run"""

    input_dir: Path = Path("data")
    output_dir: Path = Path("output")
    log_dir: Path = Path("logs")
    extensions: List[str] = Field(default_factory=lambda: ["pdf"], min_length=1)
    output_extension: str = "json"
    max_concurrent_units: int = Field(default=3, ge=1, le=100)
    retry: RetryConfig = Field(default_factory=RetryConfig)

    @field_validator("extensions")
    @classmethod
    def normalize_extensions(cls, v: List[str]) -> List[str]:
        """Store extensions lower-case without the leading dot"""
        normalized = [ext.lower().lstrip(".") for ext in v]
        if any(not ext for ext in normalized):
            raise ValueError("Extensions cannot be empty")
        return normalized

    @field_validator("output_extension")
    @classmethod
    def normalize_output_extension(cls, v: str) -> str:
        v = v.lstrip(".")
        if not v:
            raise ValueError("output_extension cannot be empty")
        return v


class UnitOfWork(BaseModel):
    """One document to process end-to-end.

    Carries only what a single unit needs: where to read it and where its
    result goes.
    """

    source_path: Path
    input_root: Path
    output_root: Path
    output_extension: str = "json"

    model_config = ConfigDict(frozen=True)

    @property
    def relative_path(self) -> Path:
        return self.source_path.relative_to(self.input_root)

    @property
    def output_path(self) -> Path:
        """Mirror of the relative input path under the output root"""
        return (self.output_root / self.relative_path).with_suffix(
            f".{self.output_extension}"
        )

    @property
    def display_name(self) -> str:
        return self.relative_path.as_posix()


class BatchStats(BaseModel):
    """Statistics for a batch run"""

    total_units: int = 0
    units_succeeded: int = 0
    units_failed: int = 0
    units_exhausted: int = 0
    rate_limit_retries: int = 0
    in_flight_units: int = 0

    total_duration_seconds: float = 0.0

    @property
    def units_completed(self) -> int:
        return self.units_succeeded + self.units_failed


class BatchResult(BaseModel):
    """Summary returned to the caller after a batch run"""

    run_id: str
    stats: BatchStats
    success_log: Path
    failure_log: Path
    failed_units: List[str] = Field(default_factory=list)

    @property
    def all_succeeded(self) -> bool:
        return self.stats.units_failed == 0
