"""Observability for batch runs.

Provides:
- Correlation ID context (the batch run id)
- Structured logging with context propagation
- Prometheus metrics for unit outcomes, remote calls and rate limiting
"""

from docextract.observability.context import (
    correlation_id_context,
    get_correlation_id,
    new_run_id,
)
from docextract.observability.logging import configure_logging, get_logger
from docextract.observability.metrics import (
    IN_FLIGHT_REQUESTS,
    RATE_LIMIT_RETRIES,
    REMOTE_CALLS,
    TOKENS_AVAILABLE,
    UNIT_PROCESSING_DURATION,
    UNITS_PROCESSED,
    get_metrics_text,
)

__all__ = [
    # Context
    "correlation_id_context",
    "get_correlation_id",
    "new_run_id",
    # Logging
    "configure_logging",
    "get_logger",
    # Metrics
    "UNITS_PROCESSED",
    "REMOTE_CALLS",
    "RATE_LIMIT_RETRIES",
    "TOKENS_AVAILABLE",
    "IN_FLIGHT_REQUESTS",
    "UNIT_PROCESSING_DURATION",
    "get_metrics_text",
]
