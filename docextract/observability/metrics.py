"""Prometheus metrics for batch extraction runs.

Defines counters, gauges, and histograms for monitoring:
- Unit outcomes and processing latency
- Remote call outcomes
- Rate-limit retries at the queue (inner) and driver (outer) layers
- Token bucket level and in-flight requests

Usage:
    from docextract.observability.metrics import UNITS_PROCESSED

    UNITS_PROCESSED.labels(status="success").inc()

The CLI can write the exposition text to a file after a run
(``docextract run --metrics-file metrics.prom``) for the node exporter
textfile collector.
"""

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Private registry so tests and repeated runs do not collide with the default
REGISTRY = CollectorRegistry(auto_describe=True)

# =============================================================================
# COUNTERS
# =============================================================================

UNITS_PROCESSED = Counter(
    name="docextract_units_processed_total",
    documentation="Units of work reaching a terminal outcome",
    labelnames=["status"],  # success, failed, exhausted
    registry=REGISTRY,
)

REMOTE_CALLS = Counter(
    name="docextract_remote_calls_total",
    documentation="Remote inference calls by outcome",
    labelnames=["outcome"],  # success, rate_limited, error
    registry=REGISTRY,
)

RATE_LIMIT_RETRIES = Counter(
    name="docextract_rate_limit_retries_total",
    documentation="Retries caused by remote rate limiting",
    labelnames=["layer"],  # inner (request queue), outer (batch driver)
    registry=REGISTRY,
)

# =============================================================================
# GAUGES
# =============================================================================

TOKENS_AVAILABLE = Gauge(
    name="docextract_tokens_available",
    documentation="Tokens left in the local rate budget",
    registry=REGISTRY,
)

IN_FLIGHT_REQUESTS = Gauge(
    name="docextract_in_flight_requests",
    documentation="Requests currently holding a concurrency permit",
    registry=REGISTRY,
)

# =============================================================================
# HISTOGRAMS
# =============================================================================

UNIT_PROCESSING_DURATION = Histogram(
    name="docextract_unit_processing_seconds",
    documentation="Wall time from first attempt to terminal outcome per unit",
    buckets=(1, 5, 15, 30, 60, 120, 300, 600, 1800),
    registry=REGISTRY,
)


def get_metrics_text() -> bytes:
    """Render all metrics in Prometheus exposition format."""
    return generate_latest(REGISTRY)
