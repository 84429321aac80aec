"""Structured logging with correlation ID propagation.

Configures structlog with:
- Automatic correlation ID (batch run id) injection into all log entries
- Component name binding for log filtering
- JSON output for log aggregation or coloured console output for humans

Usage:
    from docextract.observability.logging import get_logger, configure_logging

    # Configure at application startup
    configure_logging(level="INFO")

    # Get logger with component context
    logger = get_logger("batch_driver")
    logger.info("unit_succeeded", file_path="contracts/a.pdf")

    # Output includes correlation_id automatically:
    # {"event": "unit_succeeded", "file_path": "contracts/a.pdf",
    #  "correlation_id": "3f9c0d1e2a4b", "component": "batch_driver", ...}
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.typing import EventDict, WrappedLogger

from docextract.observability.context import get_correlation_id


def add_correlation_id_processor(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that adds correlation_id to log entries.

    If no correlation ID is set, uses "none".
    """
    corr_id = get_correlation_id()
    event_dict["correlation_id"] = corr_id if corr_id else "none"
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON. If False, use console format.
        add_timestamp: If True, add ISO timestamp to each log entry.

    Example:
        # Unattended batch runs (JSON for log aggregation)
        configure_logging(level="INFO", json_output=True)

        # Interactive runs (readable console output)
        configure_logging(level="DEBUG", json_output=False)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        add_correlation_id_processor,
        structlog.processors.add_log_level,
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ]
        ),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(
    component: Optional[str] = None,
    **initial_context: Any,
) -> Any:
    """Get a structured logger with optional component context.

    Args:
        component: Optional component/service name to include in logs
        **initial_context: Additional context to bind to all log entries

    Returns:
        A bound structlog logger

    Example:
        logger = get_logger("request_queue")
        logger.info("rate_limited_retrying", attempt=2)

        logger = get_logger("batch_driver", run_id="3f9c0d1e2a4b")
        logger.info("batch_started")  # Includes run_id
    """
    if component:
        initial_context["component"] = component

    # Unresolved until first use, so it follows later configure_logging() calls
    return structlog.get_logger(**initial_context)
