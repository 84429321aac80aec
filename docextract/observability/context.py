"""Correlation ID context for tracing one batch run.

The batch driver sets the run id as the correlation id so every log entry
emitted while processing the run, including those from concurrent unit
tasks, carries it. ContextVar values are copied into tasks created with
``asyncio.create_task``/``gather``, so the id follows each unit.

Usage:
    from docextract.observability.context import correlation_id_context

    with correlation_id_context(run_id):
        await driver.run()
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Generator, Optional

_correlation_id_var: ContextVar[Optional[str]] = ContextVar(
    "correlation_id", default=None
)


def new_run_id() -> str:
    """Short random id for a batch run."""
    return uuid.uuid4().hex[:12]


def get_correlation_id() -> Optional[str]:
    return _correlation_id_var.get()


@contextmanager
def correlation_id_context(
    corr_id: Optional[str] = None,
) -> Generator[str, None, None]:
    """Scoped correlation ID; the previous value is restored on exit.

    Args:
        corr_id: Optional correlation ID. If None, generates a run id.

    Yields:
        The correlation ID being used in this context.
    """
    if corr_id is None:
        corr_id = new_run_id()

    token = _correlation_id_var.set(corr_id)
    try:
        yield corr_id
    finally:
        _correlation_id_var.reset(token)
