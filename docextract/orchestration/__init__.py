"""Orchestration module for batch extraction runs."""

from docextract.orchestration.batch_driver import BatchDriver
from docextract.orchestration.request_queue import RequestQueue

__all__ = ["BatchDriver", "RequestQueue"]
