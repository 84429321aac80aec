"""Unit tests for ledger entry models"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from docextract.models.ledger import (
    MISSING_ERROR_SENTINEL,
    ExtractionLogEntry,
    ExtractionStatus,
)

TS = datetime(2024, 3, 1, 12, 30, 45, 123456)


def test_success_line():
    entry = ExtractionLogEntry(
        timestamp=TS, file_path="a/b.pdf", status=ExtractionStatus.SUCCESS
    )

    assert entry.to_line() == "2024-03-01T12:30:45,a/b.pdf,SUCCESS,-\n"


def test_failure_line_flattens_separators():
    entry = ExtractionLogEntry(
        timestamp=TS,
        file_path="b.pdf",
        status=ExtractionStatus.FAILED,
        error_message="status 500,\n  upstream   down",
    )

    assert entry.to_line() == "2024-03-01T12:30:45,b.pdf,FAILED,status 500; upstream down\n"


def test_from_line():
    entry = ExtractionLogEntry.from_line("2024-03-01T12:30:45,b.pdf,FAILED,boom\n")

    assert entry.timestamp == datetime(2024, 3, 1, 12, 30, 45)
    assert entry.status is ExtractionStatus.FAILED
    assert entry.error_message == "boom"


def test_from_line_sentinel_means_no_error():
    entry = ExtractionLogEntry.from_line(
        f"2024-03-01T12:30:45,a.pdf,SUCCESS,{MISSING_ERROR_SENTINEL}"
    )

    assert entry.error_message is None


def test_failure_requires_error_message():
    with pytest.raises(ValidationError):
        ExtractionLogEntry(file_path="a.pdf", status=ExtractionStatus.FAILED)


def test_success_rejects_error_message():
    with pytest.raises(ValidationError):
        ExtractionLogEntry(
            file_path="a.pdf", status=ExtractionStatus.SUCCESS, error_message="x"
        )


def test_factories():
    assert ExtractionLogEntry.success("a.pdf").status is ExtractionStatus.SUCCESS
    failed = ExtractionLogEntry.failure("a.pdf", "boom")
    assert failed.status is ExtractionStatus.FAILED
    assert failed.error_message == "boom"
