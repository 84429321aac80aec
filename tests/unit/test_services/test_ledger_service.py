"""Unit tests for the extraction ledger"""

import threading

import pytest

from docextract.models.ledger import (
    LEDGER_HEADER,
    ExtractionLogEntry,
    ExtractionStatus,
)
from docextract.services.ledger_service import (
    FAILURE_LOG_NAME,
    SUCCESS_LOG_NAME,
    ExtractionLedger,
)


@pytest.fixture
def ledger(tmp_path):
    return ExtractionLedger(tmp_path / "logs")


def test_creates_log_dir(tmp_path):
    log_dir = tmp_path / "nested" / "logs"

    ledger = ExtractionLedger(log_dir)

    assert log_dir.is_dir()
    assert ledger.success_log == log_dir / SUCCESS_LOG_NAME
    assert ledger.failure_log == log_dir / FAILURE_LOG_NAME


def test_files_not_created_until_first_write(ledger):
    assert not ledger.success_log.exists()
    assert not ledger.failure_log.exists()
    assert ledger.read_entries(ExtractionStatus.SUCCESS) == []


def test_header_written_once(ledger):
    ledger.append(ExtractionLogEntry.success("a.pdf"))
    ledger.append(ExtractionLogEntry.success("b.pdf"))

    lines = ledger.success_log.read_text(encoding="utf-8").splitlines()

    assert lines[0] == LEDGER_HEADER
    assert lines.count(LEDGER_HEADER) == 1
    assert len(lines) == 3


def test_entries_routed_by_status(ledger):
    ledger.append(ExtractionLogEntry.success("a.pdf"))
    ledger.append(ExtractionLogEntry.failure("b.pdf", "boom"))

    success = ledger.read_entries(ExtractionStatus.SUCCESS)
    failed = ledger.read_entries(ExtractionStatus.FAILED)

    assert [e.file_path for e in success] == ["a.pdf"]
    assert [e.file_path for e in failed] == ["b.pdf"]
    assert failed[0].error_message == "boom"
    assert ledger.path_for(ExtractionStatus.FAILED) == ledger.failure_log


def test_success_line_uses_sentinel(ledger):
    ledger.append(ExtractionLogEntry.success("a.pdf"))

    line = ledger.success_log.read_text(encoding="utf-8").splitlines()[1]

    assert line.endswith(",a.pdf,SUCCESS,-")


def test_appends_to_existing_file(tmp_path):
    log_dir = tmp_path / "logs"
    ExtractionLedger(log_dir).append(ExtractionLogEntry.success("a.pdf"))

    # A second run against the same directory keeps earlier lines
    ExtractionLedger(log_dir).append(ExtractionLogEntry.success("b.pdf"))

    entries = ExtractionLedger(log_dir).read_entries(ExtractionStatus.SUCCESS)
    assert [e.file_path for e in entries] == ["a.pdf", "b.pdf"]


def test_concurrent_appends_do_not_interleave(ledger):
    def worker(n):
        for i in range(50):
            ledger.append(ExtractionLogEntry.failure(f"w{n}/doc{i}.pdf", "rate limited, giving up"))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    lines = ledger.failure_log.read_text(encoding="utf-8").splitlines()
    assert lines.count(LEDGER_HEADER) == 1
    assert len(lines) == 1 + 8 * 50

    entries = ledger.read_entries(ExtractionStatus.FAILED)
    assert len({e.file_path for e in entries}) == 400
    assert all(e.error_message == "rate limited; giving up" for e in entries)
