"""
Extraction ledger: durable, append-only record of per-unit outcomes.

Successes and failures go to two separate files. Each file gets its header
on first write and is append-only afterwards. Every append is one complete
line written in a single call under a per-file lock, so concurrent units
never interleave partial lines.
"""

import threading
from pathlib import Path
from typing import Dict, List

from docextract.models.ledger import (
    LEDGER_HEADER,
    ExtractionLogEntry,
    ExtractionStatus,
)
from docextract.observability.logging import get_logger

logger = get_logger("ledger")

SUCCESS_LOG_NAME = "extraction_success.log"
FAILURE_LOG_NAME = "extraction_failed.log"


class ExtractionLedger:
    """
    Append-only success/failure ledger for one batch run.

    Safe to call from concurrent tasks and threads.
    """

    def __init__(
        self,
        log_dir: Path,
        success_name: str = SUCCESS_LOG_NAME,
        failure_name: str = FAILURE_LOG_NAME,
    ):
        """
        Initialize ledger.

        Args:
            log_dir: Directory holding both ledger files (created if missing)
            success_name: File name of the SUCCESS stream
            failure_name: File name of the FAILED stream
        """
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self._paths: Dict[ExtractionStatus, Path] = {
            ExtractionStatus.SUCCESS: self.log_dir / success_name,
            ExtractionStatus.FAILED: self.log_dir / failure_name,
        }
        self._locks: Dict[ExtractionStatus, threading.Lock] = {
            status: threading.Lock() for status in ExtractionStatus
        }

        logger.info(
            "extraction_ledger_initialized",
            success_log=str(self.success_log),
            failure_log=str(self.failure_log),
        )

    @property
    def success_log(self) -> Path:
        return self._paths[ExtractionStatus.SUCCESS]

    @property
    def failure_log(self) -> Path:
        return self._paths[ExtractionStatus.FAILED]

    def path_for(self, status: ExtractionStatus) -> Path:
        return self._paths[status]

    def append(self, entry: ExtractionLogEntry) -> None:
        """
        Append one entry to the destination matching its status.

        Args:
            entry: Terminal outcome of a unit of work
        """
        path = self._paths[entry.status]
        line = entry.to_line()

        with self._locks[entry.status]:
            needs_header = not path.exists() or path.stat().st_size == 0
            with open(path, "a", encoding="utf-8") as f:
                if needs_header:
                    f.write(LEDGER_HEADER + "\n")
                f.write(line)
                f.flush()

        logger.debug(
            "ledger_entry_appended",
            status=entry.status.value,
            file_path=entry.file_path,
        )

    def read_entries(self, status: ExtractionStatus) -> List[ExtractionLogEntry]:
        """
        Read back all entries of one stream.

        Returns:
            Entries in append order (empty if the file does not exist yet)
        """
        path = self._paths[status]
        if not path.exists():
            return []

        with self._locks[status]:
            lines = path.read_text(encoding="utf-8").splitlines()

        return [
            ExtractionLogEntry.from_line(line)
            for line in lines
            if line and line != LEDGER_HEADER
        ]
