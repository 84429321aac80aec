"""Extraction ledger models.

One entry per terminal unit outcome, rendered as a single comma-joined line.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

LEDGER_HEADER = "timestamp,file_path,status,error_message"
MISSING_ERROR_SENTINEL = "-"


class ExtractionStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


def _flatten(value: str) -> str:
    """Keep a field on one line and free of the column separator."""
    return " ".join(value.replace(",", ";").split())


class ExtractionLogEntry(BaseModel):
    """Terminal outcome of one unit of work"""

    timestamp: datetime = Field(default_factory=datetime.now)
    file_path: str
    status: ExtractionStatus
    error_message: Optional[str] = None

    @model_validator(mode="after")
    def check_error_message(self) -> "ExtractionLogEntry":
        if self.status == ExtractionStatus.FAILED and not self.error_message:
            raise ValueError("FAILED entries require an error_message")
        if self.status == ExtractionStatus.SUCCESS and self.error_message:
            raise ValueError("SUCCESS entries cannot carry an error_message")
        return self

    @classmethod
    def success(cls, file_path: str) -> "ExtractionLogEntry":
        return cls(file_path=file_path, status=ExtractionStatus.SUCCESS)

    @classmethod
    def failure(cls, file_path: str, error_message: str) -> "ExtractionLogEntry":
        return cls(
            file_path=file_path,
            status=ExtractionStatus.FAILED,
            error_message=error_message,
        )

    def to_line(self) -> str:
        """Render as one ledger line, newline-terminated"""
        error = _flatten(self.error_message or "") or MISSING_ERROR_SENTINEL
        fields = [
            self.timestamp.isoformat(timespec="seconds"),
            _flatten(self.file_path),
            self.status.value,
            error,
        ]
        return ",".join(fields) + "\n"

    @classmethod
    def from_line(cls, line: str) -> "ExtractionLogEntry":
        timestamp, file_path, status, error = line.rstrip("\n").split(",", 3)
        return cls(
            timestamp=datetime.fromisoformat(timestamp),
            file_path=file_path,
            status=ExtractionStatus(status),
            error_message=None if error == MISSING_ERROR_SENTINEL else error,
        )
