from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for batch error reporting.

Per-subject generation failures are not fatal: each one becomes an ErrorRecord
(subject code + UTC timestamp) collected by the error log buffer, and the batch
continues. File-level failures use subject="<FILE_LEVEL>".
"""

__all__ = [
    "ErrorRecord",
    "FILE_LEVEL",
]

FILE_LEVEL = "<FILE_LEVEL>"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        subject: Subject code the error belongs to (FILE_LEVEL when none)
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human-readable (Thai) message shown to the user
    """
    timestamp: str  # ISO8601 UTC
    subject: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(subject: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            subject=subject,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to one JSON line (fixed key set)."""
        return json.dumps(asdict(self), ensure_ascii=False)
