from __future__ import annotations

from pathlib import Path

from ..models.error_record import ErrorRecord

"""Error list for batch runs.

Collects ErrorRecords while subjects are generated. The list is what the user
sees (and can dismiss with ``clear()``); ``flush()`` optionally appends it to a
JSON Lines file.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]


class ErrorLogBuffer:
    """In-memory buffer for error records.

    - append() during the batch, records for display
    - clear() dismisses everything
    - flush(path) writes JSON Lines and empties the buffer
    - no thread safety (serial execution)
    """
    def __init__(self) -> None:
        self._records: list[ErrorRecord] = []

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    @property
    def records(self) -> list[ErrorRecord]:
        return list(self._records)

    def messages(self) -> list[str]:
        return [r.message for r in self._records]

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self, path: Path) -> Path:
        if not self._records:
            return path
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return path
