from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .error_record import ErrorRecord

"""Batch result models for per-subject document generation.

- ProgressUpdate: emitted after every unit of work (callback payload)
- GeneratedDocument: one subject's .xlsx blob and file name
- SubjectStat: per-subject outcome used for the SUMMARY line
- BatchResult: aggregated outcome of one "process all" run
"""

__all__ = [
    "ProgressUpdate",
    "GeneratedDocument",
    "SubjectStat",
    "BatchResult",
]


@dataclass(frozen=True)
class ProgressUpdate:
    """Real-time progress record for the batch loop."""
    step: str  # 現在処理中の内容 (表示用)
    completed: int
    total: int
    percent: float


@dataclass(frozen=True)
class GeneratedDocument:
    subject_code: str
    filename: str
    content: bytes
    student_count: int

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class SubjectStat:
    subject_code: str
    status: str  # success/failed
    student_count: int
    elapsed_seconds: float


@dataclass(frozen=True)
class BatchResult:
    """Aggregated results of a batch run.

    ``archive`` holds only the subjects that succeeded.
    """
    documents: list[GeneratedDocument]
    errors: list[ErrorRecord]
    archive: bytes
    archive_filename: str
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    subject_stats: list[SubjectStat] = field(default_factory=list)

    @property
    def success_subjects(self) -> int:
        return len(self.documents)

    @property
    def failed_subjects(self) -> int:
        return len(self.errors)

    @property
    def total_students(self) -> int:
        return sum(d.student_count for d in self.documents)
