from __future__ import annotations

from dataclasses import dataclass, field

from .validation import FileValidationResult

"""Roster domain models.

StudentRecord is one accepted data row of the uploaded sheet; SubjectRoster is
the per-subject view built from the enrollment markers. ParseResult bundles
everything a single parse produces (no state is kept between parses).
"""

__all__ = [
    "HeaderLocation",
    "StudentRecord",
    "SubjectStudent",
    "SubjectRoster",
    "ParseResult",
    "LoadedRoster",
    "SCORE_COLUMN_COUNT",
]

SCORE_COLUMN_COUNT = 6


@dataclass(frozen=True)
class HeaderLocation:
    """Where the header row was found.

    ``detected=False`` means no row matched and row 0 was assumed.
    """
    row_index: int
    data_start: int
    detected: bool


@dataclass(frozen=True)
class StudentRecord:
    rank: int  # 1-based; sequential position when column A is not a number
    student_id: str
    full_name: str
    scores: tuple[float, ...]  # columns D-I (6 values)
    subjects: dict[str, bool]  # subject code -> enrolled


@dataclass(frozen=True)
class SubjectStudent:
    student_id: str
    full_name: str
    scores: tuple[float, ...]


@dataclass(frozen=True)
class SubjectRoster:
    subject_code: str
    students: list[SubjectStudent] = field(default_factory=list)

    @property
    def student_count(self) -> int:
        return len(self.students)


@dataclass(frozen=True)
class ParseResult:
    """Everything produced by one roster parse."""
    students: list[StudentRecord]
    subject_columns: dict[str, int]  # first-appearance order
    rosters: list[SubjectRoster]  # subjects with >=1 enrolled student only
    header: HeaderLocation
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class LoadedRoster:
    """A validated upload and its parse result."""
    validation: FileValidationResult
    result: ParseResult

    @property
    def warnings(self) -> list[str]:
        return [*self.validation.warnings, *self.result.warnings]
