from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from ..models.cell import Cell, Empty, Number, Text, cell_text
from ..models.config_models import ScoreOptions
from ..models.roster import HeaderLocation, ParseResult, StudentRecord, SubjectStudent
from ..services.reshaper import build_subject_rosters
from ..services.scoring import process_score_array

"""Roster parser: raw grid -> student records + subject membership.

Sheet layout (one worksheet):
- optional title / group rows, then a header row within the first 3 rows
- A: ลำดับ (rank), B: รหัสนักศึกษา, C: ชื่อ - นามสกุล
- D-I: six score columns
- J onwards: one column per subject code; '*' marks enrollment

Structural problems raise a RosterParseError subclass; nothing partial is
returned. Rows lacking an ID or a name are skipped silently.
"""

__all__ = [
    "RosterParseError",
    "EmptyOrMalformedSheetError",
    "InsufficientColumnsError",
    "NoSubjectColumnsError",
    "NoValidStudentsError",
    "NoEnrolledSubjectsError",
    "detect_header",
    "map_subject_columns",
    "parse_rank",
    "parse_roster",
    "ENROLLMENT_MARKER",
]

logger = logging.getLogger(__name__)

MIN_ROWS = 3
HEADER_SCAN_ROWS = 3
FIRST_SUBJECT_COLUMN = 9  # column J
MIN_HEADER_COLUMNS = FIRST_SUBJECT_COLUMN + 1
SCORE_START, SCORE_END = 3, 8  # columns D-I
ENROLLMENT_MARKER = "*"

HEADER_FALLBACK_WARNING = (
    "ไม่พบแถวหัวตาราง (ที่ / รหัสนักศึกษา / ชื่อ - นามสกุล) ใน 3 แถวแรก "
    "ใช้แถวที่ 1 เป็นหัวตารางแทน"
)

_LEADING_INT_RE = re.compile(r"^\s*[+-]?\d+")
_WHITESPACE_RE = re.compile(r"\s+")


class RosterParseError(Exception):
    """Base class for fatal roster structure errors."""
    error_type = "ROSTER_PARSE_ERROR"


class EmptyOrMalformedSheetError(RosterParseError):
    error_type = "EMPTY_OR_MALFORMED_SHEET"

    def __init__(self) -> None:
        super().__init__("ไฟล์ Excel ไม่มีข้อมูลหรือรูปแบบไม่ถูกต้อง (ต้องมีอย่างน้อย 3 แถว)")


class InsufficientColumnsError(RosterParseError):
    error_type = "INSUFFICIENT_COLUMNS"

    def __init__(self) -> None:
        super().__init__("รูปแบบไฟล์ไม่ถูกต้อง (ต้องมีอย่างน้อย 10 คอลัมน์)")


class NoSubjectColumnsError(RosterParseError):
    error_type = "NO_SUBJECT_COLUMNS"

    def __init__(self) -> None:
        super().__init__("ไม่พบคอลัมน์รายวิชา (คอลัมน์ J เป็นต้นไป)")


class NoValidStudentsError(RosterParseError):
    error_type = "NO_VALID_STUDENTS"

    def __init__(self) -> None:
        super().__init__("ไม่พบข้อมูลนักเรียนที่ถูกต้อง")


class NoEnrolledSubjectsError(RosterParseError):
    error_type = "NO_ENROLLED_SUBJECTS"

    def __init__(self) -> None:
        super().__init__("ไม่พบรายวิชาที่มีนักเรียนลงทะเบียน")


def _cell(row: Sequence[Cell], index: int) -> Cell:
    return row[index] if index < len(row) else Empty()


def _is_header_row(row: Sequence[Cell]) -> bool:
    if len(row) <= 2:
        return False
    col1 = cell_text(row[0]).strip()
    col2 = cell_text(row[1]).strip()
    col3 = cell_text(row[2]).strip()
    return (
        (col1 == "ที่" or "อันดับ" in col1)
        and ("รหัส" in col2 or "student" in col2)
        and ("ชื่อ" in col3 or "นาม" in col3)
    )


def detect_header(grid: Sequence[Sequence[Cell]]) -> HeaderLocation:
    """Find the header row among the first three rows.

    Falls back to row 0 (data from row 1) with ``detected=False``.
    """
    for i in range(min(HEADER_SCAN_ROWS, len(grid))):
        if _is_header_row(grid[i]):
            return HeaderLocation(row_index=i, data_start=i + 1, detected=True)
    return HeaderLocation(row_index=0, data_start=1, detected=False)


def normalize_subject_code(cell: Cell) -> str:
    """Subject code from a header cell with all whitespace removed."""
    return _WHITESPACE_RE.sub("", cell_text(cell))


def map_subject_columns(header: Sequence[Cell]) -> dict[str, int]:
    """Map subject code -> column index for header columns J onwards.

    A code repeated later keeps its first position in the mapping but points
    at the later column.
    Blank cells and a numeric 0 are not subject headers.
    """
    columns: dict[str, int] = {}
    for i in range(FIRST_SUBJECT_COLUMN, len(header)):
        cell = header[i]
        if isinstance(cell, Empty) or cell == Number(0.0):
            continue
        code = normalize_subject_code(cell)
        if code:
            columns[code] = i
    return columns


def parse_rank(cell: Cell, fallback: int) -> int:
    """Leading-integer parse of the rank cell; 0 or unparsable -> fallback."""
    if isinstance(cell, Number):
        text = cell_text(cell)
    elif isinstance(cell, Text):
        text = cell.value
    else:
        return fallback
    m = _LEADING_INT_RE.match(text)
    if m is None:
        return fallback
    rank = int(m.group(0))
    return rank or fallback


def is_enrolled(cell: Cell) -> bool:
    return ENROLLMENT_MARKER in cell_text(cell).strip()


def parse_roster(
    grid: Sequence[Sequence[Cell]], score_options: ScoreOptions | None = None
) -> ParseResult:
    """Parse a raw grid into student records and per-subject rosters.

    Steps:
    1. Require at least 3 rows
    2. Detect header row (fallback to row 0 with a warning)
    3. Require header with >= 10 columns and >= 1 subject column (J+)
    4. Build one StudentRecord per row that has both ID and name
    5. Require >= 1 student and >= 1 subject with enrolled students

    Raises:
        RosterParseError: one of the subclasses above
    """
    if len(grid) < MIN_ROWS:
        raise EmptyOrMalformedSheetError()

    header = detect_header(grid)
    warnings: list[str] = []
    if not header.detected:
        logger.warning("header row not detected in first %d rows -> using row 1", HEADER_SCAN_ROWS)
        warnings.append(HEADER_FALLBACK_WARNING)
    else:
        logger.debug("header row found at row %d", header.row_index + 1)

    header_row = grid[header.row_index]
    if len(header_row) < MIN_HEADER_COLUMNS:
        raise InsufficientColumnsError()

    subject_columns = map_subject_columns(header_row)
    if not subject_columns:
        raise NoSubjectColumnsError()
    logger.debug("subject columns: %s", list(subject_columns))

    accumulators: dict[str, list[SubjectStudent]] = {code: [] for code in subject_columns}
    students: list[StudentRecord] = []

    for i in range(header.data_start, len(grid)):
        row = grid[i]
        if len(row) < 3:
            logger.debug("skip row %d: insufficient data", i + 1)
            continue

        rank = parse_rank(row[0], len(students) + 1)
        student_id = cell_text(row[1]).strip()
        full_name = cell_text(row[2]).strip()
        if not student_id or not full_name:
            logger.debug("skip row %d: missing student ID or name", i + 1)
            continue

        scores = tuple(process_score_array(row, SCORE_START, SCORE_END, score_options))
        subjects: dict[str, bool] = {}
        for code, col in subject_columns.items():
            enrolled = is_enrolled(_cell(row, col))
            subjects[code] = enrolled
            if enrolled:
                accumulators[code].append(
                    SubjectStudent(student_id=student_id, full_name=full_name, scores=scores)
                )

        students.append(
            StudentRecord(
                rank=rank,
                student_id=student_id,
                full_name=full_name,
                scores=scores,
                subjects=subjects,
            )
        )

    if not students:
        raise NoValidStudentsError()

    rosters = build_subject_rosters(accumulators)
    if not rosters:
        raise NoEnrolledSubjectsError()

    logger.info("parsed students=%d subjects=%d", len(students), len(rosters))
    return ParseResult(
        students=students,
        subject_columns=subject_columns,
        rosters=rosters,
        header=header,
        warnings=warnings,
    )
