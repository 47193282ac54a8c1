from __future__ import annotations

import io

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from ..models.config_models import GenerationConfig
from ..models.roster import SubjectRoster

"""Per-subject score sheet builder (openpyxl).

Layout (1-based Excel rows):
    1  title                  A1:I1 merged
    2  semester / year        A2:I2 merged
    3  institution            A3:I3 merged
    4  ลำดับที่ | รหัสประจำตัว | ชื่อ - นามสกุล | คะแนนส่วนที่ (D4:I4)
    5  (A-C merged from row 4) | 1 | 4 | 5 | 6 | 7 | 8
    6+ one row per student

The part labels 1,4,5,6,7,8 follow the institution's paper form and are kept
as-is.
"""

__all__ = [
    "HEADER_ROWS",
    "TOTAL_COLUMNS",
    "SCORE_PART_LABELS",
    "build_title",
    "build_subject_workbook",
    "build_subject_document",
]

HEADER_ROWS = 5
TOTAL_COLUMNS = 9
SCORE_PART_LABELS = ("1", "4", "5", "6", "7", "8")
COLUMN_WIDTHS = (10, 15, 25, 12, 12, 12, 12, 12, 12)
SHEET_TITLE = "Sheet1"

_THIN = Side(style="thin")
BORDER = Border(top=_THIN, bottom=_THIN, left=_THIN, right=_THIN)
HEADER_FONT = Font(bold=True, size=14)
HEADER_FILL = PatternFill("solid", fgColor="E6E6FA")
CENTER = Alignment(horizontal="center", vertical="center")
LEFT = Alignment(horizontal="left", vertical="center")


def build_title(roster: SubjectRoster, config: GenerationConfig) -> str:
    return f"{config.document_label}{config.term_label} วิชา {config.display_name(roster.subject_code)}"


def _write_banner(ws, row: int, text: str) -> None:
    ws.cell(row=row, column=1, value=text)
    ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=TOTAL_COLUMNS)
    for col in range(1, TOTAL_COLUMNS + 1):
        cell = ws.cell(row=row, column=col)
        cell.font = HEADER_FONT
        cell.alignment = CENTER
        cell.border = BORDER


def _write_table_header(ws) -> None:
    for col, label in enumerate(("ลำดับที่", "รหัสประจำตัว", "ชื่อ - นามสกุล"), start=1):
        ws.cell(row=4, column=col, value=label)
        ws.merge_cells(start_row=4, start_column=col, end_row=5, end_column=col)
    ws.cell(row=4, column=4, value="คะแนนส่วนที่")
    ws.merge_cells(start_row=4, start_column=4, end_row=4, end_column=TOTAL_COLUMNS)
    for offset, label in enumerate(SCORE_PART_LABELS):
        ws.cell(row=5, column=4 + offset, value=label)

    # 結合セル内の全セルに罫線を引かないと枠が欠ける
    for row in (4, 5):
        for col in range(1, TOTAL_COLUMNS + 1):
            cell = ws.cell(row=row, column=col)
            cell.font = HEADER_FONT
            cell.alignment = CENTER
            cell.border = BORDER
            cell.fill = HEADER_FILL


def build_subject_workbook(roster: SubjectRoster, config: GenerationConfig) -> Workbook:
    """Render one subject roster into a new workbook."""
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    _write_banner(ws, 1, build_title(roster, config))
    _write_banner(ws, 2, f"ภาคเรียนที่ {config.semester} ปีการศึกษา {config.academic_year}")
    _write_banner(ws, 3, config.institution_name)
    _write_table_header(ws)

    for index, student in enumerate(roster.students, start=1):
        row = HEADER_ROWS + index
        values = [index, student.student_id, student.full_name, *student.scores]
        for col, value in enumerate(values, start=1):
            cell = ws.cell(row=row, column=col, value=value)
            if isinstance(value, str):
                # "=" 始まりの ID / 氏名を数式にしない
                cell.data_type = "s"
            cell.border = BORDER
            cell.alignment = CENTER if col == 1 else LEFT

    for col, width in enumerate(COLUMN_WIDTHS, start=1):
        ws.column_dimensions[get_column_letter(col)].width = width

    return wb


def build_subject_document(roster: SubjectRoster, config: GenerationConfig) -> bytes:
    """Render one subject roster into .xlsx bytes."""
    wb = build_subject_workbook(roster, config)
    bio = io.BytesIO()
    wb.save(bio)
    return bio.getvalue()
