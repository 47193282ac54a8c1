from __future__ import annotations

import io
import zipfile
from unittest.mock import patch

import pytest

from roster_split.excel.parser import EmptyOrMalformedSheetError
from roster_split.excel.reader import FileTypeError, WorkbookReadError
from roster_split.excel.writer import build_subject_document
from roster_split.logging.error_log import ErrorLogBuffer
from roster_split.models.config_models import GenerationConfig
from roster_split.models.error_record import FILE_LEVEL
from roster_split.models.processing_result import ProgressUpdate
from roster_split.models.roster import SubjectRoster, SubjectStudent
from roster_split.services.orchestrator import (
    AllGenerationFailedError,
    GenerationError,
    SubjectNotFoundError,
    generate_single,
    load_roster,
    process_all,
)

SCORES = (1, 2, 3, 4, 5, 6)


def _rosters(*codes: str) -> list[SubjectRoster]:
    return [
        SubjectRoster(code, [SubjectStudent(f"{code}-S{i}", f"Name {i}", SCORES) for i in range(1, 3)])
        for code in codes
    ]


def test_process_all_success():
    config = GenerationConfig(group_number="1")
    result = process_all(_rosters("MATH101", "SCI201"), config)

    assert result.success_subjects == 2
    assert result.failed_subjects == 0
    assert result.total_students == 4
    assert [d.subject_code for d in result.documents] == ["MATH101", "SCI201"]
    assert result.documents[0].filename == "แบบบันทึกคะแนนกลางภาค-MATH101-กลุ่ม-1.xlsx"
    assert result.archive_filename == "แบบบันทึกคะแนนทุกวิชา.zip"
    assert [s.status for s in result.subject_stats] == ["success", "success"]
    with zipfile.ZipFile(io.BytesIO(result.archive)) as zf:
        assert zf.namelist() == [d.filename for d in result.documents]


def test_process_all_reports_progress_after_each_subject():
    updates: list[ProgressUpdate] = []
    process_all(_rosters("A", "B", "C"), GenerationConfig(), on_progress=updates.append)

    assert [u.completed for u in updates] == [1, 2, 3, 3, 4]
    assert all(u.total == 4 for u in updates)
    assert updates[0].step.startswith("สร้างไฟล์สำหรับ A")
    assert updates[0].percent == 25.0
    assert updates[3].percent == 95.0
    assert "ZIP" in updates[3].step
    assert updates[-1].percent == 100.0


def test_process_all_partial_failure_is_tolerated():
    def flaky(roster, config):
        if roster.subject_code == "BAD":
            raise RuntimeError("disk full")
        return build_subject_document(roster, config)

    error_log = ErrorLogBuffer()
    with patch("roster_split.services.orchestrator.build_subject_document", side_effect=flaky):
        result = process_all(_rosters("A", "BAD", "C"), GenerationConfig(), error_log=error_log)

    assert [d.subject_code for d in result.documents] == ["A", "C"]
    assert result.failed_subjects == 1
    err = result.errors[0]
    assert err.subject == "BAD"
    assert err.error_type == "GENERATION_ERROR"
    assert "disk full" in err.message
    assert err.timestamp.endswith("Z")
    assert len(error_log) == 1
    assert [s.status for s in result.subject_stats] == ["success", "failed", "success"]
    with zipfile.ZipFile(io.BytesIO(result.archive)) as zf:
        assert len(zf.namelist()) == 2


def test_process_all_all_failed():
    with patch("roster_split.services.orchestrator.build_subject_document", side_effect=RuntimeError("x")):
        with pytest.raises(AllGenerationFailedError) as e:
            process_all(_rosters("A", "B"), GenerationConfig())
    assert len(e.value.errors) == 2
    assert str(e.value) == "ไม่สามารถสร้างไฟล์ใดๆ ได้"


def test_process_all_nothing_to_generate():
    with pytest.raises(AllGenerationFailedError):
        process_all([], GenerationConfig())


def test_process_all_emits_summary_log(caplog):
    with caplog.at_level("DEBUG", logger="roster_split"):
        process_all(_rosters("A"), GenerationConfig())
    summary = [r for r in caplog.records if r.levelno == 25]
    assert len(summary) == 1
    assert summary[0].getMessage().startswith("subjects=1 success=1 failed=0 students=2")


def test_generate_single():
    doc = generate_single(_rosters("A", "B"), "B", GenerationConfig())
    assert doc.subject_code == "B"
    assert doc.filename == "แบบบันทึกคะแนนกลางภาค-B.xlsx"
    assert doc.student_count == 2
    assert doc.content[:2] == b"PK"


def test_generate_single_unknown_subject():
    with pytest.raises(SubjectNotFoundError, match="ไม่พบข้อมูลรายวิชา X"):
        generate_single(_rosters("A"), "X")


def test_generate_single_failure():
    with patch("roster_split.services.orchestrator.build_subject_document", side_effect=RuntimeError("bad")):
        with pytest.raises(GenerationError) as e:
            generate_single(_rosters("A"), "A")
    assert e.value.subject_code == "A"
    assert "bad" in str(e.value)


def test_generate_single_failures_are_logged():
    error_log = ErrorLogBuffer()
    with pytest.raises(SubjectNotFoundError):
        generate_single(_rosters("A"), "X", error_log=error_log)
    with patch("roster_split.services.orchestrator.build_subject_document", side_effect=RuntimeError("bad")):
        with pytest.raises(GenerationError):
            generate_single(_rosters("A"), "A", error_log=error_log)

    assert [(r.subject, r.error_type) for r in error_log.records] == [
        ("X", "SUBJECT_NOT_FOUND"),
        ("A", "GENERATION_ERROR"),
    ]
    assert "bad" in error_log.records[1].message


def test_load_roster_rejected_upload_is_logged_at_file_level():
    error_log = ErrorLogBuffer()
    with pytest.raises(FileTypeError):
        load_roster(b"not a workbook", filename="roster.csv", error_log=error_log)

    (record,) = error_log.records
    assert record.subject == FILE_LEVEL
    assert record.error_type == "FILE_TYPE_INVALID"
    assert record.timestamp.endswith("Z")


def test_load_roster_unreadable_workbook_is_logged_at_file_level():
    error_log = ErrorLogBuffer()
    with pytest.raises(WorkbookReadError):
        load_roster(b"not a workbook", filename="roster.xlsx", error_log=error_log)
    assert [(r.subject, r.error_type) for r in error_log.records] == [(FILE_LEVEL, "WORKBOOK_READ_ERROR")]


def test_load_roster_parse_error_is_logged_at_file_level(make_workbook):
    path = make_workbook([["ที่", "รหัสนักศึกษา", "ชื่อ - นามสกุล"]])
    error_log = ErrorLogBuffer()
    with pytest.raises(EmptyOrMalformedSheetError) as e:
        load_roster(path, error_log=error_log)
    (record,) = error_log.records
    assert record.subject == FILE_LEVEL
    assert record.error_type == "EMPTY_OR_MALFORMED_SHEET"
    assert record.message == str(e.value)
