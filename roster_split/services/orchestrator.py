from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from ..excel.parser import RosterParseError, parse_roster
from ..excel.reader import (
    FileTypeError,
    ReadTimeoutError,
    WorkbookReadError,
    read_grid,
    run_with_timeout,
    validate_upload,
)
from ..excel.writer import build_subject_document
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import SUMMARY_LEVEL
from ..models.config_models import GenerationConfig, ScoreOptions
from ..models.error_record import FILE_LEVEL, ErrorRecord
from ..models.processing_result import BatchResult, GeneratedDocument, SubjectStat
from ..models.roster import LoadedRoster, ParseResult, SubjectRoster
from .packager import ARCHIVE_FILENAME, document_filename, package_archive
from .progress import ProgressCallback, ProgressTracker, make_update
from .reshaper import find_roster
from .summary import format_duration, format_file_size, render_summary_line

"""Service orchestration for one import/export cycle.

- load_roster(): validate upload -> read first sheet -> parse (timeout-bounded)
- process_all(): generate every subject's sheet in order, tolerate per-subject
  failures, bundle the successes into one ZIP
- generate_single(): one subject's sheet for an individual download
"""

__all__ = [
    "ProcessingError",
    "AllGenerationFailedError",
    "SubjectNotFoundError",
    "GenerationError",
    "load_roster",
    "process_all",
    "generate_single",
]

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Base exception for processing errors."""
    error_type = "PROCESSING_ERROR"


class AllGenerationFailedError(ProcessingError):
    """Raised when not a single subject document could be generated."""
    error_type = "ALL_GENERATION_FAILED"

    def __init__(self, errors: Sequence[ErrorRecord] = ()) -> None:
        super().__init__("ไม่สามารถสร้างไฟล์ใดๆ ได้")
        self.errors = list(errors)


class SubjectNotFoundError(ProcessingError):
    error_type = "SUBJECT_NOT_FOUND"

    def __init__(self, subject_code: str) -> None:
        super().__init__(f"ไม่พบข้อมูลรายวิชา {subject_code}")
        self.subject_code = subject_code


class GenerationError(ProcessingError):
    error_type = "GENERATION_ERROR"

    def __init__(self, subject_code: str, cause: Exception) -> None:
        super().__init__(f"ไม่สามารถสร้างไฟล์สำหรับ {subject_code}: {cause}")
        self.subject_code = subject_code


def _read_and_parse(source: Path | bytes, score_options: ScoreOptions) -> ParseResult:
    grid = read_grid(source)
    logger.debug("grid rows=%d", len(grid))
    return parse_roster(grid, score_options)


def _record(error_log: ErrorLogBuffer | None, subject: str, exc: Exception) -> None:
    if error_log is not None:
        error_log.append(ErrorRecord.create(subject=subject, error_type=exc.error_type, message=str(exc)))


def load_roster(
    source: Path | str | bytes,
    *,
    filename: str | None = None,
    content_type: str | None = None,
    config: GenerationConfig | None = None,
    timeout: float | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> LoadedRoster:
    """Validate an upload and parse its roster.

    Args:
        source: workbook path or raw bytes
        filename: original file name (required for bytes)
        content_type: MIME type reported by the client, if any
        config: generation config (score options, read timeout)
        timeout: overrides ``config.read_timeout_seconds``
        error_log: receives a ``<FILE_LEVEL>`` record for any failure below

    Raises:
        FileTypeError: upload is not .xlsx / .xls
        ReadTimeoutError: read + parse exceeded the timeout
        WorkbookReadError: workbook unreadable
        RosterParseError: structural problem in the sheet
    """
    config = config or GenerationConfig()
    if isinstance(source, (bytes, bytearray)):
        if filename is None:
            raise ValueError("filename is required when source is bytes")
        size = len(source)
        data: Path | bytes = bytes(source)
    else:
        path = Path(source)
        filename = filename or path.name
        size = path.stat().st_size
        data = path

    validation = validate_upload(filename, size, content_type)
    try:
        if not validation.is_valid:
            logger.error("upload rejected file=%s errors=%s", filename, validation.errors)
            raise FileTypeError("; ".join(validation.errors))
        for w in validation.warnings:
            logger.warning("file=%s %s", filename, w)

        limit = timeout if timeout is not None else config.read_timeout_seconds
        result = run_with_timeout(_read_and_parse, limit, data, config.score)
    except (FileTypeError, ReadTimeoutError, WorkbookReadError, RosterParseError) as e:
        if not isinstance(e, FileTypeError):
            logger.error("file=%s %s: %s", filename, e.error_type, e)
        _record(error_log, FILE_LEVEL, e)
        raise

    logger.info(
        "file=%s students=%d subjects=%d header_row=%d detected=%s",
        filename,
        len(result.students),
        len(result.rosters),
        result.header.row_index + 1,
        result.header.detected,
    )
    return LoadedRoster(validation=validation, result=result)


def _generate(roster: SubjectRoster, config: GenerationConfig) -> GeneratedDocument:
    content = build_subject_document(roster, config)
    return GeneratedDocument(
        subject_code=roster.subject_code,
        filename=document_filename(roster.subject_code, config),
        content=content,
        student_count=roster.student_count,
    )


def process_all(
    rosters: Sequence[SubjectRoster],
    config: GenerationConfig | None = None,
    on_progress: ProgressCallback | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> BatchResult:
    """Generate one sheet per subject, sequentially, and bundle them.

    A failure on one subject is recorded in ``error_log`` (and the result) and
    the loop continues; the archive contains only successful subjects.
    Progress is reported after each subject; the archive is the final step.

    Raises:
        AllGenerationFailedError: no subject succeeded (or nothing to generate)
    """
    config = config or GenerationConfig()
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    start_time = datetime.now(UTC)
    total_steps = len(rosters) + 1  # +1 for ZIP

    def emit(step: str, completed: int, percent: float | None = None) -> None:
        if on_progress is not None:
            on_progress(make_update(step, completed, total_steps, percent))

    documents: list[GeneratedDocument] = []
    errors: list[ErrorRecord] = []
    subject_stats: list[SubjectStat] = []
    total_size = 0

    with ProgressTracker(len(rosters)) as progress:
        for i, roster in enumerate(rosters):
            code = roster.subject_code
            progress.start_subject(code)

            subject_start = datetime.now(UTC)
            try:
                doc = _generate(roster, config)
            except Exception as e:
                record = ErrorRecord.create(
                    subject=code,
                    error_type=GenerationError.error_type,
                    message=str(GenerationError(code, e)),
                )
                error_log.append(record)
                errors.append(record)
                logger.error("subject=%s generation failed: %s", code, e)
                status = "failed"
            else:
                documents.append(doc)
                total_size += doc.size
                status = "success"
                logger.debug("subject=%s students=%d bytes=%d", code, doc.student_count, doc.size)
            elapsed = (datetime.now(UTC) - subject_start).total_seconds()

            subject_stats.append(
                SubjectStat(
                    subject_code=code,
                    status=status,
                    student_count=roster.student_count,
                    elapsed_seconds=elapsed,
                )
            )
            progress.set_postfix(success=len(documents), failed=len(errors))
            progress.finish_subject(success=(status == "success"))
            outcome = "สำเร็จ" if status == "success" else "ไม่สำเร็จ"
            emit(f"สร้างไฟล์สำหรับ {code} ({roster.student_count} คน) {outcome}", i + 1)

    emit(f"กำลังรวมไฟล์เป็น ZIP ({format_file_size(total_size)})", total_steps - 1, 95.0)

    if not documents:
        logger.error("no subject document generated (failed=%d)", len(errors))
        raise AllGenerationFailedError(errors)

    archive = package_archive({d.subject_code: d.content for d in documents}, config)
    end_time = datetime.now(UTC)

    result = BatchResult(
        documents=documents,
        errors=errors,
        archive=archive,
        archive_filename=ARCHIVE_FILENAME,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        subject_stats=subject_stats,
    )
    emit(
        f"เสร็จสิ้น - สร้างไฟล์ {len(documents)} ไฟล์ ({format_duration(start_time, end_time)})",
        total_steps,
        100.0,
    )
    logger.log(SUMMARY_LEVEL, render_summary_line(result).removeprefix("SUMMARY "))
    return result


def generate_single(
    rosters: Sequence[SubjectRoster],
    subject_code: str,
    config: GenerationConfig | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> GeneratedDocument:
    """Generate one subject's sheet (individual download).

    Failures are recorded in ``error_log`` under the subject code before
    being raised.

    Raises:
        SubjectNotFoundError: no roster with that code
        GenerationError: the document could not be built
    """
    config = config or GenerationConfig()
    roster = find_roster(rosters, subject_code)
    if roster is None:
        err = SubjectNotFoundError(subject_code)
        logger.error("subject=%s not found", subject_code)
        _record(error_log, subject_code, err)
        raise err
    try:
        return _generate(roster, config)
    except Exception as e:
        logger.error("subject=%s generation failed: %s", subject_code, e)
        err = GenerationError(subject_code, e)
        _record(error_log, subject_code, err)
        raise err from e
