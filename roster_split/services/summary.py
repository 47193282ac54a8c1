from __future__ import annotations

from datetime import datetime

from ..models.processing_result import BatchResult

"""SUMMARY line and human-readable size / duration formatting."""

__all__ = [
    "render_summary_line",
    "format_file_size",
    "format_duration",
]


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(result: BatchResult) -> str:
    """Render the SUMMARY line for a batch run.

    Format:
    SUMMARY subjects={total} success={success} failed={failed} students={students}
    elapsed_sec={elapsed} archive_bytes={size}

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> r = BatchResult(documents=[], errors=[], archive=b"", archive_filename="a.zip",
        ...                 start_time=t, end_time=t, elapsed_seconds=2.0)
        >>> render_summary_line(r)
        'SUMMARY subjects=0 success=0 failed=0 students=0 elapsed_sec=2 archive_bytes=0'
    """
    total = result.success_subjects + result.failed_subjects
    return (
        f"SUMMARY subjects={total} "
        f"success={result.success_subjects} "
        f"failed={result.failed_subjects} "
        f"students={result.total_students} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)} "
        f"archive_bytes={len(result.archive)}"
    )


def format_file_size(size: int) -> str:
    mb = size / (1024 * 1024)
    if mb < 1:
        return f"{size / 1024:.1f} KB"
    return f"{mb:.2f} MB"


def format_duration(start: datetime, end: datetime) -> str:
    seconds = int((end - start).total_seconds())
    if seconds < 60:
        return f"{seconds} วินาที"
    return f"{seconds // 60} นาที {seconds % 60} วินาที"
