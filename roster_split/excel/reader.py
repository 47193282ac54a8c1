from __future__ import annotations

import concurrent.futures
import io
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import pandas as pd

from ..models.cell import Cell, Empty, to_cell
from ..models.validation import FileValidationResult

"""Upload validation and raw grid reader.

- validate_upload(): type / size / name checks before anything is read
- read_grid(): first worksheet -> list of rows of Cell (header=None, raw)
- run_with_timeout(): bounds the read-and-parse phase

Both .xlsx (openpyxl) and legacy .xls (xlrd) are accepted; pandas picks the
engine from the file content.
"""

__all__ = [
    "FileTypeError",
    "WorkbookReadError",
    "ReadTimeoutError",
    "validate_upload",
    "read_grid",
    "dataframe_to_grid",
    "run_with_timeout",
    "ALLOWED_EXTENSIONS",
    "ALLOWED_CONTENT_TYPES",
    "MAX_RECOMMENDED_SIZE",
]

ALLOWED_EXTENSIONS = (".xlsx", ".xls")
ALLOWED_CONTENT_TYPES = (
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel",
)
MAX_RECOMMENDED_SIZE = 10 * 1024 * 1024  # 10MB (warning only)
MAX_FILENAME_LENGTH = 200

# セル内の "NA" / "N/A" は文字列のまま保持 (スコア変換側で既定値扱い)
KEEP_NA_STRINGS = ["NA", "N/A", "n/a", "NULL", "null", "None", "nan", "NaN", "-NaN", "-nan"]

T = TypeVar("T")


class FileTypeError(Exception):
    """Raised when the upload is not a spreadsheet."""
    error_type = "FILE_TYPE_INVALID"


class WorkbookReadError(Exception):
    """Raised when the workbook cannot be opened or has no worksheet."""
    error_type = "WORKBOOK_READ_ERROR"


class ReadTimeoutError(Exception):
    """Raised when reading + parsing exceeds the configured timeout."""
    error_type = "READ_TIMEOUT"

    def __init__(self, message: str = "การประมวลผลไฟล์ใช้เวลานานเกินไป (หมดเวลา)") -> None:
        super().__init__(message)


def validate_upload(filename: str, size: int, content_type: str | None = None) -> FileValidationResult:
    """Check an upload before parsing.

    Parameters
    ----------
    filename: original file name (extension decides the type)
    size: size in bytes
    content_type: MIME type reported by the client, if any
    """
    errors: list[str] = []
    warnings: list[str] = []

    suffix = Path(filename).suffix.lower()
    type_ok = suffix in ALLOWED_EXTENSIONS
    if content_type:
        type_ok = type_ok and content_type in ALLOWED_CONTENT_TYPES
    if not type_ok:
        errors.append("ประเภทไฟล์ไม่ถูกต้อง กรุณาใช้ไฟล์ .xlsx หรือ .xls")

    if size > MAX_RECOMMENDED_SIZE:
        warnings.append("ไฟล์มีขนาดใหญ่ (เกิน 10MB) อาจใช้เวลาในการประมวลผลนาน")

    if len(filename) > MAX_FILENAME_LENGTH:
        warnings.append("ชื่อไฟล์ยาวเกินไป")

    return FileValidationResult(errors=errors, warnings=warnings)


def _na_values() -> list[str]:
    # pandas 既定の NA 文字列集合から KEEP_NA_STRINGS を除外
    import pandas._libs.parsers as parsers

    return sorted(parsers.STR_NA_VALUES - set(KEEP_NA_STRINGS))


def _trim_row(cells: list[Cell]) -> list[Cell]:
    end = len(cells)
    while end > 0 and isinstance(cells[end - 1], Empty):
        end -= 1
    return cells[:end]


def dataframe_to_grid(df: pd.DataFrame) -> list[list[Cell]]:
    """Convert a header-less DataFrame into a ragged grid of Cells.

    Trailing blank cells are trimmed from every row so row lengths match what
    was actually filled in the sheet.
    """
    grid: list[list[Cell]] = []
    for raw in df.itertuples(index=False, name=None):
        grid.append(_trim_row([to_cell(v) for v in raw]))
    return grid


def read_grid(source: Path | str | bytes) -> list[list[Cell]]:
    """Read the first worksheet of a workbook as a raw grid.

    Args:
        source: path to the workbook or its raw bytes

    Raises:
        WorkbookReadError: unreadable file or no worksheet
    """
    handle: Any = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
    try:
        xls = pd.ExcelFile(handle)
    except Exception as e:
        raise WorkbookReadError(f"เกิดข้อผิดพลาดในการอ่านไฟล์ Excel: {e}") from e
    if not xls.sheet_names:
        raise WorkbookReadError("ไฟล์ Excel ไม่มี worksheet")
    first = xls.sheet_names[0]
    try:
        df = xls.parse(first, header=None, keep_default_na=False, na_values=_na_values())
    except Exception as e:
        raise WorkbookReadError(f"เกิดข้อผิดพลาดในการอ่านไฟล์ Excel: {e}") from e
    return dataframe_to_grid(df)


def run_with_timeout(func: Callable[..., T], timeout: float, *args: Any, **kwargs: Any) -> T:
    """Run ``func`` in a worker thread and wait at most ``timeout`` seconds.

    On expiry the worker is abandoned (not interrupted) and ReadTimeoutError is
    raised. Exceptions from ``func`` propagate unchanged.
    """
    executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
    try:
        future = executor.submit(func, *args, **kwargs)
        try:
            return future.result(timeout=timeout)
        except concurrent.futures.TimeoutError as e:
            future.cancel()
            raise ReadTimeoutError() from e
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
