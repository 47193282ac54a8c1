from __future__ import annotations

import io
import zipfile
from collections.abc import Mapping

from ..models.config_models import GenerationConfig

"""Archive packager: per-subject documents -> one ZIP blob."""

__all__ = [
    "ARCHIVE_FILENAME",
    "document_filename",
    "package_archive",
]

ARCHIVE_FILENAME = "แบบบันทึกคะแนนทุกวิชา.zip"


def document_filename(subject_code: str, config: GenerationConfig) -> str:
    """File name for one subject's document.

    ``{label}{term}-{code}-กลุ่ม-{group}.xlsx``, or ``{label}{term}-{code}.xlsx``
    when no group number is set.
    """
    base = f"{config.document_label}{config.term_label}-{subject_code}"
    group = config.group_number.strip()
    if group:
        return f"{base}-กลุ่ม-{group}.xlsx"
    return f"{base}.xlsx"


def package_archive(files: Mapping[str, bytes], config: GenerationConfig) -> bytes:
    """Bundle ``subject code -> xlsx bytes`` into a ZIP, in mapping order."""
    bio = io.BytesIO()
    with zipfile.ZipFile(bio, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for subject_code, content in files.items():
            zf.writestr(document_filename(subject_code, config), content)
    return bio.getvalue()
