from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the roster splitter.

These are the explicit option objects passed through the pipeline:

- ScoreOptions: score coercion bounds / rounding (one per parse)
- GenerationConfig: per-run output settings (semester, year, labels, names)

Both are frozen; adjust at runtime with ``dataclasses.replace``.
"""

__all__ = [
    "ScoreOptions",
    "GenerationConfig",
    "DEFAULT_DOCUMENT_LABEL",
    "DEFAULT_TERM_LABEL",
    "DEFAULT_INSTITUTION_NAME",
    "DEFAULT_READ_TIMEOUT_SECONDS",
]

DEFAULT_DOCUMENT_LABEL = "แบบบันทึกคะแนน"
DEFAULT_TERM_LABEL = "กลางภาค"
DEFAULT_INSTITUTION_NAME = "ศูนย์การศึกษานอกระบบและการศึกษาตามอัธยาศัยอำเภอเมืองนครสวรรค์"
DEFAULT_READ_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class ScoreOptions:
    """Options for converting a raw cell into a bounded score.

    A negative score with ``allow_negative=False`` is replaced by
    ``default_value`` (not clamped); the final value is clamped into
    [min_value, max_value].
    """
    default_value: float = 0.0
    min_value: float = 0.0
    max_value: float = 100.0
    decimal_places: int = 2
    allow_negative: bool = False


@dataclass(frozen=True)
class GenerationConfig:
    """Output settings for one import/export cycle.

    ``subject_names`` overrides the display name printed in the document title;
    subjects without an entry use their code.
    """
    semester: int = 2  # 1-3
    academic_year: int = 2567  # พ.ศ. (2500-2600)
    term_label: str = DEFAULT_TERM_LABEL
    group_number: str = ""
    subject_names: dict[str, str] = field(default_factory=dict)
    document_label: str = DEFAULT_DOCUMENT_LABEL
    institution_name: str = DEFAULT_INSTITUTION_NAME
    read_timeout_seconds: float = DEFAULT_READ_TIMEOUT_SECONDS
    score: ScoreOptions = field(default_factory=ScoreOptions)

    def display_name(self, subject_code: str) -> str:
        name = self.subject_names.get(subject_code, "").strip()
        return name or subject_code
