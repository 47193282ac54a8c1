from __future__ import annotations

import math
import numbers
import re
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal, localcontext
from typing import Any

from ..models.cell import Empty, Number, Text
from ..models.config_models import ScoreOptions

"""Score coercion utilities.

Converts arbitrary cell values into bounded, rounded numeric scores and offers
a few pure helpers over already-produced score sequences (validation, display
formatting, statistics).

Pipeline for one value:
1. blank (None / Empty / NaN / "", "-", "N/A", "NA") -> default
2. numbers used as-is (NaN / inf -> default); strings parsed as a leading float
3. round to ``decimal_places``, ties toward +infinity (-2.5 -> -2, 2.5 -> 3)
4. negative and not ``allow_negative`` -> default (replaced, not clamped)
5. clamp into [min_value, max_value]
"""

__all__ = [
    "BLANK_MARKERS",
    "ScoreValidation",
    "ScoreStatistics",
    "process_score_value",
    "process_score_array",
    "validate_score_array",
    "format_scores_for_display",
    "calculate_score_statistics",
]

# case-sensitive, compared after strip()
BLANK_MARKERS = frozenset({"", "-", "N/A", "NA"})

_LEADING_FLOAT_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

_DEFAULT_OPTIONS = ScoreOptions()


@dataclass(frozen=True)
class ScoreValidation:
    is_valid: bool
    errors: list[str]


@dataclass(frozen=True)
class ScoreStatistics:
    min: float
    max: float
    average: float
    total: float
    non_zero_count: int


def _parse_leading_float(text: str) -> float | None:
    """Parse the numeric prefix of ``text`` (``"80abc"`` -> 80.0)."""
    m = _LEADING_FLOAT_RE.match(text.strip())
    if m is None:
        return None
    return float(m.group(0))


def _round_half_up(value: float, decimal_places: int) -> float:
    with localcontext() as ctx:
        ctx.prec = 400  # float の最大桁 (~309) + 小数部に十分
        quantum = Decimal(1).scaleb(-decimal_places)
        # 負数は 0 方向に丸める (-2.5 -> -2)
        rounding = ROUND_HALF_UP if value >= 0 else ROUND_HALF_DOWN
        return float(Decimal(repr(value)).quantize(quantum, rounding=rounding))


def _raw_score(value: Any) -> float | None:
    """Turn a cell / raw value into a float, or None when it should default."""
    if isinstance(value, Empty) or value is None:
        return None
    if isinstance(value, Number):
        value = value.value
    elif isinstance(value, Text):
        value = value.value

    if isinstance(value, str):
        trimmed = value.strip()
        if trimmed in BLANK_MARKERS:
            return None
        parsed = _parse_leading_float(trimmed)
    elif isinstance(value, numbers.Real) and not isinstance(value, bool):
        parsed = float(value)
    else:
        # bool, date 等: 文字列化してから解釈
        parsed = _parse_leading_float(str(value))

    if parsed is None or not math.isfinite(parsed):
        return None
    return parsed


def process_score_value(value: Any, options: ScoreOptions | None = None) -> float:
    """Process and validate a single score value from the sheet.

    Args:
        value: Cell, or any raw value (None, str, number, ...)
        options: Coercion options (defaults: 0 / 0..100 / 2 decimals / no negatives)

    Returns:
        Score within [options.min_value, options.max_value]
    """
    opts = options or _DEFAULT_OPTIONS
    score = _raw_score(value)
    if score is None:
        score = opts.default_value
    else:
        score = _round_half_up(score, opts.decimal_places)
        if not opts.allow_negative and score < 0:
            score = opts.default_value
    return max(opts.min_value, min(opts.max_value, score))


def process_score_array(
    row: Sequence[Any],
    start_index: int = 3,
    end_index: int = 8,
    options: ScoreOptions | None = None,
) -> list[float]:
    """Process the score window ``row[start_index..end_index]`` (inclusive).

    Always returns ``end_index - start_index + 1`` values; cells beyond the end
    of a short row go through the same pipeline as blanks.
    """
    scores: list[float] = []
    for i in range(start_index, end_index + 1):
        cell = row[i] if i < len(row) else None
        scores.append(process_score_value(cell, options))
    return scores


def validate_score_array(
    scores: Sequence[float], min_value: float = 0, max_value: float = 100
) -> ScoreValidation:
    """Report out-of-range scores. Diagnostics only; never raises."""
    errors = [
        f"Score {i + 1} ({_format_number(score)}) is outside valid range "
        f"[{_format_number(min_value)}-{_format_number(max_value)}]"
        for i, score in enumerate(scores)
        if score < min_value or score > max_value
    ]
    return ScoreValidation(is_valid=not errors, errors=errors)


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def format_scores_for_display(scores: Sequence[float], decimal_places: int = 2) -> list[str]:
    """Format scores with trailing zeros stripped (``80.50`` -> ``"80.5"``)."""
    out: list[str] = []
    for score in scores:
        if score == 0:
            out.append("0")
            continue
        text = f"{score:.{decimal_places}f}"
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        out.append(text)
    return out


def calculate_score_statistics(scores: Sequence[float]) -> ScoreStatistics:
    if not scores:
        return ScoreStatistics(min=0.0, max=0.0, average=0.0, total=0.0, non_zero_count=0)
    total = float(sum(scores))
    return ScoreStatistics(
        min=float(min(scores)),
        max=float(max(scores)),
        average=total / len(scores),
        total=total,
        non_zero_count=sum(1 for s in scores if s > 0),
    )
