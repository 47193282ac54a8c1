from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Any, Union

import pandas as pd

"""Cell value model for raw roster grids.

Spreadsheet readers hand back heterogeneous values (str, int, float, numpy
scalars, NaN, None). They are converted once at the ingestion boundary into
a closed set of cell types and consumed uniformly afterwards:

- Empty: blank cell (None / NaN / pandas NA)
- Number: any finite or non-finite real number
- Text: any string (kept verbatim, including whitespace)
"""

__all__ = [
    "Empty",
    "Number",
    "Text",
    "Cell",
    "EMPTY",
    "to_cell",
    "cell_text",
]


@dataclass(frozen=True)
class Empty:
    """Blank cell."""


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Text:
    value: str


Cell = Union[Empty, Number, Text]

EMPTY = Empty()


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):  # pragma: no cover - array-likes are not blank cells
        return False


def to_cell(value: Any) -> Cell:
    """Convert a raw reader value into a Cell."""
    if isinstance(value, (Empty, Number, Text)):
        return value
    if isinstance(value, str):
        return Text(value)
    if isinstance(value, bool):
        # bool は数値扱いしない (スコア変換では "other type" として扱う)
        return Text("true" if value else "false")
    if isinstance(value, numbers.Real):
        if isinstance(value, float) and math.isnan(value):
            return EMPTY
        return Number(float(value))
    if _is_missing(value):
        return EMPTY
    return Text(str(value))


def cell_text(cell: Cell) -> str:
    """Stringify a cell the way it reads in the sheet.

    Integral numbers are printed without a fractional part so that student IDs
    stored as numbers (``6512345.0`` after pandas float upcasting) read as
    ``"6512345"``.
    """
    if isinstance(cell, Text):
        return cell.value
    if isinstance(cell, Number):
        v = cell.value
        if math.isfinite(v) and v == int(v):
            return str(int(v))
        return str(v)
    return ""
