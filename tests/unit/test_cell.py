from __future__ import annotations

import math

import numpy as np
import pandas as pd

from roster_split.models.cell import EMPTY, Empty, Number, Text, cell_text, to_cell


def test_to_cell_blank_values():
    assert to_cell(None) == EMPTY
    assert to_cell(float("nan")) == EMPTY
    assert to_cell(np.nan) == EMPTY
    assert to_cell(pd.NA) == EMPTY
    assert isinstance(to_cell(pd.NaT), Empty)


def test_to_cell_numbers_and_text():
    assert to_cell(80) == Number(80.0)
    assert to_cell(np.int64(7)) == Number(7.0)
    assert to_cell(np.float64(1.5)) == Number(1.5)
    assert to_cell("  S001 ") == Text("  S001 ")
    assert to_cell("") == Text("")


def test_to_cell_bool_is_not_a_number():
    assert to_cell(True) == Text("true")
    assert to_cell(False) == Text("false")


def test_to_cell_passthrough():
    cell = Number(3.0)
    assert to_cell(cell) is cell


def test_cell_text_integral_numbers_drop_fraction():
    assert cell_text(Number(6512345.0)) == "6512345"
    assert cell_text(Number(80.5)) == "80.5"
    assert cell_text(Number(math.inf)) == "inf"
    assert cell_text(Text(" x ")) == " x "
    assert cell_text(EMPTY) == ""
