# Shared pytest fixtures
from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from roster_split.models.cell import Cell, to_cell

HEADER = ["ที่", "รหัสนักศึกษา", "ชื่อ - นามสกุล", "", "", "", "", "", "", "MATH101", "SCI201"]


def make_grid(rows: list[list[Any]]) -> list[list[Cell]]:
    return [[to_cell(v) for v in row] for row in rows]


@pytest.fixture()
def temp_workdir(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "config").mkdir()
    (tmp_path / "data").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture()
def roster_rows() -> list[list[Any]]:
    """Title row, header row, four students across three subjects."""
    return [
        ["กลุ่ม 1"],
        ["ที่", "รหัสนักศึกษา", "ชื่อ - นามสกุล", "ส่วน1", "ส่วน4", "ส่วน5", "ส่วน6", "ส่วน7", "ส่วน8",
         "MATH101", "SCI 201", "ENG301"],
        [1, "S001", "Somchai Jaidee", 80, 75, 90, 60, 70, 85, "*", "", ""],
        [2, "S002", "Suda Rakdee", "85.5", "-", None, 101, -3, "N/A", " * ", "*", ""],
        [3, "", "No Id", 50, 50, 50, 50, 50, 50, "*", "*", ""],
        [4, "S004", "Anan Srisuk", 10, 20, 30, 40, 50, 60, "", "*", ""],
    ]


@pytest.fixture()
def make_workbook(tmp_path: Path) -> Callable[..., Path]:
    def _make(rows: list[list[Any]], name: str = "roster.xlsx") -> Path:
        p = tmp_path / name
        with pd.ExcelWriter(p, engine="openpyxl") as writer:
            pd.DataFrame(rows).to_excel(writer, sheet_name="Sheet1", header=False, index=False)
        return p

    return _make


@pytest.fixture()
def sample_config_yaml() -> str:
    return """semester: 1
academic_year: 2568
term_label: ปลายภาค
group_number: "3"
subject_names:
  MATH101: คณิตศาสตร์พื้นฐาน
score:
  max_value: 100
  decimal_places: 1
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "generation.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def to_grid() -> Callable[[list[list[Any]]], list[list[Cell]]]:
    return make_grid
