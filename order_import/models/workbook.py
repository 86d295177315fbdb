from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

"""Workbook model shared by the spreadsheet reader and the normalizer.

A workbook is an ordered list of sheet names plus one grid per sheet.
Grids are row-major; row 0 is the header row. Empty cells are carried as ""
so that the normalizer's own invalid-value detection applies uniformly.
"""

__all__ = [
    "CellValue",
    "Grid",
    "JsonValue",
    "Workbook",
]

CellValue = Union[None, bool, int, float, str]
JsonValue = Union[None, bool, int, float, str, list, dict]
Grid = list[list[CellValue]]


@dataclass(frozen=True)
class Workbook:
    """Collection of named sheets as read from a single Excel file."""
    sheet_names: list[str]
    sheets: dict[str, Grid] = field(default_factory=dict)
    source: str | None = None  # ファイル名 (bytes 入力時は None)

    def __contains__(self, sheet_name: object) -> bool:
        return sheet_name in self.sheets

    def grid(self, sheet_name: str) -> Grid:
        return self.sheets[sheet_name]
