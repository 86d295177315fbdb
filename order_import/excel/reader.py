from __future__ import annotations

import io
import math
import zipfile
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

import pandas as pd
import xlrd
from xlrd.compdoc import CompDocError

from ..models.workbook import CellValue, Grid, Workbook

"""Spreadsheet reader: Excel bytes / file -> Workbook (sheet names + grids).

- 1行目をヘッダ行として扱うのは normalizer 側。ここでは全行をそのまま返す。
- pandas の NA 変換は無効化する ("nan" / "NULL" 等の判定は normalizer の責務)。
- 空セルは "" のまま、日付セルは ISO 文字列に変換する。
"""

__all__ = [
    "WorkbookParseError",
    "read_workbook",
]


class WorkbookParseError(Exception):
    """Raised when the input cannot be read as an Excel workbook."""


# .xls は xlrd 経由。壊れた OLE コンテナは CompDocError、未対応形式のエンジン欠如は ImportError
_READ_ERRORS = (
    ValueError,
    OSError,
    KeyError,
    ImportError,
    zipfile.BadZipFile,
    xlrd.XLRDError,
    CompDocError,
)


def read_workbook(source: Path | str | bytes) -> Workbook:
    """Read every sheet of an Excel workbook into a Workbook.

    Parameters
    ----------
    source: Excel ファイルパス、またはファイル内容 (bytes)
    """
    if isinstance(source, bytes):
        name = None
        handle: Any = io.BytesIO(source)
    else:
        path = Path(source)
        if not path.exists():
            raise WorkbookParseError(f"file not found: {path}")
        name = path.name
        handle = path

    try:
        xls = pd.ExcelFile(handle)
    except _READ_ERRORS as e:
        raise WorkbookParseError(f"unreadable workbook{f' {name}' if name else ''}: {e}") from e

    sheet_names: list[str] = []
    sheets: dict[str, Grid] = {}
    with xls:
        for sheet in xls.sheet_names:
            try:
                # ヘッダなしで生読み / NA 変換なし (空セルは "" のまま)
                df = xls.parse(sheet, header=None, dtype=object, keep_default_na=False, na_filter=False)
            except _READ_ERRORS as e:
                raise WorkbookParseError(f"failed to parse sheet '{sheet}': {e}") from e
            sheet_names.append(str(sheet))
            sheets[str(sheet)] = [[_coerce_cell(v) for v in row] for row in df.values.tolist()]
    return Workbook(sheet_names=sheet_names, sheets=sheets, source=name)


def _coerce_cell(value: Any) -> CellValue:
    """Map a pandas/openpyxl cell object onto the CellValue domain."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    if value is pd.NaT:
        return ""
    if isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    # numpy scalar 等
    if hasattr(value, "item"):
        return _coerce_cell(value.item())
    return str(value)
