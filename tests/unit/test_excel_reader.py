from __future__ import annotations

from datetime import datetime
from pathlib import Path

import openpyxl
import pytest

from order_import.excel.reader import WorkbookParseError, read_workbook


def _make_excel(tmp_path: Path, name: str, sheets: dict[str, list[list[object]]]) -> Path:
    """Write cells with openpyxl directly so cell types are exactly as given."""
    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    for sheet, rows in sheets.items():
        ws = wb.create_sheet(sheet)
        for row in rows:
            ws.append(row)
    p = tmp_path / name
    wb.save(p)
    return p


def test_read_workbook_sheet_order_and_grid(temp_workdir: Path):
    excel = _make_excel(
        temp_workdir, "orders.xlsx",
        {
            "Pesanan": [
                ["ID Pesanan", "Nama Produk", "Jumlah"],
                ["A1", "Kaos", 2],
                [None, "Topi", 1],
            ],
            "Retur": [["ID Pesanan"], ["R1"]],
        },
    )
    wb = read_workbook(excel)
    assert wb.sheet_names == ["Pesanan", "Retur"]
    assert wb.source == "orders.xlsx"
    grid = wb.grid("Pesanan")
    assert grid[0] == ["ID Pesanan", "Nama Produk", "Jumlah"]
    assert grid[1] == ["A1", "Kaos", 2]
    # empty cell arrives as ""
    assert grid[2] == ["", "Topi", 1]


def test_placeholder_tokens_are_not_converted_to_nan(temp_workdir: Path):
    excel = _make_excel(temp_workdir, "tokens.xlsx", {"S": [["a", "b", "c"], ["NA", "nan", "NULL"]]})
    grid = read_workbook(excel).grid("S")
    assert grid[1] == ["NA", "nan", "NULL"]


def test_long_numeric_text_kept_verbatim(temp_workdir: Path):
    excel = _make_excel(temp_workdir, "ids.xlsx", {"S": [["ID Pesanan"], ["1234567890123456"]]})
    assert read_workbook(excel).grid("S")[1] == ["1234567890123456"]


def test_datetime_cells_become_iso_text(temp_workdir: Path):
    excel = _make_excel(temp_workdir, "dates.xlsx", {"S": [["Tanggal"], [datetime(2024, 3, 1, 8, 30)]]})
    (value,) = read_workbook(excel).grid("S")[1]
    assert isinstance(value, str)
    assert value.startswith("2024-03-01T08:30")


def test_read_workbook_from_bytes(temp_workdir: Path):
    excel = _make_excel(temp_workdir, "bytes.xlsx", {"S": [["ID Pesanan"], ["A1"]]})
    wb = read_workbook(excel.read_bytes())
    assert wb.sheet_names == ["S"]
    assert wb.source is None
    assert wb.grid("S")[1] == ["A1"]


def test_empty_sheet_has_empty_grid(temp_workdir: Path):
    excel = _make_excel(temp_workdir, "empty.xlsx", {"Data": [["ID Pesanan"], ["A1"]], "Kosong": []})
    wb = read_workbook(excel)
    assert wb.grid("Kosong") == []


def test_unreadable_bytes_raise_parse_error():
    with pytest.raises(WorkbookParseError):
        read_workbook(b"this is not an excel file")


def test_missing_file_raises_parse_error(temp_workdir: Path):
    with pytest.raises(WorkbookParseError):
        read_workbook(temp_workdir / "nope.xlsx")


# OLE2 シグネチャだけの壊れた .xls (xlrd 経由で読まれる)
BROKEN_XLS = bytes.fromhex("D0CF11E0A1B11AE1") + b"\x00" * 4096


def test_broken_xls_bytes_raise_parse_error():
    with pytest.raises(WorkbookParseError):
        read_workbook(BROKEN_XLS)


def test_broken_xls_file_raise_parse_error(temp_workdir: Path):
    p = temp_workdir / "legacy.xls"
    p.write_bytes(BROKEN_XLS)
    with pytest.raises(WorkbookParseError) as e:
        read_workbook(p)
    assert "legacy.xls" in str(e.value)


def test_missing_reader_engine_raise_parse_error(temp_workdir: Path, monkeypatch):
    def _no_engine(*args, **kwargs):
        raise ImportError("Missing optional dependency 'odfpy'")

    monkeypatch.setattr("order_import.excel.reader.pd.ExcelFile", _no_engine)
    p = temp_workdir / "orders.ods"
    p.write_bytes(b"ods")
    with pytest.raises(WorkbookParseError) as e:
        read_workbook(p)
    assert "odfpy" in str(e.value)
