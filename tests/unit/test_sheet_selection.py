from __future__ import annotations

import pytest

from order_import.models.order import OrdersPayload
from order_import.models.workbook import Workbook
from order_import.services.normalizer import (
    ConversionError,
    EmptySheetError,
    SheetNotFoundError,
    convert_sheet,
    resolve_sheet_name,
)


@pytest.fixture()
def workbook() -> Workbook:
    return Workbook(
        sheet_names=["Pesanan", "Retur", "2024"],
        sheets={
            "Pesanan": [["ID Pesanan", "Nama Produk"], ["A1", "Kaos"]],
            "Retur": [["ID Pesanan", "Nama Produk"], ["R1", "Topi"]],
            "2024": [],
        },
    )


def test_resolve_by_index(workbook):
    assert resolve_sheet_name(workbook, 1) == "Retur"
    assert resolve_sheet_name(workbook, "1") == "Retur"
    assert resolve_sheet_name(workbook, " 0 ") == "Pesanan"


def test_resolve_by_name(workbook):
    assert resolve_sheet_name(workbook, "Retur") == "Retur"


def test_index_takes_priority_over_digit_named_sheet(workbook):
    # "2024" parses as an index -> out of range -> first sheet
    assert resolve_sheet_name(workbook, "2024") == "Pesanan"


def test_invalid_index_falls_back_to_first_sheet(workbook):
    assert resolve_sheet_name(workbook, 99) == "Pesanan"
    assert resolve_sheet_name(workbook, -1) == "Pesanan"


def test_default_selector_is_first_sheet(workbook):
    assert resolve_sheet_name(workbook, None) == "Pesanan"


def test_unknown_name_raises(workbook):
    with pytest.raises(SheetNotFoundError):
        resolve_sheet_name(workbook, "Missing")


def test_index_on_empty_workbook_raises():
    with pytest.raises(SheetNotFoundError):
        resolve_sheet_name(Workbook(sheet_names=[], sheets={}), 0)


def test_empty_sheet_raises(workbook):
    with pytest.raises(EmptySheetError):
        convert_sheet(workbook, 2)


def test_errors_share_base_class():
    assert issubclass(SheetNotFoundError, ConversionError)
    assert issubclass(EmptySheetError, ConversionError)


def test_convert_sheet_modes(workbook):
    nested = convert_sheet(workbook, "Retur", nested=True)
    assert isinstance(nested, OrdersPayload)
    assert nested.orders[0].order_id == "R1"
    flat = convert_sheet(workbook, "Retur", nested=False)
    assert flat == [{"ID Pesanan": "R1", "Nama Produk": "Topi"}]
