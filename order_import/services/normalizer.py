from __future__ import annotations

import logging
import math
import re
from collections.abc import Sequence
from typing import Any

from ..models.order import READY_TO_PICK, OrderDetail, OrderRecord, OrdersPayload
from ..models.workbook import CellValue, Grid, JsonValue, Workbook

"""Spreadsheet-to-order normalizer.

Turns the grid of one sheet (row 0 = header) into either

- nested: ``OrdersPayload`` (orders grouped by the forward-filled first column,
  each with its line items), or
- flat: one dict per retained data row keyed by header name.

Pure transform: no I/O, no module-level mutable state.

Order of operations differs per mode and is kept as-is:
nested converts values after grouping (field-name aware), flat converts while
building the row dicts (header-name aware) and forward-fills afterwards.
"""

__all__ = [
    "DETAIL_COLUMN_MAPPING",
    "ORDER_COLUMN_MAPPING",
    "ConversionError",
    "EmptySheetError",
    "SheetNotFoundError",
    "convert_grid",
    "convert_sheet",
    "convert_to_flat",
    "convert_to_nested",
    "convert_value",
    "forward_fill",
    "is_valid_value",
    "resolve_sheet_name",
]

logger = logging.getLogger(__name__)

ORDER_COLUMN_MAPPING: dict[str, str] = {
    "No.": "No.",
    "ID Pesanan": "order_id",
    "Status": "status",
    "Channel": "channel",
    "Nama Toko": "store",
    "Nama Pembeli": "buyer",
    "AWB/No. Tracking": "tracking",
    "Kurir": "courier",
}

DETAIL_COLUMN_MAPPING: dict[str, str] = {
    "Nama Produk": "product_name",
    "Variant Produk": "variant",
    "SKU": "sku",
    "Jumlah": "quantity",
}

# 先頭列 = order_id 列とみなす
ORDER_ID_COLUMN = 0

# order-level field name -> OrderRecord attribute
_ORDER_ATTRIBUTES = {
    "No.": "row_number",
    "order_id": "order_id",
    "channel": "channel",
    "store": "store",
    "buyer": "buyer",
    "tracking": "tracking",
    "courier": "courier",
}

_NULL_TOKENS = frozenset({"", "nan", "none", "nat"})
_INVALID_TOKENS = _NULL_TOKENS | {"undefined", "null"}
_STRING_FIELDS = frozenset({"order_id", "tracking"})
_QUANTITY_FIELDS = frozenset({"quantity", "Jumlah"})
_NUMERIC_RE = re.compile(r"^\d+(\.\d+)?$", re.ASCII)
_LEADING_INT_RE = re.compile(r"[+-]?\d+", re.ASCII)
_INDEX_RE = re.compile(r"[+-]?\d+", re.ASCII)


class ConversionError(Exception):
    """Base class for structural errors that abort a conversion."""


class SheetNotFoundError(ConversionError):
    """Raised when the sheet selector resolves to no sheet of the workbook."""


class EmptySheetError(ConversionError):
    """Raised when the selected sheet has no rows (not even a header)."""


# ---------------------------------------------------------------------------
# Cell level
# ---------------------------------------------------------------------------

def to_text(value: Any) -> str:
    """Render a cell value as text the way a spreadsheet displays it.

    Integral floats drop the fraction (2.0 -> "2"), booleans are lower-case.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_valid_value(value: CellValue) -> bool:
    """True unless the value is None or a placeholder token (after trim/lower)."""
    if value is None:
        return False
    return to_text(value).strip().lower() not in _INVALID_TOKENS


def convert_value(value: CellValue, field_name: str | None = None) -> JsonValue:
    """Convert a raw cell into its JSON value for ``field_name``.

    - None / "" / "nan" / "none" / "nat" -> None
    - bool / int / float -> unchanged (float NaN -> None)
    - order_id / tracking -> trimmed string (numeric cells as text), never numeric
    - quantity / Jumlah -> leading integer when present
    - ``^\\d+(\\.\\d+)?$`` -> int, or float when a decimal point is present
    - anything else -> trimmed string, case preserved
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, (int, float)):
        return to_text(value) if field_name in _STRING_FIELDS else value
    if not isinstance(value, str):
        return to_text(value)

    trimmed = value.strip()
    if trimmed.lower() in _NULL_TOKENS:
        return None

    if field_name in _STRING_FIELDS:
        return trimmed

    if field_name in _QUANTITY_FIELDS:
        m = _LEADING_INT_RE.match(trimmed)
        if m:
            return int(m.group())

    if _NUMERIC_RE.match(trimmed):
        return float(trimmed) if "." in trimmed else int(trimmed)

    return trimmed


# ---------------------------------------------------------------------------
# Row level
# ---------------------------------------------------------------------------

def forward_fill(values: Sequence[Any]) -> list[Any]:
    """Scan ``values`` replacing invalid entries with the last valid one (as text).

    Valid entries are themselves normalised to text. Leading invalid entries
    (nothing seen yet) are left untouched.
    """
    filled: list[Any] = []
    last: str | None = None
    for value in values:
        if is_valid_value(value):
            last = to_text(value)
            filled.append(last)
        elif last is not None:
            filled.append(last)
        else:
            filled.append(value)
    return filled


def _clean_headers(header_row: Sequence[CellValue]) -> list[str]:
    return ["" if h is None else to_text(h).strip() for h in header_row]


def _row_dicts(headers: list[str], data_rows: Grid, convert: bool = False) -> list[dict[str, Any]]:
    """Align each data row to the headers (short rows padded with None)."""
    rows = []
    for row in data_rows:
        if convert:
            rows.append({h: convert_value(row[i] if i < len(row) else None, h) for i, h in enumerate(headers)})
        else:
            rows.append({h: (row[i] if i < len(row) else None) for i, h in enumerate(headers)})
    return rows


def _fill_column(rows: list[dict[str, Any]], column: str) -> list[dict[str, Any]]:
    filled = forward_fill([row.get(column) for row in rows])
    return [{**row, column: value} for row, value in zip(rows, filled)]


def _group_rows(rows: list[dict[str, Any]], key_column: str) -> dict[str, list[dict[str, Any]]]:
    """Group rows by the key column, keeping first-occurrence order of keys."""
    groups: dict[str, list[dict[str, Any]]] = {}
    for row in rows:
        groups.setdefault(to_text(row.get(key_column)), []).append(row)
    return groups


# ---------------------------------------------------------------------------
# Nested structure
# ---------------------------------------------------------------------------

def _project_detail(row: dict[str, Any], detail_columns: list[str]) -> dict[str, JsonValue]:
    values: dict[str, JsonValue] = {}
    for column in detail_columns:
        value = row[column]
        if is_valid_value(value):
            field = DETAIL_COLUMN_MAPPING[column]
            values[field] = convert_value(value, field)
    return values


def _fill_product_names(details: list[dict[str, JsonValue]]) -> list[dict[str, JsonValue]]:
    """Carry the last seen product_name down to rows that lack one (one order group)."""
    filled = []
    last: str | None = None
    for values in details:
        if values.get("product_name") is not None:
            last = to_text(values["product_name"])
        elif last:
            values = {**values, "product_name": last}
        filled.append(values)
    return filled


def _build_order(
    group: list[dict[str, Any]],
    order_columns: list[str],
    detail_columns: list[str],
) -> OrderRecord:
    first = group[0]
    attrs: dict[str, Any] = {}
    for column in order_columns:
        field = ORDER_COLUMN_MAPPING[column]
        if field == "status":
            continue  # 常に READY_TO_PICK
        attrs[_ORDER_ATTRIBUTES[field]] = convert_value(first[column], field)

    projected = _fill_product_names([_project_detail(row, detail_columns) for row in group])
    details = tuple(d for d in (OrderDetail(**values) for values in projected) if not d.is_empty())

    order_id = attrs.pop("order_id", None)
    return OrderRecord(
        order_id=None if order_id is None else to_text(order_id),
        order_details=details,
        status=READY_TO_PICK,
        **attrs,
    )


def convert_to_nested(header_row: Sequence[CellValue], data_rows: Grid) -> OrdersPayload:
    """Reconstruct orders (with line items) from a header row and data rows."""
    headers = _clean_headers(header_row)
    if not headers:
        return OrdersPayload(orders=())

    rows = _row_dicts(headers, data_rows)
    key_column = headers[ORDER_ID_COLUMN]
    rows = _fill_column(rows, key_column)

    detail_columns = list(dict.fromkeys(h for h in headers if h in DETAIL_COLUMN_MAPPING))
    order_columns = list(dict.fromkeys(h for h in headers if h in ORDER_COLUMN_MAPPING))
    if not detail_columns:
        logger.warning("no detail columns found in header (expected any of %s)", sorted(DETAIL_COLUMN_MAPPING))

    retained = [r for r in rows if any(is_valid_value(r[c]) for c in detail_columns)]
    dropped = len(rows) - len(retained)
    if dropped:
        logger.debug("dropped %d row(s) without detail values", dropped)

    groups = _group_rows(retained, key_column)
    orders = tuple(_build_order(group, order_columns, detail_columns) for group in groups.values())

    orphans = [o for o in orders if o.order_id is None]
    if orphans:
        logger.warning("%d order(s) without order_id (rows before the first order id)", len(orphans))
    logger.debug("nested conversion rows=%d groups=%d", len(rows), len(orders))
    return OrdersPayload(orders=orders)


# ---------------------------------------------------------------------------
# Flat structure
# ---------------------------------------------------------------------------

def convert_to_flat(header_row: Sequence[CellValue], data_rows: Grid) -> list[dict[str, JsonValue]]:
    """One converted dict per data row; rows with nothing beyond column 0 are dropped."""
    headers = _clean_headers(header_row)
    if not headers:
        return []
    rows = _row_dicts(headers, data_rows, convert=True)
    rows = _fill_column(rows, headers[ORDER_ID_COLUMN])
    rest = headers[ORDER_ID_COLUMN + 1:]
    return [r for r in rows if any(is_valid_value(r[c]) for c in rest)]


# ---------------------------------------------------------------------------
# Sheet level
# ---------------------------------------------------------------------------

def resolve_sheet_name(workbook: Workbook, selector: int | str | None = 0) -> str:
    """Resolve an index or a name to a sheet name.

    An integer (or a string of digits) is an index and takes priority; an
    index outside the workbook falls back to the first sheet.
    """
    if selector is None:
        selector = 0
    index: int | None = None
    if isinstance(selector, int) and not isinstance(selector, bool):
        index = selector
    elif isinstance(selector, str) and _INDEX_RE.fullmatch(selector.strip()):
        index = int(selector.strip())

    if index is not None:
        if 0 <= index < len(workbook.sheet_names):
            target = workbook.sheet_names[index]
        elif workbook.sheet_names:
            logger.debug("sheet index %d out of range -> first sheet", index)
            target = workbook.sheet_names[0]
        else:
            raise SheetNotFoundError(f'Sheet index {index} not found (workbook has no sheets)')
    else:
        target = str(selector)

    if target not in workbook:
        raise SheetNotFoundError(f'Sheet "{target}" not found')
    return target


def convert_grid(grid: Grid, nested: bool = True, sheet_name: str = "") -> OrdersPayload | list[dict[str, JsonValue]]:
    """Convert one sheet grid (row 0 = header) in the requested structure mode."""
    if not grid:
        raise EmptySheetError(f'No data found in the Excel sheet "{sheet_name}"')
    header_row, data_rows = grid[0], grid[1:]
    if nested:
        return convert_to_nested(header_row, data_rows)
    return convert_to_flat(header_row, data_rows)


def convert_sheet(workbook: Workbook, sheet: int | str | None = 0, nested: bool = True) -> OrdersPayload | list[dict[str, JsonValue]]:
    """Select a sheet and convert it in the requested structure mode.

    Raises:
        SheetNotFoundError: selector does not resolve to a sheet
        EmptySheetError: the sheet has no rows
    """
    sheet_name = resolve_sheet_name(workbook, sheet)
    return convert_grid(workbook.grid(sheet_name), nested=nested, sheet_name=sheet_name)
