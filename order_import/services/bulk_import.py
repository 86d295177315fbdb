from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..api.client import BulkImportClient
from ..excel.reader import read_workbook
from ..logging.error_log import ErrorLogBuffer
from ..models.import_result import BulkImportResponse, ConversionResult
from ..models.order import OrdersPayload
from ..models.workbook import JsonValue, Workbook
from .normalizer import convert_grid, resolve_sheet_name

"""Orchestration of one import run.

convert: read workbook -> select sheet -> normalize (nested / flat), timed.
submit: POST the nested payload, then record every order the endpoint did not
accept (failed / skipped) in the rejected-order log.

Errors from the reader (WorkbookParseError), the normalizer
(SheetNotFoundError / EmptySheetError) and the client (ApiError) propagate to
the caller unchanged; there is no partial conversion.
"""

__all__ = [
    "convert_file",
    "convert_workbook",
    "orders_without_id",
    "submit_orders",
    "write_output",
]

logger = logging.getLogger(__name__)


def convert_workbook(
    workbook: Workbook,
    sheet: int | str | None = 0,
    nested: bool = True,
    source: str | None = None,
) -> ConversionResult:
    start_time = datetime.now(UTC)
    sheet_name = resolve_sheet_name(workbook, sheet)
    grid = workbook.grid(sheet_name)
    converted = convert_grid(grid, nested=nested, sheet_name=sheet_name)
    end_time = datetime.now(UTC)

    payload: JsonValue
    if isinstance(converted, OrdersPayload):
        payload = converted.to_dict()
        order_count = len(converted.orders)
        detail_count = converted.detail_count
    else:
        payload = converted
        order_count = 0
        detail_count = len(converted)

    return ConversionResult(
        source=source or workbook.source or "<bytes>",
        sheet_name=sheet_name,
        nested=nested,
        payload=payload,
        row_count=max(len(grid) - 1, 0),
        order_count=order_count,
        detail_count=detail_count,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
    )


def convert_file(path: Path, sheet: int | str | None = 0, nested: bool = True) -> ConversionResult:
    """Read ``path`` and convert the selected sheet."""
    logger.info(f"Reading workbook: {path}")
    workbook = read_workbook(path)
    logger.debug(f"sheets={workbook.sheet_names}")
    return convert_workbook(workbook, sheet=sheet, nested=nested, source=path.name)


def write_output(result: ConversionResult, path: Path) -> Path:
    """Write the converted payload as pretty-printed JSON (UTF-8)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(result.payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return path


def submit_orders(
    client: BulkImportClient,
    payload: dict[str, Any],
    error_log: ErrorLogBuffer,
    source: str,
) -> BulkImportResponse:
    """Send the payload and buffer one ErrorRecord per rejected order."""
    response = client.bulk_import_orders(payload)
    for outcome in response.details:
        error_log.add_rejected(source, outcome)
    if response.rejected:
        logger.debug(f"rejected orders buffered for error log: {error_log.status_counts()}")
    return response


def orders_without_id(payload: dict[str, Any]) -> int:
    """Number of orders in a nested payload whose order_id is missing."""
    return sum(1 for order in payload.get("orders", []) if order.get("order_id") is None)
