"""Domain models for the Excel order bulk-import converter.

This package contains the workbook model produced by the spreadsheet reader,
the order records produced by the normalizer, and the result/outcome models
used by the orchestration and API layers.
"""

from .error_record import ErrorRecord
from .import_result import BulkImportResponse, BulkImportSummary, ConversionResult, OrderOutcome
from .order import OrderDetail, OrderRecord, OrdersPayload
from .workbook import CellValue, Grid, JsonValue, Workbook

__all__ = [
    # Workbook models
    "CellValue",
    "Grid",
    "JsonValue",
    "Workbook",
    # Order models
    "OrderDetail",
    "OrderRecord",
    "OrdersPayload",
    # Result models
    "BulkImportResponse",
    "BulkImportSummary",
    "ConversionResult",
    "ErrorRecord",
    "OrderOutcome",
]
