from __future__ import annotations

from ..models.import_result import BulkImportSummary, ConversionResult

"""SUMMARY line bodies.

The ``SUMMARY`` prefix comes from the log formatter (see logging.init).

Conversion:
    sheet={name} mode={nested|flat} rows={n} orders={n} details={n} elapsed_sec={s}
Submission:
    total={n} created={n} failed={n} skipped={n} elapsed_sec={s}
"""

__all__ = [
    "format_seconds",
    "render_conversion_line",
    "render_import_line",
]


def format_seconds(seconds: float) -> str:
    """Render elapsed seconds without scientific notation or a trailing ``.0``.

    >>> format_seconds(2.0)
    '2'
    >>> format_seconds(0.0000123)
    '0.000012'
    """
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # 指数表記を避ける
        return f"{seconds:.6f}".rstrip("0").rstrip(".") or "0"
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_conversion_line(result: ConversionResult) -> str:
    return (
        f"sheet={result.sheet_name} "
        f"mode={result.mode} "
        f"rows={result.row_count} "
        f"orders={result.order_count} "
        f"details={result.detail_count} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)}"
    )


def render_import_line(summary: BulkImportSummary, elapsed_seconds: float) -> str:
    return (
        f"total={summary.total} "
        f"created={summary.created} "
        f"failed={summary.failed} "
        f"skipped={summary.skipped} "
        f"elapsed_sec={format_seconds(elapsed_seconds)}"
    )
