from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .workbook import JsonValue

"""Result models for conversion and bulk-import submission.

ConversionResult aggregates what one "Convert" run produced (sheet, mode,
payload and counts). BulkImportResponse mirrors the endpoint response:

    {"success": bool,
     "data": {"summary": {"total", "created", "failed", "skipped"},
              "details": [{"order_id", "status", "message"?}]}}
"""

__all__ = [
    "BulkImportResponse",
    "BulkImportSummary",
    "ConversionResult",
    "OrderOutcome",
]

# details[].status の中で成功扱いとする値
ACCEPTED_STATUSES = frozenset({"created", "success"})


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of converting one sheet (nested or flat)."""
    source: str  # ファイル名
    sheet_name: str
    nested: bool
    payload: JsonValue  # nested: {"orders": [...]}, flat: [{...}, ...]
    row_count: int  # ヘッダを除くデータ行数
    order_count: int
    detail_count: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float

    @property
    def mode(self) -> str:
        return "nested" if self.nested else "flat"


@dataclass(frozen=True)
class BulkImportSummary:
    total: int
    created: int
    failed: int
    skipped: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BulkImportSummary:
        return cls(
            total=int(data.get("total", 0) or 0),
            created=int(data.get("created", 0) or 0),
            failed=int(data.get("failed", 0) or 0),
            skipped=int(data.get("skipped", 0) or 0),
        )


@dataclass(frozen=True)
class OrderOutcome:
    """Per-order outcome reported by the endpoint."""
    order_id: str
    status: str
    message: str | None = None

    @property
    def accepted(self) -> bool:
        return self.status.strip().lower() in ACCEPTED_STATUSES


@dataclass(frozen=True)
class BulkImportResponse:
    success: bool
    summary: BulkImportSummary | None
    details: list[OrderOutcome] = field(default_factory=list)
    raw: dict[str, Any] | None = None

    @classmethod
    def from_json(cls, body: Any) -> BulkImportResponse:
        """Build from the decoded JSON body, tolerating a missing summary/details."""
        if not isinstance(body, dict):
            raise ValueError(f"unexpected response body type: {type(body).__name__}")
        data = body.get("data") if isinstance(body.get("data"), dict) else {}
        summary_raw = data.get("summary")
        summary = BulkImportSummary.from_dict(summary_raw) if isinstance(summary_raw, dict) else None
        details = [
            OrderOutcome(
                order_id=str(item.get("order_id", "")),
                status=str(item.get("status", "")),
                message=item.get("message"),
            )
            for item in (data.get("details") or [])
            if isinstance(item, dict)
        ]
        return cls(success=bool(body.get("success", False)), summary=summary, details=details, raw=body)

    @property
    def rejected(self) -> list[OrderOutcome]:
        return [d for d in self.details if not d.accepted]
