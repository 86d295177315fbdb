from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord
from ..models.import_result import OrderOutcome

"""Rejected-order log (JSON Lines).

The bulk-import endpoint answers with one outcome per order; every outcome
that is not created/success (failed, skipped, ...) becomes one ErrorRecord
here, tagged with the Excel file the order came from.

- 固定スキーマ: timestamp, file, order_id, status, message
- 送信 1 回ごとに ``logs/import-errors-YYYYMMDD-HHMMSS.log`` (UTC) を生成
  (拒否された注文がある場合のみ)
- バッファリングし flush() でまとめて追記
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """Buffers rejected-order records for one submission; flush() appends them as JSON Lines."""

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir or LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"import-errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def add_rejected(self, source: str, outcome: OrderOutcome) -> ErrorRecord | None:
        """Record ``outcome`` unless the endpoint accepted the order.

        Returns the buffered record, or None for an accepted order.
        """
        if outcome.accepted:
            return None
        record = ErrorRecord.create(
            file=source,
            order_id=outcome.order_id,
            status=outcome.status,
            message=outcome.message,
        )
        self._records.append(record)
        return record

    def status_counts(self) -> dict[str, int]:
        """Buffered records per endpoint status, e.g. {"failed": 2, "skipped": 1}."""
        return dict(Counter(r.status for r in self._records))

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records. Returns the log path, or None when nothing was rejected."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
