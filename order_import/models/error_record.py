from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the rejected-order log.

One record per order the bulk-import endpoint did not create (failed or
skipped). Serialized as JSON Lines with a fixed key set:
timestamp, file, order_id, status, message.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured record of a rejected order.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Excel filename the order was converted from
        order_id: Order identifier as sent to the endpoint
        status: Outcome reported by the endpoint (e.g. failed / skipped)
        message: Endpoint message, empty string when none was given
    """
    timestamp: str  # ISO8601 UTC
    file: str
    order_id: str
    status: str
    message: str

    @staticmethod
    def create(file: str, order_id: str, status: str, message: str | None) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            order_id=order_id,
            status=status,
            message=message or "",
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
