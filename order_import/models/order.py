from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .workbook import JsonValue

"""Order / order detail records produced by the nested normalizer.

These are the typed counterpart of the bulk-create payload:
``{"orders": [{order_id, status, ..., order_details: [...]}]}``.
Records are frozen; the normalizer builds each one exactly once per order group.
"""

__all__ = [
    "READY_TO_PICK",
    "OrderDetail",
    "OrderRecord",
    "OrdersPayload",
]

READY_TO_PICK = "ready to pick"


def _compact(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    return {key: value for key, value in pairs if value is not None}


@dataclass(frozen=True)
class OrderDetail:
    """One line item of an order (one spreadsheet row within the order group)."""
    product_name: JsonValue = None
    sku: JsonValue = None
    variant: JsonValue = None
    quantity: JsonValue = None

    def is_empty(self) -> bool:
        return all(v is None for v in (self.product_name, self.sku, self.variant, self.quantity))

    def to_dict(self) -> dict[str, JsonValue]:
        return _compact([
            ("product_name", self.product_name),
            ("sku", self.sku),
            ("variant", self.variant),
            ("quantity", self.quantity),
        ])


@dataclass(frozen=True)
class OrderRecord:
    """A single order reconstructed from one or more spreadsheet rows.

    ``row_number`` carries the export's "No." column through unchanged and is
    serialized under that key. ``status`` is always "ready to pick".
    """
    order_id: str | None
    order_details: tuple[OrderDetail, ...]
    status: str = READY_TO_PICK
    channel: JsonValue = None
    store: JsonValue = None
    buyer: JsonValue = None
    tracking: JsonValue = None
    courier: JsonValue = None
    row_number: JsonValue = None

    def to_dict(self) -> dict[str, JsonValue]:
        data: dict[str, JsonValue] = _compact([("No.", self.row_number)])
        data["order_id"] = self.order_id
        data["status"] = self.status
        data.update(_compact([
            ("channel", self.channel),
            ("store", self.store),
            ("buyer", self.buyer),
            ("tracking", self.tracking),
            ("courier", self.courier),
        ]))
        data["order_details"] = [d.to_dict() for d in self.order_details]
        return data


@dataclass(frozen=True)
class OrdersPayload:
    """Request body of the bulk-import endpoint."""
    orders: tuple[OrderRecord, ...]

    @property
    def detail_count(self) -> int:
        return sum(len(o.order_details) for o in self.orders)

    def to_dict(self) -> dict[str, JsonValue]:
        return {"orders": [o.to_dict() for o in self.orders]}
