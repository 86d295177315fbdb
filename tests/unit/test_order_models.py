from __future__ import annotations

import pytest

from order_import.models.order import READY_TO_PICK, OrderDetail, OrderRecord, OrdersPayload
from order_import.services.normalizer import convert_to_nested


def test_order_detail_is_empty():
    assert OrderDetail().is_empty()
    assert not OrderDetail(sku="KS-01").is_empty()
    assert not OrderDetail(quantity=0).is_empty()


def test_order_detail_to_dict_omits_missing_fields():
    assert OrderDetail(product_name="Kaos", quantity=2).to_dict() == {"product_name": "Kaos", "quantity": 2}


def test_order_record_to_dict_key_order():
    order = OrderRecord(
        order_id="A1",
        order_details=(OrderDetail(product_name="Kaos"),),
        courier="JNE",
        row_number=7,
    )
    assert list(order.to_dict()) == ["No.", "order_id", "status", "courier", "order_details"]
    assert order.to_dict()["status"] == READY_TO_PICK


def test_order_record_is_frozen():
    order = OrderRecord(order_id="A1", order_details=())
    with pytest.raises(AttributeError):
        order.order_id = "A2"  # type: ignore[misc]


def test_payload_detail_count():
    payload = OrdersPayload(orders=(
        OrderRecord(order_id="A1", order_details=(OrderDetail(sku="1"), OrderDetail(sku="2"))),
        OrderRecord(order_id="A2", order_details=(OrderDetail(sku="3"),)),
    ))
    assert payload.detail_count == 3


def test_rows_with_only_invalid_detail_values_produce_no_detail():
    headers = ["ID Pesanan", "Nama Produk", "SKU", "Jumlah"]
    rows = [["A1", "Kaos", "KS-01", "1"], ["", "null", "undefined", "NaN"]]
    (order,) = convert_to_nested(headers, rows).orders
    assert order.order_details == (OrderDetail(product_name="Kaos", sku="KS-01", quantity=1),)
    assert all(not d.is_empty() for d in order.order_details)
