from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from invoice_service.order_resolver import map_order_item
from mock_services.mock_document_converter import app as converter_app
from mock_services.seed_test_orders import generate_order, seed_orders, to_attribute_map


def test_seeded_order_maps_into_order():
    record = generate_order()

    order = map_order_item(to_attribute_map(record))

    assert order.orderId == record["orderId"]
    assert order.customer.name == record["customerName"]
    assert len(order.lines) == len(record["items"])
    for line, item in zip(order.lines, record["items"]):
        assert line.sku == item["itemId"]
        assert line.quantity == item["quantity"]
        assert line.unitPriceMinor == int(item["price"] * 100)


def test_seed_orders_counts_failures():
    client = MagicMock()
    client.put_item.side_effect = [None, Exception("throttled"), None]

    assert seed_orders(client, "orders", 3) == 2
    assert client.put_item.call_args.kwargs["TableName"] == "orders"


def test_mock_converter_returns_pdf():
    client = TestClient(converter_app)

    response = client.post("/v1/convert/html", content=b"<html><body>Invoice</body></html>",
                           headers={"Content-Type": "text/html"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF-1.4")
    assert response.content.rstrip().endswith(b"%%EOF")


def test_mock_converter_rejects_empty_document():
    response = TestClient(converter_app).post("/v1/convert/html", content=b"   ")

    assert response.status_code == 422
