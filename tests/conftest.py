import json
from datetime import datetime, timezone

import pytest

from invoice_service.invoice_renderer import InvoiceRenderer
from invoice_service.models import Customer, LineItem, Order, OrderReference

FIXED_NOW = datetime(2024, 3, 1, 9, 30, 15)


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Fake credentials so boto3 never touches a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def renderer():
    return InvoiceRenderer(clock=lambda: FIXED_NOW)


@pytest.fixture
def reference():
    return OrderReference(partitionKey="ORDER#ORD-123", sortKey="STATE#v1", orderId="ORD-123")


@pytest.fixture
def make_order():
    def _make(lines=(), customer=None, **overrides):
        fields = dict(
            orderId="ORD-123",
            currency="USD",
            createdAt=datetime(2023, 12, 15, 10, 30, tzinfo=timezone.utc),
            customer=customer or Customer(name="John Doe", email="john@example.com"),
            lines=[LineItem(sku=sku, quantity=qty, unitPriceMinor=price) for sku, qty, price in lines],
        )
        fields.update(overrides)
        return Order(**fields)
    return _make


@pytest.fixture
def make_envelope():
    def _make(pk="ORDER#ORD-123", sk="STATE#v1", order_id="ORD-123", pdf_key=None, **extra_image):
        image = {}
        if pk is not None:
            image["pk"] = {"S": pk}
        if sk is not None:
            image["sk"] = {"S": sk}
        if order_id is not None:
            image["orderId"] = {"S": order_id}
        if pdf_key is not None:
            image["pdf"] = {"M": {"s3Key": {"S": pdf_key}}}
        image.update(extra_image)
        return json.dumps({
            "eventName": "INSERT",
            "dynamodb": {"Keys": {"pk": {"S": pk}, "sk": {"S": sk}}, "NewImage": image},
        })
    return _make


@pytest.fixture
def stored_order_item():
    """A complete order record as returned by DynamoDB get_item."""
    return {
        "pk": {"S": "ORDER#ORD-777"},
        "sk": {"S": "STATE#v1"},
        "orderId": {"S": "ORD-777"},
        "customerName": {"S": "Jane Smith"},
        "customerEmail": {"S": "jane@example.com"},
        "customerPhone": {"S": "+1-555-123-4567"},
        "shippingAddress": {"S": "123 Main St, Apt 4B, New York, NY 10001"},
        "status": {"S": "shipped"},
        "notes": {"S": "Leave at front door"},
        "source": {"S": "website"},
        "priority": {"S": "high"},
        "region": {"S": "us-east"},
        "orderDate": {"S": "2024-02-10"},
        "createdAt": {"S": "2024-02-10T08:15:00Z"},
        "totalAmount": {"N": "65.00"},
        "processingTime": {"N": "420"},
        "items": {"L": [
            {"M": {"itemId": {"S": "SKU-1"}, "quantity": {"N": "2"}, "price": {"N": "25.00"}}},
            {"M": {"itemId": {"S": "SKU-2"}, "quantity": {"N": "1"}, "price": {"N": "15"}}},
        ]},
    }
