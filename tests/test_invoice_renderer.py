import re
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from invoice_service.invoice_renderer import (
    InvoiceRenderer,
    TemplateAssetError,
    compute_totals,
    format_currency,
)
from invoice_service.models import Customer, LineItem


def assert_fully_substituted(html):
    assert "{{" not in html and "}}" not in html
    assert "{%" not in html and "%}" not in html


def test_render_basic_order(renderer, make_order):
    order = make_order(lines=[("ITEM-001", 2, 2500)], status="confirmed", priority="high",
                       source="web", region="US-EAST", notes="Priority order", processingTime=150)

    html = renderer.render(order)

    assert html.startswith("<!DOCTYPE html>")
    assert "</html>" in html
    assert "ORD-123" in html
    assert "Dec 15, 2023" in html
    assert "CONFIRMED" in html
    assert "HIGH" in html
    assert "John Doe" in html
    assert "john@example.com" in html
    assert "ITEM-001" in html
    assert "$50.00" in html
    assert "$4.00" in html
    assert "$54.00" in html
    assert_fully_substituted(html)


def test_render_sample_totals(renderer, make_order):
    html = renderer.render(make_order(lines=[("ITEM-001", 2, 2500), ("ITEM-002", 1, 1500)]))

    assert "<span>Subtotal:</span><span>$65.00</span>" in html
    assert "<span>Tax (8%):</span><span>$5.20</span>" in html
    assert "<span>Total:</span><span>$70.20</span>" in html


def test_render_decimal_amounts(renderer, make_order):
    html = renderer.render(make_order(lines=[("ITEM-001", 3, 333), ("ITEM-002", 2, 167)]))

    assert "<td>$3.33</td>" in html
    assert "<td>$1.67</td>" in html
    assert "<td>$9.99</td>" in html
    assert "<td>$3.34</td>" in html
    assert "<span>$13.33</span>" in html
    assert "<span>$1.07</span>" in html
    assert "<span>$14.40</span>" in html


def test_render_line_rows(renderer, make_order):
    html = renderer.render(make_order(lines=[
        ("ITEM-001", 2, 1500), ("ITEM-002", 3, 1000), ("ITEM-003", 1, 4000),
    ]))

    assert '<td><span class="item-sku">ITEM-002</span></td>' in html
    assert "<td>2</td>" in html and "<td>3</td>" in html and "<td>1</td>" in html
    assert "<span>$100.00</span>" in html
    assert "<span>$8.00</span>" in html
    assert "<span>$108.00</span>" in html


def test_render_empty_lines(renderer, make_order):
    html = renderer.render(make_order(status="cancelled"))

    assert "CANCELLED" in html
    assert "<span>Subtotal:</span><span>$0.00</span>" in html
    assert "<span>Tax (8%):</span><span>$0.00</span>" in html
    assert "<span>Total:</span><span>$0.00</span>" in html
    assert 'class="item-sku"' not in html


def test_render_minimal_order_uses_defaults(renderer, make_order):
    html = renderer.render(make_order())

    assert "CONFIRMED" in html
    assert "NORMAL" in html
    assert "Processing Time: 0" in html
    assert "Tel:" not in html
    assert re.search(r'<div class="order-meta">\s*</div>', html)
    assert_fully_substituted(html)


def test_render_empty_strings_count_as_absent(renderer, make_order):
    order = make_order(customer=Customer(name="A", email="a@example.com", phone="", address=""),
                       status="", priority="", source="", region="", notes="")

    html = renderer.render(order)

    assert "CONFIRMED" in html
    assert "NORMAL" in html
    assert "Tel:" not in html
    assert "Same as billing address" in html
    assert "Source:" not in html


def test_render_phone(renderer, make_order):
    customer = Customer(name="Jane Smith", email="jane@example.com", phone="+1-555-123-4567")

    html = renderer.render(make_order(customer=customer))

    assert '<div class="customer-detail">Tel: +1-555-123-4567</div>' in html


def test_render_address_lines(renderer, make_order):
    customer = Customer(name="Alice Brown", email="alice@example.com",
                        address="123 Main St, Apt 4B, New York, NY 10001")

    html = renderer.render(make_order(customer=customer))

    for line in ("123 Main St", "Apt 4B", "New York", "NY 10001"):
        assert f'<div class="customer-detail">{line}</div>' in html
    assert "Same as billing address" not in html


def test_render_missing_address_placeholder(renderer, make_order):
    html = renderer.render(make_order())

    assert ('<div class="customer-detail" style="font-style: italic; color: #999;">'
            'Same as billing address</div>') in html


def test_render_metadata(renderer, make_order):
    html = renderer.render(make_order(status="shipped", priority="urgent", source="enterprise",
                                      region="us-midwest", notes="VIP customer - expedite processing",
                                      processingTime=500))

    assert "SHIPPED" in html
    assert "URGENT" in html
    assert "<span>Source: ENTERPRISE</span>" in html
    assert "<span>Region: US-MIDWEST</span>" in html
    assert "<span>Notes: VIP customer - expedite processing</span>" in html
    assert "Processing Time: 500" in html


def test_render_escapes_html_in_fields(renderer, make_order):
    html = renderer.render(make_order(notes="<script>alert(1)</script>"))

    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_render_generation_date(make_order):
    html = InvoiceRenderer().render(make_order())

    assert re.search(r"Generated on \d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", html)


def test_render_generation_date_uses_clock(renderer, make_order):
    assert "Generated on 2024-03-01 09:30:15" in renderer.render(make_order())


def test_missing_template_is_fatal(tmp_path):
    with pytest.raises(TemplateAssetError):
        InvoiceRenderer(template_dir=tmp_path)


def test_compute_totals():
    lines = [LineItem(sku="A", quantity=3, unitPriceMinor=333), LineItem(sku="B", quantity=2, unitPriceMinor=167)]

    totals = compute_totals(lines)

    assert totals["subtotal"] == Decimal("13.33")
    assert totals["tax"] == Decimal("1.07")
    assert totals["grand_total"] == Decimal("14.40")


def test_compute_totals_empty():
    assert compute_totals([]) == {"subtotal": 0, "tax": 0, "grand_total": 0}


@pytest.mark.parametrize("amount,currency,expected", [
    (Decimal("1234.5"), "USD", "$1,234.50"),
    (Decimal("0"), "USD", "$0.00"),
    (Decimal("-5"), "USD", "-$5.00"),
    (Decimal("0.005"), "USD", "$0.01"),
    (Decimal("1000000"), "EUR", "€1,000,000.00"),
    (Decimal("12"), "chf", "CHF 12.00"),
])
def test_format_currency(amount, currency, expected):
    assert format_currency(amount, currency) == expected


def test_render_order_date_in_utc(renderer, make_order):
    eastern = timezone(timedelta(hours=-5))

    html = renderer.render(make_order(createdAt=datetime(2024, 2, 10, 22, 30, tzinfo=eastern)))

    assert "Feb 11, 2024" in html
    assert "Feb 10, 2024" not in html


def test_render_naive_order_date_unchanged(renderer, make_order):
    html = renderer.render(make_order(createdAt=datetime(2024, 2, 10, 22, 30)))

    assert "Feb 10, 2024" in html


def test_render_amounts_beyond_default_precision(renderer, make_order):
    html = renderer.render(make_order(lines=[("BIG", 1, 10 ** 30)]))

    grand_total = 10 ** 28 + 8 * 10 ** 26
    assert f"${grand_total:,}.00" in html
    assert f"${8 * 10 ** 26:,}.00" in html


def test_format_currency_wide_amount():
    assert format_currency(Decimal(f"{10 ** 40}.005")) == f"${10 ** 40:,}.01"
