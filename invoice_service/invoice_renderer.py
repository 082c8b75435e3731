"""
invoice_renderer.py — Rendering of Orders into Invoice HTML

Computes line, tax and total amounts with decimal arithmetic and renders them
together with the raw order fields through the Jinja2 invoice template. The
resulting HTML is the input of the external document converter.

Rounding: every amount is rounded ROUND_HALF_UP to cents. Tax is rounded
before it is added to the subtotal.
"""

import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Context, Decimal, localcontext
from pathlib import Path
from typing import Callable, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound, select_autoescape

from .models import LineItem, Order

log = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "invoice.html"

TAX_RATE = Decimal("0.08")
CENTS = Decimal("0.01")
# Wide enough that no stored amount overflows the 28-digit default context
AMOUNT_CONTEXT = Context(prec=100, rounding=ROUND_HALF_UP)

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£"}

ORDER_DATE_FORMAT = "%b %d, %Y"
GENERATION_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class TemplateAssetError(RuntimeError):
    """The invoice template could not be loaded; the service cannot start."""


def line_total(line: LineItem) -> Decimal:
    with localcontext(AMOUNT_CONTEXT):
        return unit_price(line) * line.quantity


def unit_price(line: LineItem) -> Decimal:
    with localcontext(AMOUNT_CONTEXT):
        return Decimal(line.unitPriceMinor) / 100


def compute_totals(lines: List[LineItem]) -> Dict[str, Decimal]:
    """
    Computes subtotal, tax and grand total for a list of line items.

    Returns:
        dict: {"subtotal", "tax", "grand_total"} as Decimals. An empty list
        yields zeros.
    """
    with localcontext(AMOUNT_CONTEXT):
        subtotal = sum((line_total(line) for line in lines), Decimal("0"))
        tax = (subtotal * TAX_RATE).quantize(CENTS, rounding=ROUND_HALF_UP)
        return {"subtotal": subtotal, "tax": tax, "grand_total": subtotal + tax}


def format_currency(amount: Decimal, currency: str = "USD") -> str:
    """
    Formats an amount for display, e.g. Decimal("1234.5") -> "$1,234.50".

    Negative amounts carry the sign before the symbol ("-$5.00"). Currencies
    without a known symbol are prefixed with their code ("CHF 12.00").
    """
    with localcontext(AMOUNT_CONTEXT):
        rounded = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
        sign = "-" if rounded < 0 else ""
        symbol = CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
        return f"{sign}{symbol}{abs(rounded):,.2f}"


class InvoiceRenderer:
    """
    Renders an Order into invoice HTML.

    The template is loaded once, at construction; a missing template raises
    TemplateAssetError.
    """

    def __init__(self, template_dir: Path = TEMPLATE_DIR, template_name: str = TEMPLATE_NAME,
                 clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or datetime.now
        env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        try:
            self.template = env.get_template(template_name)
        except TemplateNotFound as e:
            raise TemplateAssetError(f"Template file not found: {template_dir / template_name}") from e
        log.info(f"Invoice template loaded from {template_dir / template_name}")

    def render(self, order: Order) -> str:
        """
        Renders the invoice HTML for an order.

        Args:
            order (Order): The resolved order.

        Returns:
            str: The complete HTML document.
        """
        totals = compute_totals(order.lines)
        currency = order.currency

        return self.template.render(
            order_id=order.orderId,
            order_date=_order_date(order.createdAt),
            order_status=(order.status or "CONFIRMED").upper(),
            order_priority=(order.priority or "NORMAL").upper(),
            customer_name=order.customer.name,
            customer_email=order.customer.email,
            customer_phone=order.customer.phone or "",
            shipping_address_lines=_address_lines(order.customer.address),
            order_meta=_order_meta(order),
            items=[
                {
                    "sku": line.sku,
                    "quantity": line.quantity,
                    "unit_price": format_currency(unit_price(line), currency),
                    "total_price": format_currency(line_total(line), currency),
                }
                for line in order.lines
            ],
            subtotal=format_currency(totals["subtotal"], currency),
            tax_amount=format_currency(totals["tax"], currency),
            grand_total=format_currency(totals["grand_total"], currency),
            generation_date=self.clock().strftime(GENERATION_DATE_FORMAT),
            processing_time=order.processingTime or 0,
        )


def _order_date(created_at: datetime) -> str:
    # Invoice dates are UTC calendar dates; naive timestamps are already UTC
    if created_at.tzinfo is not None:
        created_at = created_at.astimezone(timezone.utc)
    return created_at.strftime(ORDER_DATE_FORMAT)


def _address_lines(address: Optional[str]) -> List[str]:
    if not address:
        return []
    return [segment.strip() for segment in address.split(",")]


def _order_meta(order: Order) -> List[str]:
    meta = []
    if order.source:
        meta.append(f"Source: {order.source.upper()}")
    if order.region:
        meta.append(f"Region: {order.region.upper()}")
    if order.notes:
        meta.append(f"Notes: {order.notes}")
    return meta
