"""
order_resolver.py — Resolution of Order References into Full Orders

Looks up the order record behind a reference and maps its DynamoDB attributes
into an Order.

Failure policy:
    • Record not found, or the lookup itself fails → a fixed placeholder order
      is returned, so rendering never blocks on store availability.
    • Record found but its data cannot be mapped → OrderMappingError is raised,
      because that indicates corrupt data rather than unavailability.
"""

import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Protocol

from .models import Customer, LineItem, Order, OrderReference

log = logging.getLogger(__name__)

DEFAULT_CURRENCY = "USD"


class OrderMappingError(Exception):
    """Raised when a found order record cannot be mapped into an Order."""

    def __init__(self, order_id: str, cause: Exception):
        super().__init__(f"Failed to map order record for order {order_id}: {cause}")
        self.order_id = order_id


class OrderStore(Protocol):
    def get_order_item(self, partition_key: str, sort_key: str) -> Optional[Dict[str, Any]]: ...


class OrderResolver:
    """
    Produces a fully populated Order for a reference, applying the fallback
    policy described in the module docstring.
    """

    def __init__(self, store: OrderStore):
        self.store = store

    def resolve(self, ref: OrderReference) -> Order:
        """
        Resolves an order reference.

        Args:
            ref (OrderReference): The accepted reference.

        Returns:
            Order: The mapped order, or the placeholder order if the record is
            missing or the store is unavailable.

        Raises:
            OrderMappingError: If a found record cannot be mapped.
        """
        log_prefix = f"[Order: {ref.orderId}]"
        log.debug(f"{log_prefix} Fetching order details (pk={ref.partitionKey}, sk={ref.sortKey}).")

        try:
            item = self.store.get_order_item(ref.partitionKey, ref.sortKey)
        except Exception as e:
            log.error(f"{log_prefix} Order lookup failed, using placeholder order: {e}", exc_info=True)
            return create_placeholder_order(ref.orderId)

        if not item:
            log.warning(f"{log_prefix} Order not found in store, using placeholder order.")
            return create_placeholder_order(ref.orderId)

        try:
            return map_order_item(item)
        except Exception as e:
            log.error(f"{log_prefix} Error mapping order record: {e}", exc_info=True)
            raise OrderMappingError(ref.orderId, e) from e


def create_placeholder_order(order_id: str) -> Order:
    """
    Builds the fixed, visibly synthetic order used when real data is unavailable.

    Args:
        order_id (str): Identifier carried over from the reference.
    """
    log.info(f"[Order: {order_id}] Creating placeholder order.")
    now = datetime.now(timezone.utc)
    return Order(
        orderId=order_id,
        currency=DEFAULT_CURRENCY,
        createdAt=now,
        customer=Customer(
            name="Sample Customer",
            email="customer@example.com",
            phone="+1-555-123-4567",
            address="123 Main Street, Springfield, CA 90210",
        ),
        lines=[
            LineItem(sku="ITEM-001", quantity=2, unitPriceMinor=2500),
            LineItem(sku="ITEM-002", quantity=1, unitPriceMinor=1500),
        ],
        status="CONFIRMED",
        notes="Sample order for testing",
        source="website",
        priority="normal",
        region="us-east",
        totalAmount=Decimal("40.00"),
        orderDate=now.isoformat(),
        processingTime=1500,
    )


def map_order_item(item: Dict[str, Any]) -> Order:
    """
    Maps a raw DynamoDB attribute map into an Order.

    Missing or mistyped values fall back to defaults; see the helpers below.
    """
    customer = Customer(
        name=_get_string(item, "customerName"),
        email=_get_string(item, "customerEmail"),
        phone=_get_string(item, "customerPhone"),
        address=_get_string(item, "shippingAddress"),
    )

    return Order(
        orderId=_get_string(item, "orderId"),
        currency=_get_string(item, "currency") or DEFAULT_CURRENCY,
        createdAt=_parse_timestamp(_get_string(item, "createdAt")),
        customer=customer,
        lines=_extract_lines(item),
        status=_get_string(item, "status"),
        notes=_get_string(item, "notes"),
        source=_get_string(item, "source"),
        priority=_get_string(item, "priority"),
        region=_get_string(item, "region"),
        totalAmount=_get_decimal(item, "totalAmount"),
        orderDate=_get_string(item, "orderDate"),
        processingTime=_get_int(item, "processingTime"),
    )


def to_minor_units(price: Decimal) -> int:
    """Converts a major-unit price to integer minor units, rounding half up."""
    return int((price * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _extract_lines(item: Dict[str, Any]) -> List[LineItem]:
    attribute = item.get("items")
    values = attribute.get("L") if isinstance(attribute, dict) else None
    if not isinstance(values, list):
        log.warning("No items found in order")
        return []

    try:
        return [_map_line(value) for value in values]
    except Exception as e:
        log.error(f"Error extracting order lines: {e}")
        return []


def _map_line(value: Any) -> LineItem:
    fields = value.get("M") if isinstance(value, dict) else None
    if not isinstance(fields, dict):
        raise ValueError("Invalid item structure")

    return LineItem(
        sku=_get_string(fields, "itemId"),
        quantity=_get_int(fields, "quantity"),
        unitPriceMinor=to_minor_units(_get_decimal(fields, "price")),
    )


def _get_string(item: Dict[str, Any], key: str) -> str:
    value = item.get(key)
    if isinstance(value, dict) and isinstance(value.get("S"), str):
        return value["S"]
    return ""


def _get_number(item: Dict[str, Any], key: str) -> Optional[str]:
    value = item.get(key)
    if isinstance(value, dict) and isinstance(value.get("N"), str):
        return value["N"]
    return None


def _get_decimal(item: Dict[str, Any], key: str) -> Decimal:
    raw = _get_number(item, key)
    if raw is not None:
        try:
            number = Decimal(raw)
            if number.is_finite():
                return number
        except InvalidOperation:
            pass
        log.warning(f"Invalid number format for key {key}: {raw}")
    return Decimal("0")


def _get_int(item: Dict[str, Any], key: str) -> int:
    raw = _get_number(item, key)
    if raw is not None:
        try:
            return int(raw)
        except ValueError:
            log.warning(f"Invalid integer format for key {key}: {raw}")
    return 0


def _parse_timestamp(raw: str) -> datetime:
    if not raw:
        return datetime.now(timezone.utc)
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        log.warning(f"Invalid timestamp format: {raw}")
        return datetime.now(timezone.utc)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
