"""
seed_test_orders.py — Test Data Generator for the Order Table (DynamoDB)

This script inserts randomly generated orders into the order table so that the
invoice pipeline can be exercised end to end against LocalStack or a real
table. Every insert produces a change event in the table's stream.

Record layout (one main record per order):
    pk = "ORDER#{orderId}", sk = "STATE#v1", customer fields, items (list of
    maps with itemId / productName / quantity / price in major units), totals,
    status and metadata fields.

Usage:
    python -m mock_services.seed_test_orders --count 10
"""

import argparse
import logging
import os
import random
import string
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import boto3
from boto3.dynamodb.types import TypeSerializer

logging.basicConfig(level=logging.INFO)
log = logging.getLogger(__name__)

TABLE_NAME = os.environ.get("DYNAMODB_TABLE_NAME", "orders")
AWS_REGION = os.environ.get("AWS_REGION", "us-east-1")
AWS_ENDPOINT_URL = os.environ.get("AWS_ENDPOINT_URL")

FIRST_NAMES = ["John", "Jane", "Michael", "Sarah", "David", "Emma", "Robert", "Lisa", "James", "Maria"]
LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis", "Lee", "Clark"]
PRODUCT_ADJECTIVES = ["Premium", "Deluxe", "Smart", "Wireless", "Portable", "Compact"]
PRODUCT_NAMES = ["Headphones", "Notebook", "Coffee Mug", "Backpack", "Desk Lamp", "Keyboard", "Charger"]
EMAIL_DOMAINS = ["gmail.com", "outlook.com", "company.com", "mail.org"]
STREET_NAMES = ["Main Street", "Oak Avenue", "Park Road", "Elm Street", "Broadway"]
CITIES = ["Springfield", "Franklin", "Madison", "Riverside", "Salem"]
STATES = ["CA", "NY", "TX", "WA", "IL"]
ORDER_STATUSES = ["PENDING", "PROCESSING", "CONFIRMED", "SHIPPED", "DELIVERED"]
SOURCES = ["website", "mobile_app", "phone", "store", "api"]
PRIORITIES = ["low", "normal", "high", "urgent"]
REGIONS = ["us-east", "us-west", "eu-central", "ap-southeast"]
NOTES = ["Leave at front door", "Gift wrap please", "Call before delivery", "VIP customer"]

serializer = TypeSerializer()


def random_token(length: int) -> str:
    return "".join(random.choices(string.ascii_uppercase + string.digits, k=length))


def generate_items() -> list:
    """Generates 1-8 line items with prices in major currency units."""
    items = []
    for _ in range(random.randint(1, 8)):
        cents = random.randint(299, 49999)
        items.append({
            "itemId": f"{random.choice(['ITEM', 'SKU', 'PROD'])}-{random_token(random.randint(6, 10))}",
            "productName": f"{random.choice(PRODUCT_ADJECTIVES)} {random.choice(PRODUCT_NAMES)}",
            "quantity": random.randint(1, 5),
            "price": Decimal(cents) / 100,
        })
    return items


def generate_order() -> dict:
    """
    Generates one complete order record as a plain Python mapping.

    Optional fields (phone, address, notes) are left out at random, like in
    production data.
    """
    now = datetime.now(timezone.utc)
    order_id = f"ORD-{int(now.timestamp() * 1000)}-{random_token(4)}"
    first, last = random.choice(FIRST_NAMES), random.choice(LAST_NAMES)
    items = generate_items()
    total = sum((item["price"] * item["quantity"] for item in items), Decimal("0"))

    order = {
        "pk": f"ORDER#{order_id}",
        "sk": "STATE#v1",
        "orderId": order_id,
        "customerName": f"{first} {last}",
        "customerEmail": f"{first.lower()}.{last.lower()}@{random.choice(EMAIL_DOMAINS)}",
        "totalAmount": total,
        "status": random.choice(ORDER_STATUSES),
        "orderDate": (now - timedelta(days=random.randint(0, 30))).date().isoformat(),
        "createdAt": now.isoformat().replace("+00:00", "Z"),
        "updatedAt": now.isoformat().replace("+00:00", "Z"),
        "items": items,
        "processingTime": random.randint(100, 5000),
        "source": random.choice(SOURCES),
        "priority": random.choice(PRIORITIES),
        "region": random.choice(REGIONS),
    }
    if random.random() < 0.8:
        order["customerPhone"] = f"+1-555-{random.randint(100, 999)}-{random.randint(1000, 9999)}"
    if random.random() < 0.9:
        order["shippingAddress"] = (
            f"{random.randint(1, 9999)} {random.choice(STREET_NAMES)}, "
            f"{random.choice(CITIES)}, {random.choice(STATES)} {random.randint(10000, 99999)}"
        )
    if random.random() < 0.4:
        order["notes"] = random.choice(NOTES)
    return order


def to_attribute_map(record: dict) -> dict:
    """Serializes a plain mapping into DynamoDB's type-tagged attribute format."""
    return {key: serializer.serialize(value) for key, value in record.items()}


def seed_orders(client, table_name: str, count: int) -> int:
    """
    Inserts `count` random orders.

    Returns:
        int: Number of orders inserted successfully.
    """
    inserted = 0
    for _ in range(count):
        order = generate_order()
        try:
            client.put_item(TableName=table_name, Item=to_attribute_map(order))
        except Exception as e:
            log.error(f"Failed to insert order {order['orderId']}: {e}")
            continue
        inserted += 1
        log.info(f"Inserted order {order['orderId']} - {order['customerName']} (${order['totalAmount']:.2f})")
    return inserted


def main():
    parser = argparse.ArgumentParser(description="Insert random test orders into the order table.")
    parser.add_argument("--count", type=int, default=5, help="Number of orders to insert")
    parser.add_argument("--table", default=TABLE_NAME, help="Target DynamoDB table")
    args = parser.parse_args()

    client = boto3.client("dynamodb", region_name=AWS_REGION, endpoint_url=AWS_ENDPOINT_URL)
    inserted = seed_orders(client, args.table, args.count)
    log.info(f"Inserted {inserted} of {args.count} orders into {args.table}.")


if __name__ == "__main__":
    main()
