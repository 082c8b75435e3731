"""
envelope_parser.py — Extraction of Order References from Change-Event Envelopes

The order table publishes its changes as DynamoDB stream records. Every field
of the record's "NewImage" is wrapped in a type tag, e.g. {"S": "ORDER#42"} for
strings or {"M": {...}} for nested maps.

Parsing never raises: a malformed envelope is reported as None plus a log
record, so that a batch keeps going after a bad entry.
"""

import json
import logging
from typing import Any, Optional

from .models import OrderReference

log = logging.getLogger(__name__)


def parse_envelope(raw: str) -> Optional[OrderReference]:
    """
    Extracts the order reference from a raw change-event envelope.

    Args:
        raw (str): JSON text shaped like {"dynamodb": {"NewImage": {...}}}.

    Returns:
        OrderReference | None: The reference, or None if the payload is not
        JSON, has no NewImage, or lacks one of pk, sk and orderId.
    """
    try:
        root = json.loads(raw)
    except (TypeError, ValueError) as e:
        log.error(f"Envelope is not valid JSON: {e}")
        return None
    except RecursionError:
        log.error("Envelope is nested too deeply to decode")
        return None

    if not isinstance(root, dict):
        log.warning("Envelope is not a JSON object")
        return None

    record = root.get("dynamodb")
    if not isinstance(record, dict):
        log.warning("No DynamoDB data found in envelope")
        return None

    new_image = record.get("NewImage")
    if not isinstance(new_image, dict):
        log.warning("No NewImage found in DynamoDB record")
        return None

    partition_key = _string_attribute(new_image, "pk")
    sort_key = _string_attribute(new_image, "sk")
    order_id = _string_attribute(new_image, "orderId")

    if not (partition_key and sort_key and order_id):
        log.warning(
            f"Missing required fields: pk={partition_key!r}, sk={sort_key!r}, orderId={order_id!r}"
        )
        return None

    return OrderReference(
        partitionKey=partition_key,
        sortKey=sort_key,
        orderId=order_id,
        priorDocumentKey=_nested_string_attribute(new_image, "pdf", "s3Key"),
    )


def _string_attribute(image: dict, name: str) -> Optional[str]:
    value = _tagged_value(image.get(name), "S")
    return value if isinstance(value, str) else None


def _nested_string_attribute(image: dict, parent: str, child: str) -> Optional[str]:
    # {"pdf": {"M": {"s3Key": {"S": "..."}}}}
    nested = _tagged_value(image.get(parent), "M")
    if not isinstance(nested, dict):
        return None
    return _string_attribute(nested, child)


def _tagged_value(attribute: Any, tag: str) -> Any:
    if not isinstance(attribute, dict):
        return None
    return attribute.get(tag)
