"""
models.py — Data Models for Invoice Generation

This module defines the data structures that flow through the invoice pipeline.
It uses Pydantic models so that payloads exchanged with the orchestrator are
validated, and every model is frozen: a stage never mutates what it receives.

Models:
    - ReprocessPolicy: Named rule deciding whether an order is (re)processed.
    - OrderReference: Identifies one order record in the order store.
    - Customer, LineItem, Order: The resolved order aggregate used for rendering.
    - QueueRecord, PreprocessRequest, PreprocessResult: Batch preprocessing I/O.
    - GenerateInvoiceResult: Output of the single-order invoice stage.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReprocessPolicy(str, Enum):
    """
    Eligibility policies supplied as configuration at startup.

    ALWAYS: every reference is processed.
    FIRST_TIME_ONLY: only references without a previously generated document.
    URL_CHANGED: meant to reprocess when the document key changed; currently
        behaves like ALWAYS because no previous key is tracked.
    """
    ALWAYS = "ALWAYS"
    FIRST_TIME_ONLY = "FIRST_TIME_ONLY"
    URL_CHANGED = "URL_CHANGED"


class OrderReference(BaseModel):
    """
    Identifies a specific order record to process.

    Attributes use the wire names of the orchestrator payload as aliases
    (pk, sk, orderId, oldPdfKey).

    Attributes:
        partitionKey (str): Partition key of the order record.
        sortKey (str): Sort key of the order record.
        orderId (str): Business identifier of the order.
        priorDocumentKey (str | None): Object key of a previously generated
            document, present if the order was already processed.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    partitionKey: str = Field(..., alias="pk", min_length=1)
    sortKey: str = Field(..., alias="sk", min_length=1)
    orderId: str = Field(..., min_length=1)
    priorDocumentKey: Optional[str] = Field(None, alias="oldPdfKey")


class Customer(BaseModel):
    """
    Billing and shipping details of the ordering customer.

    Attributes:
        name (str): Display name.
        email (str): Contact email.
        phone (str | None): Optional phone number.
        address (str | None): Optional shipping address, comma-delimited lines.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None


class LineItem(BaseModel):
    """
    A single product line of an order.

    Attributes:
        sku (str): Item identifier.
        quantity (int): Ordered quantity. Zero or negative values are passed
            through unchanged.
        unitPriceMinor (int): Unit price in currency minor units (e.g. cents).
    """
    model_config = ConfigDict(frozen=True)

    sku: str
    quantity: int
    unitPriceMinor: int = Field(..., ge=0)


class Order(BaseModel):
    """
    Fully resolved order record, the input of the invoice renderer.

    Optional text fields render as empty or as a display default when absent.
    totalAmount and processingTime are informational only; the renderer
    computes its own totals from the lines.
    """
    model_config = ConfigDict(frozen=True)

    orderId: str
    currency: str = "USD"
    createdAt: datetime
    customer: Customer
    lines: List[LineItem] = Field(default_factory=list)
    status: Optional[str] = None
    notes: Optional[str] = None
    source: Optional[str] = None
    priority: Optional[str] = None
    region: Optional[str] = None
    totalAmount: Optional[Decimal] = None
    orderDate: Optional[str] = None
    processingTime: Optional[int] = None


class QueueRecord(BaseModel):
    """
    One raw change-event envelope as delivered by the queue.

    Attributes:
        messageId (str | None): Queue message identifier, used for diagnostics.
        body (str): The raw envelope text (expected to be JSON).
    """
    messageId: Optional[str] = None
    body: str


class PreprocessRequest(BaseModel):
    """Batch of raw envelopes submitted by the orchestrator."""
    records: List[QueueRecord] = Field(default_factory=list)


class PreprocessResult(BaseModel):
    """
    Output of the preprocessing stage.

    Attributes:
        items (List[OrderReference]): Accepted references in input order.
        ts (datetime): Completion timestamp (UTC).
    """
    model_config = ConfigDict(frozen=True)

    items: List[OrderReference]
    ts: datetime


class GenerateInvoiceResult(BaseModel):
    """Object key under which the generated document was stored."""
    pdfKey: str
