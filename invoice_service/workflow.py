"""
workflow.py — Core Orchestration Logic for Invoice Generation

This module contains the two stages the external orchestrator invokes.

Workflow Overview:
1. Preprocessing (batch): parse every change-event envelope and keep the
   references that the configured reprocess policy accepts.
2. Invoice generation (single order): resolve the order, render the invoice
   HTML, convert it into a PDF and store it under a temporary key.

Scheduling, retries and dead-lettering belong to the orchestrator; this module
only reports failures.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Union

from .clients import PDF_CONTENT_TYPE, DocumentConverterClient, DocumentStorageClient, build_document_key
from .eligibility import is_eligible
from .envelope_parser import parse_envelope
from .invoice_renderer import InvoiceRenderer
from .models import OrderReference, PreprocessResult, QueueRecord, ReprocessPolicy
from .order_resolver import OrderResolver

log = logging.getLogger(__name__)


class InvoiceGenerationError(Exception):
    """Raised when the invoice for a single order could not be produced or stored."""

    def __init__(self, order_id: str, message: str):
        super().__init__(f"Invoice generation failed for order {order_id}: {message}")
        self.order_id = order_id


def preprocess_envelopes(records: Iterable[QueueRecord],
                         policy: Union[ReprocessPolicy, str]) -> PreprocessResult:
    """
    Filters a batch of raw envelopes down to the eligible order references.

    A failure in one record never aborts the batch: unparsable envelopes are
    skipped and unexpected exceptions are logged and counted as not accepted.

    Args:
        records (Iterable[QueueRecord]): Raw envelopes in delivery order.
        policy (ReprocessPolicy | str): Configured reprocess policy.

    Returns:
        PreprocessResult: Accepted references (input order) and a completion timestamp.
    """
    records = list(records)
    log.info(f"Processing {len(records)} queue messages (policy: {policy}).")

    accepted: List[OrderReference] = []
    skipped = 0

    for record in records:
        try:
            reference = parse_envelope(record.body)
            if reference is None:
                skipped += 1
                continue
            if is_eligible(reference, policy):
                accepted.append(reference)
                log.info(f"[Order: {reference.orderId}] Added eligible order for processing.")
        except Exception as e:
            log.error(f"Failed to process queue message {record.messageId}: {e}", exc_info=True)

    log.info(f"Preprocessed {len(accepted)} eligible items out of {len(records)} total messages "
             f"({skipped} unparsable).")
    return PreprocessResult(items=accepted, ts=datetime.now(timezone.utc))


def generate_invoice(reference: OrderReference, execution_id: str,
                     resolver: OrderResolver, renderer: InvoiceRenderer,
                     converter: DocumentConverterClient, storage: DocumentStorageClient) -> str:
    """
    Executes the invoice generation for a single accepted order reference.

    Steps:
        1. Resolve the order (placeholder order if the store is unavailable).
        2. Render the invoice HTML.
        3. Convert the HTML into a PDF via the converter service.
        4. Store the PDF under temp/{execution_id}-{order_id}.pdf.

    Args:
        reference (OrderReference): The accepted reference.
        execution_id (str): Orchestrator execution identifier, part of the key.
        resolver, renderer, converter, storage: The stage collaborators.

    Returns:
        str: The object key of the stored document.

    Raises:
        InvoiceGenerationError: If any step fails. The original exception is chained.
    """
    order_id = reference.orderId
    log_prefix = f"[Order: {order_id}]"
    log.info(f"{log_prefix} Generating invoice (execution: {execution_id}).")

    try:
        order = resolver.resolve(reference)
        html = renderer.render(order)
        log.debug(f"{log_prefix} Rendered {len(html)} characters of invoice HTML.")

        document = converter.convert_html(html, order_id)

        key = build_document_key(execution_id, order_id)
        storage.put_document(key, document, PDF_CONTENT_TYPE)
    except Exception as e:
        log.error(f"{log_prefix} Failed to generate invoice: {e}", exc_info=True)
        raise InvoiceGenerationError(order_id, str(e)) from e

    log.info(f"{log_prefix} Invoice generated successfully, temporary key: {key}")
    return key
