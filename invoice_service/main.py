"""
main.py — FastAPI Entry Point for the Invoice Service

This module provides the REST API the workflow orchestrator invokes for each
pipeline stage.

Responsibilities:
    • Filter batches of change-event envelopes (preprocessing stage)
    • Generate, convert and store the invoice for one order reference
    • Provide system health information

Run with:
    uvicorn --factory invoice_service.main:create_app
"""

import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Header, HTTPException

from .clients import DocumentConverterClient, DocumentStorageClient, OrderStoreClient
from .config import ServiceConfig, load_config
from .eligibility import parse_policy
from .invoice_renderer import InvoiceRenderer
from .logging_config import get_logger, setup_logging
from .models import GenerateInvoiceResult, OrderReference, PreprocessRequest, PreprocessResult
from .order_resolver import OrderResolver, OrderStore
from .workflow import InvoiceGenerationError, generate_invoice, preprocess_envelopes

log = get_logger(__name__)


def create_app(config: Optional[ServiceConfig] = None, *,
               store: Optional[OrderStore] = None,
               storage: Optional[DocumentStorageClient] = None,
               converter: Optional[DocumentConverterClient] = None,
               renderer: Optional[InvoiceRenderer] = None) -> FastAPI:
    """
    Builds the FastAPI application and its collaborators.

    All components are created once, here. Loading the invoice template is part
    of this step, so a missing template stops the service at startup.

    Args:
        config (ServiceConfig | None): Configuration, read from the environment if omitted.
        store, storage, converter, renderer: Optional pre-built collaborators,
            mainly for tests. Missing ones are built from the configuration.

    Returns:
        FastAPI: The configured application.
    """
    config = config or load_config()
    setup_logging(config.log_level, config.log_file)

    policy = parse_policy(config.reprocess_policy)
    resolver = OrderResolver(store or OrderStoreClient(
        config.table_name, config.aws_region, endpoint_url=config.aws_endpoint_url))
    storage = storage or DocumentStorageClient(
        config.bucket_name, config.aws_region, endpoint_url=config.aws_endpoint_url)
    converter = converter or DocumentConverterClient(config.converter_url)
    renderer = renderer or InvoiceRenderer()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle: the converter session lives as long as the app."""
        yield
        log.info("Invoice service shutting down, closing document converter client.")
        converter.close()

    app = FastAPI(title="Order Invoice Service", lifespan=lifespan)

    @app.post("/v1/preprocess", response_model=PreprocessResult)
    def preprocess(request: PreprocessRequest):
        """
        Filters a batch of raw change-event envelopes.

        Bad envelopes never fail the request; they are skipped and logged.

        Returns:
            PreprocessResult: {"items": [accepted references], "ts": completion time}.
        """
        return preprocess_envelopes(request.records, policy)

    @app.post("/v1/invoices", response_model=GenerateInvoiceResult, status_code=201)
    def create_invoice(
            reference: OrderReference,
            execution_id: Optional[str] = Header(None, alias="X-Execution-Id")
    ):
        """
        Generates the invoice PDF for one accepted order reference.

        Args:
            reference (OrderReference): The reference produced by the preprocessing stage.
            execution_id (str | None): Orchestrator execution ID; a UUID is generated if absent.

        Returns:
            GenerateInvoiceResult: {"pdfKey": temporary object key}.

        Raises:
            HTTPException(500): If the invoice could not be generated or stored.
                The orchestrator decides whether to retry.
        """
        execution_id = execution_id or str(uuid.uuid4())
        try:
            key = generate_invoice(reference, execution_id, resolver, renderer, converter, storage)
        except InvoiceGenerationError as e:
            raise HTTPException(status_code=500, detail=str(e))
        return GenerateInvoiceResult(pdfKey=key)

    @app.get("/health")
    def health_check():
        """
        Simple health check endpoint for monitoring systems and container orchestrators.

        Returns:
            dict: A basic JSON object indicating service availability.
        """
        return {"status": "ok"}

    log.info(f"Invoice service configured (table: {config.table_name}, bucket: {config.bucket_name}, "
             f"policy: {config.reprocess_policy}).")
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("invoice_service.main:create_app", factory=True, host="0.0.0.0", port=8000)
