"""
This module provides communication clients for the external systems used by the invoice service:
- Order Store (DynamoDB)
- Document Storage (S3)
- Document Converter (REST API, HTML to PDF)
Each class encapsulates its protocol logic, error handling, and connection management.
Timeouts are enforced here, by the underlying SDK / HTTP client configuration.
"""

import logging
from typing import Any, Dict, Optional

import boto3
import httpx
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

log = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


def _boto_config(connect_timeout: float, read_timeout: float) -> Config:
    return Config(
        retries={'max_attempts': 3, 'mode': 'standard'},
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
    )


def build_document_key(execution_id: str, order_id: str, ext: str = "pdf") -> str:
    """
    Builds the temporary object key for a generated document.

    Args:
        execution_id (str): Identifier of the orchestrator execution.
        order_id (str): Business identifier of the order.
        ext (str): File extension without the dot.

    Returns:
        str: Key of the form "temp/{execution_id}-{order_id}.{ext}".
    """
    return f"temp/{execution_id}-{order_id}.{ext}"


# --- Order Store Client (DynamoDB) ---
class OrderStoreClient:
    """
    Client for the order record table (DynamoDB).
    Performs point lookups and returns the raw, type-tagged attribute map.
    """
    def __init__(self, table_name: str, region: str, endpoint_url: Optional[str] = None,
                 connect_timeout: float = 5.0, read_timeout: float = 10.0, client=None):
        """
        Initializes the DynamoDB client.

        Args:
            table_name (str): Name of the order table.
            region (str): AWS region of the table.
            endpoint_url (str | None): Optional endpoint override (LocalStack, DynamoDB Local).
            connect_timeout (float): Connection timeout in seconds.
            read_timeout (float): Read timeout in seconds.
            client: Pre-built boto3 DynamoDB client, mainly for tests.
        """
        self.table_name = table_name
        self.dynamodb = client or boto3.client(
            "dynamodb",
            region_name=region,
            endpoint_url=endpoint_url,
            config=_boto_config(connect_timeout, read_timeout),
        )

    def get_order_item(self, partition_key: str, sort_key: str) -> Optional[Dict[str, Any]]:
        """
        Looks up one order record by its composite key.

        Args:
            partition_key (str): Value of the "pk" attribute.
            sort_key (str): Value of the "sk" attribute.

        Returns:
            dict | None: The attribute map ({"field": {"S": ...}, ...}) or None if no record exists.

        Raises:
            botocore.exceptions.ClientError: If DynamoDB rejects the request.
            botocore.exceptions.BotoCoreError: On connectivity or timeout problems.
        """
        try:
            response = self.dynamodb.get_item(
                TableName=self.table_name,
                Key={"pk": {"S": partition_key}, "sk": {"S": sort_key}},
            )
        except (ClientError, BotoCoreError) as e:
            log.error(f"DynamoDB lookup failed for pk={partition_key}, sk={sort_key}: {e}")
            raise
        return response.get("Item")


# --- Document Storage Client (S3) ---
class DocumentStorageClient:
    """
    Client for the document bucket (S3).
    Stores generated documents under keys chosen by the workflow.
    """
    def __init__(self, bucket: str, region: str, endpoint_url: Optional[str] = None,
                 connect_timeout: float = 5.0, read_timeout: float = 30.0, client=None):
        """
        Initializes the S3 client.

        Args:
            bucket (str): Name of the target bucket.
            region (str): AWS region of the bucket.
            endpoint_url (str | None): Optional endpoint override.
            connect_timeout (float): Connection timeout in seconds.
            read_timeout (float): Read timeout in seconds.
            client: Pre-built boto3 S3 client, mainly for tests.
        """
        if not bucket:
            raise ValueError("S3 bucket name is required")
        self.bucket = bucket
        self.s3 = client or boto3.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
            config=_boto_config(connect_timeout, read_timeout),
        )

    def put_document(self, key: str, body: bytes, content_type: str = PDF_CONTENT_TYPE):
        """
        Uploads a document.

        Args:
            key (str): Object key.
            body (bytes): Raw document bytes.
            content_type (str): MIME type stored with the object.

        Raises:
            botocore.exceptions.ClientError: If S3 rejects the upload.
            botocore.exceptions.BotoCoreError: On connectivity or timeout problems.
        """
        try:
            self.s3.put_object(Bucket=self.bucket, Key=key, Body=body, ContentType=content_type)
        except (ClientError, BotoCoreError) as e:
            log.error(f"Upload to s3://{self.bucket}/{key} failed: {e}")
            raise
        log.info(f"Stored {len(body)} bytes at s3://{self.bucket}/{key}")


# --- Document Converter Client (REST) ---
class DocumentConverterClient:
    """
    Client for the HTML-to-PDF converter service (REST API).
    The converter is treated as a pure function: HTML in, document bytes out.
    """
    def __init__(self, base_url: str, client: Optional[httpx.Client] = None):
        """
        Initializes the HTTP client with proper timeout configuration.

        Args:
            base_url (str): Base URL of the converter service.
            client (httpx.Client | None): Pre-built client, mainly for tests.
        """
        timeout_config = httpx.Timeout(5.0, read=30.0)
        self.client = client or httpx.Client(base_url=base_url, timeout=timeout_config)

    def close(self):
        """Closes the HTTP client session."""
        self.client.close()

    def convert_html(self, html: str, order_id: str) -> bytes:
        """
        Converts rendered invoice HTML into a PDF document.

        Args:
            html (str): The rendered invoice HTML.
            order_id (str): Order identifier, used for logging only.

        Returns:
            bytes: The finished document.

        Raises:
            httpx.TimeoutException: If the converter does not respond in time.
            httpx.HTTPStatusError: If the converter returns an error status (4xx or 5xx).
        """
        try:
            response = self.client.post(
                "/v1/convert/html",
                content=html.encode("utf-8"),
                headers={"Content-Type": "text/html; charset=utf-8", "Accept": PDF_CONTENT_TYPE},
            )
            response.raise_for_status()
        except httpx.TimeoutException:
            log.error(f"[Order: {order_id}] Document converter timeout.")
            raise
        except httpx.HTTPStatusError as e:
            log.error(f"[Order: {order_id}] Document converter returned HTTP {e.response.status_code}.")
            raise
        return response.content
