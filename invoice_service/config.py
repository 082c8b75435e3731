"""
config.py — Service Configuration

Collects all environment-driven settings in one immutable object that is
built once at startup and passed explicitly into each component.
"""

from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env(field_name: str, env_name: str) -> AliasChoices:
    # Field name for keyword construction, variable name for the environment
    return AliasChoices(field_name, env_name)


class ServiceConfig(BaseSettings):
    """
    Runtime configuration of the invoice service.

    Attributes:
        table_name (str): DynamoDB table holding the order records (DYNAMODB_TABLE_NAME).
        bucket_name (str): S3 bucket receiving generated documents (BUCKET_NAME).
        reprocess_policy (str): Name of the eligibility policy (REPROCESS_POLICY).
            Kept as raw text so that an unknown value reaches the eligibility
            filter, which treats it as ALWAYS.
        converter_url (str): Base URL of the HTML-to-PDF converter (DOCUMENT_CONVERTER_URL).
        aws_region (str): AWS region for the DynamoDB and S3 clients (AWS_REGION).
        aws_endpoint_url (str | None): Endpoint override, e.g. LocalStack (AWS_ENDPOINT_URL).
        log_level (str): Root log level (LOG_LEVEL).
        log_file (str | None): Log file path (LOG_FILE). Empty disables file logging.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )

    table_name: str = Field("orders", validation_alias=_env("table_name", "DYNAMODB_TABLE_NAME"))
    bucket_name: str = Field("order-invoices", validation_alias=_env("bucket_name", "BUCKET_NAME"))
    reprocess_policy: str = Field("FIRST_TIME_ONLY",
                                  validation_alias=_env("reprocess_policy", "REPROCESS_POLICY"))
    converter_url: str = Field("http://document_converter:8002",
                               validation_alias=_env("converter_url", "DOCUMENT_CONVERTER_URL"))
    aws_region: str = Field("us-east-1", validation_alias=_env("aws_region", "AWS_REGION"))
    aws_endpoint_url: Optional[str] = Field(None, validation_alias=_env("aws_endpoint_url", "AWS_ENDPOINT_URL"))
    log_level: str = Field("INFO", validation_alias=_env("log_level", "LOG_LEVEL"))
    log_file: Optional[str] = Field("invoice_processing.log", validation_alias=_env("log_file", "LOG_FILE"))

    @field_validator("aws_endpoint_url", "log_file", mode="before")
    @classmethod
    def _empty_as_unset(cls, value):
        return value or None


def load_config() -> ServiceConfig:
    """
    Builds the service configuration from the environment (and a local .env file).

    Returns:
        ServiceConfig: The populated configuration. Unset variables keep the
        defaults declared on the model.
    """
    return ServiceConfig()
