import json

import pytest

from invoice_service.envelope_parser import parse_envelope


def test_parse_valid_envelope(make_envelope):
    ref = parse_envelope(make_envelope())

    assert ref is not None
    assert ref.partitionKey == "ORDER#ORD-123"
    assert ref.sortKey == "STATE#v1"
    assert ref.orderId == "ORD-123"
    assert ref.priorDocumentKey is None


def test_parse_extracts_prior_document_key(make_envelope):
    ref = parse_envelope(make_envelope(pdf_key="invoices/ORD-123.pdf"))

    assert ref.priorDocumentKey == "invoices/ORD-123.pdf"


@pytest.mark.parametrize("pdf_attribute", [
    {"S": "not-a-map"},
    {"M": {}},
    {"M": {"s3Key": {"N": "12"}}},
    "garbage",
])
def test_malformed_prior_document_key_does_not_fail_parse(make_envelope, pdf_attribute):
    ref = parse_envelope(make_envelope(pdf=pdf_attribute))

    assert ref is not None
    assert ref.priorDocumentKey is None


@pytest.mark.parametrize("missing", ["pk", "sk", "order_id"])
def test_missing_required_field_returns_none(make_envelope, missing):
    assert parse_envelope(make_envelope(**{missing: None})) is None


@pytest.mark.parametrize("empty", ["pk", "sk", "order_id"])
def test_empty_required_field_returns_none(make_envelope, empty):
    assert parse_envelope(make_envelope(**{empty: ""})) is None


def test_non_string_required_field_returns_none():
    raw = json.dumps({"dynamodb": {"NewImage": {
        "pk": {"S": "ORDER#1"}, "sk": {"S": "STATE#v1"}, "orderId": {"N": "1"},
    }}})

    assert parse_envelope(raw) is None


@pytest.mark.parametrize("raw", [
    "not json at all",
    "",
    "[1, 2, 3]",
    json.dumps({"eventName": "INSERT"}),
    json.dumps({"dynamodb": {"Keys": {}}}),
    json.dumps({"dynamodb": {"NewImage": "oops"}}),
])
def test_unusable_payload_returns_none(raw):
    assert parse_envelope(raw) is None


def test_parse_failure_is_logged(caplog):
    with caplog.at_level("WARNING"):
        parse_envelope(json.dumps({"dynamodb": {}}))

    assert "No NewImage" in caplog.text


def test_deeply_nested_payload_returns_none():
    raw = '{"dynamodb": ' + "[" * 200000 + "]" * 200000 + "}"

    assert parse_envelope(raw) is None
