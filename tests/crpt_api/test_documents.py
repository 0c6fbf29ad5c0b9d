"""Document model and wire-format tests."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from CrptApi.documents import Description, Document, Product, serialize_document
from CrptApi.errors import DocumentSerializationError

EXPECTED_KEYS = [
    "description",
    "doc_id",
    "doc_status",
    "doc_type",
    "importRequest",
    "owner_inn",
    "participant_inn",
    "producer_inn",
    "production_date",
    "production_type",
    "products",
    "reg_date",
    "reg_number",
]

PRODUCT_KEYS = [
    "certificate_document",
    "certificate_document_date",
    "certificate_document_number",
    "owner_inn",
    "producer_inn",
    "production_date",
    "tnved_code",
    "uit_code",
    "uitu_code",
]


def test_import_request_keeps_camel_case_and_products_snake_case() -> None:
    doc = Document(import_request=True, products=[Product(tnved_code="1234")])

    body = serialize_document(doc)

    assert '"importRequest":true' in body
    assert '"tnved_code":"1234"' in body
    assert "import_request" not in body


def test_empty_document_emits_every_field_with_defaults() -> None:
    payload = json.loads(Document().to_json())

    assert list(payload) == EXPECTED_KEYS
    assert payload["importRequest"] is False
    assert all(payload[key] is None for key in EXPECTED_KEYS if key != "importRequest")


def test_description_and_products_are_nested_objects() -> None:
    doc = Document(
        description=Description(participant_inn="7700000000"),
        products=[Product(uit_code="A"), Product(uit_code="B"), Product(uit_code="C")],
    )

    payload = json.loads(doc.to_json())

    assert payload["description"] == {"participant_inn": "7700000000"}
    assert [p["uit_code"] for p in payload["products"]] == ["A", "B", "C"]
    assert list(payload["products"][0]) == PRODUCT_KEYS
    assert payload["products"][0]["tnved_code"] is None


def test_caller_values_are_never_dropped() -> None:
    doc = Document(
        doc_id="doc-1",
        doc_status="DRAFT",
        doc_type="LP_INTRODUCE_GOODS",
        owner_inn="1",
        participant_inn="2",
        producer_inn="3",
        production_date="2020-01-23",
        production_type="OWN_PRODUCTION",
        reg_date="2020-01-23",
        reg_number="42",
    )

    payload = json.loads(doc.to_json())

    assert payload["doc_id"] == "doc-1"
    assert payload["production_date"] == "2020-01-23"
    assert payload["reg_number"] == "42"


def test_document_is_immutable() -> None:
    doc = Document(doc_id="a")
    with pytest.raises(ValidationError):
        doc.doc_id = "b"  # type: ignore[misc]


def test_mapping_input_accepts_wire_names() -> None:
    body = serialize_document(
        {"doc_id": "x", "importRequest": True, "products": [{"uitu_code": "U1"}]}
    )
    payload = json.loads(body)
    assert payload["importRequest"] is True
    assert payload["products"][0]["uitu_code"] == "U1"


def test_mapping_with_unknown_field_is_a_serialization_error() -> None:
    with pytest.raises(DocumentSerializationError):
        serialize_document({"doc_id": "x", "unexpected": 1})


def test_unsupported_input_type_is_a_serialization_error() -> None:
    with pytest.raises(DocumentSerializationError):
        serialize_document(["not", "a", "document"])  # type: ignore[arg-type]


def test_round_trip_from_wire_json() -> None:
    doc = Document(
        description=Description(participant_inn="p"),
        import_request=True,
        products=[Product(certificate_document="cert", owner_inn="o")],
    )
    assert Document.model_validate_json(doc.to_json()) == doc
