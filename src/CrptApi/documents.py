# === NAVMAP v1 ===
# {
#   "module": "CrptApi.documents",
#   "purpose": "Immutable document models and their JSON wire form",
#   "sections": [
#     {"id": "description", "name": "Description", "anchor": "class-description", "kind": "class"},
#     {"id": "product", "name": "Product", "anchor": "class-product", "kind": "class"},
#     {"id": "document", "name": "Document", "anchor": "class-document", "kind": "class"},
#     {"id": "serialize-document", "name": "serialize_document", "anchor": "function-serialize-document", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Document models posted to the ``documents/create`` endpoint.

The wire format is a snake_case JSON object with one exception: the import
flag travels as ``importRequest``. Every optional field is emitted, with
``null`` standing in for values the caller never set, and products keep the
order they were given in.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_core import PydanticSerializationError

from CrptApi.errors import DocumentSerializationError

__all__ = ["Description", "Product", "Document", "serialize_document"]


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class Description(_FrozenModel):
    """Participant block nested under ``description``."""

    participant_inn: Optional[str] = None


class Product(_FrozenModel):
    """Single product line of a document."""

    certificate_document: Optional[str] = None
    certificate_document_date: Optional[str] = None
    certificate_document_number: Optional[str] = None
    owner_inn: Optional[str] = None
    producer_inn: Optional[str] = None
    production_date: Optional[str] = None
    tnved_code: Optional[str] = None
    uit_code: Optional[str] = None
    uitu_code: Optional[str] = None


class Document(_FrozenModel):
    """Document payload for the create-document call.

    Fields are read-only once constructed. ``import_request`` is exposed under
    its Python name but serialized as ``importRequest``, which is the name the
    remote API expects.
    """

    description: Optional[Description] = None
    doc_id: Optional[str] = None
    doc_status: Optional[str] = None
    doc_type: Optional[str] = None
    import_request: bool = Field(default=False, alias="importRequest")
    owner_inn: Optional[str] = None
    participant_inn: Optional[str] = None
    producer_inn: Optional[str] = None
    production_date: Optional[str] = None
    production_type: Optional[str] = None
    products: Optional[tuple[Product, ...]] = None
    reg_date: Optional[str] = None
    reg_number: Optional[str] = None

    def to_json(self) -> str:
        """Return the compact JSON body sent to the remote service."""
        return serialize_document(self)


def serialize_document(document: Union[Document, Mapping[str, Any]]) -> str:
    """Encode ``document`` into the request body.

    Plain mappings are validated into a :class:`Document` first, so callers can
    hand over JSON they loaded from disk.

    Raises:
        DocumentSerializationError: If validation or encoding fails.
    """

    if isinstance(document, Document):
        model = document
    elif isinstance(document, Mapping):
        try:
            model = Document.model_validate(dict(document))
        except ValidationError as exc:
            raise DocumentSerializationError(f"Invalid document: {exc}") from exc
    else:
        raise DocumentSerializationError(
            f"Expected a Document or mapping, got {type(document).__name__}"
        )

    try:
        return model.model_dump_json(by_alias=True)
    except PydanticSerializationError as exc:
        raise DocumentSerializationError(f"Failed to encode document: {exc}") from exc
