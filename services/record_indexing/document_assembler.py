"""Folding a normalized record, its key, summary and vector into one index document."""

import uuid
from typing import Any, Sequence

from services.record_indexing.record_normalizer import Record
from shared.models.schema import TEXT_FIELD, VECTOR_FIELD

Document = dict[str, Any]


def generate_document_key() -> str:
    return str(uuid.uuid4())


def resolve_document_key(record: Record, key_field: str, key_column_chosen: bool) -> str:
    """Return the key for a record's document.

    With a key column chosen and a non-blank value in the record, the key is
    that value as text. Otherwise a new UUID4 is generated; call this exactly
    once per record.
    """
    if key_column_chosen:
        value = record.get(key_field)
        if value is not None and str(value).strip():
            return str(value)
    return generate_document_key()


def assemble_document(record: Record, key: str, key_field: str, summary: str, vector: Sequence[float]) -> Document:
    """Copy the record, then set key, summary and vector.

    The three system fields are written after the copy, so same-named source
    columns are always overwritten.
    """
    document: Document = dict(record)
    document[key_field] = key
    document[TEXT_FIELD] = summary
    document[VECTOR_FIELD] = list(vector)
    return document
