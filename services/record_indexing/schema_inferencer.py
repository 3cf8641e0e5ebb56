"""Index schema inference from the shape of the first record.

The schema is derived once, from the first fetched record only. Columns
that appear in later records but not in the first are not added; documents
are projected onto the schema before upload instead (see project_document).
"""

from typing import Any

from services.record_indexing.record_normalizer import Record, ValueKind, value_kind
from shared.models.schema import (
    KEY_FIELD_DEFAULT,
    TEXT_FIELD,
    VECTOR_FIELD,
    FieldSchema,
    FieldType,
    VectorSearchConfig,
)

KIND_TO_FIELD_TYPE: dict[ValueKind, FieldType] = {
    ValueKind.INT64: FieldType.INT64,
    ValueKind.DOUBLE: FieldType.DOUBLE,
    ValueKind.TIMESTAMP: FieldType.TIMESTAMP,
    ValueKind.BOOLEAN: FieldType.BOOLEAN,
}


def reserved_field_names(key_column_chosen: bool) -> set[str]:
    """Names no source column may claim: the system fields, plus "id" when ids are generated."""
    reserved = {TEXT_FIELD, VECTOR_FIELD}
    if not key_column_chosen:
        reserved.add(KEY_FIELD_DEFAULT)
    return reserved


def field_for_value(name: str, value: Any) -> FieldSchema:
    field_type = KIND_TO_FIELD_TYPE.get(value_kind(value), FieldType.STRING)
    if field_type == FieldType.STRING:
        return FieldSchema(name=name, type=field_type, searchable=True)
    return FieldSchema(name=name, type=field_type, filterable=True, sortable=True, facetable=True)


def infer_schema(
    first_record: Record | None,
    key_field_name: str,
    reserved_names: set[str],
    vector_config: VectorSearchConfig,
) -> list[FieldSchema]:
    """Build the index fields: key, text and vector first, then the record's columns in order.

    Args:
        first_record: The first normalized record, or None when the source was empty.
        key_field_name: Name of the key field (key column, or "id").
        reserved_names: Names skipped case-insensitively besides the key field.
        vector_config: Dimensions and profile of the vector field.

    Returns:
        list[FieldSchema]: N + 3 fields for a record with N non-reserved columns.
    """
    fields = [
        FieldSchema(name=key_field_name, type=FieldType.STRING, key=True, filterable=True),
        FieldSchema(name=TEXT_FIELD, type=FieldType.STRING, searchable=True),
        FieldSchema(
            name=VECTOR_FIELD,
            type=FieldType.VECTOR,
            searchable=True,
            vector_dimensions=vector_config.dimensions,
            vector_profile=vector_config.profile_name,
        ),
    ]
    if not first_record:
        return fields

    skipped = {name.lower() for name in reserved_names} | {key_field_name.lower()}
    for name, value in first_record.items():
        if name.lower() in skipped:
            continue
        fields.append(field_for_value(name, value))
    return fields


def project_document(document: dict[str, Any], schema: list[FieldSchema]) -> tuple[dict[str, Any], list[str]]:
    """Keep only the fields the schema declares.

    Returns:
        tuple[dict, list[str]]: The projected document and the names that were dropped.
    """
    declared = {field.name for field in schema}
    projected = {name: value for name, value in document.items() if name in declared}
    dropped = [name for name in document if name not in declared]
    return projected, dropped
