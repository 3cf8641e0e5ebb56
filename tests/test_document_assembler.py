import uuid

from services.record_indexing.document_assembler import assemble_document, resolve_document_key
from shared.models.schema import TEXT_FIELD, VECTOR_FIELD


def test_resolve_document_key_uses_key_column_value():
    record = {"CustomerId": "17", "Name": "Ada"}
    assert resolve_document_key(record, "CustomerId", key_column_chosen=True) == "17"
    assert resolve_document_key(record, "CustomerId", key_column_chosen=True) == "17"


def test_resolve_document_key_generates_uuid_without_key_column():
    record = {"Name": "Ada"}

    first = resolve_document_key(record, "id", key_column_chosen=False)
    second = resolve_document_key(record, "id", key_column_chosen=False)

    assert first != second
    assert uuid.UUID(first).version == 4


def test_resolve_document_key_generates_uuid_for_blank_key():
    for value in (None, "", "   "):
        key = resolve_document_key({"CustomerId": value}, "CustomerId", key_column_chosen=True)
        assert uuid.UUID(key).version == 4


def test_assemble_document_sets_system_fields():
    record = {"CustomerId": "17", "Name": "Ada"}

    document = assemble_document(record, "17", "CustomerId", "Ada is a customer.", (0.1, 0.2))

    assert document == {
        "CustomerId": "17",
        "Name": "Ada",
        TEXT_FIELD: "Ada is a customer.",
        VECTOR_FIELD: [0.1, 0.2],
    }
    assert record == {"CustomerId": "17", "Name": "Ada"}


def test_assemble_document_overwrites_same_named_columns():
    record = {"id": "source-id", TEXT_FIELD: "column text", VECTOR_FIELD: "column vector"}

    document = assemble_document(record, "generated", "id", "summary", [1.0])

    assert document["id"] == "generated"
    assert document[TEXT_FIELD] == "summary"
    assert document[VECTOR_FIELD] == [1.0]
