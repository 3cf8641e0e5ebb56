import pytest
from pydantic import ValidationError

from shared.clients.search.SearchClientManager import SearchClientManager
from shared.clients.search.azure.SearchClientAzure import SearchClientAzure
from shared.clients.search.qdrant.SearchClientQdrant import SearchClientQdrant
from shared.models.config import IndexerSettings


def test_string_values(helper_config, monkeypatch):
    monkeypatch.setenv("SOME_KEY", "  value  ")
    monkeypatch.setenv("BLANK_KEY", "   ")

    assert helper_config.get_string_val("some_key") == "value"
    assert helper_config.get_string_val("BLANK_KEY", default="fallback") == "fallback"
    assert helper_config.get_optional_string_val("BLANK_KEY") is None
    with pytest.raises(ValueError, match="NOT_SET_KEY"):
        helper_config.get_string_val("NOT_SET_KEY")


def test_number_values(helper_config, monkeypatch):
    monkeypatch.setenv("INT_KEY", "12")
    monkeypatch.setenv("FLOAT_KEY", "2.5")
    monkeypatch.setenv("BAD_KEY", "twelve")

    assert helper_config.get_number_val("INT_KEY") == 12
    assert helper_config.get_number_val("FLOAT_KEY") == 2.5
    assert helper_config.get_number_val("NOT_SET_KEY", default=30) == 30
    with pytest.raises(ValueError, match="not a valid number"):
        helper_config.get_number_val("BAD_KEY")


def test_bool_values(helper_config, monkeypatch):
    monkeypatch.setenv("YES_KEY", "Yes")
    monkeypatch.setenv("NO_KEY", "off")

    assert helper_config.get_bool_val("YES_KEY") is True
    assert helper_config.get_bool_val("NO_KEY") is False
    assert helper_config.get_bool_val("NOT_SET_KEY", default=True) is True


def test_list_values(helper_config, monkeypatch):
    monkeypatch.setenv("LIST_KEY", "[azure, qdrant,]")
    monkeypatch.setenv("BAD_LIST_KEY", "azure,qdrant")

    assert helper_config.get_list_val("LIST_KEY") == ["azure", "qdrant"]
    with pytest.raises(ValueError, match="format"):
        helper_config.get_list_val("BAD_LIST_KEY")


def test_indexer_settings_defaults(helper_config):
    settings = IndexerSettings.from_helper_config(helper_config)

    assert settings.table_name == "Customers"
    assert settings.primary_key_column is None
    assert settings.row_limit == 1000
    assert settings.index_name == "customers-index"
    assert settings.vector_dimensions == 3072
    assert settings.summary_language == "British English"
    assert settings.record_concurrency == 1
    assert settings.upload_batch_size == 1000


def test_indexer_settings_overrides(helper_config, monkeypatch):
    monkeypatch.setenv("SOURCE_PRIMARY_KEY", "CustomerId")
    monkeypatch.setenv("SOURCE_ROW_LIMIT", "50")
    monkeypatch.setenv("EMBED_DIMENSIONS", "1536")
    monkeypatch.setenv("INDEXING_CONCURRENCY", "8")

    settings = IndexerSettings.from_helper_config(helper_config)

    assert settings.primary_key_column == "CustomerId"
    assert settings.row_limit == 50
    assert settings.vector_dimensions == 1536
    assert settings.record_concurrency == 8


def test_indexer_settings_reject_oversized_batches(helper_config, monkeypatch):
    monkeypatch.setenv("SEARCH_UPLOAD_BATCH_SIZE", "5000")
    with pytest.raises(ValidationError):
        IndexerSettings.from_helper_config(helper_config)


def test_indexer_settings_require_table(helper_config, monkeypatch):
    monkeypatch.delenv("SOURCE_TABLE")
    with pytest.raises(ValueError, match="SOURCE_TABLE"):
        IndexerSettings.from_helper_config(helper_config)


def test_search_manager_builds_every_engine(helper_config, monkeypatch):
    monkeypatch.setenv("SEARCH_ENGINES", "[azure,qdrant]")

    clients = SearchClientManager(helper_config).get_clients()

    assert [type(client) for client in clients] == [SearchClientAzure, SearchClientQdrant]


def test_search_manager_requires_an_engine(helper_config, monkeypatch):
    monkeypatch.setenv("SEARCH_ENGINES", "[]")
    with pytest.raises(ValueError, match="No search engines"):
        SearchClientManager(helper_config)
