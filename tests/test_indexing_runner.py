from unittest.mock import AsyncMock

import pytest

from services.record_indexing import indexing_runner
from services.record_indexing.IndexingService import IndexingService
from shared.clients.embed.azure.EmbedClientAzure import EmbedClientAzure
from shared.clients.llm.azure.LLMClientAzure import LLMClientAzure
from shared.clients.search.azure.SearchClientAzure import SearchClientAzure
from shared.clients.source.sql.SourceClientSql import SourceClientSql
from shared.exceptions import ClientRequestError, UploadError
from shared.models.report import IndexingReport


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch, logger):
    monkeypatch.setattr(indexing_runner, "setup_logging", lambda: logger)


@pytest.fixture
def healthy_backends(monkeypatch):
    for client_class in (LLMClientAzure, EmbedClientAzure, SearchClientAzure):
        monkeypatch.setattr(client_class, "do_healthcheck", AsyncMock(return_value=None))


@pytest.mark.asyncio
async def test_main_returns_2_on_missing_configuration(env, monkeypatch):
    monkeypatch.delenv("SEARCH_INDEX")
    assert await indexing_runner.main() == 2


@pytest.mark.asyncio
async def test_main_returns_1_when_a_backend_is_unreachable(env, healthy_backends, monkeypatch):
    failing = AsyncMock(side_effect=ClientRequestError("https://example/openai/models", 401, "unauthorized"))
    monkeypatch.setattr(LLMClientAzure, "do_healthcheck", failing)
    run = AsyncMock()
    monkeypatch.setattr(IndexingService, "do_run", run)

    assert await indexing_runner.main() == 1
    run.assert_not_awaited()


@pytest.mark.asyncio
async def test_main_returns_0_after_successful_run(env, healthy_backends, monkeypatch):
    report = IndexingReport(table_name="Customers", index_name="customers-index", records_fetched=2, documents_indexed=2)
    monkeypatch.setattr(IndexingService, "do_run", AsyncMock(return_value=report))

    assert await indexing_runner.main() == 0


@pytest.mark.asyncio
async def test_main_returns_1_when_the_run_fails(env, healthy_backends, monkeypatch):
    monkeypatch.setattr(
        IndexingService,
        "do_run",
        AsyncMock(side_effect=UploadError("azure", "customers-index", "HTTP 400: bad")),
    )

    assert await indexing_runner.main() == 1


@pytest.mark.asyncio
async def test_main_closes_remaining_clients_when_one_close_fails(env, healthy_backends, monkeypatch):
    report = IndexingReport(table_name="Customers", index_name="customers-index", records_fetched=0, documents_indexed=0)
    monkeypatch.setattr(IndexingService, "do_run", AsyncMock(return_value=report))
    monkeypatch.setattr(SourceClientSql, "close", AsyncMock(side_effect=RuntimeError("engine already disposed")))
    search_close = AsyncMock()
    monkeypatch.setattr(SearchClientAzure, "close", search_close)

    assert await indexing_runner.main() == 0
    search_close.assert_awaited_once()
