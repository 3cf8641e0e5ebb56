import logging
from typing import Callable

import httpx
import pytest

from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger

BASE_ENV = {
    "SOURCE_ENGINE": "sql",
    "SOURCE_SQL_URL": "sqlite://",
    "SOURCE_TABLE": "Customers",
    "LLM_ENGINE": "azure",
    "LLM_CHAT_MODEL": "gpt-4o",
    "LLM_AZURE_BASE_URL": "https://example-openai.openai.azure.com",
    "LLM_AZURE_API_KEY": "llm-key",
    "LLM_OLLAMA_BASE_URL": "http://ollama.local:11434",
    "EMBED_ENGINE": "azure",
    "EMBED_MODEL": "text-embedding-3-large",
    "EMBED_AZURE_BASE_URL": "https://example-openai.openai.azure.com",
    "EMBED_AZURE_API_KEY": "embed-key",
    "EMBED_OLLAMA_BASE_URL": "http://ollama.local:11434",
    "SEARCH_ENGINES": "[azure]",
    "SEARCH_INDEX": "customers-index",
    "SEARCH_AZURE_BASE_URL": "https://example-search.search.windows.net",
    "SEARCH_AZURE_API_KEY": "search-key",
    "SEARCH_QDRANT_BASE_URL": "http://qdrant.local:6333",
}


@pytest.fixture
def logger() -> ColorLogger:
    return ColorLogger(logging.getLogger("record_indexer.tests"))


@pytest.fixture
def env(monkeypatch) -> dict[str, str]:
    """Minimal valid environment for every client; tests override single keys."""
    for key, value in BASE_ENV.items():
        monkeypatch.setenv(key, value)
    return dict(BASE_ENV)


@pytest.fixture
def helper_config(env, logger) -> HelperConfig:
    return HelperConfig(logger=logger)


@pytest.fixture
def mock_transport() -> Callable:
    """Attach an httpx.MockTransport to a client and record every request it sends."""

    def attach(client, handler: Callable[[httpx.Request], httpx.Response]) -> list[httpx.Request]:
        requests: list[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        client._client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
        return requests

    return attach
