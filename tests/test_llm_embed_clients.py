import json

import httpx
import pytest

from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.embed.azure.EmbedClientAzure import EmbedClientAzure
from shared.clients.embed.ollama.EmbedClientOllama import EmbedClientOllama
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.clients.llm.azure.LLMClientAzure import LLMClientAzure
from shared.clients.llm.ollama.LLMClientOllama import LLMClientOllama
from shared.exceptions import ClientRequestError


##########################################
################## LLM ###################
##########################################

@pytest.mark.asyncio
async def test_azure_chat_request_and_response(helper_config, mock_transport):
    client = LLMClientAzure(helper_config=helper_config)
    requests = mock_transport(
        client,
        lambda request: httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": "A summary."}}]}),
    )

    reply = await client.do_complete("system text", "user text")

    assert reply == "A summary."
    request = requests[0]
    assert request.url.path == "/openai/deployments/gpt-4o/chat/completions"
    assert request.url.params["api-version"] == "2024-10-21"
    assert request.headers["api-key"] == "llm-key"
    assert json.loads(request.content) == {
        "messages": [
            {"role": "system", "content": "system text"},
            {"role": "user", "content": "user text"},
        ]
    }


def test_azure_chat_response_without_content_raises(helper_config):
    client = LLMClientAzure(helper_config=helper_config)

    with pytest.raises(ValueError, match="content_filter"):
        client.extract_chat_response({"choices": [{"message": {}, "finish_reason": "content_filter"}]})
    with pytest.raises(ValueError):
        client.extract_chat_response({"choices": []})


@pytest.mark.asyncio
async def test_ollama_chat_payload(helper_config, mock_transport):
    client = LLMClientOllama(helper_config=helper_config)
    requests = mock_transport(client, lambda request: httpx.Response(200, json={"message": {"content": "Hi"}}))

    assert await client.do_complete("system", "user") == "Hi"
    body = json.loads(requests[0].content)
    assert requests[0].url.path == "/api/chat"
    assert body["model"] == "gpt-4o"
    assert body["stream"] is False
    assert "Authorization" not in requests[0].headers


@pytest.mark.asyncio
async def test_chat_error_status_raises(helper_config, mock_transport):
    client = LLMClientAzure(helper_config=helper_config)
    mock_transport(client, lambda request: httpx.Response(429, text="Too many requests"))

    with pytest.raises(ClientRequestError) as exc_info:
        await client.do_complete("system", "user")
    assert exc_info.value.status_code == 429


@pytest.mark.asyncio
async def test_request_before_boot_raises(helper_config):
    client = LLMClientAzure(helper_config=helper_config)

    with pytest.raises(RuntimeError, match="boot"):
        await client.do_complete("system", "user")


def test_llm_manager_selects_engine(helper_config, monkeypatch):
    assert isinstance(LLMClientManager(helper_config).get_client(), LLMClientAzure)

    monkeypatch.setenv("LLM_ENGINE", "Ollama")
    assert isinstance(LLMClientManager(helper_config).get_client(), LLMClientOllama)


def test_llm_manager_rejects_unknown_engine(helper_config, monkeypatch):
    monkeypatch.setenv("LLM_ENGINE", "unknown")
    with pytest.raises(ValueError, match="Unsupported LLM engine"):
        LLMClientManager(helper_config)


def test_azure_llm_requires_api_key(helper_config, monkeypatch):
    monkeypatch.delenv("LLM_AZURE_API_KEY")
    with pytest.raises(ValueError, match="LLM_AZURE_API_KEY"):
        LLMClientAzure(helper_config=helper_config)


##########################################
################# EMBED ##################
##########################################

@pytest.mark.asyncio
async def test_azure_embeddings_are_ordered_by_index(helper_config, mock_transport):
    client = EmbedClientAzure(helper_config=helper_config)
    body = {"data": [{"index": 1, "embedding": [2.0]}, {"index": 0, "embedding": [1.0]}]}
    requests = mock_transport(client, lambda request: httpx.Response(200, json=body))

    vectors = await client.do_embed(["first", "second"])

    assert vectors == [[1.0], [2.0]]
    assert requests[0].url.path == "/openai/deployments/text-embedding-3-large/embeddings"
    assert json.loads(requests[0].content) == {"input": ["first", "second"]}


@pytest.mark.asyncio
async def test_ollama_embed_single_text(helper_config, mock_transport):
    client = EmbedClientOllama(helper_config=helper_config)
    requests = mock_transport(client, lambda request: httpx.Response(200, json={"embeddings": [[0.5, 0.5]]}))

    assert await client.do_embed("only text") == [[0.5, 0.5]]
    assert json.loads(requests[0].content) == {"model": "text-embedding-3-large", "input": ["only text"]}


@pytest.mark.asyncio
async def test_embed_count_mismatch_raises(helper_config, mock_transport):
    client = EmbedClientOllama(helper_config=helper_config)
    mock_transport(client, lambda request: httpx.Response(200, json={"embeddings": [[0.5]]}))

    with pytest.raises(ValueError, match="Expected 2 embeddings"):
        await client.do_embed(["a", "b"])


def test_embed_manager_selects_engine(helper_config, monkeypatch):
    monkeypatch.setenv("EMBED_ENGINE", "ollama")
    assert isinstance(EmbedClientManager(helper_config).get_client(), EmbedClientOllama)


@pytest.mark.asyncio
async def test_ollama_healthcheck_asks_for_configured_models(helper_config, mock_transport):
    show = {"model_info": {"general.architecture": "nomic-bert", "nomic-bert.embedding_length": 768}}
    llm_client = LLMClientOllama(helper_config=helper_config)
    embed_client = EmbedClientOllama(helper_config=helper_config)
    llm_requests = mock_transport(llm_client, lambda request: httpx.Response(200, json=show))
    embed_requests = mock_transport(embed_client, lambda request: httpx.Response(200, json=show))

    await llm_client.do_healthcheck()
    await embed_client.do_healthcheck()

    assert llm_requests[0].url.path == "/api/show"
    assert json.loads(llm_requests[0].content) == {"model": "gpt-4o"}
    assert json.loads(embed_requests[0].content) == {"model": "text-embedding-3-large"}
    assert embed_client.extract_vector_size_from_model_info(show) == 768


@pytest.mark.asyncio
async def test_ollama_healthcheck_fails_for_missing_model(helper_config, mock_transport):
    client = EmbedClientOllama(helper_config=helper_config)
    mock_transport(client, lambda request: httpx.Response(404, json={"error": "model not found"}))

    with pytest.raises(ClientRequestError) as exc_info:
        await client.do_healthcheck()
    assert exc_info.value.status_code == 404
