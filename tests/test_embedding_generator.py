from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from services.record_indexing.EmbeddingGenerator import EmbeddingGenerator
from shared.exceptions import EmbeddingError


def make_embed_client(vectors=None, side_effect=None) -> MagicMock:
    embed_client = MagicMock()
    embed_client.get_engine_name.return_value = "azure"
    embed_client.do_embed = AsyncMock(return_value=vectors, side_effect=side_effect)
    return embed_client


@pytest.mark.asyncio
async def test_do_embed_returns_vector_unmodified(helper_config):
    embed_client = make_embed_client([[0.5, -0.25, 1.0]])
    generator = EmbeddingGenerator(helper_config, embed_client, dimensions=3)

    assert await generator.do_embed("Ada is a customer.") == [0.5, -0.25, 1.0]
    embed_client.do_embed.assert_awaited_once_with(["Ada is a customer."])


@pytest.mark.asyncio
async def test_do_embed_raises_on_dimension_mismatch(helper_config):
    generator = EmbeddingGenerator(helper_config, make_embed_client([[0.1, 0.2]]), dimensions=3)

    with pytest.raises(EmbeddingError, match="2 dimensions"):
        await generator.do_embed("text")


@pytest.mark.asyncio
async def test_do_embed_raises_when_provider_fails(helper_config):
    embed_client = make_embed_client(side_effect=httpx.ConnectError("connection refused"))
    generator = EmbeddingGenerator(helper_config, embed_client, dimensions=3)

    with pytest.raises(EmbeddingError) as exc_info:
        await generator.do_embed("text")
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_do_embed_raises_on_empty_response(helper_config):
    generator = EmbeddingGenerator(helper_config, make_embed_client([]), dimensions=3)

    with pytest.raises(EmbeddingError, match="no embedding"):
        await generator.do_embed("text")
