from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.exceptions import EmbeddingError
from shared.helper.HelperConfig import HelperConfig


class EmbeddingGenerator:
    """Embeds one text per request and checks the vector against the index dimensionality.

    There is no fallback vector: a document without a real embedding cannot
    satisfy the vector field, so any failure aborts the run.
    """

    def __init__(self, helper_config: HelperConfig, embed_client: EmbedClientInterface, dimensions: int) -> None:
        self.logging = helper_config.get_logger()
        self._embed_client = embed_client
        self._dimensions = dimensions

    async def do_embed(self, text: str) -> list[float]:
        """Return the provider's vector for `text`, unmodified.

        Raises:
            EmbeddingError: If the provider fails or the vector length differs from the configured dimensions.
        """
        try:
            vectors = await self._embed_client.do_embed([text])
        except Exception as e:
            self.logging.error("Embedding request to '%s' failed: %s", self._embed_client.get_engine_name(), e)
            raise EmbeddingError(f"Embedding provider '{self._embed_client.get_engine_name()}' failed: {e}") from e

        if not vectors:
            raise EmbeddingError(f"Embedding provider '{self._embed_client.get_engine_name()}' returned no embedding.")
        vector = vectors[0]
        if len(vector) != self._dimensions:
            raise EmbeddingError(
                f"Embedding has {len(vector)} dimensions, the index expects {self._dimensions}. "
                "Check EMBED_MODEL and EMBED_DIMENSIONS."
            )
        return vector
