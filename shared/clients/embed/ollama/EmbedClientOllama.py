import httpx

from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class EmbedClientOllama(EmbedClientInterface):
    """Embeddings from an Ollama server via /api/embed (EMBED_MODEL is the model tag)."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Ollama"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/api/show"

    def get_endpoint_embedding(self) -> str:
        return "/api/embed"

    ################ PAYLOAD BUILDER ##################
    def get_embed_payload(self, texts: list[str]) -> dict:
        return {"model": self.embed_model, "input": texts}

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_embeddings_from_response(self, response_data: dict) -> list[list[float]]:
        embeddings = response_data.get("embeddings")
        if not embeddings or not all(embeddings):
            raise ValueError(
                f"Ollama response for model '{self.embed_model}' carries no usable embeddings. "
                f"Response keys: {list(response_data.keys())}"
            )
        return embeddings

    def extract_vector_size_from_model_info(self, model_info: dict) -> int | None:
        """Read "<family>.embedding_length" from an /api/show response, None if absent."""
        for key, value in (model_info.get("model_info") or {}).items():
            if key.endswith(".embedding_length"):
                return int(value)
        return None

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_healthcheck(self) -> httpx.Response:
        """Ask the server for the embedding model's details and log its native vector size.

        Raises:
            ClientRequestError: If the server is unreachable or does not know the model (404).
        """
        response = await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_healthcheck(),
            json={"model": self.embed_model},
            raise_on_error=True,
        )
        vector_size = self.extract_vector_size_from_model_info(response.json())
        if vector_size is not None:
            self.logging.debug("Ollama model '%s' produces %d-dimensional embeddings.", self.embed_model, vector_size)
        return response
