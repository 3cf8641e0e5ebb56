from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class LLMClientAzure(LLMClientInterface):
    """Chat completions against an Azure OpenAI deployment.

    The configured chat model (LLM_CHAT_MODEL) is the deployment name.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")
        self._api_version = self.get_config_val("API_VERSION", default="2024-10-21", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Azure"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=None),
            EnvConfig(env_key="API_VERSION", val_type="string", default="2024-10-21"),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {"api-key": self._api_key}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_default_params(self) -> dict:
        return {"api-version": self._api_version}

    def _get_endpoint_healthcheck(self) -> str:
        return "/openai/models"

    def _get_endpoint_chat(self) -> str:
        return f"/openai/deployments/{self.chat_model}/chat/completions"

    ################ PAYLOAD BUILDER ##################
    def get_chat_payload(self, messages: list[dict]) -> dict:
        # the deployment in the URL selects the model
        return {"messages": messages}

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_chat_response(self, response_data: dict) -> str:
        """Return the content of the first choice.

        Raises:
            ValueError: If there is no choice or the first choice has no content
                (e.g. it was removed by the content filter).
        """
        choices = response_data.get("choices") or []
        if not choices:
            raise ValueError(
                "Azure OpenAI chat response contains no choices. "
                "Response keys: %s" % list(response_data.keys())
            )
        content = (choices[0].get("message") or {}).get("content")
        if content is None:
            finish_reason = choices[0].get("finish_reason")
            raise ValueError("Azure OpenAI chat response has no content (finish_reason=%s)." % finish_reason)
        return content
