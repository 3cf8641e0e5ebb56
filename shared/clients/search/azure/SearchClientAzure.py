from typing import Any

from shared.clients.search.SearchClientInterface import SearchClientInterface
from shared.exceptions import UploadError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.models.schema import FieldSchema, FieldType, VectorSearchConfig

EDM_TYPES: dict[FieldType, str] = {
    FieldType.STRING: "Edm.String",
    FieldType.INT64: "Edm.Int64",
    FieldType.DOUBLE: "Edm.Double",
    FieldType.BOOLEAN: "Edm.Boolean",
    FieldType.TIMESTAMP: "Edm.DateTimeOffset",
    FieldType.VECTOR: "Collection(Edm.Single)",
}


class SearchClientAzure(SearchClientInterface):
    """Azure AI Search over its REST API, authenticated with an admin key."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")
        self._api_version = self.get_config_val("API_VERSION", default="2024-07-01", val_type="string")

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
            EnvConfig(env_key="API_VERSION", val_type="string", default="2024-07-01"),
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
        return "/servicestats"

    def _get_endpoint_index(self, index_name: str) -> str:
        return f"/indexes/{index_name}"

    def _get_endpoint_documents(self, index_name: str) -> str:
        return f"/indexes/{index_name}/docs/index"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def get_field_payload(self, field: FieldSchema) -> dict:
        payload = {
            "name": field.name,
            "type": EDM_TYPES[field.type],
            "key": field.key,
            "searchable": field.searchable,
            "filterable": field.filterable,
            "sortable": field.sortable,
            "facetable": field.facetable,
            "retrievable": True,
        }
        if field.type == FieldType.VECTOR:
            payload["dimensions"] = field.vector_dimensions
            payload["vectorSearchProfile"] = field.vector_profile
        return payload

    def get_vector_search_payload(self, vector_config: VectorSearchConfig) -> dict:
        return {
            "algorithms": [
                {
                    "name": vector_config.algorithm_name,
                    "kind": vector_config.kind,
                    "hnswParameters": {
                        "m": vector_config.m,
                        "efConstruction": vector_config.ef_construction,
                        "efSearch": vector_config.ef_search,
                        "metric": vector_config.metric,
                    },
                }
            ],
            "profiles": [
                {"name": vector_config.profile_name, "algorithm": vector_config.algorithm_name},
            ],
        }

    def get_index_payload(self, index_name: str, schema: list[FieldSchema], vector_config: VectorSearchConfig) -> dict:
        return {
            "name": index_name,
            "fields": [self.get_field_payload(field) for field in schema],
            "vectorSearch": self.get_vector_search_payload(vector_config),
        }

    def get_upload_payload(self, documents: list[dict[str, Any]]) -> dict:
        return {"value": [{"@search.action": "upload", **doc} for doc in documents]}

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def extract_failed_items(self, response_data: dict) -> list[dict]:
        """Return the per-document results the service marked as failed."""
        return [item for item in response_data.get("value", []) if not item.get("status", False)]

    ##########################################
    ########### ENGINE OPERATIONS ############
    ##########################################

    async def _do_create_or_update_index(self, index_name: str, schema: list[FieldSchema], vector_config: VectorSearchConfig) -> None:
        await self.do_request(
            method="PUT",
            json=self.get_index_payload(index_name, schema, vector_config),
            endpoint=self._get_endpoint_index(index_name),
            raise_on_error=True,
        )

    async def _do_upload_batch(self, index_name: str, key_field: str, documents: list[dict[str, Any]]) -> None:
        response = await self.do_request(
            method="POST",
            json=self.get_upload_payload(documents),
            endpoint=self._get_endpoint_documents(index_name),
            raise_on_error=True,
        )
        # 207 Multi-Status: request accepted, single documents refused
        if response.status_code == 207:
            failed = self.extract_failed_items(response.json())
            if failed:
                detail = "; ".join(f"{item.get('key')}: {item.get('errorMessage')}" for item in failed)
                raise UploadError(
                    self.get_engine_name(),
                    index_name,
                    f"{len(failed)} of {len(documents)} documents rejected: {detail}",
                    [str(item.get("key")) for item in failed],
                )
