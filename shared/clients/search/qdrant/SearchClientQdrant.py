import uuid
from typing import Any

from shared.clients.search.SearchClientInterface import SearchClientInterface
from shared.exceptions import SchemaPublishError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.models.schema import VECTOR_FIELD, FieldSchema, FieldType, VectorSearchConfig

PAYLOAD_INDEX_TYPES: dict[FieldType, str] = {
    FieldType.INT64: "integer",
    FieldType.DOUBLE: "float",
    FieldType.BOOLEAN: "bool",
    FieldType.TIMESTAMP: "datetime",
}

DISTANCES: dict[str, str] = {
    "cosine": "Cosine",
    "dotproduct": "Dot",
    "euclidean": "Euclid",
}


def make_point_id(index_name: str, key: str) -> str:
    """Build a deterministic UUID5 point ID from the document key.

    Qdrant only accepts integers and UUIDs as point IDs. Deriving the UUID
    from the key makes a re-run overwrite the same points instead of
    duplicating them.
    """
    return str(uuid.uuid5(uuid.NAMESPACE_OID, f"{index_name}:{key}"))


class SearchClientQdrant(SearchClientInterface):
    """Qdrant over its REST API. The index name is the collection name."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Qdrant"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"api-key": self._api_key}
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/healthz"

    def _get_endpoint_collection(self, index_name: str) -> str:
        return f"/collections/{index_name}"

    def _get_endpoint_check_collection_existence(self, index_name: str) -> str:
        return f"/collections/{index_name}/exists"

    def _get_endpoint_payload_index(self, index_name: str) -> str:
        return f"/collections/{index_name}/index"

    def _get_endpoint_points(self, index_name: str) -> str:
        return f"/collections/{index_name}/points"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def get_hnsw_payload(self, vector_config: VectorSearchConfig) -> dict:
        # ef_search is a query-time parameter in Qdrant
        return {"m": vector_config.m, "ef_construct": vector_config.ef_construction}

    def get_create_collection_payload(self, vector_config: VectorSearchConfig) -> dict:
        return {
            "vectors": {
                "size": vector_config.dimensions,
                "distance": DISTANCES.get(vector_config.metric.lower(), "Cosine"),
            },
            "hnsw_config": self.get_hnsw_payload(vector_config),
        }

    def get_payload_index_type(self, field: FieldSchema) -> str | None:
        """Payload index type for a field, or None if the field needs no index."""
        if field.type == FieldType.VECTOR:
            return None
        if field.type == FieldType.STRING:
            if field.key or field.filterable:
                return "keyword"
            return "text" if field.searchable else None
        if field.filterable or field.sortable or field.facetable:
            return PAYLOAD_INDEX_TYPES[field.type]
        return None

    def get_points_payload(self, index_name: str, key_field: str, documents: list[dict[str, Any]]) -> dict:
        points = []
        for doc in documents:
            payload = {name: value for name, value in doc.items() if name != VECTOR_FIELD}
            points.append({
                "id": make_point_id(index_name, str(doc[key_field])),
                "vector": doc[VECTOR_FIELD],
                "payload": payload,
            })
        return {"points": points}

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def extract_vector_size(self, collection_info: dict) -> int | None:
        vectors = collection_info.get("result", {}).get("config", {}).get("params", {}).get("vectors", {})
        size = vectors.get("size") if isinstance(vectors, dict) else None
        return int(size) if size is not None else None

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_existence_check(self, index_name: str) -> bool:
        resp = await self.do_request(
            method="GET",
            endpoint=self._get_endpoint_check_collection_existence(index_name),
            raise_on_error=True,
        )
        return bool(resp.json().get("result", {}).get("exists"))

    ##########################################
    ########### ENGINE OPERATIONS ############
    ##########################################

    async def _do_create_or_update_index(self, index_name: str, schema: list[FieldSchema], vector_config: VectorSearchConfig) -> None:
        if await self.do_existence_check(index_name):
            resp = await self.do_request(method="GET", endpoint=self._get_endpoint_collection(index_name), raise_on_error=True)
            existing_size = self.extract_vector_size(resp.json())
            if existing_size is not None and existing_size != vector_config.dimensions:
                raise SchemaPublishError(
                    self.get_engine_name(),
                    index_name,
                    f"collection stores {existing_size}-dimensional vectors, documents carry {vector_config.dimensions}",
                )
            await self.do_request(
                method="PATCH",
                json={"hnsw_config": self.get_hnsw_payload(vector_config)},
                endpoint=self._get_endpoint_collection(index_name),
                raise_on_error=True,
            )
        else:
            await self.do_request(
                method="PUT",
                json=self.get_create_collection_payload(vector_config),
                endpoint=self._get_endpoint_collection(index_name),
                raise_on_error=True,
            )

        # creating an existing payload index is a no-op in Qdrant
        for field in schema:
            index_type = self.get_payload_index_type(field)
            if index_type is None:
                continue
            await self.do_request(
                method="PUT",
                json={"field_name": field.name, "field_schema": index_type},
                endpoint=self._get_endpoint_payload_index(index_name),
                params={"wait": "true"},
                raise_on_error=True,
            )

    async def _do_upload_batch(self, index_name: str, key_field: str, documents: list[dict[str, Any]]) -> None:
        await self.do_request(
            method="PUT",
            json=self.get_points_payload(index_name, key_field, documents),
            endpoint=self._get_endpoint_points(index_name),
            params={"wait": "true"},
            raise_on_error=True,
        )
