from abc import abstractmethod
from datetime import datetime
from typing import Any

import httpx
import pytz

from shared.clients.ClientInterface import ClientInterface
from shared.exceptions import ClientRequestError, SchemaPublishError, UploadError
from shared.helper.HelperConfig import HelperConfig
from shared.models.schema import FieldSchema, VectorSearchConfig


class SearchClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "search"
        """
        return "search"

    ##########################################
    ############# SERIALIZATION ##############
    ##########################################

    @staticmethod
    def serialize_value(value: Any) -> Any:
        """
        Converts a document value into its JSON wire form.

        Timestamps become ISO 8601 strings with an offset; naive timestamps are taken as UTC.
        """
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = pytz.utc.localize(value)
            return value.isoformat()
        return value

    def serialize_document(self, document: dict[str, Any]) -> dict[str, Any]:
        return {name: self.serialize_value(value) for name, value in document.items()}

    ##########################################
    ########### ENGINE OPERATIONS ############
    ##########################################

    @abstractmethod
    async def _do_create_or_update_index(self, index_name: str, schema: list[FieldSchema], vector_config: VectorSearchConfig) -> None:
        """
        Sends the backend-specific index definition.

        Raises:
            ClientRequestError: If the backend rejects a request.
            SchemaPublishError: If the existing index is incompatible with the schema.
        """
        pass

    @abstractmethod
    async def _do_upload_batch(self, index_name: str, key_field: str, documents: list[dict[str, Any]]) -> None:
        """
        Uploads one batch of already serialized documents.

        Raises:
            ClientRequestError: If the backend rejects the request.
            UploadError: If the backend accepted the request but refused single documents.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_create_or_update_index(self, index_name: str, schema: list[FieldSchema], vector_config: VectorSearchConfig) -> None:
        """Create the index, or update it in place when it already exists.

        Args:
            index_name (str): Target index name.
            schema (list[FieldSchema]): Inferred fields, key/text/vector first.
            vector_config (VectorSearchConfig): ANN settings of the vector field.

        Raises:
            SchemaPublishError: With the remote error message if the backend refuses the definition.
        """
        self.logging.debug("Publishing %d fields to %s index '%s'", len(schema), self.get_engine_name(), index_name)
        try:
            await self._do_create_or_update_index(index_name, schema, vector_config)
        except ClientRequestError as e:
            raise SchemaPublishError(self.get_engine_name(), index_name, f"HTTP {e.status_code}: {e.body}") from e
        except httpx.HTTPError as e:
            raise SchemaPublishError(self.get_engine_name(), index_name, str(e) or e.__class__.__name__) from e

    async def do_upload_documents(self, index_name: str, documents: list[dict[str, Any]], key_field: str, batch_size: int = 1000) -> int:
        """Upload documents in batches of at most `batch_size`.

        Args:
            index_name (str): Target index name.
            documents (list[dict[str, Any]]): Assembled documents.
            key_field (str): Name of the document key field.
            batch_size (int): Maximum documents per request.

        Returns:
            int: Number of documents uploaded.

        Raises:
            UploadError: With the remote error message if any batch is refused.
        """
        if not documents:
            self.logging.warning("No documents to upload to %s index '%s'.", self.get_engine_name(), index_name)
            return 0

        serialized = [self.serialize_document(doc) for doc in documents]
        for batch_start in range(0, len(serialized), batch_size):
            batch = serialized[batch_start: batch_start + batch_size]
            try:
                await self._do_upload_batch(index_name, key_field, batch)
            except ClientRequestError as e:
                failed_keys = [str(doc.get(key_field)) for doc in batch]
                raise UploadError(self.get_engine_name(), index_name, f"HTTP {e.status_code}: {e.body}", failed_keys) from e
            except httpx.HTTPError as e:
                failed_keys = [str(doc.get(key_field)) for doc in batch]
                raise UploadError(self.get_engine_name(), index_name, str(e) or e.__class__.__name__, failed_keys) from e
            except (TypeError, ValueError) as e:
                # the batch could not be encoded as JSON
                failed_keys = [str(doc.get(key_field)) for doc in batch]
                raise UploadError(self.get_engine_name(), index_name, f"Unserializable batch: {e}", failed_keys) from e
            self.logging.debug(
                "Uploaded documents %d-%d to %s index '%s'",
                batch_start + 1, batch_start + len(batch), self.get_engine_name(), index_name,
            )
        return len(serialized)
