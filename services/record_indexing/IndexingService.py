"""Indexing service.

Reads a bounded batch of rows from the record source, normalizes them,
summarizes and embeds each record, infers the index schema from the first
record, and publishes schema and documents to every configured search backend.
"""

import asyncio
from typing import Any

from services.record_indexing.document_assembler import Document, assemble_document, resolve_document_key
from services.record_indexing.EmbeddingGenerator import EmbeddingGenerator
from services.record_indexing.record_normalizer import Record, normalize_record, resolve_key_column
from services.record_indexing.schema_inferencer import infer_schema, project_document, reserved_field_names
from services.record_indexing.TextSummarizer import TextSummarizer
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.clients.search.SearchClientInterface import SearchClientInterface
from shared.clients.source.SourceClientInterface import SourceClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import IndexerSettings
from shared.models.report import IndexingReport
from shared.models.schema import KEY_FIELD_DEFAULT, FieldSchema, VectorSearchConfig


class IndexingService:
    """Orchestrates one indexing run from the record source to the search backends."""

    def __init__(
        self,
        helper_config: HelperConfig,
        settings: IndexerSettings,
        source_client: SourceClientInterface,
        llm_client: LLMClientInterface,
        embed_client: EmbedClientInterface,
        search_clients: list[SearchClientInterface],
    ) -> None:
        self.logging = helper_config.get_logger()
        self._settings = settings
        self._source_client = source_client
        self._search_clients = search_clients
        self._summarizer = TextSummarizer(helper_config, llm_client, language=settings.summary_language)
        self._embedder = EmbeddingGenerator(helper_config, embed_client, dimensions=settings.vector_dimensions)
        self._vector_config = VectorSearchConfig(dimensions=settings.vector_dimensions)

    ##########################################
    ################ CORE RUN ################
    ##########################################

    async def do_run(self) -> IndexingReport:
        """Run the whole pipeline once.

        Returns:
            IndexingReport: Counts of the finished run.

        Raises:
            SourceFetchError: If the rows cannot be read.
            EmbeddingError: If any record cannot be embedded. Nothing is published.
            SchemaPublishError: If a backend rejects the index definition.
            UploadError: If a backend rejects the documents.
        """
        table_name = self._settings.table_name
        raw_records = await self._source_client.do_fetch_records(table_name, self._settings.row_limit)
        self.logging.info("Retrieved %d records from table '%s'.", len(raw_records), table_name)

        # the first fetched row fixes key spelling and schema before any fan-out
        first_columns = list(raw_records[0].keys()) if raw_records else []
        key_column = resolve_key_column(first_columns, self._settings.primary_key_column)
        key_field = key_column or KEY_FIELD_DEFAULT
        if key_column and raw_records and key_column not in raw_records[0]:
            self.logging.warning(
                "Primary key column '%s' not found in table '%s'. Generated ids are stored in '%s'.",
                key_column, table_name, key_field,
            )

        records = [normalize_record(raw, key_column) for raw in raw_records]
        schema = infer_schema(
            records[0] if records else None,
            key_field,
            reserved_field_names(key_column_chosen=bool(key_column)),
            self._vector_config,
        )
        self.logging.debug("Inferred %d index fields: %s", len(schema), [field.name for field in schema])

        documents, fallbacks = await self.do_build_documents(records, key_field, key_column_chosen=bool(key_column))
        self.logging.info("Processed %d records with text representations and embeddings.", len(documents))

        documents, dropped = self._project_documents(documents, schema)

        for search_client in self._search_clients:
            await self.do_publish(search_client, schema, documents, key_field)

        return IndexingReport(
            table_name=table_name,
            index_name=self._settings.index_name,
            records_fetched=len(raw_records),
            documents_indexed=len(documents),
            summary_fallbacks=fallbacks,
            dropped_fields=dropped,
            search_engines=[client.get_engine_name() for client in self._search_clients],
        )

    ##########################################
    ############ DOCUMENT BUILD ##############
    ##########################################

    async def do_build_documents(self, records: list[Record], key_field: str, key_column_chosen: bool) -> tuple[list[Document], int]:
        """Summarize, embed and assemble all records with bounded parallelism.

        Returns:
            tuple[list[Document], int]: Documents in source order and the number of summary fallbacks.

        Raises:
            EmbeddingError: Propagated from the first record that cannot be embedded.
                Records not started yet are skipped, records in flight are cancelled.
        """
        sem = asyncio.Semaphore(self._settings.record_concurrency)
        aborted = asyncio.Event()
        tasks = [
            asyncio.create_task(self._build_document(record, key_field, key_column_chosen, sem, aborted))
            for record in records
        ]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            aborted.set()
            for task in tasks:
                task.cancel()
            # collect the siblings so none of their errors goes unretrieved
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        documents = [document for document, _ in results]
        fallbacks = sum(1 for _, is_fallback in results if is_fallback)
        if fallbacks:
            self.logging.warning("%d of %d records were indexed with a fallback summary.", fallbacks, len(records))
        return documents, fallbacks

    async def _build_document(
        self,
        record: Record,
        key_field: str,
        key_column_chosen: bool,
        sem: asyncio.Semaphore,
        aborted: asyncio.Event,
    ) -> tuple[Document, bool] | None:
        async with sem:
            if aborted.is_set():
                return None
            summary_result = await self._summarizer.do_generate(record)
            summary = summary_result.resolve()
            try:
                vector = await self._embedder.do_embed(summary)
            except Exception:
                # stop records still waiting for the semaphore before the failure surfaces
                aborted.set()
                raise
            key = resolve_document_key(record, key_field, key_column_chosen)
            if key_column_chosen and key != record.get(key_field):
                self.logging.warning("Record without a value in key column '%s', generated key %s.", key_field, key)
            document = assemble_document(record, key, key_field, summary, vector)
            return document, not summary_result.is_success

    def _project_documents(self, documents: list[Document], schema: list[FieldSchema]) -> tuple[list[Document], list[str]]:
        projected_documents: list[Document] = []
        dropped_fields: list[str] = []
        for document in documents:
            projected, dropped = project_document(document, schema)
            projected_documents.append(projected)
            dropped_fields.extend(name for name in dropped if name not in dropped_fields)
        if dropped_fields:
            self.logging.warning(
                "Fields missing from the index schema were dropped from the documents: %s",
                ", ".join(dropped_fields),
            )
        return projected_documents, dropped_fields

    ##########################################
    ############### PUBLISHING ###############
    ##########################################

    async def do_publish(self, search_client: SearchClientInterface, schema: list[FieldSchema], documents: list[dict[str, Any]], key_field: str) -> None:
        """Create or update the index on one backend, then upload the documents."""
        index_name = self._settings.index_name
        engine = search_client.get_engine_name()

        await search_client.do_create_or_update_index(index_name, schema, self._vector_config)
        self.logging.info("Search index '%s' created or updated successfully on '%s'.", index_name, engine)

        uploaded = await search_client.do_upload_documents(
            index_name,
            documents,
            key_field=key_field,
            batch_size=self._settings.upload_batch_size,
        )
        if uploaded:
            self.logging.info("%d documents have been indexed successfully on '%s'.", uploaded, engine, color="green")
