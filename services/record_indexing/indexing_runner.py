"""Indexing runner entry point.

Reads a table through the configured record source, enriches every row with
an LLM summary and an embedding, and publishes the rows into the configured
search indexes. One-shot: the process exits when the run is finished.

Usage:
    python -m services.record_indexing.indexing_runner
"""

import asyncio
import sys

import httpx

from services.record_indexing.IndexingService import IndexingService
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.clients.search.SearchClientManager import SearchClientManager
from shared.clients.source.SourceClientManager import SourceClientManager
from shared.exceptions import IndexerError
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging
from shared.models.config import IndexerSettings


async def main() -> int:
    """Run one indexing pass.

    Returns:
        int: Process exit code, 0 on success.
    """
    logger = setup_logging()
    config = HelperConfig(logger=logger)

    try:
        settings = IndexerSettings.from_helper_config(config)
        source_client = SourceClientManager(helper_config=config).get_client()
        llm_client = LLMClientManager(helper_config=config).get_client()
        embed_client = EmbedClientManager(helper_config=config).get_client()
        search_clients = SearchClientManager(helper_config=config).get_clients()
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    clients = [source_client, llm_client, embed_client, *search_clients]
    try:
        # every backend is required, abort if any of them is unreachable
        for client in clients:
            try:
                await client.boot()
                await client.do_healthcheck()
            except (IndexerError, httpx.HTTPError) as e:
                logger.error(
                    "Error booting %s client '%s': %s. Aborting.",
                    client.get_client_type(), client.get_engine_name(), e,
                )
                return 1
            logger.debug("Client %s/%s is ready.", client.get_client_type(), client.get_engine_name())

        service = IndexingService(
            helper_config=config,
            settings=settings,
            source_client=source_client,
            llm_client=llm_client,
            embed_client=embed_client,
            search_clients=search_clients,
        )
        report = await service.do_run()
        logger.info(
            "Indexing of '%s' into '%s' finished: %d fetched, %d indexed, %d summary fallbacks.",
            report.table_name,
            report.index_name,
            report.records_fetched,
            report.documents_indexed,
            report.summary_fallbacks,
            color="green",
        )
        return 0
    except IndexerError as e:
        logger.error("Indexing aborted: %s", e)
        return 1
    finally:
        for client in clients:
            try:
                await client.close()
            except Exception as e:
                logger.warning(
                    "Error closing %s client '%s': %s",
                    client.get_client_type(), client.get_engine_name(), e,
                )


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
