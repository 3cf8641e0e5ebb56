from pydantic import BaseModel


class IndexingReport(BaseModel):
    """
    Summary of a finished indexing run.

    Attributes:
        table_name (str): The source table.
        index_name (str): The target index.
        records_fetched (int): Rows returned by the source.
        documents_indexed (int): Documents uploaded to each search backend.
        summary_fallbacks (int): Records whose summary is a sentinel text.
        dropped_fields (list[str]): Fields removed from documents because the inferred schema lacks them.
        search_engines (list[str]): Engines the documents were published to.
    """

    table_name: str
    index_name: str
    records_fetched: int = 0
    documents_indexed: int = 0
    summary_fallbacks: int = 0
    dropped_fields: list[str] = []
    search_engines: list[str] = []
