"""Error taxonomy of the record search indexer.

Every error that aborts a run derives from IndexerError so the runner can
report it with a single except clause. SummarizationError is the only one
that never leaves its component: the summarizer turns it into a fallback.
"""


class IndexerError(Exception):
    """Base class for all indexer errors."""


class ClientRequestError(IndexerError):
    """A backend answered with a non-2xx HTTP status.

    Attributes:
        url (str): The requested URL.
        status_code (int): The HTTP status returned by the backend.
        body (str): The raw response body, kept for operator diagnostics.
    """

    def __init__(self, url: str, status_code: int, body: str):
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(f"Request to {url} failed with status {status_code}: {body}")


class SourceFetchError(IndexerError):
    """The record source is unreachable or the query was rejected."""


class SummarizationError(IndexerError):
    """The text provider failed or returned an unusable completion for one record."""


class EmbeddingError(IndexerError):
    """The embedding provider failed or returned a vector of the wrong size."""


class SchemaPublishError(IndexerError):
    """The search backend rejected the index definition.

    Attributes:
        engine (str): Search engine name (e.g. "azure").
        index_name (str): The index that was being created or updated.
        detail (str): The remote error message.
    """

    def __init__(self, engine: str, index_name: str, detail: str):
        self.engine = engine
        self.index_name = index_name
        self.detail = detail
        super().__init__(f"{engine}: could not create or update index '{index_name}': {detail}")


class UploadError(IndexerError):
    """The search backend rejected some or all documents of an upload.

    Attributes:
        engine (str): Search engine name (e.g. "azure").
        index_name (str): The target index.
        detail (str): The remote error message.
        failed_keys (list[str]): Keys of the documents the backend refused, if known.
    """

    def __init__(self, engine: str, index_name: str, detail: str, failed_keys: list[str] | None = None):
        self.engine = engine
        self.index_name = index_name
        self.detail = detail
        self.failed_keys = failed_keys or []
        super().__init__(f"{engine}: upload to index '{index_name}' failed: {detail}")
