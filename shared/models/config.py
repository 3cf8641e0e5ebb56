from pydantic import BaseModel, ConfigDict, Field

from shared.helper.HelperConfig import HelperConfig


class EnvConfig(BaseModel):
    """
    Represents a single configuration parameter required by a client.

    Attributes:
        env_key (str): The raw key of the environment variable, without the client prefix.
        val_type (str): The expected type of the value. Supported types are "string", "number", "bool", and "list".
        default (str | int | bool | list | None): Default used if the variable is not set. If None, the variable is required.
    """

    env_key: str
    val_type: str
    default: str | int | bool | list | None = None


class IndexerSettings(BaseModel):
    """
    Run-wide settings of one indexing run, read once at start-up and never mutated.

    Client-specific settings (URLs, API keys, deployments) stay with the clients;
    this model only carries what the orchestration itself needs.

    Attributes:
        table_name (str): Source table, optionally schema-qualified ("dbo.Customers").
        primary_key_column (str | None): Column used as document key. None means generated ids.
        row_limit (int): Maximum number of rows fetched from the source.
        index_name (str): Target index / collection name in every search backend.
        vector_dimensions (int): Expected embedding length.
        summary_language (str): Language and register the summaries are written in.
        record_concurrency (int): Number of records summarized and embedded in parallel.
        upload_batch_size (int): Maximum documents per upload request.
    """

    model_config = ConfigDict(frozen=True)

    table_name: str
    primary_key_column: str | None = None
    row_limit: int = Field(default=1000, gt=0)
    index_name: str
    vector_dimensions: int = Field(default=3072, gt=0)
    summary_language: str = "British English"
    record_concurrency: int = Field(default=1, gt=0)
    upload_batch_size: int = Field(default=1000, gt=0, le=1000)

    @classmethod
    def from_helper_config(cls, helper_config: HelperConfig) -> "IndexerSettings":
        """Build the settings from environment variables.

        Raises:
            ValueError: If a required variable is missing or malformed.
        """
        return cls(
            table_name=helper_config.get_string_val("SOURCE_TABLE"),
            primary_key_column=helper_config.get_optional_string_val("SOURCE_PRIMARY_KEY"),
            row_limit=int(helper_config.get_number_val("SOURCE_ROW_LIMIT", default=1000)),
            index_name=helper_config.get_string_val("SEARCH_INDEX"),
            vector_dimensions=int(helper_config.get_number_val("EMBED_DIMENSIONS", default=3072)),
            summary_language=helper_config.get_string_val("SUMMARY_LANGUAGE", default="British English"),
            record_concurrency=int(helper_config.get_number_val("INDEXING_CONCURRENCY", default=1)),
            upload_batch_size=int(helper_config.get_number_val("SEARCH_UPLOAD_BATCH_SIZE", default=1000)),
        )
