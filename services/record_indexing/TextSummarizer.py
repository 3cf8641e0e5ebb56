"""Natural-language summaries of records, one chat completion per record."""

from services.record_indexing.record_normalizer import Record, stringify_value
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.exceptions import SummarizationError
from shared.helper.HelperConfig import HelperConfig
from shared.models.summary import SummaryFailure, SummaryResult

PROMPT_DELIMITER = "---------------------------------------------------------"


class TextSummarizer:
    """Turns a record into a concise summary suitable for a search index.

    Provider failures never propagate: do_generate() reports them in the
    SummaryResult and do_summarize() replaces them by a fixed sentinel text.
    """

    def __init__(self, helper_config: HelperConfig, llm_client: LLMClientInterface, language: str = "British English") -> None:
        self.logging = helper_config.get_logger()
        self._llm_client = llm_client
        self._language = language

    ##########################################
    ################ PROMPTS #################
    ##########################################

    def get_system_instruction(self) -> str:
        return f"You are a helpful assistant that generates concise record summaries in {self._language}."

    def build_prompt(self, record: Record) -> str:
        """Render the record as "<field>: <value>" lines between two delimiter lines."""
        lines = [
            "Generate a concise, informative text representation for the following record:",
            PROMPT_DELIMITER,
        ]
        lines.extend(f"{name}: {stringify_value(value)}" for name, value in record.items())
        lines.append(PROMPT_DELIMITER)
        lines.append(f"The summary should be written in clear {self._language} and suitable for use in a search index.")
        return "\n".join(lines) + "\n"

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def _do_request_summary(self, record: Record) -> str:
        try:
            completion = await self._llm_client.do_complete(self.get_system_instruction(), self.build_prompt(record))
        except Exception as e:
            raise SummarizationError(str(e) or e.__class__.__name__) from e
        if not isinstance(completion, str):
            raise SummarizationError(f"Unexpected completion type {type(completion).__name__}.")
        return completion.strip()

    async def do_generate(self, record: Record) -> SummaryResult:
        """Ask the provider for a summary and report the outcome without raising."""
        try:
            summary = await self._do_request_summary(record)
        except SummarizationError as e:
            self.logging.error("Error generating text representation: %s", e)
            return SummaryResult(failure=SummaryFailure.PROVIDER_ERROR, error_message=str(e))
        if not summary:
            self.logging.warning("Provider returned an empty summary for a record.")
            return SummaryResult(failure=SummaryFailure.EMPTY_RESPONSE)
        return SummaryResult(summary=summary)

    async def do_summarize(self, record: Record) -> str:
        """Return the summary text, or the sentinel text for the failure. Never empty."""
        result = await self.do_generate(record)
        return result.resolve()
