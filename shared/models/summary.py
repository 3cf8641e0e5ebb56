"""Outcome of summarizing a single record."""

from enum import Enum

from pydantic import BaseModel

EMPTY_SUMMARY_TEXT = "No summary generated for the record."
FAILED_SUMMARY_TEXT = "Error generating text representation."


class SummaryFailure(str, Enum):
    EMPTY_RESPONSE = "empty_response"
    PROVIDER_ERROR = "provider_error"


class SummaryResult(BaseModel):
    """Either a usable summary or the reason there is none.

    The fallback policy lives in resolve(), so callers decide when to apply
    it and tests can inspect the failure directly.

    Attributes:
        summary: Trimmed completion text. Set only on success.
        failure: Why no summary is available. None on success.
        error_message: Provider error detail for PROVIDER_ERROR failures.
    """

    summary: str | None = None
    failure: SummaryFailure | None = None
    error_message: str | None = None

    @property
    def is_success(self) -> bool:
        return self.failure is None and bool(self.summary)

    def resolve(self) -> str:
        """Return the summary, or the sentinel text matching the failure."""
        if self.is_success:
            return self.summary
        if self.failure == SummaryFailure.PROVIDER_ERROR:
            return FAILED_SUMMARY_TEXT
        return EMPTY_SUMMARY_TEXT
