from __future__ import annotations


class MemoAppError(Exception):
    """Base class for errors raised by the memo service and its clients."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(MemoAppError):
    """A required credential or setting is missing."""


class DataAccessError(MemoAppError):
    """The data store rejected or failed an operation."""


class ConflictError(DataAccessError):
    """A conditional write lost against a newer stored version."""


class ValidationError(MemoAppError):
    """Input rejected before any network call was made."""


class SummarizationError(MemoAppError):
    """Base class for summary generation failures."""


class EmptyResultError(SummarizationError):
    """The model answered without any text."""


class UpstreamError(SummarizationError):
    """The model API call failed."""
