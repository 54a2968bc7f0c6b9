"""
Error taxonomy for the study pipeline.

Every error carries the HTTP status the API layer renders it with; routes let
these propagate and the handler registered in main.py builds the response.
"""


class StudyAssistError(Exception):
    """Base exception for pipeline errors."""

    status_code = 500

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class MissingFileError(StudyAssistError):
    """Raised when a multipart request carries no file."""

    status_code = 400


class UnsupportedFormatError(StudyAssistError):
    """Raised when no extractor handles the file's extension."""

    status_code = 400


class ExtractionFailedError(StudyAssistError):
    """Raised when an extractor cannot produce text (corrupt, encrypted, empty)."""

    status_code = 500


class InvalidInputError(StudyAssistError):
    """Raised when a request is missing the fields an operation needs."""

    status_code = 400


class FileTooLargeError(InvalidInputError):
    """Raised when an upload exceeds the configured size limit."""

    status_code = 413


class AIUnavailableError(StudyAssistError):
    """Raised when every configured AI provider failed.

    API layer maps this to 503 Service Unavailable.
    """

    status_code = 503


class MalformedAIResponseError(StudyAssistError):
    """Raised when an AI reply does not match the shape that was requested."""

    status_code = 500


class ScrapeFailedError(StudyAssistError):
    """Raised when a source URL cannot be fetched for metadata."""

    status_code = 502


__all__ = [
    "StudyAssistError",
    "MissingFileError",
    "UnsupportedFormatError",
    "ExtractionFailedError",
    "InvalidInputError",
    "FileTooLargeError",
    "AIUnavailableError",
    "MalformedAIResponseError",
    "ScrapeFailedError",
]
