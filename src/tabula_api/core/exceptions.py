"""Exceptions raised by the extraction service and its collaborators."""


class TabulaError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class NotFoundError(TabulaError):
    """Raised when a referenced document or page does not exist."""


class InvalidMediaError(TabulaError):
    """Raised when uploaded content is not a readable PDF."""


class ExtractorError(TabulaError):
    """Raised when the page extractor cannot open a page or region."""


class StorageError(TabulaError):
    """Raised when a document cannot be persisted or removed."""
