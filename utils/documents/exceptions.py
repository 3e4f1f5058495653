"""Exceptions raised by the persistent document stores."""


class DocumentValidationError(ValueError):
    """Raised when a document request has missing or malformed input."""
