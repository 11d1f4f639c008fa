class RepositoryError(Exception):
    """Base exception for record store errors."""


class DuplicateDocumentError(RepositoryError):
    """Raised when a write violates the document key uniqueness constraint."""


class DocumentNotFoundError(RepositoryError):
    """Raised when a staged update or delete targets a missing document."""
