class IngestionError(Exception):
    """Base exception for all ingestion errors."""


class StreamReadError(IngestionError):
    """Raised when the submitted stream cannot be read or decoded."""


class InvalidUploadError(IngestionError):
    """Raised when the upload is empty or is not an XML file."""


class DocumentProcessingError(IngestionError):
    """Raised when the XML cannot be parsed or classified. Nothing is persisted."""
