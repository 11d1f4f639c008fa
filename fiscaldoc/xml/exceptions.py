class XmlExtractionError(Exception):
    """Base exception for all XML classification and extraction errors."""


class MalformedXmlError(XmlExtractionError):
    """Raised when the submitted text is not well-formed XML."""


class ClassificationError(XmlExtractionError):
    """Raised when the document matches none of the supported schemas."""
