import hashlib
from typing import ClassVar

from lxml import etree

from fiscaldoc.logging.logger import Log
from fiscaldoc.xml.base import BaseDocumentSchema, local_name
from fiscaldoc.xml.cte import CTeSchema
from fiscaldoc.xml.exceptions import ClassificationError, MalformedXmlError
from fiscaldoc.xml.models import ExtractedDocument
from fiscaldoc.xml.nfe import NFeSchema
from fiscaldoc.xml.nfse import NFSeSchema


def compute_hash(content: str) -> str:
    """SHA-256 of the UTF-8 encoded content as 64 lowercase hex characters."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class XmlClassifier:
    """Picks the schema variant of a fiscal XML document and extracts its fields.

    Variants are tried in priority order; the first whose structural predicate
    matches wins. Adding a schema family means adding one entry to ``SCHEMAS``.
    """

    SCHEMAS: ClassVar[tuple[BaseDocumentSchema, ...]] = (
        NFeSchema(),
        CTeSchema(),
        NFSeSchema(),
    )

    def __init__(self, schemas: tuple[BaseDocumentSchema, ...] | None = None) -> None:
        self._schemas = schemas if schemas is not None else self.SCHEMAS

    def classify_and_extract(self, xml_text: str) -> ExtractedDocument:
        """Parse, classify and extract canonical fields.

        Raises:
            MalformedXmlError: if the text is not well-formed XML.
            ClassificationError: if no schema variant recognises the document.
        """
        root = self._parse(xml_text)
        schema = self.classify(root)
        document = schema.extract(root)
        Log.debug(
            f"Classified document as {document.document_type.value} "
            f"with key '{document.document_key}'"
        )
        return document

    def classify(self, root: etree._Element) -> BaseDocumentSchema:
        for schema in self._schemas:
            if schema.matches(root):
                return schema
        raise ClassificationError(
            f"Unrecognized fiscal document type (root element '{local_name(root)}')"
        )

    @staticmethod
    def _parse(xml_text: str) -> etree._Element:
        parser = etree.XMLParser(
            encoding="utf-8",
            no_network=True,
            resolve_entities=False,
            recover=False,
        )
        try:
            root = etree.fromstring(xml_text.encode("utf-8"), parser=parser)
        except (etree.XMLSyntaxError, ValueError) as exc:
            raise MalformedXmlError(f"XML syntax error (not well-formed): {exc}") from exc
        if root is None:
            raise MalformedXmlError("XML document has no root element")
        return root


_default_classifier = XmlClassifier()


def classify_and_extract(xml_text: str) -> ExtractedDocument:
    return _default_classifier.classify_and_extract(xml_text)
