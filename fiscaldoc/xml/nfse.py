import uuid

from lxml import etree

from fiscaldoc.logging.logger import Log
from fiscaldoc.xml.base import BaseDocumentSchema, find_first, first_text
from fiscaldoc.xml.models import DocumentType


class NFSeSchema(BaseDocumentSchema):
    """Municipal service invoice, recognised by its ``infNfse`` block."""

    document_type = DocumentType.NFSE

    def matches(self, root: etree._Element) -> bool:
        return find_first(root, "infNfse") is not None

    def extract_document_key(self, root: etree._Element) -> str:
        number = first_text(root, ("Numero",), default="")
        if number:
            return number
        # A synthesized key never collides, so key deduplication cannot catch
        # resubmissions of this document; only the content hash will.
        generated = str(uuid.uuid4())
        Log.warning(f"NFSe without Numero, generated document key {generated}")
        return generated
