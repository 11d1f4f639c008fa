from lxml import etree

from fiscaldoc.xml.base import PrefixedKeySchema, has_element, local_name
from fiscaldoc.xml.models import DocumentType


class NFeSchema(PrefixedKeySchema):
    """Electronic invoice (``nfeProc`` / ``NFe``)."""

    document_type = DocumentType.NFE
    info_tag = "infNFe"
    key_prefix = "NFe"

    def matches(self, root: etree._Element) -> bool:
        return local_name(root) == "nfeProc" or has_element(root, "NFe")
