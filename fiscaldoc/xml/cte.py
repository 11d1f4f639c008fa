from lxml import etree

from fiscaldoc.xml.base import PrefixedKeySchema, has_element, local_name
from fiscaldoc.xml.models import DocumentType


class CTeSchema(PrefixedKeySchema):
    """Electronic transport waybill (``cteProc`` / ``CTe``)."""

    document_type = DocumentType.CTE
    info_tag = "infCte"
    key_prefix = "CTe"

    def matches(self, root: etree._Element) -> bool:
        return local_name(root) == "cteProc" or has_element(root, "CTe")
