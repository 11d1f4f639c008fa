from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum


class DocumentType(str, Enum):
    """Closed set of supported fiscal schema families."""

    NFE = "NFe"
    CTE = "CTe"
    NFSE = "NFSe"


@dataclass(frozen=True)
class Party:
    """Emitter or recipient block of a fiscal document."""

    tax_id: str = ""
    name: str = ""
    region: str = ""


@dataclass(frozen=True)
class ExtractedDocument:
    """Canonical business fields read from one fiscal XML document."""

    document_type: DocumentType
    document_key: str
    emitter_tax_id: str
    emitter_name: str
    emitter_region: str
    recipient_tax_id: str
    recipient_name: str
    total_value: Decimal
    issue_date: datetime
