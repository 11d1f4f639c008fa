"""Shared structure for fiscal XML schema variants.

Each supported schema family is one subclass of ``BaseDocumentSchema``. A
subclass decides whether it recognises a parsed tree (``matches``) and how the
business key is read (``extract_document_key``); every other field follows the
same fallback chains for all families and lives here.

All lookups compare local names only, so namespaced and bare documents behave
the same.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import ClassVar

from lxml import etree

from fiscaldoc.xml.models import DocumentType, ExtractedDocument, Party

EMITTER_BLOCKS = ("emit", "PrestadorServico")
RECIPIENT_BLOCKS = ("dest", "TomadorServico")
TOTAL_VALUE_TAGS = ("vNF", "vPrest", "ValorServicos")
ISSUE_DATE_TAGS = ("dhEmi", "dEmi", "DataEmissao")

_CENTS = Decimal("0.01")
# 16 integer digits + 2 decimals, the width of the stored column
MAX_TOTAL_VALUE = Decimal("1E16")


def local_name(element: etree._Element) -> str:
    return etree.QName(element).localname


def find_first(scope: etree._Element, name: str) -> etree._Element | None:
    """Return the first descendant of ``scope`` whose local name is ``name``."""
    for element in scope.iterdescendants(etree.Element):
        if local_name(element) == name:
            return element
    return None


def find_first_of(scope: etree._Element, names: Iterable[str]) -> etree._Element | None:
    """Try each name in order and return the first element found."""
    for name in names:
        element = find_first(scope, name)
        if element is not None:
            return element
    return None


def element_text(element: etree._Element) -> str:
    """Concatenated text of an element and its descendants."""
    return "".join(element.itertext()).strip()


def leaf_text(element: etree._Element) -> str:
    """Text of a value element; for a wrapper, the first value nested in it."""
    if len(element) == 0:
        return element_text(element)
    for child in element.iterdescendants(etree.Element):
        text = (child.text or "").strip()
        if text:
            return text
    return ""


def first_text(scope: etree._Element, names: Iterable[str], default: str = "") -> str:
    element = find_first_of(scope, names)
    if element is None:
        return default
    return element_text(element)


def has_element(root: etree._Element, name: str) -> bool:
    return local_name(root) == name or find_first(root, name) is not None


def parse_total_value(raw: str | None) -> Decimal:
    """Parse a monetary amount; anything unusable becomes zero.

    Unusable covers text that is not a number, NaN/infinity, negatives and
    amounts too large for a NUMERIC(18, 2) column.
    """
    if not raw:
        return Decimal("0.00")
    try:
        value = Decimal(raw.strip())
        if not value.is_finite() or value < 0 or value >= MAX_TOTAL_VALUE:
            return Decimal("0.00")
        return value.quantize(_CENTS)
    except InvalidOperation:
        return Decimal("0.00")


def parse_issue_date(raw: str | None) -> datetime:
    """Parse an ISO-8601 timestamp or date; fall back to the current UTC time."""
    if raw:
        try:
            parsed = datetime.fromisoformat(raw.strip())
        except ValueError:
            parsed = None
        if parsed is not None:
            if parsed.tzinfo is None:
                return parsed.replace(tzinfo=UTC)
            return parsed.astimezone(UTC)
    return datetime.now(UTC)


class BaseDocumentSchema(ABC):
    """Contract for one fiscal schema family."""

    document_type: ClassVar[DocumentType]

    @abstractmethod
    def matches(self, root: etree._Element) -> bool:
        """Return True when the parsed tree belongs to this schema family."""

    @abstractmethod
    def extract_document_key(self, root: etree._Element) -> str:
        """Read the business-unique key of the document."""

    def extract(self, root: etree._Element) -> ExtractedDocument:
        """Build the canonical field set. Missing optional fields never raise."""
        emitter = self._extract_emitter(root)
        recipient = self._extract_recipient(root)
        return ExtractedDocument(
            document_type=self.document_type,
            document_key=self.extract_document_key(root),
            emitter_tax_id=emitter.tax_id,
            emitter_name=emitter.name,
            emitter_region=emitter.region,
            recipient_tax_id=recipient.tax_id,
            recipient_name=recipient.name,
            total_value=self._extract_total_value(root),
            issue_date=self._extract_issue_date(root),
        )

    def _extract_emitter(self, root: etree._Element) -> Party:
        block = find_first_of(root, EMITTER_BLOCKS)
        if block is None:
            return Party()
        return Party(
            tax_id=first_text(block, ("CNPJ",)),
            name=first_text(block, ("xNome", "RazaoSocial")),
            region=first_text(block, ("UF",)),
        )

    def _extract_recipient(self, root: etree._Element) -> Party:
        block = find_first_of(root, RECIPIENT_BLOCKS)
        if block is None:
            return Party()
        return Party(
            tax_id=first_text(block, ("CNPJ", "CPF")),
            name=first_text(block, ("xNome", "RazaoSocial")),
        )

    def _extract_total_value(self, root: etree._Element) -> Decimal:
        element = find_first_of(root, TOTAL_VALUE_TAGS)
        return parse_total_value(leaf_text(element) if element is not None else None)

    def _extract_issue_date(self, root: etree._Element) -> datetime:
        element = find_first_of(root, ISSUE_DATE_TAGS)
        return parse_issue_date(element_text(element) if element is not None else None)


class PrefixedKeySchema(BaseDocumentSchema):
    """Schema whose key is an ``Id`` attribute carrying a literal prefix."""

    info_tag: ClassVar[str]
    key_prefix: ClassVar[str]

    def extract_document_key(self, root: etree._Element) -> str:
        info = root if local_name(root) == self.info_tag else find_first(root, self.info_tag)
        if info is None:
            return ""
        return (info.get("Id") or "").removeprefix(self.key_prefix)
