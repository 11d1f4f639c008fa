"""Domain event emitted once per newly stored fiscal document.

Wire shape (JSON)::

    {"documentId", "documentType", "documentKey",
     "emitterTaxId", "totalValue", "processedAt"}

``totalValue`` is written as a decimal string ("1500.00") so amounts keep
every digit; decoding also accepts a JSON number.

Delivery is at-least-once, so consumers must handle the same event more than
once without side effects piling up.
"""

import json
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from fiscaldoc.database.models import FiscalDocument
from fiscaldoc.messaging.exceptions import EventDecodeError

DOCUMENT_PROCESSED_ROUTING_KEY = "fiscal.document.processed"

_REQUIRED_FIELDS = (
    "documentId",
    "documentType",
    "documentKey",
    "emitterTaxId",
    "totalValue",
    "processedAt",
)


@dataclass(frozen=True)
class DocumentProcessedEvent:
    document_id: uuid.UUID
    document_type: str
    document_key: str
    emitter_tax_id: str
    total_value: Decimal
    processed_at: datetime

    @classmethod
    def from_document(
        cls,
        document: FiscalDocument,
        processed_at: datetime | None = None,
    ) -> "DocumentProcessedEvent":
        return cls(
            document_id=document.id,
            document_type=document.document_type,
            document_key=document.document_key,
            emitter_tax_id=document.emitter_tax_id,
            total_value=document.total_value,
            processed_at=processed_at or datetime.now(UTC),
        )

    def to_message(self) -> dict[str, Any]:
        """JSON-ready dict using the camelCase wire names."""
        return {
            "documentId": str(self.document_id),
            "documentType": self.document_type,
            "documentKey": self.document_key,
            "emitterTaxId": self.emitter_tax_id,
            "totalValue": f"{self.total_value:f}",
            "processedAt": self.processed_at.isoformat(),
        }


def parse_event(body: bytes) -> DocumentProcessedEvent:
    """Decode a delivered message body.

    Raises:
        EventDecodeError: if the body is not UTF-8 JSON with every wire field
            present and well-typed.
    """
    try:
        data = json.loads(body.decode("utf-8"), parse_float=Decimal)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise EventDecodeError(f"Message body is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise EventDecodeError("Message body must be a JSON object")

    missing = [name for name in _REQUIRED_FIELDS if name not in data]
    if missing:
        raise EventDecodeError(f"Missing event fields: {', '.join(missing)}")

    return DocumentProcessedEvent(
        document_id=_parse_uuid(data["documentId"]),
        document_type=_require_str(data, "documentType"),
        document_key=_require_str(data, "documentKey"),
        emitter_tax_id=_require_str(data, "emitterTaxId"),
        total_value=_parse_decimal(data["totalValue"]),
        processed_at=_parse_timestamp(data["processedAt"]),
    )


def _require_str(data: dict[str, Any], name: str) -> str:
    value = data[name]
    if not isinstance(value, str):
        raise EventDecodeError(f"'{name}' must be a string")
    return value


def _parse_uuid(raw: Any) -> uuid.UUID:
    if not isinstance(raw, str):
        raise EventDecodeError("'documentId' must be a string")
    try:
        return uuid.UUID(raw)
    except ValueError as exc:
        raise EventDecodeError(f"'documentId' is not a UUID: {raw}") from exc


def _parse_decimal(raw: Any) -> Decimal:
    if isinstance(raw, bool) or not isinstance(raw, (int, Decimal, str)):
        raise EventDecodeError("'totalValue' must be a number")
    try:
        return Decimal(str(raw)).quantize(Decimal("0.01"))
    except InvalidOperation as exc:
        raise EventDecodeError(f"'totalValue' is not a number: {raw}") from exc


def _parse_timestamp(raw: Any) -> datetime:
    if not isinstance(raw, str):
        raise EventDecodeError("'processedAt' must be a string")
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise EventDecodeError(f"'processedAt' is not ISO-8601: {raw}") from exc
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)
