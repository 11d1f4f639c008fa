import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal

DOCUMENT_TYPE_MAX_LENGTH = 100
DOCUMENT_KEY_MAX_LENGTH = 50
TAX_ID_MAX_LENGTH = 14
NAME_MAX_LENGTH = 200
REGION_MAX_LENGTH = 2
HASH_LENGTH = 64


class ProcessingStatus:
    PENDING = "Pending"
    PROCESSED = "Processed"
    ERROR = "Error"


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class FiscalDocument:
    """Represents a row from the fiscal_documents table."""

    id: uuid.UUID
    document_type: str
    document_key: str
    emitter_tax_id: str
    emitter_name: str
    emitter_region: str
    recipient_tax_id: str
    recipient_name: str
    total_value: Decimal
    issue_date: datetime
    encrypted_payload: str
    content_hash: str
    processing_status: str | None = ProcessingStatus.PENDING
    additional_data: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime | None = None

    @classmethod
    def create(
        cls,
        *,
        document_type: str,
        document_key: str,
        emitter_tax_id: str,
        emitter_name: str,
        emitter_region: str,
        recipient_tax_id: str,
        recipient_name: str,
        total_value: Decimal,
        issue_date: datetime,
        encrypted_payload: str,
        content_hash: str,
    ) -> "FiscalDocument":
        """Build a new Pending document with a fresh identifier."""
        return cls(
            id=uuid.uuid4(),
            document_type=document_type,
            document_key=document_key,
            emitter_tax_id=emitter_tax_id,
            emitter_name=emitter_name,
            emitter_region=emitter_region,
            recipient_tax_id=recipient_tax_id,
            recipient_name=recipient_name,
            total_value=total_value,
            issue_date=issue_date,
            encrypted_payload=encrypted_payload,
            content_hash=content_hash,
        )

    def update(
        self,
        emitter_name: str | None = None,
        recipient_name: str | None = None,
        processing_status: str | None = None,
        additional_data: str | None = None,
    ) -> None:
        """Overwrite the editable fields. Blank arguments leave a field unchanged."""
        if emitter_name and emitter_name.strip():
            self.emitter_name = emitter_name
        if recipient_name and recipient_name.strip():
            self.recipient_name = recipient_name
        if processing_status and processing_status.strip():
            self.processing_status = processing_status
        if additional_data and additional_data.strip():
            self.additional_data = additional_data
        self.updated_at = _utcnow()

    def mark_processed(self) -> None:
        self.processing_status = ProcessingStatus.PROCESSED
        self.updated_at = _utcnow()

    def mark_error(self) -> None:
        self.processing_status = ProcessingStatus.ERROR
        self.updated_at = _utcnow()


@dataclass(frozen=True)
class DocumentFilters:
    """Optional criteria for paged listing. Empty values are ignored."""

    start_date: datetime | None = None
    end_date: datetime | None = None
    tax_id: str | None = None
    region: str | None = None
    document_type: str | None = None
