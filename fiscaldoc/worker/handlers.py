from abc import ABC, abstractmethod
from collections.abc import Callable

from fiscaldoc.database.models import FiscalDocument, ProcessingStatus
from fiscaldoc.database.repositories.fiscal_document_repository import (
    FiscalDocumentRepository,
)
from fiscaldoc.logging.logger import Log
from fiscaldoc.messaging.events import DocumentProcessedEvent


class BaseEventHandler(ABC):
    """Contract for side effects triggered by a processed-document event."""

    @abstractmethod
    def handle(self, event: DocumentProcessedEvent) -> None:
        """Apply the side effect. Must be safe to run again for the same event."""


def format_tax_id(tax_id: str) -> str:
    """Format a 14-digit CNPJ as 12.345.678/0001-95; anything else is unchanged."""
    if not tax_id or len(tax_id) != 14 or not tax_id.isdigit():
        return tax_id
    return f"{tax_id[:2]}.{tax_id[2:5]}.{tax_id[5:8]}/{tax_id[8:12]}-{tax_id[12:]}"


def build_summary(event: DocumentProcessedEvent) -> str:
    return "\n".join(
        [
            "New document processed",
            f"ID: {event.document_id}",
            f"Type: {event.document_type}",
            f"Emitter tax id: {format_tax_id(event.emitter_tax_id)}",
            f"Key: {event.document_key}",
            f"Total value: {event.total_value:,.2f}",
            f"Processed at: {event.processed_at:%d/%m/%Y %H:%M:%S}",
        ]
    )


class DocumentEventHandler(BaseEventHandler):
    """Logs a document summary and moves the stored record out of Pending."""

    def __init__(
        self,
        repository_factory: Callable[[], FiscalDocumentRepository] = FiscalDocumentRepository,
    ) -> None:
        self._repository_factory = repository_factory

    def handle(self, event: DocumentProcessedEvent) -> None:
        Log.info(
            f"Processing document {event.document_id}, type {event.document_type}, "
            f"tax id {event.emitter_tax_id}, value {event.total_value}"
        )
        Log.info(f"Summary:\n{build_summary(event)}")
        self._transition(event, FiscalDocument.mark_processed)

    def mark_rejected(self, event: DocumentProcessedEvent, error: BaseException) -> None:
        """Record a terminal handling failure on the stored document."""
        Log.error(f"Marking document {event.document_id} as failed: {error}")
        self._transition(event, FiscalDocument.mark_error)

    def _transition(
        self,
        event: DocumentProcessedEvent,
        mark: Callable[[FiscalDocument], None],
    ) -> None:
        repository = self._repository_factory()
        document = repository.get_by_id(event.document_id)
        if document is None:
            Log.warning(f"Document {event.document_id} not found, skipping status update")
            return
        if document.processing_status != ProcessingStatus.PENDING:
            Log.info(
                f"Document {event.document_id} already {document.processing_status}, "
                "leaving status unchanged"
            )
            return
        mark(document)
        repository.update(document)
        repository.commit()
