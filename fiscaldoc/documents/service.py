import uuid

from fiscaldoc.database.models import DocumentFilters, FiscalDocument
from fiscaldoc.database.repositories.fiscal_document_repository import (
    FiscalDocumentRepository,
)
from fiscaldoc.documents.models import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    MIN_PAGE_SIZE,
    DocumentDetail,
    DocumentListRequest,
    DocumentSummary,
    PagedResult,
    UpdateDocumentRequest,
)
from fiscaldoc.logging.logger import Log
from fiscaldoc.security.base import BaseEncryptor


class DocumentService:
    """Read, update and delete operations over stored fiscal documents."""

    def __init__(self, repository: FiscalDocumentRepository, encryptor: BaseEncryptor) -> None:
        self._repository = repository
        self._encryptor = encryptor

    def list_documents(self, request: DocumentListRequest) -> PagedResult[DocumentSummary]:
        page = request.page if request.page >= 1 else DEFAULT_PAGE
        page_size = (
            request.page_size
            if MIN_PAGE_SIZE <= request.page_size <= MAX_PAGE_SIZE
            else DEFAULT_PAGE_SIZE
        )
        filters = DocumentFilters(
            start_date=request.start_date,
            end_date=request.end_date,
            tax_id=request.tax_id,
            region=request.region,
            document_type=request.document_type,
        )
        items, total_count = self._repository.get_paged(page, page_size, filters)
        return PagedResult(
            items=[self._to_summary(document) for document in items],
            page=page,
            page_size=page_size,
            total_count=total_count,
        )

    def get_document(self, document_id: uuid.UUID) -> DocumentDetail | None:
        document = self._repository.get_by_id(document_id)
        if document is None:
            return None
        return self._to_detail(document)

    def update_document(self, document_id: uuid.UUID, request: UpdateDocumentRequest) -> bool:
        document = self._repository.get_by_id(document_id)
        if document is None:
            return False
        document.update(
            emitter_name=request.emitter_name,
            recipient_name=request.recipient_name,
            processing_status=request.processing_status,
            additional_data=request.additional_data,
        )
        self._repository.update(document)
        self._repository.commit()
        Log.info(f"Document {document_id} updated")
        return True

    def delete_document(self, document_id: uuid.UUID) -> bool:
        document = self._repository.get_by_id(document_id)
        if document is None:
            return False
        self._repository.delete(document)
        self._repository.commit()
        Log.info(f"Document {document_id} deleted")
        return True

    def read_original_xml(self, document_id: uuid.UUID) -> str | None:
        """Decrypt and return the payload exactly as it was submitted."""
        document = self._repository.get_by_id(document_id)
        if document is None:
            return None
        return self._encryptor.decrypt(document.encrypted_payload)

    @staticmethod
    def _to_summary(document: FiscalDocument) -> DocumentSummary:
        return DocumentSummary(
            document_id=document.id,
            document_type=document.document_type,
            emitter_tax_id=document.emitter_tax_id,
            emitter_name=document.emitter_name,
            total_value=document.total_value,
            issue_date=document.issue_date,
            created_at=document.created_at,
        )

    @staticmethod
    def _to_detail(document: FiscalDocument) -> DocumentDetail:
        return DocumentDetail(
            id=document.id,
            document_type=document.document_type,
            document_key=document.document_key,
            emitter_tax_id=document.emitter_tax_id,
            emitter_name=document.emitter_name,
            emitter_region=document.emitter_region,
            recipient_tax_id=document.recipient_tax_id,
            recipient_name=document.recipient_name,
            total_value=document.total_value,
            issue_date=document.issue_date,
            created_at=document.created_at,
            updated_at=document.updated_at,
            processing_status=document.processing_status,
            additional_data=document.additional_data,
        )
