import uuid
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from fiscaldoc.database.models import DocumentFilters, FiscalDocument
from fiscaldoc.documents.models import DocumentListRequest, PagedResult, UpdateDocumentRequest
from fiscaldoc.documents.service import DocumentService


def _make_document() -> FiscalDocument:
    return FiscalDocument.create(
        document_type="NFe",
        document_key="KEY",
        emitter_tax_id="12345678000195",
        emitter_name="Empresa Emitente",
        emitter_region="SP",
        recipient_tax_id="98765432000110",
        recipient_name="Cliente",
        total_value=Decimal("10.00"),
        issue_date=datetime(2023, 3, 15, tzinfo=UTC),
        encrypted_payload="cipher",
        content_hash="a" * 64,
    )


def _make_service(document: FiscalDocument | None = None) -> tuple[
    DocumentService, MagicMock, MagicMock
]:
    repository = MagicMock()
    repository.get_by_id.return_value = document
    repository.get_paged.return_value = ([], 0)
    encryptor = MagicMock()
    encryptor.decrypt.return_value = "<NFe/>"
    return DocumentService(repository, encryptor), repository, encryptor


class TestListDocuments:
    def test_passes_filters_and_paging(self) -> None:
        document = _make_document()
        service, repository, _e = _make_service()
        repository.get_paged.return_value = ([document], 21)
        request = DocumentListRequest(tax_id="12345678000195", region="SP", page=2, page_size=10)

        result = service.list_documents(request)

        page, page_size, filters = repository.get_paged.call_args[0]
        assert (page, page_size) == (2, 10)
        assert filters == DocumentFilters(tax_id="12345678000195", region="SP")
        assert result.total_count == 21
        assert result.total_pages == 3
        assert result.items[0].document_id == document.id
        assert result.items[0].emitter_name == "Empresa Emitente"

    @pytest.mark.parametrize(
        ("page", "page_size", "expected"),
        [(0, 10, (1, 10)), (-3, 50, (1, 50)), (1, 0, (1, 10)), (1, 101, (1, 10)), (4, 100, (4, 100))],
    )
    def test_clamps_paging(self, page: int, page_size: int, expected: tuple[int, int]) -> None:
        service, repository, _e = _make_service()

        result = service.list_documents(DocumentListRequest(page=page, page_size=page_size))

        assert repository.get_paged.call_args[0][:2] == expected
        assert (result.page, result.page_size) == expected


class TestPagedResult:
    def test_total_pages_rounds_up(self) -> None:
        assert PagedResult(page_size=10, total_count=0).total_pages == 0
        assert PagedResult(page_size=10, total_count=10).total_pages == 1
        assert PagedResult(page_size=10, total_count=11).total_pages == 2


class TestGetDocument:
    def test_returns_detail(self) -> None:
        document = _make_document()
        service, _r, _e = _make_service(document)

        detail = service.get_document(document.id)

        assert detail is not None
        assert detail.id == document.id
        assert detail.document_key == "KEY"
        assert detail.processing_status == "Pending"

    def test_returns_none_when_missing(self) -> None:
        service, _r, _e = _make_service(None)
        assert service.get_document(uuid.uuid4()) is None


class TestUpdateDocument:
    def test_updates_and_commits(self) -> None:
        document = _make_document()
        service, repository, _e = _make_service(document)

        updated = service.update_document(
            document.id, UpdateDocumentRequest(emitter_name="Novo", processing_status="")
        )

        assert updated is True
        assert document.emitter_name == "Novo"
        assert document.processing_status == "Pending"
        repository.update.assert_called_once_with(document)
        repository.commit.assert_called_once()

    def test_missing_document_returns_false(self) -> None:
        service, repository, _e = _make_service(None)

        assert service.update_document(uuid.uuid4(), UpdateDocumentRequest()) is False
        repository.commit.assert_not_called()


class TestDeleteDocument:
    def test_deletes_and_commits(self) -> None:
        document = _make_document()
        service, repository, _e = _make_service(document)

        assert service.delete_document(document.id) is True
        repository.delete.assert_called_once_with(document)
        repository.commit.assert_called_once()

    def test_missing_document_returns_false(self) -> None:
        service, repository, _e = _make_service(None)

        assert service.delete_document(uuid.uuid4()) is False
        repository.delete.assert_not_called()


class TestReadOriginalXml:
    def test_decrypts_stored_payload(self) -> None:
        document = _make_document()
        service, _r, encryptor = _make_service(document)

        assert service.read_original_xml(document.id) == "<NFe/>"
        encryptor.decrypt.assert_called_once_with("cipher")

    def test_returns_none_when_missing(self) -> None:
        service, _r, encryptor = _make_service(None)

        assert service.read_original_xml(uuid.uuid4()) is None
        encryptor.decrypt.assert_not_called()
