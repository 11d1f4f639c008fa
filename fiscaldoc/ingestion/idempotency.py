from fiscaldoc.database.repositories.fiscal_document_repository import (
    FiscalDocumentRepository,
)
from fiscaldoc.ingestion.models import IdempotencyDecision, IdempotencyStatus

_NEW = IdempotencyDecision(IdempotencyStatus.NEW)


class IdempotencyGate:
    """Two guard clauses run in order: content hash first, then business key."""

    def __init__(self, repository: FiscalDocumentRepository) -> None:
        self._repository = repository

    def check_hash(self, content_hash: str) -> IdempotencyDecision:
        existing = self._repository.get_by_hash(content_hash)
        if existing is None:
            return _NEW
        return IdempotencyDecision(IdempotencyStatus.DUPLICATE_BY_HASH, existing.id)

    def check_key(self, document_key: str) -> IdempotencyDecision:
        existing = self._repository.get_by_key(document_key)
        if existing is None:
            return _NEW
        return IdempotencyDecision(IdempotencyStatus.DUPLICATE_BY_KEY, existing.id)
