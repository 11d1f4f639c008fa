import uuid
from unittest.mock import MagicMock

import pytest

from fiscaldoc.ingestion.idempotency import IdempotencyGate
from fiscaldoc.ingestion.models import IdempotencyDecision, IdempotencyStatus, IngestResult

_EXISTING_ID = uuid.UUID("22222222-2222-2222-2222-222222222222")


def _make_repository(existing_id: uuid.UUID | None) -> MagicMock:
    repository = MagicMock()
    existing = None
    if existing_id is not None:
        existing = MagicMock()
        existing.id = existing_id
    repository.get_by_hash.return_value = existing
    repository.get_by_key.return_value = existing
    return repository


class TestCheckHash:
    def test_new_when_hash_unknown(self) -> None:
        decision = IdempotencyGate(_make_repository(None)).check_hash("a" * 64)

        assert decision.status is IdempotencyStatus.NEW
        assert decision.is_duplicate is False
        assert decision.existing_id is None

    def test_duplicate_when_hash_known(self) -> None:
        repository = _make_repository(_EXISTING_ID)

        decision = IdempotencyGate(repository).check_hash("a" * 64)

        assert decision.status is IdempotencyStatus.DUPLICATE_BY_HASH
        assert decision.existing_id == _EXISTING_ID
        repository.get_by_hash.assert_called_once_with("a" * 64)


class TestCheckKey:
    def test_duplicate_when_key_known(self) -> None:
        repository = _make_repository(_EXISTING_ID)

        decision = IdempotencyGate(repository).check_key("KEY")

        assert decision.status is IdempotencyStatus.DUPLICATE_BY_KEY
        assert decision.existing_id == _EXISTING_ID
        repository.get_by_key.assert_called_once_with("KEY")

    def test_new_when_key_unknown(self) -> None:
        assert IdempotencyGate(_make_repository(None)).check_key("KEY").is_duplicate is False


class TestIngestResult:
    def test_duplicate_message_is_status_value(self) -> None:
        decision = IdempotencyDecision(IdempotencyStatus.DUPLICATE_BY_KEY, _EXISTING_ID)

        result = IngestResult.duplicate(decision)

        assert result.is_new is False
        assert result.document_id == _EXISTING_ID
        assert result.message == "duplicate-by-key"

    def test_duplicate_requires_existing_id(self) -> None:
        with pytest.raises(ValueError):
            IngestResult.duplicate(IdempotencyDecision(IdempotencyStatus.NEW))
