import uuid
from dataclasses import dataclass
from enum import Enum


class IdempotencyStatus(str, Enum):
    NEW = "new"
    DUPLICATE_BY_HASH = "duplicate-by-hash"
    DUPLICATE_BY_KEY = "duplicate-by-key"


@dataclass(frozen=True)
class IdempotencyDecision:
    status: IdempotencyStatus
    existing_id: uuid.UUID | None = None

    @property
    def is_duplicate(self) -> bool:
        return self.status is not IdempotencyStatus.NEW


@dataclass(frozen=True)
class IngestResult:
    """Outcome of one submission. Duplicates are successful outcomes too."""

    document_id: uuid.UUID
    is_new: bool
    message: str

    CREATED = "created"

    @classmethod
    def created(cls, document_id: uuid.UUID) -> "IngestResult":
        return cls(document_id=document_id, is_new=True, message=cls.CREATED)

    @classmethod
    def duplicate(cls, decision: IdempotencyDecision) -> "IngestResult":
        if decision.existing_id is None or not decision.is_duplicate:
            raise ValueError("duplicate result requires an existing document id")
        return cls(
            document_id=decision.existing_id,
            is_new=False,
            message=decision.status.value,
        )
