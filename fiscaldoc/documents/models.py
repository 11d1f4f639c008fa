import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Generic, TypeVar

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class DocumentListRequest:
    start_date: datetime | None = None
    end_date: datetime | None = None
    tax_id: str | None = None
    region: str | None = None
    document_type: str | None = None
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class UpdateDocumentRequest:
    emitter_name: str | None = None
    recipient_name: str | None = None
    processing_status: str | None = None
    additional_data: str | None = None


@dataclass(frozen=True)
class DocumentSummary:
    document_id: uuid.UUID
    document_type: str
    emitter_tax_id: str
    emitter_name: str
    total_value: Decimal
    issue_date: datetime
    created_at: datetime


@dataclass(frozen=True)
class DocumentDetail:
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
    created_at: datetime
    updated_at: datetime | None
    processing_status: str | None
    additional_data: str | None


@dataclass(frozen=True)
class PagedResult(Generic[T]):
    items: list[T] = field(default_factory=list)
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE
    total_count: int = 0

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size) if self.page_size else 0
