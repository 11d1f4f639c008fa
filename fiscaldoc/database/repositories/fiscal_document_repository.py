import uuid
from dataclasses import dataclass
from typing import Any

from psycopg import errors
from psycopg.rows import dict_row

from fiscaldoc.database.connection import get_connection
from fiscaldoc.database.exceptions import DocumentNotFoundError, DuplicateDocumentError
from fiscaldoc.database.models import DocumentFilters, FiscalDocument

_COLUMNS = """
    id, document_type, document_key, emitter_tax_id, emitter_name,
    emitter_region, recipient_tax_id, recipient_name, total_value,
    issue_date, encrypted_payload, content_hash, processing_status,
    additional_data, created_at, updated_at
"""


@dataclass(frozen=True)
class _StagedWrite:
    query: str
    params: tuple[Any, ...]
    document_id: uuid.UUID
    requires_row: bool = False


class FiscalDocumentRepository:
    """Database operations for the fiscal_documents table.

    Reads hit the database immediately. ``add``, ``update`` and ``delete``
    only stage a write; ``commit`` applies every staged write in a single
    transaction. An instance holds staged state, so it must not be shared
    between concurrent units of work.
    """

    def __init__(self) -> None:
        self._pending: list[_StagedWrite] = []

    def get_by_id(self, document_id: uuid.UUID) -> FiscalDocument | None:
        return self._fetch_one("id = %s", (document_id,))

    def get_by_hash(self, content_hash: str) -> FiscalDocument | None:
        return self._fetch_one("content_hash = %s", (content_hash,))

    def get_by_key(self, document_key: str) -> FiscalDocument | None:
        return self._fetch_one("document_key = %s", (document_key,))

    def get_paged(
        self,
        page: int,
        page_size: int,
        filters: DocumentFilters | None = None,
    ) -> tuple[list[FiscalDocument], int]:
        """Return one page of documents, newest first, plus the total match count."""
        where, params = self._build_filters(filters or DocumentFilters())
        offset = (page - 1) * page_size
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(f"SELECT COUNT(*) FROM fiscal_documents {where}", params)
                count_row = cur.fetchone()
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM fiscal_documents
                    {where}
                    ORDER BY created_at DESC
                    LIMIT %s OFFSET %s
                    """,
                    (*params, page_size, offset),
                )
                rows = cur.fetchall()

        total_count = int(count_row[0]) if count_row is not None else 0
        return [self._to_document(row) for row in rows], total_count

    def add(self, document: FiscalDocument) -> None:
        self._pending.append(
            _StagedWrite(
                query=f"""
                INSERT INTO fiscal_documents ({_COLUMNS})
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                params=(
                    document.id,
                    document.document_type,
                    document.document_key,
                    document.emitter_tax_id,
                    document.emitter_name,
                    document.emitter_region,
                    document.recipient_tax_id,
                    document.recipient_name,
                    document.total_value,
                    document.issue_date,
                    document.encrypted_payload,
                    document.content_hash,
                    document.processing_status,
                    document.additional_data,
                    document.created_at,
                    document.updated_at,
                ),
                document_id=document.id,
            )
        )

    def update(self, document: FiscalDocument) -> None:
        self._pending.append(
            _StagedWrite(
                query="""
                UPDATE fiscal_documents
                SET emitter_name = %s,
                    recipient_name = %s,
                    processing_status = %s,
                    additional_data = %s,
                    updated_at = %s
                WHERE id = %s
                """,
                params=(
                    document.emitter_name,
                    document.recipient_name,
                    document.processing_status,
                    document.additional_data,
                    document.updated_at,
                    document.id,
                ),
                document_id=document.id,
                requires_row=True,
            )
        )

    def delete(self, document: FiscalDocument) -> None:
        self._pending.append(
            _StagedWrite(
                query="DELETE FROM fiscal_documents WHERE id = %s",
                params=(document.id,),
                document_id=document.id,
                requires_row=True,
            )
        )

    def commit(self) -> int:
        """Apply all staged writes atomically and return the affected row count.

        Raises:
            DuplicateDocumentError: if an insert violates the document key constraint.
            DocumentNotFoundError: if a staged update or delete matched no row.
        """
        pending, self._pending = self._pending, []
        if not pending:
            return 0

        affected = 0
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    for write in pending:
                        cur.execute(write.query, write.params)
                        if write.requires_row and cur.rowcount == 0:
                            raise DocumentNotFoundError(
                                f"Document {write.document_id} not found"
                            )
                        affected += cur.rowcount
                conn.commit()
        except errors.UniqueViolation as exc:
            raise DuplicateDocumentError(f"Document key already stored: {exc}") from exc
        return affected

    def _fetch_one(self, condition: str, params: tuple[Any, ...]) -> FiscalDocument | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM fiscal_documents WHERE {condition} LIMIT 1",
                    params,
                )
                row = cur.fetchone()

        if row is None:
            return None
        return self._to_document(row)

    @staticmethod
    def _build_filters(filters: DocumentFilters) -> tuple[str, tuple[Any, ...]]:
        clauses: list[str] = []
        params: list[Any] = []
        if filters.start_date is not None:
            clauses.append("issue_date >= %s")
            params.append(filters.start_date)
        if filters.end_date is not None:
            clauses.append("issue_date <= %s")
            params.append(filters.end_date)
        if filters.tax_id and filters.tax_id.strip():
            clauses.append("(emitter_tax_id = %s OR recipient_tax_id = %s)")
            params.extend([filters.tax_id, filters.tax_id])
        if filters.region and filters.region.strip():
            clauses.append("emitter_region = %s")
            params.append(filters.region)
        if filters.document_type and filters.document_type.strip():
            clauses.append("document_type = %s")
            params.append(filters.document_type)

        if not clauses:
            return "", ()
        return "WHERE " + " AND ".join(clauses), tuple(params)

    @staticmethod
    def _to_document(row: dict[str, Any]) -> FiscalDocument:
        return FiscalDocument(
            id=row["id"],
            document_type=row["document_type"],
            document_key=row["document_key"],
            emitter_tax_id=row["emitter_tax_id"],
            emitter_name=row["emitter_name"],
            emitter_region=row["emitter_region"],
            recipient_tax_id=row["recipient_tax_id"],
            recipient_name=row["recipient_name"],
            total_value=row["total_value"],
            issue_date=row["issue_date"],
            encrypted_payload=row["encrypted_payload"],
            content_hash=row["content_hash"],
            processing_status=row["processing_status"],
            additional_data=row["additional_data"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
