from fiscaldoc.database.connection import get_connection
from fiscaldoc.database.models import (
    DOCUMENT_KEY_MAX_LENGTH,
    DOCUMENT_TYPE_MAX_LENGTH,
    HASH_LENGTH,
    NAME_MAX_LENGTH,
    REGION_MAX_LENGTH,
    TAX_ID_MAX_LENGTH,
)

SCHEMA_SQL = f"""
CREATE TABLE IF NOT EXISTS fiscal_documents (
    id                UUID PRIMARY KEY,
    document_type     VARCHAR({DOCUMENT_TYPE_MAX_LENGTH}) NOT NULL,
    document_key      VARCHAR({DOCUMENT_KEY_MAX_LENGTH}) NOT NULL,
    emitter_tax_id    VARCHAR({TAX_ID_MAX_LENGTH}) NOT NULL,
    emitter_name      VARCHAR({NAME_MAX_LENGTH}) NOT NULL,
    emitter_region    VARCHAR({REGION_MAX_LENGTH}) NOT NULL,
    recipient_tax_id  VARCHAR({TAX_ID_MAX_LENGTH}) NOT NULL,
    recipient_name    VARCHAR({NAME_MAX_LENGTH}) NOT NULL,
    total_value       NUMERIC(18, 2) NOT NULL,
    issue_date        TIMESTAMPTZ    NOT NULL,
    encrypted_payload TEXT           NOT NULL,
    content_hash      CHAR({HASH_LENGTH}) NOT NULL,
    processing_status TEXT,
    additional_data   TEXT,
    created_at        TIMESTAMPTZ    NOT NULL,
    updated_at        TIMESTAMPTZ
);
CREATE UNIQUE INDEX IF NOT EXISTS ix_fiscal_documents_document_key
    ON fiscal_documents (document_key);
CREATE INDEX IF NOT EXISTS ix_fiscal_documents_content_hash
    ON fiscal_documents (content_hash);
CREATE INDEX IF NOT EXISTS ix_fiscal_documents_emitter_tax_id
    ON fiscal_documents (emitter_tax_id);
CREATE INDEX IF NOT EXISTS ix_fiscal_documents_emitter_region
    ON fiscal_documents (emitter_region);
CREATE INDEX IF NOT EXISTS ix_fiscal_documents_issue_date
    ON fiscal_documents (issue_date);
CREATE INDEX IF NOT EXISTS ix_fiscal_documents_created_at
    ON fiscal_documents (created_at);
"""


def ensure_schema() -> None:
    """Create the fiscal_documents table and its indexes when missing."""
    with get_connection() as conn:
        conn.execute(SCHEMA_SQL)
        conn.commit()
