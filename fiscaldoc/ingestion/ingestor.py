"""Ingestion coordinator for submitted fiscal XML documents.

Pipeline: read -> hash -> dedup by hash -> encrypt -> classify/extract ->
dedup by key -> persist -> publish.

Each step runs only if the previous one succeeded. Fatal errors (unreadable
stream, malformed or unrecognised XML) abort before anything is written. A
publish failure after the commit is logged and does not undo the record, so
consumers may miss that event.
"""

from typing import IO, Any

from fiscaldoc.database.exceptions import DuplicateDocumentError
from fiscaldoc.database.models import FiscalDocument
from fiscaldoc.database.repositories.fiscal_document_repository import (
    FiscalDocumentRepository,
)
from fiscaldoc.ingestion.exceptions import (
    DocumentProcessingError,
    InvalidUploadError,
    StreamReadError,
)
from fiscaldoc.ingestion.idempotency import IdempotencyGate
from fiscaldoc.ingestion.models import IdempotencyDecision, IngestResult
from fiscaldoc.logging.logger import Log
from fiscaldoc.messaging.events import DOCUMENT_PROCESSED_ROUTING_KEY, DocumentProcessedEvent
from fiscaldoc.messaging.exceptions import PublishError
from fiscaldoc.messaging.publisher import BaseMessagePublisher
from fiscaldoc.security.base import BaseEncryptor
from fiscaldoc.xml.classifier import XmlClassifier, compute_hash
from fiscaldoc.xml.exceptions import XmlExtractionError
from fiscaldoc.xml.models import ExtractedDocument


class DocumentIngestor:
    """Turns one XML submission into at most one stored record and one event.

    Not reentrant: use one instance per request, since the repository stages
    writes until commit.
    """

    def __init__(
        self,
        repository: FiscalDocumentRepository,
        classifier: XmlClassifier,
        encryptor: BaseEncryptor,
        publisher: BaseMessagePublisher,
    ) -> None:
        self._repository = repository
        self._gate = IdempotencyGate(repository)
        self._classifier = classifier
        self._encryptor = encryptor
        self._publisher = publisher

    def ingest(self, xml_stream: IO[Any], filename: str) -> IngestResult:
        """Ingest one submission.

        Raises:
            InvalidUploadError: if the filename is not .xml or the content is blank.
            StreamReadError: if the stream cannot be read or decoded.
            DocumentProcessingError: if the XML is malformed or unrecognised.
        """
        self._validate_filename(filename)
        content = self._read_content(xml_stream)
        if not content.strip():
            raise InvalidUploadError("XML file not provided or empty")

        content_hash = compute_hash(content)
        decision = self._gate.check_hash(content_hash)
        if decision.is_duplicate:
            return self._duplicate(decision, f"hash {content_hash}")

        encrypted_payload = self._encryptor.encrypt(content)
        extracted = self._extract(content, filename)

        if not extracted.document_key:
            Log.warning("Upload has an empty document key", filename=filename)
        decision = self._gate.check_key(extracted.document_key)
        if decision.is_duplicate:
            return self._duplicate(decision, f"key {extracted.document_key}")

        document = self._build_document(extracted, encrypted_payload, content_hash)
        try:
            self._repository.add(document)
            self._repository.commit()
        except DuplicateDocumentError:
            # Lost the race between the key lookup and the insert.
            decision = self._gate.check_key(extracted.document_key)
            if not decision.is_duplicate:
                raise
            return self._duplicate(decision, f"key {extracted.document_key} (insert conflict)")

        self._publish(document)
        Log.info(
            f"New document {document.id} created successfully",
            document_type=document.document_type,
            document_key=document.document_key,
        )
        return IngestResult.created(document.id)

    @staticmethod
    def _validate_filename(filename: str) -> None:
        if not filename or not filename.lower().endswith(".xml"):
            raise InvalidUploadError(f"File must be of type XML, got '{filename}'")

    @staticmethod
    def _read_content(xml_stream: IO[Any]) -> str:
        try:
            raw = xml_stream.read()
        except OSError as exc:
            raise StreamReadError(f"Unable to read XML stream: {exc}") from exc
        if isinstance(raw, bytes):
            try:
                return raw.decode("utf-8-sig")
            except UnicodeDecodeError as exc:
                raise StreamReadError(f"XML stream is not valid UTF-8: {exc}") from exc
        return raw

    def _extract(self, content: str, filename: str) -> ExtractedDocument:
        try:
            return self._classifier.classify_and_extract(content)
        except XmlExtractionError as exc:
            Log.error(f"Error processing XML: {exc}", filename=filename)
            raise DocumentProcessingError(f"Error processing XML: {exc}") from exc

    @staticmethod
    def _build_document(
        extracted: ExtractedDocument,
        encrypted_payload: str,
        content_hash: str,
    ) -> FiscalDocument:
        return FiscalDocument.create(
            document_type=extracted.document_type.value,
            document_key=extracted.document_key,
            emitter_tax_id=extracted.emitter_tax_id,
            emitter_name=extracted.emitter_name,
            emitter_region=extracted.emitter_region,
            recipient_tax_id=extracted.recipient_tax_id,
            recipient_name=extracted.recipient_name,
            total_value=extracted.total_value,
            issue_date=extracted.issue_date,
            encrypted_payload=encrypted_payload,
            content_hash=content_hash,
        )

    def _publish(self, document: FiscalDocument) -> None:
        event = DocumentProcessedEvent.from_document(document)
        try:
            self._publisher.publish(event.to_message(), DOCUMENT_PROCESSED_ROUTING_KEY)
        except PublishError as exc:
            Log.warning(
                f"Document {document.id} stored but its event was not published: {exc}"
            )

    @staticmethod
    def _duplicate(decision: IdempotencyDecision, reason: str) -> IngestResult:
        Log.info(f"Document with {reason} already exists as {decision.existing_id}. Skipping.")
        return IngestResult.duplicate(decision)
