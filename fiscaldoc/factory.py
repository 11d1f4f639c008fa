from fiscaldoc.config.settings import Settings
from fiscaldoc.database.repositories.fiscal_document_repository import (
    FiscalDocumentRepository,
)
from fiscaldoc.documents.service import DocumentService
from fiscaldoc.ingestion.ingestor import DocumentIngestor
from fiscaldoc.messaging.connection import RabbitMQConnection
from fiscaldoc.messaging.consumer import RabbitMQConsumer
from fiscaldoc.messaging.publisher import BaseMessagePublisher, RabbitMQPublisher
from fiscaldoc.security.aes_encryptor import AesEncryptor
from fiscaldoc.worker.handlers import DocumentEventHandler
from fiscaldoc.worker.message_runner import MessageRunner
from fiscaldoc.worker.retry import RetryPolicy
from fiscaldoc.worker.worker import Worker
from fiscaldoc.xml.classifier import XmlClassifier


def build_publisher(settings: Settings, connection: RabbitMQConnection) -> RabbitMQPublisher:
    return RabbitMQPublisher(connection, settings.rabbitmq_exchange_name)


def build_document_ingestor(
    settings: Settings,
    publisher: BaseMessagePublisher,
) -> DocumentIngestor:
    """Build a DocumentIngestor for one request. The publisher is long-lived."""
    return DocumentIngestor(
        repository=FiscalDocumentRepository(),
        classifier=XmlClassifier(),
        encryptor=AesEncryptor.from_settings(settings),
        publisher=publisher,
    )


def build_document_service(settings: Settings) -> DocumentService:
    return DocumentService(
        repository=FiscalDocumentRepository(),
        encryptor=AesEncryptor.from_settings(settings),
    )


def build_worker(settings: Settings, connection: RabbitMQConnection) -> Worker:
    """Build the consumer worker on an already opened broker connection."""
    handler = DocumentEventHandler()
    runner = MessageRunner(
        handler=handler,
        retry_policy=RetryPolicy.from_settings(settings, sleep=connection.sleep),
        on_rejected=handler.mark_rejected,
    )
    consumer = RabbitMQConsumer.from_settings(connection, settings)
    return Worker(consumer, runner)
