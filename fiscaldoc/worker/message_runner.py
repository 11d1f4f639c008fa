from collections.abc import Callable
from enum import Enum

from fiscaldoc.logging.logger import Log
from fiscaldoc.messaging.events import DocumentProcessedEvent, parse_event
from fiscaldoc.messaging.exceptions import EventDecodeError
from fiscaldoc.messaging.models import Delivery
from fiscaldoc.worker.exceptions import RetryExhaustedError
from fiscaldoc.worker.handlers import BaseEventHandler
from fiscaldoc.worker.retry import RetryPolicy

RejectionHook = Callable[[DocumentProcessedEvent, BaseException], None]


class DeliveryState(str, Enum):
    RECEIVED = "received"
    PROCESSING = "processing"
    ACKED = "acked"
    REJECTED = "rejected"


class MessageRunner:
    """Run one delivery through decode -> handle-with-retry -> settle.

    Every delivery ends Acked or Rejected and is settled exactly once.
    Rejection never requeues, so a poison message cannot loop forever; where
    it ends up (dropped or dead-lettered) depends on the broker topology.
    """

    def __init__(
        self,
        handler: BaseEventHandler,
        retry_policy: RetryPolicy,
        on_rejected: RejectionHook | None = None,
    ) -> None:
        self._handler = handler
        self._retry_policy = retry_policy
        self._on_rejected = on_rejected

    def run(self, delivery: Delivery) -> DeliveryState:
        Log.info(
            f"Received message {delivery.delivery_tag}"
            + (" (redelivered)" if delivery.redelivered else "")
        )
        try:
            event = parse_event(delivery.body)
        except EventDecodeError as exc:
            Log.error(f"Discarding undecodable message {delivery.delivery_tag}: {exc}")
            delivery.nack(requeue=False)
            return DeliveryState.REJECTED

        Log.debug(f"Message {delivery.delivery_tag} -> {DeliveryState.PROCESSING.value}")
        try:
            self._retry_policy.execute(self._handler.handle, event)
        except RetryExhaustedError as exc:
            Log.error(
                f"Message {delivery.delivery_tag} for document {event.document_id} "
                f"rejected after {exc.attempts} attempts: {exc.last_error}"
            )
            delivery.nack(requeue=False)
            self._notify_rejected(event, exc.last_error)
            return DeliveryState.REJECTED

        delivery.ack()
        Log.info(f"Message {delivery.delivery_tag} for document {event.document_id} acked")
        return DeliveryState.ACKED

    def _notify_rejected(self, event: DocumentProcessedEvent, error: BaseException) -> None:
        if self._on_rejected is None:
            return
        try:
            self._on_rejected(event, error)
        except Exception:
            Log.exception(f"Rejection hook failed for document {event.document_id}")
