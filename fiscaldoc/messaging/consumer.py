from collections.abc import Generator

from pika.exchange_type import ExchangeType

from fiscaldoc.config.settings import Settings
from fiscaldoc.logging.logger import Log
from fiscaldoc.messaging.connection import RabbitMQConnection
from fiscaldoc.messaging.models import Delivery


class RabbitMQConsumer:
    """Delivers messages from a durable queue bound to the topic exchange.

    Prefetch is fixed at one, so the broker hands over the next message only
    after the current one has been acked or nacked.
    """

    PREFETCH_COUNT = 1

    def __init__(
        self,
        connection: RabbitMQConnection,
        exchange_name: str,
        queue_name: str,
        binding_key: str,
        inactivity_timeout: float = 1.0,
    ) -> None:
        self._connection = connection
        self._exchange_name = exchange_name
        self._queue_name = queue_name
        self._binding_key = binding_key
        self._inactivity_timeout = inactivity_timeout

    @classmethod
    def from_settings(
        cls, connection: RabbitMQConnection, settings: Settings
    ) -> "RabbitMQConsumer":
        return cls(
            connection,
            exchange_name=settings.rabbitmq_exchange_name,
            queue_name=settings.rabbitmq_queue_name,
            binding_key=settings.rabbitmq_binding_key,
            inactivity_timeout=settings.rabbitmq_inactivity_timeout_seconds,
        )

    def setup(self) -> None:
        """Declare the exchange, the queue and the binding, then set QoS."""
        channel = self._connection.channel
        channel.exchange_declare(
            exchange=self._exchange_name,
            exchange_type=ExchangeType.topic,
            durable=True,
            auto_delete=False,
        )
        channel.queue_declare(
            queue=self._queue_name,
            durable=True,
            exclusive=False,
            auto_delete=False,
        )
        channel.queue_bind(
            queue=self._queue_name,
            exchange=self._exchange_name,
            routing_key=self._binding_key,
        )
        channel.basic_qos(prefetch_count=self.PREFETCH_COUNT)
        Log.info(
            f"RabbitMQ consumer ready. Exchange: {self._exchange_name}, "
            f"Queue: {self._queue_name}"
        )

    def deliveries(self) -> Generator[Delivery | None, None, None]:
        """Yield deliveries as they arrive; ``None`` marks an idle tick."""
        self.setup()
        channel = self._connection.channel
        try:
            for method, _properties, body in channel.consume(
                self._queue_name,
                auto_ack=False,
                inactivity_timeout=self._inactivity_timeout,
            ):
                if method is None:
                    yield None
                    continue
                yield Delivery(
                    body=body,
                    delivery_tag=method.delivery_tag,
                    channel=channel,
                    redelivered=bool(method.redelivered),
                )
        finally:
            if channel.is_open:
                channel.cancel()
