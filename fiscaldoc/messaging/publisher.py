import json
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

import pika
from pika.exceptions import AMQPError
from pika.exchange_type import ExchangeType

from fiscaldoc.logging.logger import Log
from fiscaldoc.messaging.connection import RabbitMQConnection
from fiscaldoc.messaging.exceptions import BrokerConnectionError, PublishError


class BaseMessagePublisher(ABC):
    """Contract for fire-and-forget publishing to a durable topic."""

    @abstractmethod
    def publish(self, message: Mapping[str, Any], routing_key: str) -> None:
        """Serialize ``message`` as JSON and publish it under ``routing_key``.

        Raises:
            PublishError: if the broker did not accept the message.
        """


class RabbitMQPublisher(BaseMessagePublisher):
    """Publishes persistent JSON messages to a durable topic exchange."""

    def __init__(self, connection: RabbitMQConnection, exchange_name: str) -> None:
        self._connection = connection
        self._exchange_name = exchange_name
        self._exchange_declared = False

    def publish(self, message: Mapping[str, Any], routing_key: str) -> None:
        body = json.dumps(message).encode("utf-8")
        properties = pika.BasicProperties(
            content_type="application/json",
            delivery_mode=pika.DeliveryMode.Persistent,
            timestamp=int(time.time()),
        )
        try:
            self._connection.open()
            self._declare_exchange()
            self._connection.channel.basic_publish(
                exchange=self._exchange_name,
                routing_key=routing_key,
                body=body,
                properties=properties,
            )
        except (AMQPError, BrokerConnectionError) as exc:
            self._exchange_declared = False
            raise PublishError(
                f"Error publishing to '{self._exchange_name}' with routing key "
                f"'{routing_key}': {exc!r}"
            ) from exc
        Log.info(
            f"Message published to {self._exchange_name} with routing key {routing_key}"
        )

    def close(self) -> None:
        self._connection.close()

    def _declare_exchange(self) -> None:
        if self._exchange_declared:
            return
        self._connection.channel.exchange_declare(
            exchange=self._exchange_name,
            exchange_type=ExchangeType.topic,
            durable=True,
            auto_delete=False,
        )
        self._exchange_declared = True
