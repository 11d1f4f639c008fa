import time

import pika
from pika.adapters.blocking_connection import BlockingChannel
from pika.exceptions import AMQPError

from fiscaldoc.config.settings import Settings
from fiscaldoc.logging.logger import Log
from fiscaldoc.messaging.exceptions import BrokerConnectionError


class RabbitMQConnection:
    """Owns one broker connection and its single channel.

    Open once, reuse for every publish/consume call, close on shutdown. The
    underlying blocking connection is not thread-safe, so an instance must not
    be shared between independently scheduled operations.
    """

    def __init__(self, settings: Settings) -> None:
        self._parameters = pika.ConnectionParameters(
            host=settings.rabbitmq_host,
            port=settings.rabbitmq_port,
            credentials=pika.PlainCredentials(
                settings.rabbitmq_username,
                settings.rabbitmq_password,
            ),
            heartbeat=settings.rabbitmq_heartbeat_seconds,
        )
        self._connection: pika.BlockingConnection | None = None
        self._channel: BlockingChannel | None = None

    @property
    def is_open(self) -> bool:
        return (
            self._connection is not None
            and self._connection.is_open
            and self._channel is not None
            and self._channel.is_open
        )

    @property
    def channel(self) -> BlockingChannel:
        if not self.is_open or self._channel is None:
            raise RuntimeError("Broker connection not open. Call open() first.")
        return self._channel

    def open(self) -> None:
        """Connect and create the channel. No-op when already open."""
        if self.is_open:
            return
        try:
            self._connection = pika.BlockingConnection(self._parameters)
            self._channel = self._connection.channel()
        except AMQPError as exc:
            self._connection = None
            self._channel = None
            raise BrokerConnectionError(
                f"Unable to connect to RabbitMQ at "
                f"{self._parameters.host}:{self._parameters.port}: {exc!r}"
            ) from exc
        Log.info(f"Connected to RabbitMQ at {self._parameters.host}:{self._parameters.port}")

    def sleep(self, seconds: float) -> None:
        """Wait while servicing broker I/O, so heartbeats continue during backoff.

        Falls back to a plain sleep when no connection is open.
        """
        if self._connection is None or not self._connection.is_open:
            time.sleep(seconds)
            return
        self._connection.sleep(seconds)

    def close(self) -> None:
        channel, connection = self._channel, self._connection
        self._channel = None
        self._connection = None
        try:
            if channel is not None and channel.is_open:
                channel.close()
            if connection is not None and connection.is_open:
                connection.close()
        except AMQPError as exc:
            Log.warning(f"Error while closing RabbitMQ connection: {exc!r}")

    def __enter__(self) -> "RabbitMQConnection":
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
