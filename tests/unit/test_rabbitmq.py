from unittest.mock import MagicMock, patch

import pika
import pytest
from pika.exceptions import AMQPConnectionError, AMQPError
from pika.exchange_type import ExchangeType

from fiscaldoc.config.settings import Settings
from fiscaldoc.messaging.connection import RabbitMQConnection
from fiscaldoc.messaging.consumer import RabbitMQConsumer
from fiscaldoc.messaging.exceptions import BrokerConnectionError, PublishError
from fiscaldoc.messaging.publisher import RabbitMQPublisher

_BLOCKING = "fiscaldoc.messaging.connection.pika.BlockingConnection"


def _make_settings() -> Settings:
    return Settings(_env_file=None, rabbitmq_host="broker", rabbitmq_port=5673)


def _make_open_connection() -> tuple[MagicMock, MagicMock]:
    """Return (connection, channel) mocks standing in for an open RabbitMQConnection."""
    channel = MagicMock()
    connection = MagicMock(spec=RabbitMQConnection)
    connection.channel = channel
    return connection, channel


class TestRabbitMQConnection:
    @patch(_BLOCKING)
    def test_open_creates_channel_once(self, mock_blocking: MagicMock) -> None:
        connection = RabbitMQConnection(_make_settings())

        connection.open()
        connection.open()

        mock_blocking.assert_called_once()
        params = mock_blocking.call_args[0][0]
        assert params.host == "broker"
        assert params.port == 5673
        assert connection.channel is mock_blocking.return_value.channel.return_value

    @patch(_BLOCKING)
    def test_open_failure_raises_broker_error(self, mock_blocking: MagicMock) -> None:
        mock_blocking.side_effect = AMQPConnectionError("refused")
        connection = RabbitMQConnection(_make_settings())

        with pytest.raises(BrokerConnectionError, match="broker:5673"):
            connection.open()
        assert connection.is_open is False

    def test_channel_requires_open(self) -> None:
        with pytest.raises(RuntimeError, match="not open"):
            RabbitMQConnection(_make_settings()).channel

    @patch(_BLOCKING)
    def test_context_manager_closes(self, mock_blocking: MagicMock) -> None:
        raw = mock_blocking.return_value
        channel = raw.channel.return_value

        with RabbitMQConnection(_make_settings()) as connection:
            assert connection.is_open

        channel.close.assert_called_once()
        raw.close.assert_called_once()
        assert connection.is_open is False

    @patch(_BLOCKING)
    def test_close_swallows_broker_errors(self, mock_blocking: MagicMock) -> None:
        mock_blocking.return_value.close.side_effect = AMQPError("gone")
        connection = RabbitMQConnection(_make_settings())
        connection.open()

        connection.close()

        assert connection.is_open is False

    @patch(_BLOCKING)
    def test_sleep_services_the_open_connection(self, mock_blocking: MagicMock) -> None:
        connection = RabbitMQConnection(_make_settings())
        connection.open()

        connection.sleep(4.0)

        mock_blocking.return_value.sleep.assert_called_once_with(4.0)

    @patch("fiscaldoc.messaging.connection.time.sleep")
    def test_sleep_without_connection_falls_back(self, mock_sleep: MagicMock) -> None:
        RabbitMQConnection(_make_settings()).sleep(2.0)

        mock_sleep.assert_called_once_with(2.0)


class TestRabbitMQPublisher:
    def test_publishes_persistent_json(self) -> None:
        connection, channel = _make_open_connection()
        publisher = RabbitMQPublisher(connection, "fiscal-exchange")

        publisher.publish({"documentId": "abc"}, "fiscal.document.processed")

        connection.open.assert_called_once()
        kwargs = channel.basic_publish.call_args.kwargs
        assert kwargs["exchange"] == "fiscal-exchange"
        assert kwargs["routing_key"] == "fiscal.document.processed"
        assert kwargs["body"] == b'{"documentId": "abc"}'
        assert kwargs["properties"].content_type == "application/json"
        assert kwargs["properties"].delivery_mode in (2, pika.DeliveryMode.Persistent)

    def test_declares_durable_topic_exchange_once(self) -> None:
        connection, channel = _make_open_connection()
        publisher = RabbitMQPublisher(connection, "fiscal-exchange")

        publisher.publish({}, "a")
        publisher.publish({}, "b")

        channel.exchange_declare.assert_called_once_with(
            exchange="fiscal-exchange",
            exchange_type=ExchangeType.topic,
            durable=True,
            auto_delete=False,
        )

    def test_broker_failure_raises_publish_error(self) -> None:
        connection, channel = _make_open_connection()
        channel.basic_publish.side_effect = AMQPError("channel closed")
        publisher = RabbitMQPublisher(connection, "fiscal-exchange")

        with pytest.raises(PublishError, match="fiscal.document.processed"):
            publisher.publish({}, "fiscal.document.processed")

    def test_connection_failure_raises_publish_error(self) -> None:
        connection, _channel = _make_open_connection()
        connection.open.side_effect = BrokerConnectionError("down")
        publisher = RabbitMQPublisher(connection, "fiscal-exchange")

        with pytest.raises(PublishError):
            publisher.publish({}, "x")


class TestRabbitMQConsumer:
    def _make_consumer(self) -> tuple[RabbitMQConsumer, MagicMock]:
        connection, channel = _make_open_connection()
        consumer = RabbitMQConsumer(
            connection,
            exchange_name="fiscal-exchange",
            queue_name="fiscal-documents",
            binding_key="fiscal.document.#",
            inactivity_timeout=0.5,
        )
        return consumer, channel

    def test_setup_declares_topology_and_prefetch(self) -> None:
        consumer, channel = self._make_consumer()

        consumer.setup()

        channel.queue_declare.assert_called_once_with(
            queue="fiscal-documents", durable=True, exclusive=False, auto_delete=False
        )
        channel.queue_bind.assert_called_once_with(
            queue="fiscal-documents",
            exchange="fiscal-exchange",
            routing_key="fiscal.document.#",
        )
        channel.basic_qos.assert_called_once_with(prefetch_count=1)

    def test_deliveries_yields_messages_and_idle_ticks(self) -> None:
        consumer, channel = self._make_consumer()
        method = MagicMock(delivery_tag=42, redelivered=True)
        channel.consume.return_value = iter([(None, None, None), (method, MagicMock(), b"{}")])

        items = list(consumer.deliveries())

        assert items[0] is None
        delivery = items[1]
        assert delivery.body == b"{}"
        assert delivery.delivery_tag == 42
        assert delivery.redelivered is True
        channel.consume.assert_called_once_with(
            "fiscal-documents", auto_ack=False, inactivity_timeout=0.5
        )
        channel.cancel.assert_called_once()

    def test_from_settings(self) -> None:
        connection, channel = _make_open_connection()
        channel.consume.return_value = iter([])
        consumer = RabbitMQConsumer.from_settings(connection, _make_settings())

        list(consumer.deliveries())

        channel.consume.assert_called_once_with(
            "fiscal-documents", auto_ack=False, inactivity_timeout=1.0
        )
