import signal
from types import FrameType

from fiscaldoc.logging.logger import Log
from fiscaldoc.messaging.consumer import RabbitMQConsumer
from fiscaldoc.worker.message_runner import MessageRunner


class Worker:
    """Consume loop: receive -> run -> settle, one message at a time."""

    def __init__(self, consumer: RabbitMQConsumer, runner: MessageRunner) -> None:
        self._consumer = consumer
        self._runner = runner
        self._stop_requested = False

    def install_signal_handlers(self) -> None:
        """Defer SIGTERM/SIGINT until the in-flight message is settled."""
        signal.signal(signal.SIGTERM, self._handle_signal)
        signal.signal(signal.SIGINT, self._handle_signal)

    def request_stop(self) -> None:
        self._stop_requested = True

    def run(self, max_messages: int | None = None) -> None:
        """Main consume loop. Runs until a stop is requested or interrupted.

        If max_messages is set, stop after settling that many messages (for testing).
        """
        Log.info("Worker started, waiting for messages")
        processed = 0
        deliveries = self._consumer.deliveries()
        try:
            for delivery in deliveries:
                if delivery is not None:
                    self._runner.run(delivery)
                    processed += 1
                else:
                    Log.debug("No messages available")
                if self._stop_requested:
                    Log.info("Worker shutting down gracefully")
                    break
                if max_messages is not None and processed >= max_messages:
                    break
        except KeyboardInterrupt:
            Log.info("Worker shutting down gracefully")
        finally:
            deliveries.close()

    def _handle_signal(self, signum: int, _frame: FrameType | None) -> None:
        Log.info(f"Received {signal.Signals(signum).name}, stopping after current message")
        self.request_stop()
