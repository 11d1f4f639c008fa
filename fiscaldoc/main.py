from fiscaldoc.config.settings import Settings
from fiscaldoc.database.connection import close_pool, init_pool
from fiscaldoc.database.schema import ensure_schema
from fiscaldoc.factory import build_worker
from fiscaldoc.logging.logger import Log
from fiscaldoc.messaging.connection import RabbitMQConnection
from fiscaldoc.messaging.exceptions import BrokerConnectionError
from fiscaldoc.worker.retry import RetryPolicy


def main() -> None:
    """Entry point: initialize pool -> connect broker -> start consumer loop."""
    settings = Settings()
    Log.configure(settings.log_level, settings.app_env)
    init_pool(settings)
    connection = RabbitMQConnection(settings)

    try:
        ensure_schema()
        connect_policy = RetryPolicy(
            max_attempts=settings.broker_connect_max_attempts,
            backoff_base_seconds=settings.consumer_backoff_base_seconds,
            retry_on=(BrokerConnectionError,),
        )
        connect_policy.execute(connection.open)
        worker = build_worker(settings, connection)
        worker.install_signal_handlers()
        worker.run()
    finally:
        connection.close()
        close_pool()


if __name__ == "__main__":
    main()
