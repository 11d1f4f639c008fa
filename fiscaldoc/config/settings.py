from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "fiscaldoc"
    db_username: str = "fiscaldoc"
    db_password: str = "secret"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_pool_timeout_seconds: float = 30.0

    rabbitmq_host: str = "localhost"
    rabbitmq_port: int = 5672
    rabbitmq_username: str = "guest"
    rabbitmq_password: str = "guest"
    rabbitmq_exchange_name: str = "fiscal-exchange"
    rabbitmq_queue_name: str = "fiscal-documents"
    rabbitmq_binding_key: str = "fiscal.document.#"
    rabbitmq_heartbeat_seconds: int = 60
    rabbitmq_inactivity_timeout_seconds: float = 1.0

    encryption_key: str = ""
    encryption_iv: str = ""

    consumer_max_attempts: int = 5
    consumer_backoff_base_seconds: float = 2.0
    broker_connect_max_attempts: int = 5
