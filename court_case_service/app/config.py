# Application Configuration using Pydantic BaseSettings
from pydantic_settings import BaseSettings
from typing import Optional

class AppSettings(BaseSettings):
    # MongoDB
    MONGO_DETAILS: str = "mongodb://mongo:27017"
    DB_NAME: str = "court_case_db"
    CASES_COLLECTION: str = "cases"
    USERS_COLLECTION: str = "users" # Identity directory used when no identity service is configured

    # Kafka
    KAFKA_BOOTSTRAP_SERVERS: str = "kafka:29092"
    CASE_EVENTS_KAFKA_TOPIC: str = "court_case_events" # Consumed by the notification service
    CASE_EVENTS_ENABLED: bool = True

    # Identity Service Client
    IDENTITY_SERVICE_URL: Optional[str] = None # e.g., http://identity:8081/api/v1
    DEFAULT_HTTP_TIMEOUT: float = 10.0

    # Case lifecycle
    CASE_NUMBER_MAX_ATTEMPTS: int = 5
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Observability
    LOG_LEVEL: str = "INFO"
    OTEL_EXPORTER_OTLP_TRACES_ENDPOINT: Optional[str] = None
    OTEL_EXPORTER_OTLP_METRICS_ENDPOINT: Optional[str] = None
    SERVICE_NAME_API: str = "court-case-api"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

# Instantiate settings to be imported by other modules
settings = AppSettings()

import logging
logger = logging.getLogger(__name__)
logger.info("Application settings module initialized.")
