from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class ReminderSettings(BaseSettings):
    # Celery configuration
    CELERY_BROKER_URL: str = "memory://"
    CELERY_RESULT_BACKEND: Optional[str] = None
    WORKER_CONCURRENCY: int = 4

    # Scheduling (the sweep runs hourly by default)
    SCHEDULER_SCAN_INTERVAL_SECONDS: int = 3600
    SCHEDULER_BATCH_SIZE: int = 1000

    # Metrics
    METRICS_ENABLED: bool = True
    METRICS_PORT: int = 9108

    model_config = SettingsConfigDict(env_prefix="REMINDER_", env_file=".env", extra="ignore")


settings = ReminderSettings()
