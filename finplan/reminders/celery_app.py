import logging

from celery import Celery
from celery.signals import setup_logging, worker_ready
from prometheus_client import start_http_server

from finplan.core.logging import configure_logging
from .config import settings

logger = logging.getLogger(__name__)


celery_app = Celery(
    "reminders",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_acks_late=True,
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    worker_prefetch_multiplier=1,
    worker_concurrency=settings.WORKER_CONCURRENCY,
    include=["finplan.reminders.tasks"],
)

# Celery Beat schedule for the periodic sweep
celery_app.conf.beat_schedule = {
    "sweep-due-reminders": {
        "task": "reminders.sweep_due",
        "schedule": settings.SCHEDULER_SCAN_INTERVAL_SECONDS,
    },
}


@setup_logging.connect
def _configure_worker_logging(**kwargs) -> None:
    configure_logging()


@worker_ready.connect
def _start_metrics_endpoint(**kwargs) -> None:
    if not settings.METRICS_ENABLED:
        return
    start_http_server(settings.METRICS_PORT)
    logger.info("Prometheus metrics exposed on :%d", settings.METRICS_PORT)
