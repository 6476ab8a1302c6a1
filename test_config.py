import logging

from finplan.core.config import Environment, Settings
from finplan.core.logging import configure_logging
from finplan.reminders.config import ReminderSettings


def test_reminder_settings_defaults(monkeypatch):
    for name in ("REMINDER_SCHEDULER_SCAN_INTERVAL_SECONDS", "REMINDER_SCHEDULER_BATCH_SIZE"):
        monkeypatch.delenv(name, raising=False)
    settings = ReminderSettings(_env_file=None)
    assert settings.SCHEDULER_SCAN_INTERVAL_SECONDS == 3600
    assert settings.SCHEDULER_BATCH_SIZE == 1000
    assert settings.CELERY_BROKER_URL == "memory://"


def test_reminder_settings_read_prefixed_env(monkeypatch):
    monkeypatch.setenv("REMINDER_SCHEDULER_BATCH_SIZE", "50")
    monkeypatch.setenv("REMINDER_METRICS_ENABLED", "false")
    settings = ReminderSettings(_env_file=None)
    assert settings.SCHEDULER_BATCH_SIZE == 50
    assert settings.METRICS_ENABLED is False


def test_blank_log_level_falls_back_to_info(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", " ")
    monkeypatch.setenv("ENVIRONMENT", "production")
    settings = Settings(_env_file=None)
    assert settings.LOG_LEVEL == "INFO"
    assert settings.ENVIRONMENT is Environment.PRODUCTION
    assert settings.is_production


def test_configure_logging_sets_root_level():
    root = logging.getLogger()
    previous_level, previous_handlers = root.level, list(root.handlers)
    try:
        configure_logging("warning")
        assert root.level == logging.WARNING
    finally:
        root.handlers = previous_handlers
        root.setLevel(previous_level)
