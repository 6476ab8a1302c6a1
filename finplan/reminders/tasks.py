import logging
from datetime import datetime
from typing import Any, Dict, Optional

from finplan.db.session import get_db_session
from .celery_app import celery_app
from .config import settings
from .dispatcher import sweep_due_reminders
from .repository import SqlAlchemyReminderStore
from .unified_service import ReminderScheduler

logger = logging.getLogger(__name__)


@celery_app.task(name="reminders.sweep_due")
def sweep_due_task(now: Optional[str] = None) -> Dict[str, Any]:
    """Sweep due reminders; ``now`` is an optional ISO timestamp for replays."""
    sweep_time = datetime.fromisoformat(now) if now else datetime.now()
    logger.info("🕒 [Reminders] sweep_due_task at %s", sweep_time.isoformat())
    with get_db_session() as db:
        scheduler = ReminderScheduler(SqlAlchemyReminderStore(db))
        summary = sweep_due_reminders(
            scheduler,
            now=sweep_time,
            limit=settings.SCHEDULER_BATCH_SIZE,
        )
    return summary.model_dump(mode="json")
