"""
Dispatcher sweep: hand due reminders to a notifier and advance them
"""
import logging
from datetime import datetime
from typing import Callable, Optional

from .metrics import (
    reminders_dispatch_failed_total,
    scheduler_dispatched_total,
    scheduler_scans_total,
)
from .unified_models import Reminder
from .unified_schemas import SweepSummary
from .unified_service import ReminderScheduler

logger = logging.getLogger(__name__)

Notifier = Callable[[Reminder], None]


def log_notifier(reminder: Reminder) -> None:
    """Default notifier; real delivery (email, LinkedIn) is wired in by the caller."""
    logger.info(
        "Reminder due | id=%s owner=%s context=%s priority=%s description=%r",
        reminder.id, reminder.owner_key, reminder.context, reminder.priority, reminder.description,
    )


def sweep_due_reminders(
    scheduler: ReminderScheduler,
    notifier: Notifier = log_notifier,
    now: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> SweepSummary:
    """Notify every due reminder once and move it to its next period.

    The next period is computed from ``now``, so one sweep never leaves a
    reminder due again. A notifier failure is logged and the reminder is
    still advanced; delivery is best effort.
    """
    now = now or scheduler.clock()
    summary = SweepSummary(swept_at=now)
    due = scheduler.due_reminders(now, limit=limit)
    scheduler_scans_total.inc()
    summary.scanned = len(due)
    logger.info("Sweep at %s found %d due reminders", now.isoformat(), len(due))

    for reminder in due:
        # Claim the period first so a concurrent sweep cannot notify twice
        if not scheduler.try_reschedule(reminder, now):
            summary.skipped += 1
            continue
        try:
            notifier(reminder)
        except Exception as e:
            summary.failed += 1
            reminders_dispatch_failed_total.inc()
            logger.error(f"Failed to notify reminder {reminder.id}: {e!r}")
            continue
        summary.dispatched += 1
        scheduler_dispatched_total.inc()

    logger.info(
        "Sweep done | scanned=%d dispatched=%d failed=%d skipped=%d",
        summary.scanned, summary.dispatched, summary.failed, summary.skipped,
    )
    return summary
