"""
Reminder scheduler service: creation, due queries and per-period advancement
"""
import logging
from datetime import datetime
from typing import Callable, List, Optional

from .exceptions import DecodeError, ValidationError
from .metrics import (
    recurrence_decode_fallback_total,
    reminders_created_total,
    reminders_rescheduled_total,
)
from .recurrence_models import (
    FALLBACK_DELAY,
    RecurrenceCalculator,
    RecurrenceRule,
    decode_rule,
    encode_rule,
    parse_rule,
)
from .repository import ReminderId, ReminderStore
from .unified_models import Reminder
from .unified_schemas import (
    DEFAULT_DESCRIPTIONS,
    DEFAULT_PRIORITY,
    STATUS_CANCELLED,
    STATUS_PENDING,
    VALID_CONTEXTS,
    ReminderCreate,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class ReminderScheduler:
    """Creates reminders and advances them one period at a time.

    The store is injected; ``clock`` supplies "now" for creation and
    defaults to the server's civil wall clock.
    """

    def __init__(self, store: ReminderStore, clock: Optional[Clock] = None):
        self.store = store
        self.clock = clock or datetime.now

    def create_reminder(
        self,
        owner_key: str,
        description: Optional[str],
        context: str,
        rule: RecurrenceRule,
        priority: Optional[str] = None,
    ) -> Reminder:
        """Create a pending reminder scheduled at the rule's next occurrence"""
        if not isinstance(owner_key, str) or not owner_key.strip():
            raise ValidationError("owner_key is required")
        owner_key = owner_key.strip()
        if context not in VALID_CONTEXTS:
            raise ValidationError("context must be income, assets, or expenses")

        text = description.strip() if isinstance(description, str) else ""
        if not text:
            text = DEFAULT_DESCRIPTIONS.get(context, "").strip()
        if not text:
            raise ValidationError("description is required")

        priority = priority.strip() if isinstance(priority, str) else ""

        now = self.clock()
        reminder = Reminder(
            owner_key=owner_key,
            scheduled_at=RecurrenceCalculator.next_occurrence(rule, now),
            description=text,
            context=context,
            recurrence=encode_rule(rule),
            priority=priority or DEFAULT_PRIORITY,
            status=STATUS_PENDING,
        )
        reminder = self.store.add(reminder)
        reminders_created_total.inc()
        logger.info(
            "Created reminder %s for owner=%s recurrence=%s scheduled_at=%s",
            reminder.id, owner_key, reminder.recurrence, reminder.scheduled_at.isoformat(),
        )
        return reminder

    def create_from_request(self, data: ReminderCreate) -> Reminder:
        """Create a reminder from the inbound request shape"""
        rule = parse_rule(
            data.recurrence,
            day=data.recurrence_day,
            week=data.recurrence_week,
            month=data.recurrence_month,
        )
        return self.create_reminder(
            owner_key=data.owner_key,
            description=data.description,
            context=data.context,
            rule=rule,
            priority=data.priority,
        )

    def due_reminders(self, now: datetime, limit: Optional[int] = None) -> List[Reminder]:
        """Pending reminders scheduled at or before ``now``; order is not guaranteed"""
        return self.store.find_due(now, limit=limit)

    def next_fire_time(self, record: Reminder, now: datetime) -> datetime:
        """Next occurrence strictly after ``now`` for a stored record.

        A malformed recurrence string falls back to 24 hours ahead so one
        corrupted row cannot stall the sweep.
        """
        try:
            rule = decode_rule(record.recurrence)
        except DecodeError as e:
            recurrence_decode_fallback_total.inc()
            logger.warning(
                "Reminder %s has undecodable recurrence (%s); rescheduling 24h ahead",
                record.id, e,
            )
            return now + FALLBACK_DELAY
        return RecurrenceCalculator.next_occurrence(rule, now)

    def try_reschedule(self, record: Reminder, now: datetime) -> bool:
        """Advance ``record`` one period; False if another worker already did.

        The update only applies while the row still holds the
        ``scheduled_at`` this caller read.
        """
        expected = record.scheduled_at
        new_time = self.next_fire_time(record, now)

        if not self.store.compare_and_set_schedule(record.id, expected, new_time):
            logger.info("Reminder %s was already advanced by another worker", record.id)
            return False

        reminders_rescheduled_total.inc()
        logger.info(
            "Rescheduled reminder %s from %s to %s",
            record.id, expected.isoformat(), new_time.isoformat(),
        )
        return True

    def reschedule(self, record: Reminder, now: datetime) -> Reminder:
        """Advance a fired reminder to its next period, computed from ``now``.

        Basing the next period on the dispatch time rather than the missed
        ``scheduled_at`` keeps a late sweep from producing catch-up reminders.
        Status stays pending.
        """
        self.try_reschedule(record, now)
        current = self.store.get(record.id)
        return current if current is not None else record

    def cancel_reminder(self, reminder_id: ReminderId) -> bool:
        return self.store.set_status(reminder_id, STATUS_CANCELLED)

    def get_reminder(self, reminder_id: ReminderId) -> Optional[Reminder]:
        return self.store.get(reminder_id)

    def list_reminders(
        self, owner_key: str, status: Optional[str] = None, limit: int = 100
    ) -> List[Reminder]:
        return self.store.list_for_owner(owner_key, status=status, limit=limit)
