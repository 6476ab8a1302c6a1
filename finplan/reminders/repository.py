from datetime import datetime
from typing import List, Optional, Protocol, Union
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from .exceptions import ValidationError
from .unified_models import Reminder
from .unified_schemas import STATUS_PENDING, VALID_STATUSES


ReminderId = Union[UUID, str]


class ReminderStore(Protocol):
    """Persistence contract the scheduler needs.

    ``compare_and_set_schedule`` must be atomic per record so two sweep
    workers never both advance the same due reminder.
    """

    def add(self, reminder: Reminder) -> Reminder: ...

    def get(self, reminder_id: ReminderId) -> Optional[Reminder]: ...

    def find_due(self, now: datetime, limit: Optional[int] = None) -> List[Reminder]: ...

    def compare_and_set_schedule(
        self, reminder_id: ReminderId, expected: datetime, new: datetime
    ) -> bool: ...

    def set_status(self, reminder_id: ReminderId, status: str) -> bool: ...

    def list_for_owner(
        self, owner_key: str, status: Optional[str] = None, limit: int = 100
    ) -> List[Reminder]: ...


def _as_uuid(value: ReminderId) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


class SqlAlchemyReminderStore:
    """ReminderStore over a SQLAlchemy session; every write commits."""

    def __init__(self, db: Session):
        self.db = db

    def add(self, reminder: Reminder) -> Reminder:
        self.db.add(reminder)
        self.db.commit()
        self.db.refresh(reminder)
        return reminder

    def get(self, reminder_id: ReminderId) -> Optional[Reminder]:
        key = _as_uuid(reminder_id)
        if key is None:
            return None
        # Bypass the identity map so rows changed by bulk updates are re-read
        return self.db.get(Reminder, key, populate_existing=True)

    def find_due(self, now: datetime, limit: Optional[int] = None) -> List[Reminder]:
        stmt = (
            select(Reminder)
            .where(Reminder.status == STATUS_PENDING)
            .where(Reminder.scheduled_at <= now)
            .order_by(Reminder.scheduled_at.asc())
            # Rows advanced by compare_and_set_schedule must not come back stale
            .execution_options(populate_existing=True)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.db.execute(stmt).scalars())

    def compare_and_set_schedule(
        self, reminder_id: ReminderId, expected: datetime, new: datetime
    ) -> bool:
        key = _as_uuid(reminder_id)
        if key is None:
            return False
        result = self.db.execute(
            update(Reminder)
            .where(Reminder.id == key)
            .where(Reminder.status == STATUS_PENDING)
            .where(Reminder.scheduled_at == expected)
            .values(scheduled_at=new, updated_at=datetime.now())
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount == 1

    def set_status(self, reminder_id: ReminderId, status: str) -> bool:
        if status not in VALID_STATUSES:
            raise ValidationError(f"status must be one of {', '.join(VALID_STATUSES)}")
        key = _as_uuid(reminder_id)
        if key is None:
            return False
        result = self.db.execute(
            update(Reminder)
            .where(Reminder.id == key)
            .values(status=status, updated_at=datetime.now())
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount == 1

    def list_for_owner(
        self, owner_key: str, status: Optional[str] = None, limit: int = 100
    ) -> List[Reminder]:
        stmt = (
            select(Reminder)
            .where(Reminder.owner_key == owner_key)
            .order_by(Reminder.scheduled_at.asc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        if status:
            stmt = stmt.where(Reminder.status == status)
        return list(self.db.execute(stmt).scalars())
