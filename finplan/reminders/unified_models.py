"""
Reminder model - one row per recurring reminder, advanced in place each period
"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Index, Uuid
import uuid

from finplan.db.base import Base


class Reminder(Base):
    """A scheduled reminder and its encoded recurrence rule"""
    __tablename__ = "reminders"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_key = Column(String, nullable=False, index=True)
    # Naive civil time; never normalized to UTC
    scheduled_at = Column(DateTime(timezone=False), nullable=False)
    description = Column(String, nullable=False)
    context = Column(String, nullable=False)  # income, assets, expenses
    recurrence = Column(String, nullable=False)  # monthly:15, quarterly:2, annually:6, once
    priority = Column(String, nullable=False, default="normal")
    status = Column(String, nullable=False, default="pending")

    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    __table_args__ = (
        Index("ix_reminders_status_scheduled", "status", "scheduled_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Reminder id={self.id} owner={self.owner_key} status={self.status} "
            f"scheduled_at={self.scheduled_at} recurrence={self.recurrence}>"
        )
