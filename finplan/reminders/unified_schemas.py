"""
Schemas for reminder creation requests and reads
"""
from datetime import datetime
from typing import Any, Dict, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


ReminderContext = Literal["income", "assets", "expenses"]
ReminderStatus = Literal["pending", "fired", "cancelled"]

VALID_CONTEXTS = ("income", "assets", "expenses")

STATUS_PENDING = "pending"
STATUS_FIRED = "fired"
STATUS_CANCELLED = "cancelled"

VALID_STATUSES = (STATUS_PENDING, STATUS_FIRED, STATUS_CANCELLED)

DEFAULT_PRIORITY = "normal"

# Pre-filled note for each context when the user leaves it blank
DEFAULT_DESCRIPTIONS: Dict[str, str] = {
    "income": "Review your income",
    "assets": "Update your asset values",
    "expenses": "Review your expenses",
}


class ReminderCreate(BaseModel):
    """Inbound creation request, already authenticated by the API layer.

    ``context`` stays a plain string here so the scheduler can reject it with
    its own ValidationError; recurrence parameters are clamped, not rejected.
    """
    owner_key: str
    context: str
    description: Optional[str] = None
    recurrence: Optional[str] = "monthly"
    recurrence_day: Optional[Any] = None
    recurrence_week: Optional[Any] = None
    recurrence_month: Optional[Any] = None
    priority: Optional[str] = None


class ReminderRead(BaseModel):
    """Schema for reading a reminder record"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_key: str
    scheduled_at: datetime
    description: str
    context: ReminderContext
    recurrence: str
    priority: str = DEFAULT_PRIORITY
    status: ReminderStatus = STATUS_PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SweepSummary(BaseModel):
    """Counts reported by one dispatcher sweep"""
    swept_at: datetime
    scanned: int = Field(default=0, ge=0)
    dispatched: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)
