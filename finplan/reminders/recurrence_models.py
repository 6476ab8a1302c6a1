"""
Recurrence rules, their storage codec and the next-occurrence calculator.

Rules are stored as compact strings ("monthly:15", "quarterly:2",
"annually:6", or "once") and all schedule arithmetic is done in naive civil
wall-clock time; an aware datetime keeps its tzinfo but is never converted.
"""
import calendar
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional, Tuple

from .exceptions import DecodeError


# Reminders fire at 09:00 civil time on the target day
FIRE_HOUR = 9
FIRE_MINUTE = 0

# Used for kinds without calendar arithmetic and for undecodable records
FALLBACK_DELAY = timedelta(hours=24)


class RecurrenceType(Enum):
    """Types of recurrence patterns"""
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"
    ONCE = "once"


# Inclusive parameter range per recurring kind:
# day-of-month, week-of-quarter, month-of-year
PARAM_BOUNDS = {
    RecurrenceType.MONTHLY: (1, 31),
    RecurrenceType.QUARTERLY: (1, 4),
    RecurrenceType.ANNUALLY: (1, 12),
}

# Kinds a user may pick when creating a reminder
SELECTABLE_KINDS = tuple(PARAM_BOUNDS)


def _coerce_kind(value: Any) -> Optional[RecurrenceType]:
    if isinstance(value, RecurrenceType):
        return value
    if isinstance(value, str):
        try:
            return RecurrenceType(value.strip().lower())
        except ValueError:
            return None
    return None


def _coerce_param(value: Any) -> int:
    """Coerce user input to an integer; missing, zero or non-numeric -> 1."""
    if isinstance(value, bool) or value is None:
        return 1
    if isinstance(value, int):
        return value or 1
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 1
    try:
        number = float(value)
    except OverflowError:
        # Too large for a float; saturate by sign
        return 10 ** 6 if value > 0 else -(10 ** 6)
    except (TypeError, ValueError):
        return 1
    if math.isnan(number) or number == 0:
        return 1
    if math.isinf(number):
        return 10 ** 6 if number > 0 else -(10 ** 6)
    return int(number)


def clamp(value: int, bounds: Tuple[int, int]) -> int:
    low, high = bounds
    return min(high, max(low, value))


@dataclass(frozen=True)
class RecurrenceRule:
    """A recurrence kind plus its single bounded parameter.

    The parameter is saturated into range at construction; an unknown kind
    becomes ``MONTHLY`` with ``param = 1``. ``ONCE`` carries no parameter.
    """
    kind: RecurrenceType = RecurrenceType.MONTHLY
    param: int = 1

    def __post_init__(self):
        kind = _coerce_kind(self.kind)
        if kind is None:
            kind, param = RecurrenceType.MONTHLY, 1
        elif kind is RecurrenceType.ONCE:
            param = 0
        else:
            param = clamp(_coerce_param(self.param), PARAM_BOUNDS[kind])
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "param", param)

    @property
    def is_recurring(self) -> bool:
        return self.kind in PARAM_BOUNDS

    @classmethod
    def monthly(cls, day_of_month: int) -> "RecurrenceRule":
        return cls(RecurrenceType.MONTHLY, day_of_month)

    @classmethod
    def quarterly(cls, week_of_quarter: int) -> "RecurrenceRule":
        return cls(RecurrenceType.QUARTERLY, week_of_quarter)

    @classmethod
    def annually(cls, month_of_year: int) -> "RecurrenceRule":
        return cls(RecurrenceType.ANNUALLY, month_of_year)

    @classmethod
    def once(cls) -> "RecurrenceRule":
        return cls(RecurrenceType.ONCE, 0)


def parse_rule(
    kind: Any,
    day: Any = None,
    week: Any = None,
    month: Any = None,
) -> RecurrenceRule:
    """Build a rule from an inbound (kind, day, week, month) choice.

    Never fails: an unknown or missing kind resolves to monthly and each
    numeric parameter is independently clamped to its range. Only the
    parameter belonging to the resolved kind is kept.
    """
    resolved = _coerce_kind(kind)
    if resolved not in SELECTABLE_KINDS:
        resolved = RecurrenceType.MONTHLY

    params = {
        RecurrenceType.MONTHLY: clamp(_coerce_param(day), PARAM_BOUNDS[RecurrenceType.MONTHLY]),
        RecurrenceType.QUARTERLY: clamp(_coerce_param(week), PARAM_BOUNDS[RecurrenceType.QUARTERLY]),
        RecurrenceType.ANNUALLY: clamp(_coerce_param(month), PARAM_BOUNDS[RecurrenceType.ANNUALLY]),
    }
    return RecurrenceRule(resolved, params[resolved])


def encode_rule(rule: RecurrenceRule) -> str:
    """Store recurrence as "monthly:15" | "quarterly:2" | "annually:6" | "once"."""
    if rule.kind in PARAM_BOUNDS:
        return f"{rule.kind.value}:{rule.param}"
    return RecurrenceType.ONCE.value


def decode_rule(value: Any) -> RecurrenceRule:
    """Inverse of encode_rule. Raises DecodeError on anything it did not produce."""
    if not isinstance(value, str):
        raise DecodeError(value, "recurrence must be a string")
    text = value.strip()
    if text == RecurrenceType.ONCE.value:
        return RecurrenceRule.once()

    kind_text, sep, param_text = text.partition(":")
    if not sep:
        raise DecodeError(value, "missing recurrence parameter")
    try:
        kind = RecurrenceType(kind_text)
    except ValueError:
        kind = None
    if kind not in PARAM_BOUNDS:
        raise DecodeError(value, "unknown recurrence kind")
    if not param_text.isdecimal():
        raise DecodeError(value, "recurrence parameter is not an integer")
    param = int(param_text)
    low, high = PARAM_BOUNDS[kind]
    if not low <= param <= high:
        raise DecodeError(value, f"recurrence parameter outside {low}-{high}")
    return RecurrenceRule(kind, param)


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def _fire_time(reference: datetime, year: int, month: int, day: int) -> datetime:
    return reference.replace(
        year=year, month=month, day=day,
        hour=FIRE_HOUR, minute=FIRE_MINUTE, second=0, microsecond=0,
    )


class RecurrenceCalculator:
    """Calculates the next fire time for a recurrence rule"""

    @staticmethod
    def next_occurrence(rule: RecurrenceRule, now: datetime) -> datetime:
        """Next fire time strictly after ``now``.

        A candidate equal to ``now`` is already due and rolls to the next
        period.
        """
        if rule.kind is RecurrenceType.MONTHLY:
            return RecurrenceCalculator._monthly_next(rule.param, now)
        if rule.kind is RecurrenceType.QUARTERLY:
            return RecurrenceCalculator._quarterly_next(rule.param, now)
        if rule.kind is RecurrenceType.ANNUALLY:
            return RecurrenceCalculator._annually_next(rule.param, now)
        return now + FALLBACK_DELAY

    @staticmethod
    def _monthly_next(day_of_month: int, now: datetime) -> datetime:
        year, month = now.year, now.month
        candidate = _fire_time(now, year, month, min(day_of_month, last_day_of_month(year, month)))
        if candidate > now:
            return candidate

        # Clamp again against the following month's length
        if month == 12:
            year, month = year + 1, 1
        else:
            month += 1
        return _fire_time(now, year, month, min(day_of_month, last_day_of_month(year, month)))

    @staticmethod
    def _quarterly_next(week_of_quarter: int, now: datetime) -> datetime:
        day_of_quarter = (week_of_quarter - 1) * 7 + 1
        year = now.year
        start_month = ((now.month - 1) // 3) * 3 + 1
        candidate = _fire_time(now, year, start_month, day_of_quarter)
        if candidate > now:
            return candidate

        start_month += 3
        if start_month > 12:
            year, start_month = year + 1, 1
        return _fire_time(now, year, start_month, day_of_quarter)

    @staticmethod
    def _annually_next(month_of_year: int, now: datetime) -> datetime:
        candidate = _fire_time(now, now.year, month_of_year, 1)
        if candidate > now:
            return candidate
        return _fire_time(now, now.year + 1, month_of_year, 1)


def next_occurrence(rule: RecurrenceRule, now: datetime) -> datetime:
    return RecurrenceCalculator.next_occurrence(rule, now)
