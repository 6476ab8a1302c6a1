class ReminderError(Exception):
    """Base class for reminder scheduler errors."""


class ValidationError(ReminderError, ValueError):
    """Creation input was rejected (unknown context, empty description)."""


class DecodeError(ReminderError, ValueError):
    """A stored recurrence string could not be decoded."""

    def __init__(self, value, reason: str = "malformed recurrence"):
        self.value = value
        self.reason = reason
        super().__init__(f"{reason}: {value!r}")
