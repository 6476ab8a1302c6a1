from prometheus_client import Counter


reminders_created_total = Counter(
    "reminders_created_total",
    "Total reminders created",
)

scheduler_scans_total = Counter(
    "reminder_scheduler_scans_total",
    "Total scheduler sweep cycles",
)

scheduler_dispatched_total = Counter(
    "reminder_scheduler_dispatched_total",
    "Total reminders handed to the notifier by the sweep",
)

reminders_dispatch_failed_total = Counter(
    "reminders_dispatch_failed_total",
    "Total notifier failures during a sweep",
)

reminders_rescheduled_total = Counter(
    "reminders_rescheduled_total",
    "Total reminders advanced to their next period",
)

recurrence_decode_fallback_total = Counter(
    "reminder_recurrence_decode_fallback_total",
    "Total reschedules that fell back to 24 hours because the stored recurrence was malformed",
)
