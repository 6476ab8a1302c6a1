from contextlib import contextmanager
from datetime import datetime
from unittest.mock import MagicMock, patch

from finplan.reminders import tasks
from finplan.reminders.dispatcher import log_notifier, sweep_due_reminders
from finplan.reminders.recurrence_models import RecurrenceRule


def _seed(scheduler):
    due_a = scheduler.create_reminder("alice", "Salary", "income", RecurrenceRule.monthly(1))
    due_b = scheduler.create_reminder("bob", "Portfolio", "assets", RecurrenceRule.quarterly(1))
    future = scheduler.create_reminder("carol", "Bills", "expenses", RecurrenceRule.monthly(20))
    return due_a, due_b, future


def test_sweep_notifies_each_due_reminder_once(scheduler):
    due_a, due_b, future = _seed(scheduler)
    notifier = MagicMock()
    now = datetime(2024, 4, 1, 9, 0)

    summary = sweep_due_reminders(scheduler, notifier, now=now)

    assert summary.scanned == 3
    assert summary.dispatched == 3
    assert summary.failed == 0
    assert notifier.call_count == 3

    # Everything was moved past the sweep time, so a replay finds nothing
    again = sweep_due_reminders(scheduler, notifier, now=now)
    assert again.scanned == 0
    assert notifier.call_count == 3

    assert scheduler.get_reminder(due_a.id).scheduled_at == datetime(2024, 5, 1, 9, 0)
    assert scheduler.get_reminder(due_b.id).scheduled_at == datetime(2024, 7, 1, 9, 0)
    assert scheduler.get_reminder(future.id).scheduled_at == datetime(2024, 4, 20, 9, 0)


def test_sweep_only_touches_due_reminders(scheduler):
    due_a, due_b, future = _seed(scheduler)
    notifier = MagicMock()

    summary = sweep_due_reminders(scheduler, notifier, now=datetime(2024, 2, 1, 9, 1))

    assert summary.scanned == 1
    notifier.assert_called_once()
    assert notifier.call_args.args[0].id == due_a.id
    assert scheduler.get_reminder(due_b.id).scheduled_at == datetime(2024, 4, 1, 9, 0)
    assert scheduler.get_reminder(future.id).scheduled_at == datetime(2024, 2, 20, 9, 0)


def test_notifier_failure_does_not_stop_the_sweep(scheduler):
    due_a, due_b, _ = _seed(scheduler)
    calls = []

    def flaky(reminder):
        calls.append(reminder.id)
        if reminder.id == due_a.id:
            raise RuntimeError("smtp down")

    summary = sweep_due_reminders(scheduler, flaky, now=datetime(2024, 4, 1, 10, 0))

    assert summary.failed == 1
    assert summary.dispatched == 2
    assert len(calls) == 3
    # Failed delivery is still advanced so it does not refire every sweep
    assert scheduler.get_reminder(due_a.id).scheduled_at == datetime(2024, 5, 1, 9, 0)


def test_reminder_claimed_elsewhere_is_skipped(scheduler, store, monkeypatch):
    _seed(scheduler)
    monkeypatch.setattr(store, "compare_and_set_schedule", lambda *args: False)
    notifier = MagicMock()

    summary = sweep_due_reminders(scheduler, notifier, now=datetime(2024, 4, 1, 10, 0))

    assert summary.skipped == 3
    assert summary.dispatched == 0
    notifier.assert_not_called()


def test_sweep_defaults_to_scheduler_clock(scheduler, clock):
    _seed(scheduler)
    clock.now = datetime(2024, 2, 1, 9, 0)
    summary = sweep_due_reminders(scheduler, MagicMock())
    assert summary.swept_at == clock.now
    assert summary.scanned == 1


def test_log_notifier_logs_reminder(scheduler, caplog):
    reminder = scheduler.create_reminder("alice", "Salary", "income", RecurrenceRule.monthly(1))
    with caplog.at_level("INFO", logger="finplan.reminders.dispatcher"):
        log_notifier(reminder)
    assert "Reminder due" in caplog.text
    assert "Salary" in caplog.text


def test_sweep_task_runs_against_a_session(scheduler, session_factory):
    due_a, _, _ = _seed(scheduler)

    @contextmanager
    def fake_session():
        db = session_factory()
        try:
            yield db
            db.commit()
        finally:
            db.close()

    with patch.object(tasks, "get_db_session", fake_session):
        result = tasks.sweep_due_task("2024-02-01T09:01:00")

    assert result["scanned"] == 1
    assert result["dispatched"] == 1
    assert result["swept_at"] == "2024-02-01T09:01:00"
    assert scheduler.get_reminder(due_a.id).scheduled_at == datetime(2024, 3, 1, 9, 0)


def test_one_scheduler_keeps_delivering_across_sweeps(scheduler):
    reminder = scheduler.create_reminder("alice", "Salary", "income", RecurrenceRule.monthly(1))
    notifier = MagicMock()

    first = sweep_due_reminders(scheduler, notifier, now=datetime(2024, 2, 1, 9, 1))
    second = sweep_due_reminders(scheduler, notifier, now=datetime(2024, 3, 1, 9, 1))

    assert (first.dispatched, first.skipped) == (1, 0)
    assert (second.scanned, second.dispatched, second.skipped) == (1, 1, 0)
    assert notifier.call_count == 2
    assert scheduler.get_reminder(reminder.id).scheduled_at == datetime(2024, 4, 1, 9, 0)
