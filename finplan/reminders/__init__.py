"""Recurring reminder scheduler (recurrence rules, store, dispatcher sweep).

The calculator and codec are pure functions. The store is passed in by the
caller, and the sweep runs from Celery beat or any external cron.
"""
