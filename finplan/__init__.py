"""
Financial planning backend package.

Only the recurring reminder scheduler lives here; forms, dashboards and the
HTTP layer are separate services.
"""
