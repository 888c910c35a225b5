"""
Centralized constants for scheduler and booking (Encapsulate What Changes).

Change job IDs or status literals here instead of scattering them across main, services and routes.
Venue numbers (hours, caps, buffer) are configuration; see config.Settings.
"""

# Scheduler job IDs (must match ids used in main.py add_job)
REMINDER_SWEEP_JOB_ID = "reminder_sweep"

# Reservation status values as stored in reservations.status
STATUS_CONFIRMED = "confirmed"
STATUS_CANCELED = "canceled"
STATUS_NOSHOW = "noshow"

# Statuses that occupy seats and count as a visit for loyalty
SEAT_HOLDING_STATUSES = (STATUS_CONFIRMED, STATUS_NOSHOW)

# Synthetic guest name on walk-in rows
WALKIN_FIRST_NAME = "Walk"
WALKIN_LAST_NAME = "In"

# Admin listing: length of the "week" view in days
ADMIN_WEEK_VIEW_DAYS = 7

# Guests may arrive this late before the table is released (shown in confirmation mail)
LATE_ARRIVAL_GRACE_MINUTES = 15
