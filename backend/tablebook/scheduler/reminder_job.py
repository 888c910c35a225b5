"""Runs every REMINDER interval: send reminders for reservations starting 24-25h from now."""
import logging

from tablebook.config import Settings
from tablebook.services.email_notify import Notifier
from tablebook.services.reminder_sweep import run_reminder_sweep
from tablebook.services.store import ReservationStore

logger = logging.getLogger(__name__)


def run_reminder_job(store: ReservationStore, notifier: Notifier, settings: Settings) -> None:
    try:
        run_reminder_sweep(store, notifier, settings)
    except Exception as e:
        # Skip this tick; the next one re-selects everything still unsent.
        logger.exception("Reminder sweep failed: %s", e)
