"""
Reminder sweep: mail guests whose seating starts in the reminder window (default 24-25h ahead).

At-least-once: reminder_sent flips only after the notifier accepted the message. A failed send
leaves the flag false so the next sweep retries; one failure never stops the others.
The flag update is guarded (reminder_sent = false in the WHERE) so overlapping sweeps mark once.
"""
import logging
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from tablebook.config import Settings
from tablebook.core.constants import STATUS_CONFIRMED
from tablebook.core.errors import NotifierUnavailable, StorageUnavailable
from tablebook.models.reservation import Reservation
from tablebook.services.email_notify import Notifier
from tablebook.services.notifications import render_reminder
from tablebook.services.store import ReservationStore

logger = logging.getLogger(__name__)


def venue_now(tz_name: str) -> datetime:
    """Current local wall clock at the venue, naive like Reservation.start_ts."""
    return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)


def due_for_reminder(store: ReservationStore, window_start: datetime, window_end: datetime) -> list[Reservation]:
    with store.session() as db:
        return (
            db.query(Reservation)
            .filter(
                Reservation.status == STATUS_CONFIRMED,
                Reservation.is_walk_in.is_(False),
                Reservation.reminder_sent.is_(False),
                Reservation.start_ts >= window_start,
                Reservation.start_ts < window_end,
            )
            .order_by(Reservation.start_ts.asc())
            .all()
        )


def _mark_reminded(store: ReservationStore, reservation_id: str) -> bool:
    with store.session() as db:
        updated = (
            db.query(Reservation)
            .filter(Reservation.id == reservation_id, Reservation.reminder_sent.is_(False))
            .update({Reservation.reminder_sent: True}, synchronize_session=False)
        )
    return bool(updated)


def run_reminder_sweep(
    store: ReservationStore,
    notifier: Notifier,
    settings: Settings,
    now: datetime | None = None,
) -> dict[str, int]:
    """One sweep. Returns counts: due, sent, failed."""
    now = now or venue_now(settings.venue_timezone)
    window_start = now + timedelta(hours=settings.reminder_window_start_hours)
    window_end = now + timedelta(hours=settings.reminder_window_end_hours)
    due = due_for_reminder(store, window_start, window_end)
    sent = failed = 0
    for r in due:
        subject, body = render_reminder(settings, r)
        try:
            notifier.send(r.email, subject, body)
        except NotifierUnavailable as e:
            failed += 1
            logger.warning("Reminder for reservation %s not delivered; retry next sweep: %s", r.id, e)
            continue
        except Exception as e:
            failed += 1
            logger.exception("Reminder for reservation %s failed unexpectedly: %s", r.id, e)
            continue
        try:
            _mark_reminded(store, r.id)
        except StorageUnavailable as e:
            failed += 1
            logger.warning("Reminder for reservation %s sent but not recorded; may repeat: %s", r.id, e)
            continue
        sent += 1
    if due:
        logger.info("Reminder sweep: due=%s sent=%s failed=%s window=[%s, %s)", len(due), sent, failed, window_start, window_end)
    return {"due": len(due), "sent": sent, "failed": failed}
