"""
Admin-declared blocked time ranges. Overlap is half-open: [a, b) and [c, d) overlap iff a < d and b > c,
so a closure ending at 11:00 does not block a seating that starts at 11:00.
"""
import logging
from datetime import date, datetime

from sqlalchemy.orm import Session

from tablebook.core.errors import InvalidRangeError
from tablebook.models.closure import Closure
from tablebook.services.slot_calendar import SlotCalendar

logger = logging.getLogger(__name__)


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    return a_start < b_end and a_end > b_start


def is_blocked(db: Session, start: datetime, end: datetime) -> bool:
    hit = (
        db.query(Closure.id)
        .filter(Closure.start_ts < end, Closure.end_ts > start)
        .first()
    )
    return hit is not None


def closures_between(db: Session, start: datetime, end: datetime) -> list[Closure]:
    """Closures overlapping [start, end), oldest first. Used to evaluate a whole day in one query."""
    return (
        db.query(Closure)
        .filter(Closure.start_ts < end, Closure.end_ts > start)
        .order_by(Closure.start_ts.asc())
        .all()
    )


def create_closure(db: Session, start: datetime, end: datetime, reason: str | None = None) -> Closure:
    if end <= start:
        raise InvalidRangeError("Closure end must be after its start.")
    row = Closure(start_ts=start, end_ts=end, reason=(reason or "").strip() or "Closed")
    db.add(row)
    db.flush()
    logger.info("Closure %s created: %s -> %s (%s)", row.id, start, end, row.reason)
    return row


def create_day_closure(db: Session, calendar: SlotCalendar, day: date, reason: str | None = None) -> Closure:
    """Block a whole day by closing its opening hours."""
    open_at, close_at = calendar.opening_bounds(day)
    return create_closure(db, open_at, close_at, reason)


def list_closures(db: Session) -> list[Closure]:
    return db.query(Closure).order_by(Closure.start_ts.desc()).all()


def delete_closure(db: Session, closure_id: str) -> bool:
    """Remove a closure. Returns False when it did not exist (not an error here)."""
    deleted = db.query(Closure).filter(Closure.id == closure_id).delete(synchronize_session=False)
    if deleted:
        logger.info("Closure %s deleted", closure_id)
    return bool(deleted)
