"""
Admin: reservation listing with per-guest loyalty, no-show marking, hard delete.
Loyalty is recomputed from current history on every listing (never stored).
"""
import logging
from datetime import date, timedelta

from sqlalchemy.orm import Session

from tablebook.core.constants import ADMIN_WEEK_VIEW_DAYS, STATUS_CONFIRMED, STATUS_NOSHOW
from tablebook.core.errors import NotFoundError
from tablebook.models.reservation import Reservation
from tablebook.services.loyalty import LoyaltyStatus, visit_counts
from tablebook.services.store import ReservationStore

logger = logging.getLogger(__name__)


def list_reservations(db: Session, day: date | None = None, view: str = "day") -> list[dict]:
    """
    view='day': reservations on `day` (all dates when day is None).
    view='week': the 7 days starting at `day`.
    Each row carries the guest's current loyalty; walk-ins carry none.
    """
    q = db.query(Reservation)
    if day is not None and view == "week":
        dates = [(day + timedelta(days=i)).isoformat() for i in range(ADMIN_WEEK_VIEW_DAYS)]
        q = q.filter(Reservation.date.in_(dates))
    elif day is not None:
        q = q.filter(Reservation.date == day.isoformat())
    rows = q.order_by(Reservation.date.asc(), Reservation.time.asc()).all()

    counts = visit_counts(db, {r.email for r in rows if not r.is_walk_in})
    out = []
    for r in rows:
        item = r.to_dict()
        if r.is_walk_in:
            item["loyalty"] = None
        else:
            item["loyalty"] = LoyaltyStatus.for_visits(counts.get(r.email, 0)).to_dict()
        out.append(item)
    return out


def mark_no_show(store: ReservationStore, reservation_id: str) -> Reservation:
    """confirmed -> noshow. Repeating it is a no-op; a canceled reservation stays canceled."""
    with store.session() as db:
        updated = (
            db.query(Reservation)
            .filter(Reservation.id == reservation_id, Reservation.status == STATUS_CONFIRMED)
            .update({Reservation.status: STATUS_NOSHOW}, synchronize_session=False)
        )
        row = db.query(Reservation).filter(Reservation.id == reservation_id).first()
        if row is None:
            raise NotFoundError("Reservation not found.")
    if updated:
        logger.info("Reservation %s marked no-show", reservation_id)
    return row


def delete_reservation(store: ReservationStore, reservation_id: str) -> None:
    with store.session() as db:
        deleted = db.query(Reservation).filter(Reservation.id == reservation_id).delete(synchronize_session=False)
        if not deleted:
            raise NotFoundError("Reservation not found.")
    logger.info("Reservation %s deleted by admin", reservation_id)
