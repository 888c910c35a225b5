"""
Guest cancellation by token. Idempotent: cancelling twice succeeds twice, with one status change.

The transition is a single compare-and-swap UPDATE (any status but canceled -> canceled), so concurrent
calls for the same token cannot both report a change. Cancelling only frees seats, so no
admission lock is taken.
"""
import logging
from dataclasses import dataclass

from tablebook.core.constants import STATUS_CANCELED
from tablebook.core.errors import NotFoundError
from tablebook.models.reservation import Reservation
from tablebook.services.store import ReservationStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CancelOutcome:
    reservation: Reservation
    changed: bool  # True only for the call that actually moved the status to canceled


def cancel_reservation(store: ReservationStore, token: str) -> CancelOutcome:
    token = (token or "").strip()
    if not token:
        raise NotFoundError("Reservation not found.")
    with store.session() as db:
        changed = (
            db.query(Reservation)
            .filter(Reservation.cancel_token == token, Reservation.status != STATUS_CANCELED)
            .update({Reservation.status: STATUS_CANCELED}, synchronize_session=False)
        )
        row = db.query(Reservation).filter(Reservation.cancel_token == token).first()
        if row is None:
            raise NotFoundError("Reservation not found.")
    if changed:
        logger.info("Reservation %s canceled (%s %s, %s guests)", row.id, row.date, row.time, row.guests)
    else:
        logger.info("Cancel for reservation %s was a no-op (status=%s)", row.id, row.status)
    return CancelOutcome(reservation=row, changed=bool(changed))
