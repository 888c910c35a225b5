"""
Admission control: decide whether a party may be seated at a time, and write the reservation.

Order of checks for an online booking:
  input -> weekly closed day -> opening hours -> closures -> per-booking maximum -> capacity.
The capacity check and the insert run inside ReservationStore.admission(date), so two requests
for the same date can never both read "room left" and jointly overbook.

Business rejections are returned as Rejection values; only infrastructure failures raise.
Notifications are the caller's job (see services.notifications); nothing here sends mail.
"""
import logging
from dataclasses import dataclass
from datetime import date

from tablebook.config import VenuePolicy
from tablebook.core.constants import (
    STATUS_CONFIRMED,
    WALKIN_FIRST_NAME,
    WALKIN_LAST_NAME,
)
from tablebook.core.errors import InvalidInputError, Rejection, RejectionReason
from tablebook.models.reservation import Reservation, new_cancel_token, new_reservation_id
from tablebook.services.capacity_ledger import (
    admitted,
    online_seats_remaining,
    seat_holding_reservations,
    sums_for_interval,
    sums_from_rows,
)
from tablebook.services.closure_registry import closures_between, is_blocked, overlaps
from tablebook.services.loyalty import LoyaltyStatus, normalize_email, visit_count
from tablebook.services.slot_calendar import SlotCalendar, normalize_date, normalize_time
from tablebook.services.store import ReservationStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GuestInfo:
    first_name: str
    name: str
    email: str
    phone: str = ""
    notes: str = ""


@dataclass(frozen=True)
class BookingResult:
    """Admitted reservation with the guest's loyalty as counted in the same transaction."""
    reservation: Reservation
    loyalty: LoyaltyStatus


@dataclass(frozen=True)
class SlotView:
    """One row of the public slot grid."""
    time: str
    bookable: bool
    reason: RejectionReason | None
    seats_left: int

    def to_dict(self) -> dict:
        return {
            "time": self.time,
            "bookable": self.bookable,
            "reason": self.reason.value if self.reason else None,
            "seats_left": self.seats_left,
        }


def _party_size(value) -> int:
    if isinstance(value, bool):
        raise InvalidInputError("Guest count must be a whole number.")
    try:
        n = int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidInputError("Guest count must be a whole number.")
    if n < 1:
        raise InvalidInputError("At least one guest is required.")
    return n


def _validated_guest(guest: GuestInfo, walkin_email: str) -> GuestInfo:
    first_name = (guest.first_name or "").strip()
    name = (guest.name or "").strip()
    email = normalize_email(guest.email)
    if not first_name or not name:
        raise InvalidInputError("First name and name are required.")
    if "@" not in email:
        raise InvalidInputError("A valid email address is required.")
    if email == walkin_email:
        raise InvalidInputError("This email address cannot be used for online bookings.")
    return GuestInfo(
        first_name=first_name,
        name=name,
        email=email,
        phone=(guest.phone or "").strip(),
        notes=(guest.notes or "").strip(),
    )


class BookingEngine:
    def __init__(self, store: ReservationStore, policy: VenuePolicy):
        self.store = store
        self.policy = policy
        self.calendar = SlotCalendar(policy)

    # ------------------------------------------------------------------
    # Online bookings
    # ------------------------------------------------------------------

    def try_book(self, date_value: str, time_value: str, party_size, guest: GuestInfo) -> Reservation | Rejection:
        result = self.book(date_value, time_value, party_size, guest)
        if isinstance(result, Rejection):
            return result
        return result.reservation

    def book(self, date_value: str, time_value: str, party_size, guest: GuestInfo) -> BookingResult | Rejection:
        """
        Admit and store an online reservation. Loyalty is counted inside the admission transaction
        and includes this booking.
        """
        try:
            day = normalize_date(date_value)
            hhmm = normalize_time(time_value)
            party = _party_size(party_size)
            guest = _validated_guest(guest, self.policy.walkin_email)
        except InvalidInputError as e:
            return Rejection(RejectionReason.INVALID_INPUT, str(e))

        if not self.calendar.is_operating_day(day):
            return Rejection(RejectionReason.CLOSED_DAY, "We are closed on this day.")

        start, end = self.calendar.interval_for(day, hhmm)
        open_at, close_at = self.calendar.opening_bounds(day)
        if start < open_at or end > close_at:
            return Rejection(RejectionReason.OUTSIDE_HOURS, "This time is outside our opening hours.")

        with self.store.session() as db:
            blocked = is_blocked(db, start, end)
        if blocked:
            return Rejection(RejectionReason.BLOCKED, "The restaurant is closed at this time. Please choose another slot.")

        if party > self.policy.max_online_guests:
            return Rejection(
                RejectionReason.TOO_MANY_GUESTS,
                f"Online bookings are limited to {self.policy.max_online_guests} guests. Please contact us directly.",
            )

        date_str = day.isoformat()
        with self.store.admission(date_str) as db:
            sums = sums_for_interval(db, date_str, start, end)
            if not admitted(
                party,
                sums.reserved_guests,
                sums.walk_in_guests,
                sums.total_guests,
                self.policy.max_seats_reservable,
                self.policy.max_seats_total,
                self.policy.walkin_buffer,
            ):
                logger.info(
                    "Booking rejected (fully booked): %s %s party=%s reserved=%s walk_ins=%s",
                    date_str, hhmm, party, sums.reserved_guests, sums.walk_in_guests,
                )
                return Rejection(RejectionReason.FULLY_BOOKED, "Fully booked at this time. Please select another slot.")
            row = Reservation(
                id=new_reservation_id(),
                cancel_token=new_cancel_token(),
                date=date_str,
                time=hhmm,
                start_ts=start,
                end_ts=end,
                first_name=guest.first_name,
                name=guest.name,
                email=guest.email,
                phone=guest.phone,
                guests=party,
                notes=guest.notes,
                status=STATUS_CONFIRMED,
                is_walk_in=False,
                reminder_sent=False,
            )
            db.add(row)
            db.flush()
            visits = visit_count(db, guest.email)
        logger.info("Reservation %s admitted: %s %s party=%s visit=%s", row.id, date_str, hhmm, party, visits)
        return BookingResult(reservation=row, loyalty=LoyaltyStatus.for_visits(visits))

    # ------------------------------------------------------------------
    # Walk-ins (admin): total capacity only; closures and closing time do not apply
    # ------------------------------------------------------------------

    def record_walk_in(self, date_value: str, time_value: str, party_size, notes: str | None = None) -> Reservation | Rejection:
        try:
            day = normalize_date(date_value)
            hhmm = normalize_time(time_value)
            party = _party_size(party_size)
        except InvalidInputError as e:
            return Rejection(RejectionReason.INVALID_INPUT, str(e))

        start, end = self.calendar.interval_for(day, hhmm)
        open_at, _ = self.calendar.opening_bounds(day)
        if start < open_at:
            return Rejection(RejectionReason.INVALID_INPUT, "Walk-in time is before opening.")

        date_str = day.isoformat()
        with self.store.admission(date_str) as db:
            sums = sums_for_interval(db, date_str, start, end)
            if sums.total_guests + party > self.policy.max_seats_total:
                logger.info(
                    "Walk-in rejected (total capacity): %s %s party=%s total=%s",
                    date_str, hhmm, party, sums.total_guests,
                )
                return Rejection(RejectionReason.FULLY_BOOKED, "Total capacity reached at this time.")
            row = Reservation(
                id=new_reservation_id(),
                cancel_token=new_cancel_token(),
                date=date_str,
                time=hhmm,
                start_ts=start,
                end_ts=end,
                first_name=WALKIN_FIRST_NAME,
                name=WALKIN_LAST_NAME,
                email=self.policy.walkin_email,
                phone="",
                guests=party,
                notes=(notes or "").strip(),
                status=STATUS_CONFIRMED,
                is_walk_in=True,
                reminder_sent=False,
            )
            db.add(row)
            db.flush()
        logger.info("Walk-in %s recorded: %s %s party=%s", row.id, date_str, hhmm, party)
        return row

    # ------------------------------------------------------------------
    # Slot grid (read-only; may be stale, the admission re-checks)
    # ------------------------------------------------------------------

    def get_slots(self, date_value: str, guests=1) -> list[SlotView]:
        day = normalize_date(date_value)
        party = _party_size(guests)
        times = self.calendar.operating_slots(day)
        if not times:
            return []
        return self._evaluate_slots(day, times, party)

    def _evaluate_slots(self, day: date, times: list[str], party: int) -> list[SlotView]:
        date_str = day.isoformat()
        open_at, close_at = self.calendar.opening_bounds(day)
        with self.store.session() as db:
            rows = seat_holding_reservations(db, date_str)
            closures = closures_between(db, open_at, close_at)

        out = []
        for hhmm in times:
            start, end = self.calendar.interval_for(day, hhmm)
            if start < open_at or end > close_at:
                out.append(SlotView(hhmm, False, RejectionReason.OUTSIDE_HOURS, 0))
                continue
            if any(overlaps(c.start_ts, c.end_ts, start, end) for c in closures):
                out.append(SlotView(hhmm, False, RejectionReason.BLOCKED, 0))
                continue
            sums = sums_from_rows(rows, start, end)
            left = online_seats_remaining(
                sums.reserved_guests, sums.walk_in_guests, self.policy.max_seats_reservable, self.policy.walkin_buffer
            )
            if party > self.policy.max_online_guests:
                out.append(SlotView(hhmm, False, RejectionReason.TOO_MANY_GUESTS, left))
            elif admitted(
                party,
                sums.reserved_guests,
                sums.walk_in_guests,
                sums.total_guests,
                self.policy.max_seats_reservable,
                self.policy.max_seats_total,
                self.policy.walkin_buffer,
            ):
                out.append(SlotView(hhmm, True, None, left))
            else:
                out.append(SlotView(hhmm, False, RejectionReason.FULLY_BOOKED, left))
        return out
