"""Shared fakes and builders for tests (venue: 10:00-22:00, closed Sundays, 48 total / 40 reservable, buffer 8)."""
from datetime import date, datetime, timedelta

from tablebook.config import Settings
from tablebook.core.constants import STATUS_CONFIRMED
from tablebook.core.errors import NotifierUnavailable
from tablebook.models.reservation import Reservation, new_cancel_token, new_reservation_id
from tablebook.services.booking_engine import GuestInfo
from tablebook.services.store import ReservationStore

TUESDAY = "2026-10-20"
SUNDAY = "2026-10-18"


def make_settings(**overrides) -> Settings:
    values = dict(
        database_url="sqlite://",
        base_url="http://tablebook.test",
        brand_name="Testhaus",
        venue_address="1 Beach Road",
        admin_email="admin@tablebook.test",
        smtp_host="",
        open_time="10:00",
        close_time="22:00",
        slot_interval_minutes=15,
        closed_weekday=6,
        evening_starts_at="16:00",
        daytime_duration_minutes=90,
        evening_duration_minutes=150,
        max_seats_total=48,
        max_seats_reservable=40,
        max_online_guests=10,
        walkin_buffer=8,
        walkin_email="walkin@tablebook.local",
        venue_timezone="UTC",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


class RecordingNotifier:
    """Collects sent messages; raises NotifierUnavailable for addresses in fail_for."""

    def __init__(self, fail_for: set[str] | None = None):
        self.sent: list[tuple[str, str, str]] = []
        self.fail_for = set(fail_for or ())

    def send(self, address: str, subject: str, body: str) -> None:
        if address in self.fail_for:
            raise NotifierUnavailable(f"refused {address}")
        self.sent.append((address, subject, body))

    def to(self, address: str) -> list[tuple[str, str, str]]:
        return [m for m in self.sent if m[0] == address]


def guest(email: str = "ana@example.com", first_name: str = "Ana", name: str = "Silva") -> GuestInfo:
    return GuestInfo(first_name=first_name, name=name, email=email, phone="+66 1", notes="")


def add_reservation(
    store: ReservationStore,
    date_str: str = TUESDAY,
    hhmm: str = "18:00",
    guests: int = 2,
    *,
    minutes: int = 150,
    is_walk_in: bool = False,
    status: str = STATUS_CONFIRMED,
    email: str = "seed@example.com",
    reminder_sent: bool = False,
) -> Reservation:
    """Insert a row directly, bypassing admission (seed data)."""
    start = datetime.combine(date.fromisoformat(date_str), datetime.strptime(hhmm, "%H:%M").time())
    row = Reservation(
        id=new_reservation_id(),
        cancel_token=new_cancel_token(),
        date=date_str,
        time=hhmm,
        start_ts=start,
        end_ts=start + timedelta(minutes=minutes),
        first_name="Seed",
        name="Guest",
        email=email,
        guests=guests,
        status=status,
        is_walk_in=is_walk_in,
        reminder_sent=reminder_sent,
    )
    with store.session() as db:
        db.add(row)
    return row
