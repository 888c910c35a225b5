"""
Bookable start times for a day, and the seating interval each start time occupies.

All instants are naive local wall-clock datetimes (civil date + HH:MM); no timezone conversion.
"""
import re
from datetime import date, datetime, time, timedelta

from tablebook.config import VenuePolicy
from tablebook.core.errors import InvalidInputError

_YMD = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DMY_DOTS = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$")
_MDY_SLASHES = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_HHMM = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def normalize_date(value: str) -> date:
    """Accept YYYY-MM-DD, D.M.YYYY or M/D/YYYY. Raises InvalidInputError otherwise."""
    s = str(value or "").strip()
    try:
        if _YMD.match(s):
            return date.fromisoformat(s)
        m = _DMY_DOTS.match(s)
        if m:
            dd, mm, yy = (int(g) for g in m.groups())
            return date(yy, mm, dd)
        m = _MDY_SLASHES.match(s)
        if m:
            mm, dd, yy = (int(g) for g in m.groups())
            return date(yy, mm, dd)
    except ValueError:
        pass
    raise InvalidInputError(f"Invalid date {value!r}. Use YYYY-MM-DD.")


def normalize_time(value: str) -> str:
    """'9:30', '09:30' or '09:30:00' -> '09:30'. Raises InvalidInputError otherwise."""
    m = _HHMM.match(str(value or "").strip())
    if m:
        hh, mm = int(m.group(1)), int(m.group(2))
        if hh < 24 and mm < 60:
            return f"{hh:02d}:{mm:02d}"
    raise InvalidInputError(f"Invalid time {value!r}. Use HH:MM.")


def combine(day: date, hhmm: str) -> datetime:
    hh, mm = hhmm.split(":")
    return datetime.combine(day, time(int(hh), int(mm)))


class SlotCalendar:
    def __init__(self, policy: VenuePolicy):
        self.policy = policy

    def is_operating_day(self, day: date) -> bool:
        closed = self.policy.closed_weekday
        return closed is None or day.weekday() != closed

    def opening_bounds(self, day: date) -> tuple[datetime, datetime]:
        return datetime.combine(day, self.policy.open_at), datetime.combine(day, self.policy.close_at)

    def operating_slots(self, day: date) -> list[str]:
        """Start times open <= t < close on the slot grid. Empty on a closed day or when close <= open."""
        if not self.is_operating_day(day):
            return []
        step = timedelta(minutes=self.policy.slot_interval_minutes)
        if step <= timedelta(0):
            return []
        t, close = self.opening_bounds(day)
        out = []
        while t < close:
            out.append(t.strftime("%H:%M"))
            t += step
        return out

    def slot_duration(self, hhmm: str) -> int:
        """Minutes a party starting at hhmm occupies: daytime seating before evening_starts_at, evening after."""
        hh, mm = (int(p) for p in hhmm.split(":"))
        if time(hh, mm) < self.policy.evening_starts_at:
            minutes = self.policy.daytime_duration_minutes
        else:
            minutes = self.policy.evening_duration_minutes
        return max(self.policy.slot_interval_minutes, minutes)

    def interval_for(self, day: date, hhmm: str) -> tuple[datetime, datetime]:
        start = combine(day, hhmm)
        return start, start + timedelta(minutes=self.slot_duration(hhmm))
