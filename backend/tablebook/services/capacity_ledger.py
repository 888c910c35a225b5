"""
Seat arithmetic. Sums are always recomputed from committed reservations; nothing is cached.

Only confirmed and no-show rows hold seats; cancelled rows never count.
Walk-ins up to the buffer are absorbed without shrinking the online pool; beyond it they compete.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from sqlalchemy import func
from sqlalchemy.orm import Session

from tablebook.core.constants import SEAT_HOLDING_STATUSES
from tablebook.models.reservation import Reservation


@dataclass(frozen=True)
class CapacitySums:
    reserved_guests: int
    walk_in_guests: int

    @property
    def total_guests(self) -> int:
        return self.reserved_guests + self.walk_in_guests

    def to_dict(self) -> dict[str, int]:
        return {
            "reserved_guests": self.reserved_guests,
            "walk_in_guests": self.walk_in_guests,
            "total_guests": self.total_guests,
        }


def sums_for_interval(db: Session, date_str: str, start: datetime, end: datetime) -> CapacitySums:
    rows = (
        db.query(Reservation.is_walk_in, func.coalesce(func.sum(Reservation.guests), 0))
        .filter(
            Reservation.date == date_str,
            Reservation.status.in_(SEAT_HOLDING_STATUSES),
            Reservation.start_ts < end,
            Reservation.end_ts > start,
        )
        .group_by(Reservation.is_walk_in)
        .all()
    )
    reserved = walk_ins = 0
    for is_walk_in, guests in rows:
        if is_walk_in:
            walk_ins += int(guests)
        else:
            reserved += int(guests)
    return CapacitySums(reserved_guests=reserved, walk_in_guests=walk_ins)


def seat_holding_reservations(db: Session, date_str: str) -> list[Reservation]:
    """All reservations on a date that hold seats. One query for a whole slot grid."""
    return (
        db.query(Reservation)
        .filter(Reservation.date == date_str, Reservation.status.in_(SEAT_HOLDING_STATUSES))
        .all()
    )


def sums_from_rows(rows: Iterable[Reservation], start: datetime, end: datetime) -> CapacitySums:
    """Same rule as sums_for_interval over rows already loaded."""
    reserved = walk_ins = 0
    for r in rows:
        if r.status not in SEAT_HOLDING_STATUSES:
            continue
        if not (r.start_ts < end and r.end_ts > start):
            continue
        if r.is_walk_in:
            walk_ins += r.guests
        else:
            reserved += r.guests
    return CapacitySums(reserved_guests=reserved, walk_in_guests=walk_ins)


def online_seats_remaining(reserved: int, walk_ins: int, reservable_cap: int, walk_in_buffer: int) -> int:
    effective_walk_ins = max(0, walk_ins - walk_in_buffer)
    return max(0, reservable_cap - reserved - effective_walk_ins)


def admitted(
    party_size: int,
    reserved: int,
    walk_ins: int,
    total: int,
    reservable_cap: int,
    total_cap: int,
    walk_in_buffer: int,
) -> bool:
    left_online = online_seats_remaining(reserved, walk_ins, reservable_cap, walk_in_buffer)
    return party_size <= left_online and total + party_size <= total_cap
