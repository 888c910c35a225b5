"""
Loyalty tiers from visit count. Never stored: recomputed from the guest's non-cancelled history
every time it is shown (booking, admin listing, cancellation mail).
"""
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.orm import Session

from tablebook.core.constants import SEAT_HOLDING_STATUSES
from tablebook.models.reservation import Reservation

# (first visit of the tier, discount percent), highest first
_TIERS = ((15, 15), (10, 10), (5, 5))


def tier_for(visit_index: int) -> int:
    for threshold, discount in _TIERS:
        if visit_index >= threshold:
            return discount
    return 0


def next_milestone(visit_index: int) -> int | None:
    """Discount the *next* visit unlocks, when it unlocks one."""
    return {4: 5, 9: 10, 14: 15}.get(visit_index)


def unlocked_now(visit_index: int) -> int | None:
    """Discount unlocked by exactly this visit."""
    return {5: 5, 10: 10, 15: 15}.get(visit_index)


def ordinal(n: int) -> str:
    if 11 <= n % 100 <= 13:
        return f"{n}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


@dataclass(frozen=True)
class LoyaltyStatus:
    tier: int
    visit_index: int
    next_milestone: int | None

    @classmethod
    def for_visits(cls, visit_index: int) -> "LoyaltyStatus":
        return cls(tier=tier_for(visit_index), visit_index=visit_index, next_milestone=next_milestone(visit_index))

    def to_dict(self) -> dict:
        return {"tier": self.tier, "visit_index": self.visit_index, "next_milestone": self.next_milestone}


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def visit_count(db: Session, email: str) -> int:
    """Confirmed + no-show reservations for this guest. Walk-in rows never belong to a guest."""
    return (
        db.query(func.count(Reservation.id))
        .filter(
            Reservation.email == normalize_email(email),
            Reservation.is_walk_in.is_(False),
            Reservation.status.in_(SEAT_HOLDING_STATUSES),
        )
        .scalar()
        or 0
    )


def visit_counts(db: Session, emails: set[str]) -> dict[str, int]:
    """visit_count for many guests in one query (admin listing)."""
    if not emails:
        return {}
    rows = (
        db.query(Reservation.email, func.count(Reservation.id))
        .filter(
            Reservation.email.in_({normalize_email(e) for e in emails}),
            Reservation.is_walk_in.is_(False),
            Reservation.status.in_(SEAT_HOLDING_STATUSES),
        )
        .group_by(Reservation.email)
        .all()
    )
    return {email: int(n) for email, n in rows}


def loyalty_for(db: Session, email: str) -> LoyaltyStatus:
    return LoyaltyStatus.for_visits(visit_count(db, email))
