"""A committed or historical claim on seats. Walk-ins share the table with is_walk_in=True."""
import secrets
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.sql import func

from tablebook.core.constants import STATUS_CONFIRMED
from tablebook.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_reservation_id() -> str:
    return uuid.uuid4().hex


def new_cancel_token() -> str:
    return secrets.token_urlsafe(16)


class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        Index("ix_reservations_date_time", "date", "time"),
        CheckConstraint("guests >= 1", name="ck_reservations_guests_positive"),
        CheckConstraint("end_ts > start_ts", name="ck_reservations_interval"),
    )

    id = Column(String(32), primary_key=True, default=new_reservation_id)
    cancel_token = Column(String(64), nullable=False, unique=True, default=new_cancel_token)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD, civil date
    time = Column(String(5), nullable=False)  # HH:MM local wall clock
    start_ts = Column(DateTime, nullable=False, index=True)  # naive wall clock (date + time)
    end_ts = Column(DateTime, nullable=False, index=True)
    first_name = Column(String(128), nullable=False)
    name = Column(String(128), nullable=False)
    email = Column(String(255), nullable=False, index=True)  # trimmed + lower-cased; loyalty key
    phone = Column(String(64), nullable=True)
    guests = Column(Integer, nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default=STATUS_CONFIRMED)  # confirmed | canceled | noshow
    is_walk_in = Column(Boolean, nullable=False, default=False)
    reminder_sent = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "time": self.time,
            "start_ts": self.start_ts.isoformat() if self.start_ts else None,
            "end_ts": self.end_ts.isoformat() if self.end_ts else None,
            "first_name": self.first_name,
            "name": self.name,
            "email": self.email,
            "phone": self.phone or "",
            "guests": self.guests,
            "notes": self.notes or "",
            "status": self.status,
            "is_walk_in": bool(self.is_walk_in),
            "reminder_sent": bool(self.reminder_sent),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
