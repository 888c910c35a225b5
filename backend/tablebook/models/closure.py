"""Admin-declared interval during which no new online reservation is admitted. Append/delete only."""
import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, String, Text

from tablebook.db.base import Base


class Closure(Base):
    __tablename__ = "closures"
    __table_args__ = (CheckConstraint("end_ts > start_ts", name="ck_closures_interval"),)

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    start_ts = Column(DateTime, nullable=False, index=True)  # naive wall clock
    end_ts = Column(DateTime, nullable=False, index=True)
    reason = Column(Text, nullable=False, default="Closed")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "start_ts": self.start_ts.isoformat(),
            "end_ts": self.end_ts.isoformat(),
            "reason": self.reason,
        }
