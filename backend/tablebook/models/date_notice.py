"""Admin-managed notice shown to guests for one date (holiday menu, private event, ...). One per date."""
from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from tablebook.db.base import Base


class DateNotice(Base):
    __tablename__ = "date_notices"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(String(10), nullable=False, unique=True)
    title = Column(String(255), nullable=True)
    message = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def to_dict(self) -> dict:
        return {"date": self.date, "title": self.title or "", "message": self.message}
