"""Per-date guest notices (special opening hours, set menus, ...). One notice per date; saving replaces."""
from sqlalchemy.orm import Session

from tablebook.core.errors import InvalidInputError
from tablebook.models.date_notice import DateNotice
from tablebook.services.slot_calendar import normalize_date


def notices_for(db: Session, date_value: str | None = None) -> list[dict]:
    q = db.query(DateNotice)
    if date_value:
        q = q.filter(DateNotice.date == normalize_date(date_value).isoformat())
    return [n.to_dict() for n in q.order_by(DateNotice.date.asc()).all()]


def save_notice(db: Session, date_value: str, message: str, title: str | None = None) -> dict:
    day = normalize_date(date_value).isoformat()
    message = (message or "").strip()
    if not message:
        raise InvalidInputError("date and message are required.")
    row = db.query(DateNotice).filter(DateNotice.date == day).first()
    if row is None:
        row = DateNotice(date=day)
        db.add(row)
    row.title = (title or "").strip() or None
    row.message = message
    db.flush()
    return row.to_dict()


def delete_notice(db: Session, date_value: str) -> bool:
    day = normalize_date(date_value).isoformat()
    return bool(db.query(DateNotice).filter(DateNotice.date == day).delete(synchronize_session=False))
