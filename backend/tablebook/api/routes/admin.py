"""
Admin API: walk-ins, reservation list and actions, closures, date notices.
Credential checking sits in front of this router (reverse proxy / outer middleware).
"""
import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from tablebook.api.deps import get_engine, get_store
from tablebook.core.errors import (
    STATUS_NOT_FOUND,
    InvalidInputError,
    Rejection,
    TablebookError,
    error_to_http,
    rejection_to_http,
)
from tablebook.services.admin_service import delete_reservation, list_reservations, mark_no_show
from tablebook.services.booking_engine import BookingEngine
from tablebook.services.closure_registry import (
    create_closure,
    create_day_closure,
    delete_closure,
    list_closures,
)
from tablebook.services.date_notice_service import delete_notice, notices_for, save_notice
from tablebook.services.slot_calendar import normalize_date
from tablebook.services.store import ReservationStore

router = APIRouter()
logger = logging.getLogger(__name__)


def _parse_instant(value: str) -> datetime:
    """'2026-10-20 18:00' or '2026-10-20T18:00[:00]' as naive wall clock. UTC offsets are rejected."""
    try:
        ts = datetime.fromisoformat(str(value or "").strip().replace(" ", "T"))
    except ValueError:
        raise InvalidInputError(f"Invalid date-time {value!r}.")
    if ts.tzinfo is not None:
        raise InvalidInputError(f"Date-time {value!r} must be local wall clock, without a UTC offset.")
    return ts


# --- Walk-ins ---


class WalkInCreate(BaseModel):
    date: str
    time: str
    guests: int
    notes: str = ""


@router.post("/walkin")
def create_walk_in(body: WalkInCreate, engine: BookingEngine = Depends(get_engine)) -> dict[str, Any]:
    """Record guests seated without booking. Only total capacity is checked."""
    try:
        result = engine.record_walk_in(body.date, body.time, body.guests, body.notes)
    except TablebookError as e:
        raise error_to_http(e)
    if isinstance(result, Rejection):
        raise rejection_to_http(result)
    return result.to_dict()


# --- Reservations ---


@router.get("/reservations")
def admin_reservations(
    date: str | None = Query(None),
    view: str = Query("day", pattern="^(day|week)$"),
    store: ReservationStore = Depends(get_store),
) -> list[dict[str, Any]]:
    """Reservations for a day or the week starting at `date`, with each guest's current loyalty."""
    try:
        day = normalize_date(date) if date else None
        with store.session() as db:
            return list_reservations(db, day, view)
    except TablebookError as e:
        raise error_to_http(e)


@router.post("/reservations/{reservation_id}/noshow")
def admin_mark_no_show(reservation_id: str, store: ReservationStore = Depends(get_store)) -> dict[str, Any]:
    try:
        return mark_no_show(store, reservation_id).to_dict()
    except TablebookError as e:
        raise error_to_http(e)


@router.delete("/reservations/{reservation_id}")
def admin_delete_reservation(reservation_id: str, store: ReservationStore = Depends(get_store)) -> dict[str, Any]:
    try:
        delete_reservation(store, reservation_id)
    except TablebookError as e:
        raise error_to_http(e)
    return {"ok": True}


# --- Closures ---


class ClosureCreate(BaseModel):
    start_ts: str
    end_ts: str
    reason: str = "Closed"


class DayClosureCreate(BaseModel):
    date: str
    reason: str = "Closed"


@router.post("/closure")
def admin_create_closure(body: ClosureCreate, store: ReservationStore = Depends(get_store)) -> dict[str, Any]:
    try:
        start, end = _parse_instant(body.start_ts), _parse_instant(body.end_ts)
        with store.session() as db:
            return create_closure(db, start, end, body.reason).to_dict()
    except TablebookError as e:
        raise error_to_http(e)


@router.post("/closure/day")
def admin_close_day(
    body: DayClosureCreate,
    store: ReservationStore = Depends(get_store),
    engine: BookingEngine = Depends(get_engine),
) -> dict[str, Any]:
    """Block the whole day (opening to closing time) with a single closure."""
    try:
        day = normalize_date(body.date)
        with store.session() as db:
            return create_day_closure(db, engine.calendar, day, body.reason).to_dict()
    except TablebookError as e:
        raise error_to_http(e)


@router.get("/closure")
def admin_list_closures(store: ReservationStore = Depends(get_store)) -> list[dict[str, Any]]:
    try:
        with store.session() as db:
            return [c.to_dict() for c in list_closures(db)]
    except TablebookError as e:
        raise error_to_http(e)


@router.delete("/closure/{closure_id}")
def admin_delete_closure(closure_id: str, store: ReservationStore = Depends(get_store)) -> dict[str, Any]:
    try:
        with store.session() as db:
            deleted = delete_closure(db, closure_id)
    except TablebookError as e:
        raise error_to_http(e)
    if not deleted:
        raise HTTPException(status_code=STATUS_NOT_FOUND, detail="Closure not found.")
    return {"ok": True}


# --- Date notices ---


class DateNoticeSave(BaseModel):
    date: str
    title: str = ""
    message: str


@router.get("/special-dates")
def admin_list_notices(store: ReservationStore = Depends(get_store)) -> list[dict[str, Any]]:
    try:
        with store.session() as db:
            return notices_for(db)
    except TablebookError as e:
        raise error_to_http(e)


@router.post("/special-date")
def admin_save_notice(body: DateNoticeSave, store: ReservationStore = Depends(get_store)) -> dict[str, Any]:
    """Create or replace the notice for a date."""
    try:
        with store.session() as db:
            notice = save_notice(db, body.date, body.message, body.title)
    except TablebookError as e:
        raise error_to_http(e)
    return {"ok": True, "notice": notice}


@router.delete("/special-date/{date}")
def admin_delete_notice(date: str, store: ReservationStore = Depends(get_store)) -> dict[str, Any]:
    try:
        with store.session() as db:
            deleted = delete_notice(db, date)
    except TablebookError as e:
        raise error_to_http(e)
    return {"ok": True, "deleted": deleted}
