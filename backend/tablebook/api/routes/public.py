"""
Guest-facing API: venue config, slot grid, booking, loyalty lookup, cancellation, date notices.
"""
import logging
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from pydantic import BaseModel, Field

from tablebook.api.deps import get_engine, get_notifier, get_settings, get_store
from tablebook.config import Settings
from tablebook.core.errors import Rejection, TablebookError, error_to_http, rejection_to_http
from tablebook.services.booking_engine import BookingEngine, GuestInfo
from tablebook.services.cancellation import cancel_reservation
from tablebook.services.date_notice_service import notices_for
from tablebook.services.email_notify import Notifier
from tablebook.services.loyalty import loyalty_for, unlocked_now
from tablebook.services.notifications import notify_booking_canceled, notify_booking_confirmed
from tablebook.services.store import ReservationStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/api/config")
def public_config(settings: Settings = Depends(get_settings)) -> dict[str, Any]:
    return {
        "brand": settings.brand_name,
        "address": settings.venue_address,
        "phone": settings.venue_phone,
        "email": settings.venue_email,
        "max_online_guests": settings.max_online_guests,
    }


# --- Slots ---


@router.get("/api/slots")
def list_slots(
    date: str = Query(..., description="YYYY-MM-DD"),
    guests: int = Query(1, ge=1),
    engine: BookingEngine = Depends(get_engine),
) -> list[dict[str, Any]]:
    """Start times of the day with bookability for a party of `guests`. Advisory: booking re-checks."""
    try:
        slots = engine.get_slots(date, guests)
    except TablebookError as e:
        raise error_to_http(e)
    return [s.to_dict() for s in slots]


# --- Online reservation ---


class ReservationCreate(BaseModel):
    date: str
    time: str
    first_name: str
    name: str
    email: str
    phone: str = ""
    guests: int = Field(..., description="Party size")
    notes: str = ""


@router.post("/api/reservations")
def create_reservation(
    body: ReservationCreate,
    background: BackgroundTasks,
    engine: BookingEngine = Depends(get_engine),
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """
    Admit and store a reservation, or 400/409 with {error, message}.
    Confirmation mails go out after the response; a mail failure never undoes the booking.
    """
    guest = GuestInfo(
        first_name=body.first_name,
        name=body.name,
        email=body.email,
        phone=body.phone,
        notes=body.notes,
    )
    try:
        result = engine.book(body.date, body.time, body.guests, guest)
    except TablebookError as e:
        raise error_to_http(e)
    if isinstance(result, Rejection):
        raise rejection_to_http(result)

    loyalty = result.loyalty
    background.add_task(notify_booking_confirmed, notifier, settings, result.reservation, loyalty)
    return {
        "ok": True,
        "reservation": result.reservation.to_dict(),
        "loyalty": {
            "visit_index": loyalty.visit_index,
            "discount": loyalty.tier,
            "now_unlocked_tier": unlocked_now(loyalty.visit_index),
            "next_milestone": loyalty.next_milestone,
            "show_loyalty_popup": loyalty.tier > 0,
        },
    }


# --- Loyalty ---


@router.get("/api/loyalty")
def get_loyalty(
    email: str = Query(..., min_length=3),
    store: ReservationStore = Depends(get_store),
) -> dict[str, Any]:
    try:
        with store.session() as db:
            return loyalty_for(db, email).to_dict()
    except TablebookError as e:
        raise error_to_http(e)


# --- Cancel ---


def _cancel(token: str, background: BackgroundTasks, store: ReservationStore, notifier: Notifier, settings: Settings) -> dict[str, Any]:
    try:
        outcome = cancel_reservation(store, token)
        if outcome.changed:
            with store.session() as db:
                loyalty = loyalty_for(db, outcome.reservation.email)
            background.add_task(notify_booking_canceled, notifier, settings, outcome.reservation, loyalty)
    except TablebookError as e:
        raise error_to_http(e)
    return {
        "ok": True,
        "id": outcome.reservation.id,
        "status": outcome.reservation.status,
        "already_canceled": not outcome.changed,
    }


@router.get("/cancel/{token}")
def cancel_by_link(
    token: str,
    background: BackgroundTasks,
    store: ReservationStore = Depends(get_store),
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Link from the confirmation mail."""
    return _cancel(token, background, store, notifier, settings)


@router.post("/api/cancel/{token}")
def cancel_by_api(
    token: str,
    background: BackgroundTasks,
    store: ReservationStore = Depends(get_store),
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    return _cancel(token, background, store, notifier, settings)


# --- Date notices ---


@router.get("/api/special-dates")
def public_special_dates(
    date: str | None = Query(None),
    store: ReservationStore = Depends(get_store),
) -> list[dict[str, Any]]:
    """Notices for one date (usually 0 or 1), or all when no date is given."""
    try:
        with store.session() as db:
            return notices_for(db, date)
    except TablebookError as e:
        raise error_to_http(e)
