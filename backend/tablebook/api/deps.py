"""FastAPI dependencies: collaborators built in main.lifespan and kept on app.state."""
from fastapi import Request

from tablebook.config import Settings
from tablebook.services.booking_engine import BookingEngine
from tablebook.services.email_notify import Notifier
from tablebook.services.store import ReservationStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> ReservationStore:
    return request.app.state.store


def get_engine(request: Request) -> BookingEngine:
    return request.app.state.booking_engine


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier
