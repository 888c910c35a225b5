"""
FastAPI app entrypoint.

The lifespan owns every long-lived collaborator: database engine, ReservationStore, Notifier,
BookingEngine and the reminder scheduler are built on startup, kept on app.state, and closed on shutdown.
"""
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from tablebook.api.routes import admin, public
from tablebook.config import Settings, policy_from_settings, settings as default_settings
from tablebook.core.constants import REMINDER_SWEEP_JOB_ID
from tablebook.db.session import build_engine, build_session_factory
from tablebook.scheduler.reminder_job import run_reminder_job
from tablebook.services.booking_engine import BookingEngine
from tablebook.services.email_notify import Notifier, build_notifier
from tablebook.services.store import ReservationStore

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    store: ReservationStore | None = None,
    notifier: Notifier | None = None,
    run_scheduler: bool = True,
) -> FastAPI:
    """Build the app. Tests pass their own store/notifier and skip the scheduler."""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db_engine = None
        app_store = store
        if app_store is None:
            db_engine = build_engine(settings.database_url, settings.db_timeout_seconds)
            app_store = ReservationStore(build_session_factory(db_engine), settings.db_timeout_seconds)
        app_notifier = notifier or build_notifier(settings)

        app.state.settings = settings
        app.state.store = app_store
        app.state.notifier = app_notifier
        app.state.booking_engine = BookingEngine(app_store, policy_from_settings(settings))

        scheduler = None
        if run_scheduler:
            scheduler = BackgroundScheduler()
            scheduler.add_job(
                run_reminder_job,
                "interval",
                minutes=settings.reminder_interval_minutes,
                id=REMINDER_SWEEP_JOB_ID,
                args=[app_store, app_notifier, settings],
                max_instances=1,
                coalesce=True,
            )
            scheduler.start()
            app.state.scheduler = scheduler
        logger.info(
            "Tablebook ready: hours %s-%s, seats %s total / %s reservable, walk-in buffer %s",
            settings.open_time,
            settings.close_time,
            settings.max_seats_total,
            settings.max_seats_reservable,
            settings.walkin_buffer,
        )
        yield
        if scheduler is not None:
            scheduler.shutdown(wait=False)
        if db_engine is not None:
            db_engine.dispose()

    app = FastAPI(title="Tablebook", version="0.1.0", lifespan=lifespan)

    # CORS: dev origins + optional CORS_ORIGINS env (comma-separated) for the booking widget host
    cors_origins = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    cors_extra = os.getenv("CORS_ORIGINS", "")
    if cors_extra:
        cors_origins.extend(o.strip() for o in cors_extra.split(",") if o.strip())
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(public.router, tags=["public"])
    app.include_router(admin.router, prefix="/api/admin", tags=["admin"])

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
