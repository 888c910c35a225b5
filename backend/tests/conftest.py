"""Fixtures: a file-backed SQLite database per test, the store, the engine and a recording notifier."""
import pytest

import tablebook.models  # noqa: F401  (register all tables on Base.metadata)
from tablebook.config import Settings, policy_from_settings
from tablebook.db.base import Base
from tablebook.db.session import build_engine, build_session_factory
from tablebook.services.booking_engine import BookingEngine
from tablebook.services.store import ReservationStore
from tests.helpers import RecordingNotifier, make_settings


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def policy(settings):
    return policy_from_settings(settings)


@pytest.fixture
def db_engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'tablebook.db'}", timeout_seconds=30)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(db_engine) -> ReservationStore:
    return ReservationStore(build_session_factory(db_engine), timeout_seconds=30)


@pytest.fixture
def engine(store, policy) -> BookingEngine:
    return BookingEngine(store, policy)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
