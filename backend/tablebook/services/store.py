"""
Transactional access to reservations and closures.

Two ways in:
  - session(): one short transaction for reads and single-row writes (cancel, no-show, closures).
  - admission(date): the serialized read-then-write region for seat admission. At most one
    admission per date runs at a time, across threads (per-date lock) and across processes
    (PostgreSQL transaction-scoped advisory lock on the same key).
"""
import hashlib
import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from tablebook.core.errors import StorageUnavailable

logger = logging.getLogger(__name__)


def _advisory_lock_key(date_str: str) -> int:
    """Deterministic bigint for PostgreSQL advisory lock (one date = one in-flight admission)."""
    h = hashlib.sha256(f"admission|{date_str}".encode()).digest()[:8]
    return int.from_bytes(h, "big") % (2**63)


class ReservationStore:
    def __init__(self, session_factory: sessionmaker, timeout_seconds: float = 10.0):
        self._session_factory = session_factory
        self._timeout_seconds = timeout_seconds
        # date -> [lock, number of admissions holding or waiting for it]; entries go when unused
        self._date_locks: dict[str, list] = {}
        self._guard = threading.Lock()

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Commit on clean exit; roll back on any error. Database errors surface as StorageUnavailable."""
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning("Storage error, transaction rolled back: %s", e)
            raise StorageUnavailable(f"Storage unavailable: {e.__class__.__name__}") from e
        except BaseException:
            db.rollback()
            raise
        finally:
            db.close()

    @contextmanager
    def admission(self, date_str: str) -> Iterator[Session]:
        """
        Exclusive transaction for one date. Everything read and written inside commits together
        or not at all; no other admission on the same date can read until this one has committed.
        """
        lock = self._checkout_lock(date_str)
        try:
            if not lock.acquire(timeout=self._timeout_seconds):
                raise StorageUnavailable(f"Timed out waiting for admission on {date_str}")
            try:
                with self.session() as db:
                    self._lock_date_in_db(db, date_str)
                    yield db
            finally:
                lock.release()
        finally:
            self._return_lock(date_str)

    def _checkout_lock(self, date_str: str) -> threading.Lock:
        with self._guard:
            entry = self._date_locks.get(date_str)
            if entry is None:
                entry = self._date_locks[date_str] = [threading.Lock(), 0]
            entry[1] += 1
            return entry[0]

    def _return_lock(self, date_str: str) -> None:
        with self._guard:
            entry = self._date_locks[date_str]
            entry[1] -= 1
            if entry[1] == 0:
                del self._date_locks[date_str]

    def _lock_date_in_db(self, db: Session, date_str: str) -> None:
        if db.get_bind().dialect.name != "postgresql":
            return
        timeout_ms = int(self._timeout_seconds * 1000)
        db.execute(text(f"SET LOCAL lock_timeout = '{timeout_ms}ms'"))
        db.execute(text("SELECT pg_advisory_xact_lock(:k)"), {"k": _advisory_lock_key(date_str)})
