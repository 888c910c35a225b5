"""
Database engine and session factory.

Built explicitly by the process entry point (main.lifespan) and disposed on shutdown;
nothing here opens a connection at import time.
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker


def build_engine(database_url: str, timeout_seconds: float = 10.0) -> Engine:
    """Engine with every wait bounded by timeout_seconds (pool checkout, SQLite busy wait)."""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": timeout_seconds},
        )
    return create_engine(
        database_url,
        pool_size=8,
        max_overflow=10,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_timeout=timeout_seconds,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
