# app/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy with PostgreSQL (SQLite is accepted for local runs and tests).
All models are auto-imported here so create_tables() creates every table in one call.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import settings


def build_engine(url: str, **overrides):
    """Engine factory shared by the app and the test suite."""
    if url.startswith("sqlite"):
        # SQLite: one connection per thread, wait on the file lock instead of failing fast
        kwargs = {"connect_args": {"check_same_thread": False, "timeout": 30}}
    else:
        kwargs = {
            "pool_pre_ping": True,   # Auto-reconnect if DB connection drops
            "pool_size": 10,
            "max_overflow": 20,
        }
    kwargs.update(overrides)
    return create_engine(url, echo=False, **kwargs)


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None):
    """
    Creates all DB tables and seeds the reference rows. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from app.models.status import Status                         # noqa
    from app.models.sector import Sector                         # noqa
    from app.models.service import Service                       # noqa
    from app.models.bed import Bed                               # noqa
    from app.models.history_entry import HistoryEntry            # noqa
    from app.models.task_item import TaskItem                    # noqa
    from app.models.sequence_counter import SequenceCounter      # noqa
    from app.models.schedule_settings import ScheduleSettings    # noqa
    from app.services.status_catalog import seed_statuses
    from app.services.sequence_service import ensure_counter, HISTORY_COUNTER

    bind = bind or engine
    Base.metadata.create_all(bind=bind)

    db = sessionmaker(autocommit=False, autoflush=False, bind=bind)()
    try:
        seed_statuses(db)
        ensure_counter(db, HISTORY_COUNTER)
    finally:
        db.close()
