# tests/conftest.py
"""Shared fixtures: a fresh SQLite database per test, seeded with the status catalog."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Never reach for the PostgreSQL default while importing app.database
os.environ.setdefault("DATABASE_URL", "sqlite:///./.pytest_bed_tracker.db")
os.environ.setdefault("LOG_DIR", "")

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool
from app.database import build_engine, create_tables
from app.services import facility_service


@pytest.fixture
def engine(tmp_path):
    eng = build_engine(f"sqlite:///{tmp_path / 'beds.db'}", poolclass=NullPool)
    create_tables(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def ward(db):
    """One sector 'Medicine' with two services: MEDE-01 and SURG-01."""
    sector = facility_service.create_sector(db, "Medicine")
    medicine = facility_service.create_service(db, "Medecine", sector.id)
    surgery = facility_service.create_service(db, "Surgery", sector.id)
    return {"sector": sector.id, "medicine": medicine.id, "surgery": surgery.id}


@pytest.fixture
def make_beds(db):
    def _make(service_id, count=1, **kwargs):
        return [facility_service.create_bed(db, service_id, **kwargs).id for _ in range(count)]
    return _make
