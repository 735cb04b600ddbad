# app/services/status_catalog.py
"""
Read-only status catalog.
Seeded once at startup; existing rows are never rewritten.
"""

from sqlalchemy.orm import Session
from app.models.status import Status, STATUS_LABELS, BED_STATUSES
from app.utils.logger import get_logger

logger = get_logger(__name__)


def seed_statuses(db: Session) -> int:
    """Insert any missing catalog rows. Returns how many were added."""
    existing = {row.id for row in db.query(Status.id).all()}
    added = 0
    for code, label in STATUS_LABELS.items():
        if int(code) not in existing:
            db.add(Status(id=int(code), label=label))
            added += 1
    if added:
        db.commit()
        logger.info(f"[CATALOG] Seeded {added} statuses")
    return added


def list_statuses(db: Session):
    return db.query(Status).order_by(Status.id.asc()).all()


def get_status(db: Session, status_id):
    """Find a catalog entry by id. Returns None if not found."""
    if status_id is None:
        return None
    return db.query(Status).filter(Status.id == int(status_id)).first()


def is_bed_status(status_id) -> bool:
    """Cleaning sub-kinds live in the catalog but are never a bed's main status."""
    return status_id in BED_STATUSES
