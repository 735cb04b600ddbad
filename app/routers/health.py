# app/routers/health.py
"""
System health check endpoint.
Reports database reachability and whether the reference rows the transition
engine depends on (status catalog, history counter) are in place.
"""

from datetime import datetime
from fastapi import APIRouter, Depends
from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.bed import Bed
from app.models.sequence_counter import SequenceCounter
from app.models.status import STATUS_LABELS, Status
from app.services.sequence_service import HISTORY_COUNTER

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db)):
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "database": "unknown",
        "status_catalog": None,
        "history_counter": None,
        "beds": None,
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
        seeded = db.query(func.count(Status.id)).scalar()
        counter = db.query(SequenceCounter.value).filter(SequenceCounter.name == HISTORY_COUNTER).scalar()
        result["status_catalog"] = f"{seeded}/{len(STATUS_LABELS)}"
        result["history_counter"] = counter
        result["beds"] = db.query(func.count(Bed.id)).filter(Bed.deleted_at.is_(None)).scalar()
        if seeded < len(STATUS_LABELS) or counter is None:
            result["status"] = "degraded"
    except SQLAlchemyError as e:
        result["database"] = f"error: {e}"
        result["status"] = "degraded"

    return result
