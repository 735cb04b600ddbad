# app/services/history_service.py
"""
Status history ledger.

append_entry() allocates the id from the "history" counter (its own committed
transaction) and inserts the row. A failed insert is retried with a fresh id;
when every attempt fails a ConsistencyError is raised so the missing audit
row is never silent. Listing is newest first, ties broken by id.
"""

from datetime import date, datetime, time
from typing import Optional, Union
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.config import settings
from app.errors import ConsistencyError, NotFoundError
from app.models.bed import Bed
from app.models.history_entry import HistoryEntry
from app.services.sequence_service import HISTORY_COUNTER, next_value
from app.services.visibility import Caller, Target, filter_for_role
from app.utils.logger import get_logger
from app.utils.pagination import Page, paginate

logger = get_logger(__name__)

DateLike = Union[date, datetime]


def append_entry(db: Session, *, bed_id: str, service_id: str, status_id: int,
                 previous_status_id: Optional[int], sub_status_id: Optional[int],
                 actor: str, timestamp: datetime, retries: Optional[int] = None) -> HistoryEntry:
    retries = settings.HISTORY_APPEND_RETRIES if retries is None else retries
    attempts = retries + 1
    bind = db.get_bind()

    for attempt in range(1, attempts + 1):
        try:
            entry = HistoryEntry(
                id=next_value(bind, HISTORY_COUNTER),
                bed_id=bed_id,
                service_id=service_id,
                status_id=status_id,
                previous_status_id=previous_status_id,
                sub_status_id=sub_status_id,
                actor=actor,
                timestamp=timestamp,
            )
            db.add(entry)
            db.commit()
            return entry
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning(f"[HISTORY] Append for bed {bed_id} failed (attempt {attempt}/{attempts}): {e}")

    logger.error(f"[HISTORY] Giving up on history for bed {bed_id} ({previous_status_id}->{status_id})")
    raise ConsistencyError(
        f"Bed {bed_id} was updated but its history entry could not be written",
        details={"bed_id": bed_id, "status_id": status_id, "previous_status_id": previous_status_id},
    )


def _start_of(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def _end_of(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.max)


def query_history(db: Session, caller: Optional[Caller] = None, bed_id: Optional[str] = None,
                  service_id: Optional[str] = None, status_id: Optional[int] = None,
                  actor: Optional[str] = None, start: Optional[DateLike] = None,
                  end: Optional[DateLike] = None, page: int = 1, limit: int = 10) -> Page:
    """
    Filtered, paginated history. A bare date as `start` covers that whole day from
    00:00, a bare date as `end` covers it up to 23:59:59.999999.
    """
    q = db.query(HistoryEntry)
    if bed_id:
        q = q.filter(HistoryEntry.bed_id == bed_id)
    if service_id:
        q = q.filter(HistoryEntry.service_id == service_id)
    if status_id is not None:
        q = q.filter(HistoryEntry.status_id == status_id)
    if actor:
        q = q.filter(HistoryEntry.actor == actor)
    if start is not None:
        q = q.filter(HistoryEntry.timestamp >= _start_of(start))
    if end is not None:
        q = q.filter(HistoryEntry.timestamp <= _end_of(end))

    q = filter_for_role(caller, q, Target.HISTORY)
    q = q.order_by(HistoryEntry.timestamp.desc(), HistoryEntry.id.desc())
    return paginate(q, page, limit)


def bed_history(db: Session, bed_id: str, limit: int = 50, caller: Optional[Caller] = None):
    """Latest entries for one bed."""
    if not db.query(Bed).filter(Bed.id == bed_id, Bed.deleted_at.is_(None)).first():
        raise NotFoundError(f"Bed '{bed_id}' not found")
    q = filter_for_role(caller, db.query(HistoryEntry).filter(HistoryEntry.bed_id == bed_id),
                        Target.HISTORY)
    return q.order_by(HistoryEntry.timestamp.desc(), HistoryEntry.id.desc()).limit(limit).all()
