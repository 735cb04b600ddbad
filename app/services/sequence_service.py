# app/services/sequence_service.py
"""
Atomic named counters.
next_value() runs UPDATE ... SET value = value + 1 and reads the result back
inside one short transaction on its own session, then commits. The row lock
taken by the UPDATE keeps concurrent writers from reading the same value, and
committing separately means a later rollback of the caller never returns an id.
"""

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.models.sequence_counter import SequenceCounter
from app.utils.logger import get_logger

logger = get_logger(__name__)

HISTORY_COUNTER = "history"


def ensure_counter(db: Session, name: str):
    """Create the counter row at zero if it does not exist yet."""
    if db.query(SequenceCounter).filter(SequenceCounter.name == name).first():
        return
    db.add(SequenceCounter(name=name, value=0))
    try:
        db.commit()
        logger.info(f"[SEQ] Counter '{name}' created")
    except IntegrityError:
        # created concurrently by another writer
        db.rollback()


def next_value(bind, name: str) -> int:
    """Increment-and-get on the named counter. Never returns the same value twice."""
    with Session(bind=bind) as db:
        result = db.execute(
            update(SequenceCounter)
            .where(SequenceCounter.name == name)
            .values(value=SequenceCounter.value + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            db.rollback()
            ensure_counter(db, name)
            return next_value(bind, name)
        value = db.execute(
            select(SequenceCounter.value).where(SequenceCounter.name == name)
        ).scalar_one()
        db.commit()
    return value
