# app/services/transition_service.py
"""
Bed status transition engine.

transition_bed() is the only code path that changes a bed's status. For one
request it, in order:
  1. loads the bed under a per-bed lock (and a row lock where supported)
  2. checks policy, catalog, caller scope and the status-specific context
  3. rewrites status, sub-status, the scheduled_* columns, active, timestamp
  4. commits the bed (optimistic version check → ConflictError)
  5. appends the history entry (retried, ConsistencyError when exhausted)
  6. opens a cleaning / maintenance task when the new status calls for one

Invariants after every successful call:
  - active == (status_id == FREE)
  - the scheduled_* column matching the status is set, the other two are null
  - sub_status_id is set only while status_id == TO_CLEAN
"""

import threading
import weakref
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from app.config import settings
from app.errors import ConflictError, InvalidStatusError, NotFoundError, PermissionDeniedError, ValidationError
from app.models.bed import Bed
from app.models.service import Service
from app.models.status import CLEANING_KINDS, TASK_KINDS, StatusCode
from app.services.history_service import append_entry
from app.services.schedule_service import WorkingHours
from app.services.status_catalog import get_status, is_bed_status
from app.services.task_service import create_task
from app.services.visibility import Caller
from app.utils.logger import get_logger

logger = get_logger(__name__)


class TransitionPolicy(str, Enum):
    ALWAYS_ALLOW = "always_allow"
    REQUIRE_ACTIVE = "require_active"     # only an active (FREE) bed may change status


@dataclass(frozen=True)
class TransitionOptions:
    policy: TransitionPolicy = TransitionPolicy.ALWAYS_ALLOW
    working_hours: WorkingHours = field(default_factory=WorkingHours.from_settings)
    history_retries: int = 3

    @classmethod
    def from_settings(cls, working_hours: Optional[WorkingHours] = None) -> "TransitionOptions":
        return cls(
            policy=TransitionPolicy(settings.TRANSITION_POLICY),
            working_hours=working_hours or WorkingHours.from_settings(),
            history_retries=settings.HISTORY_APPEND_RETRIES,
        )


@dataclass
class TransitionContext:
    actor: str
    sub_status_id: Optional[int] = None      # cleaning kind, TO_CLEAN only
    cleaning_at: Optional[datetime] = None
    maintenance_at: Optional[datetime] = None
    reservation_at: Optional[datetime] = None
    assignee: Optional[str] = None           # copied onto the task


SCHEDULE_COLUMNS = {
    StatusCode.TO_CLEAN: "scheduled_cleaning_at",
    StatusCode.MAINTENANCE: "scheduled_maintenance_at",
    StatusCode.RESERVED: "scheduled_reservation_at",
}


class BedLocks:
    """
    One lock per bed id; transitions on the same bed run one at a time.
    Entries are weak: a lock nobody holds or waits on is dropped.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = weakref.WeakValueDictionary()

    def __len__(self):
        return len(self._locks)

    def for_bed(self, bed_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(bed_id)
            if lock is None:
                lock = self._locks[bed_id] = threading.Lock()
            return lock


_bed_locks = BedLocks()


def _as_naive_utc(at: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive UTC; aware inputs are converted, naive ones taken as UTC."""
    if at is None or at.tzinfo is None:
        return at
    return at.astimezone(timezone.utc).replace(tzinfo=None)


def _resolve_schedule(target: StatusCode, context: TransitionContext,
                      hours: WorkingHours, now: datetime) -> Optional[datetime]:
    """Timestamp for the scheduled_* column matching `target` (None for other statuses)."""
    if target in (StatusCode.TO_CLEAN, StatusCode.MAINTENANCE):
        requested = context.cleaning_at if target == StatusCode.TO_CLEAN else context.maintenance_at
        requested = _as_naive_utc(requested)
        if requested is None:
            return hours.next_slot(target, now)
        hours.validate_slot(target, requested)
        return requested
    if target == StatusCode.RESERVED:
        if context.reservation_at is None:
            raise ValidationError("A reservation time is required to reserve a bed")
        return _as_naive_utc(context.reservation_at)
    return None


def _resolve_sub_status(target: StatusCode, context: TransitionContext) -> Optional[int]:
    if target != StatusCode.TO_CLEAN:
        return None
    if context.sub_status_id is not None and context.sub_status_id not in CLEANING_KINDS:
        raise ValidationError(f"Sub-status {context.sub_status_id} is not a cleaning kind")
    return context.sub_status_id


def transition_bed(db: Session, bed_id: str, target_status_id: int, context: TransitionContext,
                   caller: Optional[Caller] = None, options: Optional[TransitionOptions] = None) -> Bed:
    options = options or TransitionOptions.from_settings()
    with _bed_locks.for_bed(bed_id):
        return _transition_locked(db, bed_id, target_status_id, context, caller, options)


def _transition_locked(db: Session, bed_id: str, target_status_id: int, context: TransitionContext,
                       caller: Optional[Caller], options: TransitionOptions) -> Bed:
    if not context.actor or not context.actor.strip():
        raise ValidationError("The acting user is required")

    bed = (
        db.query(Bed)
        .filter(Bed.id == bed_id, Bed.deleted_at.is_(None))
        .populate_existing()
        .with_for_update()
        .first()
    )
    if not bed:
        raise NotFoundError(f"Bed '{bed_id}' not found")

    if options.policy == TransitionPolicy.REQUIRE_ACTIVE and not bed.active:
        db.rollback()
        raise ValidationError(f"Cannot update status of inactive bed '{bed_id}'")

    if get_status(db, target_status_id) is None or not is_bed_status(target_status_id):
        db.rollback()
        raise InvalidStatusError(f"Status {target_status_id} is not a valid bed status")
    target = StatusCode(target_status_id)

    if caller is not None and not caller.can_access_service(bed.service_id):
        db.rollback()
        raise PermissionDeniedError(f"Access denied to service '{bed.service_id}'")

    now = datetime.utcnow()
    try:
        scheduled_at = _resolve_schedule(target, context, options.working_hours, now)
        sub_status_id = _resolve_sub_status(target, context)
    except ValidationError:
        db.rollback()
        raise

    previous_status_id = bed.status_id
    service_id = bed.service_id
    gender = bed.gender
    service_name = db.query(Service.name).filter(Service.id == service_id).scalar()

    bed.status_id = target
    bed.sub_status_id = sub_status_id
    bed.scheduled_cleaning_at = None
    bed.scheduled_maintenance_at = None
    bed.scheduled_reservation_at = None
    if target in SCHEDULE_COLUMNS:
        setattr(bed, SCHEDULE_COLUMNS[target], scheduled_at)
    bed.active = target == StatusCode.FREE
    bed.last_status_change_at = now

    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning(f"[TRANSITION] Concurrent write detected on bed {bed_id}")
        raise ConflictError(f"Bed '{bed_id}' was modified concurrently, retry the transition")

    logger.info(f"[TRANSITION] {bed_id}: {previous_status_id} -> {int(target)} by {context.actor}")

    append_entry(
        db,
        bed_id=bed_id,
        service_id=service_id,
        status_id=int(target),
        previous_status_id=previous_status_id,
        sub_status_id=sub_status_id,
        actor=context.actor,
        timestamp=now,
        retries=options.history_retries,
    )

    if target in TASK_KINDS:
        create_task(
            db,
            bed_id=bed_id,
            service_id=service_id,
            service_name=service_name,
            kind=int(target),
            category=sub_status_id,
            gender=gender,
            assignee=context.assignee,
            created_at=now,
        )

    db.refresh(bed)
    return bed
