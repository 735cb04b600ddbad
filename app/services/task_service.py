# app/services/task_service.py
"""
Cleaning / maintenance task queue.

Tasks are opened by transition_service and then live on their own: marking a
task done never touches the bed, and later bed transitions never close it.
"""

from datetime import datetime
from typing import Iterable, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session, aliased
from app.errors import NotFoundError, ValidationError
from app.models.status import CLEANING_KINDS, TASK_KINDS, Status
from app.models.task_item import TaskItem
from app.services.visibility import Caller, Target, filter_for_role
from app.utils.logger import get_logger
from app.utils.pagination import Page, apply_sort, paginate

logger = get_logger(__name__)

TASK_SORT_COLUMNS = {
    "created_at": TaskItem.created_at,
    "completed_at": TaskItem.completed_at,
    "bed_id": TaskItem.bed_id,
    "service_name": TaskItem.service_name,
    "kind": TaskItem.kind,
    "urgent": TaskItem.urgent,
    "done": TaskItem.done,
}

PATCHABLE_FIELDS = {"done", "urgent", "assignee", "completed_at", "category"}


def create_task(db: Session, *, bed_id: str, service_id: str, service_name: Optional[str],
                kind: int, category: Optional[int] = None, gender: Optional[str] = None,
                assignee: Optional[str] = None, created_at: Optional[datetime] = None) -> TaskItem:
    if kind not in TASK_KINDS:
        raise ValidationError(f"Status {kind} does not open a task")
    task = TaskItem(
        bed_id=bed_id,
        service_id=service_id,
        service_name=service_name,
        kind=kind,
        category=category,
        gender=gender,
        assignee=assignee,
        urgent=False,
        done=False,
        created_at=created_at or datetime.utcnow(),
    )
    db.add(task)
    db.commit()
    logger.info(f"[TASK] Opened task {task.id} kind={kind} for bed {bed_id}")
    return task


def get_task(db: Session, task_id: int, caller: Optional[Caller] = None) -> TaskItem:
    q = filter_for_role(caller, db.query(TaskItem).filter(TaskItem.id == task_id), Target.TASK)
    task = q.first()
    if not task:
        raise NotFoundError(f"Task {task_id} not found")
    return task


def list_tasks(db: Session, caller: Optional[Caller] = None, kinds: Optional[Iterable[int]] = None,
               done: Optional[bool] = None, urgent: Optional[bool] = None,
               search: Optional[str] = None, page: int = 1, limit: int = 10,
               sort_by: str = "created_at", sort_order: str = "desc") -> Page:
    kind_status = aliased(Status)
    category_status = aliased(Status)
    q = (
        db.query(TaskItem)
        .outerjoin(kind_status, kind_status.id == TaskItem.kind)
        .outerjoin(category_status, category_status.id == TaskItem.category)
    )
    kinds = list(kinds or [])
    if kinds:
        q = q.filter(TaskItem.kind.in_(kinds))
    if done is not None:
        q = q.filter(TaskItem.done == done)
    if urgent is not None:
        q = q.filter(TaskItem.urgent == urgent)
    if search:
        pattern = f"%{search}%"
        q = q.filter(or_(
            TaskItem.bed_id.ilike(pattern),
            TaskItem.service_name.ilike(pattern),
            kind_status.label.ilike(pattern),
            category_status.label.ilike(pattern),
        ))

    q = filter_for_role(caller, q, Target.TASK)
    q = apply_sort(q, TASK_SORT_COLUMNS, sort_by, sort_order, tiebreak=TaskItem.id)
    return paginate(q, page, limit)


def mark_updated(db: Session, task_id: int, patch: dict, caller: Optional[Caller] = None) -> TaskItem:
    """Apply the provided fields only. The originating bed is left as it is."""
    unknown = set(patch) - PATCHABLE_FIELDS
    if unknown:
        raise ValidationError(f"Task fields cannot be updated: {sorted(unknown)}")
    for flag in ("done", "urgent"):
        if flag in patch and patch[flag] is None:
            raise ValidationError(f"'{flag}' cannot be null")
    if patch.get("category") is not None and patch["category"] not in CLEANING_KINDS:
        raise ValidationError(f"Category {patch['category']} is not a cleaning kind")

    task = get_task(db, task_id, caller)
    for key, value in patch.items():
        setattr(task, key, value)
    db.commit()
    logger.info(f"[TASK] Task {task_id} updated: {sorted(patch)}")
    return task
