# app/routers/tasks.py
"""Cleaning and maintenance tasks. Closing a task never frees the bed."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from app.database import get_db
from app.errors import ValidationError
from app.identity import get_caller
from app.schemas.task import TaskOut, TaskPage, TaskPatch
from app.services.task_service import list_tasks, mark_updated
from app.services.visibility import Caller

router = APIRouter()


@router.get("/tasks", response_model=TaskPage)
def get_tasks(
    kind: Optional[str] = None,
    done: Optional[bool] = None,
    urgent: Optional[bool] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    """`kind` accepts one status id or several, comma-separated (e.g. 3,4)."""
    try:
        kinds = [int(k) for k in kind.split(",") if k.strip()] if kind else None
    except ValueError:
        raise ValidationError(f"kind must be status ids separated by commas, got '{kind}'")
    result = list_tasks(db, caller, kinds=kinds, done=done, urgent=urgent, search=search,
                        page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)
    return TaskPage(total=result.total, items=result.items, page=result.page,
                    limit=result.limit, total_pages=result.total_pages)


@router.patch("/tasks/{task_id}", response_model=TaskOut)
def patch_task(task_id: int, body: TaskPatch, db: Session = Depends(get_db),
               caller: Caller = Depends(get_caller)):
    return mark_updated(db, task_id, body.model_dump(exclude_unset=True), caller)
