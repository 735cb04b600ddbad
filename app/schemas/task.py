# app/schemas/task.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class TaskOut(BaseModel):
    id: int
    bed_id: str
    service_id: str
    service_name: Optional[str]
    kind: int
    category: Optional[int]
    created_at: datetime
    completed_at: Optional[datetime]
    urgent: bool
    done: bool
    assignee: Optional[str]
    gender: Optional[str]

    class Config:
        from_attributes = True


class TaskPatch(BaseModel):
    done: Optional[bool] = None
    urgent: Optional[bool] = None
    assignee: Optional[str] = None
    completed_at: Optional[datetime] = None
    category: Optional[int] = None


class TaskPage(BaseModel):
    total: int
    items: list[TaskOut]
    page: int
    limit: int
    total_pages: int
