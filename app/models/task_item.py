# app/models/task_item.py
"""
Cleaning / maintenance work items.
Created by transition_service when a bed enters TO_CLEAN or MAINTENANCE.
Closing a task is an explicit action and never changes the bed.
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean
from app.database import Base


class TaskItem(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bed_id = Column(String(30), nullable=False, index=True)
    service_id = Column(String(20), nullable=False, index=True)
    service_name = Column(String(200))
    kind = Column(Integer, nullable=False, index=True)            # TO_CLEAN | MAINTENANCE
    category = Column(Integer)                                    # cleaning sub-kind
    created_at = Column(DateTime, nullable=False, index=True)
    completed_at = Column(DateTime)
    urgent = Column(Boolean, default=False, nullable=False, index=True)
    done = Column(Boolean, default=False, nullable=False, index=True)
    assignee = Column(String(200))
    gender = Column(String(30))

    def __repr__(self):
        return f"<TaskItem {self.id} bed={self.bed_id} kind={self.kind} done={self.done}>"
