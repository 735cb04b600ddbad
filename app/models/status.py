# app/models/status.py
"""
Status catalog table.
Fixed set of bed statuses seeded at startup. Rows are never edited;
new statuses are only ever appended with a new id.
"""

from enum import IntEnum
from sqlalchemy import Column, Integer, String
from app.database import Base


class StatusCode(IntEnum):
    FREE = 1
    OCCUPIED = 2
    TO_CLEAN = 3
    MAINTENANCE = 4
    OUT_OF_SERVICE = 5
    RESERVED = 6
    STANDARD_CLEANING = 7
    DEEP_CLEANING = 8


STATUS_LABELS = {
    StatusCode.FREE: "Free",
    StatusCode.OCCUPIED: "Occupied",
    StatusCode.TO_CLEAN: "To clean",
    StatusCode.MAINTENANCE: "Maintenance",
    StatusCode.OUT_OF_SERVICE: "Out of service",
    StatusCode.RESERVED: "Reserved",
    StatusCode.STANDARD_CLEANING: "Cleaning (standard)",
    StatusCode.DEEP_CLEANING: "Cleaning (deep)",
}

# Sub-statuses accepted alongside TO_CLEAN
CLEANING_KINDS = frozenset({StatusCode.STANDARD_CLEANING, StatusCode.DEEP_CLEANING})

# Statuses whose transitions open a work item
TASK_KINDS = frozenset({StatusCode.TO_CLEAN, StatusCode.MAINTENANCE})

# Catalog entries a bed may actually be in
BED_STATUSES = frozenset(StatusCode) - CLEANING_KINDS


class Status(Base):
    __tablename__ = "statuses"

    id = Column(Integer, primary_key=True, autoincrement=False)
    label = Column(String(100), nullable=False)

    def __repr__(self):
        return f"<Status {self.id} {self.label}>"
