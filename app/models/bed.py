# app/models/bed.py
"""
One row per physical bed.
status_id is only ever changed by transition_service. The three scheduled_*
columns are mutually exclusive and follow the current status.
version is SQLAlchemy's optimistic lock: a stale UPDATE raises StaleDataError.
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, ForeignKey
from app.database import Base


class Bed(Base):
    __tablename__ = "beds"

    id = Column(String(30), primary_key=True)                 # <service_id>-<NN>
    service_id = Column(String(20), ForeignKey("services.id"), nullable=False, index=True)
    status_id = Column(Integer, ForeignKey("statuses.id"), nullable=False, index=True)
    sub_status_id = Column(Integer, ForeignKey("statuses.id"))
    last_status_change_at = Column(DateTime)
    scheduled_cleaning_at = Column(DateTime)
    scheduled_maintenance_at = Column(DateTime)
    scheduled_reservation_at = Column(DateTime)
    active = Column(Boolean, default=True, nullable=False, index=True)
    gender = Column(String(30))
    is_emergency_reserved = Column(Boolean, default=False, nullable=False)
    description = Column(Text)
    created_at = Column(DateTime)
    deleted_at = Column(DateTime, index=True)
    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Bed {self.id} status={self.status_id} active={self.active}>"
