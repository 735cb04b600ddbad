# app/models/history_entry.py
"""
Append-only audit of every bed transition.
id comes from the "history" sequence counter, never from autoincrement,
so ids stay unique across writers and are never handed out twice.
"""

from sqlalchemy import Column, Integer, String, DateTime
from app.database import Base


class HistoryEntry(Base):
    __tablename__ = "status_history"

    id = Column(Integer, primary_key=True, autoincrement=False)
    bed_id = Column(String(30), nullable=False, index=True)
    service_id = Column(String(20), nullable=False, index=True)   # copy at transition time
    status_id = Column(Integer, nullable=False, index=True)
    previous_status_id = Column(Integer, index=True)
    sub_status_id = Column(Integer)
    actor = Column(String(100), nullable=False, index=True)
    timestamp = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<HistoryEntry {self.id} bed={self.bed_id} {self.previous_status_id}->{self.status_id}>"
