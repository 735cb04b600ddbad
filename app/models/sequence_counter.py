# app/models/sequence_counter.py
"""Named counters incremented atomically (UPDATE value = value + 1)."""

from sqlalchemy import Column, Integer, String
from app.database import Base


class SequenceCounter(Base):
    __tablename__ = "sequence_counters"

    name = Column(String(50), primary_key=True)
    value = Column(Integer, default=0, nullable=False)

    def __repr__(self):
        return f"<SequenceCounter {self.name}={self.value}>"
