# app/models/sector.py
"""
Hospital sectors. A sector groups services; its capacity is always the sum
of its services' live capacity and is never stored here.
"""

from sqlalchemy import Column, Integer, String, DateTime
from app.database import Base


class Sector(Base):
    __tablename__ = "sectors"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(200), nullable=False)
    abbreviation = Column(String(10), unique=True, nullable=False, index=True)
    created_at = Column(DateTime)

    def __repr__(self):
        return f"<Sector {self.id} {self.abbreviation}>"
