# app/models/service.py
"""
Hospital services (wards). Bed capacity is deliberately absent:
it is recomputed from the beds table by capacity_service on every read.
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey
from app.database import Base


class Service(Base):
    __tablename__ = "services"

    id = Column(String(20), primary_key=True)                 # e.g. MEDE-01
    name = Column(String(200), nullable=False)
    sector_id = Column(Integer, ForeignKey("sectors.id"), nullable=False, index=True)
    ror = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime)

    def __repr__(self):
        return f"<Service {self.id} sector={self.sector_id}>"
