# app/models/schedule_settings.py
"""
Stored cleaning / maintenance working hours (single row, id=1).
When the row is missing, the defaults from app.config apply.
"""

from sqlalchemy import Column, Integer, DateTime
from app.database import Base


class ScheduleSettings(Base):
    __tablename__ = "schedule_settings"

    id = Column(Integer, primary_key=True, autoincrement=False)
    cleaning_start_hour = Column(Integer, nullable=False)
    cleaning_end_hour = Column(Integer, nullable=False)
    cleaning_interval_minutes = Column(Integer, nullable=False)
    maintenance_start_hour = Column(Integer, nullable=False)
    maintenance_end_hour = Column(Integer, nullable=False)
    maintenance_interval_minutes = Column(Integer, nullable=False)
    updated_at = Column(DateTime)

    def __repr__(self):
        return (f"<ScheduleSettings cleaning={self.cleaning_start_hour}-{self.cleaning_end_hour}h "
                f"maintenance={self.maintenance_start_hour}-{self.maintenance_end_hour}h>")
