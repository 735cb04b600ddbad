# app/schemas/settings.py
from pydantic import BaseModel
from typing import Optional


class WorkingHoursOut(BaseModel):
    cleaning_start_hour: int
    cleaning_end_hour: int
    cleaning_interval_minutes: int
    maintenance_start_hour: int
    maintenance_end_hour: int
    maintenance_interval_minutes: int


class WorkingHoursUpdate(BaseModel):
    cleaning_start_hour: Optional[int] = None
    cleaning_end_hour: Optional[int] = None
    cleaning_interval_minutes: Optional[int] = None
    maintenance_start_hour: Optional[int] = None
    maintenance_end_hour: Optional[int] = None
    maintenance_interval_minutes: Optional[int] = None
