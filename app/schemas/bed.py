# app/schemas/bed.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class BedCreate(BaseModel):
    service_id: str
    gender: Optional[str] = None
    is_emergency_reserved: bool = False
    description: Optional[str] = None


class BedUpdate(BaseModel):
    gender: Optional[str] = None
    is_emergency_reserved: Optional[bool] = None
    description: Optional[str] = None


class StatusChange(BaseModel):
    """Body of PATCH /beds/{bed_id}/status. The actor comes from the caller identity."""
    status_id: int
    sub_status_id: Optional[int] = None
    cleaning_at: Optional[datetime] = None
    maintenance_at: Optional[datetime] = None
    reservation_at: Optional[datetime] = None
    assignee: Optional[str] = None


class BedOut(BaseModel):
    id: str
    service_id: str
    status_id: int
    sub_status_id: Optional[int]
    last_status_change_at: Optional[datetime]
    scheduled_cleaning_at: Optional[datetime]
    scheduled_maintenance_at: Optional[datetime]
    scheduled_reservation_at: Optional[datetime]
    active: bool
    gender: Optional[str]
    is_emergency_reserved: bool
    description: Optional[str]

    class Config:
        from_attributes = True


class BedPage(BaseModel):
    total: int
    items: list[BedOut]
    page: int
    limit: int
    total_pages: int
