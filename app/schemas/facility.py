# app/schemas/facility.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class SectorCreate(BaseModel):
    name: str


class SectorOut(BaseModel):
    id: int
    name: str
    abbreviation: str
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class ServiceCreate(BaseModel):
    name: str
    sector_id: int
    ror: bool = True


class ServiceOut(BaseModel):
    id: str
    name: str
    sector_id: int
    ror: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
