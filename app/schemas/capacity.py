# app/schemas/capacity.py
from pydantic import BaseModel
from typing import Union


class CapacityOut(BaseModel):
    scope_id: Union[str, int]
    name: str
    total: int
    available: int
    occupancy_percent: float

    class Config:
        from_attributes = True


class StatusCountOut(BaseModel):
    status_id: int
    label: str
    count: int
