# app/schemas/history.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class HistoryEntryOut(BaseModel):
    id: int
    bed_id: str
    service_id: str
    status_id: int
    previous_status_id: Optional[int]
    sub_status_id: Optional[int]
    actor: str
    timestamp: datetime

    class Config:
        from_attributes = True


class HistoryPage(BaseModel):
    total: int
    items: list[HistoryEntryOut]
    page: int
    limit: int
    total_pages: int
