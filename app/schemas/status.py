# app/schemas/status.py
from pydantic import BaseModel


class StatusOut(BaseModel):
    id: int
    label: str

    class Config:
        from_attributes = True
