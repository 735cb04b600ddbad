# app/routers/settings.py
"""Cleaning / maintenance working hours."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.identity import get_caller
from app.schemas.settings import WorkingHoursOut, WorkingHoursUpdate
from app.services.schedule_service import get_working_hours, update_working_hours
from app.services.visibility import Caller

router = APIRouter()


@router.get("/settings", response_model=WorkingHoursOut)
def get_settings(db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    return get_working_hours(db).as_dict()


@router.put("/settings", response_model=WorkingHoursOut, summary="Update working hours")
def put_settings(body: WorkingHoursUpdate, db: Session = Depends(get_db),
                 caller: Caller = Depends(get_caller)):
    return update_working_hours(db, body.model_dump(exclude_none=True), caller).as_dict()
