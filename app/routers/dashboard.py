# app/routers/dashboard.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.identity import get_caller
from app.schemas.capacity import StatusCountOut
from app.services.capacity_service import status_summary
from app.services.visibility import Caller

router = APIRouter()


@router.get("/dashboard/bed-summary", response_model=list[StatusCountOut], summary="Beds per status")
def get_bed_summary(db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    return status_summary(db, caller)
