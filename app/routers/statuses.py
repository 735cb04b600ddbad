# app/routers/statuses.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.status import StatusOut
from app.services.status_catalog import list_statuses

router = APIRouter()


@router.get("/statuses", response_model=list[StatusOut], summary="Status catalog")
def get_statuses(db: Session = Depends(get_db)):
    return list_statuses(db)
