# app/routers/sectors.py
"""Sectors and their live capacity (sum over services)."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.identity import get_caller
from app.routers.services import _capacity_out
from app.schemas.capacity import CapacityOut
from app.schemas.facility import SectorCreate, SectorOut
from app.services import capacity_service, facility_service
from app.services.visibility import Caller

router = APIRouter()


@router.get("/sectors", response_model=list[SectorOut])
def list_sectors(db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    return facility_service.list_sectors(db, caller)


@router.post("/sectors", response_model=SectorOut, status_code=201, summary="Create a sector")
def create_sector(body: SectorCreate, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    return facility_service.create_sector(db, body.name, caller)


@router.get("/sectors/capacity", response_model=list[CapacityOut], summary="Capacity of every sector")
def get_all_sector_capacity(db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    return [_capacity_out(c) for c in capacity_service.all_sector_capacities(db, caller)]


@router.get("/sectors/{sector_id}/capacity", response_model=CapacityOut)
def get_sector_capacity(sector_id: int, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    return _capacity_out(capacity_service.sector_capacity(db, sector_id, caller))
