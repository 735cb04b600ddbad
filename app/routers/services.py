# app/routers/services.py
"""Hospital services and their live capacity."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from app.database import get_db
from app.identity import get_caller
from app.schemas.capacity import CapacityOut
from app.schemas.facility import ServiceCreate, ServiceOut
from app.services import capacity_service, facility_service
from app.services.visibility import Caller

router = APIRouter()


def _capacity_out(c) -> CapacityOut:
    return CapacityOut(scope_id=c.scope_id, name=c.name, total=c.total,
                       available=c.available, occupancy_percent=c.occupancy_percent)


@router.get("/services", response_model=list[ServiceOut])
def list_services(search: Optional[str] = None, sector_id: Optional[int] = None,
                  db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    return facility_service.list_services(db, search=search, sector_id=sector_id, caller=caller)


@router.post("/services", response_model=ServiceOut, status_code=201, summary="Create a service")
def create_service(body: ServiceCreate, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    return facility_service.create_service(db, body.name, body.sector_id, ror=body.ror, caller=caller)


@router.get("/services/capacity", response_model=list[CapacityOut], summary="Capacity of every service")
def get_all_service_capacity(db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    return [_capacity_out(c) for c in capacity_service.all_service_capacities(db, caller)]


@router.get("/services/{service_id}/capacity", response_model=CapacityOut)
def get_service_capacity(service_id: str, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    """Total and free beds, counted live from the beds table."""
    return _capacity_out(capacity_service.service_capacity(db, service_id, caller))
