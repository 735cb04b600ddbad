# app/routers/beds.py
"""Beds: listing, provisioning, descriptive edits and status transitions."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from app.database import get_db
from app.identity import get_caller
from app.schemas.bed import BedCreate, BedOut, BedPage, BedUpdate, StatusChange
from app.schemas.history import HistoryEntryOut
from app.services import facility_service, history_service
from app.services.schedule_service import get_working_hours
from app.services.transition_service import TransitionContext, TransitionOptions, transition_bed
from app.services.visibility import Caller

router = APIRouter()


@router.get("/beds", response_model=BedPage, summary="List beds (role-filtered)")
def list_beds(
    service_id: Optional[str] = None,
    sector_id: Optional[int] = None,
    status_id: Optional[int] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    sort_by: str = "id",
    sort_order: str = "asc",
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    result = facility_service.list_beds(db, caller, service_id=service_id, sector_id=sector_id,
                                        status_id=status_id, search=search, page=page, limit=limit,
                                        sort_by=sort_by, sort_order=sort_order)
    return BedPage(total=result.total, items=result.items, page=result.page,
                   limit=result.limit, total_pages=result.total_pages)


@router.post("/beds", response_model=BedOut, status_code=201, summary="Provision a bed")
def create_bed(body: BedCreate, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    """The bed id is generated as <service_id>-NN and the bed starts FREE."""
    return facility_service.create_bed(db, body.service_id, gender=body.gender,
                                       is_emergency_reserved=body.is_emergency_reserved,
                                       description=body.description, caller=caller)


@router.get("/beds/{bed_id}", response_model=BedOut)
def get_bed(bed_id: str, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    return facility_service.get_bed(db, bed_id, caller)


@router.put("/beds/{bed_id}", response_model=BedOut, summary="Edit descriptive bed fields")
def update_bed(bed_id: str, body: BedUpdate, db: Session = Depends(get_db),
               caller: Caller = Depends(get_caller)):
    return facility_service.update_bed(db, bed_id, body.model_dump(exclude_unset=True), caller)


@router.delete("/beds/{bed_id}", summary="Soft-delete a bed")
def delete_bed(bed_id: str, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    facility_service.soft_delete_bed(db, bed_id, caller)
    return {"bed_id": bed_id, "status": "deleted"}


@router.patch("/beds/{bed_id}/status", response_model=BedOut, summary="Change bed status")
def change_status(bed_id: str, body: StatusChange, db: Session = Depends(get_db),
                  caller: Caller = Depends(get_caller)):
    context = TransitionContext(
        actor=caller.actor,
        sub_status_id=body.sub_status_id,
        cleaning_at=body.cleaning_at,
        maintenance_at=body.maintenance_at,
        reservation_at=body.reservation_at,
        assignee=body.assignee,
    )
    options = TransitionOptions.from_settings(working_hours=get_working_hours(db))
    return transition_bed(db, bed_id, body.status_id, context, caller=caller, options=options)


@router.get("/beds/{bed_id}/history", response_model=list[HistoryEntryOut], summary="History of one bed")
def get_bed_history(bed_id: str, limit: int = 50, db: Session = Depends(get_db),
                    caller: Caller = Depends(get_caller)):
    return history_service.bed_history(db, bed_id, limit=limit, caller=caller)
