# app/services/facility_service.py
"""
Sectors, services and bed provisioning.

Identifiers are derived, never taken from the client:
  - sector id      : highest existing id + 1, abbreviation = first 3 letters of the name
  - service id     : first 4 letters of the name (padded with X) + "-NN"
  - bed id         : "<service_id>-NN"
Bed status is NOT editable here; status changes go through transition_service.
"""

import re
from datetime import datetime
from typing import Optional
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.errors import NotFoundError, PermissionDeniedError, ValidationError
from app.models.bed import Bed
from app.models.sector import Sector
from app.models.service import Service
from app.models.status import Status, StatusCode
from app.services.visibility import Caller, Target, filter_for_role
from app.utils.logger import get_logger
from app.utils.pagination import Page, apply_sort, paginate

logger = get_logger(__name__)

ID_ALLOCATION_ATTEMPTS = 3

BED_SORT_COLUMNS = {
    "id": Bed.id,
    "service_id": Bed.service_id,
    "status_id": Bed.status_id,
    "last_status_change_at": Bed.last_status_change_at,
    "gender": Bed.gender,
}


def _require_admin(caller: Optional[Caller], action: str):
    if caller is not None and not caller.is_admin:
        raise PermissionDeniedError(f"Admin role required to {action}")


def sector_abbreviation(name: str) -> str:
    return re.sub(r"\s+", "", name or "")[:3].upper()


def service_prefix(name: str) -> str:
    return (re.sub(r"\s+", "", name or "").upper() + "XXXX")[:4]


def _next_suffix(existing_ids, prefix: str) -> str:
    """Next two-digit suffix after the highest '<prefix>NN' id."""
    pattern = re.compile(rf"^{re.escape(prefix)}(\d{{2}})$")
    numbers = [int(m.group(1)) for m in map(pattern.match, existing_ids) if m]
    return f"{prefix}{max(numbers, default=0) + 1:02d}"


# ── Sectors ──────────────────────────────────────────────────────────────────

def create_sector(db: Session, name: str, caller: Optional[Caller] = None) -> Sector:
    _require_admin(caller, "create sectors")
    if not name or not name.strip():
        raise ValidationError("Sector name is required")

    abbreviation = sector_abbreviation(name)
    if db.query(Sector).filter(Sector.abbreviation == abbreviation).first():
        raise ValidationError(f"Abbreviation {abbreviation} is already used by another sector")

    next_id = (db.query(func.max(Sector.id)).scalar() or 0) + 1
    sector = Sector(id=next_id, name=name.strip(), abbreviation=abbreviation,
                    created_at=datetime.utcnow())
    db.add(sector)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError(f"Sector '{name}' could not be created, retry")
    logger.info(f"[FACILITY] Sector {sector.id} ({abbreviation}) created")
    return sector


def get_sector(db: Session, sector_id: int, caller: Optional[Caller] = None) -> Sector:
    q = filter_for_role(caller, db.query(Sector).filter(Sector.id == sector_id), Target.SECTOR)
    sector = q.first()
    if not sector:
        raise NotFoundError(f"Sector {sector_id} not found")
    return sector


def list_sectors(db: Session, caller: Optional[Caller] = None):
    """Sectors the caller can see; service-scoped roles only get sectors holding their services."""
    q = filter_for_role(caller, db.query(Sector), Target.SECTOR)
    return q.order_by(Sector.id.asc()).all()


# ── Services ─────────────────────────────────────────────────────────────────

def create_service(db: Session, name: str, sector_id: int, ror: bool = True,
                   caller: Optional[Caller] = None) -> Service:
    _require_admin(caller, "create services")
    if not name or not name.strip():
        raise ValidationError("Service name is required")
    if not db.query(Sector).filter(Sector.id == sector_id).first():
        raise NotFoundError(f"Sector {sector_id} not found")

    prefix = service_prefix(name) + "-"
    for _ in range(ID_ALLOCATION_ATTEMPTS):
        existing = [row.id for row in db.query(Service.id).filter(Service.id.like(f"{prefix}%"))]
        service = Service(id=_next_suffix(existing, prefix), name=name.strip(), sector_id=sector_id,
                          ror=ror, created_at=datetime.utcnow())
        db.add(service)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            continue
        logger.info(f"[FACILITY] Service {service.id} created in sector {sector_id}")
        return service
    raise ValidationError(f"Could not allocate an id for service '{name}', retry")


def get_service(db: Session, service_id: str, caller: Optional[Caller] = None) -> Service:
    q = filter_for_role(caller, db.query(Service).filter(Service.id == service_id), Target.SERVICE)
    service = q.first()
    if not service:
        raise NotFoundError(f"Service '{service_id}' not found")
    return service


def list_services(db: Session, search: Optional[str] = None, sector_id: Optional[int] = None,
                  caller: Optional[Caller] = None):
    q = db.query(Service)
    if sector_id is not None:
        q = q.filter(Service.sector_id == sector_id)
    if search:
        q = q.filter(or_(Service.id.ilike(f"%{search}%"), Service.name.ilike(f"%{search}%")))
    q = filter_for_role(caller, q, Target.SERVICE)
    return q.order_by(Service.id.asc()).all()


# ── Beds ─────────────────────────────────────────────────────────────────────

def create_bed(db: Session, service_id: str, gender: Optional[str] = None,
               is_emergency_reserved: bool = False, description: Optional[str] = None,
               caller: Optional[Caller] = None) -> Bed:
    """Provision a new FREE bed with the next '<service_id>-NN' id."""
    _require_admin(caller, "create beds")
    if not service_id:
        raise ValidationError("service_id is required")
    if not db.query(Service).filter(Service.id == service_id).first():
        raise NotFoundError(f"Service '{service_id}' not found")

    prefix = f"{service_id}-"
    for _ in range(ID_ALLOCATION_ATTEMPTS):
        # soft-deleted beds keep their id, so they are counted too
        existing = [row.id for row in db.query(Bed.id).filter(Bed.id.like(f"{prefix}%"))]
        now = datetime.utcnow()
        bed = Bed(
            id=_next_suffix(existing, prefix),
            service_id=service_id,
            status_id=StatusCode.FREE,
            active=True,
            gender=gender,
            is_emergency_reserved=is_emergency_reserved,
            description=description,
            last_status_change_at=now,
            created_at=now,
        )
        db.add(bed)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            continue
        logger.info(f"[FACILITY] Bed {bed.id} provisioned")
        return bed
    raise ValidationError(f"Could not allocate a bed id in service '{service_id}', retry")


def get_bed(db: Session, bed_id: str, caller: Optional[Caller] = None) -> Bed:
    q = db.query(Bed).filter(Bed.id == bed_id, Bed.deleted_at.is_(None))
    bed = filter_for_role(caller, q, Target.BED).first()
    if not bed:
        raise NotFoundError(f"Bed '{bed_id}' not found")
    return bed


def update_bed(db: Session, bed_id: str, changes: dict, caller: Optional[Caller] = None) -> Bed:
    """Edit descriptive bed fields. Status and its derived fields are not accepted here."""
    allowed = {"gender", "is_emergency_reserved", "description"}
    rejected = set(changes) - allowed
    if rejected:
        raise ValidationError(f"Fields cannot be edited directly: {sorted(rejected)}")

    # beds hidden from the caller are not found
    bed = get_bed(db, bed_id, caller)
    for key, value in changes.items():
        setattr(bed, key, value)
    db.commit()
    logger.info(f"[FACILITY] Bed {bed_id} updated: {sorted(changes)}")
    return bed


def soft_delete_bed(db: Session, bed_id: str, caller: Optional[Caller] = None) -> Bed:
    """Hide a bed from every read. History rows that reference it are kept."""
    _require_admin(caller, "delete beds")
    bed = get_bed(db, bed_id)
    bed.deleted_at = datetime.utcnow()
    db.commit()
    logger.info(f"[FACILITY] Bed {bed_id} soft-deleted")
    return bed


def list_beds(db: Session, caller: Optional[Caller] = None, service_id: Optional[str] = None,
              sector_id: Optional[int] = None, status_id: Optional[int] = None,
              search: Optional[str] = None, page: int = 1, limit: int = 10,
              sort_by: str = "id", sort_order: str = "asc") -> Page:
    q = (
        db.query(Bed)
        .join(Service, Service.id == Bed.service_id)
        .join(Status, Status.id == Bed.status_id)
        .filter(Bed.deleted_at.is_(None))
    )
    if service_id:
        q = q.filter(Bed.service_id == service_id)
    if sector_id is not None:
        q = q.filter(Service.sector_id == sector_id)
    if status_id is not None:
        q = q.filter(Bed.status_id == status_id)
    if search:
        pattern = f"%{search}%"
        q = q.filter(or_(Bed.id.ilike(pattern), Service.name.ilike(pattern), Status.label.ilike(pattern)))

    q = filter_for_role(caller, q, Target.BED)
    q = apply_sort(q, BED_SORT_COLUMNS, sort_by, sort_order, tiebreak=Bed.id)
    return paginate(q, page, limit)
