# app/services/capacity_service.py
"""
Live bed capacity per service and per sector.

Nothing here is cached or stored: every figure is one aggregate SELECT over
the beds table, so total and available always come from the same snapshot
and 0 <= available <= total holds. Soft-deleted beds are not counted.
"""

from dataclasses import dataclass
from typing import Optional
from sqlalchemy import and_, case, func
from sqlalchemy.orm import Session
from app.errors import NotFoundError
from app.models.bed import Bed
from app.models.sector import Sector
from app.models.service import Service
from app.models.status import Status, StatusCode
from app.services.visibility import Caller, Target, filter_for_role
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class Capacity:
    scope_id: object
    name: str
    total: int
    available: int

    @property
    def occupancy_percent(self) -> float:
        """Share of counted beds that are not free."""
        if not self.total:
            return 0
        return round((self.total - self.available) / self.total * 100, 1)


def _total():
    return func.count(Bed.id)


def _available():
    return func.coalesce(func.sum(case((Bed.status_id == StatusCode.FREE, 1), else_=0)), 0)


def _live_beds_of_service():
    return and_(Bed.service_id == Service.id, Bed.deleted_at.is_(None))


def service_capacity(db: Session, service_id: str, caller: Optional[Caller] = None) -> Capacity:
    q = filter_for_role(caller, db.query(Service).filter(Service.id == service_id), Target.SERVICE)
    service = q.first()
    if not service:
        raise NotFoundError(f"Service '{service_id}' not found")

    total, available = (
        db.query(_total(), _available())
        .filter(Bed.service_id == service_id, Bed.deleted_at.is_(None))
        .one()
    )
    return Capacity(service.id, service.name, int(total), int(available))


def sector_capacity(db: Session, sector_id: int, caller: Optional[Caller] = None) -> Capacity:
    """Sum over the sector's services the caller can see."""
    sector = filter_for_role(caller, db.query(Sector).filter(Sector.id == sector_id), Target.SECTOR).first()
    if not sector:
        raise NotFoundError(f"Sector {sector_id} not found")

    q = (
        db.query(_total(), _available())
        .select_from(Service)
        .outerjoin(Bed, _live_beds_of_service())
        .filter(Service.sector_id == sector_id)
    )
    total, available = filter_for_role(caller, q, Target.SERVICE).one()
    return Capacity(sector.id, sector.name, int(total), int(available))


def all_service_capacities(db: Session, caller: Optional[Caller] = None):
    q = (
        db.query(Service.id, Service.name, _total(), _available())
        .outerjoin(Bed, _live_beds_of_service())
        .group_by(Service.id, Service.name)
    )
    rows = filter_for_role(caller, q, Target.SERVICE).order_by(Service.id.asc()).all()
    return [Capacity(sid, name, int(total), int(available)) for sid, name, total, available in rows]


def all_sector_capacities(db: Session, caller: Optional[Caller] = None):
    """One aggregate over sectors → services → beds, restricted to visible services."""
    service_join = Service.sector_id == Sector.id
    if caller is not None and caller.scope.service_scoped:
        service_join = and_(service_join, Service.id.in_(caller.authorized_services))
    q = (
        db.query(Sector.id, Sector.name, _total(), _available())
        .outerjoin(Service, service_join)
        .outerjoin(Bed, _live_beds_of_service())
        .group_by(Sector.id, Sector.name)
    )
    rows = filter_for_role(caller, q, Target.SECTOR).order_by(Sector.id.asc()).all()
    return [Capacity(sid, name, int(total), int(available)) for sid, name, total, available in rows]


def status_summary(db: Session, caller: Optional[Caller] = None):
    """Number of live beds per status, for the dashboard."""
    q = (
        db.query(Bed.status_id, Status.label, func.count(Bed.id))
        .join(Status, Status.id == Bed.status_id)
        .filter(Bed.deleted_at.is_(None))
        .group_by(Bed.status_id, Status.label)
    )
    rows = filter_for_role(caller, q, Target.BED).order_by(Bed.status_id.asc()).all()
    return [{"status_id": sid, "label": label, "count": count} for sid, label, count in rows]
