# app/services/visibility.py
"""
Role-based visibility.

Roles are a closed enum and each one maps to a VisibilityScope through a
plain dict. filter_for_role() turns that scope into SQLAlchemy predicates
and ANDs them onto whatever the caller already filtered, so an explicit
filter can narrow the role's view but never widen it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional
from sqlalchemy import false, or_, select
from app.models.bed import Bed
from app.models.history_entry import HistoryEntry
from app.models.sector import Sector
from app.models.service import Service
from app.models.status import StatusCode
from app.models.task_item import TaskItem


class Role(str, Enum):
    ADMIN = "Admin"
    MANAGER = "Manager"
    USER = "User"
    VIEWER = "Viewer"
    CLEANING_AGENT = "Cleaning agent"
    CLEANING_MANAGER = "Cleaning manager"
    TECHNICAL_AGENT = "Technical agent"
    TECHNICAL_MANAGER = "Technical manager"


class Target(str, Enum):
    BED = "bed"
    HISTORY = "history"
    TASK = "task"
    SERVICE = "service"
    SECTOR = "sector"


@dataclass(frozen=True)
class VisibilityScope:
    service_scoped: bool = False
    status_focus: Optional[StatusCode] = None


ROLE_SCOPES = {
    Role.ADMIN: VisibilityScope(),
    Role.MANAGER: VisibilityScope(),
    Role.USER: VisibilityScope(service_scoped=True),
    Role.VIEWER: VisibilityScope(service_scoped=True),
    Role.CLEANING_AGENT: VisibilityScope(status_focus=StatusCode.TO_CLEAN),
    Role.CLEANING_MANAGER: VisibilityScope(status_focus=StatusCode.TO_CLEAN),
    Role.TECHNICAL_AGENT: VisibilityScope(status_focus=StatusCode.MAINTENANCE),
    Role.TECHNICAL_MANAGER: VisibilityScope(status_focus=StatusCode.MAINTENANCE),
}


@dataclass(frozen=True)
class Caller:
    """Authenticated identity handed over by the upstream layer."""
    actor: str
    role: Role
    authorized_services: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def scope(self) -> VisibilityScope:
        return ROLE_SCOPES[self.role]

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def can_access_service(self, service_id: str) -> bool:
        if not self.scope.service_scoped:
            return True
        return service_id in self.authorized_services


_SERVICE_COLUMNS = {
    Target.BED: Bed.service_id,
    Target.HISTORY: HistoryEntry.service_id,
    Target.TASK: TaskItem.service_id,
    Target.SERVICE: Service.id,
}


def _status_predicate(target: Target, status: StatusCode):
    if target == Target.BED:
        return Bed.status_id == status
    if target == Target.HISTORY:
        return or_(HistoryEntry.status_id == status, HistoryEntry.previous_status_id == status)
    if target == Target.TASK:
        return TaskItem.kind == status
    return None     # services and sectors are not status-bound


def filter_for_role(caller: Optional[Caller], query, target: Target):
    """Restrict `query` to what `caller` may see. None means a trusted internal caller."""
    if caller is None:
        return query
    scope = caller.scope

    if scope.service_scoped:
        services = caller.authorized_services
        if not services:
            return query.filter(false())
        if target == Target.SECTOR:
            query = query.filter(Sector.id.in_(
                select(Service.sector_id).where(Service.id.in_(services))
            ))
        else:
            query = query.filter(_SERVICE_COLUMNS[target].in_(services))

    if scope.status_focus is not None:
        predicate = _status_predicate(target, scope.status_focus)
        if predicate is not None:
            query = query.filter(predicate)

    return query
