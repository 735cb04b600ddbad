# app/services/schedule_service.py
"""
Cleaning / maintenance working hours.

WorkingHours is an immutable value built from the stored schedule row (or the
defaults in app.config when no row exists) and handed explicitly to the
operations that need it. Slots start at the window's start hour and repeat
every interval minutes; the last slot must start before the end hour.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.orm import Session
from app.config import settings
from app.errors import NotFoundError, PermissionDeniedError, ValidationError
from app.models.schedule_settings import ScheduleSettings
from app.models.status import StatusCode
from app.services.visibility import Role
from app.utils.logger import get_logger

logger = get_logger(__name__)

ALLOWED_INTERVALS = (15, 30, 45, 60)
SETTINGS_ROW_ID = 1


@dataclass(frozen=True)
class Window:
    start_hour: int
    end_hour: int
    interval_minutes: int

    def validate(self, label: str):
        if not (0 <= self.start_hour <= 23 and 0 <= self.end_hour <= 23):
            raise ValidationError(f"{label} hours must be between 0 and 23")
        if self.start_hour >= self.end_hour:
            raise ValidationError(f"{label} start time must be before {label.lower()} end time")
        if self.interval_minutes not in ALLOWED_INTERVALS:
            raise ValidationError(f"{label} interval must be one of {list(ALLOWED_INTERVALS)} minutes")

    def _offset(self, at: datetime) -> int:
        return at.hour * 60 + at.minute - self.start_hour * 60

    def accepts(self, at: datetime) -> bool:
        """True if `at` is exactly one of the window's slot start times."""
        offset = self._offset(at)
        if at.second or at.microsecond:
            return False
        return 0 <= offset and at.hour * 60 + at.minute < self.end_hour * 60 \
            and offset % self.interval_minutes == 0

    def next_slot(self, now: datetime) -> datetime:
        """First slot at or after `now`, rolling over to the next day after hours."""
        day_start = now.replace(hour=self.start_hour, minute=0, second=0, microsecond=0)
        elapsed = (now - day_start).total_seconds() / 60
        if elapsed <= 0:
            return day_start
        steps = -(-elapsed // self.interval_minutes)   # ceil
        slot = day_start + timedelta(minutes=steps * self.interval_minutes)
        if slot.hour * 60 + slot.minute >= self.end_hour * 60 or slot.date() != now.date():
            return day_start + timedelta(days=1)
        return slot


@dataclass(frozen=True)
class WorkingHours:
    cleaning: Window
    maintenance: Window

    @classmethod
    def from_settings(cls, cfg=None) -> "WorkingHours":
        cfg = cfg or settings
        return cls(
            cleaning=Window(cfg.CLEANING_START_HOUR, cfg.CLEANING_END_HOUR, cfg.CLEANING_INTERVAL_MINUTES),
            maintenance=Window(cfg.MAINTENANCE_START_HOUR, cfg.MAINTENANCE_END_HOUR,
                               cfg.MAINTENANCE_INTERVAL_MINUTES),
        )

    @classmethod
    def from_row(cls, row: ScheduleSettings) -> "WorkingHours":
        return cls(
            cleaning=Window(row.cleaning_start_hour, row.cleaning_end_hour, row.cleaning_interval_minutes),
            maintenance=Window(row.maintenance_start_hour, row.maintenance_end_hour,
                               row.maintenance_interval_minutes),
        )

    def window_for(self, kind) -> Window:
        if kind == StatusCode.TO_CLEAN:
            return self.cleaning
        if kind == StatusCode.MAINTENANCE:
            return self.maintenance
        raise NotFoundError(f"No working hours for status {kind}")

    def validate_slot(self, kind, at: datetime):
        window = self.window_for(kind)
        if not window.accepts(at):
            label = "Cleaning" if kind == StatusCode.TO_CLEAN else "Maintenance"
            raise ValidationError(
                f"{label} time {at.isoformat()} is outside the {window.start_hour}h-{window.end_hour}h "
                f"window or not on a {window.interval_minutes}-minute slot",
                details={"kind": int(kind), "at": at.isoformat()},
            )

    def next_slot(self, kind, now: Optional[datetime] = None) -> datetime:
        return self.window_for(kind).next_slot(now or datetime.utcnow())

    def as_dict(self) -> dict:
        return {
            "cleaning_start_hour": self.cleaning.start_hour,
            "cleaning_end_hour": self.cleaning.end_hour,
            "cleaning_interval_minutes": self.cleaning.interval_minutes,
            "maintenance_start_hour": self.maintenance.start_hour,
            "maintenance_end_hour": self.maintenance.end_hour,
            "maintenance_interval_minutes": self.maintenance.interval_minutes,
        }


def get_working_hours(db: Session) -> WorkingHours:
    """Stored schedule, or the configured defaults when nothing was saved yet."""
    row = db.query(ScheduleSettings).filter(ScheduleSettings.id == SETTINGS_ROW_ID).first()
    if row is None:
        return WorkingHours.from_settings()
    return WorkingHours.from_row(row)


def update_working_hours(db: Session, changes: dict, caller=None) -> WorkingHours:
    """Apply a partial update. Unknown keys are rejected; the result must stay valid."""
    if caller is not None and caller.role not in (Role.ADMIN, Role.MANAGER):
        raise PermissionDeniedError("Only administrators and managers can change working hours")
    current = get_working_hours(db).as_dict()
    unknown = set(changes) - set(current)
    if unknown:
        raise ValidationError(f"Unknown settings fields: {sorted(unknown)}")
    if not changes:
        raise ValidationError("No valid fields provided for update")

    merged = {**current, **changes}
    hours = WorkingHours(
        cleaning=Window(merged["cleaning_start_hour"], merged["cleaning_end_hour"],
                        merged["cleaning_interval_minutes"]),
        maintenance=Window(merged["maintenance_start_hour"], merged["maintenance_end_hour"],
                           merged["maintenance_interval_minutes"]),
    )
    hours.cleaning.validate("Cleaning")
    hours.maintenance.validate("Maintenance")

    row = db.query(ScheduleSettings).filter(ScheduleSettings.id == SETTINGS_ROW_ID).first()
    if row is None:
        row = ScheduleSettings(id=SETTINGS_ROW_ID)
        db.add(row)
    for key, value in merged.items():
        setattr(row, key, value)
    row.updated_at = datetime.utcnow()
    db.commit()
    logger.info(f"[SETTINGS] Working hours updated: {merged}")
    return hours
