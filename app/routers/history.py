# app/routers/history.py
"""Status history: filterable, paginated, role-filtered."""

from datetime import date
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from app.database import get_db
from app.identity import get_caller
from app.schemas.history import HistoryPage
from app.services.history_service import query_history
from app.services.visibility import Caller

router = APIRouter()


@router.get("/history", response_model=HistoryPage, summary="Status change history")
def get_history(
    bed_id: Optional[str] = None,
    service_id: Optional[str] = None,
    status_id: Optional[int] = None,
    actor: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = 1,
    limit: int = 10,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    """Dates are inclusive: start_date from 00:00, end_date until 23:59:59."""
    result = query_history(db, caller, bed_id=bed_id, service_id=service_id, status_id=status_id,
                           actor=actor, start=start_date, end=end_date, page=page, limit=limit)
    return HistoryPage(total=result.total, items=result.items, page=result.page,
                       limit=result.limit, total_pages=result.total_pages)
