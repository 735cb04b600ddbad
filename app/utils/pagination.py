# app/utils/pagination.py
"""Page / limit handling shared by the listing services."""

import math
from dataclasses import dataclass
from typing import Any, List
from app.config import settings
from app.errors import ValidationError


@dataclass
class Page:
    items: List[Any]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def check_page_args(page: int, limit: int):
    if page < 1:
        raise ValidationError("Page must be greater than 0")
    if limit < 1 or limit > settings.PAGE_LIMIT_MAX:
        raise ValidationError(f"Limit must be between 1 and {settings.PAGE_LIMIT_MAX}")


def paginate(query, page: int, limit: int) -> Page:
    """Count, then fetch one page of an already-ordered query."""
    check_page_args(page, limit)
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return Page(items=items, total=total, page=page, limit=limit)


def apply_sort(query, columns: dict, sort_by: str, sort_order: str, tiebreak=None):
    """
    Order `query` by columns[sort_by]. Unknown fields and orders are rejected
    rather than silently ignored. `tiebreak` keeps pagination stable.
    """
    column = columns.get(sort_by)
    if column is None:
        raise ValidationError(f"Cannot sort by '{sort_by}'. Allowed: {sorted(columns)}")
    if sort_order not in ("asc", "desc"):
        raise ValidationError("sort_order must be 'asc' or 'desc'")
    query = query.order_by(column.desc() if sort_order == "desc" else column.asc())
    if tiebreak is not None:
        query = query.order_by(tiebreak.desc() if sort_order == "desc" else tiebreak.asc())
    return query
