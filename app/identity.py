# app/identity.py
"""
Caller identity dependency.
Authentication happens upstream (gateway / auth service); it forwards the user
id, role and authorized services as headers and this layer trusts them.
"""

from typing import Optional
from fastapi import Header, HTTPException, status
from app.services.visibility import Caller, Role


def get_caller(
    x_user: str = Header(..., description="Authenticated user id"),
    x_role: str = Header(..., description="Role name, e.g. Admin, User, Cleaning agent"),
    x_services: Optional[str] = Header(None, description="Comma-separated authorized service ids"),
) -> Caller:
    try:
        role = Role(x_role)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Unknown role '{x_role}'")
    services = frozenset(s.strip() for s in (x_services or "").split(",") if s.strip())
    return Caller(actor=x_user, role=role, authorized_services=services)
