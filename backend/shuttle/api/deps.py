"""FastAPI dependencies shared by the routers."""

import datetime
from dataclasses import dataclass
from zoneinfo import ZoneInfo

from fastapi import Depends, Header, HTTPException, Request

from shuttle.config import settings

ROLES = ("user", "driver", "admin")


@dataclass(frozen=True)
class Principal:
    user_id: int
    role: str


def get_store(request: Request):
    return request.app.state.store


def get_estimator(request: Request):
    return request.app.state.estimator


def get_tracker(request: Request):
    return request.app.state.tracker


def get_ingest(request: Request):
    return request.app.state.ingest


def get_trip_finder(request: Request):
    return request.app.state.trip_finder


def get_now() -> datetime.datetime:
    """Current instant in the service timezone; overridden in tests."""
    return datetime.datetime.now(ZoneInfo(settings.service_timezone))


async def get_principal(
    x_user_id: str | None = Header(None, alias="X-User-Id"),
    x_user_role: str | None = Header(None, alias="X-User-Role"),
) -> Principal:
    """Identity forwarded by the authenticating gateway."""
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=401, detail="Unauthorized: missing identity")
    try:
        user_id = int(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Unauthorized: invalid user id")
    role = x_user_role.lower()
    if role not in ROLES:
        raise HTTPException(status_code=401, detail=f"Unauthorized: unknown role {x_user_role}")
    return Principal(user_id=user_id, role=role)


def require_role(*roles: str):
    """Dependency admitting only callers with one of ``roles``."""

    async def check(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.role not in roles:
            raise HTTPException(status_code=403, detail=f"Forbidden: requires role {' or '.join(roles)}")
        return principal

    return check


any_role = require_role(*ROLES)
driver_only = require_role("driver")
admin_only = require_role("admin")
