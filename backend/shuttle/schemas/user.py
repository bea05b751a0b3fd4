import datetime
from typing import Literal

from pydantic import BaseModel, Field

Role = Literal["user", "driver", "admin"]


class RiderLocationUpdate(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class RiderLocationOut(BaseModel):
    model_config = {"from_attributes": True}

    id: int | None = None
    latitude: float
    longitude: float
    timestamp: datetime.datetime


class UserOut(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    username: str
    email: str
    role: Role


class UserCreate(BaseModel):
    username: str = Field(min_length=1)
    email: str = Field(min_length=3)
    role: Role = "user"


class UserUpdate(BaseModel):
    username: str | None = Field(default=None, min_length=1)
    email: str | None = Field(default=None, min_length=3)
    role: Role | None = None


class UserLocationOut(BaseModel):
    """A rider position joined with the reporting account."""

    id: int
    user_id: int
    username: str
    email: str
    role: Role
    latitude: float
    longitude: float
    timestamp: datetime.datetime


class StatisticsOut(BaseModel):
    model_config = {"from_attributes": True}

    total_users: int
    active_users: int
    total_buses: int
    active_buses: int
    total_stops: int
    total_routes: int
    total_drivers: int
    recent_locations: int
