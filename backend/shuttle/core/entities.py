"""Value types passed between the store and the trip-progress engine."""

import datetime
from dataclasses import dataclass


def _require(value, field: str) -> None:
    if value is None:
        raise ValueError(f"{field} is required")


@dataclass(frozen=True)
class Stop:
    id: int
    name: str
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        _require(self.id, "stop id")
        _require(self.latitude, "latitude")
        _require(self.longitude, "longitude")
        if not self.name:
            raise ValueError("stop name is required")


@dataclass(frozen=True)
class RouteEntry:
    bus_id: int
    stop_order: int  # 1..N, dense per bus
    time_from_start: float  # minutes after the trip's scheduled start
    stop: Stop
    id: int | None = None

    def __post_init__(self) -> None:
        _require(self.bus_id, "bus id")
        _require(self.stop, "stop")
        if self.stop_order is None or self.stop_order < 1:
            raise ValueError(f"stop_order must be >= 1, got {self.stop_order}")
        if self.time_from_start is None or self.time_from_start < 0:
            raise ValueError(f"time_from_start must be >= 0, got {self.time_from_start}")

    @property
    def stop_id(self) -> int:
        return self.stop.id


@dataclass(frozen=True)
class Bus:
    id: int
    name: str
    stops_cleared: int = 0
    current_rep: int = 1
    total_rep: int = 0

    def __post_init__(self) -> None:
        _require(self.id, "bus id")
        _require(self.name, "bus name")
        if self.stops_cleared < 0:
            raise ValueError(f"stops_cleared must be >= 0, got {self.stops_cleared}")
        if self.current_rep < 1:
            raise ValueError(f"current_rep must be >= 1, got {self.current_rep}")
        if self.total_rep < 0:
            raise ValueError(f"total_rep must be >= 0, got {self.total_rep}")


@dataclass(frozen=True)
class ScheduledStartTime:
    id: int
    bus_id: int
    rep_no: int
    start_time: datetime.time

    def __post_init__(self) -> None:
        _require(self.bus_id, "bus id")
        _require(self.start_time, "start_time")
        if self.rep_no is None or self.rep_no < 1:
            raise ValueError(f"rep_no must be >= 1, got {self.rep_no}")


@dataclass(frozen=True)
class Driver:
    user_id: int
    username: str
    email: str
    bus_id: int | None = None


@dataclass(frozen=True)
class LocationSample:
    bus_id: int
    latitude: float
    longitude: float
    timestamp: datetime.datetime
    id: int | None = None

    def __post_init__(self) -> None:
        _require(self.bus_id, "bus id")
        _require(self.latitude, "latitude")
        _require(self.longitude, "longitude")
        _require(self.timestamp, "timestamp")


@dataclass(frozen=True)
class UserAccount:
    id: int
    username: str
    email: str
    role: str


@dataclass(frozen=True)
class RiderLocation:
    user_id: int
    latitude: float
    longitude: float
    timestamp: datetime.datetime
    id: int | None = None

    def __post_init__(self) -> None:
        _require(self.user_id, "user id")
        _require(self.latitude, "latitude")
        _require(self.longitude, "longitude")
        _require(self.timestamp, "timestamp")


@dataclass(frozen=True)
class SystemStatistics:
    """Counts shown on the admin dashboard."""

    total_users: int
    active_users: int  # riders who reported a position in the last 24 hours
    total_buses: int
    active_buses: int  # buses with a position in the last 24 hours
    total_stops: int
    total_routes: int  # buses with at least one route entry
    total_drivers: int
    recent_locations: int  # bus positions in the last hour
