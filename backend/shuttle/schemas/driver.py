import datetime

from pydantic import BaseModel, Field

from shuttle.schemas.bus import BusOut, RouteStopOut


class LocationUpdate(BaseModel):
    bus_id: int
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class ClearStopRequest(BaseModel):
    bus_id: int
    stop_id: int


class ClearStopResult(BaseModel):
    bus: BusOut
    new_repetition: bool
    message: str


class DriverBusView(BaseModel):
    bus: BusOut
    route: list[RouteStopOut]
    stops_cleared: int
    last_cleared_stop: RouteStopOut | None = None
    next_stop: RouteStopOut | None = None


class ScheduledTimeOut(BaseModel):
    id: int
    rep_no: int
    start_time: str  # HH:MM:SS


class TripOptions(BaseModel):
    scheduled_times: list[ScheduledTimeOut]
    route_stops: list[RouteStopOut]


class InitializeTripRequest(BaseModel):
    bus_id: int
    start_time: datetime.time | None = None
    rep_no: int | None = Field(default=None, ge=1)
    next_stop_sequence: int = Field(ge=0)


class InitializeTripResult(BaseModel):
    bus: BusOut
    route: list[RouteStopOut]
    stops_cleared: int
    next_stop: RouteStopOut | None = None
