import datetime

from pydantic import BaseModel


class BusOut(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    name: str
    stops_cleared: int
    current_rep: int
    total_rep: int


class RouteStopOut(BaseModel):
    id: int  # stop id
    name: str
    latitude: float
    longitude: float
    stop_order: int
    time_from_start: float

    @classmethod
    def from_entry(cls, entry, **extra):
        return cls(
            id=entry.stop.id,
            name=entry.stop.name,
            latitude=entry.stop.latitude,
            longitude=entry.stop.longitude,
            stop_order=entry.stop_order,
            time_from_start=entry.time_from_start,
            **extra,
        )


class AnnotatedStop(RouteStopOut):
    cleared: bool
    estimated_time: str


class RouteWithStatus(BaseModel):
    bus_id: int
    stops: list[AnnotatedStop]
    current_stop: AnnotatedStop | None = None
    next_stop: AnnotatedStop | None = None
    estimated_arrival: str | None = None  # "<N> min"


class TimetableStop(RouteStopOut):
    eta_minutes: int | None = None  # -1 once passed
    eta_time: str | None = None


class RouteTimetable(BaseModel):
    bus_id: int
    stops: list[TimetableStop]
    current_stop: TimetableStop | None = None
    next_stop: TimetableStop | None = None
    current_rep: int


class BusInfo(BaseModel):
    id: int
    name: str
    current_rep: int
    total_rep: int
    driver_id: int | None = None
    driver_name: str | None = None
    estimated_arrival: int | None = None  # minutes
    next_stop_id: int | None = None
    next_stop_name: str | None = None


class LocationOut(BaseModel):
    bus_id: int
    latitude: float
    longitude: float
    timestamp: datetime.datetime


class LivePosition(BaseModel):
    id: int
    name: str
    latitude: float
    longitude: float
    timestamp: datetime.datetime
