import datetime

from pydantic import BaseModel, Field


class StopOut(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    name: str
    latitude: float
    longitude: float


class StopCreate(BaseModel):
    name: str = Field(min_length=1)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class StopUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


class RouteEntryOut(BaseModel):
    id: int
    bus_id: int
    stop_id: int
    stop_name: str
    stop_order: int
    time_from_start: float

    @classmethod
    def from_entry(cls, entry):
        return cls(
            id=entry.id,
            bus_id=entry.bus_id,
            stop_id=entry.stop_id,
            stop_name=entry.stop.name,
            stop_order=entry.stop_order,
            time_from_start=entry.time_from_start,
        )


class RouteEntryCreate(BaseModel):
    bus_id: int
    stop_id: int
    stop_order: int = Field(ge=1)
    time_from_start: float = Field(default=0.0, ge=0)


class RouteEntryUpdate(BaseModel):
    stop_id: int | None = None
    stop_order: int | None = Field(default=None, ge=1)
    time_from_start: float | None = Field(default=None, ge=0)


class StartTimeOut(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    bus_id: int
    rep_no: int
    start_time: datetime.time


class StartTimeCreate(BaseModel):
    bus_id: int
    rep_no: int = Field(ge=1)
    start_time: datetime.time


class StartTimeUpdate(BaseModel):
    start_time: datetime.time


class SegmentStop(BaseModel):
    id: int
    name: str
    order: int


class TripSegmentOut(BaseModel):
    id: int  # bus id
    display_id: str  # "<bus>-<from order>-<to order>"
    name: str
    current_trip: int
    total_trips: int
    trip_number: int
    from_stop: SegmentStop
    to_stop: SegmentStop
    bus_start: datetime.time
    departure_time: str  # HH:MM
    arrival_time: str
    duration_minutes: int

    @classmethod
    def from_segment(cls, segment):
        return cls(
            id=segment.bus.id,
            display_id=segment.segment_id,
            name=segment.bus.name,
            current_trip=segment.bus.current_rep,
            total_trips=segment.bus.total_rep,
            trip_number=segment.trip_number,
            from_stop=SegmentStop(
                id=segment.origin.stop_id, name=segment.origin.stop.name, order=segment.origin.stop_order,
            ),
            to_stop=SegmentStop(
                id=segment.destination.stop_id,
                name=segment.destination.stop.name,
                order=segment.destination.stop_order,
            ),
            bus_start=segment.bus_start,
            departure_time=segment.departure,
            arrival_time=segment.arrival,
            duration_minutes=segment.duration_minutes,
        )
