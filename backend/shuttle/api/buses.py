"""Rider-facing bus REST API endpoints."""

import datetime

from fastapi import APIRouter, Depends

from shuttle.api.deps import any_role, get_estimator, get_ingest, get_now, get_store
from shuttle.core.errors import LocationNotFound
from shuttle.schemas.bus import (
    BusInfo,
    BusOut,
    LivePosition,
    LocationOut,
    RouteTimetable,
    RouteWithStatus,
)

router = APIRouter(prefix="/api/buses", tags=["buses"], dependencies=[Depends(any_role)])


@router.get("", response_model=list[BusOut])
async def list_buses(store=Depends(get_store)):
    """Get all buses with their trip counters."""
    return [BusOut.model_validate(b) for b in await store.list_buses()]


@router.get("/live", response_model=list[LivePosition])
async def live_buses(ingest=Depends(get_ingest), now: datetime.datetime = Depends(get_now)):
    """Newest position of every bus that reported recently."""
    return [
        LivePosition(
            id=sample.bus_id,
            name=name,
            latitude=sample.latitude,
            longitude=sample.longitude,
            timestamp=sample.timestamp,
        )
        for sample, name in await ingest.live_positions(now)
    ]


@router.get("/{bus_id}/location", response_model=LocationOut)
async def bus_location(bus_id: int, ingest=Depends(get_ingest)):
    sample = await ingest.latest(bus_id)
    if sample is None:
        raise LocationNotFound(bus_id)
    return LocationOut(
        bus_id=sample.bus_id,
        latitude=sample.latitude,
        longitude=sample.longitude,
        timestamp=sample.timestamp,
    )


@router.get("/{bus_id}/route", response_model=RouteTimetable)
async def bus_route(
    bus_id: int,
    estimator=Depends(get_estimator),
    now: datetime.datetime = Depends(get_now),
):
    """Scheduled time of every stop, positioned by the stop nearest the bus."""
    return await estimator.route_timetable(bus_id, now)


@router.get("/{bus_id}/route-with-stops", response_model=RouteWithStatus)
async def bus_route_with_stops(
    bus_id: int,
    estimator=Depends(get_estimator),
    now: datetime.datetime = Depends(get_now),
):
    """Route annotated with cleared stops and the ETA to the next one."""
    return await estimator.route_with_status(bus_id, now)


@router.get("/{bus_id}/info", response_model=BusInfo)
async def bus_info(
    bus_id: int,
    estimator=Depends(get_estimator),
    now: datetime.datetime = Depends(get_now),
):
    return await estimator.bus_info(bus_id, now)
