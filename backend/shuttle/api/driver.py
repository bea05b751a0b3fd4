"""Driver REST API endpoints: position reports and trip progress."""

from fastapi import APIRouter, Depends

from shuttle.api.deps import Principal, driver_only, get_ingest, get_store, get_tracker
from shuttle.core.errors import NotFound
from shuttle.schemas.bus import BusOut, LocationOut, RouteStopOut
from shuttle.schemas.driver import (
    ClearStopRequest,
    ClearStopResult,
    DriverBusView,
    InitializeTripRequest,
    InitializeTripResult,
    LocationUpdate,
    ScheduledTimeOut,
    TripOptions,
)

router = APIRouter(prefix="/api/driver", tags=["driver"])


def _stop_or_none(entry) -> RouteStopOut | None:
    return RouteStopOut.from_entry(entry) if entry is not None else None


@router.get("/my-bus", response_model=DriverBusView)
async def my_bus(
    principal: Principal = Depends(driver_only),
    store=Depends(get_store),
    tracker=Depends(get_tracker),
):
    """The caller's assigned bus with its route and cleared-stop position."""
    bus = await store.get_driver_bus(principal.user_id)
    if bus is None:
        raise NotFound(f"No bus assigned to driver {principal.user_id}")
    view = await tracker.driver_position(bus.id)
    return DriverBusView(
        bus=BusOut.model_validate(view.bus),
        route=[RouteStopOut.from_entry(e) for e in view.route],
        stops_cleared=view.bus.stops_cleared,
        last_cleared_stop=_stop_or_none(view.position.current),
        next_stop=_stop_or_none(view.position.next),
    )


@router.post("/location", response_model=LocationOut)
async def report_location(
    body: LocationUpdate,
    principal: Principal = Depends(driver_only),
    tracker=Depends(get_tracker),
    ingest=Depends(get_ingest),
):
    """Store a GPS ping for the caller's bus, stamped with the server clock."""
    await tracker.ensure_assigned(principal.user_id, body.bus_id)
    sample = await ingest.record(body.bus_id, body.latitude, body.longitude)
    return LocationOut(
        bus_id=sample.bus_id,
        latitude=sample.latitude,
        longitude=sample.longitude,
        timestamp=sample.timestamp,
    )


@router.post("/clear-stop", response_model=ClearStopResult)
async def clear_stop(
    body: ClearStopRequest,
    principal: Principal = Depends(driver_only),
    tracker=Depends(get_tracker),
):
    await tracker.ensure_assigned(principal.user_id, body.bus_id)
    result = await tracker.clear_stop(body.bus_id, body.stop_id)
    if result.new_repetition:
        message = f"Route completed, starting repetition {result.bus.current_rep}"
    else:
        message = f"Stop {body.stop_id} cleared"
    return ClearStopResult(
        bus=BusOut.model_validate(result.bus),
        new_repetition=result.new_repetition,
        message=message,
    )


@router.get("/buses/{bus_id}/trip-options", response_model=TripOptions)
async def trip_options(
    bus_id: int,
    principal: Principal = Depends(driver_only),
    tracker=Depends(get_tracker),
):
    """Registered start times and route stops to pick a trip from."""
    await tracker.ensure_assigned(principal.user_id, bus_id)
    times, route = await tracker.trip_options(bus_id)
    return TripOptions(
        scheduled_times=[
            ScheduledTimeOut(id=t.id, rep_no=t.rep_no, start_time=t.start_time.strftime("%H:%M:%S"))
            for t in times
        ],
        route_stops=[RouteStopOut.from_entry(e) for e in route],
    )


@router.post("/initialize-trip", response_model=InitializeTripResult)
async def initialize_trip(
    body: InitializeTripRequest,
    principal: Principal = Depends(driver_only),
    tracker=Depends(get_tracker),
):
    """Set the bus's repetition and cleared-stop counter directly.

    ``rep_no`` wins over ``start_time``; a start time matching no
    registered repetition selects repetition 1.
    """
    await tracker.ensure_assigned(principal.user_id, body.bus_id)
    setup = await tracker.setup_trip(
        body.bus_id,
        body.next_stop_sequence,
        rep_no=body.rep_no,
        start_time=body.start_time,
    )
    return InitializeTripResult(
        bus=BusOut.model_validate(setup.bus),
        route=[RouteStopOut.from_entry(e) for e in setup.route],
        stops_cleared=setup.bus.stops_cleared,
        next_stop=_stop_or_none(setup.next_stop),
    )
