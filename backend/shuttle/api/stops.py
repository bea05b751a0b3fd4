"""Stop REST API endpoints."""

from fastapi import APIRouter, Depends, Query

from shuttle.api.deps import any_role, get_store, get_trip_finder
from shuttle.schemas.route import StopOut, TripSegmentOut

router = APIRouter(prefix="/api/stops", tags=["stops"], dependencies=[Depends(any_role)])


@router.get("", response_model=list[StopOut])
async def list_stops(store=Depends(get_store)):
    """Get all bus stops."""
    return [StopOut.model_validate(s) for s in await store.list_stops()]


@router.get("/trips", response_model=list[TripSegmentOut])
async def trips_between(
    from_stop_id: int = Query(...),
    to_stop_id: int = Query(...),
    finder=Depends(get_trip_finder),
):
    """Buses riding from one stop to another, with departure and arrival times."""
    segments = await finder.buses_between(from_stop_id, to_stop_id)
    return [TripSegmentOut.from_segment(s) for s in segments]
