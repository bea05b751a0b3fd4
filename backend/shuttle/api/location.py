"""Rider position endpoints: any signed-in caller reports and reads their own location."""

from fastapi import APIRouter, Depends

from shuttle.api.deps import Principal, any_role, get_ingest
from shuttle.core.errors import NotFound
from shuttle.schemas.user import RiderLocationOut, RiderLocationUpdate

router = APIRouter(prefix="/api/location", tags=["location"])


@router.post("", response_model=RiderLocationOut)
async def report_location(
    body: RiderLocationUpdate,
    principal: Principal = Depends(any_role),
    ingest=Depends(get_ingest),
):
    location = await ingest.record_rider(principal.user_id, body.latitude, body.longitude)
    return RiderLocationOut.model_validate(location)


@router.get("/me", response_model=RiderLocationOut)
async def my_location(principal: Principal = Depends(any_role), ingest=Depends(get_ingest)):
    location = await ingest.rider_latest(principal.user_id)
    if location is None:
        raise NotFound("No location found for this user")
    return RiderLocationOut.model_validate(location)
