"""Administration endpoints: fleet CRUD, accounts and dashboard statistics."""

from fastapi import APIRouter, Depends, Request, Response

from shuttle.api.deps import admin_only, get_now, get_store
from shuttle.schemas.admin import BusCreate, BusUpdate, DriverCreate, DriverOut, DriverUpdate
from shuttle.schemas.bus import BusOut
from shuttle.schemas.route import (
    RouteEntryCreate,
    RouteEntryOut,
    RouteEntryUpdate,
    StartTimeCreate,
    StartTimeOut,
    StartTimeUpdate,
    StopCreate,
    StopOut,
    StopUpdate,
)
from shuttle.schemas.user import StatisticsOut, UserCreate, UserLocationOut, UserOut, UserUpdate

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(admin_only)])


# -- buses ---------------------------------------------------------------

@router.get("/buses", response_model=list[BusOut])
async def list_buses(store=Depends(get_store)):
    return [BusOut.model_validate(b) for b in await store.list_buses()]


@router.post("/buses", response_model=BusOut, status_code=201)
async def create_bus(body: BusCreate, store=Depends(get_store)):
    return BusOut.model_validate(await store.create_bus(body.name, body.total_rep))


@router.put("/buses/{bus_id}", response_model=BusOut)
async def update_bus(bus_id: int, body: BusUpdate, store=Depends(get_store)):
    return BusOut.model_validate(await store.update_bus(bus_id, name=body.name, total_rep=body.total_rep))


@router.delete("/buses/{bus_id}", status_code=204)
async def delete_bus(bus_id: int, request: Request, store=Depends(get_store)):
    """Delete a bus with its route, start times, driver links and samples."""
    await store.delete_bus(bus_id)
    broadcaster = getattr(request.app.state, "broadcaster", None)
    if broadcaster is not None:
        await broadcaster.forget(bus_id)
    return Response(status_code=204)


# -- stops ---------------------------------------------------------------

@router.post("/stops", response_model=StopOut, status_code=201)
async def create_stop(body: StopCreate, store=Depends(get_store)):
    return StopOut.model_validate(await store.add_stop(body.name, body.latitude, body.longitude))


@router.put("/stops/{stop_id}", response_model=StopOut)
async def update_stop(stop_id: int, body: StopUpdate, store=Depends(get_store)):
    stop = await store.update_stop(
        stop_id, name=body.name, latitude=body.latitude, longitude=body.longitude,
    )
    return StopOut.model_validate(stop)


@router.delete("/stops/{stop_id}", status_code=204)
async def delete_stop(stop_id: int, store=Depends(get_store)):
    await store.delete_stop(stop_id)
    return Response(status_code=204)


# -- route entries -------------------------------------------------------

@router.get("/buses/{bus_id}/route", response_model=list[RouteEntryOut])
async def get_route(bus_id: int, store=Depends(get_store)):
    route = await store.get_route(bus_id)
    return [RouteEntryOut.from_entry(e) for e in route]


@router.post("/routes", response_model=RouteEntryOut, status_code=201)
async def add_route_entry(body: RouteEntryCreate, store=Depends(get_store)):
    entry = await store.add_route_entry(body.bus_id, body.stop_id, body.stop_order, body.time_from_start)
    return RouteEntryOut.from_entry(entry)


@router.put("/routes/{entry_id}", response_model=RouteEntryOut)
async def update_route_entry(entry_id: int, body: RouteEntryUpdate, store=Depends(get_store)):
    entry = await store.update_route_entry(
        entry_id,
        stop_id=body.stop_id,
        stop_order=body.stop_order,
        time_from_start=body.time_from_start,
    )
    return RouteEntryOut.from_entry(entry)


@router.delete("/routes/{entry_id}", status_code=204)
async def delete_route_entry(entry_id: int, store=Depends(get_store)):
    await store.delete_route_entry(entry_id)
    return Response(status_code=204)


# -- start times ---------------------------------------------------------

@router.get("/buses/{bus_id}/start-times", response_model=list[StartTimeOut])
async def list_start_times(bus_id: int, store=Depends(get_store)):
    return [StartTimeOut.model_validate(t) for t in await store.list_start_times(bus_id)]


@router.post("/start-times", response_model=StartTimeOut, status_code=201)
async def add_start_time(body: StartTimeCreate, store=Depends(get_store)):
    scheduled = await store.add_start_time(body.bus_id, body.rep_no, body.start_time)
    return StartTimeOut.model_validate(scheduled)


@router.put("/start-times/{start_time_id}", response_model=StartTimeOut)
async def update_start_time(start_time_id: int, body: StartTimeUpdate, store=Depends(get_store)):
    return StartTimeOut.model_validate(await store.update_start_time(start_time_id, body.start_time))


@router.delete("/start-times/{start_time_id}", response_model=StartTimeOut)
async def delete_start_time(start_time_id: int, store=Depends(get_store)):
    """Delete a start time and return the removed row."""
    return StartTimeOut.model_validate(await store.delete_start_time(start_time_id))


# -- drivers -------------------------------------------------------------

@router.get("/drivers", response_model=list[DriverOut])
async def list_drivers(store=Depends(get_store)):
    return [DriverOut.model_validate(d) for d in await store.list_drivers()]


@router.post("/drivers", response_model=DriverOut, status_code=201)
async def create_driver(body: DriverCreate, store=Depends(get_store)):
    return DriverOut.model_validate(await store.add_driver(body.username, body.email, body.bus_id))


@router.put("/drivers/{user_id}", response_model=DriverOut)
async def update_driver(user_id: int, body: DriverUpdate, store=Depends(get_store)):
    driver = await store.update_driver(
        user_id, username=body.username, email=body.email, bus_id=body.bus_id,
    )
    return DriverOut.model_validate(driver)


@router.delete("/drivers/{user_id}", status_code=204)
async def delete_driver(user_id: int, store=Depends(get_store)):
    await store.delete_driver(user_id)
    return Response(status_code=204)


# -- users ---------------------------------------------------------------

@router.get("/users", response_model=list[UserOut])
async def list_users(store=Depends(get_store)):
    return [UserOut.model_validate(u) for u in await store.list_users()]


@router.post("/users", response_model=UserOut, status_code=201)
async def create_user(body: UserCreate, store=Depends(get_store)):
    return UserOut.model_validate(await store.add_user(body.username, body.email, body.role))


@router.put("/users/{user_id}", response_model=UserOut)
async def update_user(user_id: int, body: UserUpdate, store=Depends(get_store)):
    account = await store.update_user(user_id, username=body.username, email=body.email, role=body.role)
    return UserOut.model_validate(account)


@router.delete("/users/{user_id}", status_code=204)
async def delete_user(user_id: int, store=Depends(get_store)):
    """Admin accounts are protected and answer 403."""
    await store.delete_user(user_id)
    return Response(status_code=204)


@router.get("/user-locations", response_model=list[UserLocationOut])
async def user_locations(store=Depends(get_store)):
    """Every stored rider position, newest first."""
    return [
        UserLocationOut(
            id=loc.id,
            user_id=account.id,
            username=account.username,
            email=account.email,
            role=account.role,
            latitude=loc.latitude,
            longitude=loc.longitude,
            timestamp=loc.timestamp,
        )
        for loc, account in await store.list_user_locations()
    ]


@router.get("/statistics", response_model=StatisticsOut)
async def statistics(store=Depends(get_store), now=Depends(get_now)):
    return StatisticsOut.model_validate(await store.statistics(now))
