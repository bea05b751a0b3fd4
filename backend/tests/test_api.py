"""HTTP API tests through httpx against the ASGI app."""

import datetime
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from shuttle.api.deps import get_now
from shuttle.config import settings
from shuttle.main import attach_services, create_app

NOW = datetime.datetime(2024, 3, 2, 8, 5, tzinfo=ZoneInfo("Asia/Kolkata"))

RIDER = {"X-User-Id": "1", "X-User-Role": "user"}
ADMIN = {"X-User-Id": "2", "X-User-Role": "admin"}


def as_driver(user_id: int) -> dict:
    return {"X-User-Id": str(user_id), "X-User-Role": "driver"}


@pytest_asyncio.fixture
async def client(store):
    app = create_app(use_lifespan=False)
    attach_services(app, store, settings)
    app.dependency_overrides[get_now] = lambda: NOW
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def driver(store, campus):
    return await store.add_driver("ravi", "ravi@campus.edu", campus["bus"].id)


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_missing_identity_is_401(client, campus):
    resp = await client.get("/api/buses")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_wrong_role_is_403(client, campus):
    resp = await client.get("/api/admin/buses", headers=RIDER)
    assert resp.status_code == 403
    resp = await client.post("/api/driver/clear-stop", json={"bus_id": 1, "stop_id": 1}, headers=RIDER)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_list_buses(client, campus):
    resp = await client.get("/api/buses", headers=RIDER)
    assert resp.status_code == 200
    assert resp.json() == [{
        "id": campus["bus"].id, "name": "Loop 1",
        "stops_cleared": 0, "current_rep": 1, "total_rep": 3,
    }]


@pytest.mark.asyncio
async def test_route_with_stops_empty_route_is_404(client, store):
    bus = await store.create_bus("Spare")
    resp = await client.get(f"/api/buses/{bus.id}/route-with-stops", headers=RIDER)
    assert resp.status_code == 404
    assert "Route" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_location_404_before_first_ping(client, campus):
    resp = await client.get(f"/api/buses/{campus['bus'].id}/location", headers=RIDER)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_driver_reports_location(client, campus, driver):
    bus_id = campus["bus"].id
    resp = await client.post(
        "/api/driver/location",
        json={"bus_id": bus_id, "latitude": 0.0, "longitude": 0.004},
        headers=as_driver(driver.user_id),
    )
    assert resp.status_code == 200

    resp = await client.get(f"/api/buses/{bus_id}/location", headers=RIDER)
    assert resp.status_code == 200
    assert resp.json()["longitude"] == 0.004


@pytest.mark.asyncio
async def test_location_out_of_range_is_422(client, campus, driver):
    resp = await client.post(
        "/api/driver/location",
        json={"bus_id": campus["bus"].id, "latitude": 95.0, "longitude": 0.0},
        headers=as_driver(driver.user_id),
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_unassigned_driver_is_403(client, store, campus, driver):
    other = await store.create_bus("Loop 2")
    resp = await client.post(
        "/api/driver/location",
        json={"bus_id": other.id, "latitude": 0.0, "longitude": 0.0},
        headers=as_driver(driver.user_id),
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_clear_stop_flow(client, campus, driver):
    bus_id = campus["bus"].id
    headers = as_driver(driver.user_id)
    gate, library, hostel = campus["stops"]

    for stop in (gate, library):
        resp = await client.post("/api/driver/clear-stop", json={"bus_id": bus_id, "stop_id": stop.id}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["new_repetition"] is False

    resp = await client.post("/api/driver/clear-stop", json={"bus_id": bus_id, "stop_id": hostel.id}, headers=headers)
    body = resp.json()
    assert body["new_repetition"] is True
    assert body["bus"]["stops_cleared"] == 0
    assert body["bus"]["current_rep"] == 2


@pytest.mark.asyncio
async def test_clear_stop_not_in_route_is_404(client, store, campus, driver):
    stray = await store.add_stop("Stadium", 0.5, 0.5)
    resp = await client.post(
        "/api/driver/clear-stop",
        json={"bus_id": campus["bus"].id, "stop_id": stray.id},
        headers=as_driver(driver.user_id),
    )
    assert resp.status_code == 404
    assert (await store.get_bus(campus["bus"].id)).stops_cleared == 0


@pytest.mark.asyncio
async def test_my_bus(client, campus, driver):
    resp = await client.get("/api/driver/my-bus", headers=as_driver(driver.user_id))
    assert resp.status_code == 200
    body = resp.json()
    assert body["bus"]["name"] == "Loop 1"
    assert body["last_cleared_stop"]["name"] == "Hostel"
    assert body["next_stop"]["name"] == "Main Gate"
    assert [s["stop_order"] for s in body["route"]] == [1, 2, 3]


@pytest.mark.asyncio
async def test_trip_options_and_initialize(client, store, campus, driver):
    bus_id = campus["bus"].id
    headers = as_driver(driver.user_id)
    await store.add_start_time(bus_id, 2, datetime.time(12, 0))

    resp = await client.get(f"/api/driver/buses/{bus_id}/trip-options", headers=headers)
    assert [t["start_time"] for t in resp.json()["scheduled_times"]] == ["08:00:00", "12:00:00"]

    resp = await client.post(
        "/api/driver/initialize-trip",
        json={"bus_id": bus_id, "start_time": "12:00:00", "next_stop_sequence": 2},
        headers=headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["bus"]["current_rep"] == 2
    assert body["stops_cleared"] == 2
    assert body["next_stop"]["name"] == "Hostel"


@pytest.mark.asyncio
async def test_route_with_stops_view(client, store, campus):
    bus_id = campus["bus"].id
    await store.set_progress(bus_id, 1, 1)
    resp = await client.get(f"/api/buses/{bus_id}/route-with-stops", headers=RIDER)
    assert resp.status_code == 200
    labels = [s["estimated_time"] for s in resp.json()["stops"]]
    assert labels == ["Cleared (08:00)", "08:10", "08:20"]


@pytest.mark.asyncio
async def test_trips_between_stops(client, campus):
    gate, _, hostel = campus["stops"]
    resp = await client.get(
        "/api/stops/trips", params={"from_stop_id": gate.id, "to_stop_id": hostel.id}, headers=RIDER,
    )
    assert resp.status_code == 200
    [trip] = resp.json()
    assert trip["departure_time"] == "08:00"
    assert trip["arrival_time"] == "08:20"

    resp = await client.get(
        "/api/stops/trips", params={"from_stop_id": hostel.id, "to_stop_id": gate.id}, headers=RIDER,
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_admin_crud(client, campus):
    resp = await client.post("/api/admin/buses", json={"name": "Loop 9", "total_rep": 4}, headers=ADMIN)
    assert resp.status_code == 201
    bus_id = resp.json()["id"]

    resp = await client.post("/api/admin/stops", json={"name": "Gym", "latitude": 0.1, "longitude": 0.1}, headers=ADMIN)
    stop_id = resp.json()["id"]

    resp = await client.post(
        "/api/admin/routes",
        json={"bus_id": bus_id, "stop_id": stop_id, "stop_order": 1, "time_from_start": 0},
        headers=ADMIN,
    )
    assert resp.status_code == 201

    resp = await client.delete(f"/api/admin/stops/{stop_id}", headers=ADMIN)
    assert resp.status_code == 409

    body = {"bus_id": bus_id, "rep_no": 1, "start_time": "07:30:00"}
    assert (await client.post("/api/admin/start-times", json=body, headers=ADMIN)).status_code == 201
    assert (await client.post("/api/admin/start-times", json=body, headers=ADMIN)).status_code == 400

    resp = await client.put(f"/api/admin/buses/{bus_id}", json={"total_rep": 6}, headers=ADMIN)
    assert resp.json()["total_rep"] == 6

    resp = await client.delete(f"/api/admin/buses/{bus_id}", headers=ADMIN)
    assert resp.status_code == 204
    resp = await client.put(f"/api/admin/buses/{bus_id}", json={"total_rep": 1}, headers=ADMIN)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_admin_driver_assignment(client, campus):
    resp = await client.post(
        "/api/admin/drivers",
        json={"username": "asha", "email": "asha@campus.edu", "bus_id": campus["bus"].id},
        headers=ADMIN,
    )
    assert resp.status_code == 201
    user_id = resp.json()["user_id"]

    resp = await client.post(
        "/api/admin/drivers",
        json={"username": "asha2", "email": "asha@campus.edu"},
        headers=ADMIN,
    )
    assert resp.status_code == 409

    resp = await client.get("/api/admin/drivers", headers=ADMIN)
    assert [d["user_id"] for d in resp.json()] == [user_id]

    resp = await client.get("/api/driver/my-bus", headers=as_driver(user_id))
    assert resp.status_code == 200


def as_rider(user_id: int) -> dict:
    return {"X-User-Id": str(user_id), "X-User-Role": "user"}


@pytest.mark.asyncio
async def test_rider_reports_own_location(client, store):
    rider = await store.add_user("meera", "meera@campus.edu")
    headers = as_rider(rider.id)

    resp = await client.get("/api/location/me", headers=headers)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "No location found for this user"

    resp = await client.post("/api/location", json={"latitude": 0.0, "longitude": 0.004}, headers=headers)
    assert resp.status_code == 200

    resp = await client.get("/api/location/me", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["longitude"] == 0.004

    resp = await client.post("/api/location", json={"latitude": 0.0, "longitude": 181.0}, headers=headers)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_rider_location_unknown_account_is_404(client):
    resp = await client.post("/api/location", json={"latitude": 0.0, "longitude": 0.0}, headers=as_rider(999))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_admin_user_locations(client, store):
    rider = await store.add_user("meera", "meera@campus.edu")
    await client.post("/api/location", json={"latitude": 0.0, "longitude": 0.004}, headers=as_rider(rider.id))

    resp = await client.get("/api/admin/user-locations", headers=RIDER)
    assert resp.status_code == 403

    resp = await client.get("/api/admin/user-locations", headers=ADMIN)
    [row] = resp.json()
    assert (row["user_id"], row["username"], row["role"], row["longitude"]) == (rider.id, "meera", "user", 0.004)


@pytest.mark.asyncio
async def test_admin_users(client):
    resp = await client.post("/api/admin/users", json={"username": "meera", "email": "meera@campus.edu"}, headers=ADMIN)
    assert resp.status_code == 201
    user_id = resp.json()["id"]
    assert resp.json()["role"] == "user"

    resp = await client.post(
        "/api/admin/users", json={"username": "x", "email": "x@campus.edu", "role": "root"}, headers=ADMIN,
    )
    assert resp.status_code == 422

    resp = await client.put(f"/api/admin/users/{user_id}", json={"role": "driver"}, headers=ADMIN)
    assert resp.json()["role"] == "driver"

    resp = await client.post("/api/admin/users", json={"username": "dean", "email": "dean@campus.edu", "role": "admin"}, headers=ADMIN)
    admin_id = resp.json()["id"]
    assert (await client.delete(f"/api/admin/users/{admin_id}", headers=ADMIN)).status_code == 403

    assert (await client.delete(f"/api/admin/users/{user_id}", headers=ADMIN)).status_code == 204
    resp = await client.get("/api/admin/users", headers=ADMIN)
    assert [u["id"] for u in resp.json()] == [admin_id]


@pytest.mark.asyncio
async def test_admin_statistics(client, store, campus, driver):
    await store.add_user("meera", "meera@campus.edu")
    await store.append_location(campus["bus"].id, 0.0, 0.0, NOW - datetime.timedelta(minutes=10))

    resp = await client.get("/api/admin/statistics", headers=ADMIN)
    assert resp.status_code == 200
    assert resp.json() == {
        "total_users": 1,
        "active_users": 0,
        "total_buses": 1,
        "active_buses": 1,
        "total_stops": 3,
        "total_routes": 1,
        "total_drivers": 1,
        "recent_locations": 1,
    }
