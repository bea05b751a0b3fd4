"""Tests for accounts, rider positions and dashboard statistics."""

import datetime

import pytest

from shuttle.core.errors import InvalidState, ProtectedAccount, UserNotFound
from shuttle.core.location_ingest import LocationIngest

UTC = datetime.timezone.utc
NOW = datetime.datetime(2024, 3, 2, 10, 0, tzinfo=UTC)


def ago(**kwargs) -> datetime.datetime:
    return NOW - datetime.timedelta(**kwargs)


@pytest.mark.asyncio
async def test_add_and_list_users(store):
    rider = await store.add_user("meera", "meera@campus.edu")
    admin = await store.add_user("dean", "dean@campus.edu", role="admin")

    assert rider.role == "user"
    assert [(u.id, u.role) for u in await store.list_users()] == [(rider.id, "user"), (admin.id, "admin")]

    with pytest.raises(InvalidState):
        await store.add_user("meera2", "meera@campus.edu")


@pytest.mark.asyncio
async def test_rider_latest_location(store):
    ingest = LocationIngest(store)
    rider = await store.add_user("meera", "meera@campus.edu")
    assert await ingest.rider_latest(rider.id) is None

    await ingest.record_rider(rider.id, 0.0, 0.001, ago(minutes=5))
    await ingest.record_rider(rider.id, 0.0, 0.002, NOW)
    await ingest.record_rider(rider.id, 0.0, 0.003, ago(minutes=1))

    latest = await ingest.rider_latest(rider.id)
    assert latest.longitude == 0.002
    assert latest.timestamp == NOW


@pytest.mark.asyncio
async def test_rider_location_needs_an_account(store):
    with pytest.raises(UserNotFound):
        await LocationIngest(store).record_rider(404, 0.0, 0.0, NOW)


@pytest.mark.asyncio
async def test_user_locations_joined_newest_first(store):
    meera = await store.add_user("meera", "meera@campus.edu")
    arjun = await store.add_user("arjun", "arjun@campus.edu")
    await store.append_user_location(meera.id, 0.0, 0.001, ago(minutes=10))
    await store.append_user_location(arjun.id, 0.0, 0.002, ago(minutes=2))

    rows = await store.list_user_locations()
    assert [(account.username, loc.longitude) for loc, account in rows] == [("arjun", 0.002), ("meera", 0.001)]


@pytest.mark.asyncio
async def test_leaving_driver_role_drops_assignment(store, campus):
    driver = await store.add_driver("ravi", "ravi@campus.edu", campus["bus"].id)

    account = await store.update_user(driver.user_id, role="user")

    assert account.role == "user"
    assert await store.get_driver_bus(driver.user_id) is None
    assert await store.list_drivers() == []


@pytest.mark.asyncio
async def test_delete_user_removes_positions(store):
    rider = await store.add_user("meera", "meera@campus.edu")
    await store.append_user_location(rider.id, 0.0, 0.0, NOW)

    await store.delete_user(rider.id)

    assert await store.get_user(rider.id) is None
    assert await store.list_user_locations() == []
    with pytest.raises(UserNotFound):
        await store.delete_user(rider.id)


@pytest.mark.asyncio
async def test_admin_account_cannot_be_deleted(store):
    admin = await store.add_user("dean", "dean@campus.edu", role="admin")
    with pytest.raises(ProtectedAccount):
        await store.delete_user(admin.id)
    assert await store.get_user(admin.id) is not None


@pytest.mark.asyncio
async def test_statistics(store, campus):
    loop = campus["bus"]
    spare = await store.create_bus("Spare")
    await store.add_driver("ravi", "ravi@campus.edu", loop.id)
    active = await store.add_user("meera", "meera@campus.edu")
    idle = await store.add_user("arjun", "arjun@campus.edu")
    await store.add_user("dean", "dean@campus.edu", role="admin")

    await store.append_user_location(active.id, 0.0, 0.0, ago(hours=2))
    await store.append_user_location(idle.id, 0.0, 0.0, ago(hours=30))
    await store.append_location(loop.id, 0.0, 0.0, ago(minutes=20))
    await store.append_location(loop.id, 0.0, 0.0, ago(minutes=40))
    await store.append_location(spare.id, 0.0, 0.0, ago(hours=3))

    stats = await store.statistics(NOW)

    assert stats.total_users == 2
    assert stats.active_users == 1
    assert stats.total_buses == 2
    assert stats.active_buses == 2
    assert stats.total_stops == 3
    assert stats.total_routes == 1
    assert stats.total_drivers == 1
    assert stats.recent_locations == 2


@pytest.mark.asyncio
async def test_statistics_accepts_local_clock(store, campus):
    await store.append_location(campus["bus"].id, 0.0, 0.0, ago(minutes=30))
    ist_now = NOW.astimezone(datetime.timezone(datetime.timedelta(hours=5, minutes=30)))
    assert (await store.statistics(ist_now)).recent_locations == 1
