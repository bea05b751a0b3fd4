"""Shared fixtures: an in-memory SQLite store and a small seeded campus loop."""

import datetime

import pytest_asyncio

from shuttle.core.store import ShuttleStore
from shuttle.db.session import create_engine, create_session_factory, create_tables


@pytest_asyncio.fixture
async def store():
    engine = create_engine("sqlite+aiosqlite://")
    await create_tables(engine)
    yield ShuttleStore(create_session_factory(engine))
    await engine.dispose()


@pytest_asyncio.fixture
async def campus(store):
    """Bus "Loop 1" on Main Gate -> Library -> Hostel (0, 10, 20 min), rep 1 at 08:00.

    Stops lie on the equator, one hundredth of a degree (~1.1 km) apart.
    """
    gate = await store.add_stop("Main Gate", 0.0, 0.00)
    library = await store.add_stop("Library", 0.0, 0.01)
    hostel = await store.add_stop("Hostel", 0.0, 0.02)
    bus = await store.create_bus("Loop 1", total_rep=3)
    for order, (stop, offset) in enumerate([(gate, 0), (library, 10), (hostel, 20)], start=1):
        await store.add_route_entry(bus.id, stop.id, order, offset)
    await store.add_start_time(bus.id, 1, datetime.time(8, 0))
    return {"bus": bus, "stops": [gate, library, hostel]}
