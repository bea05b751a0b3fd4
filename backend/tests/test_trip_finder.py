"""Tests for TripFinder on circular routes."""

import datetime

import pytest

from shuttle.core.entities import Bus, RouteEntry, Stop
from shuttle.core.errors import NoTripsFound
from shuttle.core.route_model import RouteModel
from shuttle.core.trip_finder import TripFinder, TripSegment, segments_on_route


def make_route(stop_ids: list[int]) -> RouteModel:
    return RouteModel(1, [
        RouteEntry(
            bus_id=1, stop_order=i + 1, time_from_start=i * 5,
            stop=Stop(id=sid, name=f"S{sid}", latitude=0.0, longitude=0.0),
        )
        for i, sid in enumerate(stop_ids)
    ])


def orders(pairs):
    return [(a.stop_order, b.stop_order) for a, b in pairs]


def test_simple_segment():
    assert orders(segments_on_route(make_route([1, 2, 3]), 1, 3)) == [(1, 3)]


def test_destination_before_origin_not_matched():
    assert segments_on_route(make_route([1, 2, 3]), 3, 1) == []


def test_segment_stops_at_next_origin():
    # 1 -> 2 -> 1 -> 3: riding to 3 is only offered from the second visit of 1
    assert orders(segments_on_route(make_route([1, 2, 1, 3]), 1, 3)) == [(3, 4)]


def test_destination_served_twice():
    assert orders(segments_on_route(make_route([1, 2, 3, 2]), 1, 2)) == [(1, 2), (1, 4)]


def test_duration_rounds_half_minutes_up():
    stops = [Stop(id=i, name=f"S{i}", latitude=0.0, longitude=0.0) for i in (1, 2)]
    origin = RouteEntry(bus_id=1, stop_order=1, time_from_start=0, stop=stops[0])
    destination = RouteEntry(bus_id=1, stop_order=2, time_from_start=2.5, stop=stops[1])
    bus = Bus(id=1, name="Loop 1", stops_cleared=0, current_rep=1, total_rep=1)

    seg = TripSegment(bus, 1, datetime.time(8, 0), origin, destination)
    assert seg.duration_minutes == 3


@pytest.mark.asyncio
async def test_buses_between(store, campus):
    gate, _, hostel = campus["stops"]
    segments = await TripFinder(store).buses_between(gate.id, hostel.id)

    assert len(segments) == 1
    seg = segments[0]
    assert seg.bus.name == "Loop 1"
    assert seg.trip_number == 1
    assert (seg.departure, seg.arrival, seg.duration_minutes) == ("08:00", "08:20", 20)
    assert seg.segment_id == f"{campus['bus'].id}-1-3"


@pytest.mark.asyncio
async def test_bus_without_current_start_time_skipped(store, campus):
    gate, library, _ = campus["stops"]
    await store.set_progress(campus["bus"].id, 2, 0)
    with pytest.raises(NoTripsFound):
        await TripFinder(store).buses_between(gate.id, library.id)


@pytest.mark.asyncio
async def test_no_bus_serves_pair(store, campus):
    stray = await store.add_stop("Stadium", 0.5, 0.5)
    with pytest.raises(NoTripsFound):
        await TripFinder(store).buses_between(campus["stops"][0].id, stray.id)


def test_departure_wraps_past_midnight():
    route = make_route([1, 2, 3])
    seg = TripSegment(
        bus=Bus(id=1, name="Night"), trip_number=4, bus_start=datetime.time(23, 55),
        origin=route[0], destination=route[2],
    )
    assert (seg.departure, seg.arrival, seg.duration_minutes) == ("23:55", "00:05", 10)
