"""Tests for value-type validation."""

import datetime

import pytest

from shuttle.core.entities import Bus, RouteEntry, ScheduledStartTime, Stop

GATE = Stop(id=1, name="Main Gate", latitude=22.3190, longitude=87.3091)


def test_route_entry_rejects_zero_order():
    with pytest.raises(ValueError):
        RouteEntry(bus_id=1, stop_order=0, time_from_start=0, stop=GATE)


def test_route_entry_rejects_negative_offset():
    with pytest.raises(ValueError):
        RouteEntry(bus_id=1, stop_order=1, time_from_start=-1, stop=GATE)


def test_bus_rejects_negative_counter():
    with pytest.raises(ValueError):
        Bus(id=1, name="Loop", stops_cleared=-1)


def test_bus_rejects_rep_zero():
    with pytest.raises(ValueError):
        Bus(id=1, name="Loop", current_rep=0)


def test_stop_requires_coordinates():
    with pytest.raises(ValueError):
        Stop(id=1, name="Nowhere", latitude=None, longitude=87.3)


def test_start_time_requires_positive_rep():
    with pytest.raises(ValueError):
        ScheduledStartTime(id=1, bus_id=1, rep_no=0, start_time=datetime.time(8, 0))


def test_bus_defaults():
    bus = Bus(id=1, name="Loop")
    assert (bus.stops_cleared, bus.current_rep, bus.total_rep) == (0, 1, 0)
