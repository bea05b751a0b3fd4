"""Tests for start-instant resolution."""

import datetime
from zoneinfo import ZoneInfo

import pytest

from shuttle.core.trip_clock import TripClock, resolve_start

IST = ZoneInfo("Asia/Kolkata")


def test_start_after_midnight_resolves_to_previous_day():
    now = datetime.datetime(2024, 3, 2, 0, 15, tzinfo=IST)
    start = resolve_start(datetime.time(23, 30), now)
    assert start == datetime.datetime(2024, 3, 1, 23, 30, tzinfo=IST)


def test_start_earlier_today():
    now = datetime.datetime(2024, 3, 2, 9, 0, tzinfo=IST)
    assert resolve_start(datetime.time(8, 0), now) == datetime.datetime(2024, 3, 2, 8, 0, tzinfo=IST)


def test_start_equal_to_now_stays_today():
    now = datetime.datetime(2024, 3, 2, 8, 0, tzinfo=IST)
    assert resolve_start(datetime.time(8, 0), now).date() == now.date()


def test_later_today_is_pushed_back_a_day():
    now = datetime.datetime(2024, 3, 2, 7, 0, tzinfo=IST)
    assert resolve_start(datetime.time(8, 0), now).date() == datetime.date(2024, 3, 1)


@pytest.mark.asyncio
async def test_clock_resolves_from_store(store, campus):
    clock = TripClock(store)
    now = datetime.datetime(2024, 3, 2, 8, 30, tzinfo=IST)
    bus_id = campus["bus"].id
    assert await clock.start_time_for(bus_id, 1) == datetime.time(8, 0)
    assert await clock.resolve(bus_id, 1, now) == datetime.datetime(2024, 3, 2, 8, 0, tzinfo=IST)
    assert await clock.resolve(bus_id, 2, now) is None
