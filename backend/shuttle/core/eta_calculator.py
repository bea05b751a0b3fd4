"""Estimate arrival times from a static schedule or straight-line GPS distance."""

import datetime
import logging
import math

from shuttle.core.entities import Bus, LocationSample, RouteEntry
from shuttle.core.errors import BusNotFound, RouteNotFound
from shuttle.core.geo import distance_m
from shuttle.core.route_model import (
    ClearedCountLocator,
    ClosestStopLocator,
    RouteModel,
    StopPosition,
)
from shuttle.core.trip_clock import TripClock, resolve_start
from shuttle.schemas.bus import (
    AnnotatedStop,
    BusInfo,
    RouteTimetable,
    RouteWithStatus,
    TimetableStop,
)

logger = logging.getLogger(__name__)

# Fixed stand-in for real-time speed (~20 km/h)
AVERAGE_SPEED_MPS = 5.56
# Schedule-derived ETAs above this are treated as stale schedule data (minutes)
SCHEDULE_ETA_CEILING_MIN = 60


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_hhmm(instant: datetime.datetime) -> str:
    return instant.strftime("%H:%M")


def scheduled_instant(start: datetime.datetime, entry: RouteEntry) -> datetime.datetime:
    return start + datetime.timedelta(minutes=entry.time_from_start)


class EtaEstimator:
    """Annotates a bus's route with cleared flags and arrival estimates."""

    def __init__(
        self,
        store=None,
        clock: TripClock | None = None,
        average_speed_mps: float = AVERAGE_SPEED_MPS,
        eta_ceiling_minutes: int = SCHEDULE_ETA_CEILING_MIN,
    ) -> None:
        self.store = store
        self.clock = clock if clock is not None else TripClock(store)
        self.average_speed_mps = average_speed_mps
        self.eta_ceiling_minutes = eta_ceiling_minutes
        self.cleared_locator = ClearedCountLocator()
        self.closest_locator = ClosestStopLocator()

    # -- pure estimators ---------------------------------------------------

    def distance_eta_minutes(
        self, sample: LocationSample | None, entry: RouteEntry | None,
    ) -> int | None:
        """Minutes to ``entry`` at the assumed average speed, or None without a usable fix."""
        if sample is None or entry is None:
            return None
        dist = distance_m(
            sample.latitude, sample.longitude,
            entry.stop.latitude, entry.stop.longitude,
        )
        if not math.isfinite(dist):
            logger.warning("Non-finite distance from bus %d to stop %d", sample.bus_id, entry.stop_id)
            return None
        return round_half_up(dist / self.average_speed_mps / 60)

    def schedule_eta_minutes(
        self,
        start: datetime.datetime,
        entry: RouteEntry,
        now: datetime.datetime,
        sample: LocationSample | None,
    ) -> int | None:
        """Schedule-based minutes until ``entry`` (at least 1).

        Above the ceiling the schedule is assumed stale and the distance
        heuristic is used instead.
        """
        diff_s = (scheduled_instant(start, entry) - now).total_seconds()
        eta = max(1, round_half_up(diff_s / 60))
        if eta > self.eta_ceiling_minutes:
            logger.debug("Schedule ETA %d min over ceiling, using distance", eta)
            return self.distance_eta_minutes(sample, entry)
        return eta

    def annotate(
        self,
        route: RouteModel,
        bus: Bus,
        sample: LocationSample | None,
        start: datetime.datetime | None,
    ) -> RouteWithStatus:
        """Cleared/next/scheduled labels for every stop, positioned by the cleared counter."""
        position = self.cleared_locator.locate(route, bus, sample)
        eta = self.distance_eta_minutes(sample, position.next)
        cleared_count = ClearedCountLocator.normalized_cleared(route, bus.stops_cleared)

        stops: list[AnnotatedStop] = []
        for idx, entry in enumerate(route):
            cleared = idx < cleared_count
            is_next = idx == position.next_index and eta is not None
            if start is not None:
                hhmm = format_hhmm(scheduled_instant(start, entry))
                if cleared:
                    label = f"Cleared ({hhmm})"
                elif is_next:
                    label = f"{eta} min ({hhmm})"
                else:
                    label = hhmm
            else:
                if cleared:
                    label = "Cleared"
                elif is_next:
                    label = f"{eta} min"
                else:
                    label = "Schedule pending"
            stops.append(AnnotatedStop.from_entry(entry, cleared=cleared, estimated_time=label))

        return RouteWithStatus(
            bus_id=route.bus_id,
            stops=stops,
            current_stop=self._pick(stops, position.current_index),
            next_stop=self._pick(stops, position.next_index),
            estimated_arrival=f"{eta} min" if eta is not None else None,
        )

    def timetable(
        self,
        route: RouteModel,
        sample: LocationSample | None,
        start: datetime.datetime,
        now: datetime.datetime,
        current_rep: int,
    ) -> RouteTimetable:
        """Per-stop scheduled times, positioned by the stop closest to the latest fix.

        Stops scheduled in the past and at or before the closest stop are
        labelled passed rather than given a countdown.
        """
        position: StopPosition = self.closest_locator.locate(route, None, sample)
        stops: list[TimetableStop] = []
        for entry in route:
            if position.current is None:
                stops.append(TimetableStop.from_entry(entry))
                continue
            instant = scheduled_instant(start, entry)
            hhmm = format_hhmm(instant)
            if instant < now and entry.stop_order <= position.current.stop_order:
                stops.append(TimetableStop.from_entry(entry, eta_minutes=-1, eta_time=f"{hhmm} (Passed)"))
            else:
                minutes = max(0, round_half_up((instant - now).total_seconds() / 60))
                stops.append(TimetableStop.from_entry(entry, eta_minutes=minutes, eta_time=hhmm))

        return RouteTimetable(
            bus_id=route.bus_id,
            stops=stops,
            current_stop=self._pick(stops, position.current_index),
            next_stop=self._pick(stops, position.next_index),
            current_rep=current_rep,
        )

    @staticmethod
    def _pick(stops: list, index: int | None):
        return stops[index] if index is not None else None

    # -- store-backed views --------------------------------------------------

    async def route_with_status(self, bus_id: int, now: datetime.datetime) -> RouteWithStatus:
        route = await self.store.get_route(bus_id)
        if route.is_empty:
            raise RouteNotFound(bus_id)
        bus = await self.store.get_bus(bus_id)
        if bus is None:
            raise BusNotFound(bus_id)
        sample = await self.store.latest_location(bus_id)
        start = await self.clock.resolve(bus_id, bus.current_rep, now)
        return self.annotate(route, bus, sample, start)

    async def route_timetable(self, bus_id: int, now: datetime.datetime) -> RouteTimetable:
        route = await self.store.get_route(bus_id)
        if route.is_empty:
            raise RouteNotFound(bus_id)
        bus = await self.store.get_bus(bus_id)
        current_rep = bus.current_rep if bus else 1
        sample = await self.store.latest_location(bus_id)

        start_time = await self.clock.start_time_for(bus_id, current_rep)
        if start_time is None:
            logger.info("No start time for bus %d rep %d, using current time", bus_id, current_rep)
            start_time = now.time().replace(microsecond=0)
        start = resolve_start(start_time, now)
        return self.timetable(route, sample, start, now, current_rep)

    async def bus_info(self, bus_id: int, now: datetime.datetime) -> BusInfo:
        bus = await self.store.get_bus(bus_id)
        if bus is None:
            raise BusNotFound(bus_id)
        driver = await self.store.get_bus_driver(bus_id)
        info = BusInfo(
            id=bus.id,
            name=bus.name,
            current_rep=bus.current_rep,
            total_rep=bus.total_rep,
            driver_id=driver.user_id if driver else None,
            driver_name=driver.username if driver else None,
        )

        sample = await self.store.latest_location(bus_id)
        route = await self.store.get_route(bus_id)
        start = await self.clock.resolve(bus_id, bus.current_rep, now)
        if sample is None or route.is_empty or start is None:
            return info

        position = self.closest_locator.locate(route, bus, sample)
        info.next_stop_id = position.next.stop_id
        info.next_stop_name = position.next.stop.name
        info.estimated_arrival = self.schedule_eta_minutes(start, position.next, now, sample)
        return info
