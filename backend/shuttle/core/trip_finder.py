"""Find buses that ride from one stop to another on their circular routes."""

import datetime
import logging
from dataclasses import dataclass

from shuttle.core.entities import Bus, RouteEntry
from shuttle.core.errors import NoTripsFound
from shuttle.core.eta_calculator import round_half_up
from shuttle.core.route_model import RouteModel

logger = logging.getLogger(__name__)


@dataclass
class TripSegment:
    bus: Bus
    trip_number: int
    bus_start: datetime.time
    origin: RouteEntry
    destination: RouteEntry

    def _clock(self, entry: RouteEntry) -> datetime.datetime:
        # Time-of-day arithmetic only; the date is irrelevant
        base = datetime.datetime.combine(datetime.date(1970, 1, 1), self.bus_start.replace(tzinfo=None))
        return base + datetime.timedelta(minutes=entry.time_from_start)

    @property
    def departure(self) -> str:
        return self._clock(self.origin).strftime("%H:%M")

    @property
    def arrival(self) -> str:
        return self._clock(self.destination).strftime("%H:%M")

    @property
    def duration_minutes(self) -> int:
        delta = self._clock(self.destination) - self._clock(self.origin)
        return round_half_up(delta.total_seconds() / 60)

    @property
    def segment_id(self) -> str:
        return f"{self.bus.id}-{self.origin.stop_order}-{self.destination.stop_order}"


def segments_on_route(route: RouteModel, from_stop_id: int, to_stop_id: int) -> list[tuple[RouteEntry, RouteEntry]]:
    """Pairs (origin, destination) within one lap of ``route``.

    Every occurrence of the origin stop is paired with each later occurrence
    of the destination stop, unless another occurrence of the origin stop
    lies between them (the rider would board there instead).
    """
    pairs = []
    for entry in route:
        if entry.stop_id != from_stop_id:
            continue
        for later in route:
            if later.stop_order <= entry.stop_order:
                continue
            if later.stop_id == to_stop_id:
                pairs.append((entry, later))
            if later.stop_id == from_stop_id:
                break
    return pairs


class TripFinder:
    def __init__(self, store) -> None:
        self.store = store

    async def buses_between(self, from_stop_id: int, to_stop_id: int) -> list[TripSegment]:
        logger.info("Looking up buses between stops %d and %d", from_stop_id, to_stop_id)
        found: list[TripSegment] = []
        for route in await self.store.get_routes_with_stops([from_stop_id, to_stop_id]):
            bus = await self.store.get_bus(route.bus_id)
            if bus is None:
                continue
            scheduled = await self.store.get_start_time(bus.id, bus.current_rep)
            if scheduled is None:
                logger.debug("Bus %d has no start time for rep %d, skipping", bus.id, bus.current_rep)
                continue
            for origin, destination in segments_on_route(route, from_stop_id, to_stop_id):
                found.append(TripSegment(
                    bus=bus,
                    trip_number=scheduled.rep_no,
                    bus_start=scheduled.start_time,
                    origin=origin,
                    destination=destination,
                ))

        if not found:
            raise NoTripsFound("No buses found for this route")
        found.sort(key=lambda s: (s.bus.name, s.origin.stop_order, s.destination.stop_order))
        logger.info("Found %d route segments between stops %d and %d", len(found), from_stop_id, to_stop_id)
        return found
