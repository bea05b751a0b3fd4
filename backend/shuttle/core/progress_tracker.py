"""Driver-facing trip progress: clearing stops and (re)initializing a trip.

The only transitions on a bus's (stops_cleared, current_rep) pair are
``clear_stop`` and ``initialize_trip``. There is no undo; a mistaken clear is
corrected by initializing the trip again.
"""

import datetime
import logging
from dataclasses import dataclass

from shuttle.core.entities import Bus, ScheduledStartTime
from shuttle.core.errors import BusNotFound, DriverNotAssigned
from shuttle.core.route_model import ClearedCountLocator, RouteModel, StopPosition

logger = logging.getLogger(__name__)


@dataclass
class ClearResult:
    bus: Bus
    new_repetition: bool


@dataclass
class DriverPosition:
    bus: Bus
    route: RouteModel
    position: StopPosition


@dataclass
class TripSetup:
    bus: Bus
    route: RouteModel
    next_stop_sequence: int

    @property
    def next_stop(self):
        if 0 <= self.next_stop_sequence < len(self.route):
            return self.route[self.next_stop_sequence]
        return None


class ProgressTracker:
    def __init__(self, store) -> None:
        self.store = store
        self.locator = ClearedCountLocator()

    async def ensure_assigned(self, user_id: int, bus_id: int) -> None:
        if not await self.store.is_driver_assigned(user_id, bus_id):
            logger.warning("Driver %d acted on unassigned bus %d", user_id, bus_id)
            raise DriverNotAssigned(user_id, bus_id)

    async def clear_stop(self, bus_id: int, stop_id: int) -> ClearResult:
        """Advance the counters for ``stop_id``.

        Clearing the route's last stop resets ``stops_cleared`` to 0 and
        starts the next repetition; any other stop increments the counter.
        Raises StopNotInRoute without touching the bus row when the stop is
        not on the route.
        """
        bus, wrapped = await self.store.advance_stop(bus_id, stop_id)
        if wrapped:
            logger.info(
                "Bus %d cleared last stop %d, starting repetition %d",
                bus_id, stop_id, bus.current_rep,
            )
        else:
            logger.info("Bus %d cleared stop %d (%d cleared)", bus_id, stop_id, bus.stops_cleared)
        return ClearResult(bus=bus, new_repetition=wrapped)

    async def initialize_trip(self, bus_id: int, rep_no: int, stops_cleared: int) -> Bus:
        """Set both counters directly. Out-of-range ``stops_cleared`` is stored as given."""
        bus = await self.store.set_progress(bus_id, rep_no, stops_cleared)
        logger.info("Bus %d trip initialized at rep %d, %d stops cleared", bus_id, rep_no, stops_cleared)
        return bus

    async def resolve_rep(self, bus_id: int, start_time: datetime.time | None) -> int:
        """Repetition whose registered start equals ``start_time``; 1 when none matches."""
        if start_time is None:
            return 1
        rep_no = await self.store.find_rep_by_start_time(bus_id, start_time.replace(microsecond=0))
        return rep_no if rep_no is not None else 1

    async def setup_trip(
        self,
        bus_id: int,
        next_stop_sequence: int,
        rep_no: int | None = None,
        start_time: datetime.time | None = None,
    ) -> TripSetup:
        if rep_no is None:
            rep_no = await self.resolve_rep(bus_id, start_time)
        bus = await self.initialize_trip(bus_id, rep_no, next_stop_sequence)
        route = await self.store.get_route(bus_id)
        return TripSetup(bus=bus, route=route, next_stop_sequence=next_stop_sequence)

    async def trip_options(self, bus_id: int) -> tuple[list[ScheduledStartTime], RouteModel]:
        times = await self.store.list_start_times(bus_id)
        route = await self.store.get_route(bus_id)
        return times, route

    async def driver_position(self, bus_id: int) -> DriverPosition:
        bus = await self.store.get_bus(bus_id)
        if bus is None:
            raise BusNotFound(bus_id)
        route = await self.store.get_route(bus_id)
        return DriverPosition(bus=bus, route=route, position=self.locator.locate(route, bus, None))
