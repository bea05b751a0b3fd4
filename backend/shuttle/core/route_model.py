"""Circular stop sequence of a bus and the strategies that locate a bus on it.

Two locators coexist and are not interchangeable:

* ClearedCountLocator trusts the driver-maintained ``stops_cleared`` counter.
* ClosestStopLocator ignores the counter and picks the stop nearest to the
  latest GPS sample.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from shuttle.core.entities import Bus, LocationSample, RouteEntry
from shuttle.core.geo import distance_m

logger = logging.getLogger(__name__)


@dataclass
class StopPosition:
    current: RouteEntry | None = None
    next: RouteEntry | None = None
    current_index: int | None = None
    next_index: int | None = None


class RouteModel:
    """Ordered, circular list of route entries for one bus."""

    def __init__(self, bus_id: int, entries: list[RouteEntry]) -> None:
        self.bus_id = bus_id
        self.entries: list[RouteEntry] = sorted(entries, key=lambda e: e.stop_order)
        self._check_ordering()

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> RouteEntry:
        return self.entries[index]

    def __iter__(self):
        return iter(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def next_index(self, index: int) -> int:
        return (index + 1) % len(self.entries)

    def _check_ordering(self) -> None:
        orders = [e.stop_order for e in self.entries]
        if orders != list(range(1, len(orders) + 1)):
            logger.warning("Bus %d: stop orders are not dense 1..N: %s", self.bus_id, orders)
        for prev, cur in zip(self.entries, self.entries[1:]):
            if cur.time_from_start < prev.time_from_start:
                logger.warning(
                    "Bus %d: time_from_start decreases at stop_order %d (%.2f < %.2f)",
                    self.bus_id, cur.stop_order, cur.time_from_start, prev.time_from_start,
                )
                break


class StopLocator(ABC):
    """Finds the current (last passed) and next stop of a bus on its route."""

    @abstractmethod
    def locate(
        self, route: RouteModel, bus: Bus | None, sample: LocationSample | None,
    ) -> StopPosition:
        ...

    @staticmethod
    def _position(route: RouteModel, current_idx: int) -> StopPosition:
        next_idx = route.next_index(current_idx)
        return StopPosition(
            current=route[current_idx],
            next=route[next_idx],
            current_index=current_idx,
            next_index=next_idx,
        )


class ClearedCountLocator(StopLocator):
    """Position from the ``stops_cleared`` counter.

    ``k = stops_cleared mod N``. With k == 0 the bus sits between the last
    stop of the previous lap and the first stop of this one, so the current
    stop is the route's last entry and the next is its first.
    """

    def locate(
        self, route: RouteModel, bus: Bus | None, sample: LocationSample | None = None,
    ) -> StopPosition:
        if route.is_empty or bus is None:
            return StopPosition()
        k = self.normalized_cleared(route, bus.stops_cleared)
        if k == 0:
            return self._position(route, len(route) - 1)
        return self._position(route, k - 1)

    @staticmethod
    def normalized_cleared(route: RouteModel, stops_cleared: int) -> int:
        if route.is_empty:
            return 0
        return stops_cleared % len(route)


class ClosestStopLocator(StopLocator):
    """Position from raw GPS proximity; the next stop follows the nearest one."""

    def locate(
        self, route: RouteModel, bus: Bus | None, sample: LocationSample | None,
    ) -> StopPosition:
        if route.is_empty or sample is None:
            return StopPosition()
        closest_idx, _ = self.find_nearest(route, sample.latitude, sample.longitude)
        return self._position(route, closest_idx)

    @staticmethod
    def find_nearest(route: RouteModel, lat: float, lon: float) -> tuple[int, float]:
        best_idx = 0
        best_dist = float("inf")
        for i, e in enumerate(route):
            d = distance_m(lat, lon, e.stop.latitude, e.stop.longitude)
            if d < best_dist:
                best_dist = d
                best_idx = i
        return best_idx, best_dist
