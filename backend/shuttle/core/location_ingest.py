"""GPS intake for buses and riders, latest-position reads and retention pruning."""

import datetime
import logging

from shuttle.core.broadcaster import sample_payload
from shuttle.core.entities import LocationSample, RiderLocation

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = datetime.timedelta(minutes=60)
DEFAULT_LIVE_WINDOW = datetime.timedelta(minutes=60)


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class LocationIngest:
    def __init__(
        self,
        store,
        broadcaster=None,
        retention: datetime.timedelta = DEFAULT_RETENTION,
        live_window: datetime.timedelta = DEFAULT_LIVE_WINDOW,
    ) -> None:
        self.store = store
        self.broadcaster = broadcaster
        self.retention = retention
        self.live_window = live_window

    async def record(
        self,
        bus_id: int,
        latitude: float,
        longitude: float,
        now: datetime.datetime | None = None,
    ) -> LocationSample:
        """Append a sample stamped with the server clock and push it to live subscribers.

        The write stands even when the broadcast fails.
        """
        timestamp = now if now is not None else utcnow()
        sample = await self.store.append_location(bus_id, latitude, longitude, timestamp)
        logger.debug("Bus %d at (%.6f, %.6f)", bus_id, latitude, longitude)

        if self.broadcaster is not None:
            try:
                bus = await self.store.get_bus(bus_id)
                await self.broadcaster.publish(sample_payload(sample, bus.name if bus else None))
            except Exception:
                logger.exception("Failed to broadcast location of bus %d", bus_id)
        return sample

    async def latest(self, bus_id: int) -> LocationSample | None:
        return await self.store.latest_location(bus_id)

    async def record_rider(
        self,
        user_id: int,
        latitude: float,
        longitude: float,
        now: datetime.datetime | None = None,
    ) -> RiderLocation:
        """Append a rider's own position; riders are never broadcast."""
        timestamp = now if now is not None else utcnow()
        location = await self.store.append_user_location(user_id, latitude, longitude, timestamp)
        logger.debug("User %d at (%.6f, %.6f)", user_id, latitude, longitude)
        return location

    async def rider_latest(self, user_id: int) -> RiderLocation | None:
        return await self.store.latest_user_location(user_id)

    async def live_positions(self, now: datetime.datetime | None = None) -> list[tuple[LocationSample, str]]:
        """Newest sample per bus reported within the live window."""
        now = now if now is not None else utcnow()
        return await self.store.latest_locations_since(now - self.live_window)

    async def prune(self, now: datetime.datetime | None = None) -> int:
        """Delete samples older than the retention horizon in one statement."""
        now = now if now is not None else utcnow()
        cutoff = now - self.retention
        deleted = await self.store.delete_locations_before(cutoff)
        logger.info("Pruned %d location samples older than %s", deleted, cutoff.isoformat())
        return deleted
