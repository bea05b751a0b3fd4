"""Resolve a repetition's scheduled time of day to an absolute start instant."""

import datetime
import logging

logger = logging.getLogger(__name__)


def resolve_start(start: datetime.time, now: datetime.datetime) -> datetime.datetime:
    """Combine ``start`` with today's date; a start later than ``now`` means yesterday.

    Assumes no trip runs longer than 24 hours. A trip that simply has not
    started yet today is also pushed back a day.
    """
    candidate = datetime.datetime.combine(now.date(), start.replace(tzinfo=None), tzinfo=now.tzinfo)
    if candidate > now:
        candidate -= datetime.timedelta(days=1)
    return candidate


class TripClock:
    """Looks up scheduled start times in the store and resolves them against a clock."""

    def __init__(self, store) -> None:
        self.store = store

    async def start_time_for(self, bus_id: int, rep_no: int) -> datetime.time | None:
        scheduled = await self.store.get_start_time(bus_id, rep_no)
        if scheduled is None:
            logger.debug("No start time registered for bus %d rep %d", bus_id, rep_no)
            return None
        return scheduled.start_time

    async def resolve(
        self, bus_id: int, rep_no: int, now: datetime.datetime,
    ) -> datetime.datetime | None:
        start = await self.start_time_for(bus_id, rep_no)
        if start is None:
            return None
        return resolve_start(start, now)
