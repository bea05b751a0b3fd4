"""Data access for buses, stops, routes, schedules, accounts and locations.

A ShuttleStore wraps an async session factory created at startup. Every
method opens its own short-lived session; nothing is cached between calls.
"""

import datetime
import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from shuttle.core.entities import (
    Bus,
    Driver,
    LocationSample,
    RiderLocation,
    RouteEntry,
    ScheduledStartTime,
    Stop,
    SystemStatistics,
    UserAccount,
)
from shuttle.core.errors import (
    BusNotFound,
    DuplicateStartTime,
    InvalidState,
    NotFound,
    ProtectedAccount,
    StartTimeNotFound,
    StopInUse,
    StopNotFound,
    StopNotInRoute,
    UserNotFound,
)
from shuttle.core.route_model import RouteModel
from shuttle.models.tables import Bus as BusRow
from shuttle.models.tables import (
    BusDriver,
    BusStartTime,
    BusStop,
    Location,
    RouteEntryRow,
    User,
    UserLocation,
)

logger = logging.getLogger(__name__)

ADVANCE_ATTEMPTS = 10


def _aware(ts: datetime.datetime) -> datetime.datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if ts.tzinfo is None:
        return ts.replace(tzinfo=datetime.timezone.utc)
    return ts


def _utc(ts: datetime.datetime) -> datetime.datetime:
    return _aware(ts).astimezone(datetime.timezone.utc)


def _to_stop(row: BusStop) -> Stop:
    return Stop(id=row.id, name=row.name, latitude=row.latitude, longitude=row.longitude)


def _to_bus(row) -> Bus:
    return Bus(
        id=row.id,
        name=row.name,
        stops_cleared=row.stops_cleared,
        current_rep=row.current_rep,
        total_rep=row.total_rep,
    )


def _to_entry(row: RouteEntryRow, stop: BusStop | None = None) -> RouteEntry:
    return RouteEntry(
        id=row.id,
        bus_id=row.bus_id,
        stop_order=row.stop_order,
        time_from_start=float(row.time_from_start or 0),
        stop=_to_stop(stop if stop is not None else row.stop),
    )


def _to_start_time(row: BusStartTime) -> ScheduledStartTime:
    return ScheduledStartTime(id=row.id, bus_id=row.bus_id, rep_no=row.rep_no, start_time=row.start_time)


def _to_sample(row: Location) -> LocationSample:
    return LocationSample(
        id=row.id,
        bus_id=row.bus_id,
        latitude=row.latitude,
        longitude=row.longitude,
        timestamp=_aware(row.timestamp),
    )


def _to_account(row: User) -> UserAccount:
    return UserAccount(id=row.id, username=row.username, email=row.email, role=row.role)


def _to_rider_location(row: UserLocation) -> RiderLocation:
    return RiderLocation(
        id=row.id,
        user_id=row.user_id,
        latitude=row.latitude,
        longitude=row.longitude,
        timestamp=_aware(row.timestamp),
    )


class ShuttleStore:
    """Explicitly constructed data-access handle over an async_sessionmaker."""

    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    # -- buses ---------------------------------------------------------

    async def list_buses(self) -> list[Bus]:
        async with self.session_factory() as session:
            result = await session.execute(select(BusRow).order_by(BusRow.name))
            return [_to_bus(b) for b in result.scalars().all()]

    async def get_bus(self, bus_id: int) -> Bus | None:
        async with self.session_factory() as session:
            row = await session.get(BusRow, bus_id)
            return _to_bus(row) if row else None

    async def create_bus(self, name: str, total_rep: int = 0) -> Bus:
        async with self.session_factory() as session:
            row = BusRow(name=name, total_rep=total_rep, stops_cleared=0, current_rep=1)
            session.add(row)
            await session.commit()
            logger.info("Created bus %d (%s)", row.id, name)
            return _to_bus(row)

    async def update_bus(
        self, bus_id: int, name: str | None = None, total_rep: int | None = None,
    ) -> Bus:
        async with self.session_factory() as session:
            row = await session.get(BusRow, bus_id)
            if row is None:
                raise BusNotFound(bus_id)
            if name is not None:
                row.name = name
            if total_rep is not None:
                row.total_rep = total_rep
            await session.commit()
            return _to_bus(row)

    async def delete_bus(self, bus_id: int) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                row = await session.get(BusRow, bus_id)
                if row is None:
                    raise BusNotFound(bus_id)
                for model in (Location, BusStartTime, BusDriver, RouteEntryRow):
                    await session.execute(
                        delete(model).where(model.bus_id == bus_id)
                        .execution_options(synchronize_session=False)
                    )
                await session.delete(row)
        logger.info("Deleted bus %d", bus_id)

    # -- progress counters ----------------------------------------------

    async def advance_stop(self, bus_id: int, stop_id: int) -> tuple[Bus, bool]:
        """Mark ``stop_id`` cleared for ``bus_id``.

        The counters read at the start are written back only if no other
        clear changed them in between; a lost race re-reads and retries.
        Returns the updated bus and whether the clear wrapped to a new
        repetition (the stop was the route's last).
        """
        for attempt in range(1, ADVANCE_ATTEMPTS + 1):
            async with self.session_factory() as session:
                async with session.begin():
                    bus = await session.get(BusRow, bus_id)
                    if bus is None:
                        raise BusNotFound(bus_id)
                    seen_cleared, seen_rep = bus.stops_cleared, bus.current_rep

                    total = await session.scalar(
                        select(func.count()).select_from(RouteEntryRow)
                        .where(RouteEntryRow.bus_id == bus_id)
                    )
                    orders = (await session.execute(
                        select(RouteEntryRow.stop_order)
                        .where(RouteEntryRow.bus_id == bus_id, RouteEntryRow.stop_id == stop_id)
                        .order_by(RouteEntryRow.stop_order)
                    )).scalars().all()
                    if not orders:
                        raise StopNotInRoute(bus_id, stop_id)

                    # A stop served twice per lap resolves to the occurrence the bus expects next.
                    expected = seen_cleared % total + 1
                    order = expected if expected in orders else orders[0]
                    wraps = order == total

                    stmt = update(BusRow).where(
                        BusRow.id == bus_id,
                        BusRow.stops_cleared == seen_cleared,
                        BusRow.current_rep == seen_rep,
                    )
                    if wraps:
                        stmt = stmt.values(stops_cleared=0, current_rep=seen_rep + 1)
                    else:
                        stmt = stmt.values(stops_cleared=seen_cleared + 1)
                    stmt = stmt.returning(
                        BusRow.id, BusRow.name, BusRow.stops_cleared, BusRow.current_rep, BusRow.total_rep,
                    ).execution_options(synchronize_session=False)
                    row = (await session.execute(stmt)).one_or_none()
                    if row is not None:
                        return _to_bus(row), wraps
            logger.debug("Bus %d: concurrent clear-stop, retrying (attempt %d)", bus_id, attempt)
        raise InvalidState(f"Bus {bus_id}: progress changed concurrently, try again")

    async def set_progress(self, bus_id: int, rep_no: int, stops_cleared: int) -> Bus:
        async with self.session_factory() as session:
            async with session.begin():
                stmt = (
                    update(BusRow)
                    .where(BusRow.id == bus_id)
                    .values(current_rep=rep_no, stops_cleared=stops_cleared)
                    .returning(
                        BusRow.id, BusRow.name, BusRow.stops_cleared,
                        BusRow.current_rep, BusRow.total_rep,
                    )
                    .execution_options(synchronize_session=False)
                )
                row = (await session.execute(stmt)).one_or_none()
                if row is None:
                    raise BusNotFound(bus_id)
                return _to_bus(row)

    # -- stops -----------------------------------------------------------

    async def list_stops(self) -> list[Stop]:
        async with self.session_factory() as session:
            result = await session.execute(select(BusStop).order_by(BusStop.name))
            return [_to_stop(s) for s in result.scalars().all()]

    async def add_stop(self, name: str, latitude: float, longitude: float) -> Stop:
        async with self.session_factory() as session:
            row = BusStop(name=name, latitude=latitude, longitude=longitude)
            session.add(row)
            await session.commit()
            return _to_stop(row)

    async def update_stop(
        self, stop_id: int, name: str | None = None,
        latitude: float | None = None, longitude: float | None = None,
    ) -> Stop:
        async with self.session_factory() as session:
            row = await session.get(BusStop, stop_id)
            if row is None:
                raise StopNotFound(stop_id)
            if name is not None:
                row.name = name
            if latitude is not None:
                row.latitude = latitude
            if longitude is not None:
                row.longitude = longitude
            await session.commit()
            return _to_stop(row)

    async def delete_stop(self, stop_id: int) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                row = await session.get(BusStop, stop_id)
                if row is None:
                    raise StopNotFound(stop_id)
                used = await session.scalar(
                    select(func.count()).select_from(RouteEntryRow)
                    .where(RouteEntryRow.stop_id == stop_id)
                )
                if used:
                    raise StopInUse(stop_id)
                await session.delete(row)

    # -- routes ----------------------------------------------------------

    async def get_route(self, bus_id: int) -> RouteModel:
        async with self.session_factory() as session:
            result = await session.execute(
                select(RouteEntryRow)
                .where(RouteEntryRow.bus_id == bus_id)
                .options(selectinload(RouteEntryRow.stop))
                .order_by(RouteEntryRow.stop_order)
            )
            entries = [_to_entry(r) for r in result.scalars().all()]
        return RouteModel(bus_id, entries)

    async def get_routes_with_stops(self, stop_ids: list[int]) -> list[RouteModel]:
        """Routes of every bus serving all of ``stop_ids``."""
        async with self.session_factory() as session:
            bus_ids = None
            for stop_id in stop_ids:
                serving = set((await session.execute(
                    select(RouteEntryRow.bus_id).where(RouteEntryRow.stop_id == stop_id)
                )).scalars().all())
                bus_ids = serving if bus_ids is None else bus_ids & serving
        return [await self.get_route(bus_id) for bus_id in sorted(bus_ids or ())]

    async def add_route_entry(
        self, bus_id: int, stop_id: int, stop_order: int, time_from_start: float = 0.0,
    ) -> RouteEntry:
        async with self.session_factory() as session:
            if await session.get(BusRow, bus_id) is None:
                raise BusNotFound(bus_id)
            if await session.get(BusStop, stop_id) is None:
                raise StopNotFound(stop_id)
            row = RouteEntryRow(
                bus_id=bus_id, stop_id=stop_id,
                stop_order=stop_order, time_from_start=time_from_start,
            )
            session.add(row)
            try:
                await session.commit()
            except IntegrityError as exc:
                raise InvalidState(f"Bus {bus_id} already has a stop at order {stop_order}") from exc
            return _to_entry(row, await session.get(BusStop, row.stop_id))

    async def update_route_entry(
        self, entry_id: int, stop_id: int | None = None,
        stop_order: int | None = None, time_from_start: float | None = None,
    ) -> RouteEntry:
        async with self.session_factory() as session:
            row = await session.get(RouteEntryRow, entry_id)
            if row is None:
                raise NotFound(f"Route entry {entry_id} not found")
            if stop_id is not None:
                if await session.get(BusStop, stop_id) is None:
                    raise StopNotFound(stop_id)
                row.stop_id = stop_id
            if stop_order is not None:
                row.stop_order = stop_order
            if time_from_start is not None:
                row.time_from_start = time_from_start
            try:
                await session.commit()
            except IntegrityError as exc:
                raise InvalidState(f"Route entry {entry_id}: stop order {stop_order} already taken") from exc
            return _to_entry(row, await session.get(BusStop, row.stop_id))

    async def delete_route_entry(self, entry_id: int) -> None:
        async with self.session_factory() as session:
            row = await session.get(RouteEntryRow, entry_id)
            if row is None:
                raise NotFound(f"Route entry {entry_id} not found")
            await session.delete(row)
            await session.commit()

    # -- scheduled start times -------------------------------------------

    async def get_start_time(self, bus_id: int, rep_no: int) -> ScheduledStartTime | None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(BusStartTime).where(BusStartTime.bus_id == bus_id, BusStartTime.rep_no == rep_no)
            )
            row = result.scalar_one_or_none()
            return _to_start_time(row) if row else None

    async def list_start_times(self, bus_id: int) -> list[ScheduledStartTime]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(BusStartTime).where(BusStartTime.bus_id == bus_id).order_by(BusStartTime.rep_no)
            )
            return [_to_start_time(r) for r in result.scalars().all()]

    async def find_rep_by_start_time(self, bus_id: int, start_time: datetime.time) -> int | None:
        async with self.session_factory() as session:
            return await session.scalar(
                select(BusStartTime.rep_no)
                .where(BusStartTime.bus_id == bus_id, BusStartTime.start_time == start_time)
                .order_by(BusStartTime.rep_no)
                .limit(1)
            )

    async def add_start_time(
        self, bus_id: int, rep_no: int, start_time: datetime.time,
    ) -> ScheduledStartTime:
        async with self.session_factory() as session:
            if await session.get(BusRow, bus_id) is None:
                raise BusNotFound(bus_id)
            existing = await session.scalar(
                select(BusStartTime.id).where(BusStartTime.bus_id == bus_id, BusStartTime.rep_no == rep_no)
            )
            if existing is not None:
                raise DuplicateStartTime(bus_id, rep_no)
            row = BusStartTime(bus_id=bus_id, rep_no=rep_no, start_time=start_time)
            session.add(row)
            try:
                await session.commit()
            except IntegrityError as exc:
                raise DuplicateStartTime(bus_id, rep_no) from exc
            logger.info("Start time %s added for bus %d rep %d", start_time, bus_id, rep_no)
            return _to_start_time(row)

    async def update_start_time(self, start_time_id: int, start_time: datetime.time) -> ScheduledStartTime:
        async with self.session_factory() as session:
            row = await session.get(BusStartTime, start_time_id)
            if row is None:
                raise StartTimeNotFound(start_time_id)
            row.start_time = start_time
            await session.commit()
            return _to_start_time(row)

    async def delete_start_time(self, start_time_id: int) -> ScheduledStartTime:
        async with self.session_factory() as session:
            row = await session.get(BusStartTime, start_time_id)
            if row is None:
                raise StartTimeNotFound(start_time_id)
            deleted = _to_start_time(row)
            await session.delete(row)
            await session.commit()
            return deleted

    # -- locations -------------------------------------------------------

    async def append_location(
        self, bus_id: int, latitude: float, longitude: float, timestamp: datetime.datetime,
    ) -> LocationSample:
        async with self.session_factory() as session:
            row = Location(bus_id=bus_id, latitude=latitude, longitude=longitude, timestamp=_utc(timestamp))
            session.add(row)
            await session.commit()
            return _to_sample(row)

    async def latest_location(self, bus_id: int) -> LocationSample | None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Location)
                .where(Location.bus_id == bus_id)
                .order_by(Location.timestamp.desc(), Location.id.desc())
                .limit(1)
            )
            row = result.scalar_one_or_none()
            return _to_sample(row) if row else None

    async def latest_locations_since(
        self, since: datetime.datetime,
    ) -> list[tuple[LocationSample, str]]:
        """Newest sample per bus among samples newer than ``since``, with the bus name."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(Location, BusRow.name)
                .join(BusRow, BusRow.id == Location.bus_id)
                .where(Location.timestamp > _utc(since))
                .order_by(Location.bus_id, Location.timestamp.desc(), Location.id.desc())
            )
            latest: dict[int, tuple[LocationSample, str]] = {}
            for loc, name in result.all():
                if loc.bus_id not in latest:
                    latest[loc.bus_id] = (_to_sample(loc), name)
        return list(latest.values())

    async def delete_locations_before(self, cutoff: datetime.datetime) -> int:
        async with self.session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    delete(Location)
                    .where(Location.timestamp < _utc(cutoff))
                    .execution_options(synchronize_session=False)
                )
                return result.rowcount or 0

    # -- drivers ---------------------------------------------------------

    async def is_driver_assigned(self, user_id: int, bus_id: int) -> bool:
        async with self.session_factory() as session:
            found = await session.scalar(
                select(BusDriver.id).where(BusDriver.user_id == user_id, BusDriver.bus_id == bus_id)
            )
            return found is not None

    async def get_driver_bus(self, user_id: int) -> Bus | None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(BusRow)
                .join(BusDriver, BusDriver.bus_id == BusRow.id)
                .where(BusDriver.user_id == user_id)
                .order_by(BusRow.id)
                .limit(1)
            )
            row = result.scalar_one_or_none()
            return _to_bus(row) if row else None

    async def get_bus_driver(self, bus_id: int) -> Driver | None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(User)
                .join(BusDriver, BusDriver.user_id == User.id)
                .where(BusDriver.bus_id == bus_id)
                .order_by(User.id)
                .limit(1)
            )
            user = result.scalar_one_or_none()
            if user is None:
                return None
            return Driver(user_id=user.id, username=user.username, email=user.email, bus_id=bus_id)

    async def list_drivers(self) -> list[Driver]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(User, BusDriver.bus_id)
                .outerjoin(BusDriver, BusDriver.user_id == User.id)
                .where(User.role == "driver")
                .order_by(User.id)
            )
            return [
                Driver(user_id=u.id, username=u.username, email=u.email, bus_id=bus_id)
                for u, bus_id in result.all()
            ]

    async def add_driver(self, username: str, email: str, bus_id: int | None = None) -> Driver:
        """Create a driver account and its bus assignment in one transaction."""
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    if bus_id is not None and await session.get(BusRow, bus_id) is None:
                        raise BusNotFound(bus_id)
                    user = User(username=username, email=email, role="driver")
                    session.add(user)
                    await session.flush()
                    if bus_id is not None:
                        session.add(BusDriver(user_id=user.id, bus_id=bus_id))
                    driver = Driver(user_id=user.id, username=username, email=email, bus_id=bus_id)
        except IntegrityError as exc:
            raise InvalidState(f"Email {email} is already registered") from exc
        logger.info("Created driver %d assigned to bus %s", driver.user_id, bus_id)
        return driver

    async def update_driver(
        self, user_id: int, username: str | None = None,
        email: str | None = None, bus_id: int | None = None,
    ) -> Driver:
        """Update a driver and replace the bus assignment atomically."""
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    user = await session.get(User, user_id)
                    if user is None or user.role != "driver":
                        raise NotFound(f"Driver {user_id} not found")
                    if username is not None:
                        user.username = username
                    if email is not None:
                        user.email = email
                    if bus_id is not None:
                        if await session.get(BusRow, bus_id) is None:
                            raise BusNotFound(bus_id)
                        await session.execute(
                            delete(BusDriver).where(BusDriver.user_id == user_id)
                            .execution_options(synchronize_session=False)
                        )
                        session.add(BusDriver(user_id=user_id, bus_id=bus_id))
                    await session.flush()
                    current_bus = await session.scalar(
                        select(BusDriver.bus_id).where(BusDriver.user_id == user_id).limit(1)
                    )
                    driver = Driver(
                        user_id=user.id, username=user.username,
                        email=user.email, bus_id=current_bus,
                    )
        except IntegrityError as exc:
            raise InvalidState(f"Could not update driver {user_id}: constraint violated") from exc
        return driver

    async def delete_driver(self, user_id: int) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                user = await session.get(User, user_id)
                if user is None or user.role != "driver":
                    raise NotFound(f"Driver {user_id} not found")
                await session.execute(
                    delete(BusDriver).where(BusDriver.user_id == user_id)
                    .execution_options(synchronize_session=False)
                )
                await session.delete(user)

    # -- users -----------------------------------------------------------

    async def list_users(self) -> list[UserAccount]:
        async with self.session_factory() as session:
            result = await session.execute(select(User).order_by(User.id))
            return [_to_account(u) for u in result.scalars().all()]

    async def get_user(self, user_id: int) -> UserAccount | None:
        async with self.session_factory() as session:
            row = await session.get(User, user_id)
            return _to_account(row) if row else None

    async def add_user(self, username: str, email: str, role: str = "user") -> UserAccount:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    row = User(username=username, email=email, role=role)
                    session.add(row)
                    await session.flush()
                    account = _to_account(row)
        except IntegrityError as exc:
            raise InvalidState(f"Email {email} is already registered") from exc
        logger.info("Created %s account %d", role, account.id)
        return account

    async def update_user(
        self, user_id: int, username: str | None = None,
        email: str | None = None, role: str | None = None,
    ) -> UserAccount:
        """Update an account; leaving the driver role drops its bus assignments."""
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    row = await session.get(User, user_id)
                    if row is None:
                        raise UserNotFound(user_id)
                    if username is not None:
                        row.username = username
                    if email is not None:
                        row.email = email
                    if role is not None and role != row.role:
                        if row.role == "driver":
                            await session.execute(
                                delete(BusDriver).where(BusDriver.user_id == user_id)
                                .execution_options(synchronize_session=False)
                            )
                        row.role = role
                    await session.flush()
                    account = _to_account(row)
        except IntegrityError as exc:
            raise InvalidState(f"Could not update user {user_id}: email already registered") from exc
        return account

    async def delete_user(self, user_id: int) -> None:
        """Delete a rider or driver together with its positions and assignments."""
        async with self.session_factory() as session:
            async with session.begin():
                row = await session.get(User, user_id)
                if row is None:
                    raise UserNotFound(user_id)
                if row.role == "admin":
                    raise ProtectedAccount(user_id)
                for table in (UserLocation, BusDriver):
                    await session.execute(
                        delete(table).where(table.user_id == user_id)
                        .execution_options(synchronize_session=False)
                    )
                await session.delete(row)
        logger.info("Deleted user %d", user_id)

    # -- rider locations -------------------------------------------------

    async def append_user_location(
        self, user_id: int, latitude: float, longitude: float, timestamp: datetime.datetime,
    ) -> RiderLocation:
        async with self.session_factory() as session:
            async with session.begin():
                if await session.get(User, user_id) is None:
                    raise UserNotFound(user_id)
                row = UserLocation(
                    user_id=user_id, latitude=latitude, longitude=longitude, timestamp=_utc(timestamp),
                )
                session.add(row)
                await session.flush()
                return _to_rider_location(row)

    async def latest_user_location(self, user_id: int) -> RiderLocation | None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(UserLocation)
                .where(UserLocation.user_id == user_id)
                .order_by(UserLocation.timestamp.desc(), UserLocation.id.desc())
                .limit(1)
            )
            row = result.scalar_one_or_none()
            return _to_rider_location(row) if row else None

    async def list_user_locations(self) -> list[tuple[RiderLocation, UserAccount]]:
        """Every stored rider position with its account, newest first."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(UserLocation, User)
                .join(User, User.id == UserLocation.user_id)
                .order_by(UserLocation.timestamp.desc(), UserLocation.id.desc())
            )
            return [(_to_rider_location(loc), _to_account(user)) for loc, user in result.all()]

    # -- statistics ------------------------------------------------------

    async def statistics(self, now: datetime.datetime) -> SystemStatistics:
        now = _utc(now)
        day_ago = now - datetime.timedelta(hours=24)
        hour_ago = now - datetime.timedelta(hours=1)
        async with self.session_factory() as session:
            async def count(stmt) -> int:
                return (await session.scalar(stmt)) or 0

            return SystemStatistics(
                total_users=await count(
                    select(func.count()).select_from(User).where(User.role == "user")
                ),
                active_users=await count(
                    select(func.count(func.distinct(UserLocation.user_id)))
                    .select_from(UserLocation)
                    .join(User, User.id == UserLocation.user_id)
                    .where(UserLocation.timestamp > day_ago, User.role == "user")
                ),
                total_buses=await count(select(func.count()).select_from(BusRow)),
                active_buses=await count(
                    select(func.count(func.distinct(Location.bus_id))).where(Location.timestamp > day_ago)
                ),
                total_stops=await count(select(func.count()).select_from(BusStop)),
                total_routes=await count(select(func.count(func.distinct(RouteEntryRow.bus_id)))),
                total_drivers=await count(
                    select(func.count()).select_from(User).where(User.role == "driver")
                ),
                recent_locations=await count(
                    select(func.count()).select_from(Location).where(Location.timestamp > hour_ago)
                ),
            )
