import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Time,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shuttle.models.base import Base


class BusStop(Base):
    __tablename__ = "bus_stops"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    route_entries: Mapped[list["RouteEntryRow"]] = relationship(back_populates="stop")


class Bus(Base):
    __tablename__ = "buses"
    __table_args__ = (
        CheckConstraint("stops_cleared >= 0", name="ck_bus_stops_cleared"),
        CheckConstraint("current_rep >= 1", name="ck_bus_current_rep"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    stops_cleared: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_rep: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    total_rep: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # informational
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    route_entries: Mapped[list["RouteEntryRow"]] = relationship(
        back_populates="bus", order_by="RouteEntryRow.stop_order", cascade="all, delete-orphan",
    )


class RouteEntryRow(Base):
    __tablename__ = "route_entries"
    __table_args__ = (
        UniqueConstraint("bus_id", "stop_order", name="uq_route_bus_order"),
        Index("ix_route_bus_stop", "bus_id", "stop_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    bus_id: Mapped[int] = mapped_column(Integer, ForeignKey("buses.id", ondelete="CASCADE"), nullable=False)
    stop_id: Mapped[int] = mapped_column(Integer, ForeignKey("bus_stops.id"), nullable=False)
    stop_order: Mapped[int] = mapped_column(Integer, nullable=False)  # 1..N
    time_from_start: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)  # minutes

    bus: Mapped["Bus"] = relationship(back_populates="route_entries")
    stop: Mapped["BusStop"] = relationship(back_populates="route_entries")


class BusStartTime(Base):
    __tablename__ = "bus_start_times"
    __table_args__ = (
        UniqueConstraint("bus_id", "rep_no", name="uq_start_bus_rep"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    bus_id: Mapped[int] = mapped_column(Integer, ForeignKey("buses.id", ondelete="CASCADE"), nullable=False)
    rep_no: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    start_time: Mapped[datetime.time] = mapped_column(Time, nullable=False)  # local time of day


class Location(Base):
    __tablename__ = "locations"
    __table_args__ = (
        Index("ix_loc_bus_ts", "bus_id", "timestamp"),
        Index("ix_loc_ts", "timestamp"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    bus_id: Mapped[int] = mapped_column(Integer, ForeignKey("buses.id", ondelete="CASCADE"), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    timestamp: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role in ('user', 'admin', 'driver')", name="ck_user_role"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user")


class BusDriver(Base):
    __tablename__ = "bus_drivers"
    __table_args__ = (
        UniqueConstraint("user_id", "bus_id", name="uq_bus_driver"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    bus_id: Mapped[int] = mapped_column(Integer, ForeignKey("buses.id", ondelete="CASCADE"), nullable=False)


class UserLocation(Base):
    __tablename__ = "user_locations"
    __table_args__ = (
        Index("ix_user_loc_user_ts", "user_id", "timestamp"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    timestamp: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
