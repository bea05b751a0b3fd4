"""FastAPI application entry point."""

import datetime
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError

from shuttle.api import admin, buses, driver, location, stops, ws
from shuttle.config import Settings, settings
from shuttle.core.broadcaster import Broadcaster
from shuttle.core.errors import ShuttleError
from shuttle.core.eta_calculator import EtaEstimator
from shuttle.core.location_ingest import LocationIngest
from shuttle.core.progress_tracker import ProgressTracker
from shuttle.core.scheduler import create_scheduler
from shuttle.core.store import ShuttleStore
from shuttle.core.trip_clock import TripClock
from shuttle.core.trip_finder import TripFinder
from shuttle.db.session import create_engine, create_session_factory, create_tables

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def attach_services(
    app: FastAPI, store: ShuttleStore, config: Settings, broadcaster: Broadcaster | None = None,
) -> None:
    """Build the engine-independent services over ``store`` and hang them on app.state."""
    broadcaster = broadcaster if broadcaster is not None else Broadcaster()
    app.state.store = store
    app.state.broadcaster = broadcaster
    app.state.estimator = EtaEstimator(
        store,
        TripClock(store),
        average_speed_mps=config.average_speed_mps,
        eta_ceiling_minutes=config.schedule_eta_ceiling_minutes,
    )
    app.state.tracker = ProgressTracker(store)
    app.state.ingest = LocationIngest(
        store,
        broadcaster,
        retention=datetime.timedelta(minutes=config.location_retention_minutes),
        live_window=datetime.timedelta(minutes=config.live_location_window_minutes),
    )
    app.state.trip_finder = TripFinder(store)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    engine = create_engine(settings.database_url)
    await create_tables(engine)

    broadcaster = Broadcaster(settings.redis_url)
    await broadcaster.connect()

    store = ShuttleStore(create_session_factory(engine))
    attach_services(app, store, settings, broadcaster)

    scheduler = create_scheduler(app.state.ingest, settings.location_cleanup_interval_minutes)
    scheduler.start()
    logger.info("Shuttle tracker started (timezone %s)", settings.service_timezone)

    yield

    # Shutdown
    scheduler.shutdown(wait=False)
    await broadcaster.close()
    await engine.dispose()
    logger.info("Shuttle tracker shut down")


def create_app(use_lifespan: bool = True) -> FastAPI:
    app = FastAPI(
        title="Campus Shuttle Tracker",
        version="0.1.0",
        lifespan=lifespan if use_lifespan else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ShuttleError)
    async def shuttle_error_handler(request: Request, exc: ShuttleError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(OperationalError)
    @app.exception_handler(InterfaceError)
    async def database_unavailable_handler(request: Request, exc: Exception):
        logger.error("Database unavailable during %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=503, content={"detail": "Database temporarily unavailable"})

    app.include_router(buses.router)
    app.include_router(stops.router)
    app.include_router(driver.router)
    app.include_router(location.router)
    app.include_router(admin.router)
    app.include_router(ws.router)

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
