"""
Starlette-based web server for the shisha charcoal timer.

This server provides a REST API with the following endpoints:
- /tables: List tables with their countdowns
- /tables/{n}/activate, /charcoal, /tap, /reset: Per-table intents
- /tables/transfer: Move a session to another table
- /sound: Read or toggle the alert sound
- /alerts: Drain alert firings for the client to voice
- /ticker/status, /health: Operational status

The tick runner starts with the application and stops with it.
"""

import os
import sys
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.routing import Route

from shishatimer.config import CONFIG
from shishatimer.core.engine import SessionEngine
from shishatimer.core.notifier import AlertFeed
from shishatimer.core.registry import FileSnapshotStore, TableRegistry
from shishatimer.core.ticker import TickRunner
from shishatimer.logger import get_logger, setup_logging
from shishatimer.routes.system_routes import get_ticker_status, health_check
from shishatimer.routes.table_routes import (
    activate_table,
    charcoal_change,
    drain_alerts,
    get_sound,
    get_table,
    list_tables,
    reset_table,
    set_sound,
    tap_table,
    transfer_table,
)

logger = get_logger(__name__)


def build_engine(alert_feed: AlertFeed) -> SessionEngine:
    """Load the registry from the data directory and wire up the engine."""
    store = FileSnapshotStore(CONFIG.data_dir, CONFIG.snapshot_key)
    registry = TableRegistry(store, table_count=CONFIG.table_count)
    registry.load()
    logger.info(f"Table snapshot: {store.path}")

    return SessionEngine(
        registry,
        notifier=alert_feed,
        sound_enabled=CONFIG.sound_enabled,
        session_length=timedelta(minutes=CONFIG.session_minutes),
    )


def create_app(
    engine: Optional[SessionEngine] = None,
    alert_feed: Optional[AlertFeed] = None,
    start_ticker: bool = True,
) -> Starlette:
    """
    Build the application.

    Args:
        engine: Pre-built engine; built from CONFIG at startup when omitted
        alert_feed: Feed the engine notifies; a fresh one when omitted
        start_ticker: Run the expiry sweep loop while the app is up
    """

    @asynccontextmanager
    async def lifespan(app: Starlette):
        logger.info("Application startup - initializing services")
        if app.state.engine is None:
            app.state.engine = build_engine(app.state.alert_feed)

        ticker = TickRunner(app.state.engine, interval=CONFIG.tick_interval)
        app.state.ticker = ticker
        if start_ticker:
            await ticker.start()

        try:
            yield
        finally:
            logger.info("Application shutdown - stopping tick runner")
            await ticker.stop()

    app = Starlette(
        debug=False,
        routes=[
            Route("/health", health_check, methods=["GET"]),
            Route("/tables", list_tables, methods=["GET"]),
            Route("/tables/transfer", transfer_table, methods=["POST"]),
            Route("/tables/{table_number:int}", get_table, methods=["GET"]),
            Route(
                "/tables/{table_number:int}/activate", activate_table, methods=["POST"]
            ),
            Route(
                "/tables/{table_number:int}/charcoal", charcoal_change, methods=["POST"]
            ),
            Route("/tables/{table_number:int}/tap", tap_table, methods=["POST"]),
            Route("/tables/{table_number:int}/reset", reset_table, methods=["POST"]),
            Route("/sound", get_sound, methods=["GET"]),
            Route("/sound", set_sound, methods=["POST", "PUT"]),
            Route("/alerts", drain_alerts, methods=["GET"]),
            Route("/ticker/status", get_ticker_status, methods=["GET"]),
        ],
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=["*"],
                allow_headers=["*"],
            )
        ],
        lifespan=lifespan,
    )

    feed = alert_feed
    if feed is None:
        feed = AlertFeed(maxlen=CONFIG.alert_feed_size)
    if engine is not None and engine.notifier is None:
        engine.notifier = feed

    app.state.alert_feed = feed
    app.state.engine = engine
    app.state.ticker = None
    return app


def run(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Serve the application with uvicorn until interrupted."""
    import uvicorn

    log_level = os.getenv("LOG_LEVEL", "INFO")
    setup_logging(level=log_level, log_file=os.getenv("LOG_FILE"))

    host = host or CONFIG.host
    port = port or CONFIG.port
    logger.info(f"Starting shisha timer server on http://{host}:{port}")
    uvicorn.run(create_app(), host=host, port=port, log_level=log_level.lower())


app = create_app()


if __name__ == "__main__":
    if "--debug" in sys.argv:
        os.environ["LOG_LEVEL"] = "DEBUG"
    run()
