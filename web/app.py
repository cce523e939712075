"""Build Tracker HTTP API.

``create_app`` wires the routers to a query collaborator. Tests and
embedding applications inject their own; otherwise the SQL-backed one is
built from the settings when the app starts.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from build_tracker import __version__
from build_tracker.builds.queries import Queries, SqlQueries
from build_tracker.config import Settings, get_settings
from build_tracker.db import create_all_tables, get_engine, get_session_factory
from web.routers import builds, config, health

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the SQL query collaborator on startup unless one was injected."""
    engine = None
    if app.state.queries is None:
        settings: Settings = app.state.settings
        engine = get_engine(settings.db_url)
        create_all_tables(engine)
        app.state.queries = SqlQueries(
            get_session_factory(engine), default_limit=settings.recent_limit
        )
        logger.info("Serving builds from %s", settings.db_url)
    yield
    if engine is not None:
        engine.dispose()


def create_app(
    queries: Queries | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Create the API application.

    Args:
        queries: Query collaborator. If not provided, a SQL-backed one is
            created on startup from the settings.
        settings: Application settings. Defaults to the environment.

    Returns:
        FastAPI application serving the query routes.
    """
    application = FastAPI(
        title="Build Tracker API",
        description="HTTP API for querying build artifact sizes by revision, "
        "revision range, time range, or recency",
        version=__version__,
        lifespan=lifespan,
    )
    application.state.settings = settings or get_settings()
    application.state.queries = queries

    application.include_router(health.router, tags=["health"])
    application.include_router(config.router, prefix="/api", tags=["config"])
    application.include_router(builds.router, prefix="/api", tags=["builds"])

    return application


# Served by ``uvicorn web.app:app``
app = create_app()
