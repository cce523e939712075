"""Request dependencies for FastAPI.

The query collaborator and the settings live on the application state and
are handed to route handlers via FastAPI dependency injection. The
collaborator is owned by whoever created the app; handlers never mutate it.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request
from fastapi import status as http_status

from build_tracker.builds.queries import Queries
from build_tracker.config import Settings


def get_queries(request: Request) -> Queries:
    """Get the query collaborator from app state.

    Args:
        request: FastAPI request object.

    Returns:
        The injected query collaborator.

    Raises:
        HTTPException: 500 if no collaborator is configured.
    """
    queries: Any = getattr(request.app.state, "queries", None)
    if queries is None:
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "code": "queries_unavailable",
                "message": "No build query collaborator is configured",
            },
        )
    return queries  # type: ignore[no-any-return]


def get_app_settings(request: Request) -> Settings:
    """Get the settings the app was created with.

    Args:
        request: FastAPI request object.

    Returns:
        Application settings.
    """
    settings: Any = request.app.state.settings
    return settings  # type: ignore[no-any-return]
