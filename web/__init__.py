"""FastAPI web application for Build Tracker.

This module provides the HTTP query API. All data access is delegated to
the query collaborator in build_tracker.builds.queries.
"""

from web.app import app, create_app

__all__ = ["app", "create_app"]
