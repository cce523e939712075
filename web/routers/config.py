"""Dashboard configuration endpoint."""

from typing import Any

from fastapi import APIRouter, Depends

from build_tracker.config import Settings
from web.deps import get_app_settings

router = APIRouter()


@router.get("/config")
def get_config(settings: Settings = Depends(get_app_settings)) -> dict[str, Any]:
    """Get the configuration the dashboard needs.

    Returns:
        Artifact filters, toggle groups and the default recent limit.
    """
    return {
        "artifactFilters": list(settings.artifact_filters),
        "toggleGroups": dict(settings.toggle_groups),
        "recentLimit": settings.recent_limit,
    }
