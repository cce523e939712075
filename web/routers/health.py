"""Liveness endpoints."""

from fastapi import APIRouter

from build_tracker import __version__

router = APIRouter()


@router.get("/health")
def health() -> dict[str, str]:
    """Report that the API is up, with its version."""
    return {"status": "ok", "version": __version__}


@router.get("/")
def root() -> dict[str, str]:
    return {"name": "Build Tracker API", "version": __version__}
