"""HTTP client for the Build Tracker API.

Used by the dashboard state to load builds. The route is chosen from the
fetch request: an explicit revision list, a time range, or the most recent
builds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from build_tracker.builds.schema import BuildSchema, collect_artifact_names

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ApiError(Exception):
    """Raised when an API request fails."""

    def __init__(self, message: str, code: str = "api_error") -> None:
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class FetchRequest:
    """What the dashboard asks the API for.

    Attributes:
        revisions: Explicit revisions to load.
        start_time: Start of a time range in milliseconds.
        end_time: End of a time range in milliseconds.
        limit: Number of recent builds, when no revisions or range are given.
    """

    revisions: list[str] = field(default_factory=list)
    start_time: int | None = None
    end_time: int | None = None
    limit: int | None = None

    def path(self) -> str:
        """API path serving this request."""
        if self.revisions:
            segments = "/".join(quote(r, safe="") for r in self.revisions)
            return f"/api/builds/list/{segments}"
        if self.start_time is not None and self.end_time is not None:
            return f"/api/builds/time/{self.start_time}..{self.end_time}"
        if self.limit is not None:
            return f"/api/builds/{self.limit}"
        return "/api/builds"


@dataclass(frozen=True)
class BuildSet:
    """Builds returned by a fetch with the union of their artifact names."""

    builds: list[BuildSchema]
    artifact_names: list[str]

    @classmethod
    def from_builds(cls, builds: list[BuildSchema]) -> BuildSet:
        return cls(builds=builds, artifact_names=collect_artifact_names(builds))


class BuildTrackerClient:
    """Synchronous client for the query API.

    Args:
        base_url: API root, e.g. ``http://127.0.0.1:8000``.
        timeout: Request timeout in seconds.
        client: Optional preconfigured HTTPX client.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> BuildTrackerClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _get_json(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("GET %s", url)
        try:
            response = self._client.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise ApiError(
                f"HTTP error fetching {path}: {e.response.status_code} {e.response.reason_phrase}",
                code="http_error",
            ) from e
        except httpx.TimeoutException as e:
            raise ApiError(f"Timeout fetching {path}", code="timeout") from e
        except httpx.RequestError as e:
            raise ApiError(f"Network error fetching {path}: {e}", code="network_error") from e
        except ValueError as e:
            raise ApiError(f"Invalid JSON from {path}", code="invalid_response") from e

    def get_build(self, revision: str) -> BuildSchema:
        """Fetch a single build by revision."""
        data = self._get_json(f"/api/build/{quote(revision, safe='')}")
        try:
            return BuildSchema.model_validate(data)
        except ValidationError as e:
            raise ApiError(f"Invalid build for {revision}", code="invalid_response") from e

    def get_builds(self, request: FetchRequest | None = None) -> BuildSet:
        """Fetch builds for a dashboard request.

        Raises:
            ApiError: If the request fails or returns malformed builds.
        """
        if request is None:
            request = FetchRequest()
        path = request.path()
        data = self._get_json(path)
        if not isinstance(data, list):
            raise ApiError(f"Expected a list of builds from {path}", code="invalid_response")
        try:
            builds = [BuildSchema.model_validate(item) for item in data]
        except ValidationError as e:
            raise ApiError(f"Invalid builds from {path}", code="invalid_response") from e
        logger.info("Fetched %d builds from %s", len(builds), path)
        return BuildSet.from_builds(builds)


__all__ = [
    "ApiError",
    "BuildSet",
    "BuildTrackerClient",
    "FetchRequest",
]
