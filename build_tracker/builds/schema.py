"""Pydantic models for build records.

A build is the immutable result of one compilation: its metadata (revision,
parent revision, timestamp) and the size measurements of every artifact it
produced. These models are the wire format of the query API and of build
fixture files; field names follow the JSON format (``parentRevision``).
"""

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def normalize_size(value: object) -> int:
    """Coerce a reported size to a non-negative byte count (0 if unusable)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value) or value < 0:
        return 0
    return int(value)


class BuildMetaSchema(BaseModel):
    """Metadata for a single build.

    Attributes:
        revision: Revision identifier (usually a commit SHA).
        parent_revision: Revision of the parent commit, if known.
        timestamp: Build time in milliseconds since the epoch.

    Extra fields (branch, author, subject, ...) are preserved as-is.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    revision: str = Field(min_length=1, description="Revision identifier")
    parent_revision: str | None = Field(
        default=None, alias="parentRevision", description="Parent revision"
    )
    timestamp: int = Field(description="Build time in milliseconds")


class ArtifactSchema(BaseModel):
    """A named build output with its size measurements.

    Attributes:
        name: Artifact name (for example ``main`` or ``vendor.js``).
        hash: Content hash of the artifact, if reported.
        sizes: Byte count per size kind (for example ``gzip`` and ``stat``).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, description="Artifact name")
    hash: str | None = Field(default=None, description="Content hash")
    sizes: dict[str, int] = Field(default_factory=dict, description="Sizes in bytes")

    @field_validator("sizes", mode="before")
    @classmethod
    def normalize_sizes(cls, v: Any) -> Any:
        """Replace null, negative or non-numeric sizes with 0 and floor floats."""
        if isinstance(v, dict):
            return {kind: normalize_size(size) for kind, size in v.items()}
        return v


class BuildSchema(BaseModel):
    """A build: metadata plus ordered artifact measurements."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    meta: BuildMetaSchema
    artifacts: list[ArtifactSchema] = Field(default_factory=list)

    @property
    def revision(self) -> str:
        return self.meta.revision

    @property
    def parent_revision(self) -> str | None:
        return self.meta.parent_revision

    @property
    def timestamp(self) -> int:
        return self.meta.timestamp

    @property
    def artifact_names(self) -> list[str]:
        """Names of all artifacts in this build, in recorded order."""
        return [artifact.name for artifact in self.artifacts]

    def get_artifact(self, name: str) -> ArtifactSchema | None:
        """Return the artifact with the given name, or None if absent."""
        for artifact in self.artifacts:
            if artifact.name == name:
                return artifact
        return None

    def get_size(self, name: str, kind: str) -> int:
        """Return an artifact size, treating missing data as 0."""
        artifact = self.get_artifact(name)
        if artifact is None:
            return 0
        return artifact.sizes.get(kind, 0)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary using wire field names."""
        return self.model_dump(by_alias=True, mode="json")


def collect_artifact_names(builds: list[BuildSchema]) -> list[str]:
    """Return the sorted union of artifact names across builds."""
    names: set[str] = set()
    for build in builds:
        names.update(build.artifact_names)
    return sorted(names)


__all__ = [
    "ArtifactSchema",
    "BuildMetaSchema",
    "BuildSchema",
    "collect_artifact_names",
    "normalize_size",
]
