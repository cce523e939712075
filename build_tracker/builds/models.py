"""Build ORM models.

This module defines the BuildRecord and ArtifactRecord models used by the
default query collaborator to store builds in a SQL database.
"""

from typing import Any

from sqlalchemy import JSON, BigInteger, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from build_tracker.db import Base


class BuildRecord(Base):
    """ORM model for a stored build.

    Attributes:
        id: Primary key.
        revision: Unique revision identifier.
        parent_revision: Revision of the parent commit.
        timestamp: Build time in milliseconds since the epoch.
        extra_meta: Additional metadata fields (branch, author, ...).
        artifacts: Artifact measurements, in recorded order.
    """

    __tablename__ = "builds"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    revision: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, index=True
    )
    parent_revision: Mapped[str | None] = mapped_column(String(64), nullable=True)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    extra_meta: Mapped[dict[str, Any] | None] = mapped_column(
        JSON, nullable=True, default=dict
    )

    artifacts: Mapped[list["ArtifactRecord"]] = relationship(
        "ArtifactRecord",
        back_populates="build",
        cascade="all, delete-orphan",
        order_by="ArtifactRecord.position",
    )

    def __repr__(self) -> str:
        """Return string representation of BuildRecord."""
        return (
            f"<BuildRecord(id={self.id}, revision='{self.revision}', "
            f"timestamp={self.timestamp})>"
        )


class ArtifactRecord(Base):
    """ORM model for one artifact measurement of a build.

    Attributes:
        id: Primary key.
        build_id: Foreign key to BuildRecord.
        position: Index of the artifact within its build.
        name: Artifact name.
        hash: Content hash, if reported.
        sizes: JSON mapping of size kind to byte count.
    """

    __tablename__ = "artifacts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    build_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("builds.id"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    hash: Mapped[str | None] = mapped_column(String(128), nullable=True)
    sizes: Mapped[dict[str, int]] = mapped_column(JSON, nullable=False, default=dict)

    build: Mapped["BuildRecord"] = relationship(
        "BuildRecord", back_populates="artifacts"
    )

    def __repr__(self) -> str:
        """Return string representation of ArtifactRecord."""
        return f"<ArtifactRecord(id={self.id}, name='{self.name}', sizes={self.sizes})>"


__all__ = ["ArtifactRecord", "BuildRecord"]
