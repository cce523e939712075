"""Build records module.

This module handles:
- Build and artifact schemas (the API wire format)
- Build storage models and the store service
- The query collaborator consumed by the HTTP API
- Loading builds from files
"""

from build_tracker.builds.schema import ArtifactSchema, BuildMetaSchema, BuildSchema

__all__ = ["ArtifactSchema", "BuildMetaSchema", "BuildSchema"]
