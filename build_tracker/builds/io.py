"""Build file loading.

Builds can be loaded from YAML or JSON files, either one build per file
(a mapping with ``meta`` and ``artifacts``) or several builds per file
(a list of such mappings, or a mapping with a ``builds`` list). Loaded data
is validated with the build schema before it reaches the store.
"""

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from build_tracker.builds.schema import BuildSchema

BUILD_FILE_SUFFIXES = (".json", ".yaml", ".yml")


class BuildFileError(Exception):
    """Raised when a build file cannot be read or validated."""

    def __init__(self, path: Path, message: str, code: str = "build_file_error") -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.code = code


def _load_raw(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            return json.load(f)
        return yaml.safe_load(f)


def parse_builds_data(data: Any) -> list[BuildSchema]:
    """Validate raw build data.

    Args:
        data: A build mapping, a list of build mappings, or a mapping with a
            ``builds`` list.

    Returns:
        Validated builds in file order.

    Raises:
        ValidationError: If any build does not match the schema.
        ValueError: If the data has an unsupported shape.
    """
    if data is None:
        return []
    if isinstance(data, dict) and "builds" in data:
        data = data["builds"]
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ValueError(f"Expected a build mapping or list, got {type(data).__name__}")
    return [BuildSchema.model_validate(item) for item in data]


def load_builds(path: Path) -> list[BuildSchema]:
    """Load builds from a YAML or JSON file.

    Args:
        path: Path to the build file.

    Returns:
        Validated builds.

    Raises:
        BuildFileError: If the file is missing, unparsable or invalid.
    """
    if path.suffix.lower() not in BUILD_FILE_SUFFIXES:
        raise BuildFileError(path, f"Unsupported file type: {path.suffix}")
    try:
        raw = _load_raw(path)
    except FileNotFoundError:
        raise BuildFileError(path, "File not found") from None
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise BuildFileError(path, f"Parse error: {e}") from e

    try:
        return parse_builds_data(raw)
    except ValidationError as e:
        raise BuildFileError(path, f"Validation error: {e.error_count()} error(s)") from e
    except ValueError as e:
        raise BuildFileError(path, str(e)) from e


def load_builds_from_directory(path: Path) -> list[BuildSchema]:
    """Load builds from every build file in a directory, sorted by filename."""
    builds: list[BuildSchema] = []
    for file_path in sorted(path.iterdir()):
        if file_path.is_file() and file_path.suffix.lower() in BUILD_FILE_SUFFIXES:
            builds.extend(load_builds(file_path))
    return builds


__all__ = [
    "BUILD_FILE_SUFFIXES",
    "BuildFileError",
    "load_builds",
    "load_builds_from_directory",
    "parse_builds_data",
]
