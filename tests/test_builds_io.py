"""Tests for build file loading.

These tests verify loading builds from YAML and JSON files.
"""

import json

import pytest
import yaml
from pydantic import ValidationError

from build_tracker.builds.io import (
    BuildFileError,
    load_builds,
    load_builds_from_directory,
    parse_builds_data,
)


@pytest.fixture
def build_data():
    """Return valid build data in wire format."""
    return {
        "meta": {
            "revision": "abc123def",
            "parentRevision": "0123abc",
            "timestamp": 1700000000000,
            "branch": "main",
        },
        "artifacts": [
            {"name": "main", "hash": "h1", "sizes": {"gzip": 1024, "stat": 4096}},
            {"name": "vendor", "hash": "h2", "sizes": {"gzip": 2048}},
        ],
    }


def other_build(revision, timestamp):
    return {"meta": {"revision": revision, "timestamp": timestamp}, "artifacts": []}


class TestParseBuildsData:
    """Tests for parse_builds_data."""

    def test_single_mapping(self, build_data):
        builds = parse_builds_data(build_data)
        assert len(builds) == 1
        assert builds[0].revision == "abc123def"
        assert builds[0].parent_revision == "0123abc"
        assert builds[0].meta.model_extra == {"branch": "main"}

    def test_list(self, build_data):
        builds = parse_builds_data([build_data, other_build("fff", 1)])
        assert [b.revision for b in builds] == ["abc123def", "fff"]

    def test_builds_key(self, build_data):
        builds = parse_builds_data({"builds": [build_data]})
        assert len(builds) == 1

    def test_none_is_empty(self):
        assert parse_builds_data(None) == []

    def test_unsupported_shape(self):
        with pytest.raises(ValueError, match="Expected a build mapping or list"):
            parse_builds_data("not a build")

    def test_invalid_build(self):
        with pytest.raises(ValidationError):
            parse_builds_data({"meta": {"revision": "abc"}, "artifacts": []})

    def test_unusable_sizes_become_byte_counts(self):
        builds = parse_builds_data(
            {
                "meta": {"revision": "abc", "timestamp": 1},
                "artifacts": [
                    {"name": "main", "sizes": {"gzip": None, "stat": 12.7, "raw": -3}}
                ],
            }
        )
        assert builds[0].artifacts[0].sizes == {"gzip": 0, "stat": 12, "raw": 0}


class TestLoadBuilds:
    """Tests for load_builds."""

    def test_load_json(self, tmp_path, build_data):
        path = tmp_path / "build.json"
        path.write_text(json.dumps(build_data))
        builds = load_builds(path)
        assert builds[0].get_size("main", "stat") == 4096

    def test_load_yaml(self, tmp_path, build_data):
        path = tmp_path / "builds.yaml"
        path.write_text(yaml.safe_dump({"builds": [build_data]}))
        builds = load_builds(path)
        assert builds[0].artifact_names == ["main", "vendor"]

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "build.txt"
        path.write_text("{}")
        with pytest.raises(BuildFileError, match="Unsupported file type"):
            load_builds(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(BuildFileError, match="File not found"):
            load_builds(tmp_path / "missing.json")

    def test_parse_error(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(BuildFileError, match="Parse error"):
            load_builds(path)

    def test_validation_error(self, tmp_path):
        path = tmp_path / "invalid.yaml"
        path.write_text(yaml.safe_dump({"meta": {"revision": ""}}))
        with pytest.raises(BuildFileError, match="Validation error") as exc_info:
            load_builds(path)
        assert exc_info.value.code == "build_file_error"
        assert exc_info.value.path == path


class TestLoadBuildsFromDirectory:
    """Tests for load_builds_from_directory."""

    def test_loads_sorted_by_filename(self, tmp_path):
        (tmp_path / "b.json").write_text(json.dumps(other_build("bbb", 2)))
        (tmp_path / "a.yml").write_text(yaml.safe_dump(other_build("aaa", 1)))
        (tmp_path / "notes.md").write_text("ignored")

        builds = load_builds_from_directory(tmp_path)
        assert [b.revision for b in builds] == ["aaa", "bbb"]

    def test_empty_directory(self, tmp_path):
        assert load_builds_from_directory(tmp_path) == []
