"""Tests for Pydantic schemas.

These tests verify that the input/output schemas:
- Accept valid data
- Reject invalid data
- Serialize the way the API and cache expect

Run with: pytest tests/test_schemas.py -v
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from dep_changelog.schemas import (
    ChangeLogConfig,
    ChangeLogError,
    ChangeLogErrorResult,
    ChangeLogRelease,
    Release,
)

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_config() -> dict:
    """A valid ChangeLogConfig dict."""
    return {
        "endpoint": None,
        "versioning": "pep440",
        "from_version": "1.0",
        "to_version": "1.2",
        "source_url": "https://github.com/acme/widget",
        "releases": [
            {"version": "1.0", "release_timestamp": "2024-01-01T12:00:00Z"},
            {"version": "1.1", "git_ref": "abc123"},
        ],
        "dep_name": "widget",
        "manager": "pip_requirements",
    }


# ---------------------------------------------------------------------------
# Release Tests
# ---------------------------------------------------------------------------


class TestRelease:
    def test_defaults(self) -> None:
        release = Release(version="1.0.0")
        assert release.release_timestamp is None
        assert release.git_ref is None

    def test_parses_timestamp(self) -> None:
        release = Release(version="1.0.0", release_timestamp="2024-01-01T12:00:00Z")
        assert release.release_timestamp == datetime(2024, 1, 1, 12, tzinfo=UTC)

    def test_requires_version(self) -> None:
        with pytest.raises(Exception):
            Release(version="")


# ---------------------------------------------------------------------------
# ChangeLogConfig Tests
# ---------------------------------------------------------------------------


class TestChangeLogConfig:
    def test_valid_config(self, sample_config: dict) -> None:
        config = ChangeLogConfig(**sample_config)
        assert config.versioning == "pep440"
        assert len(config.releases) == 2
        assert config.releases[1].git_ref == "abc123"

    def test_versioning_defaults_to_semver(self, sample_config: dict) -> None:
        del sample_config["versioning"]
        assert ChangeLogConfig(**sample_config).versioning == "semver"

    def test_releases_default_empty(self, sample_config: dict) -> None:
        del sample_config["releases"]
        assert ChangeLogConfig(**sample_config).releases == []

    def test_requires_dep_name(self, sample_config: dict) -> None:
        del sample_config["dep_name"]
        with pytest.raises(Exception):
            ChangeLogConfig(**sample_config)


# ---------------------------------------------------------------------------
# Output Tests
# ---------------------------------------------------------------------------


class TestChangeLogRelease:
    def test_defaults_have_empty_changes_and_compare(self) -> None:
        entry = ChangeLogRelease(version="1.1.0")
        assert entry.model_dump(mode="json") == {
            "version": "1.1.0",
            "date": None,
            "changes": [],
            "compare": {"url": None},
        }

    def test_json_dump_restores_identically(self) -> None:
        entry = ChangeLogRelease(
            version="1.1.0",
            date=datetime(2024, 2, 1, tzinfo=UTC),
            compare={"url": "https://github.com/acme/widget/compare/v1.0.0...v1.1.0"},
        )
        restored = ChangeLogRelease.model_validate(entry.model_dump(mode="json"))
        assert restored.model_dump_json() == entry.model_dump_json()


def test_error_result_serializes_error_name() -> None:
    result = ChangeLogErrorResult(error=ChangeLogError.MISSING_GITHUB_TOKEN)
    assert result.model_dump(mode="json") == {"error": "MissingGithubToken"}
