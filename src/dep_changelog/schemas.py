"""Pydantic models defining the input/output contract for changelog lookups.

These schemas are the single source of truth for what flows in and out of
the changelog assembler. They are used for:
- Request/response validation in the API layer
- Parsing CLI input files
- Serializing entries into the release-pair cache
- Test fixture typing

Key design decisions:
- Release metadata is immutable once supplied (frozen models)
- Changelog entries stay mutable so the assembler can attach compare links
- Errors the user can act on are returned as values, not raised
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ChangeLogError(str, Enum):
    """User-actionable reasons a changelog could not be produced.

    MissingGithubToken: The source lives on github.com but no token is
        configured, so the tag history cannot be read.
    """

    MISSING_GITHUB_TOKEN = "MissingGithubToken"


# ---------------------------------------------------------------------------
# Input Schemas
# ---------------------------------------------------------------------------


class Release(BaseModel):
    """A single published release of a dependency.

    Attributes:
        version: Version string as published by the package registry
        release_timestamp: When the release was published, if known
        git_ref: Explicit git ref (tag or SHA) recorded by the registry
    """

    model_config = ConfigDict(frozen=True)

    version: str = Field(..., min_length=1, description="Published version")
    release_timestamp: datetime | None = Field(
        None, description="Publication time of the release"
    )
    git_ref: str | None = Field(
        None, description="Explicit git ref for this release, if known"
    )


class ChangeLogConfig(BaseModel):
    """Input for one changelog computation.

    Attributes:
        endpoint: API root of a self-hosted GitHub instance (ignored for
                  sources on github.com)
        versioning: Versioning scheme identifier (e.g., "semver", "pep440")
        from_version: Currently used version (exclusive lower bound)
        to_version: Target version (inclusive upper bound)
        source_url: Web URL of the source repository
        releases: All known releases of the dependency, in any order
        dep_name: Dependency name, also used to scope tag matching
        manager: Package manager the dependency was found by
    """

    endpoint: str | None = Field(None, description="Self-hosted API root")
    versioning: str = Field("semver", description="Versioning scheme id")
    from_version: str = Field(..., description="Exclusive lower bound")
    to_version: str = Field(..., description="Inclusive upper bound")
    source_url: str = Field(..., description="Source repository web URL")
    releases: list[Release] = Field(
        default_factory=list, description="Known releases of the dependency"
    )
    dep_name: str = Field(..., min_length=1, description="Dependency name")
    manager: str = Field(..., min_length=1, description="Package manager")


# ---------------------------------------------------------------------------
# Output Schemas
# ---------------------------------------------------------------------------


class CompareLink(BaseModel):
    """Link to the host's comparison view between two refs."""

    url: str | None = None


class ChangeLogRelease(BaseModel):
    """One upgrade step in the changelog.

    Attributes:
        version: Version this step upgrades to
        date: Publication time of that version
        changes: Always empty here; kept so downstream templates don't break
        compare: Compare link from the previous release, empty when either
                 ref could not be resolved
    """

    version: str
    date: datetime | None = None
    changes: list[dict] = Field(default_factory=list)
    compare: CompareLink = Field(default_factory=CompareLink)


class ChangeLogProject(BaseModel):
    """Where the changelog was sourced from."""

    api_base_url: str
    base_url: str
    repository_slug: str
    source_url: str
    dep_name: str


class ChangeLogResult(BaseModel):
    """Ordered changelog manifest, newest version first."""

    project: ChangeLogProject
    versions: list[ChangeLogRelease] = Field(default_factory=list)


class ChangeLogErrorResult(BaseModel):
    """Returned instead of a result when the user has to fix their setup."""

    error: ChangeLogError
