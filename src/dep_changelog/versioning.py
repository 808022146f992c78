"""Pluggable version comparison schemes.

Every package ecosystem has its own idea of what a version looks like and
how two versions order. The changelog assembler never compares version
strings itself; it asks a scheme looked up by identifier:

    scheme = get_versioning("semver")
    scheme.is_version("1.2.3")            # True
    scheme.is_greater_than("1.10.0", "1.9.0")  # True

Plain string comparison is never correct here ("1.10.0" sorts before
"1.9.0" lexically), so each scheme parses versions into comparable keys.
"""

from __future__ import annotations

import re
from typing import Protocol

from packaging.version import InvalidVersion, Version

# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class VersioningScheme(Protocol):
    """Interface every versioning scheme implements."""

    def is_version(self, version: str) -> bool:
        """Return True if the string is a valid version in this scheme."""
        ...

    def equals(self, version: str, other: str) -> bool:
        """Return True if both strings denote the same version."""
        ...

    def is_greater_than(self, version: str, other: str) -> bool:
        """Return True if ``version`` orders strictly after ``other``."""
        ...

    def sort_versions(self, version: str, other: str) -> int:
        """Comparator: negative, zero or positive like ``cmp``."""
        ...


class _KeyedScheme:
    """Shared comparison logic for schemes that parse into sortable keys."""

    def _key(self, version: str) -> tuple:
        raise NotImplementedError

    def is_version(self, version: str) -> bool:
        try:
            self._key(version)
        except ValueError:
            return False
        return True

    def equals(self, version: str, other: str) -> bool:
        return self._key(version) == self._key(other)

    def is_greater_than(self, version: str, other: str) -> bool:
        return self._key(version) > self._key(other)

    def sort_versions(self, version: str, other: str) -> int:
        left, right = self._key(version), self._key(other)
        return (left > right) - (left < right)


# ---------------------------------------------------------------------------
# Schemes
# ---------------------------------------------------------------------------

_SEMVER_RE = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


class SemverVersioning(_KeyedScheme):
    """Semantic Versioning 2.0.0, with an optional leading ``v``.

    Build metadata is ignored for ordering and equality. A pre-release
    orders before its release (``1.0.0-rc.1 < 1.0.0``); numeric pre-release
    identifiers order numerically and below alphanumeric ones.
    """

    def _key(self, version: str) -> tuple:
        match = _SEMVER_RE.match(version)
        if not match:
            raise ValueError(f"Not a semver version: {version!r}")
        core = (int(match["major"]), int(match["minor"]), int(match["patch"]))
        prerelease = match["prerelease"]
        if prerelease is None:
            # Releases sort after any pre-release of the same core
            return core + ((1,),)
        identifiers = tuple(
            (0, int(part), "") if part.isdigit() else (1, 0, part)
            for part in prerelease.split(".")
        )
        return core + ((0, identifiers),)


class Pep440Versioning(_KeyedScheme):
    """Python package versions, parsed with :mod:`packaging`."""

    def _key(self, version: str) -> tuple:
        try:
            return (Version(version),)
        except InvalidVersion as exc:
            raise ValueError(str(exc)) from exc


_LOOSE_RE = re.compile(r"^v?(?P<numbers>\d+(?:\.\d+)*)(?P<suffix>[-+._]?[0-9A-Za-z.-]+)?$")


class LooseVersioning(_KeyedScheme):
    """Dotted numeric versions with an optional trailing suffix.

    Versions are ordered by their numeric components; ``1.2`` equals
    ``1.2.0``. A suffixed version (``2.0-beta``) orders before the bare one.
    """

    def _key(self, version: str) -> tuple:
        match = _LOOSE_RE.match(version)
        if not match:
            raise ValueError(f"Not a loose version: {version!r}")
        numbers = [int(part) for part in match["numbers"].split(".")]
        while len(numbers) > 1 and numbers[-1] == 0:
            numbers.pop()
        suffix = match["suffix"] or ""
        return (tuple(numbers), 0 if suffix else 1, suffix)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

DEFAULT_VERSIONING = "semver"

_SCHEMES: dict[str, VersioningScheme] = {
    "semver": SemverVersioning(),
    "pep440": Pep440Versioning(),
    "loose": LooseVersioning(),
}


def get_versioning(name: str | None = None) -> VersioningScheme:
    """Look up a versioning scheme by identifier.

    Args:
        name: Scheme id; falls back to the default scheme when empty.

    Returns:
        The scheme instance.

    Raises:
        ValueError: If no scheme is registered under that name.
    """
    scheme_id = name or DEFAULT_VERSIONING
    try:
        return _SCHEMES[scheme_id]
    except KeyError:
        known = ", ".join(sorted(_SCHEMES))
        raise ValueError(
            f"Unknown versioning scheme {scheme_id!r} (known: {known})"
        ) from None
