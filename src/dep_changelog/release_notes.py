"""Release-notes enrichment hook.

After the changelog manifest is assembled it is handed to an enricher
once, which may attach release-notes text fetched from elsewhere. Fetching
and parsing notes lives outside this package; the default enricher
returns the manifest untouched.
"""

from __future__ import annotations

from typing import Protocol

from dep_changelog.schemas import ChangeLogResult


class ReleaseNotesEnricherProtocol(Protocol):
    """Transforms an assembled changelog, e.g. by adding release notes."""

    async def add_release_notes(self, result: ChangeLogResult) -> ChangeLogResult:
        ...


class PassthroughReleaseNotes:
    """Enricher that leaves the changelog as it is."""

    async def add_release_notes(self, result: ChangeLogResult) -> ChangeLogResult:
        return result
