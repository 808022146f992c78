"""Tag resolution: map a release onto a git ref.

One TagResolver lives for the duration of one changelog computation. The
first lookup fetches the repository's full tag list; every later lookup
reuses it, so a changelog spanning many releases costs one listing.

Tag names are scoped to the dependency: monorepos tag releases as
"mylib@1.2.0" or "mylib-1.2.0", so that prefix is stripped before the
remainder is compared as a version. Tags of sibling packages
("otherlib-1.2.0") never strip to a valid version and are ignored.
"""

from __future__ import annotations

import asyncio
import re

from dep_changelog.hosting.github import TagClientProtocol, TagListError
from dep_changelog.logging_config import get_logger
from dep_changelog.schemas import Release
from dep_changelog.versioning import VersioningScheme

logger = get_logger(__name__)


class TagResolver:
    """Resolves releases to refs using a lazily fetched tag list.

    Usage:
        resolver = TagResolver(client, scheme, api_base_url, "owner/repo", "mylib", token)
        ref = await resolver.get_ref(release)
    """

    def __init__(
        self,
        client: TagClientProtocol,
        versioning: VersioningScheme,
        api_base_url: str,
        repository: str,
        dep_name: str,
        token: str | None = None,
    ) -> None:
        self._client = client
        self._versioning = versioning
        self._api_base_url = api_base_url
        self._repository = repository
        self._token = token
        self._prefix = re.compile(f"^{re.escape(dep_name)}[@-]")
        self._tags: list[str] | None = None
        self._lock = asyncio.Lock()

    async def get_tags(self) -> list[str]:
        """Return the repository's tags, fetching them on first use.

        Raises:
            TagListError: Only when the failure is an authentication
                          problem; other failures yield an empty list.
        """
        async with self._lock:
            if self._tags is None:
                self._tags = await self._fetch_tags()
            return self._tags

    async def _fetch_tags(self) -> list[str]:
        try:
            return await self._client.list_tags(
                self._api_base_url, self._repository, self._token
            )
        except TagListError as exc:
            if exc.is_auth_failure:
                logger.warning(
                    "tag_fetch_bad_credentials",
                    repository=self._repository,
                    error=str(exc),
                )
                raise
            logger.warning(
                "tag_fetch_failed",
                repository=self._repository,
                error=str(exc),
            )
            return []

    def _strip_prefix(self, tag: str) -> str:
        return self._prefix.sub("", tag, count=1)

    async def get_ref(self, release: Release) -> str | None:
        """Return the tag matching the release, its git ref, or None."""
        for tag in await self.get_tags():
            candidate = self._strip_prefix(tag)
            if not self._versioning.is_version(candidate):
                continue
            if self._versioning.equals(candidate, release.version):
                return tag
        if release.git_ref:
            return release.git_ref
        return None
