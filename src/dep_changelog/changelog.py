"""Changelog assembler: correlate releases with tags into upgrade steps.

This module ties together all the components:
- Version comparison (versioning.py)
- Credential lookup (hosting/host_rules.py)
- Tag resolution (tags.py, backed by hosting/github.py)
- Entry memoization (cache.py)
- Release-notes enrichment (release_notes.py)

The assembler follows this flow:
1. Check the source is eligible (not denylisted, parseable, credentials
   available, a plain owner/repo path, enough valid releases)
2. Sort the valid releases with the dependency's versioning scheme
3. For every adjacent pair whose newer release lies in
   (from_version, to_version], reuse the cached entry or build one with a
   compare link between the two releases' refs
4. Return the entries newest-first, after release-notes enrichment
"""

from __future__ import annotations

import functools
from urllib.parse import urlsplit

from pydantic import BaseModel

from dep_changelog.cache import CacheProtocol, get_default_cache
from dep_changelog.hosting.github import GitHubTagClient, TagClientProtocol
from dep_changelog.hosting.host_rules import GITHUB_HOST_TYPE, HostRules
from dep_changelog.logging_config import get_logger
from dep_changelog.release_notes import (
    PassthroughReleaseNotes,
    ReleaseNotesEnricherProtocol,
)
from dep_changelog.schemas import (
    ChangeLogConfig,
    ChangeLogError,
    ChangeLogErrorResult,
    ChangeLogProject,
    ChangeLogRelease,
    ChangeLogResult,
)
from dep_changelog.tags import TagResolver
from dep_changelog.versioning import get_versioning

logger = get_logger(__name__)


class ChangelogSettings(BaseModel):
    """Tunables for the changelog assembler.

    Attributes:
        cache_namespace: Cache namespace for release-pair entries
        cache_minutes: How long a computed entry stays valid
        denylisted_sources: Source URLs that never get a changelog
        public_host: Hostname of the public hosting service
        public_api_base_url: API root of the public hosting service
    """

    cache_namespace: str = "changelog-github-release"
    cache_minutes: int = 55
    denylisted_sources: list[str] = [
        # Aggregates thousands of @types packages; tags say nothing useful
        "https://github.com/DefinitelyTyped/DefinitelyTyped",
    ]
    public_host: str = "github.com"
    public_api_base_url: str = "https://api.github.com/"


def get_cache_key(manager: str, dep_name: str, prev: str, next_: str) -> str:
    """Cache key for the entry upgrading ``dep_name`` from ``prev`` to ``next_``."""
    return f"{manager}:{dep_name}:{prev}:{next_}"


class ChangelogAssembler:
    """Builds changelog manifests for dependency upgrades.

    Every collaborator is injected so tests can swap in mocks. Each call to
    get_changelog() is independent apart from the shared cache.

    Usage:
        assembler = ChangelogAssembler(host_rules=HostRules.from_env())
        result = await assembler.get_changelog(config)
    """

    def __init__(
        self,
        host_rules: HostRules | None = None,
        tag_client: TagClientProtocol | None = None,
        cache: CacheProtocol | None = None,
        enricher: ReleaseNotesEnricherProtocol | None = None,
        settings: ChangelogSettings | None = None,
    ) -> None:
        self.host_rules = host_rules if host_rules is not None else HostRules.from_env()
        self.tag_client = tag_client or GitHubTagClient()
        self.cache = cache if cache is not None else get_default_cache()
        self.enricher = enricher or PassthroughReleaseNotes()
        self.settings = settings or ChangelogSettings()

    def _api_base_url(
        self, config: ChangeLogConfig, is_public: bool, scheme: str, netloc: str
    ) -> str:
        if is_public:
            return self.settings.public_api_base_url
        if config.endpoint:
            return config.endpoint.rstrip("/") + "/"
        return f"{scheme}://{netloc}/api/v3/"

    async def get_changelog(
        self, config: ChangeLogConfig
    ) -> ChangeLogResult | ChangeLogErrorResult | None:
        """Compute the changelog manifest for one dependency upgrade.

        Args:
            config: The dependency, its releases and the version bounds

        Returns:
            The manifest, a MissingGithubToken error value, or None when
            the dependency is simply not eligible for a changelog

        Raises:
            ValueError: If the versioning scheme is unknown
            TagListError: If the host rejected the configured credentials
        """
        log = logger.bind(manager=config.manager, dep_name=config.dep_name)
        source_url = config.source_url

        if source_url.rstrip("/") in self.settings.denylisted_sources:
            log.debug("changelog_denylisted_source", source_url=source_url)
            return None

        versioning = get_versioning(config.versioning)

        try:
            parts = urlsplit(source_url)
            host = parts.hostname
        except ValueError:
            host = None
        if not (host and parts.scheme):
            log.debug("invalid_source_url", source_url=source_url)
            return None
        base_url = f"{parts.scheme}://{parts.netloc}/"
        is_public = host == self.settings.public_host
        api_base_url = self._api_base_url(
            config, is_public, parts.scheme, parts.netloc
        )

        rule = self.host_rules.find(
            host_type=GITHUB_HOST_TYPE,
            url=self.settings.public_api_base_url if is_public else source_url,
        )
        if not rule.token:
            if host.endswith(self.settings.public_host):
                log.warning(
                    "missing_github_token",
                    source_url=source_url,
                    detail="No github.com token has been configured. "
                    "Skipping release notes retrieval",
                )
                return ChangeLogErrorResult(error=ChangeLogError.MISSING_GITHUB_TOKEN)
            log.debug("unknown_source_host", source_url=source_url)
            return None

        repository = parts.path[1:]
        if repository.endswith("/"):
            repository = repository[:-1]
        if len(repository.split("/")) != 2 or not all(repository.split("/")):
            log.debug("invalid_repository_path", source_url=source_url)
            return None

        if not config.releases:
            log.debug("no_releases")
            return None

        by_version = functools.cmp_to_key(versioning.sort_versions)
        valid_releases = sorted(
            (r for r in config.releases if versioning.is_version(r.version)),
            key=lambda r: by_version(r.version),
        )
        if len(valid_releases) < 2:
            log.debug("not_enough_valid_releases", count=len(valid_releases))
            return None

        resolver = TagResolver(
            client=self.tag_client,
            versioning=versioning,
            api_base_url=api_base_url,
            repository=repository,
            dep_name=config.dep_name,
            token=rule.token,
        )

        def include(version: str) -> bool:
            return versioning.is_greater_than(
                version, config.from_version
            ) and not versioning.is_greater_than(version, config.to_version)

        changelog_releases: list[ChangeLogRelease] = []
        for prev, next_ in zip(valid_releases, valid_releases[1:]):
            if not include(next_.version):
                continue
            cache_key = get_cache_key(
                config.manager, config.dep_name, prev.version, next_.version
            )
            cached = await self.cache.get(self.settings.cache_namespace, cache_key)
            if cached is not None:
                changelog_releases.append(ChangeLogRelease.model_validate(cached))
                continue

            release = ChangeLogRelease(
                version=next_.version,
                date=next_.release_timestamp,
            )
            prev_head = await resolver.get_ref(prev)
            next_head = await resolver.get_ref(next_)
            if prev_head and next_head:
                release.compare.url = (
                    f"{base_url}{repository}/compare/{prev_head}...{next_head}"
                )
            await self.cache.set(
                self.settings.cache_namespace,
                cache_key,
                release.model_dump(mode="json"),
                self.settings.cache_minutes,
            )
            changelog_releases.append(release)

        changelog_releases.reverse()

        result = ChangeLogResult(
            project=ChangeLogProject(
                api_base_url=api_base_url,
                base_url=base_url,
                repository_slug=repository,
                source_url=source_url,
                dep_name=config.dep_name,
            ),
            versions=changelog_releases,
        )
        log.info(
            "changelog_assembled",
            repository=repository,
            versions_count=len(changelog_releases),
        )
        return await self.enricher.add_release_notes(result)


async def compute_changelog(
    config: ChangeLogConfig,
    assembler: ChangelogAssembler | None = None,
) -> ChangeLogResult | ChangeLogErrorResult | None:
    """Compute a changelog with a default-configured assembler.

    Args:
        config: The dependency, its releases and the version bounds
        assembler: Assembler to use instead of a fresh default one

    Returns:
        See ChangelogAssembler.get_changelog
    """
    return await (assembler or ChangelogAssembler()).get_changelog(config)
