"""GitHub API client for listing repository tags.

The changelog only needs one thing from the hosting API: the names of all
tags in a repository. This module fetches them from GitHub's REST API
(github.com or a self-hosted GitHub Enterprise instance).

Design notes:
- Uses httpx for async HTTP requests
- Follows Link-header pagination (100 tags per page)
- Retries transport-level failures with tenacity before giving up
- Classifies every failure as AUTH or TRANSIENT so callers can decide
  whether to propagate or degrade without knowing about HTTP
- Uses a Protocol so the resolver doesn't depend on the concrete class

GitHub API docs: https://docs.github.com/en/rest/repos/repos#list-repository-tags
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from dep_changelog.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_API_BASE_URL = "https://api.github.com/"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TagFetchFailure(str, Enum):
    """Why a tag listing failed.

    AUTH: The credentials were rejected; nothing else will work either.
    TRANSIENT: Anything else (not found, rate limited, network trouble).
    """

    AUTH = "AUTH"
    TRANSIENT = "TRANSIENT"


class TagListError(Exception):
    """Raised when the tag list for a repository could not be fetched."""

    def __init__(self, kind: TagFetchFailure, message: str) -> None:
        super().__init__(message)
        self.kind = kind

    @property
    def is_auth_failure(self) -> bool:
        return self.kind is TagFetchFailure.AUTH


def classify_status_error(exc: httpx.HTTPStatusError) -> TagFetchFailure:
    """Map an HTTP error response onto a failure classification."""
    response = exc.response
    if response.status_code == 401:
        return TagFetchFailure.AUTH
    if "Bad credentials" in response.text:
        return TagFetchFailure.AUTH
    return TagFetchFailure.TRANSIENT


# ---------------------------------------------------------------------------
# Protocol (Interface)
# ---------------------------------------------------------------------------


class TagClientProtocol(Protocol):
    """Protocol defining the interface for tag listing."""

    async def list_tags(
        self, api_base_url: str, repository: str, token: str | None = None
    ) -> list[str]:
        """Return every tag name in the repository.

        Args:
            api_base_url: API root, e.g. "https://api.github.com/"
            repository: Repository in "owner/name" format
            token: Credential to authenticate with

        Raises:
            TagListError: If the listing could not be fetched
        """
        ...


# ---------------------------------------------------------------------------
# Concrete Implementation
# ---------------------------------------------------------------------------


class GitHubTagClient:
    """Real GitHub tag lister using httpx.

    Usage:
        client = GitHubTagClient()
        tags = await client.list_tags("https://api.github.com/", "lodash/lodash", token)
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            transport: Optional httpx transport (tests pass a MockTransport)
            timeout: Per-request timeout in seconds
        """
        self._transport = transport
        self._timeout = timeout

    @staticmethod
    def _headers(token: str | None) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def list_tags(
        self, api_base_url: str, repository: str, token: str | None = None
    ) -> list[str]:
        """Fetch all tag names of a repository, across all pages.

        Args:
            api_base_url: API root; a trailing slash is added if missing
            repository: Repository in "owner/name" format
            token: GitHub token

        Returns:
            Non-empty tag names in the order GitHub lists them

        Raises:
            TagListError: Classified AUTH for rejected credentials,
                          TRANSIENT for everything else
        """
        base_url = (api_base_url or DEFAULT_API_BASE_URL).rstrip("/") + "/"
        url = f"{base_url}repos/{repository}/tags"

        try:
            async with httpx.AsyncClient(
                headers=self._headers(token),
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                tags = await self._handle_pagination(client, url)
        except httpx.HTTPStatusError as exc:
            raise TagListError(
                classify_status_error(exc),
                f"GitHub returned {exc.response.status_code} listing tags "
                f"for {repository}",
            ) from exc
        except httpx.HTTPError as exc:
            raise TagListError(
                TagFetchFailure.TRANSIENT,
                f"Failed to list tags for {repository}: {exc}",
            ) from exc

        if not tags:
            logger.debug("repository_has_no_tags", repository=repository)

        return [tag["name"] for tag in tags if tag.get("name")]

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def _get_page(
        self, client: httpx.AsyncClient, url: str, params: dict | None
    ) -> httpx.Response:
        resp = await client.get(url, params=params)
        resp.raise_for_status()
        return resp

    async def _handle_pagination(
        self,
        client: httpx.AsyncClient,
        url: str,
    ) -> list[dict]:
        """Handle GitHub API pagination for endpoints that return lists.

        GitHub returns a 'Link' header with next/prev/last URLs for
        paginated responses. The next URL already carries the query string.
        """
        all_items: list[dict] = []
        next_url: str | None = url
        params: dict | None = {"per_page": 100}

        while next_url:
            resp = await self._get_page(client, next_url, params)
            all_items.extend(self._parse_page(resp))
            next_url = self._parse_next_link(resp.headers.get("link", ""))
            params = None

        return all_items

    @staticmethod
    def _parse_page(resp: httpx.Response) -> list[dict]:
        """Decode one page of tags, rejecting anything that isn't a list of objects.

        Raises:
            TagListError: TRANSIENT, e.g. for an HTML page served by a proxy
        """
        try:
            page = resp.json()
        except ValueError as exc:
            raise TagListError(
                TagFetchFailure.TRANSIENT,
                f"Tag listing at {resp.request.url} is not JSON",
            ) from exc
        if not isinstance(page, list) or not all(isinstance(t, dict) for t in page):
            raise TagListError(
                TagFetchFailure.TRANSIENT,
                f"Tag listing at {resp.request.url} is not a list of tags",
            )
        return page

    @staticmethod
    def _parse_next_link(link_header: str) -> str | None:
        """Extract the 'next' URL from a GitHub Link header."""
        if not link_header:
            return None
        for part in link_header.split(","):
            if 'rel="next"' in part:
                return part.split(";")[0].strip().strip("<>")
        return None


# ---------------------------------------------------------------------------
# Mock Implementation (for testing)
# ---------------------------------------------------------------------------


class MockTagClient:
    """Mock tag lister that returns predefined tags.

    Use this in tests and local development when you don't want to hit
    the real GitHub API.

    Usage:
        client = MockTagClient(tags={"lodash/lodash": ["4.17.20", "4.17.21"]})
        tags = await client.list_tags("https://api.github.com/", "lodash/lodash")
    """

    def __init__(
        self,
        tags: dict[str, list[str]] | None = None,
        error: Exception | None = None,
    ) -> None:
        """Initialize with optional predefined data.

        Args:
            tags: Mapping of repository -> tag names
            error: If set, raised from every list_tags call
        """
        self._tags = tags or {}
        self._error = error
        self.calls: list[tuple[str, str, str | None]] = []

    async def list_tags(
        self, api_base_url: str, repository: str, token: str | None = None
    ) -> list[str]:
        self.calls.append((api_base_url, repository, token))
        if self._error is not None:
            raise self._error
        return list(self._tags.get(repository, []))
