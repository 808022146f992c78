"""Tests for the GitHub tag client.

HTTP is served by httpx.MockTransport, so these tests exercise the real
request building, pagination and error classification without network.

Run with: pytest tests/test_github.py -v
"""

from __future__ import annotations

import httpx
import pytest

from dep_changelog.hosting.github import (
    GitHubTagClient,
    MockTagClient,
    TagFetchFailure,
    TagListError,
)


def make_client(handler) -> GitHubTagClient:
    return GitHubTagClient(transport=httpx.MockTransport(handler))


class TestListTags:
    @pytest.mark.asyncio
    async def test_single_page(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[{"name": "v1.0.0"}, {"name": "v1.1.0"}])

        tags = await make_client(handler).list_tags(
            "https://api.github.com/", "acme/widget", token="secret"
        )

        assert tags == ["v1.0.0", "v1.1.0"]
        assert seen[0].url.path == "/repos/acme/widget/tags"
        assert seen[0].url.params["per_page"] == "100"
        assert seen[0].headers["Authorization"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_follows_pagination(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params.get("page") == "2":
                return httpx.Response(200, json=[{"name": "v0.9.0"}])
            return httpx.Response(
                200,
                json=[{"name": "v1.0.0"}],
                headers={
                    "link": '<https://ghe.example.com/api/v3/repos/acme/widget/tags'
                    '?per_page=100&page=2>; rel="next", '
                    '<https://ghe.example.com/api/v3/repos/acme/widget/tags'
                    '?per_page=100&page=2>; rel="last"'
                },
            )

        tags = await make_client(handler).list_tags(
            "https://ghe.example.com/api/v3", "acme/widget"
        )
        assert tags == ["v1.0.0", "v0.9.0"]

    @pytest.mark.asyncio
    async def test_no_token_sends_no_authorization(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert "Authorization" not in request.headers
            return httpx.Response(200, json=[])

        assert await make_client(handler).list_tags(
            "https://api.github.com/", "acme/widget"
        ) == []

    @pytest.mark.asyncio
    async def test_skips_nameless_tags(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"name": ""}, {"name": "v1.0.0"}, {}])

        assert await make_client(handler).list_tags(
            "https://api.github.com/", "acme/widget"
        ) == ["v1.0.0"]


class TestErrorClassification:
    @pytest.mark.asyncio
    async def test_unauthorized_is_auth_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"message": "Bad credentials"})

        with pytest.raises(TagListError) as exc_info:
            await make_client(handler).list_tags("https://api.github.com/", "acme/widget")
        assert exc_info.value.kind is TagFetchFailure.AUTH
        assert exc_info.value.is_auth_failure

    @pytest.mark.asyncio
    async def test_bad_credentials_body_is_auth_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, json={"message": "Bad credentials"})

        with pytest.raises(TagListError) as exc_info:
            await make_client(handler).list_tags("https://api.github.com/", "acme/widget")
        assert exc_info.value.kind is TagFetchFailure.AUTH

    @pytest.mark.parametrize("status", [403, 404, 500])
    @pytest.mark.asyncio
    async def test_other_statuses_are_transient(self, status: int) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json={"message": "Not Found"})

        with pytest.raises(TagListError) as exc_info:
            await make_client(handler).list_tags("https://api.github.com/", "acme/widget")
        assert exc_info.value.kind is TagFetchFailure.TRANSIENT
        assert not exc_info.value.is_auth_failure

    @pytest.mark.asyncio
    async def test_non_json_page_is_transient(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>proxy</html>")

        with pytest.raises(TagListError) as exc_info:
            await make_client(handler).list_tags("https://api.github.com/", "acme/widget")
        assert exc_info.value.kind is TagFetchFailure.TRANSIENT

    @pytest.mark.parametrize(
        "payload",
        [{"message": "Not Found"}, ["v1.0.0", "v1.1.0"], [{"name": "v1"}, "v2"]],
    )
    @pytest.mark.asyncio
    async def test_page_that_is_not_a_tag_list_is_transient(self, payload) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=payload)

        with pytest.raises(TagListError) as exc_info:
            await make_client(handler).list_tags("https://api.github.com/", "acme/widget")
        assert exc_info.value.kind is TagFetchFailure.TRANSIENT

    @pytest.mark.asyncio
    async def test_malformed_second_page_is_transient(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params.get("page") == "2":
                return httpx.Response(200, text="upstream timeout")
            return httpx.Response(
                200,
                json=[{"name": "v1.0.0"}],
                headers={
                    "link": '<https://api.github.com/repos/acme/widget/tags?page=2>; rel="next"'
                },
            )

        with pytest.raises(TagListError) as exc_info:
            await make_client(handler).list_tags("https://api.github.com/", "acme/widget")
        assert exc_info.value.kind is TagFetchFailure.TRANSIENT


class TestParseNextLink:
    def test_empty_header(self) -> None:
        assert GitHubTagClient._parse_next_link("") is None

    def test_no_next(self) -> None:
        header = '<https://api.github.com/x?page=1>; rel="prev"'
        assert GitHubTagClient._parse_next_link(header) is None

    def test_next(self) -> None:
        header = (
            '<https://api.github.com/x?page=1>; rel="prev", '
            '<https://api.github.com/x?page=3>; rel="next"'
        )
        assert GitHubTagClient._parse_next_link(header) == "https://api.github.com/x?page=3"


class TestMockTagClient:
    @pytest.mark.asyncio
    async def test_returns_tags_and_records_calls(self) -> None:
        client = MockTagClient(tags={"acme/widget": ["v1.0.0"]})
        assert await client.list_tags("https://api.github.com/", "acme/widget") == ["v1.0.0"]
        assert await client.list_tags("https://api.github.com/", "acme/other") == []
        assert len(client.calls) == 2

    @pytest.mark.asyncio
    async def test_raises_configured_error(self) -> None:
        error = TagListError(TagFetchFailure.TRANSIENT, "boom")
        client = MockTagClient(error=error)
        with pytest.raises(TagListError):
            await client.list_tags("https://api.github.com/", "acme/widget")
