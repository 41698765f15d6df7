"""Tests for the GitHub upstream adapter and its factory."""

import json

import httpx
import pytest

from gosum_validator.adapters.rate_limit import AbstractFetcher, FetchRequest, TickGatedFetcher
from gosum_validator.adapters.upstream import GitHubClient, create_upstream_client
from gosum_validator.core.config import settings
from gosum_validator.core.errors import UpstreamAppError, ValidationAppError

TAGS_PAYLOAD = [
    {
        "name": "v1.3.0",
        "zipball_url": "https://api.github.com/repos/devopsfaith/krakend-ce/zipball/v1.3.0",
        "tarball_url": "https://api.github.com/repos/devopsfaith/krakend-ce/tarball/v1.3.0",
        "commit": {"sha": "3f1c2a", "url": "https://api.github.com/repos/devopsfaith/krakend-ce/commits/3f1c2a"},
        "node_id": "MDM6UmVmMTIz",
    },
    {"name": "v1.2.0", "commit": {"sha": "9b8e7d", "url": ""}},
]


class DirectFetcher(AbstractFetcher):
    """Fetcher without a gate, recording every request."""

    def __init__(self, handler) -> None:
        self.client = httpx.Client(transport=httpx.MockTransport(handler))
        self.requests: list[FetchRequest] = []
        self.closed = False

    def fetch(self, request: FetchRequest) -> httpx.Response:
        self.requests.append(request)
        return self.client.get(request.url, headers=dict(request.headers))

    def close(self) -> None:
        self.closed = True
        self.client.close()


def _github(handler) -> tuple[GitHubClient, DirectFetcher]:
    fetcher = DirectFetcher(handler)
    client = GitHubClient(
        fetcher,
        repository="devopsfaith/krakend-ce",
        user_agent="gosum-validator-tests",
    )
    return client, fetcher


class TestGitHubClient:
    def test_list_tags_returns_names_in_order(self) -> None:
        client, fetcher = _github(lambda request: httpx.Response(200, json=TAGS_PAYLOAD))

        assert client.list_tags() == ["v1.3.0", "v1.2.0"]
        assert fetcher.requests[0].url == "https://api.github.com/repos/devopsfaith/krakend-ce/tags"
        assert fetcher.requests[0].headers == {"User-Agent": "gosum-validator-tests"}

    def test_fetch_lockfile_uses_raw_url(self) -> None:
        body = b"github.com/gin-gonic/gin v1.6.3 h1:abc=\n"
        client, fetcher = _github(lambda request: httpx.Response(200, content=body))

        assert client.fetch_lockfile("v1.3.0") == body
        assert (
            fetcher.requests[0].url
            == "https://raw.githubusercontent.com/devopsfaith/krakend-ce/v1.3.0/go.sum"
        )

    def test_bad_status_raises_upstream_error(self) -> None:
        client, _ = _github(lambda request: httpx.Response(404, text="404: Not Found"))

        with pytest.raises(UpstreamAppError) as exc:
            client.fetch_lockfile("v9.9.9")
        assert exc.value.code == "upstream_bad_status"
        assert exc.value.details["http_status"] == 404

    def test_transport_error_raises_upstream_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("name resolution failed", request=request)

        client, _ = _github(handler)

        with pytest.raises(UpstreamAppError) as exc:
            client.list_tags()
        assert exc.value.code == "upstream_unreachable"

    def test_rate_limit_payload_is_not_a_tag_list(self) -> None:
        payload = {"message": "API rate limit exceeded for 203.0.113.7."}
        client, _ = _github(lambda request: httpx.Response(200, content=json.dumps(payload)))

        with pytest.raises(UpstreamAppError) as exc:
            client.list_tags()
        assert exc.value.code == "upstream_invalid_tags"

    def test_close_closes_fetcher(self) -> None:
        client, fetcher = _github(lambda request: httpx.Response(200))

        client.close()

        assert fetcher.closed is True


class TestUpstreamFactory:
    def test_builds_gated_github_client(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings.upstream, "repository", "devopsfaith/krakend-ce")
        monkeypatch.setattr(settings.upstream, "fetch_interval_seconds", 42.0)

        client = create_upstream_client()
        try:
            assert isinstance(client, GitHubClient)
            assert isinstance(client.fetcher, TickGatedFetcher)
            assert client.fetcher.interval_seconds == 42.0
            assert client.tags_url.endswith("/repos/devopsfaith/krakend-ce/tags")
        finally:
            client.close()

    def test_rejects_repository_without_owner(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings.upstream, "repository", "krakend-ce")

        with pytest.raises(ValidationAppError) as exc:
            create_upstream_client()
        assert exc.value.code == "upstream_invalid_repository"
