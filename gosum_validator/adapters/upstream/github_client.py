"""GitHub upstream client adapter."""

from __future__ import annotations

import logging

import httpx
from pydantic import TypeAdapter, ValidationError

from gosum_validator.adapters.rate_limit.base import AbstractFetcher, FetchRequest
from gosum_validator.adapters.upstream.base import AbstractUpstreamClient
from gosum_validator.core.errors import UpstreamAppError
from gosum_validator.schemas.versions import Tag

logger = logging.getLogger(__name__)

_TAGS_ADAPTER = TypeAdapter(list[Tag])


class GitHubClient(AbstractUpstreamClient):
    """Reads release tags and raw lockfiles of one GitHub repository.

    Every request goes through the injected fetcher, so the caller decides how
    aggressively the API is hit.
    """

    def __init__(
        self,
        fetcher: AbstractFetcher,
        *,
        repository: str,
        user_agent: str,
        api_base_url: str = "https://api.github.com",
        raw_base_url: str = "https://raw.githubusercontent.com",
        lockfile_name: str = "go.sum",
    ) -> None:
        """Initialize the client.

        Args:
            fetcher: Gate used for every outbound GET.
            repository: Repository in ``owner/name`` form.
            user_agent: Identifying User-Agent sent with each request.
            api_base_url: REST API root serving ``/repos/{repo}/tags``.
            raw_base_url: Root serving raw files by ref.
            lockfile_name: Lockfile path inside the repository.
        """
        self.fetcher = fetcher
        self.repository = repository.strip("/")
        self.user_agent = user_agent
        self.api_base_url = api_base_url.rstrip("/")
        self.raw_base_url = raw_base_url.rstrip("/")
        self.lockfile_name = lockfile_name.lstrip("/")

    @property
    def tags_url(self) -> str:
        return f"{self.api_base_url}/repos/{self.repository}/tags"

    def lockfile_url(self, tag: str) -> str:
        return f"{self.raw_base_url}/{self.repository}/{tag}/{self.lockfile_name}"

    def _get(self, url: str) -> httpx.Response:
        request = FetchRequest(url=url, headers={"User-Agent": self.user_agent})
        try:
            response = self.fetcher.fetch(request)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpstreamAppError(
                code="upstream_bad_status",
                message=f"Upstream returned HTTP {exc.response.status_code}",
                details={"url": url, "http_status": exc.response.status_code},
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamAppError(
                code="upstream_unreachable",
                message=f"Upstream request failed: {exc}",
                details={"url": url},
            ) from exc
        return response

    def list_tags(self) -> list[str]:
        response = self._get(self.tags_url)
        try:
            tags = _TAGS_ADAPTER.validate_json(response.content)
        except ValidationError as exc:
            raise UpstreamAppError(
                code="upstream_invalid_tags",
                message="Upstream tags listing could not be decoded",
                details={"url": self.tags_url},
            ) from exc

        logger.info(
            "upstream.tags_listed",
            extra={"repository": self.repository, "tags": len(tags)},
        )
        return [tag.name for tag in tags]

    def fetch_lockfile(self, tag: str) -> bytes:
        response = self._get(self.lockfile_url(tag))
        logger.debug(
            "upstream.lockfile_fetched",
            extra={"release": tag, "size_bytes": len(response.content)},
        )
        return response.content

    def close(self) -> None:
        self.fetcher.close()
