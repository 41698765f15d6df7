"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It selects the testing environment before any settings are imported so no
developer .env file leaks into the run.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"

# Never reach the real upstream from tests
os.environ.setdefault("UPSTREAM_API_BASE_URL", "https://api.github.test")
os.environ.setdefault("UPSTREAM_RAW_BASE_URL", "https://raw.github.test")
os.environ.setdefault("APP_VERSIONS_FILE", "versions.test.json")

import pytest

from gosum_validator.adapters.upstream.base import AbstractUpstreamClient
from gosum_validator.core.errors import UpstreamAppError
from gosum_validator.schemas.versions import DependencySet


@pytest.fixture
def reference_table() -> dict[str, DependencySet]:
    """Two releases: one with pinned modules and one without any."""
    return {
        "v1.3.0": DependencySet(
            go_version="1.15.8",
            modules={
                "github.com/gin-gonic/gin": "v1.6.3",
                "golang.org/x/net": "v0.0.0-20200822124328-c89045814202",
            },
        ),
        "v0.1.0": DependencySet(go_version="1.14", modules={}),
    }


GIN_SUM = (
    b"github.com/gin-gonic/gin v1.6.2 h1:aaa=\n"
    b"github.com/gin-gonic/gin v1.6.2/go.mod h1:bbb=\n"
    b"github.com/gin-gonic/gin v1.6.3 h1:ccc=\n"
    b"github.com/gin-gonic/gin v1.6.3/go.mod h1:ddd=\n"
    b"golang.org/x/net v0.0.0-20200822124328-c89045814202/go.mod h1:eee=\n"
)


class FakeUpstream(AbstractUpstreamClient):
    """In-memory upstream: tags map to lockfile bytes, or to None for failures."""

    def __init__(self, lockfiles: dict[str, bytes | None], *, tags_fail: bool = False) -> None:
        self.lockfiles = lockfiles
        self.tags_fail = tags_fail
        self.closed = False
        self.fetched: list[str] = []

    def list_tags(self) -> list[str]:
        if self.tags_fail:
            raise UpstreamAppError(code="upstream_unreachable", message="Upstream request failed")
        return list(self.lockfiles)

    def fetch_lockfile(self, tag: str) -> bytes:
        self.fetched.append(tag)
        data = self.lockfiles[tag]
        if data is None:
            raise UpstreamAppError(code="upstream_bad_status", message="Upstream returned HTTP 404")
        return data

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def gin_sum() -> bytes:
    """go.sum with a duplicated module and a go.mod-only entry."""
    return GIN_SUM


@pytest.fixture
def fake_upstream():
    """Factory for in-memory upstream clients."""
    return FakeUpstream
