"""Pydantic schemas for reference dependency sets and version mismatches.

Wire names (``Go``/``Deps`` and ``Name``/``Expected``/``Have``) match the
cached ``versions.json`` format so existing snapshots load unchanged.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

RUNTIME_NAME = "go"


class DependencySet(BaseModel):
    """Pinned dependencies of one release, or of a submitted lockfile."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    go_version: str = Field(
        default="",
        alias="Go",
        description="Go toolchain version the set was resolved with (empty when unknown).",
    )
    modules: Mapping[str, str] = Field(
        default_factory=dict,
        validate_default=True,
        alias="Deps",
        description="Module path to the highest version recorded for it.",
    )

    @field_validator("modules", mode="after")
    @classmethod
    def _freeze_modules(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        # read-only view over a private copy
        return MappingProxyType(dict(value))

    @field_serializer("modules")
    def _dump_modules(self, value: Mapping[str, str]) -> dict[str, str]:
        return dict(value)


class Mismatch(BaseModel):
    """One discrepancy between the reference and the candidate."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., alias="Name", description="Module path, or 'go' for the runtime.")
    expected: str = Field(..., alias="Expected", description="Version in the reference set.")
    actual: str = Field(..., alias="Have", description="Version in the submitted lockfile.")


ReferenceTable = Mapping[str, DependencySet]


class TagCommit(BaseModel):
    sha: str = ""
    url: str = ""


class Tag(BaseModel):
    """A tag record as returned by the upstream tags listing."""

    name: str
    zipball_url: Optional[str] = None
    tarball_url: Optional[str] = None
    commit: Optional[TagCommit] = None
    node_id: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    releases: int = Field(..., description="Number of releases in the reference table.")
