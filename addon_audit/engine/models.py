"""Pydantic models for the addon catalog and fingerprint API payloads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from ..services import ServiceChoice

Fingerprint = Annotated[int, Field(ge=0, le=0xFFFFFFFF)]


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Module(_ApiModel):
    """A folder shipped by a file, identified by its content fingerprint."""

    foldername: str = ""
    fingerprint: Fingerprint


class LatestFile(_ApiModel):
    id: int = 0
    file_name: str = Field(default="", alias="fileName")
    modules: list[Module] = Field(default_factory=list)


class Package(_ApiModel):
    """Catalog entry returned by the addon search endpoint."""

    id: int
    name: str = ""
    latest_files: list[LatestFile] = Field(default_factory=list, alias="latestFiles")


class ExactMatch(_ApiModel):
    """Package recognised by a fingerprint service; extra fields pass through."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int


class FingerprintInfo(_ApiModel):
    """Response body of a fingerprint lookup."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    exact_matches: list[ExactMatch] = Field(alias="exactMatches")
    # Only exactMatches is relied on; the rest is passed through as sent, nulls included.
    exact_fingerprints: Any = Field(default=None, alias="exactFingerprints")
    partial_matches: Any = Field(default=None, alias="partialMatches")
    partial_match_fingerprints: Any = Field(default=None, alias="partialMatchFingerprints")
    installed_fingerprints: Any = Field(default=None, alias="installedFingerprints")
    unmatched_fingerprints: Any = Field(default=None, alias="unmatchedFingerprints")


PACKAGE_LIST = TypeAdapter(list[Package])


@dataclass(slots=True)
class BatchOutcome:
    """Result of one (service, batch) request: either a response or an error."""

    service: ServiceChoice
    index: int
    fingerprint_count: int
    result: FingerprintInfo | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.result is not None

    @property
    def exact_matches(self) -> list[ExactMatch]:
        if self.result is None:
            return []
        return self.result.exact_matches


__all__ = [
    "BatchOutcome",
    "ExactMatch",
    "Fingerprint",
    "FingerprintInfo",
    "LatestFile",
    "Module",
    "PACKAGE_LIST",
    "Package",
]
