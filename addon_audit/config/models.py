"""Pydantic models describing how an audit run is configured."""

from __future__ import annotations

from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel, Field, field_validator, model_validator

from ..services import ALL_SERVICES, ServiceChoice

CURSE_SEARCH_URL = "https://addons-ecs.forgesvc.net/api/v2/addon/search"
DEFAULT_USER_AGENT = "addon-audit/0.1 (+https://github.com/)"


class CurseSort(int, Enum):
    """Sort orders understood by the addon search endpoint."""

    DATE_CREATED = 1
    LAST_UPDATED = 2
    NAME = 3
    POPULARITY = 4
    TOTAL_DOWNLOADS = 5


def _require_http_url(value: str) -> str:
    try:
        parsed = httpx.URL(value)
    except httpx.InvalidURL as exc:
        raise ValueError(f"Invalid URL {value!r}: {exc}") from exc
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ValueError(f"Expected an http(s) URL, got: {value!r}")
    return value


class CatalogQuery(BaseModel):
    """Search request that produces the packages to audit."""

    search_url: str = CURSE_SEARCH_URL
    game_id: int = 1
    sort: CurseSort = CurseSort.POPULARITY
    page_size: int = 500

    @field_validator("search_url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        return _require_http_url(value)

    @field_validator("sort", mode="before")
    @classmethod
    def _coerce_sort(cls, value: Any) -> Any:
        if isinstance(value, str):
            if value.strip().isdigit():
                return int(value)
            try:
                return CurseSort[value.strip().upper().replace("-", "_")]
            except KeyError as exc:
                raise ValueError(f"Unknown sort order: {value}") from exc
        return value

    @model_validator(mode="after")
    def _validate_bounds(self) -> "CatalogQuery":
        if self.game_id < 1:
            raise ValueError("game_id must be >= 1")
        if not 1 <= self.page_size <= 10000:
            raise ValueError("page_size must be between 1 and 10000")
        return self

    def params(self) -> dict[str, int]:
        return {"gameId": self.game_id, "sort": int(self.sort), "pageSize": self.page_size}


class TransportConfig(BaseModel):
    """Connection settings for the shared HTTP client."""

    max_host_connections: int = 3
    connect_timeout: float = 30.0
    # None leaves reads unbounded; only connects are timed out.
    read_timeout: float | None = None
    user_agent: str = DEFAULT_USER_AGENT

    @model_validator(mode="after")
    def _validate_limits(self) -> "TransportConfig":
        if self.max_host_connections < 1:
            raise ValueError("max_host_connections must be >= 1")
        if self.connect_timeout <= 0:
            raise ValueError("connect_timeout must be > 0")
        if self.read_timeout is not None and self.read_timeout <= 0:
            raise ValueError("read_timeout must be > 0 when set")
        return self


def _default_endpoints() -> dict[ServiceChoice, str]:
    return {service: service.default_url for service in ALL_SERVICES}


class AuditConfig(BaseModel):
    """Everything a single audit run needs."""

    catalog: CatalogQuery = Field(default_factory=CatalogQuery)
    transport: TransportConfig = Field(default_factory=TransportConfig)
    batch_size: int = 25
    endpoints: dict[ServiceChoice, str] = Field(default_factory=_default_endpoints)
    error_body_limit: int = 500

    @field_validator("endpoints", mode="after")
    @classmethod
    def _fill_endpoints(cls, value: dict[ServiceChoice, str]) -> dict[ServiceChoice, str]:
        merged = _default_endpoints()
        for service, url in value.items():
            merged[service] = _require_http_url(url)
        return merged

    @model_validator(mode="after")
    def _validate_sizes(self) -> "AuditConfig":
        if self.batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if self.error_body_limit < 0:
            raise ValueError("error_body_limit must be >= 0")
        return self

    def endpoint_for(self, service: ServiceChoice) -> str:
        return self.endpoints.get(service, service.default_url)

    def endpoint_hosts(self) -> set[str]:
        """Distinct hosts contacted during a run, catalog included."""

        urls = [self.catalog.search_url, *(self.endpoint_for(s) for s in ALL_SERVICES)]
        return {httpx.URL(url).netloc.decode("ascii") for url in urls}


__all__ = [
    "AuditConfig",
    "CURSE_SEARCH_URL",
    "CatalogQuery",
    "CurseSort",
    "TransportConfig",
]
