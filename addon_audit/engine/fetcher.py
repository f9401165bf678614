"""Async HTTP access to the addon catalog and the fingerprint services."""

from __future__ import annotations

from typing import Iterable

import httpx
import structlog
from pydantic import ValidationError

from ..config import AuditConfig
from ..logging_conf import component_logger
from ..services import ServiceChoice
from .models import PACKAGE_LIST, FingerprintInfo, Package

JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


class AuditError(RuntimeError):
    """Base error for audit runs."""


class CatalogError(AuditError):
    """The package catalog could not be fetched or decoded."""


class FingerprintRequestError(AuditError):
    """A single fingerprint lookup failed."""

    TRANSPORT = "transport"
    DECODE = "decode"

    def __init__(self, service: ServiceChoice, kind: str, message: str) -> None:
        super().__init__(message)
        self.service = service
        self.kind = kind
        self.message = message


def build_client(config: AuditConfig) -> httpx.AsyncClient:
    """Create the client shared by every request of a run."""

    transport = config.transport
    # httpx caps the pool globally, so scale the per-host cap by host count
    hosts = max(1, len(config.endpoint_hosts()))
    limits = httpx.Limits(
        max_connections=transport.max_host_connections * hosts,
        max_keepalive_connections=transport.max_host_connections * hosts,
    )
    timeout = httpx.Timeout(transport.read_timeout, connect=transport.connect_timeout)
    return httpx.AsyncClient(
        limits=limits,
        timeout=timeout,
        follow_redirects=True,
        headers={"User-Agent": transport.user_agent},
    )


def encode_request(service: ServiceChoice, fingerprints: Iterable[int]) -> bytes:
    return service.encode_body(fingerprints)


class FingerprintFetcher:
    """Issue catalog and fingerprint requests over one shared client."""

    def __init__(
        self,
        config: AuditConfig,
        client: httpx.AsyncClient | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or component_logger("fetcher")
        self._owns_client = client is None
        self._client = client or build_client(config)

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def __aenter__(self) -> "FingerprintFetcher":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch_catalog(self) -> list[Package]:
        query = self.config.catalog
        self.logger.debug("catalog_request", url=query.search_url, **query.params())
        try:
            response = await self._client.get(query.search_url, params=query.params())
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise CatalogError(f"catalog request failed: {exc}") from exc
        try:
            return PACKAGE_LIST.validate_json(response.content)
        except ValidationError as exc:
            raise CatalogError(f"failed to deserialize catalog: {exc}") from exc

    async def fetch_matches(
        self, service: ServiceChoice, fingerprints: Iterable[int]
    ) -> FingerprintInfo:
        body = encode_request(service, fingerprints)
        try:
            response = await self._client.post(
                self.config.endpoint_for(service),
                content=body,
                headers=JSON_HEADERS,
            )
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FingerprintRequestError(
                service,
                FingerprintRequestError.TRANSPORT,
                f"request failed: {_describe(exc)}",
            ) from exc
        try:
            return FingerprintInfo.model_validate_json(response.content)
        except ValidationError as exc:
            raise FingerprintRequestError(
                service,
                FingerprintRequestError.DECODE,
                "failed to deserialize fingerprint request, got body: "
                + self._clip(response.text),
            ) from exc

    def _clip(self, text: str) -> str:
        limit = self.config.error_body_limit
        if len(text) <= limit:
            return text
        return text[:limit] + "..."


def _describe(exc: Exception) -> str:
    message = str(exc)
    return message or type(exc).__name__


__all__ = [
    "AuditError",
    "CatalogError",
    "FingerprintFetcher",
    "FingerprintRequestError",
    "build_client",
    "encode_request",
]
