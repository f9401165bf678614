"""Audit orchestrator wiring catalog fetch, batching, fan-out and aggregation."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Iterable, Sequence

import httpx
import structlog

from .config import AuditConfig
from .engine import (
    AuditSummary,
    BatchOutcome,
    CatalogError,
    FingerprintFetcher,
    Package,
    aggregate,
    build_batches,
    extract_fingerprints,
    query_all,
)
from .logging_conf import component_logger
from .services import ALL_SERVICES, ServiceChoice
from .ui import BatchProgress, ProgressActivity


@dataclass(slots=True)
class AuditReport:
    """Everything one run produced; counts live in ``summary``."""

    total_packages: int
    batch_count: int
    summary: AuditSummary
    outcomes: dict[ServiceChoice, list[BatchOutcome]] = field(default_factory=dict)

    @property
    def failures(self) -> list[BatchOutcome]:
        return [
            outcome
            for service in ALL_SERVICES
            for outcome in self.outcomes.get(service, [])
            if not outcome.ok
        ]

    def as_dict(self) -> dict:
        payload = self.summary.as_dict()
        payload["batches"] = self.batch_count
        payload["failures"] = [
            {"service": outcome.service.value, "batch": outcome.index, "error": outcome.error}
            for outcome in self.failures
        ]
        return payload


class Auditor:
    """Run a full audit of the catalog against both fingerprint services."""

    def __init__(
        self,
        config: AuditConfig,
        client: httpx.AsyncClient | None = None,
        logger: structlog.BoundLogger | None = None,
        services: Iterable[ServiceChoice] = ALL_SERVICES,
    ) -> None:
        self.config = config
        self.client = client
        self.services = tuple(services)
        self.logger = logger or component_logger("orchestrator")

    def run(
        self,
        progress: BatchProgress | None = None,
        activity: ProgressActivity | None = None,
    ) -> AuditReport:
        return asyncio.run(self.run_async(progress=progress, activity=activity))

    async def run_async(
        self,
        progress: BatchProgress | None = None,
        activity: ProgressActivity | None = None,
    ) -> AuditReport:
        async with self._fetcher() as fetcher:
            if activity is not None:
                activity.start("Fetching addon catalog…")
            try:
                packages = await fetcher.fetch_catalog()
            except CatalogError as exc:
                self.logger.error("catalog_fetch_failed", error=str(exc))
                raise
            finally:
                if activity is not None:
                    activity.close()
            self.logger.info(
                "catalog_fetched",
                packages=len(packages),
                url=self.config.catalog.search_url,
            )
            return await self._audit(fetcher, packages, progress)

    async def audit_packages(
        self, packages: Sequence[Package], progress: BatchProgress | None = None
    ) -> AuditReport:
        """Audit an already fetched catalog."""

        async with self._fetcher() as fetcher:
            return await self._audit(fetcher, packages, progress)

    # ------------------------------------------------------------------
    def _fetcher(self) -> FingerprintFetcher:
        return FingerprintFetcher(self.config, client=self.client, logger=self.logger)

    async def _audit(
        self,
        fetcher: FingerprintFetcher,
        packages: Sequence[Package],
        progress: BatchProgress | None,
    ) -> AuditReport:
        batches = build_batches(extract_fingerprints(packages), self.config.batch_size)
        self.logger.info(
            "batches_built",
            batches=len(batches),
            batch_size=self.config.batch_size,
            fingerprints=sum(len(batch) for batch in batches),
        )
        if progress is not None:
            progress.start(self.services, len(batches))
        try:
            outcomes = await query_all(
                fetcher,
                batches,
                services=self.services,
                on_outcome=progress.advance if progress is not None else None,
            )
        finally:
            if progress is not None:
                progress.close()
        summary = aggregate(len(packages), outcomes)
        report = AuditReport(
            total_packages=len(packages),
            batch_count=len(batches),
            summary=summary,
            outcomes=outcomes,
        )
        self.logger.info(
            "audit_complete",
            unique_packages=summary.unique_across_services,
            failures=len(report.failures),
        )
        return report


__all__ = ["AuditReport", "Auditor"]
