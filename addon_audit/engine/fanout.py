"""Concurrent fingerprint lookups against both services.

Every (service, batch) request runs as its own task. A task converts its own
failure into a failed :class:`BatchOutcome` before the join, so one bad batch
never cancels its siblings or the other service's requests.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Iterable, Sequence

import structlog

from ..services import ALL_SERVICES, ServiceChoice
from .fetcher import FingerprintFetcher, FingerprintRequestError
from .fingerprints import Batch
from .models import BatchOutcome

OutcomeCallback = Callable[[BatchOutcome], None]

logger = structlog.get_logger("addon_audit.fanout")


async def query_batch(
    fetcher: FingerprintFetcher,
    service: ServiceChoice,
    index: int,
    batch: Batch,
    on_outcome: OutcomeCallback | None = None,
) -> BatchOutcome:
    outcome = BatchOutcome(service=service, index=index, fingerprint_count=len(batch))
    try:
        outcome.result = await fetcher.fetch_matches(service, batch)
    except FingerprintRequestError as exc:
        outcome.error = exc.message
        logger.warning(
            "fingerprint_request_failed",
            service=service.label,
            batch=index,
            kind=exc.kind,
            error=exc.message,
        )
    else:
        logger.debug(
            "fingerprint_request_done",
            service=service.label,
            batch=index,
            exact_matches=len(outcome.result.exact_matches),
        )
    if on_outcome is not None:
        on_outcome(outcome)
    return outcome


async def query_service(
    fetcher: FingerprintFetcher,
    service: ServiceChoice,
    batches: Sequence[Batch],
    on_outcome: OutcomeCallback | None = None,
) -> list[BatchOutcome]:
    """Send every batch to one service at once; outcomes keep batch order."""

    tasks = [
        query_batch(fetcher, service, index, batch, on_outcome)
        for index, batch in enumerate(batches)
    ]
    return list(await asyncio.gather(*tasks))


async def query_all(
    fetcher: FingerprintFetcher,
    batches: Sequence[Batch],
    services: Iterable[ServiceChoice] = ALL_SERVICES,
    on_outcome: OutcomeCallback | None = None,
) -> dict[ServiceChoice, list[BatchOutcome]]:
    selected = list(dict.fromkeys(services))
    groups = await asyncio.gather(
        *(query_service(fetcher, service, batches, on_outcome) for service in selected)
    )
    return dict(zip(selected, groups))


__all__ = ["OutcomeCallback", "query_all", "query_batch", "query_service"]
