"""Merge per-batch outcomes into per-service and cross-service counts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from ..services import ALL_SERVICES, ServiceChoice
from .models import BatchOutcome


@dataclass(slots=True)
class ServiceTally:
    service: ServiceChoice
    package_ids: set[int] = field(default_factory=set)
    # Raw ExactMatch records; a package seen in several batches counts each time
    match_total: int = 0
    succeeded_batches: int = 0
    failed_batches: int = 0

    @property
    def distinct_count(self) -> int:
        return len(self.package_ids)

    def add(self, outcome: BatchOutcome) -> None:
        if not outcome.ok:
            self.failed_batches += 1
            return
        self.succeeded_batches += 1
        for match in outcome.exact_matches:
            self.match_total += 1
            self.package_ids.add(match.id)


@dataclass(slots=True)
class AuditSummary:
    total_packages: int
    tallies: dict[ServiceChoice, ServiceTally]
    unique_package_ids: set[int] = field(default_factory=set)

    @property
    def unique_across_services(self) -> int:
        return len(self.unique_package_ids)

    def tally(self, service: ServiceChoice) -> ServiceTally:
        return self.tallies[service]

    def as_dict(self) -> dict[str, Any]:
        return {
            "total_packages": self.total_packages,
            "unique_across_services": self.unique_across_services,
            "services": {
                service.value: {
                    "distinct_packages": tally.distinct_count,
                    "fingerprint_matches": tally.match_total,
                    "succeeded_batches": tally.succeeded_batches,
                    "failed_batches": tally.failed_batches,
                }
                for service, tally in self.tallies.items()
            },
        }


def aggregate(
    total_packages: int,
    outcomes_by_service: Mapping[ServiceChoice, Iterable[BatchOutcome]],
) -> AuditSummary:
    """Count matches per service and across both services.

    Failed outcomes contribute nothing beyond their failure count.
    """

    tallies = {service: ServiceTally(service) for service in ALL_SERVICES}
    for service, outcomes in outcomes_by_service.items():
        tally = tallies.setdefault(service, ServiceTally(service))
        for outcome in outcomes:
            tally.add(outcome)
    unique: set[int] = set()
    for tally in tallies.values():
        unique |= tally.package_ids
    return AuditSummary(total_packages=total_packages, tallies=tallies, unique_package_ids=unique)


__all__ = ["AuditSummary", "ServiceTally", "aggregate"]
