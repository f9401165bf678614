"""Engine components: extract → batch → fan out → aggregate."""

from .aggregator import AuditSummary, ServiceTally, aggregate
from .fanout import query_all, query_batch, query_service
from .fetcher import (
    AuditError,
    CatalogError,
    FingerprintFetcher,
    FingerprintRequestError,
    build_client,
)
from .fingerprints import Batch, build_batches, chunked, extract_fingerprints
from .models import BatchOutcome, ExactMatch, FingerprintInfo, LatestFile, Module, Package

__all__ = [
    "AuditError",
    "AuditSummary",
    "Batch",
    "BatchOutcome",
    "CatalogError",
    "ExactMatch",
    "FingerprintFetcher",
    "FingerprintInfo",
    "FingerprintRequestError",
    "LatestFile",
    "Module",
    "Package",
    "ServiceTally",
    "aggregate",
    "build_batches",
    "build_client",
    "chunked",
    "extract_fingerprints",
    "query_all",
    "query_batch",
    "query_service",
]
