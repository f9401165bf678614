"""Fingerprint extraction and batching for catalog packages."""

from __future__ import annotations

from itertools import chain
from typing import Iterable, Iterator, Sequence, TypeVar

from .models import Package

T = TypeVar("T")

Batch = frozenset[int]


def extract_fingerprints(packages: Iterable[Package]) -> list[list[int]]:
    """Return one fingerprint list per package, in catalog order.

    Within a package, files keep their order and modules keep theirs. Nothing
    is deduplicated here.
    """

    return [
        [module.fingerprint for file in package.latest_files for module in file.modules]
        for package in packages
    ]


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    if size < 1:
        raise ValueError("batch size must be >= 1")
    for start in range(0, len(items), size):
        yield items[start : start + size]


def build_batches(package_fingerprints: Sequence[Sequence[int]], batch_size: int) -> list[Batch]:
    """Group ``batch_size`` packages per request and dedupe within each group.

    Chunking works on packages, not fingerprints, so a fingerprint shared by
    packages in different chunks appears in each of those batches.
    """

    return [
        frozenset(chain.from_iterable(chunk))
        for chunk in chunked(package_fingerprints, batch_size)
    ]


__all__ = ["Batch", "build_batches", "chunked", "extract_fingerprints"]
