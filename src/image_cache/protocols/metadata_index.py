"""Tenant metadata index protocol.

One index per namespace maps cache keys to the record describing how
the entry was produced, and supports reverse lookup by source URL.
"""

from typing import Protocol, runtime_checkable

from image_cache.entities import MetadataRecordEntity


@runtime_checkable
class MetadataIndex(Protocol):
    """Protocol for per-namespace metadata indexes."""

    def record(self, namespace: str, key: str, metadata: MetadataRecordEntity) -> None:
        """Add or replace the record for ``key``.

        Raises:
            StorageError: If the index could not be persisted
        """
        ...

    def get(self, namespace: str, key: str) -> MetadataRecordEntity | None:
        """Return the record for ``key`` if present."""
        ...

    def find_by_url(self, namespace: str, source_url: str) -> MetadataRecordEntity | None:
        """Return the first record produced from ``source_url``.

        The match ignores width, quality and format.
        """
        ...

    def count(self, namespace: str) -> int:
        """Number of records in a namespace."""
        ...
