"""Persistent cache storage protocol.

Defines the interface for the durable tier of the image cache. Entries
are addressed by (namespace, cache key) and are never overwritten with
different content.

Implementations can include:
- Local filesystem (default)
- Network filesystems shared between processes
- Object storage buckets
"""

from typing import Protocol, runtime_checkable

from image_cache.entities import CacheEntryEntity


@runtime_checkable
class BlobStore(Protocol):
    """Protocol for persistent key -> image stores."""

    def exists(self, namespace: str, key: str) -> bool:
        """Check whether an entry is stored.

        Args:
            namespace: Tenant namespace (or the global namespace)
            key: Cache key

        Returns:
            True if the entry exists, False otherwise
        """
        ...

    def read(self, namespace: str, key: str) -> CacheEntryEntity:
        """Read a stored entry.

        Args:
            namespace: Tenant namespace
            key: Cache key

        Returns:
            The stored entry

        Raises:
            StorageError: If the entry is missing or unreadable
        """
        ...

    def write(self, namespace: str, key: str, entry: CacheEntryEntity) -> None:
        """Store an entry, creating the namespace if needed.

        Args:
            namespace: Tenant namespace
            key: Cache key
            entry: Bytes and format to store

        Raises:
            StorageError: If the entry could not be written
        """
        ...

    def count(self, namespace: str) -> int:
        """Count stored entries in a namespace."""
        ...

    def health_check(self) -> bool:
        """Check if the storage root is writable."""
        ...
