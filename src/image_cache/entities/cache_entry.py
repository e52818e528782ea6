"""Cache entry domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CacheEntryEntity:
    """Transformed image bytes as stored by a cache tier.

    Attributes:
        data: The encoded image
        image_format: Canonical format name of ``data`` (e.g. "webp")
    """

    data: bytes
    image_format: str

    @property
    def size_bytes(self) -> int:
        return len(self.data)
