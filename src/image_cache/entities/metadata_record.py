"""Metadata record domain entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

ORIGINAL = "original"


@dataclass(frozen=True)
class MetadataRecordEntity:
    """Description of one persisted cache entry.

    Attributes:
        cache_key: Key of the persisted entry
        source_url: URL the entry was produced from
        requested_width: Width that was requested, or "original"
        requested_quality: Normalized quality used for encoding
        image_format: Format the entry was encoded in
        created_at: When the entry was written (UTC)
    """

    cache_key: str
    source_url: str
    requested_width: int | str
    requested_quality: int
    image_format: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "cache_key": self.cache_key,
            "source_url": self.source_url,
            "requested_width": self.requested_width,
            "requested_quality": self.requested_quality,
            "format": self.image_format,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MetadataRecordEntity":
        """Build a record from its serialized form."""
        return cls(
            cache_key=data["cache_key"],
            source_url=data["source_url"],
            requested_width=data.get("requested_width", ORIGINAL),
            requested_quality=int(data["requested_quality"]),
            image_format=data["format"],
            created_at=datetime.fromisoformat(data["created_at"]),
        )
