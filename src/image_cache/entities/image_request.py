"""Normalized image request entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ImageRequestEntity:
    """A validated transformation request.

    Attributes:
        url: Source image URL
        width: Target width in pixels, None keeps the original width
        quality: Encoder quality, already clamped to 1..100
        image_format: Canonical target format name
        tenant: Tenant identifier, None outside multi-tenant mode
        cache_key: Key derived from the four transformation parameters
    """

    url: str
    width: int | None
    quality: int
    image_format: str
    tenant: str | None
    cache_key: str
