"""Image result domain entity."""

from dataclasses import dataclass

from .cache_status import CacheStatus


@dataclass(frozen=True)
class ImageResultEntity:
    """What the service hands back to the HTTP layer.

    Attributes:
        data: Image bytes to send
        content_type: MIME type of ``data``
        cache_status: Which path produced the bytes
        cache_key: Key of the request that was served
        image_format: Format of ``data``, None when the bytes were not transformed
    """

    data: bytes
    content_type: str
    cache_status: CacheStatus
    cache_key: str
    image_format: str | None = None
