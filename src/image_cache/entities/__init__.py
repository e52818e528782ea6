"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .cache_entry import CacheEntryEntity
from .cache_status import CacheStatus
from .fetched_image import FetchedImageEntity
from .image_request import ImageRequestEntity
from .image_result import ImageResultEntity
from .metadata_record import MetadataRecordEntity

__all__ = [
    "CacheEntryEntity",
    "CacheStatus",
    "FetchedImageEntity",
    "ImageRequestEntity",
    "ImageResultEntity",
    "MetadataRecordEntity",
]
