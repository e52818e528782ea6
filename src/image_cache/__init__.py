"""Image Cache - Remote image transformation behind a two-tier cache.

This package provides a layered architecture for serving resized and
re-encoded remote images:

Layers:
    - protocols: Interface contracts (BlobStore, MetadataIndex, ImageFetcher, ImageTransformer)
    - repositories: Memory tier, filesystem tier, metadata index, httpx and Pillow collaborators
    - services: Request orchestration, single-flight and degradation
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from image_cache import derive_cache_key

    key = derive_cache_key("https://example.com/a.png", 200, 70, "webp")
    ```

For HTTP API:
    ```python
    from image_cache.api.app import app
    ```
"""

from image_cache.config import get_settings, settings
from image_cache.dto import ProcessImageRequest
from image_cache.entities import (
    CacheEntryEntity,
    CacheStatus,
    ImageRequestEntity,
    ImageResultEntity,
    MetadataRecordEntity,
)
from image_cache.errors import (
    EmptyUpstreamResponseError,
    FetchFailedError,
    ImageCacheError,
    InvalidRequestError,
    StorageError,
    TransformFailedError,
)
from image_cache.fingerprint import derive_cache_key, normalize_request
from image_cache.handlers import ImageHandler
from image_cache.protocols import BlobStore, ImageFetcher, ImageTransformer, MetadataIndex
from image_cache.repositories import (
    FileCacheRepository,
    HttpxImageFetcher,
    JsonMetadataIndex,
    MemoryCache,
    PillowImageTransformer,
)
from image_cache.services import DegradationPolicy, ImageService, SingleFlight

__all__ = [
    # Configuration
    "settings",
    "get_settings",
    # Fingerprinting
    "derive_cache_key",
    "normalize_request",
    # Protocols (interfaces)
    "BlobStore",
    "ImageFetcher",
    "ImageTransformer",
    "MetadataIndex",
    # Services (business logic)
    "ImageService",
    "DegradationPolicy",
    "SingleFlight",
    # Handlers (HTTP)
    "ImageHandler",
    # Repositories (data access)
    "MemoryCache",
    "FileCacheRepository",
    "JsonMetadataIndex",
    "HttpxImageFetcher",
    "PillowImageTransformer",
    # Entities (domain models)
    "CacheEntryEntity",
    "CacheStatus",
    "ImageRequestEntity",
    "ImageResultEntity",
    "MetadataRecordEntity",
    # DTOs (API contracts)
    "ProcessImageRequest",
    # Errors
    "ImageCacheError",
    "InvalidRequestError",
    "FetchFailedError",
    "EmptyUpstreamResponseError",
    "TransformFailedError",
    "StorageError",
]
