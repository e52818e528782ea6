"""Repository layer for data access and external collaborators.

This layer abstracts external dependencies (filesystem, HTTP origins,
the image codec) behind protocol-based interfaces. This enables:
- Easy swapping of implementations (filesystem → object storage, Pillow → libvips, etc.)
- Unit testing with fake implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from image_cache.protocols import BlobStore, ImageFetcher, ImageTransformer, MetadataIndex

from .file_repository import FileCacheRepository
from .httpx_image_fetcher import HttpxImageFetcher
from .memory_cache import MemoryCache
from .metadata_repository import JsonMetadataIndex
from .pillow_image_transformer import PillowImageTransformer

__all__ = [
    "BlobStore",
    "ImageFetcher",
    "ImageTransformer",
    "MetadataIndex",
    "FileCacheRepository",
    "HttpxImageFetcher",
    "JsonMetadataIndex",
    "MemoryCache",
    "PillowImageTransformer",
]
