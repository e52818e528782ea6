"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (filesystem → object storage, Pillow → libvips, etc.)
- Unit testing with fake implementations
- Clear separation of concerns

Usage:
    ```python
    from image_cache.protocols import BlobStore, ImageTransformer

    store: BlobStore = FileCacheRepository(root="./tmp")
    transformer: ImageTransformer = PillowImageTransformer()
    ```
"""

from .blob_store import BlobStore
from .image_fetcher import ImageFetcher
from .image_transformer import ImageTransformer
from .metadata_index import MetadataIndex

__all__ = [
    "BlobStore",
    "ImageFetcher",
    "ImageTransformer",
    "MetadataIndex",
]
