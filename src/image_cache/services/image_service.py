"""Image service for core business logic.

This service orchestrates a request through the cache tiers and the
external collaborators:

    key derivation -> memory -> persistent -> URL fallback (tenant mode)
        -> fetch -> transform (or degrade) -> populate both tiers

Each step either answers the request or falls through to the next one.
Nothing is retried.
"""

import asyncio
import logging
import time

from image_cache.config import settings
from image_cache.entities import (
    CacheEntryEntity,
    CacheStatus,
    FetchedImageEntity,
    ImageRequestEntity,
    ImageResultEntity,
    MetadataRecordEntity,
)
from image_cache.entities.metadata_record import ORIGINAL
from image_cache.errors import StorageError, TransformFailedError
from image_cache.fingerprint import normalize_request, tenant_namespace
from image_cache.formats import resolve_format
from image_cache.models import PerformanceMetrics
from image_cache.protocols import BlobStore, ImageFetcher, ImageTransformer, MetadataIndex
from image_cache.repositories import MemoryCache
from image_cache.services.degradation import DegradationPolicy
from image_cache.services.single_flight import SingleFlight

logger = logging.getLogger(__name__)


class ImageService:
    """Core image caching and transformation service.

    This service depends on PROTOCOLS, not concrete implementations:
    - BlobStore: can be the local filesystem, a shared volume, object storage
    - MetadataIndex: JSON files, a database table, ...
    - ImageFetcher / ImageTransformer: httpx and Pillow by default

    Example:
        ```python
        from image_cache.repositories import (
            FileCacheRepository, HttpxImageFetcher, JsonMetadataIndex,
            MemoryCache, PillowImageTransformer,
        )
        from image_cache.services import ImageService

        files = FileCacheRepository.create()
        service = ImageService.create(
            memory_cache=MemoryCache(capacity=100),
            blob_store=files,
            metadata_index=JsonMetadataIndex(files),
            fetcher=HttpxImageFetcher.create(),
            transformer=PillowImageTransformer.create(),
        )

        result = await service.process("https://example.com/a.png", width=200)
        print(result.cache_status)  # CacheStatus.MISS
        ```
    """

    def __init__(
        self,
        memory_cache: MemoryCache,
        blob_store: BlobStore,
        metadata_index: MetadataIndex,
        fetcher: ImageFetcher,
        transformer: ImageTransformer | None,
        degradation: DegradationPolicy | None = None,
        multi_tenant: bool | None = None,
        default_format: str | None = None,
        default_quality: int | None = None,
        transform_timeout: float | None = None,
    ) -> None:
        """Initialize the image service.

        Args:
            memory_cache: Process-local first tier (required).
            blob_store: Persistent second tier (required).
            metadata_index: Per-namespace record of persisted entries (required).
            fetcher: Origin fetcher (required).
            transformer: Image codec. None, or one whose availability check
                fails, makes every miss degrade.
            degradation: Policy applied when a transform cannot complete.
            multi_tenant: Require a tenant and enable URL fallback. Defaults to settings.
            default_format: Format used when none is requested. Defaults to settings.
            default_quality: Quality used when none is requested. Defaults to settings.
            transform_timeout: Seconds allowed for one transform. Defaults to settings.
        """
        self._memory = memory_cache
        self._store = blob_store
        self._index = metadata_index
        self._fetcher = fetcher
        self._degradation = degradation or DegradationPolicy()
        self._multi_tenant = settings.multi_tenant if multi_tenant is None else multi_tenant
        self._default_format = default_format or settings.default_format
        self._default_quality = default_quality or settings.default_quality
        self._transform_timeout = transform_timeout or settings.transform_timeout_seconds
        self._flights = SingleFlight()
        self._metrics = PerformanceMetrics()

        if transformer is not None and not transformer.is_available():
            logger.warning("[ImageService] Transformer unavailable, all misses will be degraded")
            transformer = None
        self._transformer = transformer

    @classmethod
    def create(
        cls,
        memory_cache: MemoryCache,
        blob_store: BlobStore,
        metadata_index: MetadataIndex,
        fetcher: ImageFetcher,
        transformer: ImageTransformer | None,
        multi_tenant: bool | None = None,
    ) -> "ImageService":
        """Factory method to create ImageService with settings defaults.

        Args:
            memory_cache: Process-local first tier.
            blob_store: Persistent second tier.
            metadata_index: Per-namespace metadata index.
            fetcher: Origin fetcher.
            transformer: Image codec, or None if unavailable.
            multi_tenant: Tenant mode. If None, uses settings.

        Returns:
            Configured ImageService instance
        """
        return cls(
            memory_cache=memory_cache,
            blob_store=blob_store,
            metadata_index=metadata_index,
            fetcher=fetcher,
            transformer=transformer,
            multi_tenant=multi_tenant,
        )

    async def process(
        self,
        url: str | None,
        width: int | None = None,
        quality: int | None = None,
        image_format: str | None = None,
        tenant: str | None = None,
    ) -> ImageResultEntity:
        """Serve a transformed image, using the caches where possible.

        Args:
            url: Source image URL
            width: Target width; absent or non-positive keeps the original
            quality: Encoder quality, clamped to 1..100
            image_format: Target format. Defaults to the configured format.
            tenant: Tenant identifier, required in multi-tenant mode

        Returns:
            ImageResultEntity tagged with the cache status that served it

        Raises:
            InvalidRequestError: Before any I/O, on bad parameters
            FetchFailedError: If the origin could not provide the image
        """
        start_time = time.time()

        request = normalize_request(
            url,
            width,
            quality,
            image_format,
            tenant,
            multi_tenant=self._multi_tenant,
            default_format=self._default_format,
            default_quality=self._default_quality,
        )
        result = await self._serve(request)

        self._metrics.record(result.cache_status, (time.time() - start_time) * 1000)
        logger.info(
            f"[ImageService] {result.cache_status.value} {request.url[:80]} "
            f"width={request.width or ORIGINAL} quality={request.quality} "
            f"format={request.image_format} ({len(result.data)} bytes)"
        )
        return result

    async def _serve(self, request: ImageRequestEntity) -> ImageResultEntity:
        namespace = tenant_namespace(request.tenant)
        key = request.cache_key
        memory_key = f"{namespace}:{key}"

        entry = self._memory.get(memory_key)
        if entry is not None:
            return self._result(entry, CacheStatus.HIT, key)

        entry = self._read_persistent(namespace, key)
        if entry is not None:
            self._memory.put(memory_key, entry)
            return self._result(entry, CacheStatus.DISK_HIT, key)

        if self._multi_tenant:
            entry = self._lookup_by_url(namespace, request.url)
            if entry is not None:
                return self._result(entry, CacheStatus.URL_HIT, key)

        return await self._flights.do(
            memory_key,
            lambda: self._fetch_and_transform(request, namespace, memory_key),
        )

    def _read_persistent(self, namespace: str, key: str) -> CacheEntryEntity | None:
        try:
            if not self._store.exists(namespace, key):
                return None
            return self._store.read(namespace, key)
        except StorageError as e:
            logger.warning(f"[ImageService] Persistent read failed, treating as miss: {e}")
            return None

    def _lookup_by_url(self, namespace: str, url: str) -> CacheEntryEntity | None:
        """Serve any earlier transformation of ``url`` in this namespace."""
        try:
            record = self._index.find_by_url(namespace, url)
        except StorageError as e:
            logger.warning(f"[ImageService] Metadata lookup failed: {e}")
            return None
        if record is None:
            return None

        # Index entries whose file is gone are a plain miss
        entry = self._read_persistent(namespace, record.cache_key)
        if entry is None:
            logger.debug(f"[ImageService] Stale metadata for {record.cache_key}, ignoring")
            return None
        return CacheEntryEntity(data=entry.data, image_format=record.image_format)

    async def _fetch_and_transform(
        self,
        request: ImageRequestEntity,
        namespace: str,
        memory_key: str,
    ) -> ImageResultEntity:
        fetch_start = time.time()
        fetched = await self._fetcher.fetch(request.url)
        self._metrics.record_fetch((time.time() - fetch_start) * 1000)

        try:
            data = await self._transform(request, fetched)
        except TransformFailedError as e:
            return self._degradation.apply(request, fetched, e)

        entry = CacheEntryEntity(data=data, image_format=request.image_format)
        self._populate(request, namespace, memory_key, entry)
        return self._result(entry, CacheStatus.MISS, request.cache_key)

    async def _transform(self, request: ImageRequestEntity, fetched: FetchedImageEntity) -> bytes:
        if self._transformer is None:
            raise TransformFailedError("Image transformer is not available")

        transform_start = time.time()
        try:
            data = await asyncio.wait_for(
                asyncio.to_thread(
                    self._transformer.transform,
                    fetched.data,
                    request.width,
                    request.quality,
                    request.image_format,
                ),
                timeout=self._transform_timeout,
            )
        except asyncio.TimeoutError as e:
            raise TransformFailedError(
                f"Image processing timed out after {self._transform_timeout}s"
            ) from e
        except TransformFailedError:
            raise
        except Exception as e:
            raise TransformFailedError(f"Image processing failed: {e}") from e
        finally:
            self._metrics.record_transform((time.time() - transform_start) * 1000)

        if not data:
            raise TransformFailedError("Image processing failed to produce output")
        return data

    def _populate(
        self,
        request: ImageRequestEntity,
        namespace: str,
        memory_key: str,
        entry: CacheEntryEntity,
    ) -> None:
        """Write a fresh result to both tiers. Storage failures are logged only."""
        try:
            self._store.write(namespace, request.cache_key, entry)
        except StorageError as e:
            logger.error(f"[ImageService] Failed to persist {request.cache_key}: {e}")
        else:
            record = MetadataRecordEntity(
                cache_key=request.cache_key,
                source_url=request.url,
                requested_width=request.width or ORIGINAL,
                requested_quality=request.quality,
                image_format=request.image_format,
            )
            try:
                self._index.record(namespace, request.cache_key, record)
            except StorageError as e:
                logger.error(f"[ImageService] Failed to record metadata for {request.cache_key}: {e}")

        self._memory.put(memory_key, entry)

    @staticmethod
    def _result(entry: CacheEntryEntity, status: CacheStatus, key: str) -> ImageResultEntity:
        fmt = resolve_format(entry.image_format)
        return ImageResultEntity(
            data=entry.data,
            content_type=fmt.content_type if fmt else f"image/{entry.image_format}",
            cache_status=status,
            cache_key=key,
            image_format=entry.image_format,
        )

    def get_stats(self) -> dict:
        """Get service statistics.

        Returns:
            Dictionary with memory tier, storage and request statistics
        """
        return {
            "memory": self._memory.get_stats(),
            "in_flight": len(self._flights),
            "multi_tenant": self._multi_tenant,
            "transformer_available": self._transformer is not None,
            "requests": self._metrics.to_dict(),
        }

    def is_healthy(self) -> bool:
        """Check if the persistent tier is usable.

        A missing transformer does not make the service unhealthy; misses
        are then served degraded.
        """
        return self._store.health_check()

    async def close(self) -> None:
        """Release collaborator resources."""
        await self._fetcher.close()

    @property
    def transformer_available(self) -> bool:
        return self._transformer is not None

    @property
    def multi_tenant(self) -> bool:
        return self._multi_tenant

    @property
    def memory_cache(self) -> MemoryCache:
        """Get the underlying memory tier (for testing)."""
        return self._memory

    @property
    def metrics(self) -> PerformanceMetrics:
        return self._metrics
