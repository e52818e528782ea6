"""
Shared fixtures for the image cache tests.

Collaborators that talk to the network are replaced by fakes that
satisfy the same protocols; the Pillow transformer and the filesystem
repositories are used for real against pytest's tmp_path.
"""

import asyncio
import time
from io import BytesIO

import pytest
from PIL import Image

from image_cache.entities import CacheEntryEntity, FetchedImageEntity
from image_cache.errors import FetchFailedError, StorageError
from image_cache.repositories import (
    FileCacheRepository,
    JsonMetadataIndex,
    MemoryCache,
    PillowImageTransformer,
)
from image_cache.services import ImageService

SOURCE_URL = "https://example.com/a.png"


def encode_image(width: int = 400, height: int = 300, mode: str = "RGB", fmt: str = "PNG") -> bytes:
    color = (200, 30, 30, 128) if mode == "RGBA" else (200, 30, 30)
    if mode == "L":
        color = 128
    image = Image.new(mode, (width, height), color)
    buffer = BytesIO()
    image.save(buffer, fmt)
    return buffer.getvalue()


class FakeFetcher:
    """In-memory ImageFetcher that records every call."""

    def __init__(self, responses: dict[str, bytes | Exception] | None = None) -> None:
        self.responses = responses or {}
        self.calls: list[str] = []
        self.gate: asyncio.Event | None = None
        self.content_type = "image/png"
        self.closed = False

    async def fetch(self, url: str) -> FetchedImageEntity:
        self.calls.append(url)
        if self.gate is not None:
            await self.gate.wait()

        response = self.responses.get(url)
        if response is None:
            raise FetchFailedError("Failed to fetch image: 404", details={"url": url})
        if isinstance(response, Exception):
            raise response
        return FetchedImageEntity(url=url, data=response, content_type=self.content_type)

    async def close(self) -> None:
        self.closed = True


class BrokenTransformer:
    """ImageTransformer that always raises a non-domain error."""

    def transform(self, data, width, quality, image_format):
        raise RuntimeError("codec exploded")

    def is_available(self) -> bool:
        return True


class EmptyTransformer:
    """ImageTransformer that produces no output."""

    def transform(self, data, width, quality, image_format):
        return b""

    def is_available(self) -> bool:
        return True


class SlowTransformer:
    """ImageTransformer that takes longer than any test transform timeout."""

    def __init__(self, delay: float = 0.3) -> None:
        self.delay = delay

    def transform(self, data, width, quality, image_format):
        time.sleep(self.delay)
        return data

    def is_available(self) -> bool:
        return True


class UnavailableTransformer(PillowImageTransformer):
    """Pillow transformer whose startup check fails."""

    def is_available(self) -> bool:
        return False


class ReadOnlyBlobStore(FileCacheRepository):
    """File repository whose writes always fail."""

    def write(self, namespace: str, key: str, entry: CacheEntryEntity) -> None:
        raise StorageError("disk full")


@pytest.fixture
def png_bytes() -> bytes:
    """A 400x300 red PNG."""
    return encode_image()


@pytest.fixture
def fetcher(png_bytes) -> FakeFetcher:
    return FakeFetcher({SOURCE_URL: png_bytes})


@pytest.fixture
def files(tmp_path) -> FileCacheRepository:
    return FileCacheRepository(tmp_path / "cache")


@pytest.fixture
def metadata_index(files) -> JsonMetadataIndex:
    return JsonMetadataIndex(files)


@pytest.fixture
def transformer() -> PillowImageTransformer:
    return PillowImageTransformer(max_pixels=10_000_000, default_format="webp")


@pytest.fixture
def make_service(files, metadata_index, fetcher, transformer):
    """Factory building an ImageService over the shared storage fixtures."""

    def _make(
        multi_tenant: bool = False,
        memory_cache: MemoryCache | None = None,
        blob_store=None,
        transformer_override=...,
        transform_timeout: float = 10.0,
    ) -> ImageService:
        return ImageService(
            memory_cache=memory_cache if memory_cache is not None else MemoryCache(capacity=10),
            blob_store=blob_store or files,
            metadata_index=metadata_index,
            fetcher=fetcher,
            transformer=transformer if transformer_override is ... else transformer_override,
            multi_tenant=multi_tenant,
            default_format="webp",
            default_quality=80,
            transform_timeout=transform_timeout,
        )

    return _make
