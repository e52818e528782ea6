#!/usr/bin/env python3
"""
Demo script for the image cache.

Processes one remote image twice (cold, then warm) and once more with a
fresh memory tier to show the MISS -> HIT -> DISK_HIT progression.

Usage:
    python scripts/demo.py https://example.com/a.png --width 200 --quality 70
"""

import argparse
import asyncio
import tempfile
import time

from image_cache.repositories import (
    FileCacheRepository,
    HttpxImageFetcher,
    JsonMetadataIndex,
    MemoryCache,
    PillowImageTransformer,
)
from image_cache.services import ImageService


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def build_service(files: FileCacheRepository, fetcher: HttpxImageFetcher) -> ImageService:
    return ImageService.create(
        memory_cache=MemoryCache(capacity=10),
        blob_store=files,
        metadata_index=JsonMetadataIndex(files),
        fetcher=fetcher,
        transformer=PillowImageTransformer.create(),
        multi_tenant=False,
    )


async def run(url: str, width: int | None, quality: int | None, image_format: str) -> None:
    cache_dir = tempfile.mkdtemp(prefix="image-cache-demo-")
    files = FileCacheRepository(cache_dir)
    fetcher = HttpxImageFetcher.create()

    print_section(f"Processing {url}")
    print(f"  Cache directory: {cache_dir}")

    service = build_service(files, fetcher)
    for attempt in ("cold", "warm"):
        start = time.time()
        result = await service.process(url, width, quality, image_format)
        elapsed_ms = (time.time() - start) * 1000
        print(
            f"  {attempt:>5}: {result.cache_status.value:<9} "
            f"{len(result.data):>8} bytes  {result.content_type:<12} {elapsed_ms:8.1f} ms"
        )

    print_section("Fresh memory tier (simulated restart)")
    restarted = build_service(files, fetcher)
    result = await restarted.process(url, width, quality, image_format)
    print(f"  {result.cache_status.value}: {len(result.data)} bytes")

    await fetcher.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Image cache demo")
    parser.add_argument("url", help="Source image URL")
    parser.add_argument("--width", type=int, default=None)
    parser.add_argument("--quality", type=int, default=None)
    parser.add_argument("--format", default="webp")
    args = parser.parse_args()

    asyncio.run(run(args.url, args.width, args.quality, args.format))


if __name__ == "__main__":
    main()
