"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from image_cache.config import configure_logging, settings
from image_cache.handlers import ImageHandler
from image_cache.repositories import (
    FileCacheRepository,
    HttpxImageFetcher,
    JsonMetadataIndex,
    MemoryCache,
    PillowImageTransformer,
)
from image_cache.services import ImageService

logger = logging.getLogger(__name__)


def get_image_service(request: Request) -> ImageService:
    """Dependency injection for ImageService from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The ImageService instance from app.state

    Raises:
        RuntimeError: If service is not initialized
    """
    service = getattr(request.app.state, "image_service", None)
    if service is None:
        raise RuntimeError("ImageService not initialized. Check lifespan setup.")
    return service


def get_handler(request: Request) -> ImageHandler:
    """Dependency injection for ImageHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The ImageHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "image_handler", None)
    if handler is None:
        raise RuntimeError("ImageHandler not initialized. Check lifespan setup.")
    return handler


def build_transformer() -> PillowImageTransformer | None:
    """Create the image codec, or None if Pillow cannot be used."""
    try:
        return PillowImageTransformer.create()
    except Exception as e:
        logger.warning(f"Image transformer failed to load, originals will be served: {e}")
        return None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores in app.state:
    1. Repositories (memory tier, file tier, metadata index, collaborators)
    2. Service (business logic) - stored in app.state.image_service
    3. Handler (HTTP endpoints) - stored in app.state.image_handler

    Cleanup:
        Closes the HTTP client and removes all services from app.state
    """
    configure_logging()

    files = FileCacheRepository.create(settings.cache_dir)
    image_service = ImageService.create(
        memory_cache=MemoryCache(capacity=settings.memory_cache_size),
        blob_store=files,
        metadata_index=JsonMetadataIndex(files),
        fetcher=HttpxImageFetcher.create(),
        transformer=build_transformer(),
    )
    image_handler = ImageHandler(image_service=image_service)

    # Store in app.state (FastAPI pattern)
    app.state.image_service = image_service
    app.state.image_handler = image_handler

    logger.info(f"Image cache initialized at {files.root}")
    logger.info(f"Memory cache capacity: {settings.memory_cache_size}")
    logger.info(f"Multi-tenant: {image_service.multi_tenant}")
    logger.info(f"Transformer available: {image_service.transformer_available}")

    yield

    await image_service.close()
    del app.state.image_handler
    del app.state.image_service
    logger.info("Image cache shut down")


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[ImageHandler, Depends(get_handler)]
ServiceDep = Annotated[ImageService, Depends(get_image_service)]
