"""Image fetcher protocol."""

from typing import Protocol, runtime_checkable

from image_cache.entities import FetchedImageEntity


@runtime_checkable
class ImageFetcher(Protocol):
    """Protocol for retrieving source images from their origin."""

    async def fetch(self, url: str) -> FetchedImageEntity:
        """Download the image at ``url``.

        Raises:
            FetchFailedError: On network errors, timeouts or non-2xx answers
            EmptyUpstreamResponseError: If the origin returned no bytes
        """
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...
