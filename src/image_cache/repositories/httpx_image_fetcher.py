"""httpx-based image fetcher.

Downloads source images with a browser-like User-Agent and a bounded
timeout so slow or hostile origins cannot hold a request forever. The
body is streamed and abandoned as soon as it exceeds the size limit.
"""

import logging

import httpx

from image_cache.config import settings
from image_cache.entities import FetchedImageEntity
from image_cache.errors import EmptyUpstreamResponseError, FetchFailedError

logger = logging.getLogger(__name__)


class HttpxImageFetcher:
    """httpx implementation of the ImageFetcher protocol.

    Example:
        ```python
        fetcher = HttpxImageFetcher.create()
        image = await fetcher.fetch("https://example.com/a.png")
        print(len(image.data), image.content_type)
        await fetcher.close()
        ```
    """

    def __init__(
        self,
        timeout: float | None = None,
        user_agent: str | None = None,
        max_bytes: int | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            timeout: Request timeout in seconds. Defaults to settings.
            user_agent: User-Agent header value. Defaults to settings.
            max_bytes: Largest accepted body. Defaults to settings.
            client: Pre-built client (tests inject one with a mock transport).
        """
        self._timeout = timeout or settings.fetch_timeout_seconds
        self._user_agent = user_agent or settings.fetch_user_agent
        self._max_bytes = max_bytes or settings.max_image_size_bytes
        self._client = client

    @classmethod
    def create(
        cls,
        timeout: float | None = None,
        user_agent: str | None = None,
    ) -> "HttpxImageFetcher":
        """Factory method to create HttpxImageFetcher with defaults."""
        return cls(timeout=timeout, user_agent=user_agent)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                headers={
                    "User-Agent": self._user_agent,
                    "Accept": "image/*,*/*;q=0.8",
                },
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    async def fetch(self, url: str) -> FetchedImageEntity:
        """Download the image at ``url``.

        Raises:
            FetchFailedError: On timeouts, network errors, non-2xx answers
                or bodies larger than the size limit
            EmptyUpstreamResponseError: If the body is empty
        """
        logger.info(f"[Fetcher] Fetching: {url[:80]}")
        try:
            async with self.client.stream("GET", url) as response:
                response.raise_for_status()
                content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()

                chunks = []
                received = 0
                async for chunk in response.aiter_bytes():
                    received += len(chunk)
                    if received > self._max_bytes:
                        raise FetchFailedError(
                            f"Image too large (max {self._max_bytes} bytes)",
                            details={"url": url},
                        )
                    chunks.append(chunk)
        except httpx.TimeoutException as e:
            logger.error(f"[Fetcher] Timeout: {url[:80]}")
            raise FetchFailedError("Image fetch timeout", details={"url": url}) from e
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(f"[Fetcher] HTTP error {status_code}: {url[:80]}")
            raise FetchFailedError(
                f"Failed to fetch image: {status_code}",
                details={"url": url, "status_code": status_code},
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"[Fetcher] Fetch error: {e}")
            raise FetchFailedError(f"Failed to fetch image: {e}", details={"url": url}) from e

        data = b"".join(chunks)
        if not data:
            raise EmptyUpstreamResponseError("Empty response from image URL", details={"url": url})

        logger.info(f"[Fetcher] Fetched {len(data)} bytes: {url[:80]}")
        return FetchedImageEntity(url=url, data=data, content_type=content_type)

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
