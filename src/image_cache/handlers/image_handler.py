"""HTTP handlers for image operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, headers, timeouts and
error responses.
"""

import asyncio
import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import HTTPException, status
from fastapi.responses import Response

from image_cache.config import settings
from image_cache.dto import CurrentTimeResponse, HealthCheckResponse, ProcessImageRequest
from image_cache.errors import FetchFailedError, InvalidRequestError
from image_cache.services import ImageService

logger = logging.getLogger(__name__)


class ImageHandler:
    """HTTP handlers for image operations.

    This handler delegates business logic to ImageService
    and handles HTTP-specific concerns like:
    - Enforcing the whole-request timeout
    - Mapping domain errors to status codes
    - Setting content type and cache headers

    Example:
        ```python
        handler = ImageHandler(image_service=service)

        @app.get("/process-image")
        async def process_image(params: Annotated[ProcessImageRequest, Query()]):
            return await handler.process_image(params)
        ```
    """

    def __init__(
        self,
        image_service: ImageService,
        request_timeout: float | None = None,
        browser_cache_seconds: int | None = None,
        timezone: str | None = None,
    ) -> None:
        """Initialize the image handler.

        Args:
            image_service: The image service for business logic (required).
            request_timeout: Seconds allowed per request. Defaults to settings.
            browser_cache_seconds: Cache-Control max-age. Defaults to settings.
            timezone: Timezone for the current time endpoint. Defaults to settings.
        """
        self._service = image_service
        self._request_timeout = request_timeout or settings.request_timeout_seconds
        self._browser_cache_seconds = (
            settings.browser_cache_seconds if browser_cache_seconds is None else browser_cache_seconds
        )
        self._timezone = timezone or settings.timezone

    async def process_image(
        self,
        request: ProcessImageRequest,
        tenant_header: str | None = None,
    ) -> Response:
        """Handle GET /process-image requests.

        Args:
            request: The query parameters DTO
            tenant_header: Value of the X-Tenant-ID header, used when the
                query string carries no tenant

        Returns:
            Image response with X-Cache and X-Cache-Key headers

        Raises:
            HTTPException: 400 on invalid parameters, 404 when the origin
                fails, 504 on timeout, 500 on anything unexpected
        """
        try:
            result = await asyncio.wait_for(
                self._service.process(
                    url=request.url,
                    width=request.width,
                    quality=request.quality,
                    image_format=request.format,
                    tenant=request.tenant or tenant_header,
                ),
                timeout=self._request_timeout,
            )
        except InvalidRequestError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=e.message,
            ) from e
        except FetchFailedError as e:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Failed to process image: {e.message}",
            ) from e
        except asyncio.TimeoutError as e:
            logger.error(f"[ImageHandler] Request timed out: {(request.url or '')[:80]}")
            raise HTTPException(
                status_code=status.HTTP_504_GATEWAY_TIMEOUT,
                detail=f"Image processing timed out after {self._request_timeout}s",
            ) from e
        except Exception as e:
            logger.exception("[ImageHandler] Error processing image")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to process image: {e}",
            ) from e

        return Response(
            content=result.data,
            media_type=result.content_type,
            headers={
                "X-Cache": result.cache_status.value,
                "X-Cache-Key": result.cache_key,
                "Cache-Control": f"public, max-age={self._browser_cache_seconds}",
            },
        )

    async def get_stats(self) -> dict:
        """Handle GET /stats requests."""
        try:
            return self._service.get_stats()
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to get stats: {e}",
            ) from e

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        storage_healthy = self._service.is_healthy()
        return HealthCheckResponse(
            status="healthy" if storage_healthy else "unhealthy",
            storage_healthy=storage_healthy,
            transformer_available=self._service.transformer_available,
        )

    async def current_time(self) -> CurrentTimeResponse:
        """Handle GET /current-time requests."""
        now = datetime.now(ZoneInfo(self._timezone))
        return CurrentTimeResponse(
            date=now.strftime("%d-%m-%Y"),
            time=now.strftime("%H:%M:%S"),
            timezone=self._timezone,
        )
