from typing import Annotated, Any

from fastapi import FastAPI, Header, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from image_cache.api.dependencies import HandlerDep, lifespan
from image_cache.config import settings
from image_cache.dto import (
    CurrentTimeResponse,
    HealthCheckResponse,
    ProcessImageRequest,
    ServiceInfoResponse,
)

app = FastAPI(
    title="Image Cache API",
    description="Fetches, resizes and re-encodes remote images behind a two-tier cache",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Cache", "X-Cache-Key"],
)


@app.get("/", response_model=ServiceInfoResponse)
async def root() -> ServiceInfoResponse:
    """Root endpoint with API information."""
    return ServiceInfoResponse(
        name="Image Cache API",
        version="0.1.0",
        description="Fetches, resizes and re-encodes remote images behind a two-tier cache",
        endpoints={
            "process_image": "/process-image",
            "stats": "/stats",
            "health": "/health",
            "current_time": "/current-time",
            "docs": "/docs",
        },
    )


@app.get("/process-image", response_class=Response)
async def process_image(
    params: Annotated[ProcessImageRequest, Query()],
    handler: HandlerDep,
    x_tenant_id: Annotated[str | None, Header()] = None,
) -> Response:
    """
    Fetch, transform and serve an image.

    Example:
        GET /process-image?url=https://example.com/a.png&width=200&quality=70&format=webp

    The X-Cache response header reports HIT, DISK_HIT, URL_HIT, MISS or DEGRADED.
    """
    return await handler.process_image(params, tenant_header=x_tenant_id)


@app.get("/health", response_model=HealthCheckResponse)
async def health(handler: HandlerDep) -> HealthCheckResponse:
    """Health check endpoint."""
    return await handler.health_check()


@app.get("/stats", response_model=dict[str, Any])
async def get_stats(handler: HandlerDep) -> dict[str, Any]:
    """Get cache statistics."""
    return await handler.get_stats()


@app.get("/current-time", response_model=CurrentTimeResponse)
async def current_time(handler: HandlerDep) -> CurrentTimeResponse:
    """Current date and time in the configured timezone."""
    return await handler.current_time()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "image_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
