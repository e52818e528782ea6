"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field


class ProcessImageRequest(BaseModel):
    """Query parameters of ``GET /process-image``.

    ``url`` is optional at this layer so that a missing URL is reported
    by the service as an invalid request (400) rather than a schema error.
    """

    url: str | None = Field(None, description="URL of the source image")
    width: int | None = Field(
        None,
        description="Target width in pixels; the image is never enlarged",
    )
    quality: int | None = Field(
        None,
        description="Encoder quality, clamped to 1-100 (default 80)",
    )
    format: str | None = Field(
        None,
        description="Output format: webp (default), jpeg, png, avif, gif, tiff",
    )
    tenant: str | None = Field(
        None,
        description="Tenant identifier (required in multi-tenant mode)",
    )
