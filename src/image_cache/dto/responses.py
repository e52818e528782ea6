"""Response DTOs for API endpoints."""

from pydantic import BaseModel, Field


class ServiceInfoResponse(BaseModel):
    """Response DTO for the root endpoint."""

    name: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    description: str = Field(..., description="What the service does")
    endpoints: dict[str, str] = Field(default_factory=dict, description="Available endpoints")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    storage_healthy: bool = Field(..., description="Whether the persistent cache is writable")
    transformer_available: bool = Field(
        ...,
        description="Whether images are transformed (False means originals are passed through)",
    )


class CurrentTimeResponse(BaseModel):
    """Response DTO for the current time endpoint."""

    date: str = Field(..., description="Current date as dd-MM-yyyy")
    time: str = Field(..., description="Current time as HH:mm:ss")
    timezone: str = Field(..., description="IANA timezone the values are expressed in")
