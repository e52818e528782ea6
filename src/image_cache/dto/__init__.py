"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import ProcessImageRequest
from .responses import CurrentTimeResponse, HealthCheckResponse, ServiceInfoResponse

__all__ = [
    "ProcessImageRequest",
    "CurrentTimeResponse",
    "HealthCheckResponse",
    "ServiceInfoResponse",
]
