"""Service layer for business logic.

This layer contains the core business logic and orchestration.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access / collaborators)
"""

from .degradation import DegradationPolicy
from .image_service import ImageService
from .single_flight import SingleFlight

__all__ = [
    "DegradationPolicy",
    "ImageService",
    "SingleFlight",
]
