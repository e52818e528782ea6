"""Domain errors raised by the image cache layers.

Handlers translate these into HTTP responses; services and repositories
raise them and never deal with status codes.
"""

from typing import Any


class ImageCacheError(Exception):
    """Base exception for all image cache errors.

    Attributes:
        message: Error message
        details: Additional error details (dict)
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = (details or {}).copy()
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/API responses."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class InvalidRequestError(ImageCacheError):
    """A required parameter is missing or malformed."""


class FetchFailedError(ImageCacheError):
    """The origin was unreachable, timed out, or answered with a non-success status."""


class EmptyUpstreamResponseError(FetchFailedError):
    """The origin answered successfully but with an empty body."""


class TransformFailedError(ImageCacheError):
    """The image codec could not decode, resize or encode the source."""


class StorageError(ImageCacheError):
    """A persistent cache read or write failed."""
