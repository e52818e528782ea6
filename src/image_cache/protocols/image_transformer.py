"""Image transformer protocol.

Defines the interface for the image codec that resizes and re-encodes
source images. Implementations are synchronous and CPU-bound; the
service runs them in a worker thread.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ImageTransformer(Protocol):
    """Protocol for image codecs."""

    def transform(
        self,
        data: bytes,
        width: int | None,
        quality: int,
        image_format: str,
    ) -> bytes:
        """Resize (never enlarging) and re-encode an image.

        Args:
            data: Source image bytes
            width: Target width, None keeps the original width
            quality: Encoder quality (1-100)
            image_format: Canonical target format name

        Returns:
            The encoded image

        Raises:
            TransformFailedError: If decoding or encoding fails
        """
        ...

    def is_available(self) -> bool:
        """Check that the codec can encode the default output format."""
        ...
