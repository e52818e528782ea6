"""Pillow-based image transformer.

Resizes to a target width (keeping the aspect ratio and never
enlarging) and re-encodes into the requested format. Metadata such as
EXIF is not carried over to the output.
"""

import logging
from io import BytesIO

from PIL import Image, features

from image_cache.config import settings
from image_cache.errors import TransformFailedError
from image_cache.formats import resolve_format

logger = logging.getLogger(__name__)

# Modes each encoder accepts without conversion
_ENCODER_MODES = {
    "JPEG": {"RGB", "L", "CMYK"},
    "WEBP": {"RGB", "RGBA"},
    "AVIF": {"RGB", "RGBA"},
    "PNG": {"1", "L", "LA", "I", "P", "RGB", "RGBA"},
}


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or (
        image.mode == "P" and "transparency" in image.info
    )


class PillowImageTransformer:
    """Pillow implementation of the ImageTransformer protocol.

    Example:
        ```python
        transformer = PillowImageTransformer.create()
        webp = transformer.transform(png_bytes, width=200, quality=70, image_format="webp")
        ```
    """

    def __init__(
        self,
        max_pixels: int | None = None,
        default_format: str | None = None,
        webp_method: int = 4,
    ) -> None:
        """Initialize the transformer.

        Args:
            max_pixels: Largest decoded image (width * height) accepted.
                Defaults to settings.
            default_format: Format checked by ``is_available``. Defaults to settings.
            webp_method: WebP encoder effort (0 fast - 6 slow).
        """
        self._max_pixels = max_pixels or settings.max_image_pixels
        self._default_format = default_format or settings.default_format
        self._webp_method = webp_method

    @classmethod
    def create(cls, max_pixels: int | None = None) -> "PillowImageTransformer":
        """Factory method to create PillowImageTransformer with defaults."""
        return cls(max_pixels=max_pixels)

    def supports(self, image_format: str) -> bool:
        """Check whether Pillow has an encoder for ``image_format``."""
        fmt = resolve_format(image_format)
        if fmt is None:
            return False
        Image.init()
        return fmt.pillow_name in Image.SAVE

    def is_available(self) -> bool:
        """Check that the default output format can actually be encoded.

        Encodes a 1x1 image, so a codec that is registered but broken is
        reported as unavailable.
        """
        fmt = resolve_format(self._default_format)
        if fmt is None or not self.supports(fmt.name):
            return False
        if fmt.pillow_name == "WEBP" and not features.check("webp"):
            return False

        try:
            sample = self._convert_for(Image.new("RGB", (1, 1)), fmt.pillow_name)
            sample.save(BytesIO(), fmt.pillow_name, **self._save_options(fmt.pillow_name, 80))
        except Exception as e:
            logger.warning(f"[Transformer] {fmt.name} encoder failed its warm-up: {e}")
            return False
        return True

    def _open(self, data: bytes) -> Image.Image:
        image = Image.open(BytesIO(data))
        width, height = image.size
        if width * height > self._max_pixels:
            raise TransformFailedError(
                f"Image has too many pixels ({width}x{height})",
                details={"max_pixels": self._max_pixels},
            )
        image.load()
        return image

    @staticmethod
    def _resize(image: Image.Image, width: int | None) -> Image.Image:
        if not width or width >= image.width:
            return image
        height = max(1, round(image.height * width / image.width))
        return image.resize((width, height), Image.Resampling.LANCZOS)

    @staticmethod
    def _convert_for(image: Image.Image, pillow_name: str) -> Image.Image:
        allowed = _ENCODER_MODES.get(pillow_name)
        if allowed is None or image.mode in allowed:
            return image
        if "RGBA" in allowed and _has_alpha(image):
            return image.convert("RGBA")
        return image.convert("RGB")

    def _save_options(self, pillow_name: str, quality: int) -> dict:
        if pillow_name == "WEBP":
            return {"quality": quality, "method": self._webp_method}
        if pillow_name == "JPEG":
            return {"quality": quality, "optimize": True}
        if pillow_name == "AVIF":
            return {"quality": quality}
        if pillow_name == "PNG":
            return {"optimize": True}
        return {}

    def transform(
        self,
        data: bytes,
        width: int | None,
        quality: int,
        image_format: str,
    ) -> bytes:
        """Resize and re-encode an image.

        Raises:
            TransformFailedError: If the format is unknown or unsupported,
                the input cannot be decoded, is too large, or encoding fails
        """
        fmt = resolve_format(image_format)
        if fmt is None:
            raise TransformFailedError(f"Unknown image format: {image_format}")
        if not self.supports(fmt.name):
            raise TransformFailedError(f"No encoder available for {fmt.name}")

        quality = min(max(quality, 1), 100)

        try:
            image = self._open(data)
            logger.debug(f"[Transformer] Source {image.format} {image.size} mode={image.mode}")

            image = self._resize(image, width)
            image = self._convert_for(image, fmt.pillow_name)

            output = BytesIO()
            image.save(output, fmt.pillow_name, **self._save_options(fmt.pillow_name, quality))
        except TransformFailedError:
            raise
        except Exception as e:
            raise TransformFailedError(f"Image processing failed: {e}") from e

        result = output.getvalue()
        logger.debug(f"[Transformer] Encoded {fmt.name} ({len(result)} bytes)")
        return result
