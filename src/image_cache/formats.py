"""Output image formats the service knows how to produce.

Each format maps to the Pillow encoder name, the MIME type served to
clients and the conventional file extension used by the persistent cache.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ImageFormat:
    """Description of a supported output format."""

    name: str
    pillow_name: str
    content_type: str
    extension: str
    lossy: bool


SUPPORTED_FORMATS: dict[str, ImageFormat] = {
    "webp": ImageFormat("webp", "WEBP", "image/webp", "webp", lossy=True),
    "jpeg": ImageFormat("jpeg", "JPEG", "image/jpeg", "jpg", lossy=True),
    "avif": ImageFormat("avif", "AVIF", "image/avif", "avif", lossy=True),
    "png": ImageFormat("png", "PNG", "image/png", "png", lossy=False),
    "gif": ImageFormat("gif", "GIF", "image/gif", "gif", lossy=False),
    "tiff": ImageFormat("tiff", "TIFF", "image/tiff", "tiff", lossy=False),
}

FORMAT_ALIASES = {
    "jpg": "jpeg",
    "tif": "tiff",
}

_BY_EXTENSION = {fmt.extension: fmt for fmt in SUPPORTED_FORMATS.values()}


def resolve_format(name: str) -> ImageFormat | None:
    """Look up a format by name or alias, case-insensitively."""
    key = name.strip().lower()
    key = FORMAT_ALIASES.get(key, key)
    return SUPPORTED_FORMATS.get(key)


def format_for_extension(extension: str) -> ImageFormat | None:
    """Look up a format from a cache file extension (without the dot)."""
    return _BY_EXTENSION.get(extension.lower())
