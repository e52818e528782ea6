"""Cache key derivation and request normalization.

Every lookup in every tier goes through ``derive_cache_key``. Request
parameters are normalized first so that semantically equal requests
always land on the same key:

- an absent or non-positive width means "keep the original width"
- an absent quality means the default quality; any quality is clamped to 1..100
- format names are lowercased and aliases (``jpg``, ``tif``) resolved

A positive width is never compared against the source image, so
``width=800`` and no width produce different keys even when the source
happens to be 800 pixels wide.
"""

import hashlib
import re
from urllib.parse import urlparse

from image_cache.entities import ImageRequestEntity
from image_cache.errors import InvalidRequestError
from image_cache.formats import resolve_format

ORIGINAL_WIDTH = "original"
DEFAULT_QUALITY = 80
# Tenant ids are never empty, so this cannot clash with a tenant
GLOBAL_NAMESPACE = ""

_TENANT_PATTERN = re.compile(r"[A-Za-z0-9_-]{1,64}")


def normalize_width(width: int | None) -> int | None:
    """Map absent and non-positive widths to ``None`` (original width)."""
    if width is None or width <= 0:
        return None
    return width


def normalize_quality(quality: int | None, default: int = DEFAULT_QUALITY) -> int:
    """Apply the default quality and clamp to the 1..100 range."""
    if quality is None:
        quality = default
    return min(max(quality, 1), 100)


def derive_cache_key(
    url: str,
    width: int | None,
    quality: int | None,
    image_format: str,
    default_quality: int = DEFAULT_QUALITY,
) -> str:
    """Derive the cache key for a transformation request.

    Args:
        url: Source image URL
        width: Requested width in pixels, or None for the original width
        quality: Requested quality, or None for the default
        image_format: Target format name or alias
        default_quality: Quality substituted when none is requested

    Returns:
        32 character lowercase hex digest
    """
    width_part = normalize_width(width) or ORIGINAL_WIDTH
    quality_part = normalize_quality(quality, default_quality)
    fmt = resolve_format(image_format)
    format_part = fmt.name if fmt else image_format.strip().lower()

    fingerprint = f"{url}-{width_part}-{quality_part}-{format_part}"
    return hashlib.md5(fingerprint.encode("utf-8")).hexdigest()


def validate_url(url: str | None) -> str:
    """Check that ``url`` is an absolute http(s) URL."""
    if not url or not url.strip():
        raise InvalidRequestError("Image URL is required")

    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise InvalidRequestError("Invalid URL scheme", details={"url": url})
    if not parsed.netloc:
        raise InvalidRequestError("Invalid URL host", details={"url": url})
    return url


def tenant_namespace(tenant: str | None) -> str:
    """Return the storage namespace for a tenant (or the global one)."""
    return tenant if tenant else GLOBAL_NAMESPACE


def normalize_request(
    url: str | None,
    width: int | None = None,
    quality: int | None = None,
    image_format: str | None = None,
    tenant: str | None = None,
    *,
    multi_tenant: bool = False,
    default_format: str = "webp",
    default_quality: int = DEFAULT_QUALITY,
) -> ImageRequestEntity:
    """Validate raw request parameters and derive the cache key.

    Raises:
        InvalidRequestError: On a missing or malformed URL, an unknown
            format, or a missing/invalid tenant in multi-tenant mode
    """
    url = validate_url(url)

    fmt = resolve_format(image_format or default_format)
    if fmt is None:
        raise InvalidRequestError(
            f"Unsupported image format: {image_format}",
            details={"format": image_format},
        )

    if multi_tenant:
        if not tenant:
            raise InvalidRequestError("Tenant identifier is required")
        if not _TENANT_PATTERN.fullmatch(tenant):
            raise InvalidRequestError("Invalid tenant identifier", details={"tenant": tenant})
    else:
        tenant = None

    normalized_width = normalize_width(width)
    normalized_quality = normalize_quality(quality, default_quality)

    return ImageRequestEntity(
        url=url,
        width=normalized_width,
        quality=normalized_quality,
        image_format=fmt.name,
        tenant=tenant,
        cache_key=derive_cache_key(url, normalized_width, normalized_quality, fmt.name),
    )
