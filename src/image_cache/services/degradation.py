"""Degradation policy for failed or unavailable transforms.

The service applies exactly one policy: serve the original, untransformed
bytes that were fetched from the origin, tagged ``DEGRADED``. It is used
when the transformer was unavailable at startup, raised, timed out, or
produced empty output. Degraded results are never cached, so requests
are transformed again once the codec recovers.
"""

import logging
import mimetypes
from urllib.parse import urlparse

from image_cache.entities import (
    CacheStatus,
    FetchedImageEntity,
    ImageRequestEntity,
    ImageResultEntity,
)

logger = logging.getLogger(__name__)

FALLBACK_CONTENT_TYPE = "application/octet-stream"


def guess_content_type(fetched: FetchedImageEntity) -> str:
    """Best guess at the media type of untransformed source bytes.

    Prefers the origin's Content-Type, then the URL path extension.
    """
    if fetched.content_type.startswith("image/"):
        return fetched.content_type

    guessed, _ = mimetypes.guess_type(urlparse(fetched.url).path)
    if guessed and guessed.startswith("image/"):
        return guessed

    return FALLBACK_CONTENT_TYPE


class DegradationPolicy:
    """Pass-through of the original bytes."""

    def apply(
        self,
        request: ImageRequestEntity,
        fetched: FetchedImageEntity,
        reason: Exception,
    ) -> ImageResultEntity:
        """Build the response served when the transform cannot complete.

        Args:
            request: The normalized request being served
            fetched: Source bytes already downloaded from the origin
            reason: Why the transform was skipped or failed

        Returns:
            An ImageResultEntity carrying the original bytes
        """
        content_type = guess_content_type(fetched)
        logger.warning(
            f"[Degradation] Serving original bytes for {request.url[:80]} "
            f"({len(fetched.data)} bytes, {content_type}): {reason}"
        )
        return ImageResultEntity(
            data=fetched.data,
            content_type=content_type,
            cache_status=CacheStatus.DEGRADED,
            cache_key=request.cache_key,
            image_format=None,
        )
