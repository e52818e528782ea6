"""Fetched source image entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FetchedImageEntity:
    """Raw bytes returned by the origin.

    Attributes:
        url: The URL that was fetched
        data: Response body
        content_type: Media type announced by the origin (may be empty)
    """

    url: str
    data: bytes
    content_type: str = ""
