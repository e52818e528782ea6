"""Cache status reported with every served image."""

from enum import Enum


class CacheStatus(str, Enum):
    """Where the served bytes came from."""

    HIT = "HIT"
    DISK_HIT = "DISK_HIT"
    URL_HIT = "URL_HIT"
    MISS = "MISS"
    DEGRADED = "DEGRADED"
