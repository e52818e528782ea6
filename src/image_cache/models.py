from dataclasses import dataclass, field

from image_cache.entities import CacheStatus


@dataclass
class PerformanceMetrics:
    """Track request outcomes and timings for the image service."""

    total_requests: int = 0
    status_counts: dict[str, int] = field(
        default_factory=lambda: {status.value: 0 for status in CacheStatus}
    )
    total_time_ms: float = 0.0
    fetches: int = 0
    total_fetch_time_ms: float = 0.0
    transforms: int = 0
    total_transform_time_ms: float = 0.0

    @property
    def hit_rate(self) -> float:
        """Share of requests served without fetching from the origin."""
        if self.total_requests == 0:
            return 0.0
        served_from_cache = sum(
            self.status_counts[s.value]
            for s in (CacheStatus.HIT, CacheStatus.DISK_HIT, CacheStatus.URL_HIT)
        )
        return served_from_cache / self.total_requests

    @property
    def avg_time_ms(self) -> float:
        """Calculate average request time."""
        if self.total_requests == 0:
            return 0.0
        return self.total_time_ms / self.total_requests

    def record(self, status: CacheStatus, duration_ms: float) -> None:
        """Record a served request."""
        self.total_requests += 1
        self.status_counts[status.value] += 1
        self.total_time_ms += duration_ms

    def record_fetch(self, duration_ms: float) -> None:
        """Record an origin fetch."""
        self.fetches += 1
        self.total_fetch_time_ms += duration_ms

    def record_transform(self, duration_ms: float) -> None:
        """Record a transform call."""
        self.transforms += 1
        self.total_transform_time_ms += duration_ms

    def to_dict(self) -> dict[str, float | int | dict[str, int]]:
        """Convert metrics to dictionary."""
        return {
            "total_requests": self.total_requests,
            "status_counts": dict(self.status_counts),
            "hit_rate": self.hit_rate,
            "avg_time_ms": self.avg_time_ms,
            "fetches": self.fetches,
            "total_fetch_time_ms": self.total_fetch_time_ms,
            "transforms": self.transforms,
            "total_transform_time_ms": self.total_transform_time_ms,
        }
