import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _default_cache_dir() -> str:
    # Serverless platforms only allow writes under /tmp
    if os.getenv("VERCEL"):
        return "/tmp/image-cache"
    return "./tmp"


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Storage
    cache_dir: str = os.getenv("IMAGE_CACHE_DIR") or _default_cache_dir()
    memory_cache_size: int = int(os.getenv("MEMORY_CACHE_SIZE", "100"))
    multi_tenant: bool = os.getenv("MULTI_TENANT", "false").lower() == "true"

    # Transform defaults
    default_format: str = os.getenv("DEFAULT_FORMAT", "webp")
    default_quality: int = int(os.getenv("DEFAULT_QUALITY", "80"))
    max_image_pixels: int = int(os.getenv("MAX_IMAGE_PIXELS", str(50_000_000)))

    # Timeouts (seconds)
    fetch_timeout_seconds: float = float(os.getenv("FETCH_TIMEOUT_SECONDS", "10"))
    transform_timeout_seconds: float = float(os.getenv("TRANSFORM_TIMEOUT_SECONDS", "20"))
    request_timeout_seconds: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))

    # Upstream fetch
    max_image_size_mb: int = int(os.getenv("IMAGE_MAX_SIZE_MB", "20"))
    fetch_user_agent: str = os.getenv(
        "FETCH_USER_AGENT",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    )

    # Response
    browser_cache_seconds: int = int(os.getenv("BROWSER_CACHE_SECONDS", "86400"))
    timezone: str = os.getenv("TIMEZONE", "Asia/Karachi")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "3000"))
    api_reload: bool = os.getenv("API_RELOAD", "false").lower() == "true"

    @property
    def max_image_size_bytes(self) -> int:
        """Upper bound on the size of a fetched source image."""
        return self.max_image_size_mb * 1024 * 1024

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.memory_cache_size < 1:
            raise ValueError("MEMORY_CACHE_SIZE must be at least 1")

        if not 1 <= self.default_quality <= 100:
            raise ValueError(
                f"DEFAULT_QUALITY must be between 1 and 100, got {self.default_quality}"
            )

        for name in ("fetch_timeout_seconds", "transform_timeout_seconds", "request_timeout_seconds"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name.upper()} must be positive")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the service process."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
