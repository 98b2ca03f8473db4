"""Configuration management for taxcalc."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

from taxcalc.jurisdictions.scraper import PWC_BASE_URL
from taxcalc.request.types import API_URL


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment."""

    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    cache_size: int = 1000
    rate_limit: float = 1.0  # seconds between upstream calls
    api_url: str = API_URL
    pwc_base_url: str = PWC_BASE_URL
    timeout: float = 30.0
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.cache_size < 1:
            raise ValueError("cache_size must be at least 1")
        if self.rate_limit <= 0:
            raise ValueError("rate_limit must be positive")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        return cls(
            host=os.getenv("TAXCALC_HOST", "0.0.0.0"),
            port=int(os.getenv("TAXCALC_PORT", "8080")),
            debug=os.getenv("TAXCALC_DEBUG", "false").lower() == "true",
            cache_size=int(os.getenv("TAXCALC_CACHE_SIZE", "1000")),
            rate_limit=float(os.getenv("TAXCALC_RATE_LIMIT", "1.0")),
            api_url=os.getenv("TAXCALC_API_URL", API_URL),
            pwc_base_url=os.getenv("TAXCALC_PWC_BASE_URL", PWC_BASE_URL),
            timeout=float(os.getenv("TAXCALC_TIMEOUT", "30.0")),
            log_level=os.getenv("TAXCALC_LOG_LEVEL", "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
