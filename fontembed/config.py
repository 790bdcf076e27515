"""
Runtime configuration for the font embedding service.

Defines the upstream endpoints, HTTP limits and cache settings used by the
embedding pipeline and the font catalog proxy. Every field can be overridden
through an environment variable.

License: MIT
"""

import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass
class Settings:
    """Service settings with production defaults."""
    css_api_url: str = "https://fonts.googleapis.com/css2"
    webfonts_api_url: str = "https://www.googleapis.com/webfonts/v1/webfonts"
    google_fonts_api_key: Optional[str] = None
    user_agent: str = DEFAULT_USER_AGENT  # Google serves woff2 only to modern browsers
    http_timeout: float = 20.0  # seconds, per outbound call
    max_font_bytes: int = 10 * 1024 * 1024
    catalog_ttl: float = 24 * 60 * 60  # seconds
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``FONTEMBED_*`` environment variables."""
        defaults = cls()
        return cls(
            css_api_url=os.environ.get("FONTEMBED_CSS_API_URL", defaults.css_api_url),
            webfonts_api_url=os.environ.get("FONTEMBED_WEBFONTS_API_URL", defaults.webfonts_api_url),
            google_fonts_api_key=os.environ.get("GOOGLE_FONTS_API_KEY") or None,
            user_agent=os.environ.get("FONTEMBED_USER_AGENT", defaults.user_agent),
            http_timeout=float(os.environ.get("FONTEMBED_HTTP_TIMEOUT", defaults.http_timeout)),
            max_font_bytes=int(os.environ.get("FONTEMBED_MAX_FONT_BYTES", defaults.max_font_bytes)),
            catalog_ttl=float(os.environ.get("FONTEMBED_CATALOG_TTL", defaults.catalog_ttl)),
            log_level=os.environ.get("FONTEMBED_LOG_LEVEL", defaults.log_level).upper(),
        )


# Global settings instance (singleton)
settings = Settings.from_env()
