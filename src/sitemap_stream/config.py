"""Configuration using pydantic-settings."""

from datetime import datetime, timezone
from urllib.parse import urlparse

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from .errors import InvalidConfigError


def _now_iso() -> str:
    """Current UTC time in ISO-8601 with millisecond precision."""
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


class SitemapSettings(BaseSettings):
    """Sitemap session configuration."""

    index_base_url: str = ""
    timestamp: str = Field(default_factory=_now_iso)
    limit: int = Field(default=50000, ge=1)
    mobile_enabled: bool = False
    output_base: str = "./"
    compression_enabled: bool = True
    high_water_mark: int = Field(default=16384, ge=1)
    compress_level: int = Field(default=9, ge=1, le=9)

    model_config = {"env_prefix": "SITEMAP_"}

    @field_validator("index_base_url")
    @classmethod
    def _absolute_url(cls, value: str) -> str:
        if value:
            parsed = urlparse(value)
            if not parsed.scheme or not parsed.netloc:
                raise ValueError(f"index_base_url must be an absolute URL: {value!r}")
        return value

    @field_validator("timestamp")
    @classmethod
    def _iso_timestamp(cls, value: str) -> str:
        try:
            datetime.fromisoformat(value)
        except ValueError:
            raise ValueError(f"timestamp must be ISO-8601: {value!r}") from None
        return value


def load_settings(**overrides) -> SitemapSettings:
    """Build settings from the environment plus overrides.

    Raises:
        InvalidConfigError: if any value fails validation.
    """
    try:
        return SitemapSettings(**overrides)
    except ValidationError as e:
        raise InvalidConfigError(f"Invalid parameters: {e}") from e
