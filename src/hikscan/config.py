"""
Application settings.

Settings are read from environment variables (and an optional .env file).
Durations accept plain seconds ("2.5") or Go-style strings ("500ms", "1m30s").
"""

import re
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hikscan.exceptions import ConfigError

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)")


def parse_duration(value: Any) -> float:
    """
    Convert a duration to seconds.

    Args:
        value: Number of seconds, or a string such as "5s", "500ms", "1m30s"

    Returns:
        Duration in seconds

    Raises:
        ValueError: If the value cannot be interpreted
    """
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = str(value).strip()
        try:
            seconds = float(text)
        except ValueError:
            pos = 0
            seconds = 0.0
            for match in _DURATION_PART.finditer(text):
                if match.start() != pos:
                    break
                seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
                pos = match.end()
            if pos == 0 or pos != len(text):
                raise ValueError(f"invalid duration: {value!r}")

    if seconds < 0:
        raise ValueError(f"duration must not be negative: {value!r}")
    return seconds


class Settings(BaseSettings):
    """Runtime configuration for hikscan."""

    # HTTP
    http_timeout: float = Field(default=10.0, description="Raw HTTP client timeout (seconds)")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="HTTP User-Agent header")

    # ARP discovery
    discovery_workers: int = Field(default=100, ge=1, description="Concurrent liveness probes")
    discovery_timeout: float = Field(default=1.0, description="Per-host liveness timeout (seconds)")

    # SADP
    sadp_timeout: float = Field(default=5.0, description="SADP discovery/command timeout (seconds)")

    debug: bool = Field(default=False, description="Enable debug logging")

    # Legacy device keys
    aes_key_hex: str = Field(default="279977f62f6cfd2d91cd75b889ce0c9a")
    xor_key_hex: str = Field(default="738B5544")

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    @field_validator("http_timeout", "discovery_timeout", "sadp_timeout", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any) -> float:
        return parse_duration(value)


def load_settings(**overrides: Any) -> Settings:
    """Load settings from the environment, raising ConfigError on bad values."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigError(f"failed to load config: {e}") from e
