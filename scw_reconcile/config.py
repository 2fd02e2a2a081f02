"""
Provider Configuration
======================

Typed configuration loaded from the environment, and the typed context
(`ProviderMeta`) threaded through resource adapters.
"""

import os
from dataclasses import dataclass
from typing import Optional

from .providers.base import ConfigurationError

DEFAULT_API_URL = "https://api.scaleway.com"
DEFAULT_REGION = "fr-par"

# Polling defaults (seconds)
DEFAULT_WAIT_RETRY_INTERVAL = 5.0
DEFAULT_WAIT_TIMEOUT = 300.0

DEFAULT_HTTP_TIMEOUT = 30.0


def _float_from_env(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number of seconds, got {raw!r}") from None


@dataclass(frozen=True)
class ProviderConfig:
    """Provider-wide settings."""
    api_url: str = DEFAULT_API_URL
    secret_key: str = ""
    default_region: str = DEFAULT_REGION
    default_project_id: str = ""
    # Overrides every per-resource retry interval when set
    wait_retry_interval: Optional[float] = None
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    log_level: str = "INFO"
    log_format: str = "text"

    def __post_init__(self):
        if self.wait_retry_interval is not None and self.wait_retry_interval <= 0:
            raise ConfigurationError("wait_retry_interval must be positive")
        if self.http_timeout <= 0:
            raise ConfigurationError("http_timeout must be positive")
        if not self.default_region:
            raise ConfigurationError("default_region must not be empty")

    @property
    def is_configured(self) -> bool:
        return bool(self.secret_key)

    def retry_interval(self, default: float = DEFAULT_WAIT_RETRY_INTERVAL) -> float:
        """Return the configured override, or the caller's default."""
        if self.wait_retry_interval is not None:
            return self.wait_retry_interval
        return default

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        return cls(
            api_url=os.environ.get("SCW_API_URL", DEFAULT_API_URL),
            secret_key=os.environ.get("SCW_SECRET_KEY", ""),
            default_region=os.environ.get("SCW_DEFAULT_REGION", DEFAULT_REGION),
            default_project_id=os.environ.get("SCW_DEFAULT_PROJECT_ID", ""),
            wait_retry_interval=_float_from_env("SCW_WAIT_RETRY_INTERVAL", None),
            http_timeout=_float_from_env("SCW_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            log_format=os.environ.get("LOG_FORMAT", "text"),
        )


@dataclass
class ProviderMeta:
    """
    Context shared by every resource adapter.

    Usage:
        meta = ProviderMeta.from_config(ProviderConfig.from_env())
        api = PrivateNetworkAPI(meta)
    """
    config: ProviderConfig
    client: "ScalewayClient"  # noqa: F821

    @classmethod
    def from_config(cls, config: ProviderConfig) -> "ProviderMeta":
        # Lazy import: the client module imports this one
        from .providers.scaleway import ScalewayClient
        return cls(config=config, client=ScalewayClient(config))

    def region_or_default(self, region: Optional[str] = None) -> str:
        return region or self.config.default_region
