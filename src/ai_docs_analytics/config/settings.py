"""
Application settings and configuration management.

Supports loading from:
1. SOPS-encrypted YAML files (config.enc.yaml)
2. Environment variables (fallback)
"""

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from .constants import DEFAULT_API_URL, TRACK_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("sqlite", "analytics_engine")


def _split_list(value: Any) -> tuple[str, ...]:
    """Normalize a comma-separated string or list into a tuple of strings."""
    if value is None:
        return ()
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)
    return tuple(item.strip() for item in items if item and item.strip())


@dataclass
class Settings:
    """Application settings for the analytics API and tracker."""

    # Storage Backend Settings
    storage_backend: str = "sqlite"
    sqlite_db_path: str = "data/ai-docs-analytics.db"

    # Cloudflare Analytics Engine credentials
    cf_account_id: str = ""
    cf_api_token: str = ""

    # Shared secret guarding GET /query (empty = open)
    api_secret: str = ""

    # Tracker endpoint override: None = default endpoint, "" = tracking disabled
    analytics_endpoint: Optional[str] = None
    tracker_timeout_seconds: float = TRACK_TIMEOUT_SECONDS

    # Remote API used by the query gateway
    api_url: str = DEFAULT_API_URL

    # Access control
    admin_emails: tuple[str, ...] = field(default_factory=tuple)
    query_max_workers: int = 8

    def validate(self) -> list[str]:
        """Validate settings values. Returns list of errors."""
        errors = []

        if self.storage_backend not in SUPPORTED_BACKENDS:
            errors.append(
                f"storage.backend must be one of {', '.join(SUPPORTED_BACKENDS)}, "
                f"got '{self.storage_backend}'"
            )

        if self.storage_backend == "analytics_engine":
            if not self.cf_account_id:
                errors.append("cloudflare.account_id is required")
            if not self.cf_api_token:
                errors.append("cloudflare.api_token is required")

        if self.tracker_timeout_seconds <= 0:
            errors.append(
                f"tracker.timeout_seconds must be > 0, "
                f"got {self.tracker_timeout_seconds}"
            )
        if self.query_max_workers < 1:
            errors.append(
                f"query.max_workers must be >= 1, got {self.query_max_workers}"
            )

        return errors

    @property
    def tracking_enabled(self) -> bool:
        """Tracking is disabled only by an explicitly empty endpoint."""
        return self.analytics_endpoint != ""

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "Settings":
        """Create Settings from configuration dictionary (e.g., from SOPS)."""
        storage = config.get("storage", {})
        cf = config.get("cloudflare", {})
        api = config.get("api", {})
        tracker = config.get("tracker", {})
        access = config.get("access", {})
        query = config.get("query", {})

        return cls(
            storage_backend=storage.get("backend", "sqlite"),
            sqlite_db_path=storage.get("sqlite_db_path", "data/ai-docs-analytics.db"),
            cf_account_id=cf.get("account_id", ""),
            cf_api_token=cf.get("api_token", ""),
            api_secret=api.get("secret", ""),
            api_url=api.get("url", DEFAULT_API_URL),
            analytics_endpoint=tracker.get("endpoint"),
            tracker_timeout_seconds=float(
                tracker.get("timeout_seconds", TRACK_TIMEOUT_SECONDS)
            ),
            admin_emails=_split_list(access.get("admin_emails")),
            query_max_workers=int(query.get("max_workers", 8)),
        )

    @classmethod
    def from_env(cls) -> "Settings":
        """Create Settings from environment variables."""

        def safe_int(key: str, default: int) -> int:
            """Safely parse int from env var, using default on error."""
            try:
                return int(os.environ.get(key, str(default)))
            except ValueError:
                return default

        def safe_float(key: str, default: float) -> float:
            """Safely parse float from env var, using default on error."""
            try:
                return float(os.environ.get(key, str(default)))
            except ValueError:
                return default

        return cls(
            storage_backend=os.environ.get("STORAGE_BACKEND", "sqlite"),
            sqlite_db_path=os.environ.get(
                "SQLITE_DB_PATH", "data/ai-docs-analytics.db"
            ),
            cf_account_id=os.environ.get("CF_ACCOUNT_ID", ""),
            cf_api_token=os.environ.get("CF_API_TOKEN", ""),
            api_secret=os.environ.get("API_SECRET", ""),
            api_url=os.environ.get("AI_ANALYTICS_API_URL", DEFAULT_API_URL),
            # Unset keeps the default endpoint; an empty value disables tracking
            analytics_endpoint=os.environ.get("AI_ANALYTICS_ENDPOINT"),
            tracker_timeout_seconds=safe_float(
                "AI_ANALYTICS_TIMEOUT_SECONDS", TRACK_TIMEOUT_SECONDS
            ),
            admin_emails=_split_list(os.environ.get("ADMIN_EMAILS")),
            query_max_workers=safe_int("QUERY_MAX_WORKERS", 8),
        )


# Default config file path
DEFAULT_CONFIG_PATH = Path("config.enc.yaml")


@lru_cache
def get_settings(config_path: Optional[str] = None) -> Settings:
    """
    Get cached settings instance.

    Loads from SOPS-encrypted config file if available, otherwise from env vars.

    Args:
        config_path: Optional path to SOPS-encrypted config file

    Returns:
        Settings instance
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    if path.exists():
        try:
            from .sops_loader import decrypt_sops_file

            config = decrypt_sops_file(path)
            return Settings.from_dict(config)
        except (RuntimeError, FileNotFoundError) as e:
            logger.warning(f"Failed to load SOPS config from {path}: {e}")
            logger.warning("Falling back to environment variables")

    return Settings.from_env()


def clear_settings_cache() -> None:
    """Clear the cached settings (useful for testing)."""
    get_settings.cache_clear()
