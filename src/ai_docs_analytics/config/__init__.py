"""Configuration module."""

from .constants import (
    BOT_PATTERN_GROUPS,
    BOT_PATTERNS,
    BROWSING_AGENT_RULES,
    CODING_AGENT_RULES,
    DATASET_RAW_EVENTS,
    DATASET_VISITS,
    EXTRA_DOMAIN_ACCESS,
    PREVIEW_HOST_PATTERNS,
    PatternRule,
    VisitorCategory,
)
from .settings import Settings, clear_settings_cache, get_settings
from .sops_loader import decrypt_sops_file, parse_config_yaml

__all__ = [
    # Classification tables
    "VisitorCategory",
    "PatternRule",
    "CODING_AGENT_RULES",
    "BROWSING_AGENT_RULES",
    "BOT_PATTERNS",
    "BOT_PATTERN_GROUPS",
    "PREVIEW_HOST_PATTERNS",
    # Datasets
    "DATASET_RAW_EVENTS",
    "DATASET_VISITS",
    # Access control
    "EXTRA_DOMAIN_ACCESS",
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Config loading
    "decrypt_sops_file",
    "parse_config_yaml",
]
