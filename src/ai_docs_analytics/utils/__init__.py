"""Utility functions for AI docs analytics."""

from .http_utils import get_header, split_url, truncate_field
from .logging_utils import setup_logging
from .visitor_classifier import (
    CLASSIFICATION_TIERS,
    VisitorClassification,
    classify,
    classify_dict,
    detect_bot_name,
    get_agent_names_by_category,
    get_bot_patterns_by_group,
    is_page_view,
    is_preview_host,
)

__all__ = [
    # Visitor classification
    "CLASSIFICATION_TIERS",
    "VisitorClassification",
    "classify",
    "classify_dict",
    "detect_bot_name",
    "get_agent_names_by_category",
    "get_bot_patterns_by_group",
    "is_page_view",
    "is_preview_host",
    # HTTP utilities
    "get_header",
    "split_url",
    "truncate_field",
    # Logging
    "setup_logging",
]
