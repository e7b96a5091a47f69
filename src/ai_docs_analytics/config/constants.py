"""
Constants for visitor classification, event datasets and access control.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Union


class VisitorCategory(str, Enum):
    """Visitor categories recorded on every visit event."""

    BOT = "bot"
    BROWSING_AGENT = "browsing-agent"
    CODING_AGENT = "coding-agent"
    HUMAN = "human"


@dataclass(frozen=True)
class PatternRule:
    """
    A single user-agent signature rule.

    ``token`` is either one lowercase substring, or a tuple of substrings
    that must all be present in the user-agent.
    """

    token: Union[str, tuple[str, ...]]
    category: VisitorCategory
    agent: str
    filtered: bool

    def matches(self, user_agent: str) -> bool:
        """Check a lowercased user-agent against this rule."""
        if isinstance(self.token, tuple):
            return all(part in user_agent for part in self.token)
        return self.token in user_agent


# =============================================================================
# Agent Names
# =============================================================================

UNKNOWN_CODING_AGENT = "unknown-coding-agent"
UNKNOWN_BOT = "unknown-bot"
BROWSER_AGENT = "browser"

# =============================================================================
# Classification Rule Tables
# =============================================================================

# Tier 1: coding agents identified by user-agent
CODING_AGENT_RULES: tuple[PatternRule, ...] = (
    PatternRule("claude-code", VisitorCategory.CODING_AGENT, "claude-code", False),
    PatternRule("claudecode", VisitorCategory.CODING_AGENT, "claude-code", False),
    PatternRule("codex", VisitorCategory.CODING_AGENT, "codex", False),
    PatternRule("opencode", VisitorCategory.CODING_AGENT, "opencode", False),
)

# Tier 2: conversational browsing agents fetching on behalf of a user
BROWSING_AGENT_RULES: tuple[PatternRule, ...] = (
    PatternRule("chatgpt-user", VisitorCategory.BROWSING_AGENT, "chatgpt-user", True),
    PatternRule(
        "claude/1.0", VisitorCategory.BROWSING_AGENT, "claude-computer-use", True
    ),
    PatternRule(
        ("claude", "compatible"),
        VisitorCategory.BROWSING_AGENT,
        "claude-computer-use",
        True,
    ),
    PatternRule(
        "perplexity-user", VisitorCategory.BROWSING_AGENT, "perplexity-comet", True
    ),
)

# Tier 3: accept types that mark automated documentation consumption
MACHINE_READABLE_ACCEPT_TYPES: tuple[str, ...] = ("text/markdown",)

# Tier 4: bot and crawler signatures, grouped by kind (order is match order)
BOT_PATTERN_GROUPS: MappingProxyType = MappingProxyType(
    {
        "search": (
            "googlebot",
            "bingbot",
            "yandexbot",
            "baiduspider",
            "duckduckbot",
            "slurp",
        ),
        "social": ("facebookexternalhit", "linkedinbot", "twitterbot"),
        "seo": (
            "applebot",
            "semrushbot",
            "ahrefsbot",
            "mj12bot",
            "dotbot",
            "petalbot",
            "bytespider",
        ),
        # training/indexing crawlers, not browsing agents
        "ai_crawler": (
            "gptbot",
            "claudebot",
            "anthropic-ai",
            "ccbot",
            "cohere-ai",
            "perplexitybot",
        ),
        "monitoring": (
            "pingdom",
            "uptimerobot",
            "statuscake",
            "site24x7",
            "newrelic",
            "datadog",
            "checkly",
            "freshping",
        ),
        "infra": ("vercel-healthcheck", "vercel-edge-functions"),
        "http_client": (
            "wget",
            "curl",
            "httpie",
            "python-requests",
            "go-http-client",
            "scrapy",
            "httpclient",
            "java/",
            "okhttp",
            "axios",
            "node-fetch",
            "undici",
        ),
    }
)

BOT_PATTERNS: tuple[str, ...] = tuple(
    pattern for group in BOT_PATTERN_GROUPS.values() for pattern in group
)

# Tier 5: local and ephemeral deployment hosts
PREVIEW_HOST_PATTERNS: tuple[str, ...] = (
    ".vercel.app",
    ".netlify.app",
    ".pages.dev",
    "localhost",
    "127.0.0.1",
)

# Accept types that make a request eligible for recording at all
PAGE_VIEW_ACCEPT_TYPES: tuple[str, ...] = ("text/html", "text/markdown", "text/plain")

# =============================================================================
# Event Datasets
# =============================================================================

DATASET_RAW_EVENTS = "ai_docs_raw_events"
DATASET_VISITS = "ai_docs_visits"
EVENT_DATASETS: tuple[str, ...] = (DATASET_RAW_EVENTS, DATASET_VISITS)

# Raw header values are truncated before storage
MAX_HEADER_FIELD_LENGTH = 500

# Sentinels for missing request fields
UNKNOWN_VALUE = "unknown"
DEFAULT_PATH = "/"

SKIPPED_NOT_PAGE_VIEW = "not-page-view"
SKIPPED_DISABLED = "disabled"

# =============================================================================
# Access Control
# =============================================================================

# Email domains that implicitly grant access to additional hosts
EXTRA_DOMAIN_ACCESS: MappingProxyType = MappingProxyType(
    {
        "opral.com": ("inlang.com",),
        "jamesrichardfry.com": ("clawgles.art", "clawblocks.art"),
    }
)

# =============================================================================
# Tracker Client
# =============================================================================

DEFAULT_TRACK_ENDPOINT = "https://ai-docs-analytics-api.theisease.workers.dev/track"
DEFAULT_API_URL = "https://ai-docs-analytics-api.theisease.workers.dev"
TRACK_TIMEOUT_SECONDS = 2.5

API_SECRET_HEADER = "x-api-secret"

# =============================================================================
# Query API Credentials
# =============================================================================

CREDENTIAL_NAMES = ("CF_ACCOUNT_ID", "CF_API_TOKEN")
MISSING_CREDENTIALS_ERROR = f"missing {' or '.join(CREDENTIAL_NAMES)}"
