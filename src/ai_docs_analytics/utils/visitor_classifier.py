"""
Visitor classification from request metadata.

Classifies a documentation-site request into one of four visitor
categories (human, bot, browsing agent, coding agent) using only the
user-agent, the Accept header and the requested host.
"""

from dataclasses import dataclass
from typing import Optional

from ..config.constants import (
    BOT_PATTERN_GROUPS,
    BOT_PATTERNS,
    BROWSER_AGENT,
    BROWSING_AGENT_RULES,
    CODING_AGENT_RULES,
    MACHINE_READABLE_ACCEPT_TYPES,
    PAGE_VIEW_ACCEPT_TYPES,
    PREVIEW_HOST_PATTERNS,
    UNKNOWN_BOT,
    UNKNOWN_CODING_AGENT,
    PatternRule,
    VisitorCategory,
)


@dataclass(frozen=True)
class VisitorClassification:
    """Result of visitor classification."""

    category: VisitorCategory
    agent: str
    filtered: bool

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "category": self.category.value,
            "agent": self.agent,
            "filtered": self.filtered,
        }


@dataclass(frozen=True)
class ClassificationTier:
    """An ordered group of rules evaluated against one request field."""

    name: str
    source: str  # "user_agent" | "accept" | "host"
    rules: tuple[PatternRule, ...]


# Evaluation order is significant: the accept tier must run before the
# bot tier, so HTTP client libraries negotiating markdown count as coding agents.
CLASSIFICATION_TIERS: tuple[ClassificationTier, ...] = (
    ClassificationTier("coding_agent", "user_agent", CODING_AGENT_RULES),
    ClassificationTier("browsing_agent", "user_agent", BROWSING_AGENT_RULES),
    ClassificationTier(
        "machine_readable_accept",
        "accept",
        tuple(
            PatternRule(
                accept_type,
                VisitorCategory.CODING_AGENT,
                UNKNOWN_CODING_AGENT,
                False,
            )
            for accept_type in MACHINE_READABLE_ACCEPT_TYPES
        ),
    ),
    ClassificationTier(
        "bot",
        "user_agent",
        tuple(
            PatternRule(pattern, VisitorCategory.BOT, pattern, True)
            for pattern in BOT_PATTERNS
        ),
    ),
    ClassificationTier(
        "preview_host",
        "host",
        tuple(
            PatternRule(pattern, VisitorCategory.HUMAN, BROWSER_AGENT, True)
            for pattern in PREVIEW_HOST_PATTERNS
        ),
    ),
)

DEFAULT_CLASSIFICATION = VisitorClassification(
    category=VisitorCategory.HUMAN, agent=BROWSER_AGENT, filtered=False
)


def classify(
    user_agent: Optional[str],
    accept_header: Optional[str],
    host: Optional[str],
) -> VisitorClassification:
    """
    Classify a request into a visitor category.

    Matching is case-insensitive substring matching; the first matching
    rule in CLASSIFICATION_TIERS wins. The function never fails: missing
    values are treated as empty strings.

    Args:
        user_agent: The HTTP User-Agent header value
        accept_header: The HTTP Accept header value
        host: The requested host

    Returns:
        VisitorClassification with category, agent and filtered flag

    Examples:
        >>> classify("claude-code/1.0", "text/html", "docs.example.com").agent
        'claude-code'
        >>> classify("curl/8.0", "text/markdown", "docs.example.com").category
        <VisitorCategory.CODING_AGENT: 'coding-agent'>
    """
    fields = {
        "user_agent": (user_agent or "").lower(),
        "accept": (accept_header or "").lower(),
        "host": (host or "").lower(),
    }

    for tier in CLASSIFICATION_TIERS:
        value = fields[tier.source]
        for rule in tier.rules:
            if rule.matches(value):
                return VisitorClassification(
                    category=rule.category,
                    agent=rule.agent,
                    filtered=rule.filtered,
                )

    return DEFAULT_CLASSIFICATION


def classify_dict(
    user_agent: Optional[str],
    accept_header: Optional[str],
    host: Optional[str],
) -> dict:
    """Classify and return the result as a plain dictionary."""
    return classify(user_agent, accept_header, host).to_dict()


def detect_bot_name(user_agent: Optional[str]) -> str:
    """
    Return the first bot signature found in the user-agent.

    Args:
        user_agent: The HTTP User-Agent header value

    Returns:
        Matching signature token, or 'unknown-bot' if none matches
    """
    ua = (user_agent or "").lower()
    for pattern in BOT_PATTERNS:
        if pattern in ua:
            return pattern
    return UNKNOWN_BOT


def is_page_view(accept_header: Optional[str]) -> bool:
    """
    Check whether a request asks for a document (HTML, markdown or plain text).

    Asset, API and XHR requests fail this check and must not be recorded.

    >>> is_page_view("application/json")
    False
    >>> is_page_view("text/html,*/*")
    True
    """
    accept = (accept_header or "").lower()
    return any(accept_type in accept for accept_type in PAGE_VIEW_ACCEPT_TYPES)


def is_preview_host(host: Optional[str]) -> bool:
    """Check whether a host is a local or ephemeral deployment host."""
    value = (host or "").lower()
    return any(pattern in value for pattern in PREVIEW_HOST_PATTERNS)


def get_agent_names_by_category(category: VisitorCategory | str) -> list[str]:
    """
    Get the distinct agent names a category can produce.

    Args:
        category: A VisitorCategory or its string value

    Returns:
        Agent names in rule order, without duplicates
    """
    category = VisitorCategory(category)
    names: list[str] = []
    for tier in CLASSIFICATION_TIERS:
        for rule in tier.rules:
            if rule.category == category and rule.agent not in names:
                names.append(rule.agent)
    if category == VisitorCategory.HUMAN and BROWSER_AGENT not in names:
        names.append(BROWSER_AGENT)
    return names


def get_bot_patterns_by_group(group: str) -> list[str]:
    """
    Get bot signatures for a group (e.g., 'search', 'http_client').

    Returns:
        List of signature tokens, empty for an unknown group
    """
    return list(BOT_PATTERN_GROUPS.get(group, ()))
