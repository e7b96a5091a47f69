"""
Client-side visit tracking.

Used by request-intercepting integrations to report page views to the
analytics API's POST /track endpoint. Tracking never raises and never
blocks the caller for longer than the configured timeout.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Mapping, Optional

import httpx

from ..config.constants import (
    DEFAULT_TRACK_ENDPOINT,
    SKIPPED_DISABLED,
    SKIPPED_NOT_PAGE_VIEW,
    UNKNOWN_VALUE,
)
from ..utils.http_utils import HeaderValue, get_header, split_url
from ..utils.visitor_classifier import is_page_view

logger = logging.getLogger(__name__)

# Default for endpoint arguments: resolve through settings
FROM_SETTINGS = object()


@dataclass
class TrackOptions:
    """Metadata of one intercepted request."""

    host: str
    path: str
    user_agent: str
    accept: str
    country: Optional[str] = None

    def to_payload(self) -> dict:
        """Convert to the POST /track body."""
        return {
            "host": self.host,
            "path": self.path,
            "user_agent": self.user_agent,
            "accept": self.accept,
            "country": self.country or UNKNOWN_VALUE,
        }


@dataclass
class TrackResult:
    """Outcome of one tracking call."""

    ok: bool
    category: Optional[str] = None
    agent: Optional[str] = None
    skipped: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary, omitting empty fields."""
        result = {"ok": self.ok}
        for key in ("category", "agent", "skipped", "error"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result


def get_endpoint(settings=None) -> Optional[str]:
    """
    Resolve the tracking endpoint.

    Returns:
        The configured endpoint, the default endpoint when unset, or None
        when tracking is disabled by an empty value
    """
    if settings is None:
        from ..config.settings import get_settings

        settings = get_settings()

    if settings.analytics_endpoint == "":
        return None
    return settings.analytics_endpoint or DEFAULT_TRACK_ENDPOINT


def _resolve_target(endpoint, timeout: Optional[float], settings) -> tuple:
    """Fill in an omitted endpoint or timeout from settings."""
    if endpoint is not FROM_SETTINGS and timeout is not None:
        return endpoint, timeout

    if settings is None:
        from ..config.settings import get_settings

        settings = get_settings()

    if endpoint is FROM_SETTINGS:
        endpoint = get_endpoint(settings)
    if timeout is None:
        timeout = settings.tracker_timeout_seconds
    return endpoint, timeout


def options_from_headers(
    url: str,
    headers: Mapping[str, HeaderValue],
    country_header: Optional[str] = None,
) -> TrackOptions:
    """
    Build TrackOptions from a request URL and its headers.

    Args:
        url: Full request URL
        headers: Request headers (any case, list values allowed)
        country_header: Header carrying the client country
                        (e.g. 'x-vercel-ip-country', 'cf-ipcountry')
    """
    host, path = split_url(url)
    country = get_header(headers, country_header) if country_header else ""
    return TrackOptions(
        host=host or get_header(headers, "host"),
        path=path,
        user_agent=get_header(headers, "user-agent"),
        accept=get_header(headers, "accept"),
        country=country or None,
    )


def track_visit(
    options: TrackOptions,
    endpoint=FROM_SETTINGS,
    timeout: Optional[float] = None,
    client: Optional[httpx.Client] = None,
    settings=None,
) -> TrackResult:
    """
    Report one request to the tracking endpoint.

    Args:
        options: Request metadata
        endpoint: POST /track URL; None disables tracking. Resolved with
                  get_endpoint(settings) when omitted
        timeout: Request timeout in seconds; settings.tracker_timeout_seconds
                 when None
        client: Optional httpx client (tests inject a mock transport)
        settings: Settings to resolve defaults from (loaded if None)

    Returns:
        TrackResult; network and decoding failures are returned as
        ``ok=False`` with an error message, never raised
    """
    endpoint, timeout = _resolve_target(endpoint, timeout, settings)
    if not endpoint:
        return TrackResult(ok=True, skipped=SKIPPED_DISABLED)

    if not is_page_view(options.accept):
        return TrackResult(ok=True, skipped=SKIPPED_NOT_PAGE_VIEW)

    try:
        if client is not None:
            response = client.post(endpoint, json=options.to_payload(), timeout=timeout)
        else:
            response = httpx.post(endpoint, json=options.to_payload(), timeout=timeout)
        body = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.debug(f"Visit tracking failed for {options.host}{options.path}: {e}")
        return TrackResult(ok=False, error=str(e) or type(e).__name__)

    if not isinstance(body, dict):
        return TrackResult(ok=False, error="unexpected response")

    return TrackResult(
        ok=bool(body.get("ok", False)),
        category=body.get("category"),
        agent=body.get("agent"),
        skipped=body.get("skipped"),
        error=body.get("error"),
    )


def track_in_background(
    options: TrackOptions,
    endpoint=FROM_SETTINGS,
    timeout: Optional[float] = None,
    settings=None,
) -> Optional[threading.Thread]:
    """
    Fire-and-forget variant of track_visit.

    Endpoint and timeout are resolved as in track_visit before the thread
    starts.

    Returns:
        The started daemon thread, or None when nothing needs sending
    """
    endpoint, timeout = _resolve_target(endpoint, timeout, settings)
    if not endpoint or not is_page_view(options.accept):
        return None

    thread = threading.Thread(
        target=track_visit,
        args=(options, endpoint, timeout),
        name="ai-docs-analytics-track",
        daemon=True,
    )
    thread.start()
    return thread
