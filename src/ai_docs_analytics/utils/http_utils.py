"""
HTTP utility functions.

Helpers for reading request metadata from header mappings.
"""

from typing import Mapping, Optional, Sequence, Union
from urllib.parse import urlsplit

from ..config.constants import MAX_HEADER_FIELD_LENGTH

HeaderValue = Union[str, Sequence[str], None]


def get_header(headers: Mapping[str, HeaderValue], name: str) -> str:
    """
    Read a header value case-insensitively.

    List-valued headers (as produced by some frameworks) yield their
    first element.

    Args:
        headers: Header mapping
        name: Header name, any case

    Returns:
        Header value, or '' if absent

    Examples:
        >>> get_header({"User-Agent": "curl/8.0"}, "user-agent")
        'curl/8.0'
        >>> get_header({"accept": ["text/html", "text/plain"]}, "Accept")
        'text/html'
    """
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() != wanted:
            continue
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        return value[0] if value else ""
    return ""


def truncate_field(value: Optional[str], limit: int = MAX_HEADER_FIELD_LENGTH) -> str:
    """
    Truncate a raw header value for storage.

    >>> len(truncate_field("x" * 600))
    500
    """
    return (value or "")[:limit]


def split_url(url: str) -> tuple[str, str]:
    """
    Split a request URL into (hostname, path).

    >>> split_url("https://docs.example.com/intro?x=1")
    ('docs.example.com', '/intro')
    """
    parts = urlsplit(url)
    return parts.hostname or "", parts.path or "/"
