"""Client-side visit tracking for request-intercepting integrations."""

from .client import (
    TrackOptions,
    TrackResult,
    get_endpoint,
    options_from_headers,
    track_in_background,
    track_visit,
)

__all__ = [
    "TrackOptions",
    "TrackResult",
    "get_endpoint",
    "options_from_headers",
    "track_in_background",
    "track_visit",
]
