"""Event recording for classified visits."""

from .writer import (
    EventWriter,
    WriteOutcome,
    build_events,
    generate_event_id,
    track_request,
)

__all__ = [
    "EventWriter",
    "WriteOutcome",
    "build_events",
    "generate_event_id",
    "track_request",
]
