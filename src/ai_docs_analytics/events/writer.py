"""
Dual-event writer and tracking entry point.

Every recorded request produces one immutable raw event and one derived
visit event that share an event id, so visits can later be re-analysed
by joining back to the raw request.
"""

import logging
import secrets
import string
import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..config.constants import (
    DATASET_RAW_EVENTS,
    DATASET_VISITS,
    SKIPPED_NOT_PAGE_VIEW,
)
from ..schemas.events import RawEvent, RequestContext, VisitEvent
from ..storage import StorageBackend, StorageError
from ..utils.visitor_classifier import VisitorClassification, classify, is_page_view

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LENGTH = 8


def generate_event_id() -> str:
    """
    Generate a unique event id: epoch milliseconds plus a random base36 suffix.

    >>> len(generate_event_id().split("-")[1])
    8
    """
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LENGTH))
    return f"{int(time.time() * 1000)}-{suffix}"


def build_events(
    context: RequestContext,
    classification: VisitorClassification,
    event_id: Optional[str] = None,
) -> tuple[RawEvent, VisitEvent]:
    """
    Build the raw and visit events for one request.

    Args:
        context: Normalized request metadata
        classification: Classifier output for the request
        event_id: Shared id (generated if None)

    Returns:
        Tuple of (RawEvent, VisitEvent) sharing the same event_id
    """
    event_id = event_id or generate_event_id()
    raw = RawEvent(
        event_id=event_id,
        host=context.host,
        path=context.path,
        user_agent=context.user_agent,
        accept_header=context.accept_header,
        country=context.country,
    )
    visit = VisitEvent(
        event_id=event_id,
        host=context.host,
        path=context.path,
        category=classification.category,
        agent=classification.agent,
        country=context.country,
        is_filtered=classification.filtered,
    )
    return raw, visit


@dataclass
class WriteOutcome:
    """Result of writing one request's events."""

    event_id: str
    written: bool
    error: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "event_id": self.event_id,
            "written": self.written,
            "error": self.error,
        }


class EventWriter:
    """
    Writes raw and visit events to the analytics store.

    Storage failures are logged and reported in the outcome, never raised:
    a dropped analytics event must not affect the tracked request.
    """

    def __init__(
        self,
        backend: StorageBackend,
        raw_dataset: str = DATASET_RAW_EVENTS,
        visits_dataset: str = DATASET_VISITS,
    ):
        self._backend = backend
        self.raw_dataset = raw_dataset
        self.visits_dataset = visits_dataset

    def record(
        self,
        context: RequestContext,
        classification: VisitorClassification,
    ) -> WriteOutcome:
        """Emit one raw event and one visit event sharing a fresh event id."""
        raw, visit = build_events(context, classification)

        try:
            self._backend.write_data_point(self.raw_dataset, raw.to_data_point())
            self._backend.write_data_point(self.visits_dataset, visit.to_data_point())
        except StorageError as e:
            logger.warning(f"Dropped analytics event {raw.event_id}: {e}")
            return WriteOutcome(event_id=raw.event_id, written=False, error=str(e))

        logger.debug(
            f"Recorded {visit.category.value}/{visit.agent} visit "
            f"{raw.event_id} on {visit.host}"
        )
        return WriteOutcome(event_id=raw.event_id, written=True)


def track_request(payload: Mapping[str, Any], writer: EventWriter) -> dict:
    """
    Gate, classify and record one tracking payload.

    Args:
        payload: Tracking body (host, path, accept_header|accept,
                 user_agent|ua, country)
        writer: Event writer for the analytics store

    Returns:
        ``{"ok": True, "skipped": "not-page-view"}`` when gated out, else
        ``{"ok": True, "category", "agent"}`` plus ``"filtered": True``
        for filtered traffic
    """
    context = RequestContext.from_payload(payload)

    if not is_page_view(context.accept_header):
        return {"ok": True, "skipped": SKIPPED_NOT_PAGE_VIEW}

    classification = classify(context.user_agent, context.accept_header, context.host)
    writer.record(context, classification)

    response: dict[str, Any] = {
        "ok": True,
        "category": classification.category.value,
        "agent": classification.agent,
    }
    if classification.filtered:
        response["filtered"] = True
    return response
