"""
Unit tests for the dual-event writer and track_request.
"""

import re

import pytest

from ai_docs_analytics.config import DATASET_RAW_EVENTS, DATASET_VISITS, VisitorCategory
from ai_docs_analytics.events import (
    EventWriter,
    build_events,
    generate_event_id,
    track_request,
)
from ai_docs_analytics.schemas import RequestContext
from ai_docs_analytics.utils import VisitorClassification
EVENT_ID_PATTERN = re.compile(r"^\d{13}-[0-9a-z]{8}$")


@pytest.fixture
def writer(recording_backend):
    return EventWriter(recording_backend)


class TestGenerateEventId:
    """Tests for generate_event_id."""

    def test_format(self):
        assert EVENT_ID_PATTERN.match(generate_event_id())

    def test_unique(self):
        assert len({generate_event_id() for _ in range(200)}) == 200


class TestBuildEvents:
    """Tests for build_events."""

    def test_shared_event_id(self):
        context = RequestContext.from_payload(
            {"host": "docs.example.com", "path": "/a", "ua": "codex/1", "accept": "text/html"}
        )
        classification = VisitorClassification(VisitorCategory.CODING_AGENT, "codex", False)

        raw, visit = build_events(context, classification, event_id="1-abcdefgh")

        assert raw.event_id == visit.event_id == "1-abcdefgh"
        assert raw.to_data_point() == {
            "indexes": ["1-abcdefgh"],
            "blobs": ["docs.example.com", "/a", "codex/1", "text/html", "unknown"],
            "doubles": [],
        }
        assert visit.to_data_point() == {
            "indexes": ["1-abcdefgh"],
            "blobs": ["docs.example.com", "/a", "coding-agent", "codex", "unknown"],
            "doubles": [0],
        }

    def test_raw_headers_truncated(self):
        context = RequestContext.from_payload(
            {"user_agent": "u" * 800, "accept_header": "text/html" + "x" * 800}
        )
        classification = VisitorClassification(VisitorCategory.HUMAN, "browser", False)

        raw, _ = build_events(context, classification)

        assert len(raw.user_agent) == 500
        assert len(raw.accept_header) == 500


class TestEventWriter:
    """Tests for EventWriter.record."""

    def test_writes_raw_then_visit(self, writer, recording_backend):
        context = RequestContext.from_payload({"host": "a.com", "accept": "text/html"})
        classification = VisitorClassification(VisitorCategory.BOT, "curl", True)

        outcome = writer.record(context, classification)

        assert outcome.written is True
        datasets = [dataset for dataset, _ in recording_backend.writes]
        assert datasets == [DATASET_RAW_EVENTS, DATASET_VISITS]
        raw_point, visit_point = (point for _, point in recording_backend.writes)
        assert raw_point["indexes"] == visit_point["indexes"] == [outcome.event_id]
        assert visit_point["doubles"] == [1]

    def test_storage_failure_is_swallowed(self, make_backend):
        writer = EventWriter(make_backend(fail_on_dataset=DATASET_RAW_EVENTS))
        context = RequestContext.from_payload({})
        classification = VisitorClassification(VisitorCategory.HUMAN, "browser", False)

        outcome = writer.record(context, classification)

        assert outcome.written is False
        assert "failed" in outcome.error


class TestTrackRequest:
    """Tests for track_request."""

    def test_markdown_curl_scenario(self, writer, recording_backend):
        response = track_request(
            {
                "host": "docs.example.com",
                "path": "/intro",
                "accept": "text/markdown",
                "user_agent": "curl/8.0",
            },
            writer,
        )

        assert response == {
            "ok": True,
            "category": "coding-agent",
            "agent": "unknown-coding-agent",
        }
        assert len(recording_backend.writes) == 2

    def test_not_page_view(self, writer, recording_backend):
        response = track_request({"accept": "application/json"}, writer)

        assert response == {"ok": True, "skipped": "not-page-view"}
        assert recording_backend.writes == []

    def test_filtered_flag_present_only_when_true(self, writer):
        response = track_request(
            {"host": "docs.example.com", "accept": "text/html", "ua": "Googlebot/2.1"},
            writer,
        )

        assert response["filtered"] is True
        assert response["agent"] == "googlebot"

    def test_missing_fields_default(self, writer, recording_backend):
        track_request({"accept_header": "text/html"}, writer)

        _, visit_point = recording_backend.writes[1]
        assert visit_point["blobs"][0] == "unknown"
        assert visit_point["blobs"][1] == "/"
        assert visit_point["blobs"][4] == "unknown"

    def test_write_failure_does_not_change_response(self, make_backend):
        writer = EventWriter(make_backend(fail_on_dataset=DATASET_VISITS))

        response = track_request({"accept": "text/html", "ua": "codex/2"}, writer)

        assert response["ok"] is True
        assert response["agent"] == "codex"
