"""
Integration tests for the analytics API.

Runs the FastAPI app against a temporary SQLite database.
"""

from fastapi.testclient import TestClient

from ai_docs_analytics.api import create_app
from ai_docs_analytics.config import DATASET_RAW_EVENTS, DATASET_VISITS, Settings
from ai_docs_analytics.storage.analytics_engine import AnalyticsEngineBackend


class TestTrack:
    """Tests for POST /track."""

    def test_markdown_curl_is_coding_agent(self, client, sqlite_backend):
        response = client.post(
            "/track",
            json={
                "host": "docs.example.com",
                "path": "/intro",
                "accept": "text/markdown",
                "user_agent": "curl/8.0",
            },
        )

        assert response.status_code == 200
        assert response.json() == {
            "ok": True,
            "category": "coding-agent",
            "agent": "unknown-coding-agent",
        }
        assert sqlite_backend.count_rows(DATASET_RAW_EVENTS) == 1
        assert sqlite_backend.count_rows(DATASET_VISITS) == 1

    def test_json_accept_is_skipped(self, client, sqlite_backend):
        response = client.post(
            "/track",
            json={"host": "docs.example.com", "accept": "application/json", "ua": "curl/8.0"},
        )

        assert response.json() == {"ok": True, "skipped": "not-page-view"}
        assert sqlite_backend.count_rows(DATASET_RAW_EVENTS) == 0
        assert sqlite_backend.count_rows(DATASET_VISITS) == 0

    def test_filtered_bot(self, client):
        response = client.post(
            "/track",
            json={"host": "docs.example.com", "accept_header": "text/html", "ua": "Googlebot"},
        )

        assert response.json() == {
            "ok": True,
            "category": "bot",
            "agent": "googlebot",
            "filtered": True,
        }

    def test_event_pair_shares_id(self, client, sqlite_backend):
        client.post(
            "/track",
            json={"host": "a.com", "accept": "text/html", "user_agent": "codex/1.0"},
        )

        rows = sqlite_backend.query(
            "SELECT r.index1 AS raw_id, v.index1 AS visit_id, v.blob4 AS agent "
            "FROM ai_docs_raw_events r JOIN ai_docs_visits v ON r.index1 = v.index1"
        )
        assert len(rows) == 1
        assert rows[0]["agent"] == "codex"

    def test_empty_body(self, client):
        """No body is not a page view, and is not an error."""
        response = client.post("/track")

        assert response.status_code == 200
        assert response.json() == {"ok": True, "skipped": "not-page-view"}


class TestDetect:
    """Tests for GET /detect."""

    def test_coding_agent_headers(self, client):
        response = client.get(
            "/detect",
            headers={"User-Agent": "claude-code/1.0", "Accept": "text/markdown"},
        )

        assert response.json() == {
            "category": "coding-agent",
            "agent": "claude-code",
            "headers": {"user_agent": "claude-code/1.0", "accept": "text/markdown"},
        }

    def test_bot_includes_filtered(self, client):
        response = client.get("/detect", headers={"User-Agent": "GPTBot/1.0", "Accept": "*/*"})

        body = response.json()
        assert body["category"] == "bot"
        assert body["filtered"] is True


class TestQuery:
    """Tests for GET /query."""

    def test_default_query(self, client):
        client.post(
            "/track",
            json={"host": "docs.example.com", "accept": "text/html", "ua": "codex/1.0"},
        )

        response = client.get("/query")

        assert response.status_code == 200
        assert response.json() == {
            "data": [
                {
                    "host": "docs.example.com",
                    "category": "coding-agent",
                    "agent": "codex",
                    "visits": 1,
                }
            ]
        }

    def test_unknown_template(self, client):
        response = client.get("/query", params={"q": "drop-tables"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "invalid query"
        assert "default" in body["allowed"]
        assert "debug" in body["allowed"]

    def test_host_filter_includes_subdomains(self, client):
        for host in ("example.com", "docs.example.com", "other.dev"):
            client.post("/track", json={"host": host, "accept": "text/html", "ua": "codex/1"})

        response = client.get("/query", params={"q": "sites", "host": "example.com"})

        hosts = {row["host"] for row in response.json()["data"]}
        assert hosts == {"example.com", "docs.example.com"}

    def test_secret_required_when_configured(self, sqlite_backend):
        app = create_app(Settings(api_secret="s3cret"), backend=sqlite_backend)
        with TestClient(app) as client:
            denied = client.get("/query")
            wrong = client.get("/query", headers={"x-api-secret": "nope"})
            allowed = client.get("/query", headers={"x-api-secret": "s3cret"})

        assert denied.status_code == 401
        assert denied.json() == {"error": "unauthorized"}
        assert wrong.status_code == 401
        assert allowed.status_code == 200

    def test_missing_engine_credentials(self):
        app = create_app(Settings(storage_backend="analytics_engine"), backend=AnalyticsEngineBackend())
        with TestClient(app) as client:
            response = client.get("/query", params={"q": "default"})

        assert response.status_code == 500
        assert response.json() == {"error": "missing CF_ACCOUNT_ID or CF_API_TOKEN"}

    def test_missing_credentials_checked_before_template(self):
        app = create_app(Settings(), backend=AnalyticsEngineBackend(account_id="acct"))
        with TestClient(app) as client:
            response = client.get("/query", params={"q": "nope"})

        assert response.status_code == 500


class TestHealth:
    """Tests for GET /health."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"ok": True}

    def test_cors(self, client):
        response = client.get("/health", headers={"Origin": "https://docs.example.com"})

        assert response.headers["access-control-allow-origin"] == "*"
