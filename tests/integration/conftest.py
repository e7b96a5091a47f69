"""
Shared fixtures for integration tests.

Provides:
- Temporary SQLite database for isolated testing
- Sample visit data writer
- FastAPI test client wired to the temporary database
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from ai_docs_analytics.api import create_app
from ai_docs_analytics.config import Settings, VisitorCategory, clear_settings_cache
from ai_docs_analytics.events import EventWriter, build_events
from ai_docs_analytics.schemas import RequestContext
from ai_docs_analytics.storage import get_backend
from ai_docs_analytics.utils import VisitorClassification

# =============================================================================
# SAMPLE DATA
# =============================================================================

SAMPLE_VISITS = [
    # (host, path, user_agent, category, agent, filtered)
    ("docs.example.com", "/intro", "claude-code/1.0", VisitorCategory.CODING_AGENT, "claude-code", False),
    ("docs.example.com", "/intro", "codex/0.2", VisitorCategory.CODING_AGENT, "codex", False),
    ("docs.example.com", "/api", "claude-code/1.0", VisitorCategory.CODING_AGENT, "claude-code", False),
    ("example.com", "/", "Mozilla/5.0 Safari", VisitorCategory.HUMAN, "browser", False),
    ("inlang.com", "/docs", "opencode/1.0", VisitorCategory.CODING_AGENT, "opencode", False),
    ("other.dev", "/", "curl/8.0", VisitorCategory.BOT, "curl", True),
    ("other.dev", "/guide", "Mozilla/5.0 Firefox", VisitorCategory.HUMAN, "browser", False),
]


def write_visit(backend, host, path, user_agent, category, agent, filtered, when=None):
    """Write one raw+visit pair, optionally backdated."""
    context = RequestContext.from_payload(
        {"host": host, "path": path, "user_agent": user_agent, "accept": "text/html"}
    )
    raw, visit = build_events(context, VisitorClassification(category, agent, filtered))
    raw_point, visit_point = raw.to_data_point(), visit.to_data_point()
    if when is not None:
        raw_point["timestamp"] = when
        visit_point["timestamp"] = when
    backend.write_data_point("ai_docs_raw_events", raw_point)
    backend.write_data_point("ai_docs_visits", visit_point)
    return raw.event_id


# =============================================================================
# STORAGE FIXTURES
# =============================================================================


@pytest.fixture
def temp_db_path(tmp_path) -> Path:
    """Path to a fresh SQLite database file."""
    return tmp_path / "test_analytics.db"


@pytest.fixture
def sqlite_backend(temp_db_path):
    """Initialized SQLite backend, closed after the test."""
    backend = get_backend("sqlite", db_path=temp_db_path)
    backend.initialize()
    yield backend
    backend.close()


@pytest.fixture
def event_writer(sqlite_backend):
    return EventWriter(sqlite_backend)


@pytest.fixture
def populated_backend(sqlite_backend):
    """SQLite backend holding SAMPLE_VISITS plus one visit older than a week."""
    for visit in SAMPLE_VISITS:
        write_visit(sqlite_backend, *visit)
    write_visit(
        sqlite_backend,
        "docs.example.com",
        "/old",
        "claude-code/0.9",
        VisitorCategory.CODING_AGENT,
        "claude-code",
        False,
        when=datetime.now(timezone.utc) - timedelta(days=10),
    )
    return sqlite_backend


# =============================================================================
# API FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def _clear_settings():
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def api_settings(temp_db_path):
    return Settings(storage_backend="sqlite", sqlite_db_path=str(temp_db_path))


@pytest.fixture
def client(api_settings, sqlite_backend):
    """Test client for an app sharing the test's SQLite backend."""
    app = create_app(api_settings, backend=sqlite_backend)
    with TestClient(app) as test_client:
        yield test_client
