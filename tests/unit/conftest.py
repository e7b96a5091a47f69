"""
Pytest configuration and shared fixtures for unit tests.
"""

import pytest

from ai_docs_analytics.config import clear_settings_cache
from ai_docs_analytics.storage import StorageBackend, StorageError


class RecordingBackend(StorageBackend):
    """In-memory backend that records writes and returns canned rows."""

    def __init__(self, rows=None, fail_on_dataset=None):
        self.writes = []
        self.queries = []
        self.rows = list(rows or [])
        self.fail_on_dataset = fail_on_dataset
        self.closed = False

    @property
    def backend_type(self) -> str:
        return "recording"

    def initialize(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True

    def write_data_point(self, dataset, data_point):
        if dataset == self.fail_on_dataset:
            raise StorageError(f"write to {dataset} failed")
        self.writes.append((dataset, data_point))

    def query(self, sql):
        self.queries.append(sql)
        return list(self.rows)


@pytest.fixture
def recording_backend():
    """Fresh in-memory backend."""
    return RecordingBackend()


@pytest.fixture(autouse=True)
def _clear_settings():
    """Settings are cached process-wide; reset around every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def make_backend():
    """Factory for RecordingBackend with custom rows or failures."""
    return RecordingBackend
