"""
FastAPI dependencies.

The app stores its settings and storage backend on ``app.state``; route
handlers reach them through these functions so tests can swap them with
``app.dependency_overrides``.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import Request

from ..config.settings import Settings
from ..events.writer import EventWriter
from ..reporting.query_catalog import QueryCatalog, get_catalog
from ..storage import StorageBackend, get_backend


def backend_from_settings(settings: Settings) -> StorageBackend:
    """Create (uninitialized) the storage backend named by settings."""
    if settings.storage_backend == "analytics_engine":
        return get_backend(
            "analytics_engine",
            account_id=settings.cf_account_id,
            api_token=settings.cf_api_token,
        )
    return get_backend(settings.storage_backend, db_path=Path(settings.sqlite_db_path))


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> StorageBackend:
    return request.app.state.backend


def get_event_writer(request: Request) -> EventWriter:
    return EventWriter(request.app.state.backend)


def get_query_catalog() -> QueryCatalog:
    return get_catalog()
