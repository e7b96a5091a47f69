"""
Storage abstraction layer for visitor analytics events.

Provides a unified interface over the analytics store: an insert
primitive (write_data_point) and a SQL-like query primitive (query).

Usage:
    from ai_docs_analytics.storage import get_backend

    # Get backend from configuration
    backend = get_backend()

    # Or explicitly specify backend
    backend = get_backend('sqlite', db_path='data/events.db')

    # Use as context manager
    with get_backend() as backend:
        backend.initialize()
        rows = backend.query("SELECT blob1 AS host FROM ai_docs_visits")
"""

from .base import (
    MissingCredentialsError,
    QueryError,
    SchemaError,
    StorageBackend,
    StorageConnectionError,
    StorageError,
)
from .factory import (
    get_backend,
    is_backend_available,
    list_available_backends,
    register_backend,
)

__all__ = [
    # Base classes and exceptions
    "StorageBackend",
    "StorageError",
    "StorageConnectionError",
    "QueryError",
    "SchemaError",
    "MissingCredentialsError",
    # Factory functions
    "get_backend",
    "register_backend",
    "list_available_backends",
    "is_backend_available",
]
