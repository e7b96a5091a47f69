"""
Storage backend factory.

Backends are registered lazily so that importing the storage package does
not pull in backend-specific modules until one is requested.
"""

import importlib
import logging
from pathlib import Path
from typing import Optional

from .base import StorageBackend, StorageError

logger = logging.getLogger(__name__)

_BACKEND_REGISTRY: dict[str, type[StorageBackend]] = {}

# backend type -> (module, class) loaded on first use
_LAZY_BACKENDS: dict[str, tuple[str, str]] = {
    "sqlite": (".sqlite_backend", "SQLiteBackend"),
    "analytics_engine": (".analytics_engine", "AnalyticsEngineBackend"),
}


def register_backend(backend_type: str, backend_class: type[StorageBackend]) -> None:
    """Register (or replace) the class used for a backend type."""
    _BACKEND_REGISTRY[backend_type.lower()] = backend_class
    logger.debug(f"Registered storage backend: {backend_type}")


def _resolve(backend_type: str) -> Optional[type[StorageBackend]]:
    if backend_type not in _BACKEND_REGISTRY and backend_type in _LAZY_BACKENDS:
        module_name, class_name = _LAZY_BACKENDS[backend_type]
        module = importlib.import_module(module_name, package=__package__)
        register_backend(backend_type, getattr(module, class_name))
    return _BACKEND_REGISTRY.get(backend_type)


def get_backend(
    backend_type: Optional[str] = None,
    **kwargs,
) -> StorageBackend:
    """
    Create a storage backend.

    Args:
        backend_type: 'sqlite' or 'analytics_engine'; read from settings if None
        **kwargs: Constructor arguments (db_path for SQLite; account_id and
                  api_token for Analytics Engine). Taken from settings when
                  omitted.

    Returns:
        Uninitialized backend instance

    Raises:
        StorageError: If the type is unknown or construction fails

    Examples:
        backend = get_backend('sqlite', db_path='data/events.db')
        backend.initialize()
    """
    if backend_type is None:
        from ..config.settings import get_settings

        backend_type = get_settings().storage_backend

    backend_type = backend_type.lower()
    backend_class = _resolve(backend_type)
    if backend_class is None:
        raise StorageError(
            f"Unknown storage backend: '{backend_type}'. "
            f"Available backends: {', '.join(list_available_backends())}"
        )

    if not kwargs:
        kwargs = _settings_kwargs(backend_type)

    try:
        backend = backend_class(**kwargs)
    except (TypeError, ValueError, OSError) as e:
        raise StorageError(f"Failed to create {backend_type} backend: {e}") from e

    logger.info(f"Created {backend_type} storage backend")
    return backend


def _settings_kwargs(backend_type: str) -> dict:
    """Constructor arguments for a backend type, from settings."""
    from ..config.settings import get_settings

    settings = get_settings()
    if backend_type == "sqlite":
        return {"db_path": Path(settings.sqlite_db_path)}
    if backend_type == "analytics_engine":
        return {
            "account_id": settings.cf_account_id,
            "api_token": settings.cf_api_token,
        }
    return {}


def list_available_backends() -> list[str]:
    """Names of all known backend types, built-in and registered."""
    names = list(_LAZY_BACKENDS)
    names.extend(name for name in _BACKEND_REGISTRY if name not in names)
    return names


def is_backend_available(backend_type: str) -> bool:
    """Check whether a backend type can be created."""
    return _resolve(backend_type.lower()) is not None
