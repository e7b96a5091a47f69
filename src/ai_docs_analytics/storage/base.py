"""
Abstract base class for storage backends.

The analytics store is treated as an opaque columnar engine reachable
through two primitives: appending a data point to a dataset, and running
a SQL-like query that returns rows.
"""

from abc import ABC, abstractmethod
from typing import Any


class StorageBackend(ABC):
    """
    Abstract base class for storage backends.

    All storage implementations (SQLite, Analytics Engine) must implement
    this interface to ensure consistent behavior across backends.
    """

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Return the backend type identifier (e.g., 'sqlite')."""
        pass

    @abstractmethod
    def initialize(self) -> None:
        """
        Initialize the storage backend.

        Should be idempotent - safe to call multiple times.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Close connections and release resources.

        Should be called when the backend is no longer needed.
        """
        pass

    @abstractmethod
    def write_data_point(self, dataset: str, data_point: dict[str, Any]) -> None:
        """
        Append one data point to a dataset.

        Args:
            dataset: Target dataset name
            data_point: Dictionary with ``indexes``, ``blobs`` and ``doubles``
                        lists (analytics engine layout)

        Raises:
            StorageError: If the write fails.
        """
        pass

    @abstractmethod
    def query(self, sql: str) -> list[dict]:
        """
        Execute an analytics query and return rows as dictionaries.

        Args:
            sql: Query text in the analytics SQL dialect, with all
                 values already inlined

        Returns:
            List of dictionaries, one per row.

        Raises:
            StorageError: If query execution fails.
        """
        pass

    def missing_credentials(self) -> list[str]:
        """
        List configuration values required by this backend that are absent.

        Returns:
            Names of missing settings; empty when the backend is usable.
        """
        return []

    def health_check(self) -> dict:
        """
        Perform a health check on the storage backend.

        Returns:
            Dictionary with health status information:
            {
                "healthy": bool,
                "backend_type": str,
                "message": str,
                "details": dict
            }
        """
        missing = self.missing_credentials()
        if missing:
            return {
                "healthy": False,
                "backend_type": self.backend_type,
                "message": f"Missing credentials: {', '.join(missing)}",
                "details": {"missing": missing},
            }
        try:
            self.query("SELECT 1 as test")
            return {
                "healthy": True,
                "backend_type": self.backend_type,
                "message": "Backend is operational",
                "details": {},
            }
        except StorageError as e:
            return {
                "healthy": False,
                "backend_type": self.backend_type,
                "message": f"Health check failed: {str(e)}",
                "details": {"error": str(e)},
            }

    def __enter__(self) -> "StorageBackend":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - ensures resources are released."""
        self.close()


class StorageError(Exception):
    """Base exception for storage backend errors."""

    pass


class StorageConnectionError(StorageError):
    """Raised when connection to storage backend fails."""

    pass


class QueryError(StorageError):
    """Raised when a query fails to execute."""

    pass


class SchemaError(StorageError):
    """Raised when there's a schema-related error."""

    pass


class MissingCredentialsError(StorageError):
    """
    Raised when the analytics engine credentials are not configured.

    Attributes:
        missing: Names of the missing settings
    """

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"missing {' or '.join(self.missing)}")
