"""
SQLite storage backend implementation.

Emulates the analytics engine's columnar datasets locally (index1,
blob1..blob7, double1..double2, timestamp, _sample_interval), so the same
query templates run in local development and in tests.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ..config.constants import EVENT_DATASETS
from ..schemas.events import MAX_BLOBS, MAX_DOUBLES, get_create_dataset_table_sql
from .base import QueryError, SchemaError, StorageBackend, StorageConnectionError
from .sql_compat import SQLBuilder

logger = logging.getLogger(__name__)


# Index definitions for query performance
INDEX_DEFINITIONS = [
    f"CREATE INDEX IF NOT EXISTS idx_{dataset}_{column} ON {dataset}({column})"
    for dataset in EVENT_DATASETS
    for column in ("index1", "timestamp", "blob1")
]


def _to_sqlite_timestamp(value: Any) -> Optional[str]:
    """Convert a datetime to the 'YYYY-MM-DD HH:MM:SS' UTC form used by datetime('now')."""
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return str(value)


class SQLiteBackend(StorageBackend):
    """
    SQLite storage backend for local development.

    A single connection is shared across threads and guarded by a lock,
    since the query gateway fans out queries concurrently.
    """

    def __init__(
        self,
        db_path: Path | str = "data/ai-docs-analytics.db",
        *,
        timeout: float = 30.0,
    ):
        """
        Initialize SQLite backend.

        Args:
            db_path: Path to SQLite database file
            timeout: Connection timeout in seconds
        """
        self.db_path = Path(db_path)
        self._timeout = timeout
        self._connection: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()
        self._sql = SQLBuilder("sqlite")

        # Ensure parent directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def backend_type(self) -> str:
        """Return backend type identifier."""
        return "sqlite"

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            try:
                self._connection = sqlite3.connect(
                    str(self.db_path),
                    check_same_thread=False,
                    timeout=self._timeout,
                )
                self._connection.row_factory = sqlite3.Row
                logger.debug(f"Connected to SQLite database: {self.db_path}")
            except sqlite3.Error as e:
                raise StorageConnectionError(
                    f"Failed to connect to SQLite database: {e}"
                ) from e
        return self._connection

    @contextmanager
    def _cursor(self):
        """Context manager for database cursor with automatic commit/rollback."""
        with self._lock:
            conn = self._get_connection()
            cursor = conn.cursor()
            try:
                yield cursor
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise QueryError(f"SQLite query failed: {e}") from e
            finally:
                cursor.close()

    def initialize(self) -> None:
        """
        Initialize database with the dataset tables and indexes.

        Safe to call multiple times - uses IF NOT EXISTS.
        """
        logger.info(f"Initializing SQLite database: {self.db_path}")

        with self._cursor() as cursor:
            for dataset in EVENT_DATASETS:
                cursor.execute(get_create_dataset_table_sql(dataset))
            for index_sql in INDEX_DEFINITIONS:
                cursor.execute(index_sql)

        logger.info("SQLite database initialized successfully")

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
                logger.debug("SQLite connection closed")

    def write_data_point(self, dataset: str, data_point: dict[str, Any]) -> None:
        """
        Append a data point to a dataset table.

        An optional ``timestamp`` (datetime) may be supplied to backdate
        the row; otherwise the database clock is used.
        """
        if dataset not in EVENT_DATASETS:
            raise SchemaError(
                f"Unknown dataset: '{dataset}'. Must be one of: {list(EVENT_DATASETS)}"
            )

        indexes = data_point.get("indexes") or []
        blobs = data_point.get("blobs") or []
        doubles = data_point.get("doubles") or []

        if len(indexes) != 1:
            raise SchemaError(f"Exactly one index is required, got {len(indexes)}")
        if len(blobs) > MAX_BLOBS:
            raise SchemaError(f"At most {MAX_BLOBS} blobs allowed, got {len(blobs)}")
        if len(doubles) > MAX_DOUBLES:
            raise SchemaError(
                f"At most {MAX_DOUBLES} doubles allowed, got {len(doubles)}"
            )

        values: dict[str, Any] = {"index1": indexes[0]}
        values.update({f"blob{i}": blob for i, blob in enumerate(blobs, start=1)})
        values.update(
            {f"double{i}": double for i, double in enumerate(doubles, start=1)}
        )
        timestamp = _to_sqlite_timestamp(data_point.get("timestamp"))
        if timestamp is not None:
            values["timestamp"] = timestamp

        columns = ", ".join(values)
        placeholders = ", ".join(f":{column}" for column in values)
        sql = f"INSERT INTO {dataset} ({columns}) VALUES ({placeholders})"

        with self._cursor() as cursor:
            cursor.execute(sql, values)

    def query(self, sql: str) -> list[dict]:
        """
        Translate and execute an analytics query.

        Args:
            sql: Query in the analytics engine dialect

        Returns:
            List of result rows as dictionaries
        """
        translated = self._sql.translate(sql)
        with self._cursor() as cursor:
            cursor.execute(translated)
            columns = [desc[0] for desc in cursor.description or []]
            rows = cursor.fetchall()
            return [dict(zip(columns, row)) for row in rows]

    def table_exists(self, table_name: str) -> bool:
        """Check if a table exists."""
        with self._cursor() as cursor:
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name=:name",
                {"name": table_name},
            )
            return cursor.fetchone() is not None

    def count_rows(self, dataset: str) -> int:
        """Get total row count for a dataset."""
        if dataset not in EVENT_DATASETS or not self.table_exists(dataset):
            raise SchemaError(f"Table '{dataset}' does not exist")

        # dataset is validated against EVENT_DATASETS above
        with self._cursor() as cursor:
            cursor.execute(f"SELECT COUNT(*) AS count FROM {dataset}")
            row = cursor.fetchone()
            return row["count"] if row else 0

    def health_check(self) -> dict:
        """Extended health check with SQLite-specific info."""
        base_check = super().health_check()

        if base_check["healthy"]:
            db_size = self.db_path.stat().st_size if self.db_path.exists() else 0
            base_check["details"] = {
                "db_path": str(self.db_path),
                "db_size_bytes": db_size,
            }

        return base_check
