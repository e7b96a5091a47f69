"""
Event schemas for the raw-event and visit datasets.

Both datasets are append-only and keyed by ``event_id`` (stored as index1),
so every visit event can be joined back to the raw request it was
derived from.

Raw events (ai_docs_raw_events):
    index1: event_id
    blob1: host, blob2: path, blob3: user_agent, blob4: accept_header,
    blob5: country

Visit events (ai_docs_visits):
    index1: event_id
    blob1: host, blob2: path, blob3: category, blob4: agent, blob5: country
    double1: is_filtered (0/1)
"""

from dataclasses import dataclass
from typing import Any, Mapping

from ..config.constants import (
    DEFAULT_PATH,
    UNKNOWN_VALUE,
    VisitorCategory,
)
from ..utils.http_utils import truncate_field

# =============================================================================
# Columnar Dataset Layout (SQLite emulation)
# =============================================================================

MAX_BLOBS = 7
MAX_DOUBLES = 2

DATASET_COLUMNS = {
    "timestamp": "TEXT NOT NULL DEFAULT (datetime('now'))",
    "index1": "TEXT NOT NULL",
    **{f"blob{i}": "TEXT" for i in range(1, MAX_BLOBS + 1)},
    **{f"double{i}": "REAL" for i in range(1, MAX_DOUBLES + 1)},
    "_sample_interval": "INTEGER NOT NULL DEFAULT 1",
}


def get_create_dataset_table_sql(dataset: str) -> str:
    """Get SQL to create a dataset table."""
    columns = ", ".join(f"{name} {dtype}" for name, dtype in DATASET_COLUMNS.items())
    return f"CREATE TABLE IF NOT EXISTS {dataset} ({columns})"


# =============================================================================
# Request Context
# =============================================================================


def _first_present(payload: Mapping[str, Any], *keys: str) -> str:
    """Return the first truthy string value among keys, or ''."""
    for key in keys:
        value = payload.get(key)
        if value:
            return str(value)
    return ""


@dataclass(frozen=True)
class RequestContext:
    """Normalized request metadata used for classification and recording."""

    host: str
    path: str
    user_agent: str
    accept_header: str
    country: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RequestContext":
        """
        Build a context from a tracking payload.

        Accepts ``accept_header`` or ``accept`` and ``user_agent`` or ``ua``.
        Missing values fall back to sentinels instead of being rejected.
        """
        return cls(
            host=_first_present(payload, "host") or UNKNOWN_VALUE,
            path=_first_present(payload, "path") or DEFAULT_PATH,
            user_agent=_first_present(payload, "user_agent", "ua"),
            accept_header=_first_present(payload, "accept_header", "accept"),
            country=_first_present(payload, "country") or UNKNOWN_VALUE,
        )


# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True)
class RawEvent:
    """Immutable record of the request exactly as received."""

    event_id: str
    host: str
    path: str
    user_agent: str
    accept_header: str
    country: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "user_agent", truncate_field(self.user_agent))
        object.__setattr__(self, "accept_header", truncate_field(self.accept_header))

    def to_data_point(self) -> dict[str, list]:
        """Convert to an analytics data point."""
        return {
            "indexes": [self.event_id],
            "blobs": [
                self.host,
                self.path,
                self.user_agent,
                self.accept_header,
                self.country,
            ],
            "doubles": [],
        }


@dataclass(frozen=True)
class VisitEvent:
    """Derived, filterable record of one classified visit."""

    event_id: str
    host: str
    path: str
    category: VisitorCategory
    agent: str
    country: str
    is_filtered: bool

    def to_data_point(self) -> dict[str, list]:
        """Convert to an analytics data point."""
        return {
            "indexes": [self.event_id],
            "blobs": [
                self.host,
                self.path,
                self.category.value,
                self.agent,
                self.country,
            ],
            "doubles": [1 if self.is_filtered else 0],
        }
