"""Schemas for visitor analytics event storage."""

from .events import (
    DATASET_COLUMNS,
    RawEvent,
    RequestContext,
    VisitEvent,
    get_create_dataset_table_sql,
)

__all__ = [
    "DATASET_COLUMNS",
    "RawEvent",
    "RequestContext",
    "VisitEvent",
    "get_create_dataset_table_sql",
]
