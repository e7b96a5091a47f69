"""
SQL compatibility layer between the analytics engine dialect and SQLite.

Query templates are written once, in the analytics engine dialect, and
translated for the local SQLite backend.

SQL Differences Handled:
- Trailing windows: NOW() - INTERVAL '7' DAY → datetime('now', '-7 days')
- Current time: NOW() → datetime('now')

Quoted string literals are copied through unchanged, so a host filter
value that happens to contain NOW() is never rewritten.
"""

import re
from typing import Literal

BackendType = Literal["sqlite", "analytics_engine"]

_TOKEN_PATTERN = re.compile(
    r"(?P<literal>'(?:[^']|'')*')"
    r"|NOW\(\)\s*-\s*INTERVAL\s+'(?P<amount>\d+)'\s+(?P<unit>SECOND|MINUTE|HOUR|DAY)"
    r"|(?P<now>NOW\(\))",
    re.IGNORECASE,
)


def trailing_window(amount: int, unit: str, backend: BackendType) -> str:
    """Generate an expression for 'now minus amount units'."""
    unit = unit.upper()
    if backend == "sqlite":
        return f"datetime('now', '-{amount} {unit.lower()}s')"
    return f"NOW() - INTERVAL '{amount}' {unit}"


def current_timestamp(backend: BackendType) -> str:
    """Generate current timestamp expression."""
    if backend == "sqlite":
        return "datetime('now')"
    return "NOW()"


def translate(sql: str, backend: BackendType) -> str:
    """
    Translate analytics engine SQL to the target backend's dialect.

    Args:
        sql: Query text in the analytics engine dialect
        backend: Target backend

    Returns:
        Query text the backend can execute
    """
    if backend != "sqlite":
        return sql

    def replace(match: re.Match) -> str:
        if match.group("literal") is not None:
            return match.group("literal")
        if match.group("amount") is not None:
            return trailing_window(int(match.group("amount")), match.group("unit"), backend)
        return current_timestamp(backend)

    return _TOKEN_PATTERN.sub(replace, sql)


class SQLBuilder:
    """Translates analytics engine SQL for one target backend."""

    def __init__(self, backend: BackendType):
        """Initialize with target backend type."""
        self.backend = backend

    def translate(self, sql: str) -> str:
        """Translate analytics engine SQL to this backend."""
        return translate(sql, self.backend)
