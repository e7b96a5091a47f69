"""
Named analytics query templates.

Each template is a complete query in the analytics engine SQL dialect with
a fixed trailing window and row limit. A template contains exactly one
``WHERE `` keyword, which is the only place a host filter is injected.

The analytics engine accepts inline SQL text only, so host values are
interpolated as string literals. inject_host_filter() is the single place
this happens, and escape_sql_literal() doubles single quotes first.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Optional

from ..config.constants import DATASET_RAW_EVENTS, DATASET_VISITS

WHERE_ANCHOR = "WHERE "


class QueryNotFoundError(LookupError):
    """
    Raised when a query template name is not in the catalog.

    Attributes:
        name: The requested template name
        allowed: Valid template names
    """

    def __init__(self, name: str, allowed: Iterable[str]):
        self.name = name
        self.allowed = list(allowed)
        super().__init__(
            f"Unknown query: '{name}'. Allowed queries: {', '.join(self.allowed)}"
        )


@dataclass(frozen=True)
class QueryTemplate:
    """A named query with a single WHERE anchor for host filtering."""

    name: str
    sql: str
    description: str = ""
    host_column: str = "blob1"

    def __post_init__(self) -> None:
        anchors = self.sql.count(WHERE_ANCHOR)
        if anchors != 1:
            raise ValueError(
                f"Query template '{self.name}' must contain exactly one "
                f"'{WHERE_ANCHOR.strip()}' anchor, found {anchors}"
            )


def escape_sql_literal(value: str) -> str:
    """
    Escape a value for use inside a single-quoted SQL literal.

    >>> escape_sql_literal("O'Brien")
    "O''Brien"
    """
    return value.replace("'", "''")


def inject_host_filter(sql: str, host: str, host_column: str = "blob1") -> str:
    """
    Restrict a query to a host and its subdomains.

    Inserts ``(<col> = '<host>' OR <col> LIKE '%.<host>') AND`` right after
    the WHERE anchor.
    """
    safe_host = escape_sql_literal(host)
    predicate = (
        f"{WHERE_ANCHOR}({host_column} = '{safe_host}' "
        f"OR {host_column} LIKE '%.{safe_host}') AND "
    )
    return sql.replace(WHERE_ANCHOR, predicate, 1)


class QueryCatalog:
    """Immutable mapping of template name to QueryTemplate."""

    def __init__(self, templates: Iterable[QueryTemplate]):
        by_name: dict[str, QueryTemplate] = {}
        for template in templates:
            if template.name in by_name:
                raise ValueError(f"Duplicate query template: '{template.name}'")
            by_name[template.name] = template
        self._templates = MappingProxyType(by_name)

    def names(self) -> list[str]:
        """Template names in catalog order."""
        return list(self._templates)

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def get(self, name: str) -> QueryTemplate:
        """
        Look up a template.

        Raises:
            QueryNotFoundError: If the name is unknown
        """
        try:
            return self._templates[name]
        except KeyError:
            raise QueryNotFoundError(name, self.names()) from None

    def render(self, name: str, host: Optional[str] = None) -> str:
        """
        Render a template, optionally restricted to one host.

        Args:
            name: Template name
            host: Host filter; None or '' renders the template unfiltered

        Returns:
            Query text ready for the analytics engine

        Raises:
            QueryNotFoundError: If the name is unknown
        """
        template = self.get(name)
        if not host:
            return template.sql
        return inject_host_filter(template.sql, host, template.host_column)


# =============================================================================
# Default Templates
# =============================================================================

DEFAULT_TEMPLATES: tuple[QueryTemplate, ...] = (
    QueryTemplate(
        name="default",
        description="Visits by host, category and agent (7 days, unfiltered traffic)",
        sql=f"""
            SELECT blob1 AS host, blob3 AS category, blob4 AS agent, SUM(_sample_interval) AS visits
            FROM {DATASET_VISITS}
            WHERE timestamp > NOW() - INTERVAL '7' DAY AND double1 = 0
            GROUP BY host, category, agent
            ORDER BY visits DESC
            LIMIT 100
        """,
    ),
    QueryTemplate(
        name="sites",
        description="Visits by host split by category (7 days)",
        sql=f"""
            SELECT blob1 AS host, blob3 AS category, SUM(_sample_interval) AS visits
            FROM {DATASET_VISITS}
            WHERE timestamp > NOW() - INTERVAL '7' DAY AND double1 = 0
            GROUP BY host, category
            ORDER BY visits DESC
        """,
    ),
    QueryTemplate(
        name="agents",
        description="Coding agent breakdown (7 days)",
        sql=f"""
            SELECT blob4 AS agent, SUM(_sample_interval) AS visits
            FROM {DATASET_VISITS}
            WHERE timestamp > NOW() - INTERVAL '7' DAY AND double1 = 0 AND blob3 = 'coding-agent'
            GROUP BY agent
            ORDER BY visits DESC
        """,
    ),
    QueryTemplate(
        name="all-agents",
        description="All visitor categories and agents, humans included (7 days)",
        sql=f"""
            SELECT blob3 AS category, blob4 AS agent, SUM(_sample_interval) AS visits
            FROM {DATASET_VISITS}
            WHERE timestamp > NOW() - INTERVAL '7' DAY AND double1 = 0
            GROUP BY category, agent
            ORDER BY visits DESC
        """,
    ),
    QueryTemplate(
        name="pages",
        description="Top pages visited by coding agents (7 days)",
        sql=f"""
            SELECT blob1 AS host, blob2 AS path, blob4 AS agent, SUM(_sample_interval) AS visits
            FROM {DATASET_VISITS}
            WHERE timestamp > NOW() - INTERVAL '7' DAY AND blob3 = 'coding-agent' AND double1 = 0
            GROUP BY host, path, agent
            ORDER BY visits DESC
            LIMIT 50
        """,
    ),
    QueryTemplate(
        name="feed",
        description="Most recent visits (1 day)",
        sql=f"""
            SELECT timestamp, blob1 AS host, blob2 AS path, blob3 AS category, blob4 AS agent
            FROM {DATASET_VISITS}
            WHERE timestamp > NOW() - INTERVAL '1' DAY AND double1 = 0
            ORDER BY timestamp DESC
            LIMIT 50
        """,
    ),
    QueryTemplate(
        name="raw",
        description="Raw requests as received (1 day)",
        sql=f"""
            SELECT timestamp, index1 AS event_id, blob1 AS host, blob2 AS path, blob3 AS user_agent, blob4 AS accept_header
            FROM {DATASET_RAW_EVENTS}
            WHERE timestamp > NOW() - INTERVAL '1' DAY
            ORDER BY timestamp DESC
            LIMIT 100
        """,
    ),
    QueryTemplate(
        name="debug",
        description="Raw requests joined to their classification (1 day)",
        host_column="r.blob1",
        sql=f"""
            SELECT
              r.timestamp AS timestamp,
              r.index1 AS event_id,
              r.blob1 AS host,
              r.blob2 AS path,
              r.blob3 AS user_agent,
              r.blob4 AS accept_header,
              v.blob3 AS category,
              v.blob4 AS agent
            FROM {DATASET_RAW_EVENTS} r
            JOIN {DATASET_VISITS} v ON r.index1 = v.index1
            WHERE r.timestamp > NOW() - INTERVAL '1' DAY
            ORDER BY r.timestamp DESC
            LIMIT 50
        """,
    ),
)

DEFAULT_CATALOG = QueryCatalog(DEFAULT_TEMPLATES)


def get_catalog() -> QueryCatalog:
    """Return the process-wide default catalog."""
    return DEFAULT_CATALOG
