"""Reporting: query catalog, access control and the query gateway."""

from .access_control import (
    AccessPolicy,
    AllowedHosts,
    UserIdentity,
    email_domain,
    host_matches,
)
from .query_catalog import (
    DEFAULT_CATALOG,
    DEFAULT_TEMPLATES,
    QueryCatalog,
    QueryNotFoundError,
    QueryTemplate,
    escape_sql_literal,
    get_catalog,
    inject_host_filter,
)
from .query_gateway import (
    LocalQueryExecutor,
    QueryExecutor,
    QueryGateway,
    RemoteQueryExecutor,
    build_gateway,
)

__all__ = [
    # Query catalog
    "DEFAULT_CATALOG",
    "DEFAULT_TEMPLATES",
    "QueryCatalog",
    "QueryNotFoundError",
    "QueryTemplate",
    "escape_sql_literal",
    "get_catalog",
    "inject_host_filter",
    # Access control
    "AccessPolicy",
    "AllowedHosts",
    "UserIdentity",
    "email_domain",
    "host_matches",
    # Gateway
    "QueryExecutor",
    "LocalQueryExecutor",
    "RemoteQueryExecutor",
    "QueryGateway",
    "build_gateway",
]
