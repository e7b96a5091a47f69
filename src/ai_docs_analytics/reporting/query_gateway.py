"""
Access-scoped query gateway.

Resolves a caller to their allowed hosts, renders the requested template
once per relevant host, runs the renderings concurrently and merges the
rows. The merged row order is not defined.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Protocol

import httpx

from ..config.constants import (
    API_SECRET_HEADER,
    CREDENTIAL_NAMES,
    MISSING_CREDENTIALS_ERROR,
)
from ..storage import (
    MissingCredentialsError,
    QueryError,
    StorageBackend,
    StorageError,
)
from .access_control import AccessPolicy, AllowedHosts, UserIdentity, host_matches
from .query_catalog import QueryCatalog, get_catalog

logger = logging.getLogger(__name__)


class QueryExecutor(Protocol):
    """Runs one named template for one host (or unfiltered)."""

    catalog: QueryCatalog

    def run(self, template_name: str, host: Optional[str]) -> list[dict]:
        ...


class LocalQueryExecutor:
    """Renders templates and runs them against a storage backend."""

    def __init__(self, backend: StorageBackend, catalog: Optional[QueryCatalog] = None):
        self.backend = backend
        self.catalog = catalog or get_catalog()

    def run(self, template_name: str, host: Optional[str]) -> list[dict]:
        sql = self.catalog.render(template_name, host)
        return self.backend.query(sql)


class RemoteQueryExecutor:
    """
    Runs templates through a deployed analytics API's GET /query endpoint.

    The remote API performs the rendering; the local catalog is only used
    to reject unknown names before any request is made.
    """

    def __init__(
        self,
        api_url: str,
        api_secret: str = "",
        *,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
        catalog: Optional[QueryCatalog] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.api_secret = api_secret
        self.catalog = catalog or get_catalog()
        self._client = client or httpx.Client(timeout=timeout)

    def run(self, template_name: str, host: Optional[str]) -> list[dict]:
        """
        Raises:
            MissingCredentialsError: If the remote API has no query credentials
            QueryError: If the API is unreachable, answers with a non-200
                        status or returns an unexpected body
        """
        params = {"q": template_name}
        if host:
            params["host"] = host
        headers = {API_SECRET_HEADER: self.api_secret} if self.api_secret else {}

        try:
            response = self._client.get(
                f"{self.api_url}/query", params=params, headers=headers
            )
        except httpx.HTTPError as e:
            raise QueryError(f"Remote query request failed: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        error = payload.get("error") if isinstance(payload, dict) else None
        if response.status_code != 200:
            if response.status_code == 500 and error == MISSING_CREDENTIALS_ERROR:
                raise MissingCredentialsError(list(CREDENTIAL_NAMES))
            raise QueryError(
                f"Remote query '{template_name}' failed with HTTP "
                f"{response.status_code}: {error or response.text[:500]}"
            )

        if not isinstance(payload, dict):
            raise QueryError(f"Invalid remote query response: {response.text[:500]}")
        return list(payload.get("data") or [])

    def close(self) -> None:
        self._client.close()


class QueryGateway:
    """Access-scoped entry point for dashboard queries."""

    def __init__(
        self,
        policy: AccessPolicy,
        executor: QueryExecutor,
        max_workers: int = 8,
    ):
        self.policy = policy
        self.executor = executor
        self.max_workers = max_workers

    def target_hosts(
        self,
        allowed: AllowedHosts,
        requested_host: Optional[str] = None,
    ) -> list[Optional[str]]:
        """
        Decide which host filters to run for a caller.

        Returns:
            ``[requested_host]`` (possibly ``[None]``) for unrestricted
            callers; for restricted callers the requested host if it
            matches an allowed host, otherwise every allowed host; an
            empty list when nothing is visible.
        """
        if allowed.unrestricted:
            return [requested_host or None]

        if allowed.is_empty:
            return []

        if requested_host:
            if any(host_matches(requested_host, host) for host in allowed.hosts):
                return [requested_host]
            logger.info("Requested host outside caller's allowed hosts")
            return []

        return list(allowed.hosts)

    def query(
        self,
        identity: UserIdentity,
        template_name: str,
        requested_host: Optional[str] = None,
    ) -> list[dict]:
        """
        Run a template for a caller and return the merged rows.

        Unauthorized hosts produce an empty result rather than an error.

        Raises:
            QueryNotFoundError: If the template name is unknown
            StorageError: If any host query fails
        """
        # Unknown names fail before any fan-out
        self.executor.catalog.get(template_name)

        allowed = self.policy.resolve_allowed_hosts(identity)
        hosts = self.target_hosts(allowed, requested_host)
        if not hosts:
            return []

        try:
            if len(hosts) == 1:
                return list(self.executor.run(template_name, hosts[0]))

            workers = min(self.max_workers, len(hosts))
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = pool.map(
                    lambda host: self.executor.run(template_name, host), hosts
                )
                rows: list[dict] = []
                for host_rows in results:
                    rows.extend(host_rows)
        except StorageError as e:
            logger.error(f"Query '{template_name}' failed across {len(hosts)} hosts: {e}")
            raise

        logger.debug(
            f"Query '{template_name}' fanned out to {len(hosts)} hosts, "
            f"{len(rows)} rows"
        )
        return rows


def build_gateway(
    settings=None,
    backend: Optional[StorageBackend] = None,
) -> QueryGateway:
    """
    Build a gateway from settings.

    Runs locally when a backend is given, otherwise through the remote API.
    """
    if settings is None:
        from ..config.settings import get_settings

        settings = get_settings()

    policy = AccessPolicy(admin_emails=settings.admin_emails)
    if backend is not None:
        executor: QueryExecutor = LocalQueryExecutor(backend)
    else:
        executor = RemoteQueryExecutor(settings.api_url, settings.api_secret)
    return QueryGateway(policy, executor, max_workers=settings.query_max_workers)
