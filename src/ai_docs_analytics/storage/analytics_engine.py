"""
Cloudflare Workers Analytics Engine backend.

Runs analytics queries through the Analytics Engine SQL API. Data points
can only be written from inside a Worker (via a dataset binding), so this
backend is query-only.
"""

import logging
from typing import Any, Optional

import httpx

from .base import MissingCredentialsError, QueryError, StorageBackend, StorageError

logger = logging.getLogger(__name__)

SQL_API_URL = (
    "https://api.cloudflare.com/client/v4/accounts/{account_id}/analytics_engine/sql"
)
DEFAULT_TIMEOUT_SECONDS = 30.0


class AnalyticsEngineBackend(StorageBackend):
    """Query-only backend for the Analytics Engine SQL API."""

    def __init__(
        self,
        account_id: str = "",
        api_token: str = "",
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the backend.

        Args:
            account_id: Cloudflare account ID
            api_token: API token with Analytics Engine read access
            timeout: Request timeout in seconds
            client: Pre-built httpx client (tests inject a mock transport)
        """
        self.account_id = account_id
        self.api_token = api_token
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def backend_type(self) -> str:
        """Return backend type identifier."""
        return "analytics_engine"

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self._timeout)
        return self._client

    def initialize(self) -> None:
        """Nothing to create; datasets are created by the first Worker write."""
        missing = self.missing_credentials()
        if missing:
            logger.warning(
                f"Analytics Engine backend missing credentials: {', '.join(missing)}"
            )

    def close(self) -> None:
        """Close the HTTP client if this backend created it."""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def missing_credentials(self) -> list[str]:
        """List missing Cloudflare credentials."""
        missing = []
        if not self.account_id:
            missing.append("CF_ACCOUNT_ID")
        if not self.api_token:
            missing.append("CF_API_TOKEN")
        return missing

    def write_data_point(self, dataset: str, data_point: dict[str, Any]) -> None:
        """Writes require a Workers dataset binding and are not available here."""
        raise StorageError(
            f"Analytics Engine dataset '{dataset}' is write-only from a Worker binding"
        )

    def query(self, sql: str) -> list[dict]:
        """
        Execute a query through the SQL API.

        Returns:
            The ``data`` rows of the API response

        Raises:
            MissingCredentialsError: If account ID or token is absent
            QueryError: If the API rejects the query or is unreachable
        """
        missing = self.missing_credentials()
        if missing:
            raise MissingCredentialsError(missing)

        url = SQL_API_URL.format(account_id=self.account_id)
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "text/plain",
        }

        try:
            response = self._get_client().post(url, headers=headers, content=sql)
        except httpx.HTTPError as e:
            raise QueryError(f"Analytics Engine request failed: {e}") from e

        if response.status_code != 200:
            raise QueryError(f"HTTP {response.status_code}: {response.text[:500]}")

        try:
            payload = response.json()
        except ValueError as e:
            raise QueryError(f"Analytics Engine returned invalid JSON: {e}") from e

        rows = payload.get("data") if isinstance(payload, dict) else None
        logger.debug(f"Analytics Engine query returned {len(rows or [])} rows")
        return list(rows or [])
