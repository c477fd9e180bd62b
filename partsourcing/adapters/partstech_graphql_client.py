"""
PartsTech GraphQL Client

Executes single GraphQL operations against the marketplace endpoint using a
borrowed session cookie string. Failures are classified so the caller can
decide whether a retry makes sense:

- 401/403            -> SessionExpiredError (retryable once, by the caller)
- other HTTP errors  -> NetworkError
- transport failures -> NetworkError
- non-object bodies  -> NetworkError
- `errors` in body   -> SearchFailedError (never retried)
"""

import logging
from typing import Any, Dict, Optional

import httpx

from partsourcing.core.config import settings
from partsourcing.core.errors import NetworkError, SearchFailedError, SessionExpiredError
from partsourcing.utils.scraper_utils import USER_AGENT

logger = logging.getLogger(__name__)


class PartsTechGraphQLClient:
    """Client for the PartsTech GraphQL endpoint"""

    def __init__(
        self,
        endpoint: str = "https://app.partstech.com/graphql",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "PartsTechGraphQLClient":
        return cls(
            endpoint=settings.PARTSTECH_GRAPHQL_URL,
            timeout=settings.PARTSTECH_REQUEST_TIMEOUT,
        )

    def _get_headers(self, cookies: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Cookie": cookies,
            "User-Agent": USER_AGENT,
        }

    async def execute(
        self,
        query: str,
        variables: Dict[str, Any],
        operation_name: str,
        cookies: str,
    ) -> Dict[str, Any]:
        """
        POST one operation and return its `data` object.

        Raises:
            SessionExpiredError: On 401/403
            NetworkError: On any other transport or HTTP failure
            SearchFailedError: When the response carries GraphQL errors
        """
        payload = {
            "query": query,
            "variables": variables,
            "operationName": operation_name,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.endpoint, json=payload, headers=self._get_headers(cookies)
                )
        except httpx.HTTPError as e:
            logger.error(f"PARTSTECH API: {operation_name} transport error: {e}")
            raise NetworkError(f"Network error: {e}") from e

        if response.status_code in (401, 403):
            raise SessionExpiredError("Session expired or unauthorized")

        if not response.is_success:
            raise NetworkError(
                f"GraphQL request failed: {response.status_code} {response.reason_phrase}"
            )

        try:
            body = response.json()
        except ValueError as e:
            raise NetworkError(f"Network error: invalid JSON response ({e})") from e

        if not isinstance(body, dict):
            raise NetworkError(f"Network error: unexpected response body ({type(body).__name__})")

        errors = body.get("errors") or []
        if not isinstance(errors, list):
            errors = [errors]
        if errors:
            first = errors[0]
            message = first.get("message", "Unknown GraphQL error") if isinstance(first, dict) else str(first)
            raise SearchFailedError(message, graphql_errors=errors)

        data = body.get("data") or {}
        if not isinstance(data, dict):
            raise NetworkError(f"Network error: unexpected data object ({type(data).__name__})")
        return data
