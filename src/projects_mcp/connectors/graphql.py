"""Lightweight async GraphQL client for the GitHub graph plane.

Covers what the REST plane cannot do: node ID lookups for content and
projects, and adding an item to a project by content ID.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from ..config import get_settings
from .exceptions import GraphQLError, UpstreamAPIError
from .http_client import get_http_client

logger = logging.getLogger(__name__)


class GraphQLClient:
    """Async GraphQL client over the shared HTTP client. No retries."""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.endpoint = endpoint or get_settings().github_graphql_url
        self._http_client = http_client

    async def execute(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Execute a single GraphQL query or mutation.

        Args:
            query: GraphQL document.
            variables: Optional variables.

        Returns:
            The "data" portion of the response.

        Raises:
            GraphQLError: If the response contains GraphQL errors.
            UpstreamAPIError: On transport failure, non-200 status or a body
                that is not JSON.
        """
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        client = self._http_client or get_http_client()
        try:
            async with client.stream("POST", self.endpoint, json=payload) as response:
                await response.aread()
                status = response.status_code
                text = response.text
        except httpx.HTTPError as exc:
            logger.warning("GraphQL request failed: %s", type(exc).__name__)
            raise UpstreamAPIError(f"GraphQL request failed: {exc}") from exc

        if status != 200:
            raise UpstreamAPIError(
                f"GraphQL request failed: HTTP {status}",
                status_code=status,
                response_body=text,
            )

        try:
            body = json.loads(text)
        except ValueError as exc:
            raise UpstreamAPIError(
                "GraphQL response is not valid JSON",
                status_code=status,
                response_body=text,
            ) from exc

        if body.get("errors"):
            error_messages = "; ".join(
                e.get("message", "Unknown error") for e in body["errors"]
            )
            raise GraphQLError(
                f"GraphQL error: {error_messages}",
                errors=body["errors"],
                status_code=status,
            )

        return body.get("data") or {}

    async def query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self.execute(query, variables)

    async def mutate(self, mutation: str, input_data: Dict[str, Any]) -> Dict[str, Any]:
        """Run a mutation taking a single ``$input`` argument."""
        return await self.execute(mutation, {"input": input_data})
