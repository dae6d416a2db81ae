"""HTTP transports: GraphQL command submission and key-based store queries."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

import httpx

from ..errors import CommandRejectedError
from ..mutation import CommandMutation
from ..utils.retry import retry_with_backoff
from ..verifiers.base import Record, as_records


def _auth_headers(token: Optional[str]) -> dict[str, str]:
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}


def _rejection_message(errors: list[Any]) -> str:
    messages = []
    for error in errors:
        if isinstance(error, dict):
            messages.append(str(error.get("message") or error))
        else:
            messages.append(str(error))
    return "; ".join(messages) or "Command rejected"


class GraphQLCommandClient:
    """Command client posting mutation documents to a GraphQL endpoint.

    The HTTP client is owned by the caller and shared between clients.
    """

    def __init__(
        self,
        graphql_url: str,
        http_client: httpx.AsyncClient,
        token: Optional[str] = None,
    ):
        """Initialize GraphQL command client.

        Args:
            graphql_url: GraphQL endpoint URL
            http_client: Shared HTTP client (managed by caller)
            token: Optional bearer token identifying the caller
        """
        self.graphql_url = graphql_url
        self.token = token
        self._http_client = http_client

    async def mutate(self, variables: Mapping[str, Any], mutation: CommandMutation) -> Any:
        """Submit the mutation with the given variables.

        Returns:
            The ``data`` member of the GraphQL response

        Raises:
            CommandRejectedError: If the response carries GraphQL errors
            httpx.HTTPStatusError: If the endpoint fails without GraphQL errors
        """
        response = await self._http_client.post(
            self.graphql_url,
            headers={"Content-Type": "application/json", **_auth_headers(self.token)},
            json={
                "query": mutation.document,
                "variables": dict(variables),
                "operationName": mutation.command_name,
            },
        )

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict) and payload.get("errors"):
            errors = list(payload["errors"])
            raise CommandRejectedError(_rejection_message(errors), errors)

        response.raise_for_status()
        if not isinstance(payload, dict):
            raise CommandRejectedError(
                f"Unexpected response from {self.graphql_url}: {response.text[:200]!r}"
            )
        return payload.get("data")


class HttpEventStore:
    """Store client that fetches records for a query key over HTTP.

    Sends ``GET {events_url}?key={key}`` and accepts either a JSON list of
    records or an object with an ``items`` list.
    """

    def __init__(
        self,
        events_url: str,
        http_client: httpx.AsyncClient,
        token: Optional[str] = None,
        on_retry: Optional[Callable[[int, Exception, float], None]] = None,
    ):
        self.events_url = events_url
        self.token = token
        self.on_retry = on_retry
        self._http_client = http_client

    async def _fetch(self, key: str) -> Any:
        response = await self._http_client.get(
            self.events_url,
            params={"key": key},
            headers=_auth_headers(self.token),
        )
        response.raise_for_status()
        return response.json()

    async def query(self, key: str) -> list[Record]:
        """Return the records stored under ``key``, retrying transient failures."""
        payload = await retry_with_backoff(lambda: self._fetch(key), on_retry=self.on_retry)
        if isinstance(payload, dict):
            payload = payload.get("items", [])
        if not isinstance(payload, list):
            raise ValueError(
                f"Store returned {type(payload).__name__} for key '{key}'; expected a list of records."
            )
        return as_records(payload)


class GraphQLIdentityProvider:
    """Identity provider issuing tokens through a caller-supplied issuer.

    Args:
        graphql_url: GraphQL endpoint the role-scoped clients submit to
        http_client: Shared HTTP client (managed by caller)
        issue_token: Callable (identity, role) -> token, e.g. a local JWT signer
    """

    def __init__(
        self,
        graphql_url: str,
        http_client: httpx.AsyncClient,
        issue_token: Callable[[str, str], str],
    ):
        self.graphql_url = graphql_url
        self._http_client = http_client
        self._issue_token = issue_token

    def token_for(self, identity: str, role: str) -> str:
        return self._issue_token(identity, role)

    def client_for(self, token: str) -> GraphQLCommandClient:
        return GraphQLCommandClient(self.graphql_url, self._http_client, token=token)
