"""Scenario data structures and the collaborators scenarios run against."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional
from uuid import uuid4

import httpx

from ..runtime.context import RunContext
from ..settings import HarnessSettings
from ..transport.base import CommandClient, EventStore, IdentityProvider
from ..transport.graphql import GraphQLCommandClient, GraphQLIdentityProvider, HttpEventStore


class ScenarioKind(str, Enum):
    """Scenario classes derived for every command."""

    UNAUTHORIZED_REJECTION = "unauthorized_rejection"
    ROLE_ACCEPTANCE = "role_acceptance"
    ACCEPTANCE = "acceptance"
    REQUIRED_FIELD_REJECTION = "required_field_rejection"
    REQUIRED_ONLY_ACCEPTANCE = "required_only_acceptance"
    EMPTY_VALUE_REJECTION = "empty_value_rejection"
    INVALID_TYPE_REJECTION = "invalid_type_rejection"
    WORK_VERIFICATION = "work_verification"
    EVENT_VERIFICATION = "event_verification"


def _new_correlation_id() -> str:
    return str(uuid4())


@dataclass
class HarnessEnvironment:
    """Collaborators a scenario submits to and queries.

    Attributes:
        client (CommandClient): Client used when the command is open to all
            roles.
        event_store (EventStore): Read/event store queried for effects.
        identity_provider (Optional[IdentityProvider]): Required only when the
            plan restricts the command to specific roles.
        id_factory (Callable[[], str]): Produces unique correlation values.
        context (RunContext): Observers notified while scenarios run.
        unauthenticated_client (Optional[CommandClient]): Client carrying no
            credentials, used for the unauthorized submission. Defaults to
            ``client``.
    """

    client: CommandClient
    event_store: EventStore
    identity_provider: Optional[IdentityProvider] = None
    id_factory: Callable[[], str] = _new_correlation_id
    context: RunContext = field(default_factory=RunContext)
    unauthenticated_client: Optional[CommandClient] = None

    @property
    def anonymous_client(self) -> CommandClient:
        if self.unauthenticated_client is not None:
            return self.unauthenticated_client
        return self.client

    @classmethod
    def from_settings(
        cls,
        settings: HarnessSettings,
        http_client: httpx.AsyncClient,
        issue_token: Optional[Callable[[str, str], str]] = None,
        context: Optional[RunContext] = None,
    ) -> "HarnessEnvironment":
        """Build HTTP-backed collaborators from settings.

        Args:
            settings: Endpoint configuration
            http_client: Shared HTTP client (managed by caller)
            issue_token: Optional (identity, role) -> token issuer enabling
                authorization scenarios
            context: Optional run context with observers
        """
        identity_provider = None
        if issue_token is not None:
            identity_provider = GraphQLIdentityProvider(settings.graphql_url, http_client, issue_token)
        return cls(
            client=GraphQLCommandClient(settings.graphql_url, http_client, token=settings.auth_token),
            event_store=HttpEventStore(settings.events_url, http_client, token=settings.auth_token),
            identity_provider=identity_provider,
            context=context or RunContext(),
            unauthenticated_client=GraphQLCommandClient(settings.graphql_url, http_client),
        )


ScenarioBody = Callable[[HarnessEnvironment], Awaitable[Any]]


@dataclass(frozen=True)
class Scenario:
    """One named test case derived from a command plan.

    ``run`` returns a detail value on success and raises ScenarioFailure when
    the backend does not behave as expected, so it can be awaited directly
    from a test function.

    Attributes:
        name (str): Human-readable scenario name.
        kind (ScenarioKind): Scenario class.
        body (ScenarioBody): Coroutine function performing the scenario.
        timeout (Optional[float]): Seconds a runner should allow, for scenarios
            that wait on eventually consistent effects.
    """

    name: str
    kind: ScenarioKind
    body: ScenarioBody = field(repr=False, compare=False)
    timeout: Optional[float] = None

    async def run(self, environment: HarnessEnvironment) -> Any:
        return await self.body(environment)


@dataclass
class ScenarioResult:
    """Outcome of running one scenario.

    Attributes:
        name: Scenario name
        kind: Scenario class
        success: Whether the backend behaved as expected
        detail: Value returned by the scenario (response data, rejection message,
            or verifier result)
        error: Failure description if the scenario failed
        execution_time_ms: Duration of the scenario in milliseconds
    """

    name: str
    kind: ScenarioKind
    success: bool
    detail: Any = None
    error: Optional[str] = None
    execution_time_ms: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "success": self.success,
            "error": self.error,
            "execution_time_ms": self.execution_time_ms,
        }
