"""Interfaces of the collaborators the harness drives."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from ..mutation import CommandMutation


@runtime_checkable
class CommandClient(Protocol):
    """Submits commands to the backend.

    ``mutate`` returns the response data on acceptance and raises on
    rejection. Callers expecting a rejection only look at ``str(exc)`` or the
    exception's ``message`` attribute.
    """

    async def mutate(self, variables: Mapping[str, Any], mutation: "CommandMutation") -> Any:
        ...


@runtime_checkable
class EventStore(Protocol):
    """Looks up records in the read/event store by query key."""

    async def query(self, key: str) -> Sequence[Any]:
        ...


@runtime_checkable
class IdentityProvider(Protocol):
    """Issues role-scoped identities and clients acting as them."""

    def token_for(self, identity: str, role: str) -> str:
        ...

    def client_for(self, token: str) -> CommandClient:
        ...


def error_message(exc: BaseException) -> str:
    """Return the rejection message carried by an exception."""
    message = getattr(exc, "message", None)
    if isinstance(message, str):
        return message
    return str(exc)
