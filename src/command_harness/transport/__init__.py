"""Transport interfaces and HTTP implementations."""

from .base import CommandClient, EventStore, IdentityProvider, error_message
from .graphql import GraphQLCommandClient, GraphQLIdentityProvider, HttpEventStore

__all__ = [
    "CommandClient",
    "EventStore",
    "IdentityProvider",
    "error_message",
    "GraphQLCommandClient",
    "GraphQLIdentityProvider",
    "HttpEventStore",
]
