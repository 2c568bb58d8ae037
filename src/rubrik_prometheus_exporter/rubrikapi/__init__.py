"""Rubrik API client package.

Authenticates against a Rubrik appliance and exposes typed retrieval
operations that prefer the GraphQL API and fall back to the REST API.

Exports:
    RubrikClient: Resource façade with one operation per resource category.
    SessionManager: Obtains and tears down the appliance session.
    Credentials, Session: Authentication inputs and result.
    RestTransport, GraphQueryClient: The two protocol clients.
    types: Module containing Pydantic models for domain records.
    DEFAULT_TIMEOUT: Default HTTP request timeout.
"""

from . import types
from .client import RubrikClient
from .errors import AuthError, DecodeError, QueryError, RequestError, RubrikApiError
from .graphql import GraphQueryClient
from .session import DEFAULT_TIMEOUT, Credentials, Session, SessionManager
from .transport import RestTransport

__all__ = [
    "DEFAULT_TIMEOUT",
    "AuthError",
    "Credentials",
    "DecodeError",
    "GraphQueryClient",
    "QueryError",
    "RequestError",
    "RestTransport",
    "RubrikApiError",
    "RubrikClient",
    "Session",
    "SessionManager",
    "types",
]
