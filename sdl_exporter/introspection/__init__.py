"""Introspection subsystem: query variants, HTTP transport and polling."""

from .poller import IntrospectionPoller
from .queries import DEFAULT_VARIANTS, QueryVariant, build_query_variants
from .response import GraphQLError, GraphQLResponse
from .transport import GraphQLTransport, default_client_session

__all__ = [
    "IntrospectionPoller",
    "GraphQLTransport",
    "GraphQLResponse",
    "GraphQLError",
    "QueryVariant",
    "DEFAULT_VARIANTS",
    "build_query_variants",
    "default_client_session",
]
