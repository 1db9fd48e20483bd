"""GraphQL response envelope."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class GraphQLError(BaseModel):
    """Single entry of the ``errors`` list of a GraphQL response."""

    model_config = ConfigDict(extra="allow")

    message: str


class GraphQLResponse(BaseModel):
    """Envelope of a GraphQL-over-HTTP response.

    Both ``data`` and ``errors`` may be present at the same time, so callers
    must check both before trusting the payload.
    """

    model_config = ConfigDict(extra="allow")

    data: Optional[Dict[str, Any]] = None
    errors: Optional[List[GraphQLError]] = None

    @property
    def schema(self) -> Optional[Dict[str, Any]]:
        """The ``__schema`` node of an introspection response, if any."""
        if not self.data:
            return None
        return self.data.get("__schema")

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def is_usable(self) -> bool:
        """Whether the response carries a schema and no errors."""
        return self.schema is not None and not self.has_errors
