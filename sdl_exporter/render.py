"""Conversion of an introspection schema to SDL."""

import copy
from dataclasses import dataclass
from typing import Any, Dict, Iterable

import structlog
from graphql import GraphQLError, build_client_schema, print_schema

from .exceptions import SchemaRenderError


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RenderOptions:
    """Which descriptions are kept in the generated SDL."""

    type_descriptions: bool = False
    field_descriptions: bool = False
    argument_descriptions: bool = False
    enum_value_descriptions: bool = False

    @classmethod
    def from_flag(cls, include_descriptions: bool) -> "RenderOptions":
        return cls(
            type_descriptions=include_descriptions,
            field_descriptions=include_descriptions,
            argument_descriptions=include_descriptions,
            enum_value_descriptions=include_descriptions,
        )


def _clear(items: Iterable[Dict[str, Any]]) -> None:
    for item in items:
        item["description"] = None


def strip_descriptions(schema: Dict[str, Any], options: RenderOptions) -> Dict[str, Any]:
    """Return a copy of ``schema`` without the descriptions disabled in ``options``."""
    schema = copy.deepcopy(schema)

    if not options.type_descriptions:
        schema["description"] = None

    for type_ in schema.get("types") or []:
        fields = type_.get("fields") or []
        input_fields = type_.get("inputFields") or []

        if not options.type_descriptions:
            type_["description"] = None
        if not options.field_descriptions:
            _clear(fields)
            _clear(input_fields)
        if not options.argument_descriptions:
            for field in fields:
                _clear(field.get("args") or [])
        if not options.enum_value_descriptions:
            _clear(type_.get("enumValues") or [])

    for directive in schema.get("directives") or []:
        if not options.type_descriptions:
            directive["description"] = None
        if not options.argument_descriptions:
            _clear(directive.get("args") or [])

    return schema


def render_sdl(schema: Dict[str, Any], options: RenderOptions) -> str:
    """Print the ``__schema`` node of an introspection response as SDL.

    Args:
        schema: The ``__schema`` node
        options: Description toggles

    Returns:
        SDL text of the schema

    Raises:
        SchemaRenderError: If the introspection data does not describe a valid schema
    """
    try:
        introspection = {"__schema": strip_descriptions(schema, options)}
        client_schema = build_client_schema(introspection)
        return print_schema(client_schema)
    except (GraphQLError, TypeError, ValueError, KeyError, AttributeError) as e:
        raise SchemaRenderError(f"Failed to build schema from introspection: {e}") from e
