"""Introspection query variants tried against a GraphQL service."""

from dataclasses import dataclass
from typing import Callable, List, Optional

import structlog
from graphql import get_introspection_query


logger = structlog.get_logger(__name__)

OPERATION_NAME = "IntrospectionQuery"


@dataclass(frozen=True)
class QueryVariant:
    """Introspection query text together with a label used in logs."""

    label: str
    query: str


# Most featureful first. Older servers reject fields they do not know, so
# each following variant requests less of the introspection schema.
MODERN_DRAFT = QueryVariant(
    label="modern-draft",
    query=get_introspection_query(
        descriptions=True,
        specified_by_url=True,
        directive_is_repeatable=True,
        schema_description=True,
        input_value_deprecation=True,
    ),
)

MODERN = QueryVariant(
    label="modern",
    query=get_introspection_query(
        descriptions=True,
        specified_by_url=True,
        directive_is_repeatable=True,
        schema_description=True,
    ),
)

CLASSIC_DRAFT = QueryVariant(
    label="classic-draft",
    query=get_introspection_query(
        descriptions=True,
        input_value_deprecation=True,
    ),
)

CLASSIC = QueryVariant(
    label="classic",
    query=get_introspection_query(descriptions=True),
)

DEFAULT_VARIANTS = (MODERN_DRAFT, MODERN, CLASSIC_DRAFT, CLASSIC)


def build_query_variants(
    introspection_file: Optional[str] = None,
    configure: Optional[Callable[[str], str]] = None,
) -> List[QueryVariant]:
    """Build the ordered list of introspection queries to send.

    Args:
        introspection_file: File with a custom query. When given it replaces
            the whole fallback chain.
        configure: Hook applied to the text of every query

    Returns:
        Query variants in the order they should be tried
    """
    if introspection_file:
        with open(introspection_file, encoding="utf-8") as query_file:
            variants = [QueryVariant(label="custom", query=query_file.read())]
        logger.info("Using custom introspection query", file=introspection_file)
    else:
        variants = list(DEFAULT_VARIANTS)

    if configure is not None:
        variants = [
            QueryVariant(label=variant.label, query=configure(variant.query))
            for variant in variants
        ]

    return variants
