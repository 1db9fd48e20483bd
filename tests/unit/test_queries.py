"""Unit tests for introspection query variants."""

from sdl_exporter.introspection import DEFAULT_VARIANTS, build_query_variants
from sdl_exporter.introspection.queries import CLASSIC, CLASSIC_DRAFT, MODERN, MODERN_DRAFT


class TestDefaultVariants:
    """Test the built-in fallback chain."""

    def test_fallback_order(self):
        """Test that variants go from most to least featureful."""
        assert [variant.label for variant in DEFAULT_VARIANTS] == [
            "modern-draft",
            "modern",
            "classic-draft",
            "classic",
        ]

    def test_operation_name(self):
        """Test that every variant declares the IntrospectionQuery operation."""
        for variant in DEFAULT_VARIANTS:
            assert "query IntrospectionQuery" in variant.query

    def test_modern_variants_request_directive_features(self):
        """Test that modern variants ask for repeatable directives and specifiedBy."""
        for variant in (MODERN_DRAFT, MODERN):
            assert "isRepeatable" in variant.query
            assert "specifiedByURL" in variant.query

        for variant in (CLASSIC_DRAFT, CLASSIC):
            assert "isRepeatable" not in variant.query
            assert "specifiedByURL" not in variant.query

    def test_draft_variants_request_argument_deprecation(self):
        """Test that draft variants ask for deprecated arguments."""
        for variant in (MODERN_DRAFT, CLASSIC_DRAFT):
            assert "args(includeDeprecated: true)" in variant.query

        for variant in (MODERN, CLASSIC):
            assert "args(includeDeprecated: true)" not in variant.query


class TestBuildQueryVariants:
    """Test build_query_variants."""

    def test_defaults(self):
        """Test that without options the default chain is used."""
        assert build_query_variants() == list(DEFAULT_VARIANTS)

    def test_custom_file_replaces_chain(self, tmp_path):
        """Test that a custom query is the only variant."""
        query_file = tmp_path / "introspection.graphql"
        query_file.write_text("query IntrospectionQuery { __schema { queryType { name } } }")

        variants = build_query_variants(str(query_file))

        assert len(variants) == 1
        assert variants[0].label == "custom"
        assert variants[0].query == query_file.read_text()

    def test_configure_hook_applied_to_every_variant(self):
        """Test rewriting every query with the configure hook."""
        variants = build_query_variants(
            configure=lambda query: query.replace("__schema {\n    description", "__schema {")
        )

        assert [variant.label for variant in variants] == [
            variant.label for variant in DEFAULT_VARIANTS
        ]
        for variant in variants:
            assert "__schema {\n    description" not in variant.query

    def test_configure_hook_applied_to_custom_query(self, tmp_path):
        """Test that the hook also rewrites a custom query."""
        query_file = tmp_path / "introspection.graphql"
        query_file.write_text("query IntrospectionQuery { __schema { description } }")

        variants = build_query_variants(str(query_file), configure=str.upper)

        assert variants[0].query == "QUERY INTROSPECTIONQUERY { __SCHEMA { DESCRIPTION } }"
