"""Unit tests for the GraphQL response envelope."""

import pytest
from pydantic import ValidationError

from sdl_exporter.introspection import GraphQLResponse


class TestGraphQLResponse:
    """Test GraphQLResponse model."""

    def test_usable_response(self):
        """Test a response with a schema and no errors."""
        response = GraphQLResponse.model_validate_json(
            '{"data": {"__schema": {"types": []}}}'
        )

        assert response.schema == {"types": []}
        assert response.has_errors is False
        assert response.is_usable is True

    def test_empty_errors_list_is_usable(self):
        """Test that an empty errors list does not disqualify the data."""
        response = GraphQLResponse(data={"__schema": {}}, errors=[])

        assert response.is_usable is True

    def test_data_with_errors_is_not_usable(self):
        """Test that errors disqualify a response even if data is present."""
        response = GraphQLResponse.model_validate(
            {
                "data": {"__schema": {"types": []}},
                "errors": [{"message": "Cannot query field", "locations": [{"line": 1}]}],
            }
        )

        assert response.schema is not None
        assert response.has_errors is True
        assert response.errors[0].message == "Cannot query field"
        assert response.is_usable is False

    def test_null_data(self):
        """Test a response without data."""
        response = GraphQLResponse.model_validate_json('{"data": null}')

        assert response.schema is None
        assert response.is_usable is False

    def test_data_without_schema(self):
        """Test data that is not an introspection result."""
        response = GraphQLResponse(data={"books": []})

        assert response.schema is None
        assert response.is_usable is False

    def test_malformed_json(self):
        """Test that invalid JSON is rejected."""
        with pytest.raises(ValidationError):
            GraphQLResponse.model_validate_json("<html>Bad Gateway</html>")

    def test_validation_error_is_value_error(self):
        """Test that parse failures can be handled as ValueError."""
        with pytest.raises(ValueError):
            GraphQLResponse.model_validate_json("{")
