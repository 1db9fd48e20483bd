"""Export a GraphQL service schema as SDL via introspection."""

__version__ = "0.1.0"
