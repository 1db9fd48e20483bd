"""Pytest configuration and fixtures for SDL exporter tests."""

import asyncio
import socket
import sys
from pathlib import Path

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer
from graphql import build_schema, graphql_sync

from sdl_exporter.config import ExporterSettings
from sdl_exporter.introspection.queries import MODERN_DRAFT


FIXTURES_DIR = Path(__file__).parent / "fixtures"
FAKE_SERVICE = FIXTURES_DIR / "fake_service.py"


class FakeGraphQLService:
    """GraphQL endpoint with switchable misbehaviour."""

    def __init__(self, schema) -> None:
        self.schema = schema
        self.url = ""
        self.requests = []
        self.allow_post = True
        self.not_found = False
        self.rejected_fields = ()
        self.raw_body = None
        self.status = 200
        self.delay = 0.0

    @property
    def queries(self):
        return [query for _, query in self.requests]

    @property
    def methods(self):
        return [method for method, _ in self.requests]

    async def handle(self, request: web.Request) -> web.Response:
        if request.method == "POST":
            payload = await request.json()
            query = payload["query"]
            operation_name = payload.get("operationName")
        else:
            query = request.query.get("query", "")
            operation_name = None

        self.requests.append((request.method, query))

        if self.delay:
            await asyncio.sleep(self.delay)

        if request.method == "POST" and not self.allow_post:
            return web.Response(status=405)

        if self.not_found:
            return web.Response(status=404)

        if self.raw_body is not None:
            return web.Response(text=self.raw_body, status=self.status)

        for field in self.rejected_fields:
            if field in query:
                return web.json_response(
                    {"errors": [{"message": f'Cannot query field "{field}".'}]},
                    status=self.status,
                )

        result = graphql_sync(self.schema, query, operation_name=operation_name)
        return web.json_response(result.formatted, status=self.status)


@pytest.fixture
def schema_sdl():
    """Provide the SDL of the test schema."""
    return (FIXTURES_DIR / "schema.graphql").read_text()


@pytest.fixture
def graphql_schema(schema_sdl):
    """Provide the executable test schema."""
    return build_schema(schema_sdl)


@pytest.fixture
def introspection_schema(graphql_schema):
    """Provide the ``__schema`` node of a full introspection of the test schema."""
    result = graphql_sync(graphql_schema, MODERN_DRAFT.query)
    assert result.errors is None
    return result.data["__schema"]


@pytest.fixture
async def graphql_service(graphql_schema):
    """Provide a running GraphQL endpoint serving the test schema."""
    service = FakeGraphQLService(graphql_schema)

    app = web.Application()
    app.router.add_route("*", "/graphql", service.handle)

    server = TestServer(app)
    await server.start_server()
    service.url = str(server.make_url("/graphql"))

    yield service

    await server.close()


@pytest.fixture
def free_port():
    """Provide a local TCP port nobody is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def unreachable_url(free_port):
    """Provide a GraphQL URL that refuses connections."""
    return f"http://127.0.0.1:{free_port}/graphql"


@pytest.fixture
def fake_service_path():
    """Provide the path of the fake service executable."""
    return str(FAKE_SERVICE)


@pytest.fixture
def exporter_settings():
    """Provide fast exporter settings running executables with this interpreter."""
    return ExporterSettings(
        log_level="DEBUG",
        max_retries=3,
        retry_delay=0,
        request_timeout=5,
        startup_grace=0.1,
        host_command=sys.executable,
    )
