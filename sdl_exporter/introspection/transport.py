"""HTTP transport for sending introspection queries."""

import json
from typing import Optional

import aiohttp
import structlog

from .. import __version__
from ..config import ExportOptions
from .queries import OPERATION_NAME
from .response import GraphQLResponse


logger = structlog.get_logger(__name__)

USER_AGENT = f"sdl-exporter/{__version__}"


def default_client_session(
    options: ExportOptions,
    request_timeout: float = 100.0,
) -> aiohttp.ClientSession:
    """Create the HTTP session used to talk to the GraphQL service.

    Args:
        options: Export options providing the authentication
        request_timeout: Total timeout of a single request in seconds

    Returns:
        A new session; the caller is responsible for closing it
    """
    # Some APIs refuse requests without a User-Agent, so it is always sent.
    headers = {"User-Agent": USER_AGENT}

    credentials = options.load_authentication()
    if credentials is not None:
        scheme, parameter = credentials
        headers["Authorization"] = f"{scheme} {parameter}"

    return aiohttp.ClientSession(
        headers=headers,
        timeout=aiohttp.ClientTimeout(total=request_timeout),
    )


class GraphQLTransport:
    """Sends GraphQL operations to a single endpoint."""

    def __init__(self, session: aiohttp.ClientSession, endpoint: str) -> None:
        """Initialize the transport.

        Args:
            session: HTTP session used for every request
            endpoint: Full URL of the GraphQL endpoint
        """
        self.session = session
        self.endpoint = endpoint

    async def send(
        self, query: str, operation_name: str = OPERATION_NAME
    ) -> Optional[GraphQLResponse]:
        """Execute a GraphQL operation.

        The operation is POSTed as JSON. Servers answering ``405 Method Not
        Allowed`` get a single GET retry with the query as URL parameter.

        Args:
            query: GraphQL query text
            operation_name: Name of the operation to execute

        Returns:
            Parsed response, or None if the endpoint does not exist or
            returned no body

        Raises:
            aiohttp.ClientError: If the request could not be sent
            ValueError: If the response body is not a GraphQL response
        """
        payload = {"query": query, "operationName": operation_name}

        logger.debug("Sending GraphQL request", method="POST", url=self.endpoint)
        async with self.session.post(self.endpoint, json=payload) as response:
            self._log_response("POST", response)
            if response.status != 405:
                return await self._read_response(response)

        logger.info("Switching to GET method", url=self.endpoint)

        logger.debug("Sending GraphQL request", method="GET", url=self.endpoint)
        async with self.session.get(self.endpoint, params={"query": query}) as response:
            self._log_response("GET", response)
            return await self._read_response(response)

    def _log_response(self, method: str, response: aiohttp.ClientResponse) -> None:
        logger.info(
            "GraphQL response received",
            method=method,
            url=str(response.url),
            status=response.status,
        )
        logger.debug(
            "Response headers",
            method=method,
            headers=dict(response.headers),
        )

    async def _read_response(
        self, response: aiohttp.ClientResponse
    ) -> Optional[GraphQLResponse]:
        if response.status == 404:
            return None

        content = await response.text()

        if not response.ok:
            logger.warning(
                "GraphQL endpoint returned error status",
                url=self.endpoint,
                status=response.status,
                response=content[:500],
            )

        if not content.strip():
            return None

        payload = json.loads(content)
        if payload is None:
            return None

        return GraphQLResponse.model_validate(payload)
