"""Polling of a GraphQL endpoint for an introspection response."""

import asyncio
from typing import Optional, Sequence, Tuple

import aiohttp
import structlog

from ..exceptions import IntrospectionError
from .queries import QueryVariant
from .response import GraphQLResponse
from .transport import GraphQLTransport


logger = structlog.get_logger(__name__)

# Errors meaning the request did not produce a GraphQL response at all.
TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, ValueError)


class IntrospectionPoller:
    """Requests introspection from an endpoint until a usable schema arrives.

    Every attempt sends the query variants in order and stops at the first
    usable response. An attempt in which no variant reached the server is a
    connection failure and is retried when ``retry_on_connection_error`` is
    set, which is the case while a launched service is still starting up.
    """

    def __init__(
        self,
        transport: GraphQLTransport,
        max_retries: int = 10,
        retry_delay: float = 2.0,
    ) -> None:
        """Initialize the poller.

        Args:
            transport: Transport bound to the target endpoint
            max_retries: Maximum number of attempts on connection failures
            retry_delay: Seconds to wait between attempts
        """
        self.transport = transport
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    @property
    def url(self) -> str:
        return self.transport.endpoint

    async def poll(
        self,
        variants: Sequence[QueryVariant],
        retry_on_connection_error: bool = False,
    ) -> GraphQLResponse:
        """Obtain a usable introspection response.

        Args:
            variants: Query variants in fallback order
            retry_on_connection_error: Retry attempts that could not reach
                the server

        Returns:
            Response carrying the ``__schema`` node and no errors

        Raises:
            IntrospectionError: If no usable response could be obtained
        """
        for attempt in range(1, self.max_retries + 1):
            logger.info(
                "Sending introspection request",
                url=self.url,
                attempt=attempt,
            )

            response, reached_server = await self._attempt(variants)

            if response is not None and response.is_usable:
                return response

            if reached_server:
                raise IntrospectionError(
                    f"No usable introspection response from {self.url}", response
                )

            if not retry_on_connection_error:
                raise IntrospectionError(f"Could not connect to {self.url}")

            logger.error(
                f"Make sure that it is possible to start the process at {self.url} "
                "and the required port is not used by another process. Perhaps the "
                "process has not yet started and cannot serve the request.",
                attempt=attempt,
            )

            if attempt == self.max_retries:
                break

            logger.warning(
                f"Wait {self.retry_delay:g} seconds and try {attempt + 1} from {self.max_retries}.",
                url=self.url,
            )
            await asyncio.sleep(self.retry_delay)

        raise IntrospectionError(
            f"Failed to load data from {self.url} for {self.max_retries} attempts"
        )

    async def _attempt(
        self, variants: Sequence[QueryVariant]
    ) -> Tuple[Optional[GraphQLResponse], bool]:
        """Send variants in order until one yields a usable response.

        Returns:
            The usable response or the last one received, and whether any
            variant reached the server
        """
        last_response: Optional[GraphQLResponse] = None
        reached_server = False

        for index, variant in enumerate(variants):
            if index > 0:
                logger.info(
                    "Falling back to next introspection query", variant=variant.label
                )

            try:
                response = await self.transport.send(variant.query)
            except TRANSPORT_ERRORS as e:
                logger.error(
                    "Failed to send introspection request",
                    variant=variant.label,
                    url=self.url,
                    error=str(e),
                )
                logger.debug("Request failure details", exc_info=True)
                continue

            reached_server = True
            last_response = response

            if response is not None and response.is_usable:
                logger.info(
                    "Received introspection response",
                    variant=variant.label,
                    url=self.url,
                )
                return response, True

            self._log_unusable_response(variant, response)

        return last_response, reached_server

    def _log_unusable_response(
        self, variant: QueryVariant, response: Optional[GraphQLResponse]
    ) -> None:
        if response is None or not response.has_errors:
            logger.warning(
                "Introspection response contains no schema",
                variant=variant.label,
                url=self.url,
            )
            return

        logger.error(
            "Introspection response contains errors",
            variant=variant.label,
            count=len(response.errors or []),
        )
        for error in response.errors or []:
            logger.error(error.message, variant=variant.label)
