"""Export pipeline: acquire an introspection response and write it as SDL."""

import asyncio
import json
import time
from functools import partial
from pathlib import Path
from typing import Optional, Sequence

import structlog

from .config import ExporterSettings, ExportOptions, Target
from .exceptions import (
    ExitCode,
    ExportCancelled,
    IntrospectionError,
    ProcessStartError,
    SchemaRenderError,
)
from .introspection import (
    GraphQLResponse,
    GraphQLTransport,
    IntrospectionPoller,
    QueryVariant,
    build_query_variants,
    default_client_session,
)
from .render import RenderOptions, render_sdl
from .service import ServiceLauncher


logger = structlog.get_logger(__name__)


class Exporter:
    """Runs a single schema export described by ``ExportOptions``."""

    def __init__(
        self,
        options: ExportOptions,
        settings: Optional[ExporterSettings] = None,
        launcher: Optional[ServiceLauncher] = None,
    ) -> None:
        """Initialize the exporter.

        Args:
            options: Options of this export
            settings: Environment settings; read from the environment if omitted
            launcher: Launcher for executable sources; built from settings if omitted
        """
        self.options = options
        self.settings = settings or ExporterSettings()
        self.launcher = launcher or ServiceLauncher(
            host_command=self.settings.host_command,
            startup_grace=self.settings.startup_grace,
        )

    async def execute(self) -> int:
        """Export the schema.

        Returns:
            Exit code of the export, ``ExitCode.SUCCESS`` once the SDL file
            has been written

        Raises:
            ExportCancelled: If the configured timeout elapsed first
        """
        started = time.monotonic()

        exit_code = self.options.check()
        if exit_code != ExitCode.SUCCESS:
            return exit_code

        target = Target.from_options(self.options)
        output_file = Path(self.options.output_file or target.default_output_file)

        logger.info("Start exporting SDL", source=target.source)

        output_dir = output_file.resolve().parent
        output_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Output directory", path=str(output_dir))

        variants = build_query_variants(
            self.options.introspection_file,
            self.options.configure_introspection_query,
        )

        try:
            response = await self._acquire_with_timeout(target, variants)
        except ProcessStartError as e:
            self._log_failure("Failed to start the service", e)
            return ExitCode.PROCESS_START_FAILED
        except IntrospectionError as e:
            self._log_failure("Failed to get introspection response", e)
            return ExitCode.NO_INTROSPECTION_RESPONSE

        sdl = self._render(response)
        if not sdl:
            logger.error("Failed to generate SDL")
            return ExitCode.SDL_GENERATION_FAILED

        output_file.write_text(sdl, encoding="utf-8")

        elapsed = time.monotonic() - started
        logger.info(
            f"SDL was successfully written to {output_file}",
            elapsed=f"{elapsed:.2f}s",
        )
        return ExitCode.SUCCESS

    async def _acquire_with_timeout(
        self, target: Target, variants: Sequence[QueryVariant]
    ) -> GraphQLResponse:
        if not self.options.timeout:
            return await self._acquire(target, variants)

        try:
            return await asyncio.wait_for(
                self._acquire(target, variants), self.options.timeout
            )
        except asyncio.TimeoutError as e:
            logger.error("Export timed out", timeout=self.options.timeout)
            raise ExportCancelled(self.options.timeout) from e

    async def _acquire(
        self, target: Target, variants: Sequence[QueryVariant]
    ) -> GraphQLResponse:
        factory = self.options.http_client_factory or partial(
            default_client_session, request_timeout=self.settings.request_timeout
        )

        async with factory(self.options) as session:
            poller = IntrospectionPoller(
                GraphQLTransport(session, target.endpoint),
                max_retries=self.settings.max_retries,
                retry_delay=self.settings.retry_delay,
            )

            if target.from_url:
                return await poller.poll(variants)

            async with self.launcher.launch(target):
                return await poller.poll(variants, retry_on_connection_error=True)

    def _render(self, response: GraphQLResponse) -> Optional[str]:
        schema = response.schema or {}

        if self.options.verbose:
            if isinstance(schema, dict):
                logger.info(
                    "Introspection response received",
                    types=len(schema.get("types") or []),
                    directives=len(schema.get("directives") or []),
                )
            logger.info(json.dumps(schema, indent=2))
            logger.info("Starting transformation from introspection response to SDL")

        try:
            sdl = render_sdl(schema, RenderOptions.from_flag(self.options.include_descriptions))
        except SchemaRenderError as e:
            self._log_failure("Failed to build schema from introspection response", e)
            return None

        if self.options.verbose and sdl:
            logger.info("SDL generated successfully")
            logger.info(sdl)

        return sdl

    def _log_failure(self, message: str, error: Exception) -> None:
        if self.options.verbose:
            logger.exception(message, error=str(error))
        else:
            logger.error(message, error=str(error))


def run_export(options: ExportOptions, settings: Optional[ExporterSettings] = None) -> int:
    """Run an export on a new event loop and return its exit code."""
    return asyncio.run(Exporter(options, settings).execute())
