"""Exceptions raised while exporting a schema."""

from enum import IntEnum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .introspection.response import GraphQLResponse


class SDLExporterError(Exception):
    """Base class for all exporter errors."""


class IntrospectionError(SDLExporterError):
    """No usable introspection response could be obtained."""

    def __init__(self, message: str, response: Optional["GraphQLResponse"] = None) -> None:
        super().__init__(message)
        self.response = response


class ProcessStartError(SDLExporterError):
    """The target service exited before it could serve requests."""

    def __init__(self, process_name: str, exit_code: Optional[int] = None) -> None:
        message = f"Process {process_name} could not start"
        if exit_code is not None:
            message += f", exit code: {exit_code}"
        super().__init__(message)
        self.process_name = process_name
        self.exit_code = exit_code


class SchemaRenderError(SDLExporterError):
    """The introspection schema could not be converted to SDL."""


class ExportCancelled(SDLExporterError):
    """The export did not finish before the configured timeout."""

    def __init__(self, timeout: int) -> None:
        super().__init__(f"Export cancelled after {timeout} seconds")
        self.timeout = timeout


class ExitCode(IntEnum):
    """Process exit codes reported by an export."""

    SUCCESS = 0
    UNKNOWN_SOURCE = 1
    MISSING_SERVICE_URL = 2
    INVALID_AUTHENTICATION = 3
    PROCESS_START_FAILED = 4
    INVALID_INTROSPECTION_FILE = 5
    NO_INTROSPECTION_RESPONSE = 100
    CANCELLED = 124
    SDL_GENERATION_FAILED = 200
