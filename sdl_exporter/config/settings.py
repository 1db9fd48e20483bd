"""Configuration models using Pydantic."""

import os
from typing import Any, Callable, Optional, Tuple

import structlog
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..exceptions import ExitCode


logger = structlog.get_logger(__name__)

DEFAULT_SERVICE_URL = "http://localhost:8088"
DEFAULT_API_PATH = "/graphql"


def _identity(query: str) -> str:
    return query


class ExporterSettings(BaseSettings):
    """Environment-level settings for the exporter."""

    model_config = SettingsConfigDict(
        env_prefix="SDLEXPORT_",
        case_sensitive=False,
        validate_assignment=True,
    )

    # Logging configuration
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="console",
        description="Log format (console, json)"
    )

    # Introspection polling
    max_retries: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum number of introspection attempts against a launched service"
    )
    retry_delay: float = Field(
        default=2.0,
        ge=0,
        le=60,
        description="Seconds to wait between introspection attempts"
    )
    request_timeout: float = Field(
        default=100.0,
        gt=0,
        description="Timeout of a single HTTP request in seconds"
    )

    # Service launching
    startup_grace: float = Field(
        default=0.5,
        ge=0,
        description="Seconds to watch a launched service for an early exit"
    )
    host_command: str = Field(
        default="dotnet",
        description="Host used to run the executable; empty runs it directly"
    )


class ExportOptions(BaseModel):
    """Options of a single export run."""

    model_config = ConfigDict(validate_assignment=True)

    source: str = Field(
        description="Schema source - executable file or URL"
    )
    service_url: Optional[str] = Field(
        default=DEFAULT_SERVICE_URL,
        description="URL to start the process at"
    )
    api_path: str = Field(
        default=DEFAULT_API_PATH,
        description="Relative path of the GraphQL API on the launched service"
    )
    additional_args: Optional[str] = Field(
        default=None,
        description="Additional command line arguments for the executable"
    )
    authentication: Optional[str] = Field(
        default=None,
        description="Authentication in scheme|parameter format, or a file containing it"
    )
    output_file: Optional[str] = Field(
        default=None,
        description="Output SDL file; defaults to <source>.graphql"
    )
    include_descriptions: bool = Field(
        default=False,
        description="Include descriptions in the output file"
    )
    verbose: bool = Field(
        default=False,
        description="Enable verbose log output"
    )
    timeout: int = Field(
        default=0,
        ge=0,
        description="Timeout in seconds for the whole export; 0 means no timeout"
    )
    introspection_file: Optional[str] = Field(
        default=None,
        description="File with a custom introspection query"
    )
    configure_introspection_query: Callable[[str], str] = Field(
        default=_identity,
        description="Rewrites every introspection query before it is sent"
    )
    http_client_factory: Optional[Callable[..., Any]] = Field(
        default=None,
        description="Creates the aiohttp session used to send introspection queries"
    )

    @property
    def from_url(self) -> bool:
        """Whether the source is an HTTP(S) endpoint rather than an executable."""
        return self.source.lower().startswith(("http://", "https://"))

    def check(self) -> ExitCode:
        """Check the options before an export.

        Returns:
            ExitCode.SUCCESS if the options are usable, otherwise the failure code
        """
        if not self.from_url:
            if not os.path.isfile(self.source):
                logger.error(
                    f"Unknown source: {self.source}. Only http:// and https:// protocols "
                    "are supported. You can also specify the full path to the executable file."
                )
                return ExitCode.UNKNOWN_SOURCE

            if not self.service_url:
                logger.error("--url parameter not set")
                return ExitCode.MISSING_SERVICE_URL

        if self.authentication:
            try:
                self.load_authentication()
            except ValueError as e:
                logger.error(str(e))
                return ExitCode.INVALID_AUTHENTICATION

        if self.introspection_file and not os.path.isfile(self.introspection_file):
            logger.error(f"Introspection query file not found: {self.introspection_file}")
            return ExitCode.INVALID_INTROSPECTION_FILE

        return ExitCode.SUCCESS

    def load_authentication(self) -> Optional[Tuple[str, str]]:
        """Resolve the authentication option to a (scheme, credential) pair.

        The option is either the value itself or the path of a file holding it.

        Raises:
            ValueError: If the value is not in scheme|parameter format
        """
        if not self.authentication:
            return None

        value = self.authentication
        if os.path.isfile(value):
            with open(value, encoding="utf-8") as auth_file:
                value = auth_file.read().strip()

        parts = value.split("|")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise ValueError(
                "The value of the --auth option must be specified in the schema|parameter format."
            )

        return parts[0], parts[1]
