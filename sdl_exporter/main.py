"""Command line entry point of the SDL exporter."""

from typing import Optional

import typer

from . import __version__
from .config import DEFAULT_API_PATH, DEFAULT_SERVICE_URL, ExporterSettings, ExportOptions
from .exceptions import ExitCode, ExportCancelled
from .exporter import run_export
from .utils import setup_logging

app = typer.Typer(
    add_completion=False,
    help="Export the schema of a GraphQL service as SDL using introspection.",
    epilog=(
        "Examples:\n\n"
        "  sdlexport --source /srv/MyService.dll --url http://localhost:5000 "
        "--api-path /api/graphql --out schema.graphql --timeout 10\n\n"
        "  sdlexport --source https://api.github.com/graphql "
        "--auth 'bearer|<token>' --include-descriptions --verbose"
    ),
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"sdlexport {__version__}")
        raise typer.Exit()


@app.command()
def export(
    source: str = typer.Option(..., "--source", help="Schema source - executable file or URL"),
    service_url: str = typer.Option(DEFAULT_SERVICE_URL, "--url", help="URL to start process"),
    additional_args: Optional[str] = typer.Option(
        None, "--args", help="Additional command line arguments in case of using the executable file"
    ),
    api_path: str = typer.Option(
        DEFAULT_API_PATH, "--api-path", help="Relative path for GraphQL API when using --url option"
    ),
    authentication: Optional[str] = typer.Option(
        None, "--auth", help="Authentication method in schema|parameter format, or a file containing it"
    ),
    output_file: Optional[str] = typer.Option(
        None, "--out", help="The output SDL file. If not specified, then the schema will be saved as <Source>.graphql"
    ),
    include_descriptions: bool = typer.Option(
        False, "--include-descriptions", help="Include descriptions in output file"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enables verbose log output"),
    timeout: int = typer.Option(
        0, "--timeout", min=0, help="Timeout in seconds for generating SDL; 0 - no timeout"
    ),
    introspection_file: Optional[str] = typer.Option(
        None, "--introspection-file", help="Allows you to specify a file with your own introspection query"
    ),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit"
    ),
) -> None:
    """Export SDL from an executable file or a GraphQL endpoint."""
    settings = ExporterSettings()
    logger = setup_logging("DEBUG" if verbose else settings.log_level, settings.log_format)

    options = ExportOptions(
        source=source,
        service_url=service_url,
        api_path=api_path,
        additional_args=additional_args,
        authentication=authentication,
        output_file=output_file,
        include_descriptions=include_descriptions,
        verbose=verbose,
        timeout=timeout,
        introspection_file=introspection_file,
    )

    try:
        exit_code = run_export(options, settings)
    except ExportCancelled as e:
        logger.error("Export cancelled", error=str(e))
        exit_code = ExitCode.CANCELLED

    raise typer.Exit(code=int(exit_code))


def main() -> None:
    """Main entry point for the exporter."""
    app()


if __name__ == "__main__":
    main()
