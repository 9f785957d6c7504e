"""Main entry point for the gdapi command line tool.

Sets up the Typer CLI application, wires settings, logging and the API
client together (Composition Root), and renders results with rich.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Coroutine, Dict, Optional

import typer
from typing_extensions import Annotated

from gdapi.core.client import GoDaddyClient
from gdapi.domain.models.errors import APIError, GoDaddyError
from gdapi.infrastructure.cli.display import ConsoleDisplay
from gdapi.infrastructure.config.settings import ClientSettings, load_settings
from gdapi.infrastructure.http.response_decoder import as_json
from gdapi.infrastructure.monitoring.http_logger import LoggingHttpLogger
from gdapi.infrastructure.monitoring.logger_setup import setup_logging

logger = logging.getLogger(__name__)

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


@dataclass
class CliOptions:
    ote: bool = False
    config: Optional[Path] = None
    log_level: Optional[str] = None


# --- Dependency wiring ---

def create_dependencies(options: CliOptions) -> Dict[str, Any]:
    """Loads settings and configures logging for one command invocation.

    Exits with status 1 when the configuration is unusable.
    """
    ui = ConsoleDisplay()
    try:
        settings = load_settings(config_file=options.config, use_ote=True if options.ote else None)
    except GoDaddyError as e:
        ui.display_error(str(e))
        raise typer.Exit(code=1)
    setup_logging(log_level=options.log_level or settings.log_level, log_file=settings.log_file)
    return {'ui': ui, 'settings': settings}


async def open_client(settings: ClientSettings, validate: bool = False) -> GoDaddyClient:
    """Creates the API client used by the commands."""
    return await GoDaddyClient.from_settings(settings, validate=validate, http_logger=LoggingHttpLogger())


# --- Helper for Running Async Commands ---

def run_async(ui: ConsoleDisplay, coro: Coroutine[Any, Any, Any]) -> Any:
    """Runs a command coroutine and turns client errors into exit code 1."""
    try:
        return asyncio.run(coro)
    except APIError as e:
        logger.debug(f"API error: {e.to_json()}")
        ui.display_api_error(e)
        raise typer.Exit(code=1)
    except GoDaddyError as e:
        logger.debug(f"Command failed: {e}", exc_info=True)
        ui.display_error(str(e))
        raise typer.Exit(code=1)


async def _call(settings: ClientSettings, method: str, path: str, body: Optional[Any]) -> Any:
    client = await open_client(settings)
    async with client:
        return await client.call_api(method, path, body, result_type=as_json)


async def _check(settings: ClientSettings) -> None:
    client = await open_client(settings, validate=True)
    await client.aclose()


# --- Typer App Definition ---

app = typer.Typer(
    name="gdapi",
    help="Rate-limited command line client for the GoDaddy REST API.",
    add_completion=False,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    ote: Annotated[bool, typer.Option("--ote", help="Use the OTE test environment.")] = False,
    config: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to a YAML config file.")] = None,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="Logging level (DEBUG, INFO, ...).")] = None,
):
    """Global options shared by all commands."""
    ctx.obj = CliOptions(ote=ote, config=config, log_level=log_level)


@app.command()
def get(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="API path, e.g. /v1/domains.")],
):
    """GET a path and print the JSON response."""
    deps = create_dependencies(ctx.obj)
    result = run_async(deps['ui'], _call(deps['settings'], "GET", path, None))
    deps['ui'].display_json(result)


@app.command()
def request(
    ctx: typer.Context,
    method: Annotated[str, typer.Argument(help="HTTP method: GET, POST, PUT, PATCH or DELETE.")],
    path: Annotated[str, typer.Argument(help="API path, already URL-escaped.")],
    data: Annotated[Optional[str], typer.Option("--data", "-d", help="JSON request body.")] = None,
):
    """Send an arbitrary request and print the JSON response."""
    verb = method.upper()
    if verb not in HTTP_METHODS:
        raise typer.BadParameter(f"unsupported method {method!r}", param_hint="METHOD")
    body = None
    if data is not None:
        try:
            body = json.loads(data)
        except ValueError as e:
            raise typer.BadParameter(f"invalid JSON: {e}", param_hint="--data")

    deps = create_dependencies(ctx.obj)
    result = run_async(deps['ui'], _call(deps['settings'], verb, path, body))
    deps['ui'].display_json(result)


@app.command()
def check(ctx: typer.Context):
    """Validate the configured credentials against the API."""
    deps = create_dependencies(ctx.obj)
    run_async(deps['ui'], _check(deps['settings']))
    deps['ui'].display_success(f"Credentials accepted by {deps['settings'].endpoint}")


def cli_entry_point():
    """Function called by the console script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
