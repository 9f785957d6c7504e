import json
import logging
from typing import Any

from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table
from rich.box import ROUNDED

from gdapi.domain.models.errors import APIError

logger = logging.getLogger(__name__)


class ConsoleDisplay:
    """Renders API results and errors on the terminal using rich."""

    def __init__(self):
        """Initializes the rich consoles (results on stdout, errors on stderr)."""
        self.console = Console()
        self.error_console = Console(stderr=True)

    def display_json(self, payload: Any) -> None:
        """Pretty-prints a decoded JSON payload."""
        if payload is None:
            self.display_info("(empty response)")
            return
        self.console.print(JSON(json.dumps(payload)))

    def display_api_error(self, error: APIError) -> None:
        """Shows an API error envelope, including field-level details."""
        title = f"[bold red]{error.code}[/bold red]"
        if error.status_code is not None:
            title += f" [dim](HTTP {error.status_code})[/dim]"
        body: Any = error.message or "(no message)"
        if error.fields:
            table = Table(box=ROUNDED, show_header=True, header_style="bold")
            table.add_column("Path")
            table.add_column("Code")
            table.add_column("Message")
            for field in error.fields:
                table.add_row(field.path or field.path_related, field.code, field.message)
            self.error_console.print(Panel(body, title=title, border_style="red"))
            self.error_console.print(table)
            return
        self.error_console.print(Panel(body, title=title, border_style="red"))

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user."""
        logger.debug(f"display_error: {error_message}")
        self.error_console.print(f"[bold red]Error:[/bold red] {error_message}")

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        self.error_console.print(f"[cyan]{info_message}[/cyan]")

    def display_success(self, message: str) -> None:
        self.error_console.print(f"[bold green]{message}[/bold green]")
