import pytest
from unittest.mock import MagicMock

from rich.json import JSON
from rich.panel import Panel
from rich.table import Table

from gdapi.domain.models.errors import APIError, ErrorField
from gdapi.infrastructure.cli.display import ConsoleDisplay


@pytest.fixture
def console_display():
    """Fixture to create a ConsoleDisplay with mocked consoles."""
    display = ConsoleDisplay()
    display.console = MagicMock()
    display.error_console = MagicMock()
    return display


def test_display_json_prints_rich_json(console_display: ConsoleDisplay):
    console_display.display_json({"domain": "example.com"})

    console_display.console.print.assert_called_once()
    args, _ = console_display.console.print.call_args
    assert isinstance(args[0], JSON)


def test_display_json_none_shows_info(console_display: ConsoleDisplay):
    console_display.display_json(None)

    console_display.console.print.assert_not_called()
    console_display.error_console.print.assert_called_once_with("[cyan](empty response)[/cyan]")


def test_display_api_error_without_fields(console_display: ConsoleDisplay):
    console_display.display_api_error(APIError("NOT_FOUND", "Domain not found", status_code=404))

    console_display.error_console.print.assert_called_once()
    panel = console_display.error_console.print.call_args.args[0]
    assert isinstance(panel, Panel)
    assert "NOT_FOUND" in panel.title
    assert "HTTP 404" in panel.title


def test_display_api_error_with_fields_adds_table(console_display: ConsoleDisplay):
    error = APIError("INVALID_BODY", "bad", fields=[ErrorField(code="TOO_SMALL", message="ttl", path="ttl")])

    console_display.display_api_error(error)

    printed = [c.args[0] for c in console_display.error_console.print.call_args_list]
    assert isinstance(printed[0], Panel)
    assert isinstance(printed[1], Table)
    assert printed[1].row_count == 1


def test_display_error(console_display: ConsoleDisplay):
    console_display.display_error("boom")

    console_display.error_console.print.assert_called_once_with("[bold red]Error:[/bold red] boom")
