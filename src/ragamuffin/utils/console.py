"""Rich console output helpers shared by CLI commands."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

console = Console(highlight=False)
error_console = Console(stderr=True, highlight=False)


def print_error(message: str) -> None:
    """Print an error message to stderr in red."""
    error_console.print(f"[bold red]Error:[/bold red] [red]{escape(message)}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message in yellow."""
    console.print(f"[yellow]{escape(message)}[/yellow]")


def print_success(message: str) -> None:
    """Print a success message in green."""
    console.print(f"[green]{escape(message)}[/green]")


def print_info(message: str) -> None:
    console.print(escape(message))


def print_header(title: str) -> None:
    """Print a bold section header."""
    console.print(f"\n[bold cyan]{escape(title)}[/bold cyan]")


def print_panel(content: str, title: str | None = None, style: str = "cyan") -> None:
    console.print(Panel(content, title=title, border_style=style))
