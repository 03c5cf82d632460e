"""Main CLI entry point for ragamuffin."""

from pathlib import Path

import typer
from dotenv import load_dotenv

from ragamuffin import __version__
from ragamuffin.commands import CliState, get_state
from ragamuffin.commands.chat_cmd import chat_command
from ragamuffin.commands.init_cmd import init_command
from ragamuffin.commands.vault_cmd import (
    create_command,
    delete_command,
    list_command,
    status_command,
    update_command,
)
from ragamuffin.config import load_config
from ragamuffin.constants import LOG_LEVEL_DEBUG
from ragamuffin.logging_config import configure_logging
from ragamuffin.utils import print_panel

# Load .env file from current directory if it exists (API keys)
load_dotenv(Path.cwd() / ".env", verbose=False)

app = typer.Typer(
    name="ragamuffin",
    help="Chat with your local documents through retrieval-augmented generation.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        print_panel(f"[bold cyan]ragamuffin[/bold cyan] version [green]{__version__}[/green]", title="Version")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    db: Path | None = typer.Option(
        None,
        "--db",
        help="SQLite database file (default: .ragamuffin/ragamuffin.db)",
        envvar="RAGAMUFFIN_DB_PATH",
    ),
    model: str | None = typer.Option(
        None,
        "--model",
        "-m",
        help="Chat model as provider[:model], e.g. openai or ollama:llama3.1",
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    log_file: Path | None = typer.Option(
        None,
        "--log-file",
        help="Write logs to this file instead of stderr",
        envvar="RAGAMUFFIN_LOG_FILE",
    ),
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version information",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """ragamuffin - index a folder of documents and chat with it.

    Get started:
        ragamuffin create notes ~/notes   # Index a folder
        ragamuffin chat notes             # Ask questions about it
    """
    project_root = Path.cwd()
    config = load_config(project_root)
    configure_logging(
        LOG_LEVEL_DEBUG if debug else config.get_effective_log_level(),
        log_file=log_file or config.get_log_file(project_root),
    )
    ctx.obj = CliState(project_root=project_root, db_path=db, model=model, debug=debug, config=config)


@app.command("init")
def init(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config file"),
) -> None:
    """Write .ragamuffin/config.yaml with the current settings."""
    init_command(get_state(ctx), force)


@app.command("create")
def create(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Unique vault name"),
    path: Path = typer.Argument(..., help="File or directory of documents"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
) -> None:
    """Create a new vault from files in a directory."""
    create_command(get_state(ctx), name, path, yes)


@app.command("update")
def update(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Vault to re-sync"),
) -> None:
    """Re-sync a vault: embed new content and drop vanished content."""
    update_command(get_state(ctx), name)


@app.command("chat")
def chat(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Vault to chat with"),
) -> None:
    """Start an interactive chat session with a vault."""
    chat_command(get_state(ctx), name)


@app.command("list")
def list_vaults(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Show only this vault"),
) -> None:
    """List vaults or show details for a specific vault."""
    list_command(get_state(ctx), name)


@app.command("delete")
def delete(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Vault to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
) -> None:
    """Delete a vault and all of its chunks."""
    delete_command(get_state(ctx), name, yes)


@app.command("status")
def status(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Vault to check"),
) -> None:
    """Check whether a vault is out of date with its files."""
    status_command(get_state(ctx), name)


if __name__ == "__main__":
    app()
