"""Vault management commands: create, update, list, delete, status."""

from pathlib import Path

import typer

from ragamuffin.commands import (
    CliState,
    EmbedProgress,
    get_service,
    handle_errors,
    logger,
    run_cancellable,
    warn_unavailable,
)
from ragamuffin.exceptions import VaultNotFoundError
from ragamuffin.sync.engine import SyncResult
from ragamuffin.utils import console, print_header, print_info, print_success, print_warning


def _report_cancelled(result: SyncResult) -> None:
    if result.cancelled:
        print_warning("Sync was cancelled; run update to finish indexing.")


@handle_errors
def create_command(state: CliState, name: str, path: Path, yes: bool) -> None:
    """Create a vault and index its documents."""
    service = get_service(state)
    try:
        warn_unavailable(service)
        if not yes:
            provider = service.embedder.name
            confirmed = typer.confirm(
                f"Your files will be sent to {provider} to generate embeddings. Continue?",
                default=False,
            )
            if not confirmed:
                print_info("Aborted.")
                raise typer.Exit(code=0)

        with EmbedProgress(f"Indexing {name}") as bar:
            vault, result = run_cancellable(
                lambda cancel: service.create_vault(name, path, cancel_event=cancel, progress=bar.update)
            )
        print_success(f'Vault "{vault.name}" created: {result.added} chunks added')
        _report_cancelled(result)
    finally:
        service.close()


@handle_errors
def update_command(state: CliState, name: str) -> None:
    """Re-sync a vault with its root path."""
    service = get_service(state)
    try:
        warn_unavailable(service)
        with EmbedProgress(f"Updating {name}") as bar:
            result = run_cancellable(
                lambda cancel: service.update_vault(name, cancel_event=cancel, progress=bar.update)
            )
        print_success(f'Vault "{name}" updated: {result.added} added, {result.deleted} deleted')
        _report_cancelled(result)
    finally:
        service.close()


@handle_errors
def list_command(state: CliState, name: str | None) -> None:
    """List vaults, or show one vault's documents."""
    service = get_service(state)
    try:
        infos = service.list_vaults(name)
    finally:
        service.close()

    if not infos:
        print_info("No vaults." if name is None else f'No vault named "{name}".')
        return

    for info in infos:
        print_header(f"{info.vault.name}  ->  {info.vault.root_path}")
        print_info(f"   {info.chunk_count} chunks")
        if not info.files:
            console.print("   [dim](no documents)[/dim]")
        for file in info.files:
            print_info(f"   - {file}")


@handle_errors
def delete_command(state: CliState, name: str, yes: bool) -> None:
    """Delete a vault and all of its chunks."""
    service = get_service(state)
    try:
        if not service.store.vault_exists(name):
            raise VaultNotFoundError(name)

        if not yes:
            confirmed = typer.confirm(f'Delete vault "{name}" and all of its chunks?', default=False)
            if not confirmed:
                print_info("Aborted.")
                raise typer.Exit(code=0)

        removed = service.delete_vault(name)
        logger.debug(f"Removed {removed} chunks")
        print_success(f'Vault "{name}" deleted.')
    finally:
        service.close()


@handle_errors
def status_command(state: CliState, name: str) -> None:
    """Report whether a vault's documents changed since the last sync."""
    service = get_service(state)
    try:
        stale = service.is_stale(name)
    finally:
        service.close()

    if stale:
        print_warning(f'Vault "{name}" is out of date. Run: ragamuffin update {name}')
    else:
        print_success(f'Vault "{name}" is up to date.')
