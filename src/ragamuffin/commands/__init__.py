"""CLI command implementations - shared utilities.

Holds the per-invocation state set by the global options, the service
construction used by every command, and error/cancellation handling.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from functools import wraps
from pathlib import Path
from typing import Any, TypeVar

import typer
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TaskID, TextColumn

from ragamuffin.config import RagamuffinConfig, load_config
from ragamuffin.exceptions import RagamuffinError
from ragamuffin.service import RagamuffinService
from ragamuffin.utils import console, print_error, print_warning

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CliState:
    """Values of the global options, stored on the Typer context."""

    project_root: Path
    db_path: Path | None = None
    model: str | None = None
    debug: bool = False
    config: RagamuffinConfig = field(default_factory=RagamuffinConfig)

    def effective_config(self) -> RagamuffinConfig:
        """Loaded config with the --model override applied."""
        if not self.model:
            return self.config
        return replace(self.config, chat=self.config.chat.with_model_spec(self.model))


def get_state(ctx: typer.Context) -> CliState:
    """State from the root callback, or defaults when invoked directly."""
    state = ctx.find_object(CliState)
    if state is not None:
        return state
    project_root = Path.cwd()
    return CliState(project_root=project_root, config=load_config(project_root))


def get_service(state: CliState) -> RagamuffinService:
    """Build the service from project config plus global option overrides."""
    return RagamuffinService.from_config(state.effective_config(), state.project_root, db_path=state.db_path)


def warn_unavailable(service: RagamuffinService, include_chat: bool = False) -> None:
    """Print a warning per unreachable provider; the command still proceeds."""
    for reason in service.check_providers(include_chat=include_chat):
        print_warning(f"{reason}. Calls to it will fail until it is reachable.")


F = TypeVar("F", bound=Callable[..., Any])


def handle_errors(func: F) -> F:
    """Decorator mapping ragamuffin errors to a red message and exit code 1.

    Raises:
        typer.Exit: With code 1 on RagamuffinError or OSError.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except RagamuffinError as e:
            logger.debug(f"{type(e).__name__}: {e}", exc_info=True)
            print_error(str(e))
            raise typer.Exit(code=1) from e
        except OSError as e:
            logger.debug(f"{type(e).__name__}: {e}", exc_info=True)
            print_error(f"{e.strerror or e}: {e.filename}" if e.filename else str(e))
            raise typer.Exit(code=1) from e

    return wrapper  # type: ignore[return-value]


class EmbedProgress:
    """Rich progress bar fed by the sync engine's progress callback.

    Example:
        >>> with EmbedProgress("Embedding chunks") as bar:
        ...     service.update_vault(name, progress=bar.update)
    """

    def __init__(self, message: str):
        self.message = message
        self._progress: Progress | None = None
        self._task_id: TaskID | None = None

    def __enter__(self) -> "EmbedProgress":
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=console,
            transient=True,
        )
        self._progress.__enter__()
        self._task_id = self._progress.add_task(self.message, total=None)
        return self

    def __exit__(self, *args: Any) -> None:
        if self._progress:
            self._progress.__exit__(*args)

    def update(self, done: int, total: int) -> None:
        if self._progress and self._task_id is not None:
            self._progress.update(self._task_id, completed=done, total=total)


def run_cancellable(func: Callable[[threading.Event], T]) -> T:
    """Run func on a worker thread; Ctrl-C sets its cancel event.

    After Ctrl-C the in-flight embedding call finishes, already-embedded
    chunks stay committed and func returns normally with a cancelled result.
    """
    cancel_event = threading.Event()
    outcome: dict[str, Any] = {}

    def target() -> None:
        try:
            outcome["result"] = func(cancel_event)
        except BaseException as e:  # re-raised on the calling thread below
            outcome["error"] = e

    worker = threading.Thread(target=target, name="ragamuffin-sync", daemon=True)
    worker.start()
    try:
        while worker.is_alive():
            worker.join(0.1)
    except KeyboardInterrupt:
        cancel_event.set()
        print_warning("Cancelling: finishing the current embedding call...")
        worker.join()

    if "error" in outcome:
        raise outcome["error"]
    return outcome["result"]
