"""Interactive chat command."""

from rich.markup import escape

from ragamuffin.commands import CliState, get_service, handle_errors, logger, warn_unavailable
from ragamuffin.constants import (
    CHAT_COMMAND_DEBUG,
    CHAT_COMMAND_EXIT,
    CHAT_COMMAND_HELP,
    CHAT_COMMAND_QUIT,
    LOG_LEVEL_DEBUG,
    LOG_LEVEL_WARNING,
)
from ragamuffin.exceptions import ProviderError, ToolCallError
from ragamuffin.logging_config import is_debug_enabled, set_log_level
from ragamuffin.utils import console, print_error, print_info, print_warning

CHAT_HELP = (
    "Available commands:\n"
    f"    {CHAT_COMMAND_HELP}   - Show this help message\n"
    f"    {CHAT_COMMAND_EXIT}   - End the chat session\n"
    f"    {CHAT_COMMAND_QUIT}   - End the chat session\n"
    f"    {CHAT_COMMAND_DEBUG}  - Toggle debug logging"
)


def _toggle_debug(default_level: str) -> None:
    if is_debug_enabled():
        set_log_level(default_level)
        print_info("Debug logging off.")
    else:
        set_log_level(LOG_LEVEL_DEBUG)
        print_info("Debug logging on.")


@handle_errors
def chat_command(state: CliState, name: str) -> None:
    """Run the interactive chat loop against one vault."""
    service = get_service(state)
    try:
        session = service.open_chat(name)
        warn_unavailable(service, include_chat=True)
        if service.is_stale(name):
            print_warning(f'Vault "{name}" may be out of date. Run: ragamuffin update {name}')

        default_level = service.config.get_effective_log_level()
        if default_level == LOG_LEVEL_DEBUG:
            default_level = LOG_LEVEL_WARNING

        print_info(f"Chat started with {session.orchestrator.provider.name}.")
        print_info(CHAT_HELP)

        while True:
            try:
                question = console.input("\n[bold]>[/bold] ").strip()
            except EOFError:
                print_info("")
                break
            if not question:
                continue

            if question.startswith("/"):
                command = question.lower()
                if command in (CHAT_COMMAND_EXIT, CHAT_COMMAND_QUIT):
                    break
                if command == CHAT_COMMAND_HELP:
                    print_info(CHAT_HELP)
                elif command == CHAT_COMMAND_DEBUG:
                    _toggle_debug(default_level)
                else:
                    print_error(f"Unknown command: {command} (type {CHAT_COMMAND_HELP})")
                continue

            logger.debug(f"Sending query: {question}")
            try:
                answer = session.ask(question)
            except (ProviderError, ToolCallError) as e:
                # The turn failed but the session survives; the user can retry
                print_error(str(e))
                continue
            console.print(f"\n[bold green]ragamuffin:[/bold green] {escape(answer)}")

        print_info("Goodbye!")
    finally:
        service.close()
