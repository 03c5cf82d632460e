"""Initialize command for writing a project config file."""

from ragamuffin.commands import CliState, handle_errors
from ragamuffin.config import config_path, save_config
from ragamuffin.exceptions import ConfigurationError
from ragamuffin.utils import print_info, print_success


@handle_errors
def init_command(state: CliState, force: bool) -> None:
    """Write the effective configuration to .ragamuffin/config.yaml.

    The file captures the currently loaded settings, with ``--model``
    applied, so it can be edited by hand afterwards.

    Raises:
        ConfigurationError: If the file exists and force is not set.
    """
    target = config_path(state.project_root)
    if target.exists() and not force:
        raise ConfigurationError(
            f"Config already exists at {target}. Use --force to overwrite.",
            config_file=target,
        )

    config = state.effective_config()

    written = save_config(state.project_root, config)
    print_success(f"Wrote config to {written}")
    print_info(f"Chat: {config.chat.provider}:{config.chat.model}")
    print_info(f"Embeddings: {config.embedding.provider}:{config.embedding.model}")
