"""ragamuffin: local retrieval-augmented chat over your markdown vaults."""

import tomllib
from importlib.metadata import PackageNotFoundError
from pathlib import Path

try:
    # Prefer pyproject.toml during development (editable installs)
    pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
    with open(pyproject_path, "rb") as f:
        data = tomllib.load(f)
    __version__ = data["project"]["version"]
except (OSError, KeyError, tomllib.TOMLDecodeError):
    try:
        from importlib.metadata import version

        __version__ = version("ragamuffin")
    except PackageNotFoundError:
        __version__ = "0.0.0-dev"
