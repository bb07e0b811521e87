"""Core CLI app definition and global state."""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

app = typer.Typer(
    name="fixtureforge",
    help="Manufacture fully populated test fixtures for Python types.",
    no_args_is_help=True,
)

console = Console()

# Global state (set by callback)
_config_path: Path | None = None


def get_config_path() -> Path | None:
    """Get explicitly set config file path, or None for the default location."""
    return _config_path


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Route library logging through rich."""
    level = logging.WARNING
    if verbose:
        level = logging.INFO
    if debug:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
        force=True,
    )
    logging.getLogger("fixtureforge").setLevel(level)


def _version_callback(value: bool) -> None:
    if value:
        from .. import __version__

        print(f"fixtureforge {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show info-level diagnostics"),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Show debug-level diagnostics"),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            help="Config file (defaults to ~/.config/fixtureforge/config.yaml)",
        ),
    ] = None,
):
    """fixtureforge: fully populated test fixtures for Python types.

    Use --verbose / --debug to see why attributes were left unset.
    Use --config to read settings from a specific YAML file.
    """
    global _config_path
    _config_path = config
    setup_logging(verbose=verbose, debug=debug)


# Import commands to register them with the app
from .commands import (  # noqa: E402, F401
    make,
    config_cmd,
)
