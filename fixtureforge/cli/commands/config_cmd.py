"""Config command for viewing and initializing fixtureforge configuration."""

from pathlib import Path

import typer
from rich.markup import escape

from ..app import app, console, get_config_path
from ..utils import ExitCode
from ...config import CONFIG_FILE, ENV_PREFIX, FixtureConfig


@app.command("config")
def config_command(
    action: str = typer.Argument(
        ...,
        help="Action: show, init",
    ),
    force: bool = typer.Option(
        False, "--force", help="Overwrite an existing config file (init)"
    ),
):
    """View or initialize fixtureforge configuration.

    Examples:
        fixtureforge config show
        fixtureforge --config ./fixtures.yaml config show
        fixtureforge config init
    """
    if action == "show":
        _show_config()
    elif action == "init":
        _init_config(force)
    else:
        console.print(f"[red]Unknown action:[/red] {action}")
        console.print("Valid actions: show, init")
        raise typer.Exit(ExitCode.MANUFACTURE_ERROR)


def _config_file() -> Path:
    return get_config_path() or CONFIG_FILE


def _show_config():
    """Display current resolved configuration."""
    try:
        config = FixtureConfig.load(get_config_path())
    except (FileNotFoundError, ValueError, TypeError) as e:
        console.print(f"[red]✗[/red] Invalid configuration: {escape(str(e))}")
        raise typer.Exit(ExitCode.MANUFACTURE_ERROR)

    console.print()
    console.print("[bold]fixtureforge Configuration[/bold]")
    console.print("─" * 40)

    console.print()
    console.print("[bold cyan]Manufacture[/bold cyan]")
    console.print(f"  element_count = {config.element_count}")
    console.print(f"  max_depth     = {config.max_depth}")
    console.print(f"  string_length = {config.string_length}")
    console.print(f"  memoize       = {config.memoize}")
    console.print(f"  seed          = {config.seed if config.seed is not None else '[dim](random)[/dim]'}")

    if config.element_counts or config.max_depths:
        console.print()
        console.print("[bold cyan]Per-type overrides[/bold cyan]")
        for name, value in sorted(config.element_counts.items()):
            console.print(f"  element_counts.{name} = {value}")
        for name, value in sorted(config.max_depths.items()):
            console.print(f"  max_depths.{name} = {value}")

    console.print()
    config_file = _config_file()
    if config_file.exists():
        console.print(f"Config file: {config_file}")
    else:
        console.print("[dim]No config file (using defaults)[/dim]")
    console.print(f"[dim]Environment overrides: {ENV_PREFIX}*[/dim]")


def _init_config(force: bool):
    """Write the default configuration to the config file."""
    config_file = _config_file()
    if config_file.exists() and not force:
        console.print(f"[yellow]⚠[/yellow] Config file already exists: {config_file}")
        console.print("  [dim]→ Use --force to overwrite[/dim]")
        raise typer.Exit(ExitCode.MANUFACTURE_ERROR)
    path = FixtureConfig().save(config_file)
    console.print(f"[green]✓[/green] Wrote default config to {path}")
