"""Make command: manufacture an instance of a type and print it."""

import logging

import typer
from rich.markup import escape
from rich.pretty import Pretty

from ..app import app, console, get_config_path
from ..utils import ExitCode, TargetImportError, load_target, to_plain
from ...config import FixtureConfig
from ...manufacture import FixtureFactory, ManufactureError

logger = logging.getLogger(__name__)


@app.command("make")
def make_command(
    target: str = typer.Argument(
        ...,
        help="Type to manufacture, as module:QualName (e.g. myapp.models:Order)",
    ),
    type_args: list[str] = typer.Option(
        [],
        "--arg",
        "-a",
        help="Generic type argument as module:Name or a builtin name (repeatable)",
    ),
    seed: int | None = typer.Option(None, "--seed", help="Random seed"),
    count: int | None = typer.Option(
        None, "--count", "-n", min=0, help="Elements per container"
    ),
    max_depth: int | None = typer.Option(
        None, "--max-depth", min=0, help="How often a type may nest in itself"
    ),
    memoize: bool = typer.Option(
        False, "--memoize", help="Reuse one instance per type"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Print the instance as JSON"
    ),
):
    """Manufacture a fully populated instance and print it.

    Examples:
        fixtureforge make myapp.models:Order
        fixtureforge make myapp.models:Page --arg myapp.models:Order --count 2
        fixtureforge make myapp.models:Node --max-depth 3 --seed 7 --json
    """
    try:
        cls = load_target(target)
        args = [load_target(a) for a in type_args]
    except TargetImportError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(ExitCode.NOT_IMPORTABLE)

    try:
        config = FixtureConfig.load(get_config_path())
    except (FileNotFoundError, ValueError, TypeError) as e:
        console.print(f"[red]✗[/red] Invalid configuration: {escape(str(e))}")
        raise typer.Exit(ExitCode.MANUFACTURE_ERROR)

    changes = {
        "seed": seed,
        "element_count": count,
        "max_depth": max_depth,
        "memoize": memoize or None,
    }
    config = config.replace(**{k: v for k, v in changes.items() if v is not None})
    logger.debug("Using config %s", config.to_dict())

    try:
        instance = FixtureFactory(config=config).manufacture(cls, *args)
    except ManufactureError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(ExitCode.MANUFACTURE_ERROR)

    data = to_plain(instance)
    if json_output:
        console.print_json(data=data, default=str)
        return

    console.print(f"[green]✓[/green] Manufactured {target}")
    console.print(Pretty(data))
