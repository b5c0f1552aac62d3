import logging
import random
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from hermes._errors import HermesError, TemplateSyntaxError
from hermes._evaluator import evaluate, literal_value
from hermes._io import VariablesFileError, add_variables, export_variables_to_toml, load_variables_from_toml
from hermes._parser import parse_literal
from hermes._registry import DEFAULT_CAPACITY, Registry
from hermes._value import Text, Value

from .config import ConfigError, HermesConfig, get_config

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors); results go to stdout through typer.echo
err_console = Console(stderr=True)

VarOption = Annotated[
    list[str] | None,
    typer.Option("--var", help="Variable as NAME=VALUE (repeatable); VALUE is typed like a literal"),
]
VarsFileOption = Annotated[
    Path | None,
    typer.Option("--vars", help="Path to a variables TOML file (defaults to [tool.hermes].variables)"),
]
SeedOption = Annotated[
    int | None,
    typer.Option("--seed", help="Seed for the random built-ins (defaults to [tool.hermes].seed)"),
]


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Hermes template engine CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def parse_var_option(option: str) -> tuple[str, Value]:
    """Parse a ``NAME=VALUE`` command-line variable.

    The value is typed with the literal grammar: ``10`` is an integer, ``2.5``
    a float, ``true`` a boolean, ``"x"`` a string; anything else is text.
    """
    name, sep, raw = option.partition("=")
    name = name.strip()
    if not sep or not name:
        msg = f"Invalid variable '{option}'. Expected format: NAME=VALUE"
        raise typer.BadParameter(msg)

    literal = parse_literal(raw)
    if literal is None:
        return name, Text(raw)
    try:
        return name, literal_value(literal)
    except HermesError as e:
        msg = f"Invalid value for variable '{name}': {e}"
        raise typer.BadParameter(msg) from None


def _load_config() -> HermesConfig:
    try:
        return get_config()
    except ConfigError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None


def _build_registry(
    config: HermesConfig,
    var_options: list[str] | None,
    vars_file: Path | None,
    seed: int | None,
) -> Registry:
    """Build a registry from config, a variables file and ``--var`` options.

    Command-line variables are added after the file's, so the file wins on
    duplicate names (first match).
    """
    effective_seed = seed if seed is not None else config.seed
    rng = random.Random(effective_seed) if effective_seed is not None else None
    capacity = config.capacity if config.capacity is not None else DEFAULT_CAPACITY
    registry = Registry(capacity, rng=rng)

    effective_vars_file = vars_file if vars_file is not None else config.variables
    if effective_vars_file is not None:
        logger.debug(f"Loading variables from {effective_vars_file}")
        try:
            add_variables(registry, load_variables_from_toml(effective_vars_file))
        except VariablesFileError as e:
            err_console.print(f"[red]✗ {escape(str(e))}[/red]")
            raise typer.Exit(code=1) from None

    for option in var_options or []:
        name, value = parse_var_option(option)
        registry.add_variable(name, value)

    return registry


def _report_syntax_error(error: TemplateSyntaxError) -> None:
    err_console.print("[red]✗ Syntax error[/red]")
    err_console.print(escape(error.describe()), highlight=False)


@app.command()
def render(
    template: Annotated[str, typer.Argument(help="Template text, e.g. 'host-${hostname()}'")],
    *,
    var: VarOption = None,
    vars_file: VarsFileOption = None,
    seed: SeedOption = None,
) -> None:
    """Render a template and print the result."""
    registry = _build_registry(_load_config(), var, vars_file, seed)
    try:
        result = evaluate(template, registry)
    except TemplateSyntaxError as e:
        _report_syntax_error(e)
        raise typer.Exit(code=2) from None

    for index, error in result.errors:
        logger.debug(f"Item {index} rendered empty: {error}")

    typer.echo(result.render())


@app.command("eval")
def eval_command(
    template: Annotated[str, typer.Argument(help="Template text, e.g. 'host-${hostname()}'")],
    *,
    var: VarOption = None,
    vars_file: VarsFileOption = None,
    seed: SeedOption = None,
) -> None:
    """Evaluate a template and show the result of every item."""
    registry = _build_registry(_load_config(), var, vars_file, seed)
    try:
        result = evaluate(template, registry)
    except TemplateSyntaxError as e:
        _report_syntax_error(e)
        raise typer.Exit(code=2) from None

    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Kind")
    table.add_column("Value")

    for index, item in enumerate(result):
        if item.error is None:
            table.add_row(str(index), item.value.KIND, escape(str(item.value)))
        else:
            table.add_row(str(index), f"[red]{item.error.kind}[/red]", f"[red]{escape(item.error.message)}[/red]")

    err_console.print(Panel(table, title="[bold]Items[/bold]", border_style="cyan"))
    typer.echo(result.render())

    if not result.success:
        err_console.print(f"[red]✗ {len(result.errors)} item(s) failed[/red]")
        raise typer.Exit(code=1)


@app.command()
def functions() -> None:
    """List the built-in functions."""
    for entry in Registry(0).functions:
        typer.echo(entry.name)


@app.command()
def init(
    *,
    output: Annotated[
        Path,
        typer.Option("-o", "--output", help="Path to output TOML file"),
    ],
    var: VarOption = None,
) -> None:
    """Write a variables TOML file from --var options."""
    variables: dict[str, Value] = {}
    for option in var or []:
        name, value = parse_var_option(option)
        # First definition wins, as in the registry
        variables.setdefault(name, value)

    err_console.print(f"[cyan]Writing variables to:[/cyan] {output}")
    export_variables_to_toml(variables, output)
    err_console.print("[green]✓ Variables file written[/green]")


def main() -> None:
    app()
