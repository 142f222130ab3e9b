"""Command-line interface for the recipe runner."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from reciperunner import __version__
from reciperunner.cli_commands import fail, get_recipe_book
from reciperunner.cli_commands.list_recipes import list_recipes
from reciperunner.cli_commands.run_recipes import run_recipes
from reciperunner.cli_commands.show_recipe import show_recipe
from reciperunner.cli_commands.show_tree import show_tree
from reciperunner.config import ConfigError, load_config
from reciperunner.console_logger import ConsoleLogger
from reciperunner.logging import LogLevel, parse_log_level
from reciperunner.process_runner import CommandOutput

app = typer.Typer(
    help="Recipe Runner - run named shell recipes with their dependencies",
    add_completion=False,
    no_args_is_help=False,
)
console = Console()
err_console = Console(stderr=True)


def echo_command(text: str) -> None:
    """Print a command line exactly as written, before it runs."""
    typer.secho(text, bold=True)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"recipe-runner version {__version__}")
        raise typer.Exit()


@app.command()
def run(
    recipes: Optional[List[str]] = typer.Argument(
        None, help="Recipes to run, in order. Without any, recipes are listed."
    ),
    list_: bool = typer.Option(False, "--list", "-l", help="List all recipes"),
    show: Optional[str] = typer.Option(None, "--show", help="Show a recipe definition"),
    tree: Optional[str] = typer.Option(None, "--tree", help="Show a recipe's dependency tree"),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Print the execution plan without running it"
    ),
    recipe_file: Optional[Path] = typer.Option(
        None, "--file", "-f", help="Recipe file to use instead of searching for one"
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-L",
        help="Diagnostic verbosity: fatal, error, warn, info, debug, trace",
    ),
    command_output: Optional[str] = typer.Option(
        None,
        "--command-output",
        "-O",
        help="Command output to show: all, out, err, none",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Run recipes, or list them when no recipe is named."""
    # Errors before the logger exists are always shown
    logger = ConsoleLogger(console, LogLevel.INFO, err_console=err_console)

    try:
        config = load_config()
    except ConfigError as e:
        fail(logger, escape(str(e)))

    try:
        level = parse_log_level(log_level or config.log_level or "info")
    except ValueError as e:
        fail(logger, escape(str(e)))
    logger.push_level(level)

    for source in config.sources:
        logger.debug(f"Loaded config {escape(str(source))}")

    output_name = (command_output or config.command_output or "all").lower()
    try:
        output = CommandOutput(output_name)
    except ValueError:
        valid = ", ".join(mode.value for mode in CommandOutput)
        fail(logger, f"Invalid command output '{escape(output_name)}', expected one of: {valid}")

    book = get_recipe_book(logger, recipe_file)

    if show is not None:
        show_recipe(logger, book, show)
    elif tree is not None:
        show_tree(logger, book, tree)
    elif list_ or not recipes:
        list_recipes(console, book)
    else:
        run_recipes(
            logger,
            book,
            list(recipes),
            config,
            echo_command,
            command_output=output,
            dry_run=dry_run,
        )


def main() -> None:
    app(prog_name="runner")


if __name__ == "__main__":
    main()
