"""Run recipes command implementation."""

from __future__ import annotations

from rich.markup import escape

from reciperunner.cli_commands import (
    fail,
    get_action_failure_string,
    get_action_success_string,
)
from reciperunner.config import RunnerConfig
from reciperunner.executor import ExecutionError, Executor, SignaledError
from reciperunner.graph import find_implicit_invocations
from reciperunner.logging import Logger, LoggerFn
from reciperunner.parser import Recipe, RecipeBook, RecipeConfigurationError
from reciperunner.process_runner import CommandOutput, make_process_runner


def run_recipes(
    logger: Logger,
    book: RecipeBook,
    names: list[str],
    config: RunnerConfig,
    echo_fn: LoggerFn,
    command_output: CommandOutput = CommandOutput.ALL,
    dry_run: bool = False,
) -> None:
    """
    Run the named recipes and their dependencies, or show the plan for them.

    Args:
        logger: Logger interface for diagnostics
        book: Parsed and validated recipe document
        names: Recipes requested on the command line, in order
        config: Effective configuration (shell)
        echo_fn: Output function for echoed command lines
        command_output: Which subprocess streams to show
        dry_run: Print the execution plan instead of running it

    Raises:
        typer.Exit: With the configuration error status, the failing
            command's status, or 128 + signal number
    """
    executor = Executor(
        book,
        logger,
        make_process_runner(command_output, logger),
        echo_fn,
        shell=config.shell,
    )

    try:
        order = executor.plan(names)
    except RecipeConfigurationError as e:
        fail(logger, escape(str(e)))

    _warn_implicit_invocations(logger, book, order)

    if dry_run:
        _print_plan(logger, names, order)
        return

    try:
        executor.execute(names)
    except (ExecutionError, SignaledError) as e:
        fail(logger, f"{get_action_failure_string()} {escape(str(e))}", e.exit_code)

    logger.debug(
        f"[green]{get_action_success_string()} {escape(', '.join(names))} completed successfully[/green]"
    )


def _warn_implicit_invocations(logger: Logger, book: RecipeBook, order: list[Recipe]) -> None:
    """Point out runner self-invocations that should be declared dependencies."""
    running = {recipe.name for recipe in order}
    for found in find_implicit_invocations(book):
        if found.recipe in running:
            logger.warn(
                f"[yellow]Recipe '{found.recipe}' runs '{found.invoked}' on line "
                f"{found.line_number} in a nested runner; declare it as a "
                f"dependency instead ({found.recipe}: {found.invoked})[/yellow]"
            )


def _print_plan(logger: Logger, names: list[str], order: list[Recipe]) -> None:
    logger.info(f"[bold]Execution plan for {escape(', '.join(names))}:[/bold]")
    for i, recipe in enumerate(order, 1):
        logger.info(f"  {i}. [cyan]{escape(recipe.name)}[/cyan]")
        if not recipe.body:
            logger.info("       [dim](no commands)[/dim]")
        for line in recipe.body:
            logger.info(f"       {escape(line.text)}")
