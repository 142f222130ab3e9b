"""Recipe execution."""

from __future__ import annotations

import os
import signal
from typing import Iterable, Optional

from rich.markup import escape

from reciperunner.config import default_shell
from reciperunner.graph import CycleError, resolve_execution_order
from reciperunner.logging import Logger, LoggerFn
from reciperunner.parser import CommandLine, Echo, Recipe, RecipeBook
from reciperunner.process_runner import ProcessRunner

__all__ = [
    "CALL_CHAIN_ENV_VAR",
    "ExecutionError",
    "Executor",
    "SignaledError",
]

# Recipes currently running in enclosing runner processes
CALL_CHAIN_ENV_VAR = "RECIPE_RUNNER_CALL_CHAIN"


class ExecutionError(Exception):
    """Raised when a command line exits with a non-zero status."""

    def __init__(self, recipe_name: str, exit_code: int, line: Optional[CommandLine] = None):
        self.recipe_name = recipe_name
        self.exit_code = exit_code
        self.line = line
        where = f" on line {line.line_number}" if line is not None and line.line_number else ""
        super().__init__(
            f"Recipe '{recipe_name}' failed{where} with exit code {exit_code}"
        )


class SignaledError(Exception):
    """Raised when a command is interrupted or killed by a signal."""

    def __init__(self, recipe_name: str, signal_number: int, line: Optional[CommandLine] = None):
        self.recipe_name = recipe_name
        self.signal_number = signal_number
        self.line = line
        try:
            signal_name = signal.Signals(signal_number).name
        except ValueError:
            signal_name = f"signal {signal_number}"
        super().__init__(f"Recipe '{recipe_name}' was interrupted by {signal_name}")

    @property
    def exit_code(self) -> int:
        return 128 + self.signal_number


class Executor:
    """Runs recipes and their dependencies, one command line at a time."""

    def __init__(
        self,
        book: RecipeBook,
        logger: Logger,
        process_runner: ProcessRunner,
        echo_fn: LoggerFn,
        shell: Optional[list[str]] = None,
        call_chain: Optional[str] = None,
    ):
        """Initialize executor.

        Args:
            book: Parsed recipe document
            logger: Logger for diagnostic output
            process_runner: Runner used to spawn each command line
            echo_fn: Output function receiving each echoed command line
            shell: Shell executable plus arguments; the command line is appended
            call_chain: Inherited call chain (defaults to the environment)
        """
        self.book = book
        self.logger = logger
        self.process_runner = process_runner
        self.echo_fn = echo_fn
        self.shell = list(shell) if shell else default_shell()
        if call_chain is None:
            call_chain = os.environ.get(CALL_CHAIN_ENV_VAR, "")
        self.call_chain = [entry for entry in call_chain.split(os.pathsep) if entry]

    def _make_call_chain_entry(self, recipe_name: str) -> str:
        source = self.book.source_path
        location = str(source.resolve()) if source is not None else self.book.source
        return f"{recipe_name}@{location}"

    def check_recursion(self, targets: Iterable[str]) -> None:
        """Reject targets already running in an enclosing runner process.

        Raises:
            CycleError: If a target is on the inherited call chain
        """
        for name in targets:
            entry = self._make_call_chain_entry(name)
            if entry in self.call_chain:
                start = self.call_chain.index(entry)
                cycle = [e.split("@", 1)[0] for e in self.call_chain[start:]] + [name]
                raise CycleError(cycle)

    def plan(self, targets: str | list[str]) -> list[Recipe]:
        """Resolve the recipes an invocation would run, without running anything.

        Raises:
            RecipeNotFoundError: If a target or dependency doesn't exist
            CycleError: If the dependencies form a cycle or a target is
                already running in an enclosing runner process
        """
        if isinstance(targets, str):
            targets = [targets]
        self.check_recursion(targets)
        return resolve_execution_order(self.book, targets)

    def execute(self, targets: str | list[str]) -> list[Recipe]:
        """Execute recipes and their dependencies.

        Dependencies run before dependents and each recipe runs at most once.
        The first failing command stops the whole invocation.

        Returns:
            The recipes that ran, in order

        Raises:
            RecipeNotFoundError, CycleError: Before anything has run
            ExecutionError: If a command exits with a non-zero status
            SignaledError: If a command is interrupted by a signal
        """
        order = self.plan(targets)
        self.logger.debug(
            f"Execution order: {', '.join(recipe.name for recipe in order)}"
        )

        for recipe in order:
            self.run_recipe(recipe)

        return order

    def run_recipe(self, recipe: Recipe) -> None:
        """Run a single recipe's own body, without its dependencies.

        Raises:
            ExecutionError: If a command exits with a non-zero status
            SignaledError: If a command is interrupted by a signal
        """
        self.logger.debug(f"Running recipe '{recipe.name}'")

        env = dict(os.environ)
        env[CALL_CHAIN_ENV_VAR] = os.pathsep.join(
            self.call_chain + [self._make_call_chain_entry(recipe.name)]
        )

        line = None
        try:
            for line in recipe.body:
                self._run_line(recipe, line, env)
        except KeyboardInterrupt:
            # Ctrl-C anywhere in the body, not only inside a running command
            raise SignaledError(recipe.name, signal.SIGINT, line) from None

    def _run_line(self, recipe: Recipe, line: CommandLine, env: dict[str, str]) -> None:
        if line.echo is Echo.LOUD:
            self.echo_fn(line.text)

        self.logger.trace(
            f"[dim]{escape(recipe.name)}:{line.line_number}: {escape(' '.join(self.shell))}[/dim]"
        )

        try:
            result = self.process_runner.run(
                [*self.shell, line.text],
                env=env,
                check=False,
            )
        except OSError as e:
            # Shell itself could not be started
            self.logger.debug(f"Cannot run shell '{escape(self.shell[0])}': {escape(str(e))}")
            raise ExecutionError(recipe.name, 127, line) from e

        if result.returncode < 0:
            raise SignaledError(recipe.name, -result.returncode, line)
        if result.returncode != 0:
            raise ExecutionError(recipe.name, result.returncode, line)
