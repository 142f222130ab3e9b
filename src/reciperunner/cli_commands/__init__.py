"""CLI command implementations and shared utilities."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.markup import escape

from reciperunner.graph import validate_graph
from reciperunner.logging import Logger
from reciperunner.parser import (
    RECIPE_FILE_NAMES,
    RecipeBook,
    RecipeConfigurationError,
    find_recipe_file,
    parse_recipe_file,
)

# Exit status for problems with the recipe document or the request against it
EXIT_CONFIGURATION_ERROR = 2


def _supports_unicode() -> bool:
    """
    Check if the terminal supports Unicode characters.

    Returns:
        True if terminal supports UTF-8, False otherwise
    """
    # Hard stop: classic Windows console (conhost)
    if os.name == "nt" and "WT_SESSION" not in os.environ:
        return False

    encoding = sys.stdout.encoding
    if not encoding:
        return False

    try:
        "✓✗".encode(encoding)
        return True
    except UnicodeEncodeError:
        return False


def get_action_success_string() -> str:
    return "✓" if _supports_unicode() else "[ OK ]"


def get_action_failure_string() -> str:
    return "✗" if _supports_unicode() else "[ FAIL ]"


def fail(logger: Logger, message: str, exit_code: int = EXIT_CONFIGURATION_ERROR) -> NoReturn:
    """Log an error message and end the invocation with the given exit status."""
    logger.error(f"[red]{message}[/red]")
    raise typer.Exit(exit_code)


def get_recipe_book(logger: Logger, recipe_file: Optional[Path] = None) -> RecipeBook:
    """
    Locate, parse and validate the recipe document.

    Every configuration problem is reported here, before any recipe runs.

    Raises:
        typer.Exit: If no recipe file exists or the document is invalid
    """
    if recipe_file is not None:
        path = recipe_file
        if not path.is_file():
            fail(logger, f"Recipe file not found: {escape(str(path))}")
    else:
        path = find_recipe_file()
        if path is None:
            fail(
                logger,
                f"No recipe file found ({', '.join(RECIPE_FILE_NAMES)}) "
                "in this directory or any parent",
            )

    logger.debug(f"Using recipe file {escape(str(path))}")

    try:
        book = parse_recipe_file(path)
        validate_graph(book)
    except RecipeConfigurationError as e:
        fail(logger, f"Error in recipe file: {escape(str(e))}")

    return book
