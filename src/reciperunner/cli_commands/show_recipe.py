from __future__ import annotations

from rich.markup import escape
from rich.syntax import Syntax

from reciperunner.cli_commands import fail
from reciperunner.logging import Logger
from reciperunner.parser import QUIET_MARKER, Echo, Recipe, RecipeBook


def format_recipe(recipe: Recipe) -> str:
    """
    Render a recipe back into document form.

    The doc string is written as a single comment line and a quiet recipe
    uses the ``@`` header marker, so the output may differ textually from
    the original definition while parsing to an equal recipe.
    """
    lines = []
    if recipe.doc:
        lines.append(f"# {recipe.doc}")

    header = f"{QUIET_MARKER if recipe.quiet else ''}{recipe.name}:"
    if recipe.dependencies:
        header += " " + " ".join(recipe.dependencies)
    lines.append(header)

    for line in recipe.body:
        # Silence inherited from a quiet recipe needs no per-line marker
        marker = QUIET_MARKER if line.echo is Echo.SILENT and not recipe.quiet else ""
        lines.append(f"    {marker}{line.text}")

    return "\n".join(lines) + "\n"


def show_recipe(logger: Logger, book: RecipeBook, name: str) -> None:
    """
    Show a recipe definition with syntax highlighting.
    """
    recipe = book.get_recipe(name)
    if recipe is None:
        fail(logger, f"Recipe not found: {escape(name)}")

    logger.info(f"[bold]Recipe: {escape(name)}[/bold]")
    logger.info(f"Source: {escape(book.source)}:{recipe.line_number}\n")

    syntax = Syntax(format_recipe(recipe), "make", theme="ansi_light", line_numbers=False)
    logger.info(syntax)
