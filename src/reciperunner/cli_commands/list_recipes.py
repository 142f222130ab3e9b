from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text

from reciperunner.parser import RecipeBook


def list_recipes(console: Console, book: RecipeBook) -> None:
    """
    List every recipe with its doc string, in declaration order.

    The listing is the command's output rather than a diagnostic, so it is
    printed whatever the log level.
    """
    if not book.recipes:
        console.print("No recipes defined")
        return

    names = book.recipe_names()
    max_name_len = max(len(name) for name in names)

    # Borderless two-column table: name, then doc string
    table = Table(show_edge=False, show_header=False, box=None, padding=(0, 2))
    table.add_column("Recipe", style="bold cyan", no_wrap=True, width=max_name_len)
    table.add_column("Description", style="white", max_width=80)

    for name in names:
        recipe = book.recipes[name]
        # Text keeps brackets and :emoji: codes as written
        table.add_row(Text(name), Text(recipe.doc))

    console.print("Available recipes:")
    console.print(table)
