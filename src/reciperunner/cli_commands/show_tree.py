from __future__ import annotations

from rich.markup import escape
from rich.tree import Tree

from reciperunner.cli_commands import fail
from reciperunner.graph import RecipeNotFoundError, build_dependency_tree
from reciperunner.logging import Logger
from reciperunner.parser import RecipeBook


def show_tree(logger: Logger, book: RecipeBook, name: str) -> None:
    """
    Show dependency tree structure.
    """
    try:
        dep_tree = build_dependency_tree(book, name)
    except RecipeNotFoundError as e:
        fail(logger, escape(str(e)))

    logger.info(_build_rich_tree(dep_tree))


def _build_rich_tree(dep_tree: dict) -> Tree:
    """
    Build a Rich Tree visualization from a dependency tree structure.

    Args:
        dep_tree: Nested dictionary representing recipe dependencies

    Returns:
        Rich Tree object for terminal display
    """
    label = escape(dep_tree["name"])
    if dep_tree.get("cycle"):
        label += " [red](cycle)[/red]"
    tree = Tree(label)

    for dep in dep_tree.get("deps", []):
        tree.add(_build_rich_tree(dep))

    return tree
