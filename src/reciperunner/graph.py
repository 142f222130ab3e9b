"""Dependency resolution by depth-first traversal."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from reciperunner.parser import NAME_PATTERN, Recipe, RecipeBook, RecipeConfigurationError

__all__ = [
    "CycleError",
    "RecipeNotFoundError",
    "ImplicitInvocation",
    "build_dependency_tree",
    "find_implicit_invocations",
    "resolve_execution_order",
    "validate_graph",
]

# Body lines that call a runner for another recipe, e.g. ``just check``
_INVOCATION_RE = re.compile(rf"^\s*(?:just|runner)\s+(?P<name>{NAME_PATTERN})\s*$")

_VISITING = 1
_VISITED = 2


class CycleError(RecipeConfigurationError):
    """Raised when a dependency cycle is detected."""

    def __init__(self, cycle: list[str]):
        self.cycle = cycle
        super().__init__(f"Dependency cycle detected: {' -> '.join(cycle)}")


class RecipeNotFoundError(RecipeConfigurationError):
    """Raised when a recipe or one of its dependencies doesn't exist."""

    def __init__(self, name: str, dependent: str | None = None):
        self.name = name
        self.dependent = dependent
        if dependent is None:
            message = f"Recipe not found: {name}"
        else:
            message = f"Recipe not found: {name} (dependency of '{dependent}')"
        super().__init__(message)


class _Traversal:
    """Depth-first walk recording visiting/visited marks per recipe.

    The marks and the output order are shared between every target of one
    invocation, so a recipe reachable from several targets is emitted once.
    """

    def __init__(self, book: RecipeBook):
        self.book = book
        self.marks: dict[str, int] = {}
        self.order: list[Recipe] = []
        self.path: list[str] = []

    def visit(self, name: str, dependent: str | None = None) -> None:
        mark = self.marks.get(name)
        if mark == _VISITED:
            return
        if mark == _VISITING:
            start = self.path.index(name)
            raise CycleError(self.path[start:] + [name])

        recipe = self.book.get_recipe(name)
        if recipe is None:
            raise RecipeNotFoundError(name, dependent)

        self.marks[name] = _VISITING
        self.path.append(name)
        for dep in recipe.dependencies:
            self.visit(dep, dependent=name)
        self.path.pop()

        self.marks[name] = _VISITED
        self.order.append(recipe)


def resolve_execution_order(book: RecipeBook, targets: str | Iterable[str]) -> list[Recipe]:
    """Resolve execution order for one or more recipes and their dependencies.

    Args:
        book: Parsed recipe document
        targets: Recipe name, or names in the order they were requested

    Returns:
        Recipes in execution order; every recipe is preceded by all of its
        transitive dependencies and appears exactly once

    Raises:
        RecipeNotFoundError: If a target or any dependency doesn't exist
        CycleError: If a dependency cycle is reachable from a target
    """
    if isinstance(targets, str):
        targets = [targets]

    traversal = _Traversal(book)
    for name in targets:
        traversal.visit(name)
    return traversal.order


def validate_graph(book: RecipeBook) -> None:
    """Check that every dependency exists and the whole document is acyclic.

    Raises:
        RecipeNotFoundError: If a declared dependency doesn't exist
        CycleError: If the dependency relation contains a cycle
    """
    resolve_execution_order(book, book.recipe_names())


def build_dependency_tree(book: RecipeBook, target: str) -> dict:
    """Build a tree structure representing dependencies for visualization.

    Shared dependencies appear under every dependent, unlike the execution
    order where they are collapsed.

    Returns:
        Nested dictionary ``{"name": ..., "deps": [...]}``
    """
    if book.get_recipe(target) is None:
        raise RecipeNotFoundError(target)

    visiting: set[str] = set()

    def build_tree(name: str, dependent: str | None) -> dict:
        recipe = book.get_recipe(name)
        if recipe is None:
            raise RecipeNotFoundError(name, dependent)

        # Prevent infinite recursion on cycles
        if name in visiting:
            return {"name": name, "deps": [], "cycle": True}

        visiting.add(name)
        tree = {
            "name": name,
            "deps": [build_tree(dep, name) for dep in recipe.dependencies],
        }
        visiting.remove(name)
        return tree

    return build_tree(target, None)


@dataclass(frozen=True)
class ImplicitInvocation:
    """A body line that runs another recipe of the same document through the runner."""

    recipe: str
    invoked: str
    line_number: int


def find_implicit_invocations(book: RecipeBook) -> list[ImplicitInvocation]:
    """Find leading body lines that invoke other recipes instead of declaring them.

    Only the run of invocation lines at the start of a body is considered,
    since that is where the convention places dependency calls. The lines are
    still executed as ordinary commands.
    """
    found = []
    for recipe in book.recipes.values():
        for line in recipe.body:
            match = _INVOCATION_RE.match(line.text)
            if match is None:
                break
            invoked = match.group("name")
            if book.get_recipe(invoked) is None:
                break
            found.append(ImplicitInvocation(recipe.name, invoked, line.line_number))
    return found
