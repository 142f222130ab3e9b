"""Recipe Runner - run named shell recipes with their dependencies."""

__version__ = "0.1.0"

from reciperunner.executor import ExecutionError, Executor, SignaledError
from reciperunner.graph import (
    CycleError,
    RecipeNotFoundError,
    build_dependency_tree,
    find_implicit_invocations,
    resolve_execution_order,
    validate_graph,
)
from reciperunner.parser import (
    CommandLine,
    Echo,
    ParseError,
    Recipe,
    RecipeBook,
    RecipeConfigurationError,
    find_recipe_file,
    parse_document,
    parse_recipe_file,
)

__all__ = [
    "__version__",
    "Executor",
    "ExecutionError",
    "SignaledError",
    "CycleError",
    "RecipeNotFoundError",
    "build_dependency_tree",
    "find_implicit_invocations",
    "resolve_execution_order",
    "validate_graph",
    "CommandLine",
    "Echo",
    "ParseError",
    "Recipe",
    "RecipeBook",
    "RecipeConfigurationError",
    "find_recipe_file",
    "parse_document",
    "parse_recipe_file",
]
