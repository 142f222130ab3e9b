"""Parse recipe files into immutable recipe records."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

__all__ = [
    "RECIPE_FILE_NAMES",
    "Echo",
    "CommandLine",
    "Recipe",
    "RecipeBook",
    "RecipeConfigurationError",
    "ParseError",
    "find_recipe_file",
    "parse_document",
    "parse_recipe_file",
]

RECIPE_FILE_NAMES = ("justfile", "Justfile", ".justfile")

NAME_PATTERN = r"[A-Za-z_][A-Za-z0-9_-]*"

_NAME_RE = re.compile(rf"^{NAME_PATTERN}$")
_HEADER_RE = re.compile(rf"^(?P<prefix>[^\w\s#\[]*)(?P<name>{NAME_PATTERN})\s*:(?P<rest>.*)$")
_ATTRIBUTE_LINE_RE = re.compile(r"^\[(?P<body>.*)\]$")
_ATTRIBUTE_RE = re.compile(
    r"""\s*(?P<name>[A-Za-z_][A-Za-z0-9_-]*)\s*(?:\(\s*(?P<quote>["'])(?P<arg>.*?)(?P=quote)\s*\))?\s*(?:,|$)"""
)

QUIET_MARKER = "@"


class RecipeConfigurationError(Exception):
    """Base class for errors in the recipe document or the request made against it."""

    pass


class ParseError(RecipeConfigurationError):
    """Raised when a recipe document is malformed."""

    def __init__(self, message: str, line_number: int | None = None, source: str = "<string>"):
        self.message = message
        self.line_number = line_number
        self.source = source
        location = source if line_number is None else f"{source}:{line_number}"
        super().__init__(f"{location}: {message}")


class Echo(enum.Enum):
    """Whether a command line is printed before it runs."""

    LOUD = "loud"
    SILENT = "silent"


@dataclass(frozen=True)
class CommandLine:
    """A single opaque shell command from a recipe body."""

    text: str
    echo: Echo = Echo.LOUD
    line_number: int = 0


@dataclass(frozen=True)
class Recipe:
    """Represents a recipe definition."""

    name: str
    doc: str = ""
    quiet: bool = False
    dependencies: tuple[str, ...] = ()
    body: tuple[CommandLine, ...] = ()
    line_number: int = 0

    def __post_init__(self):
        # Allow lists in constructors while keeping the record hashable and immutable
        object.__setattr__(self, "dependencies", tuple(self.dependencies))
        object.__setattr__(self, "body", tuple(self.body))


@dataclass(frozen=True)
class RecipeBook:
    """A parsed recipe document: every recipe, keyed by name in declaration order."""

    recipes: Mapping[str, Recipe]
    source_path: Path | None = None

    def __post_init__(self):
        object.__setattr__(self, "recipes", MappingProxyType(dict(self.recipes)))

    @classmethod
    def from_recipes(cls, recipes: list[Recipe], source_path: Path | None = None) -> "RecipeBook":
        return cls(recipes={r.name: r for r in recipes}, source_path=source_path)

    def get_recipe(self, name: str) -> Recipe | None:
        return self.recipes.get(name)

    def recipe_names(self) -> list[str]:
        """Get all recipe names in declaration order."""
        return list(self.recipes.keys())

    @property
    def source(self) -> str:
        return str(self.source_path) if self.source_path is not None else "<string>"


def find_recipe_file(start_dir: Path | None = None) -> Path | None:
    """Find a recipe file in the current or parent directories.

    Args:
        start_dir: Directory to start searching from (defaults to cwd)

    Returns:
        Path to recipe file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        for filename in RECIPE_FILE_NAMES:
            recipe_path = current / filename
            if recipe_path.is_file():
                return recipe_path

        parent = current.parent
        if parent == current:
            # Reached root
            break
        current = parent

    return None


def parse_recipe_file(path: Path) -> RecipeBook:
    """Read and parse a recipe file.

    Raises:
        ParseError: If the file cannot be read or is malformed
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"cannot read recipe file: {e}", source=str(path)) from e

    return parse_document(text, source_path=path)


@dataclass
class _RecipeBuilder:
    name: str
    line_number: int
    doc: str
    quiet: bool
    dependencies: list[str]
    body: list[CommandLine] = field(default_factory=list)
    indent: str | None = None

    def build(self) -> Recipe:
        return Recipe(
            name=self.name,
            doc=self.doc,
            quiet=self.quiet,
            dependencies=tuple(self.dependencies),
            body=tuple(self.body),
            line_number=self.line_number,
        )


class _DocumentParser:
    """Line scanner turning a recipe document into Recipe records.

    A recipe starts at an unindented ``[@]name: [deps...]`` header, optionally
    preceded by a contiguous block of ``#`` comments (its doc string) and
    ``[attribute]`` lines. Its body is the indented lines that follow, up to
    the next blank or unindented line.
    """

    def __init__(self, source: str):
        self.source = source
        self.recipes: dict[str, Recipe] = {}
        self.comments: list[str] = []
        self.attributes: dict[str, str | None] = {}
        self.attribute_line: int | None = None
        self.current: _RecipeBuilder | None = None

    def error(self, message: str, line_number: int | None) -> ParseError:
        return ParseError(message, line_number, self.source)

    def parse(self, text: str) -> list[Recipe]:
        if text.startswith("\ufeff"):
            text = text[1:]

        for line_number, raw in enumerate(text.splitlines(), start=1):
            line = raw.rstrip()

            if not line:
                self._finish_recipe()
                self._end_preamble()
            elif line[0] in " \t":
                self._body_line(line, line_number)
            else:
                self._finish_recipe()
                if line.startswith("#"):
                    self._comment_line(line)
                elif line.startswith("["):
                    self._attribute_line(line, line_number)
                else:
                    self._header_line(line, line_number)

        self._finish_recipe()
        self._end_preamble()
        return list(self.recipes.values())

    def _end_preamble(self) -> None:
        if self.attributes:
            raise self.error(
                "attribute is not followed by a recipe header", self.attribute_line
            )
        self.comments = []

    def _comment_line(self, line: str) -> None:
        text = line.lstrip("#").strip()
        if text:
            self.comments.append(text)

    def _attribute_line(self, line: str, line_number: int) -> None:
        match = _ATTRIBUTE_LINE_RE.match(line)
        if match is None:
            raise self.error(f"malformed attribute line: {line}", line_number)

        if not self.attributes:
            self.attribute_line = line_number

        body = match.group("body")
        pos = 0
        while pos < len(body) or pos == 0:
            attr = _ATTRIBUTE_RE.match(body, pos)
            if attr is None or attr.end() == pos:
                raise self.error(f"malformed attribute line: {line}", line_number)
            pos = attr.end()

            name, arg = attr.group("name"), attr.group("arg")
            known = (name == "quiet" and arg is None) or (name == "doc" and arg is not None)
            if not known:
                raise self.error(f"unknown attribute: {attr.group(0).strip(' ,')}", line_number)
            if name in self.attributes:
                raise self.error(f"duplicate attribute: {name}", line_number)
            self.attributes[name] = arg

    def _header_line(self, line: str, line_number: int) -> None:
        match = _HEADER_RE.match(line)
        if match is None:
            raise self.error(f"malformed recipe header: {line}", line_number)

        prefix, name, rest = match.group("prefix", "name", "rest")
        if prefix not in ("", QUIET_MARKER):
            raise self.error(f"unknown attribute marker {prefix!r} on recipe '{name}'", line_number)
        if rest.startswith("="):
            raise self.error(
                f"variable assignments are not supported: {line}", line_number
            )

        if name in self.recipes:
            first = self.recipes[name].line_number
            raise self.error(
                f"duplicate recipe '{name}' (first defined on line {first})", line_number
            )

        dependencies: list[str] = []
        for dep in rest.split():
            if not _NAME_RE.match(dep):
                raise self.error(
                    f"invalid dependency name {dep!r} in recipe '{name}'", line_number
                )
            if dep in dependencies:
                raise self.error(
                    f"recipe '{name}' lists dependency '{dep}' more than once", line_number
                )
            dependencies.append(dep)

        doc = self.attributes.get("doc")
        if doc is None:
            doc = " ".join(self.comments)

        self.current = _RecipeBuilder(
            name=name,
            line_number=line_number,
            doc=doc,
            quiet=prefix == QUIET_MARKER or "quiet" in self.attributes,
            dependencies=dependencies,
        )
        self.comments = []
        self.attributes = {}

    def _body_line(self, line: str, line_number: int) -> None:
        current = self.current
        if current is None:
            raise self.error("indented line outside of a recipe", line_number)

        if current.indent is None:
            current.indent = line[: len(line) - len(line.lstrip(" \t"))]
        elif not line.startswith(current.indent):
            raise self.error(
                f"inconsistent indentation in recipe '{current.name}'", line_number
            )

        text = line[len(current.indent):]
        echo = Echo.SILENT if current.quiet else Echo.LOUD
        if text.startswith(QUIET_MARKER):
            text = text[len(QUIET_MARKER):]
            echo = Echo.SILENT

        current.body.append(CommandLine(text=text, echo=echo, line_number=line_number))

    def _finish_recipe(self) -> None:
        if self.current is not None:
            recipe = self.current.build()
            self.recipes[recipe.name] = recipe
            self.current = None


def parse_document(text: str, source_path: Path | None = None) -> RecipeBook:
    """Parse the full text of a recipe document.

    Args:
        text: Document contents
        source_path: File the text was read from, used in error messages

    Returns:
        RecipeBook with every recipe in declaration order

    Raises:
        ParseError: If a header is malformed, a name is duplicated, an
            attribute is unknown or body indentation is inconsistent
    """
    source = str(source_path) if source_path is not None else "<string>"
    recipes = _DocumentParser(source).parse(text)
    return RecipeBook.from_recipes(recipes, source_path=source_path)
