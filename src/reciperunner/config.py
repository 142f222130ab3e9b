"""
Configuration file parsing for runner defaults.

Settings are read from up to three YAML files, later ones overriding earlier
ones: machine-level, user-level, then the nearest project-level file.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

import platformdirs
import yaml

from reciperunner.parser import RecipeConfigurationError

__all__ = [
    "PROJECT_CONFIG_NAME",
    "RunnerConfig",
    "ConfigError",
    "default_shell",
    "find_project_config",
    "get_machine_config_path",
    "get_user_config_path",
    "load_config",
    "parse_config_file",
]

APP_NAME = "reciperunner"
PROJECT_CONFIG_NAME = ".reciperunner.yml"

_KNOWN_KEYS = ("shell", "log_level", "command_output")


class ConfigError(RecipeConfigurationError):
    """Raised when a configuration file is invalid."""

    pass


def default_shell() -> list[str]:
    """Get the default shell command for the current platform."""
    if platform.system() == "Windows":
        return ["cmd", "/c"]
    return ["sh", "-cu"]


@dataclass(frozen=True)
class RunnerConfig:
    """Effective runner settings after merging all configuration files."""

    shell: list[str] = field(default_factory=default_shell)
    log_level: Optional[str] = None
    command_output: Optional[str] = None
    sources: tuple[Path, ...] = ()


def get_machine_config_path() -> Path:
    """
    Get the path to the machine-level (system-wide) configuration file.

    Uses platformdirs to determine the site config directory for the current
    platform, then appends 'reciperunner/config.yml'.
    """
    config_dir = Path(platformdirs.site_config_dir(APP_NAME))
    return config_dir / "config.yml"


def get_user_config_path() -> Path:
    """Get the path to the user-level configuration file."""
    config_dir: Path = Path(platformdirs.user_config_dir(APP_NAME))
    return config_dir / "config.yml"


def find_project_config(start_dir: Path) -> Optional[Path]:
    """
    Walk up the directory tree from start_dir to find .reciperunner.yml.

    Returns:
        Path to the project config if found, None otherwise
    """
    try:
        current = start_dir.resolve()
    except (OSError, RuntimeError):
        # resolve() raises RuntimeError on symlink loops
        return None

    while True:
        config_path = current / PROJECT_CONFIG_NAME
        try:
            if config_path.is_file():
                return config_path
        except OSError:
            # Unreadable directory, keep walking up
            pass

        parent = current.parent
        if parent == current:
            return None
        current = parent


def _parse_shell(value: Any, path: Path) -> list[str]:
    if isinstance(value, str):
        parts = value.split()
    elif isinstance(value, list) and all(isinstance(v, str) for v in value):
        parts = list(value)
    else:
        raise ConfigError(
            f"Error in config file '{path}': Field 'shell' must be a string or a list of strings"
        )

    if not parts:
        raise ConfigError(f"Error in config file '{path}': Field 'shell' must not be empty")
    return parts


def parse_config_file(path: Path) -> dict[str, Any]:
    """
    Parse a runner configuration file.

    Empty files and files that don't exist are valid and yield no settings.

    Returns:
        Dictionary containing only the settings present in the file

    Raises:
        ConfigError: If the file is unreadable, is not valid YAML, contains
            unknown keys or has values of the wrong type

    Example config file:
        ```yaml
        shell: [bash, -euo, pipefail, -c]
        log_level: debug
        command_output: all
        ```
    """
    if not path.exists():
        return {}

    try:
        content = path.read_text()
    except OSError as e:
        raise ConfigError(f"Error reading config file '{path}': {e}") from e

    if not content.strip():
        return {}

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML in config file '{path}': {e}") from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Error in config file '{path}': top level must be a mapping")

    unknown = [str(key) for key in data if key not in _KNOWN_KEYS]
    if unknown:
        raise ConfigError(
            f"Error in config file '{path}': Unknown key(s): {', '.join(unknown)}"
        )

    settings: dict[str, Any] = {}
    if "shell" in data:
        settings["shell"] = _parse_shell(data["shell"], path)

    for key in ("log_level", "command_output"):
        if key in data:
            value = data[key]
            if not isinstance(value, str):
                raise ConfigError(
                    f"Error in config file '{path}': Field '{key}' must be a string"
                )
            settings[key] = value

    return settings


def load_config(start_dir: Optional[Path] = None) -> RunnerConfig:
    """
    Build the effective configuration from machine, user and project files.

    Raises:
        ConfigError: If any of the files is invalid
    """
    if start_dir is None:
        start_dir = Path.cwd()

    candidates = [get_machine_config_path(), get_user_config_path()]
    project_config = find_project_config(start_dir)
    if project_config is not None:
        candidates.append(project_config)

    config = RunnerConfig()
    for path in candidates:
        settings = parse_config_file(path)
        if settings:
            config = replace(config, sources=config.sources + (path,), **settings)

    return config
