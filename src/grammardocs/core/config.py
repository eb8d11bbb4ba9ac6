"""
Configuration for documentation generation.

Configuration is loaded from the ``[grammardocs]`` table of ``grammardocs.toml``
or the ``[tool.grammardocs]`` table of ``pyproject.toml``::

    [grammardocs]
    formatter = "markdown"
    output_dir = "docs/grammar"
    search_paths = ["grammars"]
    include_syntax = true

    [grammardocs.graph]
    enabled = true
    deduplicate_edges = false
    direction = "LR"

Relative paths are resolved against the directory holding the file.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from grammardocs.core.errors import ConfigError
from grammardocs.formatters.base import FormatterOptions

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "grammardocs.toml"
PYPROJECT_FILE_NAME = "pyproject.toml"


class GraphConfig(BaseModel):
    """Rule graph output."""

    enabled: bool = True
    deduplicate_edges: bool = False
    direction: Literal["LR", "TB", "RL", "BT"] = "LR"

    model_config = ConfigDict(extra="forbid")


class DocsConfig(BaseModel):
    """Complete documentation configuration."""

    formatter: str = "markdown"
    output_dir: Path = Path("docs/grammar")
    search_paths: list[Path] = Field(default_factory=list)
    include_syntax: bool = True
    graph: GraphConfig = Field(default_factory=GraphConfig)

    model_config = ConfigDict(extra="forbid")

    def formatter_options(self) -> FormatterOptions:
        return FormatterOptions(
            include_syntax=self.include_syntax,
            deduplicate_edges=self.graph.deduplicate_edges,
            graph_direction=self.graph.direction,
        )

    def resolved(self, base_dir: Path) -> DocsConfig:
        """Copy with relative paths anchored at ``base_dir``."""
        return self.model_copy(
            update={
                "output_dir": base_dir / self.output_dir,
                "search_paths": [base_dir / path for path in self.search_paths],
            }
        )


# =============================================================================
# Configuration Loading
# =============================================================================


def find_config_file(start: Path | None = None) -> Path | None:
    """
    Find the nearest configuration file, walking up from ``start``.

    In each directory ``grammardocs.toml`` wins over a ``pyproject.toml``;
    a ``pyproject.toml`` only counts when it has a ``[tool.grammardocs]`` table.
    """
    directory = (start or Path.cwd()).resolve()
    if directory.is_file():
        directory = directory.parent

    for candidate in (directory, *directory.parents):
        config_file = candidate / CONFIG_FILE_NAME
        if config_file.is_file():
            return config_file
        pyproject = candidate / PYPROJECT_FILE_NAME
        if pyproject.is_file() and "grammardocs" in _read_toml(pyproject).get("tool", {}):
            return pyproject
    return None


def load_config(path: Path | None = None, start: Path | None = None) -> DocsConfig:
    """
    Load configuration.

    Args:
        path: Explicit configuration file; must exist
        start: Directory to search upwards from when no path is given

    Returns:
        DocsConfig with values from file or defaults

    Raises:
        ConfigError: If the file is missing, not valid TOML or has invalid values
    """
    if path is not None and not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")

    config_file = path or find_config_file(start)
    if config_file is None:
        logger.debug("No configuration file found, using defaults")
        return DocsConfig()

    data = _read_toml(config_file)
    if config_file.name == PYPROJECT_FILE_NAME:
        section = data.get("tool", {}).get("grammardocs", {})
    else:
        section = data.get("grammardocs", {})

    logger.debug("Loaded configuration from %s", config_file)
    return _parse_config(section, config_file).resolved(config_file.parent)


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e


def _parse_config(data: dict[str, Any], source: Path) -> DocsConfig:
    try:
        return DocsConfig.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        )
        raise ConfigError(f"Invalid configuration in {source}: {problems}") from e
