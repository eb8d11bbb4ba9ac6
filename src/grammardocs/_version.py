"""Version lookup for grammardocs."""

import tomllib
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version
from pathlib import Path

# src/grammardocs/_version.py -> repository root
_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def get_version() -> str:
    """
    Version of grammardocs.

    A source checkout reports the version declared in its own pyproject.toml;
    an installed copy reports its distribution metadata.
    """
    try:
        project = tomllib.loads(_PYPROJECT.read_text(encoding="utf-8")).get("project", {})
    except (OSError, tomllib.TOMLDecodeError):
        project = {}
    if project.get("name") == "grammardocs" and "version" in project:
        return str(project["version"])
    try:
        return _metadata_version("grammardocs")
    except PackageNotFoundError:
        return "0.0.0"
