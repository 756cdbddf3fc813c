"""Single source of truth for the erlidl version."""

import tomllib
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version
from pathlib import Path

_PYPROJECT = Path(__file__).parent.parent.parent / "pyproject.toml"


def get_version() -> str:
    """
    Version stamped into generated banners.

    A source checkout reports the version in its pyproject.toml so editable
    installs never go stale; otherwise the installed distribution's.
    """
    if _PYPROJECT.exists():
        with open(_PYPROJECT, "rb") as f:
            project = tomllib.load(f).get("project", {})
        if "version" in project:
            return str(project["version"])
    try:
        return _metadata_version("erlidl")
    except PackageNotFoundError:
        return "0.0.0"
