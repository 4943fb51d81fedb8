"""TOML configuration loading.

Commit type tables can be overridden per repository in pyproject.toml::

    [tool.git-semver]
    major-types = ["break"]
    minor-types = ["feat"]
    patch-types = ["fix", "ref", "perf"]
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import ParseError

from .errors import GitSemverError
from .models import CommitRules

TOOL_SECTION = "git-semver"

# TOML key → CommitRules field
_TYPE_KEYS = {
    "major-types": "major_types",
    "minor-types": "minor_types",
    "patch-types": "patch_types",
}


def load_pyproject(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a pyproject.toml file."""
    return tomlkit.parse(path.read_text())


def get_tool_config(doc: tomlkit.TOMLDocument) -> dict[str, Any]:
    """Extract the [tool.git-semver] table, or {} if it is absent."""
    return dict(doc.get("tool", {}).get(TOOL_SECTION, {}))


def get_commit_rules(doc: tomlkit.TOMLDocument) -> CommitRules:
    """Build CommitRules from a parsed pyproject.toml.

    Keys that are not set keep their defaults.

    Raises:
        GitSemverError: If a type key is not a list of strings.
    """
    config = get_tool_config(doc)
    overrides: dict[str, tuple[str, ...]] = {}
    for key, field in _TYPE_KEYS.items():
        if key not in config:
            continue
        value = config[key]
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise GitSemverError(
                f"[tool.{TOOL_SECTION}].{key} must be a list of strings, got {value!r}"
            )
        overrides[field] = tuple(str(v) for v in value)
    return CommitRules(**overrides)


def load_commit_rules(path: Path) -> CommitRules:
    """Load CommitRules from a pyproject.toml, or defaults if it doesn't exist."""
    if not path.is_file():
        return CommitRules()
    try:
        doc = load_pyproject(path)
    except ParseError as exc:
        raise GitSemverError(f"cannot parse {path}: {exc}") from exc
    return get_commit_rules(doc)
