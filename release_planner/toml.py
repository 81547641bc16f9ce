"""TOML reading and writing utilities.

Uses tomlkit for pyproject.toml and changeset files so that anything we
write stays readable and diff-friendly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from packaging.utils import canonicalize_name

from .errors import WorkspaceError
from .models import DependencyKind

# Our table inside pyproject.toml: [tool.release-planner]
TOOL_NAME = "release-planner"


def load_toml(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a TOML file.

    Returns a TOMLDocument that preserves formatting when modified and saved.
    """
    return tomlkit.parse(path.read_text())


def save_toml(path: Path, doc: tomlkit.TOMLDocument) -> None:
    """Save a TOMLDocument back to disk, preserving original formatting."""
    path.write_text(tomlkit.dumps(doc))


def get_project_name(doc: tomlkit.TOMLDocument, fallback: str) -> str:
    """Extract the canonical package name from [project].name.

    Names are normalized per PEP 503 (lowercase, hyphens instead of
    underscores) for consistent comparison.

    Args:
        doc: Parsed pyproject.toml document.
        fallback: Value to use if name is not specified.
    """
    return canonicalize_name(doc.get("project", {}).get("name", fallback))


def get_project_version(doc: tomlkit.TOMLDocument) -> str:
    """Extract version from [project].version, defaulting to '0.0.0'."""
    return str(doc.get("project", {}).get("version", "0.0.0"))


def get_tool_table(doc: tomlkit.TOMLDocument) -> dict[str, Any]:
    """Return the [tool.release-planner] table, or an empty dict."""
    return doc.get("tool", {}).get(TOOL_NAME, {})


def get_dependency_strings(
    doc: tomlkit.TOMLDocument,
) -> list[tuple[DependencyKind, str]]:
    """Collect all dependency strings from a pyproject.toml with their kind.

    Gathers dependencies from four locations:
    - [project].dependencies (regular runtime deps)
    - [project].optional-dependencies.* (extras, optional)
    - [dependency-groups].* (PEP 735 groups, dev)
    - [tool.release-planner].peer-dependencies (peer)

    Returns (kind, raw PEP 508 string) pairs like (REGULAR, "requests>=2.0").
    """
    project = doc.get("project", {})
    deps: list[tuple[DependencyKind, str]] = [
        (DependencyKind.REGULAR, str(d)) for d in project.get("dependencies", [])
    ]
    # Collect optional dependency groups (e.g., [project.optional-dependencies.dev])
    for group_deps in project.get("optional-dependencies", {}).values():
        deps.extend((DependencyKind.OPTIONAL, str(d)) for d in group_deps)
    # Collect PEP 735 dependency groups (e.g., [dependency-groups.test])
    for group_deps in doc.get("dependency-groups", {}).values():
        # Entries may also be {include-group = "..."} tables
        deps.extend((DependencyKind.DEV, d) for d in group_deps if isinstance(d, str))
    for d in get_tool_table(doc).get("peer-dependencies", []):
        deps.append((DependencyKind.PEER, str(d)))
    return deps


def get_workspace_member_globs(doc: tomlkit.TOMLDocument) -> list[str]:
    """Extract workspace member glob patterns from [tool.uv.workspace].

    These patterns (e.g., "packages/*", "libs/*") define which directories
    contain workspace packages.

    Raises:
        WorkspaceError: If no workspace members are defined.
    """
    members = doc.get("tool", {}).get("uv", {}).get("workspace", {}).get("members")
    if not members:
        raise WorkspaceError(
            "No [tool.uv.workspace] members defined in root pyproject.toml"
        )
    return [str(m) for m in members]
