"""Planning pipeline: discover → configure → read changesets → assemble.

This module wires the pure planner to a uv workspace on disk:
1. Discover all packages listed in [tool.uv.workspace].members
2. Read [tool.release-planner] from the root pyproject.toml
3. Read changeset files from the changeset directory
4. Build the dependents graph and assemble the release plan
"""

from __future__ import annotations

import glob
from pathlib import Path

from packaging.requirements import InvalidRequirement

from .assemble import assemble
from .changesets import read_changesets
from .config import parse_config
from .deps import collect_internal_deps
from .errors import WorkspaceError
from .graph import build_dependents_graph
from .models import DependencyKind, PlannerConfig, ReleasePlan, Workspace
from .output import step
from .toml import (
    get_dependency_strings,
    get_project_name,
    get_project_version,
    get_tool_table,
    get_workspace_member_globs,
    load_toml,
)


def discover_packages(root: Path, *, quiet: bool = False) -> dict[str, Workspace]:
    """Scan the workspace and discover all packages.

    Reads [tool.uv.workspace].members from root pyproject.toml to find
    package directories, then extracts name, version, and internal deps
    from each package's pyproject.toml.

    Args:
        root: Workspace root directory.
        quiet: If True, don't print discovered packages.

    Returns:
        Map of package name to Workspace.

    Raises:
        WorkspaceError: If no members are defined, none contain a
            pyproject.toml, or a dependency string is not valid PEP 508.
    """
    if not quiet:
        step("Discovering workspace packages")

    root_doc = load_toml(root / "pyproject.toml")
    member_globs = get_workspace_member_globs(root_doc)

    # Expand globs to find all package directories
    member_dirs: list[Path] = []
    for pattern in member_globs:
        for match in sorted(glob.glob(str(root / pattern))):
            p = Path(match)
            if (p / "pyproject.toml").exists():
                member_dirs.append(p)

    if not member_dirs:
        raise WorkspaceError("No packages found matching workspace members")

    # First pass: collect basic info from each package
    packages: dict[str, Workspace] = {}
    raw_deps: dict[str, list[tuple[DependencyKind, str]]] = {}
    for d in member_dirs:
        doc = load_toml(d / "pyproject.toml")
        name = get_project_name(doc, d.name)
        packages[name] = Workspace(
            name=name,
            version=get_project_version(doc),
            path=d.relative_to(root).as_posix(),
        )
        raw_deps[name] = get_dependency_strings(doc)

    # Second pass: identify which deps are internal (within workspace)
    workspace_names = set(packages)
    for name, deps in raw_deps.items():
        try:
            internal = collect_internal_deps(deps, workspace_names)
        except InvalidRequirement as exc:
            raise WorkspaceError(
                f"Invalid dependency in {packages[name].path}/pyproject.toml: {exc}"
            ) from exc
        # A package's dependency on itself (e.g. extras) is not an edge
        internal.pop(name, None)
        packages[name].dependencies = internal

    if not quiet:
        # Print discovered packages for user feedback
        for name, info in packages.items():
            deps = (
                f" → [{', '.join(info.dependencies)}]" if info.dependencies else ""
            )
            print(f"  {name} {info.version} ({info.path}){deps}")

    return packages


def load_config(root: Path, package_names: set[str]) -> PlannerConfig:
    """Read and validate [tool.release-planner] from the root pyproject.toml."""
    return parse_config(
        get_tool_table(load_toml(root / "pyproject.toml")), package_names
    )


def plan_release(root: Path, *, quiet: bool = False) -> ReleasePlan:
    """Compute the release plan for the workspace at `root`.

    Args:
        root: Workspace root directory.
        quiet: If True, print nothing (used for machine-readable output).

    Raises:
        PlannerError: If the workspace, config or changesets are invalid.
    """
    packages = discover_packages(root, quiet=quiet)
    config = load_config(root, set(packages))

    changesets = read_changesets(root / config.changeset_dir)
    if not quiet:
        step(f"Reading changesets from {config.changeset_dir}")
        for changeset in changesets:
            bumps = ", ".join(f"{r.name}@{r.type.value}" for r in changeset.releases)
            print(f"  {changeset.id}: {bumps}")
        if not changesets:
            print("  No changesets found")

    return assemble(
        changesets,
        packages.values(),
        build_dependents_graph(packages.values()),
        config,
    )
