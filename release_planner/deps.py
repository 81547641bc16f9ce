"""Dependency handling utilities.

Provides functions for parsing PEP 508 dependency strings and reducing a
manifest's dependency list to the internal (workspace) dependencies that
take part in release planning.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable

from packaging.requirements import Requirement
from packaging.utils import canonicalize_name

from .models import Dependency, DependencyKind

# When one package is declared under several kinds, the first kind in this
# list wins.
_KIND_PRIORITY = [
    DependencyKind.PEER,
    DependencyKind.REGULAR,
    DependencyKind.OPTIONAL,
    DependencyKind.DEV,
]


def dep_canonical_name(dep_str: str) -> str:
    """Extract the canonical package name from a PEP 508 dependency string.

    Handles version specifiers, extras, and normalizes the name per PEP 503
    (lowercase, hyphens instead of underscores).

    Examples:
        "requests>=2.0" → "requests"
        "My_Package[extra]~=1.0" → "my-package"
    """
    return canonicalize_name(Requirement(dep_str).name)


def dep_range(dep_str: str) -> str:
    """Extract the version range from a PEP 508 dependency string.

    Specifiers are sorted by packaging, and an unconstrained dependency
    yields an empty range (any version).

    Examples:
        "requests>=2.0" → ">=2.0"
        "pkg[extra]>=1.0,<2.0" → "<2.0,>=1.0"
        "pkg" → ""
    """
    return str(Requirement(dep_str).specifier)


def collect_internal_deps(
    dep_strings: Iterable[tuple[DependencyKind, str]],
    workspace_names: Collection[str],
) -> dict[str, Dependency]:
    """Reduce (kind, PEP 508 string) pairs to internal dependencies.

    External packages are ignored. If the same package shows up more than
    once, the strongest kind wins (peer, then regular, optional, dev) and
    the range declared alongside that kind is kept.

    Args:
        dep_strings: Pairs as returned by toml.get_dependency_strings().
        workspace_names: Canonical names of all workspace packages.

    Returns:
        Map of dependency name → Dependency, in first-seen order.
    """
    found: dict[str, Dependency] = {}
    for kind, dep_str in dep_strings:
        name = dep_canonical_name(dep_str)
        # Only track internal deps, ignore external packages
        if name not in workspace_names:
            continue
        existing = found.get(name)
        if existing is None or _KIND_PRIORITY.index(kind) < _KIND_PRIORITY.index(
            existing.kind
        ):
            found[name] = Dependency(range=dep_range(dep_str), kind=kind)
    return found
