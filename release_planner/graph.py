"""Dependency graph utilities.

Derives the dependents graph (who depends on each package) from workspace
manifests, and provides the dependency-respecting order used when
reporting a release plan. When package A depends on package B, B comes
first.
"""

from __future__ import annotations

import heapq
from collections.abc import Iterable, Mapping

from .models import DependentEdge, DependentsGraph, Workspace


def build_dependents_graph(workspaces: Iterable[Workspace]) -> DependentsGraph:
    """Build the reverse dependency index for a set of workspaces.

    For every declared edge D → P, adds an entry P → {D, kind, range}.
    Every workspace gets a key, even if nothing depends on it. Dependents
    are listed in workspace order.

    Example:
        If B depends on A with "^1.0.0":
        build_dependents_graph([A, B]) → {A: [{B, regular, ^1.0.0}], B: []}
    """
    workspaces = list(workspaces)
    graph: DependentsGraph = {ws.name: [] for ws in workspaces}
    for ws in workspaces:
        for dep_name, dep in ws.dependencies.items():
            # Unknown targets are kept so assemble() can report them
            graph.setdefault(dep_name, []).append(
                DependentEdge(name=ws.name, kind=dep.kind, range=dep.range)
            )
    return graph


def release_order(
    names: list[str], workspaces: Mapping[str, Workspace]
) -> list[str]:
    """Order packages so dependencies come before their dependents.

    Uses Kahn's algorithm over the dependency edges between the given
    packages only. Among packages that are ready at the same time, the one
    earlier in `names` wins, so `names` acts as the tie-break order.

    Dependencies reach through packages outside `names`: if A depends on
    X and X depends on B, B still comes before A.

    A dependency cycle never fails: once no package is ready, the rest are
    appended in `names` order.

    Args:
        names: Packages to order, in tie-break priority order.
        workspaces: Map of package name → Workspace for dependency lookup.

    Returns:
        The same names, reordered.
    """
    position = {name: i for i, name in enumerate(names)}
    deps_of = {name: _reachable_deps(name, position, workspaces) for name in names}

    # Count incoming edges (dependencies) for each package
    in_degree = {name: len(deps) for name, deps in deps_of.items()}
    # Track reverse dependencies (who depends on each package)
    reverse_deps: dict[str, list[str]] = {name: [] for name in names}
    for name, deps in deps_of.items():
        for dep in deps:
            reverse_deps[dep].append(name)

    # Priority queue keyed by tie-break position
    queue = [position[n] for n, d in in_degree.items() if d == 0]
    heapq.heapify(queue)
    order: list[str] = []
    emitted: set[str] = set()

    while len(order) < len(names):
        if not queue:
            # Cycle: fall back to tie-break order for whatever is left
            stuck = min(position[n] for n in names if n not in emitted)
            heapq.heappush(queue, stuck)
            in_degree[names[stuck]] = 0
        node = names[heapq.heappop(queue)]
        if node in emitted:
            continue
        order.append(node)
        emitted.add(node)
        # Decrement in_degree for all packages that depend on this one
        for dependent in reverse_deps[node]:
            if dependent in emitted:
                continue
            in_degree[dependent] -= 1
            # When a package has all deps satisfied, add to queue
            if in_degree[dependent] == 0:
                heapq.heappush(queue, position[dependent])

    return order


def _reachable_deps(
    name: str, included: Mapping[str, int], workspaces: Mapping[str, Workspace]
) -> set[str]:
    """Included packages that `name` depends on, directly or transitively.

    The walk passes through packages that are not included, but stops at
    the first included package on each path.
    """
    found: set[str] = set()
    seen: set[str] = {name}
    stack = list(workspaces[name].dependencies) if name in workspaces else []
    while stack:
        dep = stack.pop()
        if dep in seen:
            continue
        seen.add(dep)
        if dep in included:
            found.add(dep)
        elif dep in workspaces:
            stack.extend(workspaces[dep].dependencies)
    return found
