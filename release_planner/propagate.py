"""Dependency propagation: forced bumps on dependents.

When a package is released, its dependents may have to be released too:

- peer dependents get a major bump whenever the package's own bump is
  minor or major, whatever range they declared;
- every other dependent (regular, dev, optional, or peer on a patch bump)
  gets at least a patch bump when the new version falls outside the
  declared range.

Forced bumps are combined into the dependent's intent and never carry a
changeset id. A dependent whose bump increased is revisited so that the
effect keeps flowing down the graph.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Mapping

from .models import (
    BumpKind,
    DependencyKind,
    DependentEdge,
    DependentsGraph,
    ReleaseIntent,
    Workspace,
)
from .ranges import satisfies_range
from .versions import bump_rank, combine, compare_versions, planned_version


def forced_bump(
    bump: BumpKind | None, new_version: str, edge: DependentEdge
) -> BumpKind | None:
    """Return the minimum bump a dependent needs, or None if it needs none.

    Args:
        bump: The released package's own bump kind.
        new_version: The released package's planned version.
        edge: The dependent and the range it declared on the package.
    """
    if edge.kind is DependencyKind.PEER and bump in (BumpKind.MINOR, BumpKind.MAJOR):
        return BumpKind.MAJOR
    if not satisfies_range(new_version, edge.range):
        return BumpKind.PATCH
    return None


def propagate_dependents(
    intents: dict[str, ReleaseIntent],
    workspaces: Mapping[str, Workspace],
    dependents_graph: DependentsGraph,
) -> bool:
    """Apply forced bumps to dependents until nothing more changes.

    Walks breadth-first from every package that currently has an intent.
    A package is only walked again when its bump kind increased, since
    that is the only way its planned version can move during this pass.

    Args:
        intents: Map of package name → ReleaseIntent (modified in place).
        workspaces: Map of package name → Workspace.
        dependents_graph: Map of package name → packages that depend on it.

    Returns:
        True if any intent was created or had its bump kind raised.
    """
    changed = False
    queue = deque(intents)
    queued = set(queue)

    while queue:
        name = queue.popleft()
        queued.discard(name)
        intent = intents[name]
        current = workspaces[name].version
        new_version = planned_version(intent, current)
        if compare_versions(new_version, current) <= 0:
            continue

        for edge in dependents_graph.get(name, []):
            bump = forced_bump(intent.type, new_version, edge)
            if bump is None:
                continue
            dependent = intents.setdefault(edge.name, ReleaseIntent(name=edge.name))
            raised = combine(dependent.type, bump)
            if bump_rank(raised) <= bump_rank(dependent.type):
                continue
            dependent.type = raised
            changed = True
            # Its version moved, so its own dependents need another look
            if edge.name not in queued:
                queue.append(edge.name)
                queued.add(edge.name)

    return changed
