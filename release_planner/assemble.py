"""Release plan assembly.

Turns changesets into a consistent set of releases:

1. Aggregate changesets into one intent per package
2. Propagate forced bumps to dependents
3. Align linked groups on a single version
4. Repeat 2-3 until neither changes anything (aligning a group can push a
   package out of a dependent's range, which can in turn desynchronize
   another group)
5. Order the releases so dependencies come before dependents

Everything here is pure: inputs are never modified and nothing is printed.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from .changesets import aggregate_changesets
from .errors import (
    InvalidRangeError,
    InvalidVersionError,
    InvariantViolationError,
    UnknownPackageError,
)
from .graph import release_order
from .linked import align_linked
from .models import (
    Changeset,
    DependentsGraph,
    PlannerConfig,
    Release,
    ReleaseIntent,
    ReleasePlan,
    Workspace,
)
from .propagate import propagate_dependents
from .ranges import parse_range
from .versions import classify_jump, compare_versions, parse_version, planned_version


def default_iteration_cap(package_count: int, group_count: int) -> int:
    """Upper bound on fixed-point iterations for well-formed input.

    Every productive iteration raises at least one bump kind, and each
    package can be raised at most three times.
    """
    return (3 * package_count + 1) * (group_count + 1) + 1


def run_to_fixed_point(
    intents: dict[str, ReleaseIntent],
    workspaces: Mapping[str, Workspace],
    dependents_graph: DependentsGraph,
    linked: Sequence[Sequence[str]],
    max_iterations: int | None = None,
) -> int:
    """Alternate propagation and linked alignment until both are stable.

    Args:
        intents: Map of package name → ReleaseIntent (modified in place).
        workspaces: Map of package name → Workspace.
        dependents_graph: Map of package name → packages that depend on it.
        linked: Linked groups.
        max_iterations: Iteration cap; defaults to default_iteration_cap().

    Returns:
        The number of iterations it took to converge.

    Raises:
        InvariantViolationError: If the cap is exceeded.
    """
    cap = max_iterations
    if cap is None:
        cap = default_iteration_cap(len(workspaces), len(linked))
    for iteration in range(1, cap + 1):
        propagated = propagate_dependents(intents, workspaces, dependents_graph)
        aligned = align_linked(intents, workspaces, linked)
        if not propagated and not aligned:
            return iteration
    raise InvariantViolationError(
        f"Release planning did not converge after {cap} iterations"
    )


def format_releases(
    intents: Mapping[str, ReleaseIntent], workspaces: Mapping[str, Workspace]
) -> list[Release]:
    """Convert converged intents into ordered releases.

    Intents with no net version change are dropped. Dependencies come
    before their dependents; otherwise packages keep the order in which
    they were first touched (the intents' insertion order).
    """
    releases: dict[str, Release] = {}
    for name, intent in intents.items():
        old_version = workspaces[name].version
        new_version = planned_version(intent, old_version)
        if compare_versions(new_version, old_version) <= 0:
            continue
        releases[name] = Release(
            name=name,
            type=intent.type or classify_jump(old_version, new_version),
            old_version=old_version,
            new_version=new_version,
            changesets=list(intent.changesets),
        )
    return [releases[name] for name in release_order(list(releases), workspaces)]


def _check_references(
    workspaces: Mapping[str, Workspace],
    dependents_graph: DependentsGraph,
    linked: Sequence[Sequence[str]],
) -> None:
    """Make sure every dependency edge and linked member names a package."""
    missing: list[str] = []
    for name, edges in dependents_graph.items():
        if name not in workspaces:
            missing.append(name)
        missing.extend(edge.name for edge in edges if edge.name not in workspaces)
    for ws in workspaces.values():
        missing.extend(dep for dep in ws.dependencies if dep not in workspaces)
    if missing:
        raise UnknownPackageError(missing, "dependency")

    missing = [name for group in linked for name in group if name not in workspaces]
    if missing:
        raise UnknownPackageError(missing, "linked")


def _check_versions(
    workspaces: Mapping[str, Workspace], dependents_graph: DependentsGraph
) -> None:
    """Make sure every current version and declared range can be parsed."""
    for ws in workspaces.values():
        try:
            parse_version(ws.version)
        except InvalidVersionError as exc:
            raise InvalidVersionError(f"Package {ws.name}: {exc}") from exc
    for name, edges in dependents_graph.items():
        for edge in edges:
            try:
                parse_range(edge.range)
            except InvalidRangeError as exc:
                message = f"{edge.name} depends on {name}: {exc}"
                raise InvalidRangeError(message) from exc


def assemble(
    changesets: Iterable[Changeset],
    workspaces: Iterable[Workspace],
    dependents_graph: DependentsGraph,
    config: PlannerConfig | None = None,
) -> ReleasePlan:
    """Assemble a release plan.

    Args:
        changesets: Changesets to release, in attribution order.
        workspaces: Every package in the workspace.
        dependents_graph: Reverse dependency index, as built by
                          graph.build_dependents_graph().
        config: Planner configuration; only `linked` is used here.

    Returns:
        A ReleasePlan with releases in dependency order.

    Raises:
        UnknownPackageError: If a changeset, dependency edge or linked group
            names a package that is not in the workspace.
        InvalidVersionError: If a package version is not semver.
        InvalidRangeError: If a dependency edge declares an unparseable range.
        InvariantViolationError: If planning fails to converge.
    """
    config = config or PlannerConfig()
    changesets = list(changesets)
    by_name = {ws.name: ws for ws in workspaces}

    intents = aggregate_changesets(changesets, by_name)
    _check_references(by_name, dependents_graph, config.linked)
    _check_versions(by_name, dependents_graph)
    run_to_fixed_point(intents, by_name, dependents_graph, config.linked)

    return ReleasePlan(
        changesets=changesets, releases=format_releases(intents, by_name)
    )
