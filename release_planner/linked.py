"""Linked groups: packages that always release at the same version."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .models import ReleaseIntent, Workspace
from .versions import (
    classify_jump,
    combine,
    compare_versions,
    max_version,
    planned_version,
)


def align_linked(
    intents: dict[str, ReleaseIntent],
    workspaces: Mapping[str, Workspace],
    linked: Iterable[Iterable[str]],
) -> bool:
    """Pull every member of a linked group up to the group's highest version.

    For each group with at least one planned release, every member's
    tentative version is taken from its intent (or its current version if
    it has none). Members below the highest tentative version get that
    version as an override, creating an intent where needed, and their
    bump type is raised to match the size of the jump. Changeset ids are
    left alone.

    Groups with nothing planned are skipped, so linking alone never causes
    a release.

    Args:
        intents: Map of package name → ReleaseIntent (modified in place).
        workspaces: Map of package name → Workspace.
        linked: Groups of package names.

    Returns:
        True if any override was introduced or raised.
    """
    changed = False
    for group in linked:
        members = list(dict.fromkeys(group))
        if not any(name in intents for name in members):
            continue

        tentative = {
            name: planned_version(intents[name], workspaces[name].version)
            if name in intents
            else workspaces[name].version
            for name in members
        }
        target = max_version(tentative.values())

        for name in members:
            if compare_versions(tentative[name], target) >= 0:
                continue
            intent = intents.setdefault(name, ReleaseIntent(name=name))
            intent.version_override = target
            intent.type = combine(
                intent.type, classify_jump(workspaces[name].version, target)
            )
            changed = True

    return changed
