"""Data models for release-planner.

These Pydantic models represent the inputs, the working state, and the
output of release planning.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class BumpKind(str, Enum):
    """A semver bump requested for (or forced on) a package."""

    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"


class DependencyKind(str, Enum):
    """How a package depends on another workspace package.

    Peer dependencies follow stricter propagation rules than the others.
    """

    REGULAR = "regular"
    DEV = "dev"
    OPTIONAL = "optional"
    PEER = "peer"


class Dependency(BaseModel):
    """A declared dependency on another workspace package.

    Attributes:
        range: Declared version range, e.g. "^1.0.0" or ">=1.0,<2.0".
               An empty string accepts any version.
        kind: Which section of the manifest declared the dependency.
    """

    range: str = ""
    kind: DependencyKind = DependencyKind.REGULAR


class Workspace(BaseModel):
    """A single package in the monorepo workspace.

    Attributes:
        name: Canonical package name.
        version: Current version string from pyproject.toml.
        path: Relative path from workspace root to the package directory.
        dependencies: Internal (workspace) dependencies keyed by name.
                      External deps are not tracked since they never take
                      part in propagation.
    """

    name: str
    version: str
    path: str = ""
    dependencies: dict[str, Dependency] = Field(default_factory=dict)


class DependentEdge(BaseModel):
    """One entry of the dependents graph: `name` depends on the key package."""

    name: str
    kind: DependencyKind
    range: str = ""


DependentsGraph = dict[str, list[DependentEdge]]


class ChangesetRelease(BaseModel):
    """One package and the bump a changeset asks for it."""

    name: str
    type: BumpKind


class Changeset(BaseModel):
    """An author-declared intent to release one or more packages."""

    id: str
    summary: str = ""
    releases: list[ChangesetRelease] = Field(default_factory=list)


class ReleaseIntent(BaseModel):
    """The planned change for one package while planning is in progress.

    Intents only ever grow: the bump type can be raised and an override
    version can be raised, never lowered.

    Attributes:
        name: Package name.
        type: Bump kind, or None when only a version override is planned.
        version_override: Version forced by linked alignment, if any.
        changesets: Ids of the changesets that asked for this release, in
                    the order they were first seen. Forced bumps add none.
    """

    name: str
    type: BumpKind | None = None
    version_override: str | None = None
    changesets: list[str] = Field(default_factory=list)


class PlannerConfig(BaseModel):
    """The subset of configuration the planner consumes.

    Attributes:
        linked: Groups of packages that must always share a version.
        changeset_dir: Directory (relative to the workspace root) holding
                       changeset files.
    """

    linked: list[list[str]] = Field(default_factory=list)
    changeset_dir: str = ".changeset"


class Release(BaseModel):
    """A single package release in the final plan."""

    name: str
    type: BumpKind
    old_version: str
    new_version: str
    changesets: list[str] = Field(default_factory=list)


class ReleasePlan(BaseModel):
    """The complete, ordered result of planning."""

    changesets: list[Changeset] = Field(default_factory=list)
    releases: list[Release] = Field(default_factory=list)
