"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
import tomlkit

from release_planner.assemble import assemble
from release_planner.graph import build_dependents_graph
from release_planner.models import (
    BumpKind,
    Changeset,
    ChangesetRelease,
    Dependency,
    DependencyKind,
    PlannerConfig,
    ReleasePlan,
    Workspace,
)


class FakeState:
    """In-memory workspace plus changesets for planner tests."""

    def __init__(self) -> None:
        self.workspaces: dict[str, Workspace] = {}
        self.changesets: list[Changeset] = []

    def add_workspace(self, name: str, version: str = "1.0.0") -> None:
        self.workspaces[name] = Workspace(name=name, version=version)

    def set_version(self, name: str, version: str) -> None:
        self.workspaces[name].version = version

    def add_dependency(
        self,
        dependent: str,
        dependency: str,
        range_: str,
        kind: DependencyKind = DependencyKind.REGULAR,
    ) -> None:
        self.workspaces[dependent].dependencies[dependency] = Dependency(
            range=range_, kind=kind
        )

    def add_peer_dependency(self, dependent: str, dependency: str, range_: str) -> None:
        self.add_dependency(dependent, dependency, range_, DependencyKind.PEER)

    def add_changeset(self, changeset_id: str, *releases: tuple[str, str]) -> None:
        self.changesets.append(
            Changeset(
                id=changeset_id,
                releases=[
                    ChangesetRelease(name=name, type=BumpKind(bump))
                    for name, bump in releases
                ],
            )
        )

    def plan(self, linked: list[list[str]] | None = None) -> ReleasePlan:
        return assemble(
            self.changesets,
            self.workspaces.values(),
            build_dependents_graph(self.workspaces.values()),
            PlannerConfig(linked=linked or []),
        )


@pytest.fixture
def state() -> FakeState:
    """pkg-a..pkg-d at 1.0.0, with one changeset patching pkg-a."""
    fake = FakeState()
    for name in ("pkg-a", "pkg-b", "pkg-c", "pkg-d"):
        fake.add_workspace(name)
    fake.add_changeset("strange-words-combine", ("pkg-a", "patch"))
    return fake


@pytest.fixture
def empty_state() -> FakeState:
    """A FakeState with no packages and no changesets."""
    return FakeState()


@pytest.fixture
def write_workspace(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper that lays out a uv workspace under tmp_path.

    The helper takes a map of package name → pyproject.toml body (without
    the [project] name line) and an optional extra root pyproject body.
    """

    def _write(packages: dict[str, str], root_extra: str = "") -> Path:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.uv.workspace]\nmembers = ["packages/*"]\n\n' + root_extra
        )
        for name, body in packages.items():
            package_dir = tmp_path / "packages" / name
            package_dir.mkdir(parents=True)
            (package_dir / "pyproject.toml").write_text(
                f'[project]\nname = "{name}"\n' + body
            )
        return tmp_path

    return _write


@pytest.fixture
def sample_toml_doc() -> tomlkit.TOMLDocument:
    """Create a sample TOML document."""
    content = """\
[project]
name = "my-package"
version = "2.0.0"
dependencies = ["click>=8.0", "pkg-core>=1.0"]

[project.optional-dependencies]
dev = ["pytest>=8.0"]
docs = ["sphinx>=7.0", "pkg-docs~=1.2"]

[dependency-groups]
test = ["hypothesis>=6.0", {include-group = "lint"}]
lint = ["ruff"]

[tool.uv.workspace]
members = ["packages/*", "libs/*"]

[tool.release-planner]
peer-dependencies = ["pkg-host>=1.0,<2.0"]
"""
    return tomlkit.parse(content)
