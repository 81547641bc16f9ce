"""Tests for release_planner.changesets."""

from __future__ import annotations

import random
from pathlib import Path

import pytest
import tomlkit

from release_planner.changesets import (
    aggregate_changesets,
    generate_changeset_id,
    parse_changeset,
    read_changesets,
    write_changeset,
)
from release_planner.errors import ChangesetError, UnknownPackageError
from release_planner.models import BumpKind, Changeset, ChangesetRelease, Workspace


def _changeset(changeset_id: str, **releases: str) -> Changeset:
    return Changeset(
        id=changeset_id,
        releases=[
            ChangesetRelease(name=name.replace("_", "-"), type=BumpKind(bump))
            for name, bump in releases.items()
        ],
    )


@pytest.fixture
def workspaces() -> dict[str, Workspace]:
    return {n: Workspace(name=n, version="1.0.0") for n in ("pkg-a", "pkg-b")}


class TestAggregateChangesets:
    def test_single_changeset(self, workspaces: dict[str, Workspace]) -> None:
        intents = aggregate_changesets([_changeset("one", pkg_a="patch")], workspaces)
        assert list(intents) == ["pkg-a"]
        assert intents["pkg-a"].type is BumpKind.PATCH
        assert intents["pkg-a"].changesets == ["one"]

    def test_highest_bump_wins(self, workspaces: dict[str, Workspace]) -> None:
        intents = aggregate_changesets(
            [
                _changeset("one", pkg_a="minor"),
                _changeset("two", pkg_a="major"),
                _changeset("three", pkg_a="patch"),
            ],
            workspaces,
        )
        assert intents["pkg-a"].type is BumpKind.MAJOR
        assert intents["pkg-a"].changesets == ["one", "two", "three"]

    def test_ids_deduplicated(self, workspaces: dict[str, Workspace]) -> None:
        changeset = Changeset(
            id="twice",
            releases=[
                ChangesetRelease(name="pkg-a", type=BumpKind.PATCH),
                ChangesetRelease(name="pkg-a", type=BumpKind.MINOR),
            ],
        )
        intents = aggregate_changesets([changeset], workspaces)
        assert intents["pkg-a"].changesets == ["twice"]
        assert intents["pkg-a"].type is BumpKind.MINOR

    def test_first_mention_order(self, workspaces: dict[str, Workspace]) -> None:
        intents = aggregate_changesets(
            [_changeset("one", pkg_b="patch"), _changeset("two", pkg_a="patch")],
            workspaces,
        )
        assert list(intents) == ["pkg-b", "pkg-a"]

    def test_no_override(self, workspaces: dict[str, Workspace]) -> None:
        intents = aggregate_changesets([_changeset("one", pkg_a="major")], workspaces)
        assert intents["pkg-a"].version_override is None

    def test_unknown_package_raises(self, workspaces: dict[str, Workspace]) -> None:
        with pytest.raises(UnknownPackageError) as exc_info:
            aggregate_changesets(
                [_changeset("one", pkg_x="patch", pkg_a="patch", pkg_y="minor")],
                workspaces,
            )
        assert exc_info.value.names == ["pkg-x", "pkg-y"]
        assert exc_info.value.source == "changeset"
        assert "pkg-x" in str(exc_info.value)

    def test_empty(self, workspaces: dict[str, Workspace]) -> None:
        assert aggregate_changesets([], workspaces) == {}


class TestParseChangeset:
    def test_parses_releases(self) -> None:
        doc = tomlkit.parse(
            'summary = "Fix it"\n\n[releases]\nPkg_A = "minor"\npkg-b = "patch"\n'
        )
        changeset = parse_changeset("fix-it", doc)
        assert changeset.id == "fix-it"
        assert changeset.summary == "Fix it"
        assert [(r.name, r.type) for r in changeset.releases] == [
            ("pkg-a", BumpKind.MINOR),
            ("pkg-b", BumpKind.PATCH),
        ]

    def test_missing_releases(self) -> None:
        with pytest.raises(ChangesetError, match="no \\[releases\\]"):
            parse_changeset("empty", tomlkit.parse('summary = "x"\n'))

    def test_bad_bump_type(self) -> None:
        doc = tomlkit.parse('[releases]\npkg-a = "huge"\n')
        with pytest.raises(ChangesetError, match="expected one of"):
            parse_changeset("bad", doc)


class TestReadWriteChangesets:
    def test_missing_directory(self, tmp_path: Path) -> None:
        assert read_changesets(tmp_path / ".changeset") == []

    def test_reads_sorted_by_file_name(self, tmp_path: Path) -> None:
        directory = tmp_path / ".changeset"
        directory.mkdir()
        (directory / "b-second.toml").write_text('[releases]\npkg-a = "minor"\n')
        (directory / "a-first.toml").write_text('[releases]\npkg-b = "patch"\n')
        (directory / "README.md").write_text("not a changeset")

        changesets = read_changesets(directory)

        assert [c.id for c in changesets] == ["a-first", "b-second"]

    def test_write_then_read(self, tmp_path: Path) -> None:
        directory = tmp_path / ".changeset"
        changeset = Changeset(
            id="brave-owls-dance",
            summary="Add streaming",
            releases=[ChangesetRelease(name="pkg-a", type=BumpKind.MINOR)],
        )

        path = write_changeset(directory, changeset)

        assert path == directory / "brave-owls-dance.toml"
        assert 'pkg-a = "minor"' in path.read_text()
        assert read_changesets(directory) == [changeset]

    def test_write_refuses_to_overwrite(self, tmp_path: Path) -> None:
        changeset = _changeset("dup", pkg_a="patch")
        write_changeset(tmp_path, changeset)
        with pytest.raises(ChangesetError, match="already exists"):
            write_changeset(tmp_path, changeset)


class TestGenerateChangesetId:
    def test_three_words(self) -> None:
        assert len(generate_changeset_id().split("-")) == 3

    def test_deterministic_with_seeded_rng(self) -> None:
        assert generate_changeset_id(random.Random(7)) == generate_changeset_id(
            random.Random(7)
        )
