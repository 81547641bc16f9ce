"""Tests for release_planner.cli."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest
import tomlkit
from click.testing import CliRunner

from release_planner.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def root(write_workspace: Callable[..., Path]) -> Path:
    root = write_workspace(
        {
            "pkg-a": 'version = "1.0.0"\n',
            "pkg-b": 'version = "1.0.0"\ndependencies = ["pkg-a>=1.0,<2.0"]\n',
        }
    )
    (root / ".changeset").mkdir()
    (root / ".changeset" / "break-things.toml").write_text(
        '[releases]\npkg-a = "major"\n'
    )
    return root


class TestPlan:
    """Tests for the plan command."""

    def test_prints_plan(self, runner: CliRunner, root: Path) -> None:
        result = runner.invoke(cli, ["plan", "--root", str(root)])

        assert result.exit_code == 0, result.output
        assert "Release plan" in result.output
        assert "pkg-a: 1.0.0 → 2.0.0 (major) [break-things]" in result.output
        assert "pkg-b: 1.0.0 → 1.0.1 (patch) [forced]" in result.output

    def test_json_output(self, runner: CliRunner, root: Path) -> None:
        result = runner.invoke(cli, ["plan", "--json", "--root", str(root)])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["changesets"][0]["id"] == "break-things"
        assert data["releases"] == [
            {
                "name": "pkg-a",
                "type": "major",
                "old_version": "1.0.0",
                "new_version": "2.0.0",
                "changesets": ["break-things"],
            },
            {
                "name": "pkg-b",
                "type": "patch",
                "old_version": "1.0.0",
                "new_version": "1.0.1",
                "changesets": [],
            },
        ]

    def test_defaults_to_current_directory(
        self, runner: CliRunner, root: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(root)
        result = runner.invoke(cli, ["plan"])
        assert result.exit_code == 0, result.output
        assert "pkg-a: 1.0.0 → 2.0.0" in result.output

    def test_planner_error_is_reported(self, runner: CliRunner, root: Path) -> None:
        typo = root / ".changeset" / "typo.toml"
        typo.write_text('[releases]\npkg-zzz = "patch"\n')

        result = runner.invoke(cli, ["plan", "--root", str(root)])

        assert result.exit_code == 1
        assert "Error: Unknown package(s) referenced by changeset: pkg-zzz" in (
            result.output
        )

    def test_pep440_version_is_reported(
        self, runner: CliRunner, write_workspace: Callable[..., Path]
    ) -> None:
        root = write_workspace({"pkg-a": 'version = "1.0.0rc1"\n'})

        result = runner.invoke(cli, ["plan", "--json", "--root", str(root)])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Error: Package pkg-a: Invalid version '1.0.0rc1'" in result.output
        assert "PEP 440" in result.output

    def test_pep440_range_is_reported(self, runner: CliRunner, root: Path) -> None:
        (root / "packages" / "pkg-b" / "pyproject.toml").write_text(
            '[project]\nname = "pkg-b"\nversion = "1.0.0"\n'
            'dependencies = ["pkg-a>=1.0.0.dev0"]\n'
        )

        result = runner.invoke(cli, ["plan", "--root", str(root)])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Error: pkg-b depends on pkg-a" in result.output


class TestAdd:
    """Tests for the add command."""

    def test_writes_changeset(self, runner: CliRunner, root: Path) -> None:
        result = runner.invoke(
            cli,
            [
                "add",
                "--root",
                str(root),
                "--id",
                "new-api",
                "-m",
                "Add a new API",
                "Pkg_B:minor",
                "pkg-a:patch",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "✓ Wrote changeset to .changeset/new-api.toml" in result.output
        doc = tomlkit.parse((root / ".changeset" / "new-api.toml").read_text())
        assert doc["summary"] == "Add a new API"
        assert dict(doc["releases"]) == {"pkg-b": "minor", "pkg-a": "patch"}

    def test_generated_id(
        self, runner: CliRunner, root: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(root)

        result = runner.invoke(cli, ["add", "pkg-a:patch"])

        assert result.exit_code == 0, result.output
        assert len(list((root / ".changeset").glob("*.toml"))) == 2

    def test_written_changeset_is_planned(self, runner: CliRunner, root: Path) -> None:
        runner.invoke(cli, ["add", "--root", str(root), "--id", "b", "pkg-b:minor"])

        result = runner.invoke(cli, ["plan", "--root", str(root)])

        assert "pkg-b: 1.0.0 → 1.1.0 (minor) [b]" in result.output

    def test_bad_bump_type(self, runner: CliRunner, root: Path) -> None:
        result = runner.invoke(cli, ["add", "--root", str(root), "pkg-a:huge"])
        assert result.exit_code == 2
        assert "must be patch, minor or major" in result.output

    def test_missing_bump_type(self, runner: CliRunner, root: Path) -> None:
        result = runner.invoke(cli, ["add", "--root", str(root), "pkg-a"])
        assert result.exit_code == 2
        assert "expected PKG:TYPE" in result.output

    def test_unknown_package(self, runner: CliRunner, root: Path) -> None:
        result = runner.invoke(cli, ["add", "--root", str(root), "pkg-zzz:patch"])

        assert result.exit_code == 1
        assert "Unknown package(s): pkg-zzz" in result.output
        assert "Known packages: pkg-a, pkg-b" in result.output

    def test_existing_id_is_refused(self, runner: CliRunner, root: Path) -> None:
        result = runner.invoke(
            cli, ["add", "--root", str(root), "--id", "break-things", "pkg-a:patch"]
        )

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_requires_a_release(self, runner: CliRunner, root: Path) -> None:
        result = runner.invoke(cli, ["add", "--root", str(root)])
        assert result.exit_code == 2
