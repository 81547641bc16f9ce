"""CLI entry point for release-planner."""

from __future__ import annotations

from pathlib import Path

import click
from packaging.utils import canonicalize_name

from release_planner.changesets import generate_changeset_id, write_changeset
from release_planner.errors import PlannerError
from release_planner.models import BumpKind, Changeset, ChangesetRelease
from release_planner.output import format_plan, step
from release_planner.pipeline import discover_packages, load_config, plan_release

_root_option = click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Workspace root containing the root pyproject.toml.",
)


def _parse_release(value: str) -> ChangesetRelease:
    name, sep, bump = value.rpartition(":")
    if not sep or not name:
        raise click.BadParameter(f"expected PKG:TYPE, got {value!r}")
    try:
        return ChangesetRelease(name=canonicalize_name(name), type=BumpKind(bump))
    except ValueError:
        raise click.BadParameter(
            f"bump type for {name} must be patch, minor or major, got {bump!r}"
        ) from None


@click.group()
@click.version_option(package_name="release-planner")
def cli() -> None:
    """Plan coordinated version bumps across a uv workspace from changesets."""


@cli.command()
@_root_option
@click.option("--json", "as_json", is_flag=True, help="Print the plan as JSON.")
def plan(root: Path, as_json: bool) -> None:
    """Show which packages will be released and at what versions."""
    try:
        release_plan = plan_release(root, quiet=as_json)
    except PlannerError as exc:
        raise click.ClickException(str(exc)) from exc

    if as_json:
        click.echo(release_plan.model_dump_json(indent=2))
        return

    step("Release plan")
    click.echo(format_plan(release_plan))


@cli.command()
@_root_option
@click.argument("releases", nargs=-1, required=True)
@click.option("-m", "--message", "summary", default="", help="Changeset summary.")
@click.option("--id", "changeset_id", default=None, help="Changeset id (file stem).")
def add(
    root: Path, releases: tuple[str, ...], summary: str, changeset_id: str | None
) -> None:
    """Write a changeset, e.g. `release-planner add pkg-a:minor pkg-b:patch`."""
    parsed = [_parse_release(value) for value in releases]
    try:
        packages = discover_packages(root, quiet=True)
        config = load_config(root, set(packages))
        unknown = sorted(r.name for r in parsed if r.name not in packages)
        if unknown:
            raise click.ClickException(
                f"Unknown package(s): {', '.join(unknown)}. "
                f"Known packages: {', '.join(sorted(packages))}"
            )
        changeset = Changeset(
            id=changeset_id or generate_changeset_id(),
            summary=summary,
            releases=parsed,
        )
        path = write_changeset(root / config.changeset_dir, changeset)
    except PlannerError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"✓ Wrote changeset to {path.relative_to(root)}")
