"""Changesets: reading, writing and aggregating release intent.

A changeset is a small TOML file in the changeset directory (".changeset"
by default). Its file stem is the changeset id:

    summary = "Add streaming support"

    [releases]
    pkg-a = "minor"
    pkg-b = "patch"

Aggregation collapses every changeset into one ReleaseIntent per package,
keeping the highest requested bump and the ids that asked for it.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import tomlkit
from packaging.utils import canonicalize_name

from .errors import ChangesetError, UnknownPackageError
from .models import BumpKind, Changeset, ChangesetRelease, ReleaseIntent, Workspace
from .toml import load_toml, save_toml
from .versions import combine

# Word lists for human-friendly changeset ids ("brave-owls-dance")
_ADJECTIVES = [
    "brave", "calm", "eager", "fancy", "gentle", "happy", "jolly", "kind",
    "lazy", "mighty", "proud", "quick", "silly", "strange", "tidy", "witty",
]
_NOUNS = [
    "apples", "bears", "cats", "dogs", "eels", "foxes", "geese", "hats",
    "kites", "lamps", "moons", "owls", "pens", "rivers", "stars", "words",
]
_VERBS = [
    "bake", "combine", "dance", "delight", "dream", "fly", "glow", "jump",
    "laugh", "march", "relax", "sing", "sleep", "swim", "talk", "wave",
]


def aggregate_changesets(
    changesets: Iterable[Changeset], workspaces: Mapping[str, Workspace]
) -> dict[str, ReleaseIntent]:
    """Collapse changesets into an initial intent per package.

    For each (package, bump) pair, the package's bump becomes the highest
    requested so far and the changeset id is recorded once. The returned
    dict is ordered by first mention, which later serves as the tie-break
    for output order.

    Args:
        changesets: Changesets in the order they should be attributed.
        workspaces: Map of package name → Workspace.

    Returns:
        Map of package name → ReleaseIntent.

    Raises:
        UnknownPackageError: If any changeset names a package that is not
            in the workspace. All offending names are reported at once.
    """
    changesets = list(changesets)
    unknown = [
        release.name
        for changeset in changesets
        for release in changeset.releases
        if release.name not in workspaces
    ]
    if unknown:
        raise UnknownPackageError(unknown, "changeset")

    intents: dict[str, ReleaseIntent] = {}
    for changeset in changesets:
        for release in changeset.releases:
            intent = intents.setdefault(release.name, ReleaseIntent(name=release.name))
            intent.type = combine(intent.type, release.type)
            if changeset.id not in intent.changesets:
                intent.changesets.append(changeset.id)
    return intents


def parse_changeset(changeset_id: str, doc: Mapping[str, Any]) -> Changeset:
    """Build a Changeset from a parsed TOML document.

    Raises:
        ChangesetError: If the releases table is missing or a bump type is
            not one of patch, minor, major.
    """
    raw_releases = doc.get("releases")
    if not isinstance(raw_releases, Mapping) or not raw_releases:
        raise ChangesetError(f"Changeset {changeset_id!r} has no [releases] entries")

    releases: list[ChangesetRelease] = []
    for name, bump in raw_releases.items():
        try:
            kind = BumpKind(str(bump))
        except ValueError:
            raise ChangesetError(
                f"Changeset {changeset_id!r} requests {bump!r} for {name}; "
                "expected one of patch, minor, major"
            ) from None
        releases.append(ChangesetRelease(name=canonicalize_name(name), type=kind))

    return Changeset(
        id=changeset_id, summary=str(doc.get("summary", "")), releases=releases
    )


def read_changesets(directory: Path) -> list[Changeset]:
    """Read every changeset file in a directory, sorted by file name.

    A missing directory simply means there are no changesets.
    """
    if not directory.is_dir():
        return []
    return [
        parse_changeset(path.stem, load_toml(path))
        for path in sorted(directory.glob("*.toml"))
    ]


def write_changeset(directory: Path, changeset: Changeset) -> Path:
    """Write a changeset file and return its path.

    Raises:
        ChangesetError: If a changeset with the same id already exists.
    """
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{changeset.id}.toml"
    if path.exists():
        raise ChangesetError(f"Changeset {changeset.id!r} already exists at {path}")

    doc = tomlkit.document()
    doc["summary"] = changeset.summary
    releases = tomlkit.table()
    for release in changeset.releases:
        releases[release.name] = release.type.value
    doc["releases"] = releases
    save_toml(path, doc)
    return path


def generate_changeset_id(rng: random.Random | None = None) -> str:
    """Return a random human-friendly id like "strange-words-combine"."""
    rng = rng or random.Random()
    return "-".join(rng.choice(words) for words in (_ADJECTIVES, _NOUNS, _VERBS))
