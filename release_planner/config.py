"""Configuration reader for release-planner.

Settings live in the workspace root's pyproject.toml:

    [tool.release-planner]
    linked = [["pkg-a", "pkg-b"]]
    changeset-dir = ".changeset"

Validation collects every problem before failing, so users can fix their
configuration in one go.
"""

from __future__ import annotations

import difflib
from collections.abc import Collection, Mapping
from typing import Any

from packaging.utils import canonicalize_name

from .errors import ConfigError
from .models import PlannerConfig

# Keys understood inside [tool.release-planner]
VALID_KEYS: frozenset[str] = frozenset(
    {"changeset-dir", "linked", "peer-dependencies"}
)


def _unknown_key_message(key: str) -> str:
    message = f"Unknown key {key!r} in [tool.release-planner]."
    close = difflib.get_close_matches(key, sorted(VALID_KEYS), n=1)
    if close:
        message += f" Did you mean {close[0]!r}?"
    return message


def _validate_linked(linked: Any, package_names: Collection[str]) -> list[str]:
    if not isinstance(linked, list) or not all(
        isinstance(group, list) and all(isinstance(name, str) for name in group)
        for group in linked
    ):
        return [
            f"The `linked` option is set as {linked!r} when the only valid "
            "values are undefined or an array of arrays of package names"
        ]

    messages: list[str] = []
    seen: set[str] = set()
    duplicated: list[str] = []
    for group in linked:
        for raw_name in group:
            name = canonicalize_name(raw_name)
            if name not in package_names:
                messages.append(
                    f'The package "{raw_name}" is specified in the `linked` option '
                    "but it is not found in the project. You may have misspelled "
                    "the package name."
                )
            if name in seen and name not in duplicated:
                duplicated.append(name)
            seen.add(name)
    for name in duplicated:
        messages.append(
            f'The package "{name}" is in multiple sets of linked packages. '
            "Packages can only be in a single set of linked packages."
        )
    return messages


def parse_config(
    table: Mapping[str, Any], package_names: Collection[str]
) -> PlannerConfig:
    """Validate a [tool.release-planner] table and build a PlannerConfig.

    Args:
        table: The raw table (empty if the section is missing).
        package_names: Canonical names of all workspace packages.

    Raises:
        ConfigError: Listing every problem found.
    """
    messages = [_unknown_key_message(key) for key in table if key not in VALID_KEYS]

    linked = table.get("linked")
    if linked is not None:
        messages.extend(_validate_linked(linked, package_names))

    changeset_dir = table.get("changeset-dir", ".changeset")
    if not isinstance(changeset_dir, str):
        messages.append(
            f"The `changeset-dir` option is set as {changeset_dir!r} but it can "
            "only be set as a string"
        )

    if messages:
        raise ConfigError(messages)

    return PlannerConfig(
        linked=[[canonicalize_name(n) for n in group] for group in linked or []],
        changeset_dir=str(changeset_dir),
    )
