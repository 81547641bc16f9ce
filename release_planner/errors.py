"""Exceptions raised while planning a release.

Every planner failure derives from PlannerError so callers (the CLI in
particular) can report them uniformly.
"""

from __future__ import annotations

from collections.abc import Iterable


class PlannerError(Exception):
    """Base class for all release-planner errors."""


class UnknownPackageError(PlannerError):
    """A changeset, dependency edge, or linked group names a missing package.

    Attributes:
        names: Sorted offending package names.
        source: Where the reference came from ("changeset", "dependency",
                "linked").
    """

    def __init__(self, names: Iterable[str], source: str) -> None:
        self.names = sorted(set(names))
        self.source = source
        super().__init__(
            f"Unknown package(s) referenced by {source}: {', '.join(self.names)}"
        )


class InvariantViolationError(PlannerError, RuntimeError):
    """Planning did not converge. This is a bug, not an input problem."""


class InvalidRangeError(PlannerError, ValueError):
    """A declared version range could not be parsed."""


class InvalidVersionError(PlannerError, ValueError):
    """A package version is not a MAJOR[.MINOR[.PATCH]] semver version."""


class ConfigError(PlannerError):
    """The [tool.release-planner] configuration is invalid.

    Attributes:
        messages: Every validation problem found, in discovery order.
    """

    def __init__(self, messages: list[str]) -> None:
        self.messages = messages
        super().__init__(
            "Some errors occurred when validating the release-planner config:\n"
            + "\n".join(messages)
        )


class ChangesetError(PlannerError):
    """A changeset file is malformed."""


class WorkspaceError(PlannerError):
    """The workspace layout could not be discovered."""
