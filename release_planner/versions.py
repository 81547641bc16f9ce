"""Version parsing and bump arithmetic.

Handles conversion between version strings and semver objects, with
special handling for incomplete version strings (e.g., "1.0" → "1.0.0"),
plus the ordering of bump kinds used throughout planning.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

import semver

from .errors import InvalidVersionError
from .models import BumpKind, ReleaseIntent

# Bump significance: major > minor > patch > no bump (None)
_RANK: dict[BumpKind | None, int] = {
    None: 0,
    BumpKind.PATCH: 1,
    BumpKind.MINOR: 2,
    BumpKind.MAJOR: 3,
}


# Up to three numeric release parts, then optional semver prerelease/build
_VERSION_RE = re.compile(
    r"^(?P<release>\d+(?:\.\d+){0,2})"
    r"(?P<suffix>(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?)$"
)
# PEP 440 pre, post and dev segments, e.g. "1.0rc1", "1.0.0.dev3", "1.0.post1"
_PEP440_SUFFIX_RE = re.compile(
    r"\d[._-]?(?:a|b|c|rc|alpha|beta|pre|preview|dev|post)\d*$", re.IGNORECASE
)


def pep440_hint(text: str) -> str:
    """Return an explanation to append to an error if `text` looks like PEP 440."""
    if _PEP440_SUFFIX_RE.search(text):
        return " (PEP 440 pre, post and dev releases are not supported)"
    return ""


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Handles incomplete versions by padding with zeros:
    - "1" → "1.0.0"
    - "1.2" → "1.2.0"
    - "1.2.3" → "1.2.3"
    - "1.2.3-rc.1" → "1.2.3-rc.1"

    A leading "v" is ignored.

    Raises:
        InvalidVersionError: For anything else, including versions with more
            than three release parts and PEP 440 suffixes like "1.0.0rc1".
    """
    text = version_str.strip().lstrip("vV")
    m = _VERSION_RE.match(text)
    if not m:
        raise InvalidVersionError(
            f"Invalid version {version_str!r}: expected MAJOR[.MINOR[.PATCH]] "
            f"with optional -prerelease and +build parts{pep440_hint(text)}"
        )
    parts = m.group("release").split(".")
    # Pad with zeros to ensure we have 3 parts
    while len(parts) < 3:
        parts.append("0")
    try:
        return semver.Version.parse(".".join(parts) + m.group("suffix"))
    except ValueError as exc:
        raise InvalidVersionError(f"Invalid version {version_str!r}: {exc}") from exc


def bump_rank(kind: BumpKind | None) -> int:
    """Return the significance of a bump kind (None ranks lowest)."""
    return _RANK[kind]


def combine(a: BumpKind | None, b: BumpKind | None) -> BumpKind | None:
    """Return the more significant of two bump kinds.

    Used whenever two causes independently ask for a bump on the same
    package. combine(x, x) == x and the result is never lower than either
    argument.
    """
    return a if bump_rank(a) >= bump_rank(b) else b


def bump_version(version_str: str, kind: BumpKind) -> str:
    """Apply a bump to a version and return the new version string.

    Prerelease and build metadata are dropped.

    Examples:
        "1.2.3", patch → "1.2.4"
        "1.2.3", minor → "1.3.0"
        "1.2.3", major → "2.0.0"
        "1.0", patch → "1.0.1"
    """
    v = parse_version(version_str)
    if kind is BumpKind.MAJOR:
        return str(semver.Version(v.major + 1, 0, 0))
    if kind is BumpKind.MINOR:
        return str(semver.Version(v.major, v.minor + 1, 0))
    return str(semver.Version(v.major, v.minor, v.patch + 1))


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings: negative if a < b, 0 if equal, else positive."""
    return parse_version(a).compare(parse_version(b))


def max_version(versions: Iterable[str]) -> str:
    """Return the highest of the given versions by semver ordering."""
    return max(versions, key=parse_version)


def classify_jump(old: str, new: str) -> BumpKind:
    """Classify the jump between two versions as a bump kind.

    Returns the smallest kind whose increment is at least as large as the
    jump, for display only: the actual new version may not be a clean
    increment of the old one.

    Examples:
        "1.0.0" → "1.1.0" is minor
        "1.0.0" → "2.1.0" is major
        "1.0.5" → "1.0.9" is patch
    """
    o, n = parse_version(old), parse_version(new)
    if n.major > o.major:
        return BumpKind.MAJOR
    if n.minor > o.minor:
        return BumpKind.MINOR
    return BumpKind.PATCH


def planned_version(intent: ReleaseIntent, current: str) -> str:
    """Return the version an intent will release, given the current version.

    The bump type and any linked-group override are both honored and the
    higher result wins, so raising the type after an override can never
    lower or freeze the planned version.
    """
    candidates: list[str] = []
    if intent.type is not None:
        candidates.append(bump_version(current, intent.type))
    if intent.version_override is not None:
        candidates.append(intent.version_override)
    return max_version(candidates) if candidates else current
