"""Semver range satisfaction.

Implements the range grammar used by workspace manifests:

- alternatives separated by "||"
- comparators separated by whitespace or commas, all of which must hold
- primitive comparators: <, <=, >, >=, =, ==, !=
- caret (^1.2.3), tilde (~1.2.3) and compatible release (~=1.2)
- x-ranges and partial versions (1.x, 1.2.*, *, 1.2)
- hyphen ranges (1.2.3 - 2.3.4)

Prerelease versions only satisfy a comparator set when one of its
comparators names a prerelease of the same major.minor.patch, so
"^1.0.0" does not match "1.5.0-rc.1".

PEP 440 pre, post and dev segments (">=1.0rc1", ">=1.0.0.dev0") have no
semver equivalent and raise InvalidRangeError. Semver prereleases
(">=1.0.0-rc.1") are fine.
"""

from __future__ import annotations

import re
from typing import NamedTuple

import semver

from .errors import InvalidRangeError
from .versions import parse_version, pep440_hint

# Operator followed by whitespace, e.g. ">= 1.0" → ">=1.0"
_OP_SPACE_RE = re.compile(r"(<=|>=|==|!=|~=|<|>|=|\^|~)\s+")
_HYPHEN_RE = re.compile(r"^\s*(\S+)\s+-\s+(\S+)\s*$")
_COMPARATOR_RE = re.compile(r"^(<=|>=|==|!=|~=|<|>|=|\^|~)?(.+)$")
_PARTIAL_RE = re.compile(
    r"^v?(?P<major>\d+|[xX*])"
    r"(?:\.(?P<minor>\d+|[xX*]))?"
    r"(?:\.(?P<patch>\d+|[xX*]))?"
    r"(?:-(?P<pre>[0-9A-Za-z.-]+))?"
    r"(?:\+[0-9A-Za-z.-]+)?$"
)
_WILDCARDS = {"x", "X", "*"}


class _Partial(NamedTuple):
    """A possibly incomplete version; None marks a missing or wildcard part."""

    major: int | None
    minor: int | None
    patch: int | None
    prerelease: str | None

    @property
    def is_full(self) -> bool:
        return self.patch is not None

    def floor(self) -> semver.Version:
        return semver.Version(
            self.major or 0,
            self.minor or 0,
            self.patch or 0,
            prerelease=self.prerelease if self.is_full else None,
        )

    def next_up(self) -> semver.Version:
        """First version above everything this partial matches."""
        if self.minor is None:
            return semver.Version(self.major + 1, 0, 0)
        return semver.Version(self.major, self.minor + 1, 0)


class _Constraint(NamedTuple):
    op: str
    version: semver.Version
    upper: semver.Version | None = None


# Matches nothing a comparator set can allow
_NOTHING = _Constraint("<", semver.Version(0, 0, 0))


def _parse_partial(text: str, range_str: str) -> _Partial:
    m = _PARTIAL_RE.match(text)
    if not m:
        raise InvalidRangeError(
            f"Invalid version {text!r} in range {range_str!r}{pep440_hint(text)}"
        )

    def part(name: str) -> int | None:
        value = m.group(name)
        if value is None or value in _WILDCARDS:
            return None
        return int(value)

    major, minor, patch = part("major"), part("minor"), part("patch")
    # Anything after a wildcard is a wildcard too
    if major is None:
        minor = None
    if minor is None:
        patch = None
    pre = m.group("pre") if patch is not None else None
    return _Partial(major, minor, patch, pre)


def _expand(op: str, p: _Partial, range_str: str) -> list[_Constraint]:
    """Desugar one comparator into primitive constraints."""
    if op in ("", "=", "=="):
        if p.major is None:
            return []
        if p.is_full:
            return [_Constraint("==", p.floor())]
        return [_Constraint(">=", p.floor()), _Constraint("<", p.next_up())]

    if op == "!=":
        if p.major is None:
            return [_NOTHING]
        if p.is_full:
            return [_Constraint("!=", p.floor())]
        return [_Constraint("out", p.floor(), p.next_up())]

    if op == "^":
        if p.major is None:
            return []
        if p.major > 0 or p.minor is None:
            upper = semver.Version(p.major + 1, 0, 0)
        elif p.minor > 0 or p.patch is None:
            upper = semver.Version(0, p.minor + 1, 0)
        else:
            upper = semver.Version(0, 0, p.patch + 1)
        return [_Constraint(">=", p.floor()), _Constraint("<", upper)]

    if op == "~":
        if p.major is None:
            return []
        if p.minor is None:
            upper = semver.Version(p.major + 1, 0, 0)
        else:
            upper = semver.Version(p.major, p.minor + 1, 0)
        return [_Constraint(">=", p.floor()), _Constraint("<", upper)]

    if op == "~=":
        # Compatible release needs at least major.minor
        if p.major is None or p.minor is None:
            raise InvalidRangeError(
                f"'~=' needs at least two version components in {range_str!r}"
            )
        if p.patch is None:
            upper = semver.Version(p.major + 1, 0, 0)
        else:
            upper = semver.Version(p.major, p.minor + 1, 0)
        return [_Constraint(">=", p.floor()), _Constraint("<", upper)]

    if op == ">":
        if p.major is None:
            return [_NOTHING]
        if p.is_full:
            return [_Constraint(">", p.floor())]
        return [_Constraint(">=", p.next_up())]

    if op == ">=":
        if p.major is None:
            return []
        return [_Constraint(">=", p.floor())]

    if op == "<":
        if p.major is None:
            return [_NOTHING]
        return [_Constraint("<", p.floor())]

    if op == "<=":
        if p.major is None:
            return []
        if p.is_full:
            return [_Constraint("<=", p.floor())]
        return [_Constraint("<", p.next_up())]

    raise InvalidRangeError(f"Unknown operator {op!r} in range {range_str!r}")


def _parse_alternative(text: str, range_str: str) -> list[_Constraint]:
    hyphen = _HYPHEN_RE.match(text)
    if hyphen:
        low = _parse_partial(hyphen.group(1), range_str)
        high = _parse_partial(hyphen.group(2), range_str)
        constraints = [] if low.major is None else [_Constraint(">=", low.floor())]
        if high.major is None:
            return constraints
        if high.is_full:
            return [*constraints, _Constraint("<=", high.floor())]
        return [*constraints, _Constraint("<", high.next_up())]

    constraints: list[_Constraint] = []
    for token in re.split(r"[\s,]+", _OP_SPACE_RE.sub(r"\1", text.strip())):
        if not token:
            continue
        m = _COMPARATOR_RE.match(token)
        if not m:
            raise InvalidRangeError(f"Invalid comparator {token!r} in {range_str!r}")
        op, version_text = m.group(1) or "", m.group(2)
        constraints.extend(
            _expand(op, _parse_partial(version_text, range_str), range_str)
        )
    return constraints


def parse_range(range_str: str) -> list[list[_Constraint]]:
    """Parse a range into alternatives of primitive constraints.

    Raises:
        InvalidRangeError: If any part of the range is malformed.
    """
    return [_parse_alternative(alt, range_str) for alt in range_str.split("||")]


def _test(c: _Constraint, v: semver.Version) -> bool:
    cmp = v.compare(c.version)
    if c.op == "==":
        return cmp == 0
    if c.op == "!=":
        return cmp != 0
    if c.op == ">":
        return cmp > 0
    if c.op == ">=":
        return cmp >= 0
    if c.op == "<":
        return cmp < 0
    if c.op == "<=":
        return cmp <= 0
    # "out": outside the half-open interval [version, upper)
    return cmp < 0 or v.compare(c.upper) >= 0


def _test_set(constraints: list[_Constraint], v: semver.Version) -> bool:
    if not all(_test(c, v) for c in constraints):
        return False
    if not v.prerelease:
        return True
    # A prerelease is only allowed when the range opts into that exact tuple
    return any(
        c.version.prerelease
        and (c.version.major, c.version.minor, c.version.patch)
        == (v.major, v.minor, v.patch)
        for c in constraints
    )


def satisfies_range(version: str, range_str: str) -> bool:
    """Return True if version falls within the declared range.

    Examples:
        satisfies_range("1.4.0", "^1.0.0") → True
        satisfies_range("2.0.0", "^1.0.0") → False
        satisfies_range("1.1.0", "~1.0.0") → False
        satisfies_range("1.5.0", ">=1.0,<2.0") → True
        satisfies_range("9.9.9", "") → True
    """
    v = parse_version(version)
    return any(_test_set(alt, v) for alt in parse_range(range_str))
