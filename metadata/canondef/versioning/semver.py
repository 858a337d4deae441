"""
Semantic version ordering for schema versions.

Versions are compared numerically field by field (major, then minor,
then patch), never lexically: "10.0.0" sorts after "2.0.0".

Invariants:
    - Only MAJOR.MINOR.PATCH with non-negative integers is accepted
    - A leading "v" and surrounding whitespace are ignored
    - Pre-release and build suffixes are rejected, not ignored

Example:
    >>> less_than("2.0.0", "10.0.0")
    True
    >>> SemanticVersion.parse("v1.4.2")
    SemanticVersion(major=1, minor=4, patch=2)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from .errors import InvalidVersionError

_VERSION_RE = re.compile(r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")

VersionLike = Union[str, "SemanticVersion"]


@dataclass(frozen=True, order=True)
class SemanticVersion:
    """Parsed MAJOR.MINOR.PATCH version with numeric ordering."""

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, value: VersionLike) -> SemanticVersion:
        """Parse a version string.

        Raises:
            InvalidVersionError: If value is not MAJOR.MINOR.PATCH
        """
        if isinstance(value, SemanticVersion):
            return value
        if not isinstance(value, str):
            raise InvalidVersionError(value)
        match = _VERSION_RE.match(value.strip())
        if match is None:
            raise InvalidVersionError(value)
        major, minor, patch = (int(part) for part in match.groups())
        return cls(major, minor, patch)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def is_valid_version(value: object) -> bool:
    """Whether value parses as a schema version."""
    if not isinstance(value, (str, SemanticVersion)):
        return False
    try:
        SemanticVersion.parse(value)
    except InvalidVersionError:
        return False
    return True


def compare_versions(a: VersionLike, b: VersionLike) -> int:
    """Return -1, 0 or 1 as a is lower than, equal to, or higher than b."""
    left = SemanticVersion.parse(a)
    right = SemanticVersion.parse(b)
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def less_than(a: VersionLike, b: VersionLike) -> bool:
    return compare_versions(a, b) < 0


def greater_than(a: VersionLike, b: VersionLike) -> bool:
    return compare_versions(a, b) > 0


def equals(a: VersionLike, b: VersionLike) -> bool:
    return compare_versions(a, b) == 0
