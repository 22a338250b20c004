"""Version-range matching.

Thin layer over ``packaging``: ranges are PEP 440 specifier sets and
versions are PEP 440 versions. Cargo-only range forms (caret ``^1.2``, bare
``1.2``, single ``=1.0``) and semver pre-release tags that PEP 440 cannot
spell (``1.0.0-alpha.beta``) are rejected at parse time. Everything else in the project only
relies on ``VersionRange.contains`` being a deterministic containment test.
"""

from __future__ import annotations

from dataclasses import dataclass

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version


class InvalidVersionError(ValueError):
    """Raised when a concrete version string cannot be parsed."""


class InvalidRangeError(ValueError):
    """Raised when a range expression cannot be parsed."""


def parse_version(text: str | Version) -> Version:
    """Parse a concrete version such as ``"1.0.3"``."""
    if isinstance(text, Version):
        return text
    try:
        return Version(str(text).strip())
    except InvalidVersion as e:
        raise InvalidVersionError(f"Invalid version: {text!r}") from e


@dataclass(frozen=True)
class VersionRange:
    """An immutable version range, e.g. ``< 1.0.7`` or ``>=1.2, <2``."""

    specifiers: SpecifierSet

    def contains(self, version: str | Version) -> bool:
        return self.specifiers.contains(parse_version(version))

    def __contains__(self, version: str | Version) -> bool:
        return self.contains(version)

    def __str__(self) -> str:
        return str(self.specifiers)


def parse_range(text: str) -> VersionRange:
    """Parse a range expression into a ``VersionRange``.

    Raises:
        InvalidRangeError: if the expression is empty or malformed.
    """
    expression = (text or "").strip()
    if not expression:
        raise InvalidRangeError("Range expression must not be empty")
    try:
        return VersionRange(SpecifierSet(expression))
    except InvalidSpecifier as e:
        raise InvalidRangeError(f"Invalid range expression: {text!r}") from e
