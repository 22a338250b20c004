"""Incompatibility records and their query predicates.

A record is a directed assertion: versions of ``target`` in its range are
known to conflict with versions of ``conflicts`` in its range. The target
side is queried with the ``affects*`` predicates, the conflicting side with
the ``*conflicts*`` predicates. Records are frozen values; every predicate is
pure and returns ``False`` rather than raising when a variant does not match.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TextIO, Union

from packaging.version import Version

from incompat.matching import VersionRange


# --- Targets ---


@dataclass(frozen=True)
class Crate:
    """A named package together with a range of its versions."""

    name: str
    range: VersionRange

    def __post_init__(self):
        if not self.name:
            raise ValueError("Crate name must not be empty")

    def __str__(self) -> str:
        return f"crate({self.name} {self.range})"


@dataclass(frozen=True)
class Rust:
    """A range of toolchain versions. There is only one toolchain axis."""

    range: VersionRange

    def __str__(self) -> str:
        return f"rust({self.range})"


Target = Union[Crate, Rust]


def _unknown_target(target: object) -> TypeError:
    return TypeError(f"Unknown target variant: {type(target).__name__}")


# --- References ---


@dataclass(frozen=True)
class Bug:
    """Link to an issue report."""

    url: str
    label = "Bug"

    def __str__(self) -> str:
        return f"{self.label}: {self.url}"


@dataclass(frozen=True)
class PullRequest:
    """Link to a change request."""

    url: str
    label = "Pull"

    def __str__(self) -> str:
        return f"{self.label}: {self.url}"


@dataclass(frozen=True)
class Commit:
    """Link to a single change."""

    url: str
    label = "Commit"

    def __str__(self) -> str:
        return f"{self.label}: {self.url}"


RefType = Union[Bug, PullRequest, Commit]


# --- Records ---


@dataclass(frozen=True)
class IncompatRecord:
    """A known incompatibility between ``target`` and ``conflicts``."""

    target: Target
    conflicts: Target
    reason: str | None = None
    references: tuple[RefType, ...] | None = None

    def __post_init__(self):
        # Lists are accepted for convenience but stored as tuples
        if self.references is not None and not isinstance(self.references, tuple):
            object.__setattr__(self, "references", tuple(self.references))

    # -- target side ------------------------------------------------------

    def affects_crate(self, name: str) -> bool:
        """True if the target is the crate ``name``, whatever its range."""
        return _names_crate(self.target, name)

    def affects(self, name: str, version: str | Version) -> bool:
        """True if ``name`` at ``version`` falls inside the target range."""
        return _matches_crate(self.target, name, version)

    # -- conflicting side -------------------------------------------------

    def has_conflicts(self, name: str) -> bool:
        """True if the conflicting side is the crate ``name``, whatever its range."""
        return _names_crate(self.conflicts, name)

    def conflicts_with(self, name: str, version: str | Version) -> bool:
        """True if ``name`` at ``version`` falls inside the conflicting range."""
        return _matches_crate(self.conflicts, name, version)

    def has_rust_conflicts(self) -> bool:
        if isinstance(self.conflicts, Rust):
            return True
        if isinstance(self.conflicts, Crate):
            return False
        raise _unknown_target(self.conflicts)

    def rust_conflicts(self, version: str | Version) -> bool:
        """True if the toolchain ``version`` falls inside the conflicting range."""
        if isinstance(self.conflicts, Rust):
            return self.conflicts.range.contains(version)
        if isinstance(self.conflicts, Crate):
            return False
        raise _unknown_target(self.conflicts)

    # -- rendering --------------------------------------------------------

    def render(self) -> str:
        """Render the record as operator-facing text, one item per line."""
        lines = [f"{self.target} with {self.conflicts}"]
        if self.reason is not None:
            lines.append(f"- {self.reason}")
        if self.references:
            lines.append("References:")
            lines.extend(f"- {reference}" for reference in self.references)
        return "".join(f"{line}\n" for line in lines)

    def write_to(self, stream: TextIO) -> None:
        """Write the rendering to ``stream``. Errors from the stream propagate."""
        stream.write(self.render())

    def __str__(self) -> str:
        return self.render()


def _names_crate(side: Target, name: str) -> bool:
    if isinstance(side, Crate):
        return side.name == name
    if isinstance(side, Rust):
        return False
    raise _unknown_target(side)


def _matches_crate(side: Target, name: str, version: str | Version) -> bool:
    if isinstance(side, Crate):
        return side.name == name and side.range.contains(version)
    if isinstance(side, Rust):
        return False
    raise _unknown_target(side)
