"""In-memory registry of incompatibility records."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator

from packaging.version import Version

from incompat.models.records import IncompatRecord

Predicate = Callable[[IncompatRecord], bool]


class IncompatRegistry:
    """An ordered, read-only collection of ``IncompatRecord`` values.

    Queries return records in the order they were given and never modify
    the collection, so a populated registry can be shared between readers.
    """

    def __init__(self, records: Iterable[IncompatRecord] = ()):
        self._records: tuple[IncompatRecord, ...] = tuple(records)

    @property
    def records(self) -> tuple[IncompatRecord, ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[IncompatRecord]:
        return iter(self._records)

    # -- generic queries --------------------------------------------------

    def filter(self, predicate: Predicate) -> list[IncompatRecord]:
        """Return every record for which ``predicate`` holds, in input order."""
        return [record for record in self._records if predicate(record)]

    def first(self, predicate: Predicate) -> IncompatRecord | None:
        """Return the first record for which ``predicate`` holds, or None."""
        return next((record for record in self._records if predicate(record)), None)

    # -- target side ------------------------------------------------------

    def affecting_crate(self, name: str) -> list[IncompatRecord]:
        return self.filter(lambda r: r.affects_crate(name))

    def affecting(self, name: str, version: str | Version) -> list[IncompatRecord]:
        return self.filter(lambda r: r.affects(name, version))

    # -- conflicting side -------------------------------------------------

    def with_conflicts(self, name: str) -> list[IncompatRecord]:
        return self.filter(lambda r: r.has_conflicts(name))

    def conflicting_with(self, name: str, version: str | Version) -> list[IncompatRecord]:
        return self.filter(lambda r: r.conflicts_with(name, version))

    def with_rust_conflicts(self) -> list[IncompatRecord]:
        return self.filter(lambda r: r.has_rust_conflicts())

    def rust_conflicting(self, version: str | Version) -> list[IncompatRecord]:
        return self.filter(lambda r: r.rust_conflicts(version))

    # -- combined ---------------------------------------------------------

    def conflicts_for(
        self,
        name: str,
        version: str | Version,
        rust_version: str | Version | None = None,
    ) -> list[IncompatRecord]:
        """Records that apply to ``name`` at ``version``.

        Crate conflicts are reported whenever the target matches. Toolchain
        conflicts are reported only when ``rust_version`` is given and lies in
        the conflicting range.
        """

        def applies(record: IncompatRecord) -> bool:
            if not record.affects(name, version):
                return False
            if record.has_rust_conflicts():
                return rust_version is not None and record.rust_conflicts(rust_version)
            return True

        return self.filter(applies)
