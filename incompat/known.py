"""Built-in set of documented incompatibilities.

Used when no definitions file is configured. Each call builds a fresh tuple
of frozen records; pass it to ``IncompatRegistry`` explicitly.
"""

from __future__ import annotations

from incompat.matching import parse_range
from incompat.models.records import (
    Bug,
    Commit,
    Crate,
    IncompatRecord,
    PullRequest,
    Rust,
)


def builtin_records() -> tuple[IncompatRecord, ...]:
    return (
        IncompatRecord(
            target=Crate("failure_derive", parse_range("< 1.0.7")),
            conflicts=Crate("quote", parse_range(">= 1.0.3")),
            reason="Broken by rename of quote::_rt to quote::_private in 1.0.3",
            references=(
                Bug("https://github.com/withoutboats/failure_derive/issues/13"),
                Bug("https://github.com/rust-lang-nursery/failure/issues/342"),
                PullRequest("https://github.com/rust-lang-nursery/failure/pull/343"),
                PullRequest("https://github.com/rust-lang-nursery/failure/pull/345"),
                Commit(
                    "https://github.com/dtolnay/quote/commit/"
                    "41543890aa76f4f8046fffac536b9445275aab26"
                ),
            ),
        ),
        IncompatRecord(
            target=Crate("failure_derive", parse_range("< 1.0.7")),
            conflicts=Rust(parse_range("< 1.31")),
            reason="Documented minimum supported rust",
            references=(
                Commit(
                    "https://github.com/rust-lang-nursery/failure/commit/"
                    "996f919f1e1741b08673b15f893221694097cc9f"
                ),
            ),
        ),
    )
