"""Tests for incompatibility records: predicates and rendering."""

import io

import pytest

from incompat.known import builtin_records
from incompat.matching import parse_range
from incompat.models.records import (
    Bug,
    Commit,
    Crate,
    IncompatRecord,
    PullRequest,
    Rust,
)

FAILURE_DERIVE, FAILURE_BADRUST = builtin_records()


def _record(**overrides) -> IncompatRecord:
    """Build a crate-vs-crate record with optional overrides."""
    fields = {
        "target": Crate("alpha", parse_range(">= 1.0, < 2.0")),
        "conflicts": Crate("beta", parse_range(">= 0.5")),
    }
    fields.update(overrides)
    return IncompatRecord(**fields)


# --- affects_crate ---


def test_affects_crate_match():
    assert FAILURE_DERIVE.affects_crate("failure_derive")
    assert FAILURE_BADRUST.affects_crate("failure_derive")


def test_affects_crate_mismatch():
    assert not FAILURE_DERIVE.affects_crate("failure_deriv")
    assert not FAILURE_BADRUST.affects_crate("failure_deriv")


def test_affects_crate_is_case_sensitive():
    assert not FAILURE_DERIVE.affects_crate("Failure_Derive")


def test_affects_crate_ignores_range():
    record = _record(target=Crate("alpha", parse_range("< 0.0.1")))
    assert record.affects_crate("alpha")


def test_affects_crate_false_for_rust_target():
    record = _record(target=Rust(parse_range("< 1.31")))
    assert not record.affects_crate("alpha")
    assert not record.affects_crate("rust")


# --- affects ---


def test_affects_match():
    assert FAILURE_DERIVE.affects("failure_derive", "1.0.3")
    assert FAILURE_BADRUST.affects("failure_derive", "1.0.3")


def test_affects_mismatch():
    assert not FAILURE_DERIVE.affects("failure_derive", "1.0.7")
    assert not FAILURE_BADRUST.affects("failure_derive", "1.0.7")


def test_affects_other_name():
    assert not FAILURE_DERIVE.affects("quote", "1.0.3")


def test_affects_false_for_rust_target():
    record = _record(target=Rust(parse_range("< 1.31")))
    assert not record.affects("alpha", "1.0.0")


# --- has_conflicts ---


def test_has_conflicts_match():
    assert FAILURE_DERIVE.has_conflicts("quote")


def test_has_conflicts_mismatch():
    assert not FAILURE_DERIVE.has_conflicts("quot")
    assert not FAILURE_BADRUST.has_conflicts("quot")
    assert not FAILURE_BADRUST.has_conflicts("quote")


def test_has_conflicts_ignores_target():
    record = _record(target=Crate("beta", parse_range(">= 0")))
    assert record.has_conflicts("beta")
    assert not record.has_conflicts("alpha")


# --- conflicts_with ---


def test_conflicts_with_match():
    assert FAILURE_DERIVE.conflicts_with("quote", "1.0.3")


def test_conflicts_with_mismatch():
    assert not FAILURE_DERIVE.conflicts_with("quote", "1.0.2")
    assert not FAILURE_BADRUST.conflicts_with("quote", "1.0.2")
    assert not FAILURE_BADRUST.conflicts_with("quote", "1.0.3")


def test_conflicts_with_only_checks_conflicting_side():
    assert not FAILURE_DERIVE.conflicts_with("failure_derive", "1.0.3")


# --- rust ---


def test_has_rust_conflicts():
    assert FAILURE_BADRUST.has_rust_conflicts()
    assert not FAILURE_DERIVE.has_rust_conflicts()


def test_has_rust_conflicts_ignores_reason_and_references():
    record = _record(conflicts=Rust(parse_range(">= 0")))
    assert record.has_rust_conflicts()


def test_rust_conflicts():
    assert FAILURE_BADRUST.rust_conflicts("1.30.0")
    assert not FAILURE_BADRUST.rust_conflicts("1.31.0")
    assert not FAILURE_DERIVE.rust_conflicts("1.30.0")


def test_rust_target_is_not_a_rust_conflict():
    record = _record(target=Rust(parse_range("< 1.31")))
    assert not record.has_rust_conflicts()
    assert not record.rust_conflicts("1.30.0")


def test_unknown_variant_is_rejected():
    record = _record(conflicts="rust < 1.31")
    with pytest.raises(TypeError):
        record.has_rust_conflicts()


# --- construction ---


def test_crate_name_required():
    with pytest.raises(ValueError):
        Crate("", parse_range("< 1"))


def test_references_stored_as_tuple():
    record = _record(references=[Bug("https://example.com/1"), Commit("https://example.com/2")])
    assert record.references == (Bug("https://example.com/1"), Commit("https://example.com/2"))


def test_records_are_frozen_values():
    assert FAILURE_DERIVE == builtin_records()[0]
    assert hash(FAILURE_DERIVE) == hash(builtin_records()[0])
    with pytest.raises(AttributeError):
        FAILURE_DERIVE.reason = "changed"


# --- rendering ---


def test_target_rendering():
    assert str(Crate("quote", parse_range(">= 1.0.3"))) == "crate(quote >=1.0.3)"
    assert str(Rust(parse_range("< 1.31"))) == "rust(<1.31)"


def test_reference_rendering():
    assert str(Bug("https://b")) == "Bug: https://b"
    assert str(PullRequest("https://p")) == "Pull: https://p"
    assert str(Commit("https://c")) == "Commit: https://c"


def test_record_rendering():
    assert FAILURE_BADRUST.render() == (
        "crate(failure_derive <1.0.7) with rust(<1.31)\n"
        "- Documented minimum supported rust\n"
        "References:\n"
        "- Commit: https://github.com/rust-lang-nursery/failure/commit/"
        "996f919f1e1741b08673b15f893221694097cc9f\n"
    )


def test_record_rendering_keeps_reference_order():
    lines = FAILURE_DERIVE.render().splitlines()
    assert lines[0] == "crate(failure_derive <1.0.7) with crate(quote >=1.0.3)"
    assert lines[1] == "- Broken by rename of quote::_rt to quote::_private in 1.0.3"
    assert lines[2] == "References:"
    assert [line.split(":", 1)[0] for line in lines[3:]] == [
        "- Bug",
        "- Bug",
        "- Pull",
        "- Pull",
        "- Commit",
    ]


def test_rendering_without_reason_or_references():
    assert _record().render() == "crate(alpha <2.0,>=1.0) with crate(beta >=0.5)\n"


def test_empty_and_absent_references_render_alike():
    assert _record(references=()).render() == _record(references=None).render()


def test_reason_toggles_only_its_line():
    without = _record(references=[Bug("https://b")]).render().splitlines()
    with_reason = _record(reason="why", references=[Bug("https://b")]).render().splitlines()
    assert with_reason == [without[0], "- why"] + without[1:]


def test_rendering_is_deterministic():
    assert str(FAILURE_DERIVE) == str(FAILURE_DERIVE) == FAILURE_DERIVE.render()


def test_write_to_stream():
    buf = io.StringIO()
    FAILURE_BADRUST.write_to(buf)
    assert buf.getvalue() == FAILURE_BADRUST.render()


def test_write_to_propagates_sink_errors():
    buf = io.StringIO()
    buf.close()
    with pytest.raises(ValueError):
        FAILURE_BADRUST.write_to(buf)
