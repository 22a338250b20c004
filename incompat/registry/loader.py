"""Definition-file loader — builds records from YAML documents.

Layout of a definitions file::

    incompatibilities:
      - target: {crate: failure_derive, range: "< 1.0.7"}
        conflicts: {rust: "< 1.31"}
        reason: Documented minimum supported rust
        references:
          - {commit: "https://github.com/..."}

Validation runs before construction and collects every issue it finds, so a
broken file is reported in one pass rather than one error at a time.
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import urlsplit

import yaml

from incompat.matching import InvalidRangeError, parse_range
from incompat.models.records import (
    Bug,
    Commit,
    Crate,
    IncompatRecord,
    PullRequest,
    RefType,
    Rust,
    Target,
)
from incompat.registry.registry import IncompatRegistry

logger = logging.getLogger(__name__)

ROOT_KEY = "incompatibilities"

_REFERENCE_KINDS = {
    "bug": Bug,
    "pull": PullRequest,
    "commit": Commit,
}

_ENTRY_KEYS = ("target", "conflicts", "reason", "references")
_CRATE_KEYS = ("crate", "range")
_RUST_KEYS = ("rust",)


class RecordLoadError(ValueError):
    """Raised when a definitions document cannot be turned into records."""

    def __init__(self, issues: list[str], source: str = ""):
        self.issues = issues
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(f"{len(issues)} issue(s){where}: " + "; ".join(issues))


def validate_definitions(data) -> list[str]:
    """Check a parsed definitions document.

    Returns:
        List of issue messages. Empty list means valid.
    """
    issues: list[str] = []

    if not isinstance(data, dict):
        return [f"/: expected a mapping with '{ROOT_KEY}', got {type(data).__name__}"]
    if ROOT_KEY not in data:
        return [f"/: missing required property '{ROOT_KEY}'"]

    entries = data[ROOT_KEY]
    if entries is None:
        return issues
    if not isinstance(entries, list):
        return [f".{ROOT_KEY}: expected a list, got {type(entries).__name__}"]

    for i, entry in enumerate(entries):
        path = f".{ROOT_KEY}[{i}]"
        if not isinstance(entry, dict):
            issues.append(f"{path}: expected a mapping, got {type(entry).__name__}")
            continue

        _check_unknown_keys(entry, _ENTRY_KEYS, path, issues)

        for side in ("target", "conflicts"):
            if side not in entry:
                issues.append(f"{path}: missing required property '{side}'")
            else:
                _validate_target(entry[side], f"{path}.{side}", issues)

        reason = entry.get("reason")
        if reason is not None and not isinstance(reason, str):
            issues.append(f"{path}.reason: expected a string, got {type(reason).__name__}")

        references = entry.get("references")
        if references is not None:
            _validate_references(references, f"{path}.references", issues)

    return issues


def _validate_target(node, path: str, issues: list[str]):
    if not isinstance(node, dict):
        issues.append(f"{path}: expected a mapping, got {type(node).__name__}")
        return

    if "crate" in node and "rust" in node:
        issues.append(f"{path}: 'crate' and 'rust' are mutually exclusive")
        return

    if "crate" in node:
        _check_unknown_keys(node, _CRATE_KEYS, path, issues)
        name = node["crate"]
        if not isinstance(name, str) or not name:
            issues.append(f"{path}.crate: expected a non-empty string")
        if "range" not in node:
            issues.append(f"{path}: missing required property 'range'")
        else:
            _validate_range(node["range"], f"{path}.range", issues)
    elif "rust" in node:
        _check_unknown_keys(node, _RUST_KEYS, path, issues)
        _validate_range(node["rust"], f"{path}.rust", issues)
    else:
        issues.append(f"{path}: expected one of 'crate' or 'rust'")


def _validate_range(value, path: str, issues: list[str]):
    if not isinstance(value, str):
        issues.append(f"{path}: expected a string, got {type(value).__name__}")
        return
    try:
        parse_range(value)
    except InvalidRangeError as e:
        issues.append(f"{path}: {e}")


def _validate_references(node, path: str, issues: list[str]):
    if not isinstance(node, list):
        issues.append(f"{path}: expected a list, got {type(node).__name__}")
        return

    for i, ref in enumerate(node):
        ref_path = f"{path}[{i}]"
        if not isinstance(ref, dict) or len(ref) != 1:
            issues.append(f"{ref_path}: expected a single-key mapping like {{bug: <url>}}")
            continue
        kind, url = next(iter(ref.items()))
        if kind not in _REFERENCE_KINDS:
            issues.append(
                f"{ref_path}: value '{kind}' not in allowed values {sorted(_REFERENCE_KINDS)}"
            )
        if not isinstance(url, str) or not url:
            issues.append(f"{ref_path}.{kind}: expected a non-empty string")
        elif not _is_locator(url):
            issues.append(
                f"{ref_path}.{kind}: '{url}' is not an absolute URL with scheme and host"
            )


def _is_locator(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.netloc)


def _check_unknown_keys(node: dict, allowed: tuple[str, ...], path: str, issues: list[str]):
    for key in node:
        if key not in allowed:
            issues.append(
                f"{path}: unknown property '{key}' not in allowed values {list(allowed)}"
            )


def records_from_data(data, source: str = "") -> list[IncompatRecord]:
    """Build records from a parsed definitions document.

    Raises:
        RecordLoadError: if the document fails validation.
    """
    issues = validate_definitions(data)
    if issues:
        raise RecordLoadError(issues, source)

    records = []
    for entry in data[ROOT_KEY] or []:
        references = entry.get("references")
        records.append(
            IncompatRecord(
                target=_build_target(entry["target"]),
                conflicts=_build_target(entry["conflicts"]),
                reason=entry.get("reason"),
                references=None if references is None else tuple(
                    _build_reference(ref) for ref in references
                ),
            )
        )
    return records


def _build_target(node: dict) -> Target:
    if "crate" in node:
        return Crate(node["crate"], parse_range(node["range"]))
    return Rust(parse_range(node["rust"]))


def _build_reference(node: dict) -> RefType:
    kind, url = next(iter(node.items()))
    return _REFERENCE_KINDS[kind](url)


def load_records(path: str | Path) -> list[IncompatRecord]:
    """Read a YAML definitions file and return its records."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except UnicodeDecodeError as e:
        raise RecordLoadError([f"/: file is not valid UTF-8: {e}"], str(path)) from e
    except yaml.YAMLError as e:
        raise RecordLoadError([f"/: failed to parse YAML: {e}"], str(path)) from e

    records = records_from_data(data, str(path))
    logger.debug("Loaded %d record(s) from %s", len(records), path)
    return records


def load_registry(path: str | Path) -> IncompatRegistry:
    """Read a YAML definitions file into an ``IncompatRegistry``."""
    return IncompatRegistry(load_records(path))
