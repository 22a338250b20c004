"""Registry — read-only queries over a collection of incompatibility records.

The registry provides:
- Filtering: every record predicate applied across the collection
- Lookup: first matching record in input order
- Loading: YAML definition files turned into records
"""

from incompat.registry.registry import IncompatRegistry

__all__ = ["IncompatRegistry"]
