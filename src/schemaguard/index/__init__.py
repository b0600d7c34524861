"""Identifier index - reverse lookup of schema objects by referenced identifier.

Public API:
- build_index / build_index_result: construct an IdentifierIndex from a snapshot
- find_usage: resolve the views and routines that reference an object
- find_usage_fuzzy: pattern-based scan, only when explicitly requested
"""

from schemaguard.index.builder import (
    IdentifierIndex,
    IndexBuildResult,
    IndexEntry,
    build_index,
    build_index_result,
    normalize_key,
)
from schemaguard.index.resolver import (
    find_usage,
    find_usage_fuzzy,
    matches_identifier,
    usage_keys,
)

__all__ = [
    "IdentifierIndex",
    "IndexBuildResult",
    "IndexEntry",
    "build_index",
    "build_index_result",
    "find_usage",
    "find_usage_fuzzy",
    "matches_identifier",
    "normalize_key",
    "usage_keys",
]
