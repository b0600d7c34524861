"""Identifier index: reverse lookup from reference text to declaring objects.

Relations and routine overloads carry the raw identifiers their definitions
reference (extracted upstream by the metadata provider). The index maps each
normalized identifier to every ``(schema, object)`` that declares it, in
discovery order. Duplicates are kept: an object listing ``Orders`` and
``orders`` appears twice under ``orders``.

The index is derived data. It is never mutated after construction; a rebuild
produces a new instance that replaces the old one wholesale.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal

from schemaguard.core.logging import get_logger
from schemaguard.metadata.models import MetadataSnapshot, connected_database

logger = get_logger(__name__)


def normalize_key(identifier: str) -> str:
    """Trim and lowercase an identifier for index storage and lookup."""
    return identifier.strip().lower()


@dataclass(frozen=True, slots=True)
class IndexEntry:
    """An object whose definition references the indexed identifier.

    ``overload`` is the position of the declaring routine overload; it is
    ``None`` for relations.
    """

    schema: str
    object: str
    source: Literal["relation", "routine"] = "relation"
    overload: int | None = None


class IdentifierIndex(Mapping[str, tuple[IndexEntry, ...]]):
    """Immutable normalized-key -> entries mapping."""

    __slots__ = ("_buckets",)

    def __init__(self, buckets: Mapping[str, tuple[IndexEntry, ...]] | None = None) -> None:
        self._buckets: Mapping[str, tuple[IndexEntry, ...]] = MappingProxyType(dict(buckets or {}))

    @classmethod
    def empty(cls) -> IdentifierIndex:
        return cls()

    def __getitem__(self, key: str) -> tuple[IndexEntry, ...]:
        return self._buckets[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._buckets)

    def __len__(self) -> int:
        return len(self._buckets)

    def lookup(self, key: str) -> tuple[IndexEntry, ...]:
        """Entries stored under ``key`` exactly as given; empty if absent."""
        return self._buckets.get(key, ())

    @property
    def entry_count(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())

    def __repr__(self) -> str:
        return f"IdentifierIndex(keys={len(self)}, entries={self.entry_count})"


@dataclass(frozen=True, slots=True)
class IndexBuildResult:
    """Outcome of an index build. ``index`` is always usable."""

    index: IdentifierIndex
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_index(snapshot: MetadataSnapshot | None) -> IdentifierIndex:
    """Index every identifier declared by relations and routine overloads.

    Only the first connected database is scanned. No connected database
    yields an empty index.
    """
    database = connected_database(snapshot)
    if database is None:
        return IdentifierIndex.empty()

    buckets: dict[str, list[IndexEntry]] = {}

    def _add(entry: IndexEntry, identifiers: list[str]) -> None:
        for identifier in identifiers:
            buckets.setdefault(normalize_key(identifier), []).append(entry)

    for schema_name, schema in database.schemas.items():
        for relation_name, relation in schema.relations.items():
            _add(IndexEntry(schema_name, relation_name), relation.identifiers)
        for routine_name, overloads in schema.routines.items():
            for position, overload in enumerate(overloads):
                entry = IndexEntry(schema_name, routine_name, "routine", position)
                _add(entry, overload.identifiers)

    index = IdentifierIndex({key: tuple(entries) for key, entries in buckets.items()})
    logger.debug("identifier_index_built", keys=len(index), entries=index.entry_count)
    return index


def build_index_result(snapshot: MetadataSnapshot | None) -> IndexBuildResult:
    """Build the index without raising; failures yield an empty index.

    Callers own logging of ``error``.
    """
    try:
        return IndexBuildResult(index=build_index(snapshot))
    except Exception as e:
        return IndexBuildResult(index=IdentifierIndex.empty(), error=str(e))
