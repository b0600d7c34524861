"""Usage resolution against the identifier index.

An object is looked up under three spellings:

1. its bare name, normalized (``orders``)
2. ``schema.object``, normalized (``public.orders``)
3. the quoted literal ``"schema"."object"`` with case preserved, for
   references written as case-sensitive quoted identifiers

Hits are unioned in that key order without deduplication, so one view that
mentions both ``orders`` and ``public.orders`` is reported twice.

Only views and routines count as usage. Other referencing relations
(tables carrying identifiers from defaults or checks) are skipped.
"""

from __future__ import annotations

import re

from schemaguard.analysis.models import UsageReference
from schemaguard.index.builder import IdentifierIndex, IndexEntry, normalize_key
from schemaguard.metadata.models import (
    DatabaseMetadata,
    RelationMetadata,
    RoutineMetadata,
)

_ROUTINE_TYPES = frozenset({"function", "procedure"})


def usage_keys(object_name: str, schema_name: str) -> tuple[str, str, str]:
    """The three index keys an object is looked up under, in lookup order."""
    return (
        normalize_key(object_name),
        normalize_key(f"{schema_name}.{object_name}"),
        f'"{schema_name}"."{object_name}"',
    )


def _routine_usage(schema_name: str, name: str, overload: RoutineMetadata) -> UsageReference | None:
    if overload.type not in _ROUTINE_TYPES:
        return None
    return UsageReference(
        ref_kind="routine",
        name=f"{schema_name}.{name}",
        location=f"{overload.type}/{overload.kind or 'regular'}",
    )


def _relation_usage(schema_name: str, name: str, relation: RelationMetadata) -> UsageReference | None:
    if relation.type != "view":
        return None
    return UsageReference(ref_kind="relation", name=f"{schema_name}.{name}", location="view")


def _entry_usage(database: DatabaseMetadata, entry: IndexEntry) -> UsageReference | None:
    """Turn an index hit into a usage reference, or None if it isn't usage.

    Entries whose object disappeared from the metadata since indexing are
    skipped.
    """
    schema = database.schemas.get(entry.schema)
    if schema is None:
        return None

    if entry.source == "routine":
        overloads = schema.routines.get(entry.object) or []
        position = entry.overload or 0
        if position >= len(overloads):
            return None
        return _routine_usage(entry.schema, entry.object, overloads[position])

    relation = schema.relations.get(entry.object)
    if relation is None:
        return None
    return _relation_usage(entry.schema, entry.object, relation)


def find_usage(
    index: IdentifierIndex,
    database: DatabaseMetadata,
    object_name: str,
    schema_name: str,
) -> list[UsageReference]:
    """Objects whose definitions reference ``schema_name.object_name``."""
    usages: list[UsageReference] = []
    for key in usage_keys(object_name, schema_name):
        for entry in index.lookup(key):
            usage = _entry_usage(database, entry)
            if usage is not None:
                usages.append(usage)
    return usages


# ---------------------------------------------------------------------------
# Pattern-based fallback (opt-in, never used by default)
# ---------------------------------------------------------------------------


def _identifier_pattern(object_name: str, schema_name: str) -> re.Pattern[str]:
    schema = re.escape(schema_name)
    name = re.escape(object_name)
    return re.compile(
        rf'^\s*(?:"?{schema}"?\s*\.\s*)?"?{name}"?\s*$',
        re.IGNORECASE,
    )


def matches_identifier(identifier: str, object_name: str, schema_name: str) -> bool:
    """Loose match of a raw identifier against an object.

    Accepts the bare or schema-qualified name, each part optionally quoted,
    compared case-insensitively and ignoring surrounding whitespace.
    """
    return bool(_identifier_pattern(object_name, schema_name).match(identifier))


def find_usage_fuzzy(
    database: DatabaseMetadata,
    object_name: str,
    schema_name: str,
) -> list[UsageReference]:
    """Scan declared identifiers directly with ``matches_identifier``.

    Slower than the index and looser about quoting, which can over-report
    when a quoted name differs from the target only by case. Each declaring
    object is reported at most once.
    """
    pattern = _identifier_pattern(object_name, schema_name)
    usages: list[UsageReference] = []
    for decl_schema, schema in database.schemas.items():
        for name, relation in schema.relations.items():
            if any(pattern.match(identifier) for identifier in relation.identifiers):
                usage = _relation_usage(decl_schema, name, relation)
                if usage is not None:
                    usages.append(usage)
        for name, overloads in schema.routines.items():
            for overload in overloads:
                if any(pattern.match(identifier) for identifier in overload.identifiers):
                    usage = _routine_usage(decl_schema, name, overload)
                    if usage is not None:
                        usages.append(usage)
    return usages
