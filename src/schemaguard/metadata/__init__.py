"""Metadata snapshot models and providers."""

from schemaguard.metadata.models import (
    ConstraintMetadata,
    DatabaseMetadata,
    ForeignKeyMetadata,
    IndexMetadata,
    MetadataSnapshot,
    Permissions,
    RelationMetadata,
    RelationStats,
    RoutineMetadata,
    SchemaMetadata,
    SequenceMetadata,
    TypeMetadata,
    coerce_snapshot,
    connected_database,
    parse_snapshot,
)
from schemaguard.metadata.provider import (
    MetadataProvider,
    StaticMetadataProvider,
    load_snapshot,
)

__all__ = [
    "ConstraintMetadata",
    "DatabaseMetadata",
    "ForeignKeyMetadata",
    "IndexMetadata",
    "MetadataProvider",
    "MetadataSnapshot",
    "Permissions",
    "RelationMetadata",
    "RelationStats",
    "RoutineMetadata",
    "SchemaMetadata",
    "SequenceMetadata",
    "StaticMetadataProvider",
    "TypeMetadata",
    "coerce_snapshot",
    "connected_database",
    "load_snapshot",
    "parse_snapshot",
]
