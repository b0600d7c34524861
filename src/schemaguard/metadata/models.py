"""Pydantic models for the metadata snapshot consumed by the analyzer.

A snapshot is a point-in-time read of database metadata:

    databases -> schemas -> {relations, routines, sequences, types}

Providers hand out plain dicts shaped like the database driver's metadata
(camelCase keys such as ``foreignKeys`` and ``referencedSchema``). The models
accept those as well as snake_case names. Every field beyond an object's
kind tag is optional so partial metadata still validates; a missing value
means "unknown", never "false".
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


class _MetadataModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    @field_validator("*", mode="before")
    @classmethod
    def null_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        """Drivers send null for empty collections and unset flags."""
        if value is not None or info.field_name is None:
            return value
        field = cls.model_fields[info.field_name]
        if field.is_required():
            return value
        return field.get_default(call_default_factory=True)


class Permissions(_MetadataModel):
    """Privileges the current role holds on an object.

    ``None`` means the provider did not report the privilege. Only an
    explicit ``False`` counts as a missing privilege.
    """

    delete: bool | None = None
    select: bool | None = None
    execute: bool | None = None
    usage: bool | None = None


class RelationStats(_MetadataModel):
    rows: int | None = None
    writes: int | None = None


class ForeignKeyMetadata(_MetadataModel):
    name: str | None = None
    referenced_schema: str
    referenced_table: str
    columns: list[str] = Field(default_factory=list, alias="column")
    referenced_columns: list[str] = Field(default_factory=list, alias="referencedColumn")
    on_update: str | None = None
    on_delete: str | None = None


class IndexMetadata(_MetadataModel):
    name: str | None = None
    primary: bool = False


class ConstraintMetadata(_MetadataModel):
    model_config = ConfigDict(extra="allow")

    name: str | None = None
    type: str | None = None


class RelationMetadata(_MetadataModel):
    """Table or view."""

    type: str = "table"
    kind: str | None = None
    owner: str | None = None
    permissions: Permissions | None = None
    stats: RelationStats | None = None
    foreign_keys: list[ForeignKeyMetadata] = Field(default_factory=list)
    constraints: list[ConstraintMetadata] = Field(default_factory=list)
    indexes: list[IndexMetadata] = Field(default_factory=list)
    identifiers: list[str] = Field(default_factory=list)


class RoutineMetadata(_MetadataModel):
    """One overload of a function or procedure."""

    type: str = "function"
    kind: str | None = None
    owner: str | None = None
    permissions: Permissions | None = None
    arguments: list[Any] = Field(default_factory=list)
    identifiers: list[str] = Field(default_factory=list)


class SequenceMetadata(_MetadataModel):
    owner: str | None = None
    permissions: Permissions | None = None
    identifiers: list[str] = Field(default_factory=list)


class TypeMetadata(_MetadataModel):
    """User-defined type (composite, enum, domain, range, ...)."""

    kind: str | None = None
    owner: str | None = None
    permissions: Permissions | None = None
    identifiers: list[str] = Field(default_factory=list)


class SchemaMetadata(_MetadataModel):
    default: bool = False
    catalog: bool = False
    owner: str | None = None
    permissions: Permissions | None = None
    relations: dict[str, RelationMetadata] = Field(default_factory=dict)
    routines: dict[str, list[RoutineMetadata]] = Field(default_factory=dict)
    sequences: dict[str, SequenceMetadata] = Field(default_factory=dict)
    types: dict[str, TypeMetadata] = Field(default_factory=dict)

    @property
    def has_routines(self) -> bool:
        return any(self.routines.values())


class DatabaseMetadata(_MetadataModel):
    connected: bool = False
    schemas: dict[str, SchemaMetadata] = Field(default_factory=dict)


MetadataSnapshot = Mapping[str, DatabaseMetadata]
"""Database id -> database metadata, as returned by a provider."""

_SNAPSHOT_ADAPTER: TypeAdapter[dict[str, DatabaseMetadata]] = TypeAdapter(
    dict[str, DatabaseMetadata]
)


def parse_snapshot(raw: Mapping[str, Any]) -> dict[str, DatabaseMetadata]:
    """Validate a raw provider payload into snapshot models.

    Raises:
        pydantic.ValidationError: If the payload does not have snapshot shape.
    """
    return _SNAPSHOT_ADAPTER.validate_python(raw)


def connected_database(snapshot: MetadataSnapshot | None) -> DatabaseMetadata | None:
    """Return the first database flagged as connected, if any."""
    if not snapshot:
        return None
    for database in snapshot.values():
        if database.connected:
            return database
    return None


def coerce_snapshot(raw: Mapping[str, Any] | None) -> dict[str, DatabaseMetadata]:
    """Return provider output as snapshot models, validating raw dicts.

    Raises:
        pydantic.ValidationError: If raw values do not have snapshot shape.
    """
    if not raw:
        return {}
    if all(isinstance(value, DatabaseMetadata) for value in raw.values()):
        return dict(raw)
    return parse_snapshot(raw)
