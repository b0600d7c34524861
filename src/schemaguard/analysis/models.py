"""Analysis domain models: risk levels, per-operation risks, results.

No I/O, no async. Frozen dataclasses produced fresh per call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from typing import Any, Literal

from schemaguard.metadata.models import (
    RelationMetadata,
    RoutineMetadata,
    SchemaMetadata,
    SequenceMetadata,
    TypeMetadata,
)


class RiskLevel(IntEnum):
    """Ordered severity of a prospective operation."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2
    CRITICAL = 3

    @property
    def label(self) -> str:
        return self.name.lower()


class Operation(StrEnum):
    DELETE = "delete"
    MOVE = "move"
    CHANGE_OWNER = "change_owner"


class ObjectKind(StrEnum):
    RELATION = "relation"
    ROUTINE = "routine"
    SEQUENCE = "sequence"
    TYPE = "type"
    SCHEMA = "schema"


UsageRefKind = Literal["relation", "routine"]


@dataclass(frozen=True, slots=True)
class OperationRisk:
    """Risk of one operation on one object, with the explanation trail."""

    level: RiskLevel
    message: str
    details: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"level": self.level.label, "message": self.message, "details": list(self.details)}


@dataclass(frozen=True, slots=True)
class ObjectSafetyAssessment:
    can_delete: OperationRisk
    can_move: OperationRisk
    can_change_owner: OperationRisk

    @property
    def overall_level(self) -> RiskLevel:
        """Worst level across the three operations."""
        return max(self.can_delete.level, self.can_move.level, self.can_change_owner.level)

    def to_dict(self) -> dict[str, Any]:
        return {
            "can_delete": self.can_delete.to_dict(),
            "can_move": self.can_move.to_dict(),
            "can_change_owner": self.can_change_owner.to_dict(),
            "overall_level": self.overall_level.label,
        }


@dataclass(frozen=True, slots=True)
class UsageReference:
    """Evidence that another object's definition refers to the target."""

    ref_kind: UsageRefKind
    name: str  # qualified schema.object
    location: str  # "view", "function/trigger", ...

    def to_dict(self) -> dict[str, str]:
        return {"ref_kind": self.ref_kind, "name": self.name, "location": self.location}


@dataclass(frozen=True, slots=True)
class ForeignKeyReference:
    """A foreign key on another table pointing at the analyzed relation."""

    constraint_name: str | None
    from_schema: str
    from_table: str
    on_delete: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "constraint_name": self.constraint_name,
            "from_schema": self.from_schema,
            "from_table": self.from_table,
            "on_delete": self.on_delete,
        }


@dataclass
class AnalysisResult:
    """Outcome of analyzing one schema object.

    ``found=False`` is a normal outcome; ``error`` then says why.
    """

    found: bool
    object_type: ObjectKind | None = None
    object_name: str | None = None
    schema_name: str | None = None
    assessment: ObjectSafetyAssessment | None = None
    used_in_identifiers: list[UsageReference] | None = None
    referenced_by_foreign_keys: list[ForeignKeyReference] = field(default_factory=list)
    foreign_key_risk: OperationRisk | None = None
    error: str | None = None

    @classmethod
    def not_found(cls, error: str) -> AnalysisResult:
        return cls(found=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "found": self.found,
            "object_type": self.object_type.value if self.object_type else None,
            "object_name": self.object_name,
            "schema_name": self.schema_name,
            "assessment": self.assessment.to_dict() if self.assessment else None,
            "used_in_identifiers": (
                [u.to_dict() for u in self.used_in_identifiers]
                if self.used_in_identifiers is not None
                else None
            ),
            "referenced_by_foreign_keys": [fk.to_dict() for fk in self.referenced_by_foreign_keys],
            "foreign_key_risk": self.foreign_key_risk.to_dict() if self.foreign_key_risk else None,
            "error": self.error,
        }


# ---------------------------------------------------------------------------
# Resolved objects (tagged union matched by the analyzer)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ResolvedRelation:
    name: str
    schema_name: str
    metadata: RelationMetadata
    kind: Literal[ObjectKind.RELATION] = ObjectKind.RELATION


@dataclass(frozen=True, slots=True)
class ResolvedRoutine:
    """A routine resolved by name; ``metadata`` is its first overload."""

    name: str
    schema_name: str
    metadata: RoutineMetadata
    kind: Literal[ObjectKind.ROUTINE] = ObjectKind.ROUTINE


@dataclass(frozen=True, slots=True)
class ResolvedSequence:
    name: str
    schema_name: str
    metadata: SequenceMetadata
    kind: Literal[ObjectKind.SEQUENCE] = ObjectKind.SEQUENCE


@dataclass(frozen=True, slots=True)
class ResolvedType:
    name: str
    schema_name: str
    metadata: TypeMetadata
    kind: Literal[ObjectKind.TYPE] = ObjectKind.TYPE


@dataclass(frozen=True, slots=True)
class ResolvedSchema:
    name: str
    schema_name: str
    metadata: SchemaMetadata
    kind: Literal[ObjectKind.SCHEMA] = ObjectKind.SCHEMA


ResolvedObject = ResolvedRelation | ResolvedRoutine | ResolvedSequence | ResolvedType | ResolvedSchema
