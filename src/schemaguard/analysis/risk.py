"""Risk rules per object kind and operation.

Every rule function is pure: same object and usage in, same OperationRisk
out. A trail starts at LOW with no details and each check can only raise
the level, through ``escalate`` (``max`` over the ordered enum). Notes add
explanation lines without changing the level.

``usage`` is the resolver's output for the object. ``None`` means usage was
not computed, which some rules report differently from an empty list.
"""

from __future__ import annotations

from collections.abc import Sequence

from schemaguard.analysis.models import (
    ObjectSafetyAssessment,
    Operation,
    OperationRisk,
    ResolvedObject,
    ResolvedRelation,
    ResolvedRoutine,
    ResolvedSchema,
    ResolvedSequence,
    ResolvedType,
    RiskLevel,
    UsageReference,
)
from schemaguard.config.constants import LARGE_TABLE_ROWS, USAGE_PREVIEW_LIMIT
from schemaguard.metadata.models import ForeignKeyMetadata, Permissions

DEFAULT_CLAUSE_NOTE = "Check DEFAULT clauses of table columns for nextval() calls on this sequence"

_RISK_MESSAGES: dict[Operation, dict[RiskLevel, str]] = {
    Operation.DELETE: {
        RiskLevel.LOW: "Low risk: object can be safely deleted",
        RiskLevel.MEDIUM: "Medium risk: review details before deleting",
        RiskLevel.HIGH: "High risk: deleting may break dependent objects",
        RiskLevel.CRITICAL: "Critical risk: deleting will break dependent objects or is not permitted",
    },
    Operation.MOVE: {
        RiskLevel.LOW: "Low risk: object can be safely moved",
        RiskLevel.MEDIUM: "Medium risk: review references before moving",
        RiskLevel.HIGH: "High risk: moving may break references",
        RiskLevel.CRITICAL: "Critical risk: moving will break references or is not permitted",
    },
    Operation.CHANGE_OWNER: {
        RiskLevel.LOW: "Low risk: owner can be safely changed",
        RiskLevel.MEDIUM: "Medium risk: review privileges before changing owner",
        RiskLevel.HIGH: "High risk: changing owner may affect dependent behavior",
        RiskLevel.CRITICAL: "Critical risk: changing owner is dangerous",
    },
}


def get_risk_message(operation: Operation, level: RiskLevel) -> str:
    """Short severity-labeled summary for an operation at a level."""
    return _RISK_MESSAGES[operation][level]


def escalate(level: RiskLevel, proposed: RiskLevel) -> RiskLevel:
    """The only way a level changes: never downward."""
    return max(level, proposed)


def step_up(level: RiskLevel) -> RiskLevel:
    """Escalate one step: LOW becomes MEDIUM, anything else at least HIGH."""
    return escalate(level, RiskLevel.MEDIUM if level == RiskLevel.LOW else RiskLevel.HIGH)


class _RiskTrail:
    """Accumulates level and details for one assessment."""

    __slots__ = ("level", "details")

    def __init__(self) -> None:
        self.level = RiskLevel.LOW
        self.details: list[str] = []

    def note(self, *lines: str) -> None:
        self.details.extend(lines)

    def raise_to(self, proposed: RiskLevel, *lines: str) -> None:
        self.level = escalate(self.level, proposed)
        self.details.extend(lines)

    def step(self, *lines: str) -> None:
        self.level = step_up(self.level)
        self.details.extend(lines)

    def finish(self, operation: Operation) -> OperationRisk:
        return OperationRisk(
            level=self.level,
            message=get_risk_message(operation, self.level),
            details=tuple(self.details),
        )


def _usage_lines(usage: Sequence[UsageReference], limit: int) -> list[str]:
    lines = [f"Used in {u.location}: {u.name}" for u in usage[:limit]]
    if len(usage) > limit:
        lines.append(f"+{len(usage) - limit} more")
    return lines


def _fk_lines(foreign_keys: Sequence[ForeignKeyMetadata]) -> list[str]:
    return [f"FK: {fk.name or 'unnamed'} -> {fk.referenced_schema}.{fk.referenced_table}" for fk in foreign_keys]


def _denied(permissions: Permissions | None, privilege: str) -> bool:
    """True only when the provider explicitly reports the privilege as missing."""
    return permissions is not None and getattr(permissions, privilege) is False


def _owner_line(owner: str | None) -> str:
    return f"Current owner: {owner or 'unknown'}"


# =============================================================================
# Delete
# =============================================================================


def assess_delete_relation(
    obj: ResolvedRelation,
    usage: Sequence[UsageReference] | None = None,
    *,
    usage_preview_limit: int = USAGE_PREVIEW_LIMIT,
    large_table_rows: int = LARGE_TABLE_ROWS,
) -> OperationRisk:
    """Risk of dropping a table or view.

    Usage by views/routines, foreign keys and a missing DELETE privilege are
    critical. Partitioned tables are high. Large tables escalate one step.
    Views, temporary tables, constraints and secondary indexes are noted.
    """
    rel = obj.metadata
    trail = _RiskTrail()

    if rel.type == "view":
        trail.note(f"{obj.name} is a view; objects built on it are dropped only with CASCADE")
    if rel.kind == "temporary":
        trail.note("Temporary table; it disappears at the end of its session anyway")
    if rel.kind == "partitioned":
        trail.raise_to(RiskLevel.HIGH, "Partitioned table; all partitions are dropped with it")
    if usage:
        trail.raise_to(
            RiskLevel.CRITICAL,
            f"Referenced by {len(usage)} view(s)/routine(s)",
            *_usage_lines(usage, usage_preview_limit),
        )
    rows = rel.stats.rows if rel.stats else None
    if rows is not None and rows > large_table_rows:
        trail.step(f"Large table: {rows} rows of data would be lost")
    if rel.foreign_keys:
        trail.raise_to(
            RiskLevel.CRITICAL,
            f"Has {len(rel.foreign_keys)} foreign key(s)",
            *_fk_lines(rel.foreign_keys),
        )
    if rel.constraints:
        trail.note(f"Has {len(rel.constraints)} constraint(s) that are dropped with it")
    secondary = [index for index in rel.indexes if not index.primary]
    if secondary:
        trail.note(f"Has {len(secondary)} non-primary index(es) that are dropped with it")
    if _denied(rel.permissions, "delete"):
        trail.raise_to(RiskLevel.CRITICAL, "No DELETE privilege on this relation")

    return trail.finish(Operation.DELETE)


def assess_delete_routine(
    obj: ResolvedRoutine,
    usage: Sequence[UsageReference] | None = None,
    *,
    usage_preview_limit: int = USAGE_PREVIEW_LIMIT,
) -> OperationRisk:
    routine = obj.metadata
    trail = _RiskTrail()

    if routine.type == "procedure":
        trail.note(f"Procedure {obj.name}; callers invoking it with CALL will fail")
    else:
        trail.note(f"Function {obj.name}; queries and defaults calling it will fail")
    if usage:
        trail.raise_to(
            RiskLevel.CRITICAL,
            f"Referenced by {len(usage)} view(s)/routine(s)",
            *_usage_lines(usage, usage_preview_limit),
        )
    if routine.kind == "trigger":
        trail.raise_to(RiskLevel.HIGH, "Trigger function; triggers using it must be dropped first")
    if routine.kind == "aggregate":
        trail.step("Aggregate function; queries aggregating with it will fail")
    if _denied(routine.permissions, "execute"):
        trail.raise_to(RiskLevel.CRITICAL, "No EXECUTE privilege on this routine")

    return trail.finish(Operation.DELETE)


def assess_delete_sequence(
    obj: ResolvedSequence,
    usage: Sequence[UsageReference] | None = None,
    *,
    usage_preview_limit: int = USAGE_PREVIEW_LIMIT,
) -> OperationRisk:
    """Risk of dropping a sequence.

    Sequences are mostly consumed from column DEFAULTs, which the identifier
    index does not see, so finding no usage still leaves the risk at MEDIUM.
    """
    trail = _RiskTrail()

    trail.note(f"Sequence {obj.name}")
    if usage:
        trail.raise_to(
            RiskLevel.HIGH,
            f"Referenced by {len(usage)} view(s)/routine(s)",
            *_usage_lines(usage, usage_preview_limit),
        )
    if _denied(obj.metadata.permissions, "usage"):
        trail.raise_to(RiskLevel.CRITICAL, "No USAGE privilege on this sequence")
    if not usage:
        trail.raise_to(RiskLevel.MEDIUM, f"No references found in views or routines. {DEFAULT_CLAUSE_NOTE}")

    return trail.finish(Operation.DELETE)


def assess_delete_type(
    obj: ResolvedType,
    usage: Sequence[UsageReference] | None = None,
    *,
    usage_preview_limit: int = USAGE_PREVIEW_LIMIT,
) -> OperationRisk:
    kind = obj.metadata.kind
    trail = _RiskTrail()

    trail.note(f"Type {obj.name} ({kind or 'unknown kind'})")
    if usage:
        trail.raise_to(
            RiskLevel.HIGH,
            f"Referenced by {len(usage)} view(s)/routine(s)",
            *_usage_lines(usage, usage_preview_limit),
        )
    if kind in ("composite", "enum"):
        trail.step(f"{kind.capitalize()} type; columns and routine signatures may depend on it")
    if kind == "domain":
        trail.raise_to(RiskLevel.HIGH, "Domain type; columns declared with it are dropped by CASCADE")
    if _denied(obj.metadata.permissions, "usage"):
        trail.raise_to(RiskLevel.CRITICAL, "No USAGE privilege on this type")

    return trail.finish(Operation.DELETE)


def assess_delete_schema(obj: ResolvedSchema) -> OperationRisk:
    """Risk of dropping a whole schema with everything in it."""
    schema = obj.metadata
    trail = _RiskTrail()

    if schema.catalog:
        trail.raise_to(RiskLevel.CRITICAL, "System catalog schema; it must never be dropped")
    if schema.default:
        trail.raise_to(RiskLevel.HIGH, "Default schema; unqualified names resolve here")
    if schema.relations:
        trail.raise_to(RiskLevel.HIGH, f"Contains {len(schema.relations)} relation(s)")
    if schema.has_routines:
        trail.raise_to(RiskLevel.CRITICAL, f"Contains {len(schema.routines)} routine(s)")
    if schema.types:
        trail.raise_to(RiskLevel.CRITICAL, f"Contains {len(schema.types)} type(s)")
    if _denied(schema.permissions, "usage"):
        trail.raise_to(RiskLevel.CRITICAL, "No USAGE privilege on this schema")

    return trail.finish(Operation.DELETE)


# =============================================================================
# Move (ALTER ... SET SCHEMA)
# =============================================================================


def assess_move_relation(
    obj: ResolvedRelation,
    usage: Sequence[UsageReference] | None = None,
    *,
    usage_preview_limit: int = USAGE_PREVIEW_LIMIT,
) -> OperationRisk:
    """Risk of moving a table or view to another schema.

    Besides objects referencing this relation, the relation's own declared
    identifiers matter: a view's unqualified references resolve through the
    search path and may stop resolving after the move.
    """
    rel = obj.metadata
    trail = _RiskTrail()

    if usage:
        trail.raise_to(
            RiskLevel.CRITICAL,
            f"Referenced by {len(usage)} view(s)/routine(s) that use its qualified name",
            *_usage_lines(usage, usage_preview_limit),
        )
    if rel.type == "view":
        trail.note("View definitions keep working after a move, but qualified references to it break")
    if rel.identifiers:
        trail.step(f"Declares {len(rel.identifiers)} reference(s) of its own")
        trail.raise_to(RiskLevel.HIGH, *(f"References: {identifier}" for identifier in rel.identifiers))
    if rel.foreign_keys:
        trail.raise_to(
            RiskLevel.HIGH,
            f"Has {len(rel.foreign_keys)} foreign key(s)",
            *_fk_lines(rel.foreign_keys),
        )
    if _denied(rel.permissions, "select"):
        trail.raise_to(RiskLevel.CRITICAL, "No SELECT privilege on this relation")
    if usage is None:
        trail.note("Usage was not analyzed; verify all referencing views and functions manually")

    return trail.finish(Operation.MOVE)


def assess_move_routine(
    obj: ResolvedRoutine,
    usage: Sequence[UsageReference] | None = None,
    *,
    usage_preview_limit: int = USAGE_PREVIEW_LIMIT,
) -> OperationRisk:
    routine = obj.metadata
    trail = _RiskTrail()

    if usage:
        trail.raise_to(
            RiskLevel.CRITICAL,
            f"Referenced by {len(usage)} view(s)/routine(s)",
            *_usage_lines(usage, usage_preview_limit),
        )
    if routine.kind == "trigger":
        trail.raise_to(RiskLevel.HIGH, "Trigger function; trigger definitions reference it")
    if _denied(routine.permissions, "execute"):
        trail.raise_to(RiskLevel.CRITICAL, "No EXECUTE privilege on this routine")
    trail.note("References to this routine in other code may need updating")

    return trail.finish(Operation.MOVE)


def assess_move_sequence(
    obj: ResolvedSequence,
    usage: Sequence[UsageReference] | None = None,
    *,
    usage_preview_limit: int = USAGE_PREVIEW_LIMIT,
) -> OperationRisk:
    trail = _RiskTrail()

    trail.note(f"Sequence {obj.name} can be moved")
    if usage:
        trail.raise_to(
            RiskLevel.MEDIUM,
            f"Referenced by {len(usage)} view(s)/routine(s)",
            *_usage_lines(usage, usage_preview_limit),
        )
    if _denied(obj.metadata.permissions, "usage"):
        trail.raise_to(RiskLevel.CRITICAL, "No USAGE privilege on this sequence")
    trail.note(DEFAULT_CLAUSE_NOTE)

    return trail.finish(Operation.MOVE)


def assess_move_type(
    obj: ResolvedType,
    usage: Sequence[UsageReference] | None = None,
    *,
    usage_preview_limit: int = USAGE_PREVIEW_LIMIT,
) -> OperationRisk:
    kind = obj.metadata.kind
    trail = _RiskTrail()

    trail.note(f"Type {obj.name} can be moved")
    if usage:
        trail.raise_to(
            RiskLevel.HIGH,
            f"Referenced by {len(usage)} view(s)/routine(s)",
            *_usage_lines(usage, usage_preview_limit),
        )
    if kind == "composite":
        trail.step("Composite type; routines returning it reference it by name")
    if kind == "enum":
        trail.step("Enum type; casts to it in code reference it by name")
    if kind == "domain":
        trail.raise_to(RiskLevel.HIGH, "Domain type; columns declared with it reference it by name")
    if _denied(obj.metadata.permissions, "usage"):
        trail.raise_to(RiskLevel.CRITICAL, "No USAGE privilege on this type")

    return trail.finish(Operation.MOVE)


def assess_move_schema(obj: ResolvedSchema) -> OperationRisk:  # noqa: ARG001
    """Schemas cannot be moved; always the same HIGH result."""
    return OperationRisk(
        level=RiskLevel.HIGH,
        message="Operation not available: schemas cannot be moved",
        details=("A schema cannot be moved into another schema; rename it instead",),
    )


# =============================================================================
# Change owner
# =============================================================================


def assess_change_owner_relation(obj: ResolvedRelation) -> OperationRisk:
    rel = obj.metadata
    trail = _RiskTrail()

    if rel.owner:
        trail.note(_owner_line(rel.owner))
    if rel.indexes:
        trail.note(f"Ownership of {len(rel.indexes)} index(es) moves with the relation")
    stats = rel.stats
    if stats is not None and (stats.rows or stats.writes):
        trail.step("Relation holds data or receives writes; the new owner controls access to it")
    trail.note("New owner must have CREATE and USAGE privileges on the schema")

    return trail.finish(Operation.CHANGE_OWNER)


def assess_change_owner_routine(obj: ResolvedRoutine) -> OperationRisk:
    routine = obj.metadata
    trail = _RiskTrail()

    trail.note(_owner_line(routine.owner))
    if routine.kind == "trigger":
        trail.raise_to(RiskLevel.HIGH, "Trigger function; SECURITY DEFINER triggers run as the new owner")
    if routine.arguments:
        trail.note(f"Takes {len(routine.arguments)} argument(s); argument types must stay accessible")

    return trail.finish(Operation.CHANGE_OWNER)


def assess_change_owner_sequence(obj: ResolvedSequence) -> OperationRisk:
    trail = _RiskTrail()
    trail.note(_owner_line(obj.metadata.owner))
    trail.note("Changing the owner of a sequence is usually safe")
    return trail.finish(Operation.CHANGE_OWNER)


def assess_change_owner_type(obj: ResolvedType) -> OperationRisk:
    trail = _RiskTrail()

    trail.note(_owner_line(obj.metadata.owner))
    if obj.metadata.kind in ("composite", "domain"):
        trail.raise_to(RiskLevel.MEDIUM, f"{obj.metadata.kind.capitalize()} type; dependent columns keep using it")

    return trail.finish(Operation.CHANGE_OWNER)


def assess_change_owner_schema(obj: ResolvedSchema) -> OperationRisk:
    schema = obj.metadata
    trail = _RiskTrail()

    trail.note(_owner_line(schema.owner))
    if schema.default:
        trail.raise_to(RiskLevel.MEDIUM, "Default schema; every role creating objects here is affected")
    if schema.catalog:
        trail.raise_to(RiskLevel.CRITICAL, "System catalog schema; its owner must not change")

    return trail.finish(Operation.CHANGE_OWNER)


# =============================================================================
# Dispatch
# =============================================================================


def assess_object(
    obj: ResolvedObject,
    usage: Sequence[UsageReference] | None = None,
    *,
    usage_preview_limit: int = USAGE_PREVIEW_LIMIT,
    large_table_rows: int = LARGE_TABLE_ROWS,
) -> ObjectSafetyAssessment:
    """Run the delete, move and change-owner rules for a resolved object."""
    limit = usage_preview_limit
    match obj:
        case ResolvedRelation():
            return ObjectSafetyAssessment(
                can_delete=assess_delete_relation(
                    obj, usage, usage_preview_limit=limit, large_table_rows=large_table_rows
                ),
                can_move=assess_move_relation(obj, usage, usage_preview_limit=limit),
                can_change_owner=assess_change_owner_relation(obj),
            )
        case ResolvedRoutine():
            return ObjectSafetyAssessment(
                can_delete=assess_delete_routine(obj, usage, usage_preview_limit=limit),
                can_move=assess_move_routine(obj, usage, usage_preview_limit=limit),
                can_change_owner=assess_change_owner_routine(obj),
            )
        case ResolvedSequence():
            return ObjectSafetyAssessment(
                can_delete=assess_delete_sequence(obj, usage, usage_preview_limit=limit),
                can_move=assess_move_sequence(obj, usage, usage_preview_limit=limit),
                can_change_owner=assess_change_owner_sequence(obj),
            )
        case ResolvedType():
            return ObjectSafetyAssessment(
                can_delete=assess_delete_type(obj, usage, usage_preview_limit=limit),
                can_move=assess_move_type(obj, usage, usage_preview_limit=limit),
                can_change_owner=assess_change_owner_type(obj),
            )
        case ResolvedSchema():
            return ObjectSafetyAssessment(
                can_delete=assess_delete_schema(obj),
                can_move=assess_move_schema(obj),
                can_change_owner=assess_change_owner_schema(obj),
            )
    raise TypeError(f"Unsupported object: {obj!r}")
