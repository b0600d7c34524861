"""Incoming foreign keys: tables whose constraints point at a relation.

A relation's own ``foreign_keys`` are outgoing. Dropping or moving it also
affects tables that reference it, which only a scan of the whole database
reveals. Their ON DELETE actions decide whether dropping the table is
blocked, cascades into other tables, or is harmless.
"""

from __future__ import annotations

from collections.abc import Sequence

from schemaguard.analysis.models import ForeignKeyReference, Operation, OperationRisk, RiskLevel
from schemaguard.analysis.risk import escalate, get_risk_message
from schemaguard.config.constants import MANY_CASCADE_FKS
from schemaguard.metadata.models import DatabaseMetadata


def find_incoming_foreign_keys(
    database: DatabaseMetadata,
    schema_name: str,
    table_name: str,
) -> list[ForeignKeyReference]:
    """Foreign keys on other tables referencing ``schema_name.table_name``.

    Self-references (a table pointing at itself) are excluded.
    """
    incoming: list[ForeignKeyReference] = []
    for from_schema, schema in database.schemas.items():
        for from_table, relation in schema.relations.items():
            if relation.type != "table":
                continue
            if from_schema == schema_name and from_table == table_name:
                continue
            for fk in relation.foreign_keys:
                if fk.referenced_schema == schema_name and fk.referenced_table == table_name:
                    incoming.append(
                        ForeignKeyReference(
                            constraint_name=fk.name,
                            from_schema=from_schema,
                            from_table=from_table,
                            on_delete=fk.on_delete,
                        )
                    )
    return incoming


def _fk_label(ref: ForeignKeyReference) -> str:
    return f"FK: {ref.constraint_name or 'unnamed'} <- {ref.from_schema}.{ref.from_table}"


def _on_delete(ref: ForeignKeyReference) -> str:
    return " ".join((ref.on_delete or "").lower().replace("_", " ").split())


def assess_incoming_foreign_keys(
    refs: Sequence[ForeignKeyReference],
    *,
    many_cascade: int = MANY_CASCADE_FKS,
) -> OperationRisk:
    """Delete risk carried by foreign keys that point at a table.

    RESTRICT or NO ACTION keys block the delete outright (high). Otherwise
    CASCADE keys decide: more than ``many_cascade`` is critical, any is
    medium. Keys with another or unknown ON DELETE action stay low.
    """
    level = RiskLevel.LOW
    if not refs:
        return OperationRisk(
            level, get_risk_message(Operation.DELETE, level), ("No foreign keys reference this table",)
        )

    details = [f"Referenced by {len(refs)} foreign key(s)"]
    restricting = [ref for ref in refs if _on_delete(ref) in ("restrict", "no action")]
    cascading = [ref for ref in refs if _on_delete(ref) == "cascade"]

    if restricting:
        level = escalate(level, RiskLevel.HIGH)
        details.append(f"{len(restricting)} FK(s) with RESTRICT/NO ACTION prevent deletion")
    elif len(cascading) > many_cascade:
        level = escalate(level, RiskLevel.CRITICAL)
        details.append(f"{len(cascading)} tables will CASCADE DELETE")
    elif cascading:
        level = escalate(level, RiskLevel.MEDIUM)
        details.append(f"{len(cascading)} table(s) will be affected by CASCADE DELETE")

    details.extend(_fk_label(ref) for ref in refs)
    return OperationRisk(level, get_risk_message(Operation.DELETE, level), tuple(details))
