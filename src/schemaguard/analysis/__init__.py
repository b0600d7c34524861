"""Risk assessment for schema object operations.

The facade lives in ``schemaguard.analysis.analyzer`` and is re-exported from
the top-level package.
"""

from schemaguard.analysis.foreign_keys import assess_incoming_foreign_keys, find_incoming_foreign_keys
from schemaguard.analysis.models import (
    AnalysisResult,
    ForeignKeyReference,
    ObjectKind,
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
from schemaguard.analysis.risk import (
    assess_object,
    escalate,
    get_risk_message,
    step_up,
)

__all__ = [
    "AnalysisResult",
    "ForeignKeyReference",
    "ObjectKind",
    "ObjectSafetyAssessment",
    "Operation",
    "OperationRisk",
    "ResolvedObject",
    "ResolvedRelation",
    "ResolvedRoutine",
    "ResolvedSchema",
    "ResolvedSequence",
    "ResolvedType",
    "RiskLevel",
    "UsageReference",
    "assess_incoming_foreign_keys",
    "assess_object",
    "escalate",
    "find_incoming_foreign_keys",
    "get_risk_message",
    "step_up",
]
