"""SchemaGuard - safety analysis for deleting, moving and re-owning schema objects."""

from schemaguard.analysis.analyzer import AnalyzerState, ObjectSafetyAnalyzer
from schemaguard.analysis.models import (
    AnalysisResult,
    ObjectSafetyAssessment,
    OperationRisk,
    RiskLevel,
    UsageReference,
)
from schemaguard.metadata.provider import MetadataProvider, StaticMetadataProvider

__version__ = "0.1.0"

__all__ = [
    "AnalysisResult",
    "AnalyzerState",
    "MetadataProvider",
    "ObjectSafetyAnalyzer",
    "ObjectSafetyAssessment",
    "OperationRisk",
    "RiskLevel",
    "StaticMetadataProvider",
    "UsageReference",
]
