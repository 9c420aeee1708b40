"""Semantic, risk and intelligence analysis.

The stages run in one direction: :func:`analyze_semantics` builds the
:class:`SemanticContext`, :func:`analyze_risk` scores it and
:func:`analyze_intelligence` reads both.

Quick start::

    from contextguard.analyzers import analyze_intelligence, analyze_risk, analyze_semantics

    context = analyze_semantics(source, file_name="billing.ts")
    risk = analyze_risk(context)
    print(risk.overall.level, risk.overall.should_block)
    print(analyze_intelligence(context, risk).overall_assessment.summary)
"""

from .idioms import DYNAMIC_EXECUTION_RE, has_dynamic_execution, scan_idioms
from .intelligence import (
    ANOMALY_GROUPS,
    AnomalyDetector,
    IntelligenceAnalyzer,
    analyze_intelligence,
    get_intelligence_analyzer,
)
from .models import (
    Anomaly,
    CategoryRisk,
    EnrichedClass,
    EnrichedExport,
    EnrichedFunction,
    EnrichedImport,
    EnrichedVariable,
    IntelligenceResult,
    OverallRisk,
    QuickRiskResult,
    RiskAnalysisResult,
    RiskItem,
    SemanticContext,
    SemanticRole,
    SourceIdioms,
)
from .risk import RiskAnalyzer, analyze_risk, get_risk_analyzer, quick_risk_scan
from .semantic import SemanticAnalyzer, analyze_semantics, get_semantic_analyzer

__all__ = [
    # Stages
    "SemanticAnalyzer",
    "RiskAnalyzer",
    "IntelligenceAnalyzer",
    "analyze_semantics",
    "analyze_risk",
    "quick_risk_scan",
    "analyze_intelligence",
    "get_semantic_analyzer",
    "get_risk_analyzer",
    "get_intelligence_analyzer",
    # Idioms
    "DYNAMIC_EXECUTION_RE",
    "has_dynamic_execution",
    "scan_idioms",
    "SourceIdioms",
    # Anomaly extension points
    "ANOMALY_GROUPS",
    "AnomalyDetector",
    "Anomaly",
    # Models
    "SemanticContext",
    "SemanticRole",
    "EnrichedFunction",
    "EnrichedVariable",
    "EnrichedImport",
    "EnrichedExport",
    "EnrichedClass",
    "RiskAnalysisResult",
    "CategoryRisk",
    "RiskItem",
    "OverallRisk",
    "QuickRiskResult",
    "IntelligenceResult",
]
