"""Pydantic models for the semantic, risk and intelligence stages.

Enriched elements wrap the frozen extractor elements (``element``) and add
the attributes derived once during semantic analysis. Downstream stages
read these wrappers and never look at the raw text again.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from ..core.levels import Likelihood, RiskCategory, Severity
from ..extractors.models import (
    ClassElement,
    ExportElement,
    ExportSecurityReport,
    ExtractionMetadata,
    FunctionElement,
    ImportElement,
    ImportSecurityReport,
    VariableElement,
)
from ..patterns.models import BusinessLogicMatch, FrameworkMatch, PatternSummary, SecretAnalysis


class SemanticRole(str, Enum):
    BUSINESS = "business"
    UI = "ui"
    INFRASTRUCTURE = "infrastructure"
    UTILITY = "utility"
    UNKNOWN = "unknown"


class AccessPattern(str, Enum):
    READ_ONLY = "read-only"
    WRITE_ONLY = "write-only"
    READ_WRITE = "read-write"
    UNUSED = "unused"


# =============================================================================
# Enriched Elements
# =============================================================================


class FunctionComplexity(BaseModel):
    cyclomatic: int = 1
    cognitive: int = 0
    parameters: int = 0


class EnrichedFunction(BaseModel):
    """A function with its role, side effects and complexity.

    Attributes:
        element: The extracted function.
        semantic_role: Coarse purpose derived from the name.
        calls_external: Body makes HTTP/API style calls.
        modifies_state: Body assigns properties or mutates collections.
        complexity: Cyclomatic and cognitive complexity of the body.
        dependencies: Functions the body calls, excluding itself.
        side_effects: Tags such as ``network_request`` or ``dom_manipulation``.
    """

    element: FunctionElement
    semantic_role: SemanticRole = SemanticRole.UNKNOWN
    calls_external: bool = False
    modifies_state: bool = False
    complexity: FunctionComplexity = Field(default_factory=FunctionComplexity)
    dependencies: list[str] = Field(default_factory=list)
    side_effects: list[str] = Field(default_factory=list)

    @property
    def name(self) -> str:
        return self.element.name


class VariableUsage(BaseModel):
    read_count: int = 0
    write_count: int = 0
    access_pattern: AccessPattern = AccessPattern.UNUSED


class DataFlow(BaseModel):
    sources: list[str] = Field(default_factory=list)
    destinations: list[str] = Field(default_factory=list)
    transformations: list[str] = Field(default_factory=list)


class ElementRisk(BaseModel):
    level: Severity = Severity.LOW
    reasons: list[str] = Field(default_factory=list)


class EnrichedVariable(BaseModel):
    element: VariableElement
    usage: VariableUsage = Field(default_factory=VariableUsage)
    data_flow: DataFlow = Field(default_factory=DataFlow)
    risk: ElementRisk = Field(default_factory=ElementRisk)

    @property
    def name(self) -> str:
        return self.element.name


class ImportUsage(BaseModel):
    frequency: int = 0
    locations: list[int] = Field(default_factory=list)


class EnrichedImport(BaseModel):
    element: ImportElement
    purpose: str = "unknown"  # utility / framework / business / testing / unknown
    usage: ImportUsage = Field(default_factory=ImportUsage)
    security: ElementRisk = Field(default_factory=ElementRisk)


class ExportDocumentation(BaseModel):
    has_documentation: bool = False
    quality: str = "none"  # good / basic / none


class EnrichedExport(BaseModel):
    element: ExportElement
    api_category: str = "public"  # public / internal / testing / legacy
    complexity: int = 1
    documentation: ExportDocumentation = Field(default_factory=ExportDocumentation)


class InheritanceInfo(BaseModel):
    depth: int = 1
    complexity: float = 0.0


class EnrichedClass(BaseModel):
    element: ClassElement
    design_patterns: list[str] = Field(default_factory=list)
    responsibility: str = "unclear"  # single / multiple / unclear
    coupling: str = "loose"  # loose / medium / tight
    cohesion: str = "medium"  # high / medium / low
    inheritance: InheritanceInfo = Field(default_factory=InheritanceInfo)


# =============================================================================
# Aggregates
# =============================================================================


class Hotspot(BaseModel):
    kind: str
    name: str
    line: int
    complexity: int


class CodeComplexity(BaseModel):
    cyclomatic: int = 0
    cognitive: int = 0
    maintainability: float = 100.0
    technical_debt: int = 0
    hotspots: list[Hotspot] = Field(default_factory=list)


class FunctionCall(BaseModel):
    caller: str
    callee: str
    type: str = "direct"  # direct / indirect


class DataFlowEdge(BaseModel):
    source: str
    target: str
    via: str


class DependencyEdge(BaseModel):
    dependent: str
    dependency: str
    strength: str  # strong / weak


class CouplingMetrics(BaseModel):
    afferent: int = 0
    efferent: int = 0
    instability: float = 0.0


class CodeRelationships(BaseModel):
    function_calls: list[FunctionCall] = Field(default_factory=list)
    data_flow: list[DataFlowEdge] = Field(default_factory=list)
    dependencies: list[DependencyEdge] = Field(default_factory=list)
    coupling: CouplingMetrics = Field(default_factory=CouplingMetrics)


class RiskFactor(BaseModel):
    """A semantic risk factor (security, maintainability, performance or reliability)."""

    type: str
    severity: Severity
    description: str
    line: int = 1
    column: int | None = None
    recommendation: str = ""


class SourceIdioms(BaseModel):
    """Everything the downstream stages need from one scan of the raw text.

    Attributes:
        dynamic_execution_line: First line calling ``eval``/``Function``.
        known_threats: Keys of the threat idioms present.
        malicious_patterns: Keys of the malicious idioms present.
        data_encoding: base64/JSON encoding calls present.
        template_interpolation: Template placeholders present.
        sql_concatenation: SQL statements built by concatenation.
        string_timers: ``setTimeout``/``setInterval`` given a code string.
        escaped_characters: ``\\x``/``\\u`` escapes present.
        urls: Distinct URLs in order of appearance.
        protocols: Protocols referenced (HTTPS, HTTP, WebSocket, FTP).
        scheduled_operations: Timers or cron references present.
        delayed_execution: Delays present.
        periodic_execution: Intervals present.
    """

    dynamic_execution_line: int | None = None
    known_threats: list[str] = Field(default_factory=list)
    malicious_patterns: list[str] = Field(default_factory=list)
    data_encoding: bool = False
    template_interpolation: bool = False
    sql_concatenation: bool = False
    string_timers: bool = False
    escaped_characters: bool = False
    urls: list[str] = Field(default_factory=list)
    protocols: list[str] = Field(default_factory=list)
    scheduled_operations: bool = False
    delayed_execution: bool = False
    periodic_execution: bool = False

    @property
    def has_dynamic_execution(self) -> bool:
        return self.dynamic_execution_line is not None


class SemanticContext(BaseModel):
    """The single aggregate handed to the risk and intelligence stages."""

    file_name: str | None = None
    code_length: int = 0
    functions: list[EnrichedFunction] = Field(default_factory=list)
    variables: list[EnrichedVariable] = Field(default_factory=list)
    imports: list[EnrichedImport] = Field(default_factory=list)
    exports: list[EnrichedExport] = Field(default_factory=list)
    classes: list[EnrichedClass] = Field(default_factory=list)
    secrets: SecretAnalysis = Field(default_factory=SecretAnalysis)
    business_logic: list[BusinessLogicMatch] = Field(default_factory=list)
    frameworks: list[FrameworkMatch] = Field(default_factory=list)
    pattern_summary: PatternSummary = Field(default_factory=PatternSummary)
    complexity: CodeComplexity = Field(default_factory=CodeComplexity)
    relationships: CodeRelationships = Field(default_factory=CodeRelationships)
    risk_factors: list[RiskFactor] = Field(default_factory=list)
    import_security: ImportSecurityReport = Field(default_factory=ImportSecurityReport)
    export_security: ExportSecurityReport = Field(default_factory=ExportSecurityReport)
    extraction: ExtractionMetadata = Field(default_factory=ExtractionMetadata)
    idioms: SourceIdioms = Field(default_factory=SourceIdioms)


# =============================================================================
# Risk Analysis
# =============================================================================


class RiskItem(BaseModel):
    type: str
    severity: Severity
    likelihood: Likelihood
    description: str
    line: int = 1
    column: int | None = None
    impact: str = ""


class CategoryRisk(BaseModel):
    category: RiskCategory
    level: Severity = Severity.LOW
    score: int = 0
    risks: list[RiskItem] = Field(default_factory=list)
    summary: str = ""
    recommendations: list[str] = Field(default_factory=list)

    def count(self, severity: Severity) -> int:
        return sum(1 for r in self.risks if r.severity == severity)


class RiskCategories(BaseModel):
    security: CategoryRisk
    business: CategoryRisk
    technical: CategoryRisk
    compliance: CategoryRisk

    def all(self) -> list[CategoryRisk]:
        return [self.security, self.business, self.technical, self.compliance]


class RiskCounts(BaseModel):
    total: int = 0
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0


class OverallRisk(BaseModel):
    level: Severity = Severity.LOW
    score: int = 0
    confidence: int = 0
    recommendation: str = ""
    should_block: bool = False
    requires_review: bool = False
    risk_factors: RiskCounts = Field(default_factory=RiskCounts)


class RiskAnalysisResult(BaseModel):
    overall: OverallRisk
    categories: RiskCategories
    recommendations: list[str] = Field(default_factory=list)
    mitigation_strategies: list[str] = Field(default_factory=list)
    risk_factors: list[RiskFactor] = Field(default_factory=list)
    file_name: str = "unknown"


class QuickRiskResult(BaseModel):
    risk_level: Severity = Severity.LOW
    should_block: bool = False
    requires_review: bool = False
    findings: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    processing_time_ms: float = 0.0


# =============================================================================
# Intelligence Analysis
# =============================================================================


class ThreatItem(BaseModel):
    type: str
    severity: Severity
    description: str


class MaliciousPattern(BaseModel):
    pattern: str
    risk: Severity
    explanation: str


class SuspiciousActivity(BaseModel):
    activity: str
    confidence: float
    evidence: list[str] = Field(default_factory=list)


class ExfiltrationRisk(BaseModel):
    risk: Severity = Severity.LOW
    indicators: list[str] = Field(default_factory=list)
    likelihood: float = 0.0


class InjectionRisk(BaseModel):
    risk: Severity = Severity.LOW
    vectors: list[str] = Field(default_factory=list)
    mitigation: list[str] = Field(default_factory=list)


class ThreatIntelligence(BaseModel):
    threat_level: Severity = Severity.LOW
    known_threats: list[ThreatItem] = Field(default_factory=list)
    malicious_patterns: list[MaliciousPattern] = Field(default_factory=list)
    suspicious_activity: list[SuspiciousActivity] = Field(default_factory=list)
    data_exfiltration: ExfiltrationRisk = Field(default_factory=ExfiltrationRisk)
    code_injection: InjectionRisk = Field(default_factory=InjectionRisk)
    threat_sources: list[str] = Field(default_factory=list)
    mitigation_priority: str = "low"  # immediate / normal / low


class AccessPatternItem(BaseModel):
    pattern: str
    frequency: int
    risk: Severity


class CommunicationPatterns(BaseModel):
    type: str = "external_communication"
    destinations: list[str] = Field(default_factory=list)
    protocols: list[str] = Field(default_factory=list)
    risk: Severity = Severity.LOW


class DataProcessingPatterns(BaseModel):
    operations: list[str] = Field(default_factory=list)
    sensitivity: Severity = Severity.LOW
    volume: Severity = Severity.LOW


class ResourceUsage(BaseModel):
    network_functions: int = 0
    storage_functions: int = 0
    file_functions: int = 0


class TimeBasedPatterns(BaseModel):
    scheduled_operations: bool = False
    delayed_execution: bool = False
    periodic_execution: bool = False


class BehaviorAnalysis(BaseModel):
    access_patterns: list[AccessPatternItem] = Field(default_factory=list)
    communication: CommunicationPatterns = Field(default_factory=CommunicationPatterns)
    data_processing: DataProcessingPatterns = Field(default_factory=DataProcessingPatterns)
    resource_usage: ResourceUsage = Field(default_factory=ResourceUsage)
    time_based: TimeBasedPatterns = Field(default_factory=TimeBasedPatterns)
    behavior_score: float = 0.0
    anomalies: list[str] = Field(default_factory=list)


class HiddenFunctionality(BaseModel):
    type: str
    description: str


class IntentAnalysis(BaseModel):
    primary_purpose: str = "unknown"
    secondary_purposes: list[str] = Field(default_factory=list)
    hidden_functionality: list[HiddenFunctionality] = Field(default_factory=list)
    business_alignment: float = 0.0
    technical_alignment: float = 0.0
    intent_clarity: float = 0.0
    legitimacy_score: float = 0.0
    suspicion_indicators: list[str] = Field(default_factory=list)


class Anomaly(BaseModel):
    kind: str
    description: str
    severity: Severity = Severity.LOW
    line: int | None = None


class AnomalyDetection(BaseModel):
    structural: list[Anomaly] = Field(default_factory=list)
    behavioral: list[Anomaly] = Field(default_factory=list)
    pattern: list[Anomaly] = Field(default_factory=list)
    statistical: list[Anomaly] = Field(default_factory=list)
    anomaly_score: float = 0.0
    confidence: float = 0.3


class ContextualInsights(BaseModel):
    framework: list[str] = Field(default_factory=list)
    business: list[str] = Field(default_factory=list)
    security: list[str] = Field(default_factory=list)
    compliance: list[str] = Field(default_factory=list)
    performance: list[str] = Field(default_factory=list)
    key_findings: list[str] = Field(default_factory=list)
    strategic_recommendations: list[str] = Field(default_factory=list)


class ActionableRecommendations(BaseModel):
    immediate: list[str] = Field(default_factory=list)
    short_term: list[str] = Field(default_factory=list)
    long_term: list[str] = Field(default_factory=list)
    preventive: list[str] = Field(default_factory=list)
    monitoring: list[str] = Field(default_factory=list)
    priority_matrix: dict[str, list[str]] = Field(default_factory=dict)
    roadmap: dict[str, list[str]] = Field(default_factory=dict)


class OverallAssessment(BaseModel):
    risk_level: Severity = Severity.LOW
    confidence: float = 0.0
    action_required: bool = False
    urgency: str = "low"  # immediate / urgent / normal / low
    summary: str = ""


class IntelligenceResult(BaseModel):
    threat_intelligence: ThreatIntelligence = Field(default_factory=ThreatIntelligence)
    behavior: BehaviorAnalysis = Field(default_factory=BehaviorAnalysis)
    intent: IntentAnalysis = Field(default_factory=IntentAnalysis)
    anomalies: AnomalyDetection = Field(default_factory=AnomalyDetection)
    insights: ContextualInsights = Field(default_factory=ContextualInsights)
    actions: ActionableRecommendations = Field(default_factory=ActionableRecommendations)
    overall_assessment: OverallAssessment = Field(default_factory=OverallAssessment)
