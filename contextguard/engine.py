"""Analysis orchestrator.

``AnalysisEngine`` wires the extractors, pattern catalogs and analyzers
together and exposes the entry points callers use:

- ``analyze_comprehensively``: the full pipeline plus cross-cutting metrics,
  an executive summary and prioritized recommendations
- ``quick_analyze``: a fast allow/block signal without the full pipeline
- ``analyze_for_ai``: what sharing the code with an AI assistant risks and
  how to sanitize it
- ``analyze_many``: concurrent batch analysis

Every verdict is recorded on the decision logger.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .analyzers.idioms import has_dynamic_execution
from .analyzers.intelligence import AnomalyDetector, IntelligenceAnalyzer
from .analyzers.models import IntelligenceResult, RiskAnalysisResult, SemanticContext, SemanticRole
from .analyzers.risk import RiskAnalyzer
from .analyzers.semantic import SemanticAnalyzer
from .config import AnalysisSettings, get_settings
from .constants import ANALYSIS_VERSION
from .core.levels import Severity, at_least
from .core.text import IdentifierIndex
from .extractors import ElementExtractor, quick_extract
from .logging_config import get_decision_logger
from .patterns.matcher import PatternCatalogs, PatternMatcher

logger = logging.getLogger(__name__)
decision_logger = get_decision_logger()

QUICK_SECRET_WORDS = ("password", "secret", "token", "key")
DANGEROUS_OPERATIONS_RE = re.compile(r"\bchild_process\b|\bfs\.\w|\bvm\.\w")

EXECUTIVE_RECOMMENDATIONS = {
    "block": "Immediate action required - do not proceed with AI analysis until issues are resolved",
    "caution": "Proceed with caution - address identified risks before AI analysis",
    "proceed": "Safe to proceed with AI analysis using standard security precautions",
}


# =============================================================================
# Inputs
# =============================================================================


class SourceUnit(BaseModel):
    """One unit of source text handed to the pipeline."""

    model_config = ConfigDict(frozen=True)

    text: str
    file_name: str | None = None
    dependencies: list[str] = Field(default_factory=list)


class AIAnalysisContext(BaseModel):
    """How the code is going to be used with an AI assistant."""

    assistant_type: str | None = None
    intended_use: str | None = None
    sensitivity_level: Severity = Severity.LOW
    compliance_requirements: list[str] = Field(default_factory=list)


# =============================================================================
# Comprehensive Results
# =============================================================================


class ComplexityRollup(BaseModel):
    semantic: int = 0
    risk: int = 0
    intelligence: float = 0.0


class SecurityPosture(BaseModel):
    vulnerability_count: int = 0
    threat_level: Severity = Severity.LOW
    mitigation_coverage: float = 1.0


class MaintainabilityIndex(BaseModel):
    code_quality: float = 100.0
    technical_debt: int = 0
    refactoring_priority: Severity = Severity.LOW


class BusinessImpact(BaseModel):
    business_logic_exposure: int = 0
    compliance_risk: Severity = Severity.LOW
    intellectual_property_risk: Severity = Severity.LOW


class ComprehensiveMetrics(BaseModel):
    overall_complexity: ComplexityRollup = Field(default_factory=ComplexityRollup)
    security_posture: SecurityPosture = Field(default_factory=SecurityPosture)
    maintainability_index: MaintainabilityIndex = Field(default_factory=MaintainabilityIndex)
    business_impact: BusinessImpact = Field(default_factory=BusinessImpact)


class ExecutiveSummary(BaseModel):
    overall_assessment: Severity
    key_findings: list[str] = Field(default_factory=list)
    critical_issues: list[str] = Field(default_factory=list)
    business_impact: str = ""
    recommended_actions: list[str] = Field(default_factory=list)
    executive_recommendation: str = ""


class ConsolidatedRecommendations(BaseModel):
    immediate: list[str] = Field(default_factory=list)
    short_term: list[str] = Field(default_factory=list)
    long_term: list[str] = Field(default_factory=list)
    strategic: list[str] = Field(default_factory=list)


class AnalysisMetadata(BaseModel):
    timestamp: datetime = Field(default_factory=datetime.now)
    file_name: str = "unknown"
    code_length: int = 0
    analysis_version: str = ANALYSIS_VERSION
    processing_time_ms: float = 0.0


class ComprehensiveAnalysisResult(BaseModel):
    """Everything the full pipeline produces for one source."""

    semantic_context: SemanticContext
    risk_analysis: RiskAnalysisResult
    intelligence_analysis: IntelligenceResult
    comprehensive_metrics: ComprehensiveMetrics
    executive_summary: ExecutiveSummary
    consolidated_recommendations: ConsolidatedRecommendations
    analysis_metadata: AnalysisMetadata

    @property
    def should_block(self) -> bool:
        return self.risk_analysis.overall.should_block


# =============================================================================
# Quick and AI Results
# =============================================================================


class QuickMetrics(BaseModel):
    function_count: int = 0
    class_count: int = 0
    import_count: int = 0
    line_count: int = 0
    complexity: str = "low"
    has_secrets: bool = False
    has_dynamic_code: bool = False


class QuickAnalysisResult(BaseModel):
    risk_level: Severity = Severity.LOW
    quick_risks: list[str] = Field(default_factory=list)
    quick_recommendations: list[str] = Field(default_factory=list)
    should_block: bool = False
    requires_review: bool = False
    metrics: QuickMetrics = Field(default_factory=QuickMetrics)
    processing_time_ms: float = 0.0


class AIRisk(BaseModel):
    """A risk of sharing the code with an AI assistant.

    Attributes:
        type: ``data_exposure``, ``business_logic_exposure`` or
            ``infrastructure_exposure``.
        severity: How bad the exposure is.
        description: What would be exposed.
        mitigation: How to avoid the exposure.
        targets: Elements (variables, functions, modules, URLs) to mask.
    """

    type: str
    severity: Severity
    description: str
    mitigation: str
    targets: list[str] = Field(default_factory=list)


class SanitizationStep(BaseModel):
    step: str
    action: str
    automated: bool = False
    targets: list[str] = Field(default_factory=list)


class SanitizationPlan(BaseModel):
    required_steps: list[SanitizationStep] = Field(default_factory=list)
    automation_level: float = 1.0
    estimated_effort: Severity = Severity.LOW
    risk_reduction: float = 1.0


class AIGuidelines(BaseModel):
    allowed_interactions: list[str] = Field(default_factory=list)
    restricted_topics: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    monitoring_requirements: list[str] = Field(default_factory=list)


class AIAnalysisResult(BaseModel):
    overall_safety: str = "safe"  # safe / caution / unsafe
    ai_risks: list[AIRisk] = Field(default_factory=list)
    sanitization_plan: SanitizationPlan = Field(default_factory=SanitizationPlan)
    ai_guidelines: AIGuidelines = Field(default_factory=AIGuidelines)
    semantic_context: SemanticContext
    risk_analysis: RiskAnalysisResult
    analysis_date: datetime = Field(default_factory=datetime.now)
    ai_context_provided: bool = False
    risk_factor_count: int = 0


# =============================================================================
# Engine
# =============================================================================


def recommendation_priority(recommendation: str) -> str:
    """Bucket a recommendation by the words it uses."""
    text = recommendation.lower()
    if "secret" in text or "security" in text:
        return "immediate"
    if "refactor" in text or "complexity" in text:
        return "short_term"
    return "long_term"


class AnalysisEngine:
    """Runs the analysis pipeline with injected settings and catalogs.

    Args:
        settings: Settings to use (default: the global settings)
        catalogs: Pattern catalogs (default: built from ``settings``)
        detectors: Anomaly detectors for the intelligence stage
    """

    def __init__(
        self,
        settings: AnalysisSettings | None = None,
        catalogs: PatternCatalogs | None = None,
        detectors: Mapping[str, Sequence[AnomalyDetector]] | None = None,
    ):
        self.settings = settings or get_settings()
        self.pattern_matcher = PatternMatcher(catalogs or PatternCatalogs.from_settings(self.settings))
        self.semantic_analyzer = SemanticAnalyzer(ElementExtractor(), self.pattern_matcher)
        self.risk_analyzer = RiskAnalyzer(self.pattern_matcher)
        self.intelligence_analyzer = IntelligenceAnalyzer(detectors)

    # -------------------------------------------------------------------------
    # Comprehensive analysis
    # -------------------------------------------------------------------------

    def analyze_comprehensively(
        self,
        text: str,
        file_name: str | None = None,
        dependencies: Sequence[str] | None = None,
    ) -> ComprehensiveAnalysisResult:
        """Run the full pipeline on ``text``.

        Args:
            text: Source text to analyze
            file_name: Name or path of the file the text came from
            dependencies: Declared package dependencies

        Returns:
            ComprehensiveAnalysisResult; only ``analysis_metadata`` varies
            between runs on the same input
        """
        started = time.perf_counter()

        context = self.semantic_analyzer.analyze_semantics(text, file_name, dependencies)
        risk = self.risk_analyzer.analyze_risk(context)
        intelligence = self.intelligence_analyzer.analyze_intelligence(context, risk)

        duration_ms = round((time.perf_counter() - started) * 1000, 3)
        result = ComprehensiveAnalysisResult(
            semantic_context=context,
            risk_analysis=risk,
            intelligence_analysis=intelligence,
            comprehensive_metrics=self.comprehensive_metrics(context, risk, intelligence),
            executive_summary=self.executive_summary(context, risk, intelligence),
            consolidated_recommendations=self.consolidate_recommendations(risk, intelligence),
            analysis_metadata=AnalysisMetadata(
                file_name=file_name or "unknown",
                code_length=len(text),
                processing_time_ms=duration_ms,
            ),
        )

        overall = risk.overall
        decision_logger.info(
            f"{file_name or '<text>'}: {overall.level.value} risk, "
            f"{'blocked' if overall.should_block else 'allowed'}",
            extra={
                "event": "analysis_decision",
                "mode": "comprehensive",
                "file_name": file_name or "unknown",
                "risk_level": overall.level.value,
                "should_block": overall.should_block,
                "requires_review": overall.requires_review,
                "score": overall.score,
                "critical_count": overall.risk_factors.critical,
                "high_count": overall.risk_factors.high,
                "duration_ms": duration_ms,
            },
        )
        return result

    def comprehensive_metrics(
        self,
        context: SemanticContext,
        risk: RiskAnalysisResult,
        intelligence: IntelligenceResult,
    ) -> ComprehensiveMetrics:
        cognitive = context.complexity.cognitive
        level = risk.overall.level

        factors = len(risk.risk_factors)
        immediate = len(intelligence.actions.immediate)
        coverage = immediate / factors if factors else 1.0

        if cognitive > 20 or level.rank >= Severity.HIGH.rank:
            refactoring = Severity.HIGH
        elif cognitive > 10 or level == Severity.MEDIUM:
            refactoring = Severity.MEDIUM
        else:
            refactoring = Severity.LOW

        high_business = sum(1 for m in context.business_logic if m.risk_level == Severity.HIGH)
        clarity = intelligence.intent.intent_clarity
        if high_business > 2 and clarity < 0.5:
            ip_risk = Severity.HIGH
        elif high_business > 0 or clarity < 0.7:
            ip_risk = Severity.MEDIUM
        else:
            ip_risk = Severity.LOW

        return ComprehensiveMetrics(
            overall_complexity=ComplexityRollup(
                semantic=cognitive,
                risk=risk.overall.score,
                intelligence=round(intelligence.behavior.behavior_score * 100, 2),
            ),
            security_posture=SecurityPosture(
                vulnerability_count=sum(1 for f in risk.risk_factors if f.type == "security"),
                threat_level=intelligence.threat_intelligence.threat_level,
                mitigation_coverage=round(coverage, 4),
            ),
            maintainability_index=MaintainabilityIndex(
                code_quality=context.complexity.maintainability,
                technical_debt=context.complexity.technical_debt,
                refactoring_priority=refactoring,
            ),
            business_impact=BusinessImpact(
                business_logic_exposure=high_business,
                compliance_risk=risk.categories.compliance.level,
                intellectual_property_risk=ip_risk,
            ),
        )

    def executive_summary(
        self,
        context: SemanticContext,
        risk: RiskAnalysisResult,
        intelligence: IntelligenceResult,
    ) -> ExecutiveSummary:
        level = risk.overall.level
        key_findings = [
            f"Overall risk level: {level.value}",
            f"Security score: {risk.overall.score}/100",
            f"Threat level: {intelligence.threat_intelligence.threat_level.value}",
            f"Code complexity: {context.complexity.cognitive}",
        ]
        critical_issues = [
            item.description
            for category in risk.categories.all()
            for item in category.risks
            if item.severity in (Severity.CRITICAL, Severity.HIGH)
        ]

        if intelligence.intent.business_alignment > 0.7:
            business_impact = "High business logic exposure detected"
        else:
            business_impact = "Limited business logic exposure"

        if level.rank >= Severity.HIGH.rank or critical_issues:
            recommendation = EXECUTIVE_RECOMMENDATIONS["block"]
        elif level == Severity.MEDIUM:
            recommendation = EXECUTIVE_RECOMMENDATIONS["caution"]
        else:
            recommendation = EXECUTIVE_RECOMMENDATIONS["proceed"]

        return ExecutiveSummary(
            overall_assessment=level,
            key_findings=key_findings,
            critical_issues=critical_issues,
            business_impact=business_impact,
            recommended_actions=(intelligence.actions.immediate + risk.recommendations)[:5],
            executive_recommendation=recommendation,
        )

    def consolidate_recommendations(
        self,
        risk: RiskAnalysisResult,
        intelligence: IntelligenceResult,
    ) -> ConsolidatedRecommendations:
        """Deduplicate recommendations and bucket them by priority."""
        unique = dict.fromkeys(risk.recommendations + intelligence.actions.immediate + intelligence.actions.short_term)
        buckets: dict[str, list[str]] = {"immediate": [], "short_term": [], "long_term": []}
        for recommendation in unique:
            buckets[recommendation_priority(recommendation)].append(recommendation)
        return ConsolidatedRecommendations(
            **buckets,
            strategic=list(intelligence.insights.strategic_recommendations),
        )

    # -------------------------------------------------------------------------
    # Quick analysis
    # -------------------------------------------------------------------------

    def quick_analyze(self, text: str, file_name: str | None = None) -> QuickAnalysisResult:
        """Fast verdict from counts and a few idioms.

        ``should_block`` is set exactly when the text calls ``eval`` or
        ``Function``, the same idiom that makes the full pipeline block.
        """
        started = time.perf_counter()
        extraction = quick_extract(text)
        metrics = QuickMetrics(
            function_count=extraction.function_count,
            class_count=extraction.class_count,
            import_count=extraction.import_count,
            line_count=extraction.line_count,
            complexity=extraction.complexity,
            has_secrets=bool(IdentifierIndex(text).hits(QUICK_SECRET_WORDS)),
            has_dynamic_code=has_dynamic_execution(text),
        )

        level = Severity.LOW
        risks: list[str] = []
        if metrics.has_secrets:
            risks.append("Potential secrets detected")
            level = Severity.MEDIUM
        if metrics.has_dynamic_code:
            risks.append("Dynamic code execution detected")
            level = Severity.CRITICAL
        if DANGEROUS_OPERATIONS_RE.search(text):
            risks.append("Potentially dangerous operations")
            level = at_least(level, Severity.HIGH)

        recommendations = []
        if level.rank >= Severity.HIGH.rank:
            recommendations.append("Conduct detailed security review before AI analysis")
        if metrics.has_secrets:
            recommendations.append("Remove or mask sensitive values")

        duration_ms = round((time.perf_counter() - started) * 1000, 3)
        result = QuickAnalysisResult(
            risk_level=level,
            quick_risks=risks,
            quick_recommendations=recommendations,
            should_block=metrics.has_dynamic_code,
            requires_review=level.rank >= Severity.HIGH.rank,
            metrics=metrics,
            processing_time_ms=duration_ms,
        )
        decision_logger.info(
            f"{file_name or '<text>'}: quick {level.value} risk",
            extra={
                "event": "analysis_decision",
                "mode": "quick",
                "file_name": file_name or "unknown",
                "risk_level": level.value,
                "should_block": result.should_block,
                "requires_review": result.requires_review,
                "duration_ms": duration_ms,
            },
        )
        return result

    # -------------------------------------------------------------------------
    # AI sharing analysis
    # -------------------------------------------------------------------------

    def analyze_for_ai(
        self,
        text: str,
        file_name: str | None = None,
        ai_context: AIAnalysisContext | None = None,
    ) -> AIAnalysisResult:
        """Assess what sharing ``text`` with an AI assistant would expose.

        Args:
            text: Source text to share
            file_name: Name or path of the file the text came from
            ai_context: Intended assistant use and sensitivity

        Returns:
            AIAnalysisResult with the exposure risks, a sanitization plan
            naming the elements to mask and interaction guidelines
        """
        context = self.semantic_analyzer.analyze_semantics(text, file_name)
        risk = self.risk_analyzer.analyze_risk(context)

        ai_risks = self.ai_risks(context, risk)
        result = AIAnalysisResult(
            overall_safety=self.ai_safety(risk, ai_risks, ai_context),
            ai_risks=ai_risks,
            sanitization_plan=self.sanitization_plan(ai_risks),
            ai_guidelines=self.ai_guidelines(risk, ai_risks, ai_context),
            semantic_context=context,
            risk_analysis=risk,
            ai_context_provided=ai_context is not None,
            risk_factor_count=len(risk.risk_factors),
        )
        decision_logger.info(
            f"{file_name or '<text>'}: AI sharing {result.overall_safety}",
            extra={
                "event": "analysis_decision",
                "mode": "ai",
                "file_name": file_name or "unknown",
                "risk_level": risk.overall.level.value,
                "should_block": result.overall_safety == "unsafe",
                "requires_review": risk.overall.requires_review,
            },
        )
        return result

    def ai_risks(self, context: SemanticContext, risk: RiskAnalysisResult) -> list[AIRisk]:
        risks: list[AIRisk] = []

        secret_targets = [v.name for v in context.variables if v.element.is_potential_secret]
        secret_targets += [f"{m.name} (line {m.line})" for m in context.secrets.matches]
        if secret_targets:
            risks.append(
                AIRisk(
                    type="data_exposure",
                    severity=Severity.HIGH,
                    description="Code contains potential secrets that could be exposed to AI",
                    mitigation="Remove or mask sensitive values before AI analysis",
                    targets=secret_targets,
                )
            )

        if any(m.risk_level == Severity.HIGH for m in context.business_logic):
            risks.append(
                AIRisk(
                    type="business_logic_exposure",
                    severity=Severity.MEDIUM,
                    description="Proprietary business logic may be exposed to AI systems",
                    mitigation="Abstract or generalize business logic before sharing",
                    targets=[f.name for f in context.functions if f.semantic_role is SemanticRole.BUSINESS],
                )
            )

        infrastructure = [
            r.description.removeprefix("High-risk module import: ")
            for r in risk.categories.security.risks
            if r.type == "dangerous_import"
        ]
        infrastructure += context.idioms.urls
        if infrastructure:
            risks.append(
                AIRisk(
                    type="infrastructure_exposure",
                    severity=Severity.MEDIUM,
                    description="Infrastructure details may be revealed to AI",
                    mitigation="Remove infrastructure-specific configurations",
                    targets=infrastructure,
                )
            )
        return risks

    def sanitization_plan(self, ai_risks: Sequence[AIRisk]) -> SanitizationPlan:
        by_type = {r.type: r for r in ai_risks}
        steps: list[SanitizationStep] = []
        if "data_exposure" in by_type:
            steps.append(
                SanitizationStep(
                    step="Remove sensitive data",
                    action="Replace secrets, API keys, and passwords with placeholders",
                    automated=True,
                    targets=by_type["data_exposure"].targets,
                )
            )
        if "business_logic_exposure" in by_type:
            steps.append(
                SanitizationStep(
                    step="Abstract business logic",
                    action="Generalize proprietary algorithms and business rules",
                    targets=by_type["business_logic_exposure"].targets,
                )
            )
        if "infrastructure_exposure" in by_type:
            steps.append(
                SanitizationStep(
                    step="Remove infrastructure details",
                    action="Replace hostnames, URLs and system module usage with generic placeholders",
                    targets=by_type["infrastructure_exposure"].targets,
                )
            )

        manual = sum(1 for s in steps if not s.automated)
        if manual > 3:
            effort = Severity.HIGH
        elif manual > 1:
            effort = Severity.MEDIUM
        else:
            effort = Severity.LOW

        return SanitizationPlan(
            required_steps=steps,
            automation_level=round(sum(1 for s in steps if s.automated) / len(steps), 4) if steps else 1.0,
            estimated_effort=effort,
            risk_reduction=round(min(len(steps) / len(ai_risks), 1.0), 4) if ai_risks else 1.0,
        )

    def ai_safety(
        self,
        risk: RiskAnalysisResult,
        ai_risks: Sequence[AIRisk],
        ai_context: AIAnalysisContext | None = None,
    ) -> str:
        level = risk.overall.level
        if level.rank >= Severity.HIGH.rank or any(r.severity == Severity.HIGH for r in ai_risks):
            return "unsafe"
        if level == Severity.MEDIUM or ai_risks:
            if ai_context is not None and ai_context.sensitivity_level.rank >= Severity.HIGH.rank:
                return "unsafe"
            return "caution"
        return "safe"

    def ai_guidelines(
        self,
        risk: RiskAnalysisResult,
        ai_risks: Sequence[AIRisk],
        ai_context: AIAnalysisContext | None = None,
    ) -> AIGuidelines:
        level = risk.overall.level
        types = {r.type for r in ai_risks}
        high = level.rank >= Severity.HIGH.rank

        if high:
            allowed = ["general_questions"]
        elif level == Severity.MEDIUM:
            allowed = ["general_questions", "syntax_help"]
        else:
            allowed = ["general_questions", "syntax_help", "code_review", "optimization"]

        restricted = []
        if "data_exposure" in types:
            restricted.append("sensitive_data_handling")
        if "business_logic_exposure" in types:
            restricted.append("proprietary_algorithms")
        if "infrastructure_exposure" in types:
            restricted.append("infrastructure_configuration")

        recommendations = []
        if high:
            recommendations.append("Avoid sharing this code with AI until security issues are resolved")
        if "business_logic_exposure" in types:
            recommendations.append("Focus AI questions on general programming concepts rather than specific logic")
        if ai_context is not None and ai_context.compliance_requirements:
            recommendations.append(
                f"Confirm AI usage complies with: {', '.join(ai_context.compliance_requirements)}"
            )

        monitoring = []
        sensitive = ai_context is not None and ai_context.sensitivity_level.rank >= Severity.HIGH.rank
        if high or sensitive:
            monitoring.append("Log all AI interactions")
        if ai_risks:
            monitoring.append("Monitor for data leakage")

        return AIGuidelines(
            allowed_interactions=allowed,
            restricted_topics=restricted,
            recommendations=recommendations,
            monitoring_requirements=monitoring,
        )

    # -------------------------------------------------------------------------
    # Batch analysis
    # -------------------------------------------------------------------------

    async def analyze_many(
        self,
        sources: Iterable[SourceUnit | str],
        concurrency: int | None = None,
    ) -> list[ComprehensiveAnalysisResult]:
        """Analyze independent sources concurrently in worker threads.

        Args:
            sources: Source units, or bare texts
            concurrency: Analyses run at once (default: ``batch_concurrency``)

        Returns:
            Results in the order of ``sources``
        """
        units = [SourceUnit(text=s) if isinstance(s, str) else s for s in sources]
        limit = self.settings.batch_concurrency if concurrency is None else concurrency
        if limit < 1:
            raise ValueError("concurrency must be at least 1")
        semaphore = asyncio.Semaphore(limit)

        async def bounded_analyze(unit: SourceUnit) -> ComprehensiveAnalysisResult:
            async with semaphore:
                return await asyncio.to_thread(
                    self.analyze_comprehensively, unit.text, unit.file_name, unit.dependencies
                )

        logger.debug(f"Analyzing {len(units)} sources with concurrency {limit}")
        return list(await asyncio.gather(*(bounded_analyze(u) for u in units)))


_default_engine: AnalysisEngine | None = None


def get_engine() -> AnalysisEngine:
    """Get or create the default engine built from the global settings."""
    global _default_engine
    if _default_engine is None:
        _default_engine = AnalysisEngine()
    return _default_engine


def analyze_comprehensively(
    text: str,
    file_name: str | None = None,
    dependencies: Sequence[str] | None = None,
) -> ComprehensiveAnalysisResult:
    return get_engine().analyze_comprehensively(text, file_name, dependencies)


def quick_analyze(text: str, file_name: str | None = None) -> QuickAnalysisResult:
    return get_engine().quick_analyze(text, file_name)


def analyze_for_ai(
    text: str,
    file_name: str | None = None,
    ai_context: AIAnalysisContext | None = None,
) -> AIAnalysisResult:
    return get_engine().analyze_for_ai(text, file_name, ai_context)


async def analyze_many(
    sources: Iterable[SourceUnit | str],
    concurrency: int | None = None,
) -> list[ComprehensiveAnalysisResult]:
    return await get_engine().analyze_many(sources, concurrency)
