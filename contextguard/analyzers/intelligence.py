"""Threat, behavior, intent and anomaly heuristics.

Every sub-report is computed from the semantic context (including its
one-time idiom scan) and the risk result; nothing here reads the raw text.
Anomaly detection is an extension point: callers register detector
callables per anomaly group and the scoring formula stays fixed.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable, Mapping, Sequence

from ..constants import (
    ANOMALY_WEIGHT,
    BEHAVIOR_GROUP_WEIGHT,
    EXCESSIVE_ACTIVITY_PATTERNS,
    EXCESSIVE_FILE_FUNCTIONS,
    EXCESSIVE_NETWORK_FUNCTIONS,
    MANY_SECRET_VARIABLES,
    MAX_FUNCTION_PARAMETERS,
)
from ..core.levels import Severity, max_severity
from ..core.text import IdentifierIndex
from .idioms import MALICIOUS_IDIOMS_BY_KEY, THREAT_IDIOMS_BY_KEY
from .models import (
    AccessPatternItem,
    ActionableRecommendations,
    Anomaly,
    AnomalyDetection,
    BehaviorAnalysis,
    CommunicationPatterns,
    ContextualInsights,
    DataProcessingPatterns,
    EnrichedFunction,
    ExfiltrationRisk,
    HiddenFunctionality,
    InjectionRisk,
    IntelligenceResult,
    IntentAnalysis,
    MaliciousPattern,
    OverallAssessment,
    ResourceUsage,
    RiskAnalysisResult,
    SemanticContext,
    SemanticRole,
    SuspiciousActivity,
    ThreatIntelligence,
    ThreatItem,
    TimeBasedPatterns,
)

logger = logging.getLogger(__name__)

AnomalyDetector = Callable[[SemanticContext], Iterable[Anomaly]]

ANOMALY_GROUPS = ("structural", "behavioral", "pattern", "statistical")

PURPOSE_BY_ROLE: dict[SemanticRole, str] = {
    SemanticRole.BUSINESS: "business_logic",
    SemanticRole.UI: "user_interface",
    SemanticRole.INFRASTRUCTURE: "infrastructure",
    SemanticRole.UTILITY: "utility",
}

NETWORK_NAME_WORDS = ("fetch", "axios", "http", "request", "api")
FILE_NAME_WORDS = ("file", "read", "write", "delete")
HIDDEN_NAME_WORDS = ("decode", "decrypt", "obfuscate", "hide", "stealth")
PROCESSING_NAME_WORDS = ("process", "transform", "convert", "parse", "serialize")

LONG_TERM_ACTIONS = ("Implement automated security scanning", "Establish security review process")
PREVENTIVE_ACTIONS = ("Implement threat detection rules", "Setup monitoring for suspicious patterns")
MONITORING_ACTIONS = ("Monitor access patterns", "Track behavior changes")

URGENCY_BY_LEVEL: dict[Severity, str] = {
    Severity.CRITICAL: "immediate",
    Severity.HIGH: "urgent",
    Severity.MEDIUM: "normal",
    Severity.LOW: "low",
}


def _score_bucket(score: float) -> Severity:
    if score >= 6:
        return Severity.HIGH
    if score >= 3:
        return Severity.MEDIUM
    return Severity.LOW


def _names(functions: Sequence[EnrichedFunction]) -> list[str]:
    return [f.name for f in functions]


def _is_network_function(function: EnrichedFunction) -> bool:
    return "network_request" in function.side_effects or bool(
        IdentifierIndex(function.name).hits(NETWORK_NAME_WORDS)
    )


def _is_file_function(function: EnrichedFunction) -> bool:
    return "file_system" in function.side_effects or bool(IdentifierIndex(function.name).hits(FILE_NAME_WORDS))


class IntelligenceAnalyzer:
    """Builds the intelligence report for one analyzed source.

    Args:
        detectors: Anomaly detectors keyed by group (``structural``,
            ``behavioral``, ``pattern`` or ``statistical``)
    """

    def __init__(self, detectors: Mapping[str, Sequence[AnomalyDetector]] | None = None):
        detectors = detectors or {}
        unknown = set(detectors) - set(ANOMALY_GROUPS)
        if unknown:
            raise ValueError(f"Unknown anomaly groups: {', '.join(sorted(unknown))}")
        self.detectors = {group: tuple(detectors.get(group, ())) for group in ANOMALY_GROUPS}

    def analyze_intelligence(self, context: SemanticContext, risk: RiskAnalysisResult) -> IntelligenceResult:
        """Combine threat, behavior, intent and anomaly sub-reports.

        Args:
            context: Semantic context of the source
            risk: Risk analysis of the same context

        Returns:
            IntelligenceResult including insights, actions and an overall
            assessment derived from the sub-reports
        """
        threat = self.analyze_threats(context)
        behavior = self.analyze_behavior(context)
        intent = self.analyze_intent(context)
        anomalies = self.detect_anomalies(context)
        insights = self.contextual_insights(context, risk)
        actions = self.actionable_recommendations(threat, intent, risk)

        result = IntelligenceResult(
            threat_intelligence=threat,
            behavior=behavior,
            intent=intent,
            anomalies=anomalies,
            insights=insights,
            actions=actions,
            overall_assessment=self.overall_assessment(threat, intent, anomalies, risk),
        )
        logger.debug(
            f"Intelligence for {context.file_name or '<text>'}: threat level "
            f"{threat.threat_level.value}, {len(threat.known_threats)} known threats"
        )
        return result

    # -------------------------------------------------------------------------
    # Threats
    # -------------------------------------------------------------------------

    def analyze_threats(self, context: SemanticContext) -> ThreatIntelligence:
        idioms = context.idioms
        known = [
            ThreatItem(
                type=key,
                severity=THREAT_IDIOMS_BY_KEY[key].severity,
                description=THREAT_IDIOMS_BY_KEY[key].description,
            )
            for key in idioms.known_threats
        ]
        malicious = [
            MaliciousPattern(
                pattern=key,
                risk=MALICIOUS_IDIOMS_BY_KEY[key].severity,
                explanation=MALICIOUS_IDIOMS_BY_KEY[key].description,
            )
            for key in idioms.malicious_patterns
        ]
        exfiltration = self.data_exfiltration_risk(context)
        injection = self.code_injection_risk(context)

        high_count = (
            sum(1 for t in known if t.severity == Severity.HIGH)
            + sum(1 for m in malicious if m.risk == Severity.HIGH)
            + (exfiltration.risk == Severity.HIGH)
            + (injection.risk == Severity.HIGH)
        )
        if high_count > 2:
            threat_level = Severity.CRITICAL
        elif high_count:
            threat_level = Severity.HIGH
        else:
            threat_level = Severity.LOW

        if threat_level == Severity.CRITICAL or any(t.severity == Severity.HIGH for t in known):
            priority = "immediate"
        elif known or malicious:
            priority = "normal"
        else:
            priority = "low"

        sources = []
        if any(imp.security.level == Severity.HIGH for imp in context.imports):
            sources.append("external_dependencies")

        return ThreatIntelligence(
            threat_level=threat_level,
            known_threats=known,
            malicious_patterns=malicious,
            suspicious_activity=self.suspicious_activity(context),
            data_exfiltration=exfiltration,
            code_injection=injection,
            threat_sources=sources,
            mitigation_priority=priority,
        )

    def suspicious_activity(self, context: SemanticContext) -> list[SuspiciousActivity]:
        activities: list[SuspiciousActivity] = []

        network = [f for f in context.functions if _is_network_function(f)]
        if len(network) > EXCESSIVE_NETWORK_FUNCTIONS:
            activities.append(
                SuspiciousActivity(activity="excessive_network_requests", confidence=0.7, evidence=_names(network))
            )

        files = [f for f in context.functions if _is_file_function(f)]
        if len(files) > EXCESSIVE_FILE_FUNCTIONS:
            activities.append(
                SuspiciousActivity(activity="excessive_file_operations", confidence=0.6, evidence=_names(files))
            )

        hidden = [f for f in context.functions if IdentifierIndex(f.name).hits(HIDDEN_NAME_WORDS)]
        if hidden:
            activities.append(
                SuspiciousActivity(activity="hidden_functionality", confidence=0.8, evidence=_names(hidden))
            )
        return activities

    def data_exfiltration_risk(self, context: SemanticContext) -> ExfiltrationRisk:
        indicators: list[str] = []
        score = 0

        if any("network_request" in f.side_effects for f in context.functions):
            indicators.append("External network communication detected")
            score += 3
        if context.idioms.data_encoding:
            indicators.append("Data encoding patterns detected")
            score += 2
        if any("storage_access" in f.side_effects for f in context.functions):
            indicators.append("Storage access detected")
            score += 2

        sensitive = [v for v in context.variables if v.element.is_potential_secret]
        if sensitive:
            indicators.append(f"{len(sensitive)} potentially sensitive variables")
            score += len(sensitive)

        return ExfiltrationRisk(risk=_score_bucket(score), indicators=indicators, likelihood=min(score / 10, 1.0))

    def code_injection_risk(self, context: SemanticContext) -> InjectionRisk:
        idioms = context.idioms
        vectors: list[str] = []
        mitigation: list[str] = []
        score = 0

        if idioms.has_dynamic_execution or idioms.string_timers:
            vectors.append("Dynamic code execution (eval, Function, etc.)")
            mitigation.append("Avoid dynamic code execution; use safe alternatives")
            score += 4
        if idioms.template_interpolation:
            vectors.append("Template injection potential")
            mitigation.append("Sanitize template inputs and use safe templating")
            score += 2
        if any("dom_manipulation" in f.side_effects for f in context.functions):
            vectors.append("DOM manipulation detected")
            mitigation.append("Sanitize DOM inputs and avoid innerHTML with user data")
            score += 2
        if idioms.sql_concatenation:
            vectors.append("Dynamic SQL construction")
            mitigation.append("Use parameterized queries and prepared statements")
            score += 3

        return InjectionRisk(risk=_score_bucket(score), vectors=vectors, mitigation=mitigation)

    # -------------------------------------------------------------------------
    # Behavior
    # -------------------------------------------------------------------------

    def analyze_behavior(self, context: SemanticContext) -> BehaviorAnalysis:
        functions = context.functions
        network = [f for f in functions if _is_network_function(f)]
        files = [f for f in functions if _is_file_function(f)]
        storage = [f for f in functions if "storage_access" in f.side_effects]

        access: list[AccessPatternItem] = []
        if files:
            risk = Severity.HIGH if len(files) > 5 else Severity.MEDIUM if len(files) > 2 else Severity.LOW
            access.append(AccessPatternItem(pattern="file_system_access", frequency=len(files), risk=risk))
        if network:
            risk = Severity.MEDIUM if len(network) > 3 else Severity.LOW
            access.append(AccessPatternItem(pattern="network_access", frequency=len(network), risk=risk))
        if storage:
            access.append(AccessPatternItem(pattern="storage_access", frequency=len(storage), risk=Severity.LOW))

        urls = context.idioms.urls
        protocols = context.idioms.protocols
        communication_risk = Severity.LOW
        if any(u.startswith("http:") for u in urls) or len(urls) > 5 or "FTP" in protocols:
            communication_risk = Severity.MEDIUM
        communication = CommunicationPatterns(destinations=urls, protocols=protocols, risk=communication_risk)

        secrets = sum(1 for v in context.variables if v.element.is_potential_secret)
        data_processing = DataProcessingPatterns(
            operations=[f.name for f in functions if IdentifierIndex(f.name).hits(PROCESSING_NAME_WORDS)],
            sensitivity=Severity.HIGH if secrets > 3 else Severity.MEDIUM if secrets > 1 else Severity.LOW,
            volume=Severity.HIGH if len(functions) > 20 else Severity.MEDIUM if len(functions) > 10 else Severity.LOW,
        )

        resources = ResourceUsage(
            network_functions=sum(1 for f in functions if "network_request" in f.side_effects),
            storage_functions=len(storage),
            file_functions=sum(1 for f in functions if "file_system" in f.side_effects),
        )

        groups = (
            bool(access),
            bool(urls or protocols),
            bool(data_processing.operations),
            bool(resources.network_functions or resources.storage_functions or resources.file_functions),
        )
        activity = len(access) + len(urls) + len(data_processing.operations)

        return BehaviorAnalysis(
            access_patterns=access,
            communication=communication,
            data_processing=data_processing,
            resource_usage=resources,
            time_based=TimeBasedPatterns(
                scheduled_operations=context.idioms.scheduled_operations,
                delayed_execution=context.idioms.delayed_execution,
                periodic_execution=context.idioms.periodic_execution,
            ),
            behavior_score=round(min(BEHAVIOR_GROUP_WEIGHT * sum(groups), 1.0), 4),
            anomalies=["excessive_activity"] if activity > EXCESSIVE_ACTIVITY_PATTERNS else [],
        )

    # -------------------------------------------------------------------------
    # Intent
    # -------------------------------------------------------------------------

    def analyze_intent(self, context: SemanticContext) -> IntentAnalysis:
        functions = context.functions
        total = max(len(functions), 1)

        primary = primary_purpose(functions)
        secondary = []
        if any("network_request" in f.side_effects for f in functions):
            secondary.append("network_communication")
        if any("storage_access" in f.side_effects for f in functions):
            secondary.append("data_storage")

        hidden = []
        if context.idioms.escaped_characters:
            hidden.append(
                HiddenFunctionality(
                    type="obfuscated_code",
                    description="Code contains character encoding that may hide functionality",
                )
            )

        business = sum(1 for f in functions if f.semantic_role is SemanticRole.BUSINESS) / total
        technical = sum(
            1 for f in functions
            if f.complexity.cognitive < 10 and f.complexity.parameters <= MAX_FUNCTION_PARAMETERS
        ) / total

        clarity = max((0.7 if primary != "unknown" else 0.3) - 0.2 * len(hidden), 0.0)
        legitimacy = max((business + technical) / 2 - 0.1 * len(hidden), 0.0)

        indicators = []
        if context.idioms.has_dynamic_execution:
            indicators.append("Dynamic code execution")
        if sum(1 for v in context.variables if v.element.is_potential_secret) > MANY_SECRET_VARIABLES:
            indicators.append("Multiple potential secrets")

        return IntentAnalysis(
            primary_purpose=primary,
            secondary_purposes=secondary,
            hidden_functionality=hidden,
            business_alignment=round(business, 4),
            technical_alignment=round(technical, 4),
            intent_clarity=round(clarity, 4),
            legitimacy_score=round(legitimacy, 4),
            suspicion_indicators=indicators,
        )

    # -------------------------------------------------------------------------
    # Anomalies
    # -------------------------------------------------------------------------

    def detect_anomalies(self, context: SemanticContext) -> AnomalyDetection:
        found: dict[str, list[Anomaly]] = {}
        for group, detectors in self.detectors.items():
            found[group] = [anomaly for detector in detectors for anomaly in detector(context)]

        total = sum(len(anomalies) for anomalies in found.values())
        return AnomalyDetection(
            **found,
            anomaly_score=round(total * ANOMALY_WEIGHT, 4),
            confidence=0.7 if total else 0.3,
        )

    # -------------------------------------------------------------------------
    # Insights and actions
    # -------------------------------------------------------------------------

    def contextual_insights(self, context: SemanticContext, risk: RiskAnalysisResult) -> ContextualInsights:
        framework = [f"{f.name} framework detected with {f.confidence} confidence" for f in context.frameworks]

        business = []
        business_functions = sum(1 for f in context.functions if f.semantic_role is SemanticRole.BUSINESS)
        if business_functions:
            business.append(f"{business_functions} business logic functions identified")

        security = [
            f"Overall security risk: {risk.overall.level.value}",
            f"Security score: {risk.overall.score}/100",
        ]

        strategic = []
        if risk.overall.level in (Severity.HIGH, Severity.CRITICAL):
            strategic.append("Implement immediate security remediation")
        if context.complexity.cognitive > 15:
            strategic.append("Consider code refactoring to reduce complexity")

        return ContextualInsights(
            framework=framework,
            business=business,
            security=security,
            compliance=[f"Compliance analysis: {risk.categories.compliance.level.value} risk level"],
            performance=[f"Code complexity: {context.complexity.cognitive} cognitive complexity"],
            key_findings=(framework + business + security)[:5],
            strategic_recommendations=strategic,
        )

    def actionable_recommendations(
        self,
        threat: ThreatIntelligence,
        intent: IntentAnalysis,
        risk: RiskAnalysisResult,
    ) -> ActionableRecommendations:
        immediate = []
        if threat.threat_level == Severity.CRITICAL or risk.overall.should_block:
            immediate = ["Block AI analysis immediately", "Conduct manual security review"]

        short_term = []
        if intent.legitimacy_score < 0.5:
            short_term.append("Validate code legitimacy with development team")

        long_term = list(LONG_TERM_ACTIONS)
        return ActionableRecommendations(
            immediate=immediate,
            short_term=short_term,
            long_term=long_term,
            preventive=list(PREVENTIVE_ACTIONS),
            monitoring=list(MONITORING_ACTIONS),
            priority_matrix={"high": immediate, "medium": short_term, "low": long_term},
            roadmap={"immediate": immediate, "short_term": short_term, "long_term": long_term},
        )

    def overall_assessment(
        self,
        threat: ThreatIntelligence,
        intent: IntentAnalysis,
        anomalies: AnomalyDetection,
        risk: RiskAnalysisResult,
    ) -> OverallAssessment:
        """Roll the sub-reports up into one level, confidence and urgency.

        The level is the higher of the threat level and the overall risk
        level; confidence averages the risk confidence with the anomaly
        confidence.
        """
        level = max_severity((threat.threat_level, risk.overall.level))
        confidence = (risk.overall.confidence / 100 + anomalies.confidence) / 2
        action_required = level.rank >= Severity.HIGH.rank or threat.mitigation_priority == "immediate"

        summary = (
            f"Threat level {threat.threat_level.value}, overall risk {risk.overall.level.value}: "
            f"{len(threat.known_threats)} known threats, {len(threat.malicious_patterns)} malicious patterns, "
            f"{len(intent.suspicion_indicators)} suspicion indicators"
        )
        return OverallAssessment(
            risk_level=level,
            confidence=round(confidence, 4),
            action_required=action_required,
            urgency=URGENCY_BY_LEVEL[level],
            summary=summary,
        )


def primary_purpose(functions: Sequence[EnrichedFunction]) -> str:
    """Purpose of the most common known semantic role.

    Ties go to the role listed first in :data:`PURPOSE_BY_ROLE`; a file with
    no function of a known role has purpose ``unknown``.
    """
    counts = Counter(f.semantic_role for f in functions if f.semantic_role in PURPOSE_BY_ROLE)
    if not counts:
        return "unknown"
    best = max(PURPOSE_BY_ROLE, key=lambda role: counts[role])
    return PURPOSE_BY_ROLE[best]


_intelligence_analyzer: IntelligenceAnalyzer | None = None


def get_intelligence_analyzer() -> IntelligenceAnalyzer:
    global _intelligence_analyzer
    if _intelligence_analyzer is None:
        _intelligence_analyzer = IntelligenceAnalyzer()
    return _intelligence_analyzer


def analyze_intelligence(context: SemanticContext, risk: RiskAnalysisResult) -> IntelligenceResult:
    return get_intelligence_analyzer().analyze_intelligence(context, risk)
