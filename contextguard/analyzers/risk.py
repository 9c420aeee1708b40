"""Risk analysis over a semantic context.

Four independent category analyzers (security, business, technical,
compliance) each turn the enriched elements into risk items; the overall
verdict is the join point that decides ``should_block`` and
``requires_review``.
"""

from __future__ import annotations

import logging
import re
import time

from ..constants import (
    HIGH_ITEM_ESCALATION_COUNT,
    LOW_COHESION_HIGH_METHODS,
    LOW_COHESION_MAX_PROPERTIES,
    LOW_COHESION_METHODS,
    MAX_FUNCTION_PARAMETERS,
    PROPRIETARY_ALGORITHM_HIGH,
    QUICK_SERVER_FRAMEWORKS,
    REVIEW_HIGH_ITEM_COUNT,
    TECHNICAL_COMPLEXITY_HIGH,
    TECHNICAL_COMPLEXITY_MEDIUM,
    TECHNICAL_DEBT_HIGH,
    TECHNICAL_DEBT_MEDIUM,
    TIGHT_COUPLING_MEMBERS,
    TOTAL_ITEM_ESCALATION_COUNT,
)
from ..core.levels import (
    SEVERITY_LIKELIHOOD,
    Likelihood,
    RiskCategory,
    Severity,
    at_least,
    max_severity,
    risk_weight,
    round_half_up,
)
from ..core.text import IdentifierIndex
from ..extractors.models import Scope
from ..patterns.matcher import PatternMatcher, get_pattern_matcher
from ..patterns.models import SecretCategory
from .idioms import has_dynamic_execution
from .models import (
    CategoryRisk,
    OverallRisk,
    QuickRiskResult,
    RiskAnalysisResult,
    RiskCategories,
    RiskCounts,
    RiskItem,
    SemanticContext,
)
from .semantic import is_dangerous_module

logger = logging.getLogger(__name__)

SECRET_IMPACTS: dict[SecretCategory, str] = {
    SecretCategory.API_KEY: "Unauthorized API access and potential data breach",
    SecretCategory.PASSWORD: "Account compromise and unauthorized access",
    SecretCategory.TOKEN: "Session hijacking and identity theft",
    SecretCategory.PRIVATE_KEY: "Complete system compromise",
    SecretCategory.DATABASE: "Data breach and system compromise",
    SecretCategory.CLOUD: "Infrastructure compromise and data loss",
    SecretCategory.GENERIC: "Potential security compromise",
}

FINANCIAL_NAME_WORDS = ("price", "cost", "payment", "billing", "financial", "money", "calculate")
VALIDATION_NAME_WORDS = ("valid", "check", "verify", "test")
PLACEHOLDER_NAME_WORDS = ("temp", "tmp", "test", "unused", "placeholder")
PII_NAME_WORDS = ("email", "phone", "ssn", "credit_card", "address", "name", "user")
LOGGING_NAME_WORDS = ("log", "console", "print", "debug")
STORAGE_NAME_WORDS = ("storage", "save", "store", "persist", "cache")
FINANCIAL_DOMAINS = ("financial", "payment")

OVERALL_RECOMMENDATIONS: dict[Severity, str] = {
    Severity.CRITICAL: "CRITICAL: Do not proceed with AI analysis. Address critical security issues immediately.",
    Severity.HIGH: "HIGH RISK: Review and mitigate high-risk items before AI analysis.",
    Severity.MEDIUM: "MEDIUM RISK: Consider addressing identified risks before AI analysis.",
    Severity.LOW: "LOW RISK: Generally safe for AI analysis with standard precautions.",
}

NO_RISK_RECOMMENDATIONS = (
    "Code analysis complete - no major risks identified",
    "Consider regular security reviews as part of development process",
)

COMMAND_EXECUTION_RE = re.compile(
    r"\bchild_process\b|\b(?:spawn|spawnSync|exec|execSync|execFile|execFileSync)\s*\("
)
FILE_SYSTEM_RE = re.compile(r"\bfs\.|\breadFile|\bwriteFile")


def category_score(risks: list[RiskItem]) -> int:
    """Mean weighted item score scaled to 0..100."""
    if not risks:
        return 0
    total = sum(risk_weight(r.severity, r.likelihood) for r in risks)
    return min(100, round_half_up(total / len(risks) * 10))


def category_summary(category: RiskCategory, risks: list[RiskItem]) -> str:
    if not risks:
        return f"No {category.value} risks detected"
    summary = f"{len(risks)} {category.value} risk{'s' if len(risks) > 1 else ''} identified"
    for severity in (Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW):
        count = sum(1 for r in risks if r.severity == severity)
        if count:
            summary += f" ({count} {severity.value})"
    return summary


def risk_confidence(total_risks: int, average_score: float) -> int:
    data_confidence = min(total_risks / 10, 1)
    score_confidence = min(average_score / 100, 1) if average_score > 0 else 0.5
    return round_half_up((data_confidence * 0.4 + score_confidence * 0.6) * 100)


def _category(category: RiskCategory, risks: list[RiskItem], recommendations: list[str]) -> CategoryRisk:
    return CategoryRisk(
        category=category,
        level=max_severity(r.severity for r in risks),
        score=category_score(risks),
        risks=risks,
        summary=category_summary(category, risks),
        recommendations=recommendations,
    )


class RiskAnalyzer:
    """Scores the four risk categories of a :class:`SemanticContext`."""

    def __init__(self, pattern_matcher: PatternMatcher | None = None):
        self.pattern_matcher = pattern_matcher or get_pattern_matcher()

    def analyze_risk(self, context: SemanticContext) -> RiskAnalysisResult:
        """Analyze every risk category and aggregate the overall verdict.

        Args:
            context: Semantic context produced by the semantic analyzer

        Returns:
            RiskAnalysisResult with the overall verdict, the four categories,
            recommendations and mitigation strategies
        """
        categories = RiskCategories(
            security=self.analyze_security_risk(context),
            business=self.analyze_business_risk(context),
            technical=self.analyze_technical_risk(context),
            compliance=self.analyze_compliance_risk(context),
        )
        overall = self.calculate_overall_risk(categories)

        recommendations = [r for c in categories.all() for r in c.recommendations]
        if not recommendations:
            recommendations = list(NO_RISK_RECOMMENDATIONS)

        logger.debug(
            f"Risk for {context.file_name or '<text>'}: {overall.level.value} "
            f"(score {overall.score}, {overall.risk_factors.total} items)"
        )
        return RiskAnalysisResult(
            overall=overall,
            categories=categories,
            recommendations=recommendations,
            mitigation_strategies=self.mitigation_strategies(overall, context),
            risk_factors=context.risk_factors,
            file_name=context.file_name or "unknown",
        )

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def analyze_security_risk(self, context: SemanticContext) -> CategoryRisk:
        risks: list[RiskItem] = []

        for secret in context.secrets.matches:
            risks.append(
                RiskItem(
                    type="secret_exposure",
                    severity=secret.severity,
                    likelihood=SEVERITY_LIKELIHOOD[secret.severity],
                    description=f"Potential secret detected: {secret.name}",
                    line=secret.line,
                    column=secret.column,
                    impact=SECRET_IMPACTS[secret.category],
                )
            )

        for imp in context.imports:
            if is_dangerous_module(imp.element.module):
                risks.append(
                    RiskItem(
                        type="dangerous_import",
                        severity=Severity.HIGH,
                        likelihood=Likelihood.MEDIUM,
                        description=f"High-risk module import: {imp.element.module}",
                        line=imp.element.line,
                        impact="System compromise or data exposure",
                    )
                )

        for function in context.functions:
            if not function.element.contains_sensitive_logic:
                continue
            if function.calls_external:
                risks.append(
                    RiskItem(
                        type="external_call",
                        severity=Severity.MEDIUM,
                        likelihood=Likelihood.MEDIUM,
                        description=f"Business function may make external calls: {function.name}",
                        line=function.element.start_line,
                        impact="Data leakage or unauthorized access",
                    )
                )
            if "dom_manipulation" in function.side_effects:
                risks.append(
                    RiskItem(
                        type="injection_risk",
                        severity=Severity.HIGH,
                        likelihood=Likelihood.MEDIUM,
                        description=f"Potential injection vulnerability in: {function.name}",
                        line=function.element.start_line,
                        impact="Code execution or data manipulation",
                    )
                )

        if context.idioms.has_dynamic_execution:
            risks.append(
                RiskItem(
                    type="dynamic_execution",
                    severity=Severity.CRITICAL,
                    likelihood=Likelihood.HIGH,
                    description="Dynamic code execution detected (eval/Function)",
                    line=context.idioms.dynamic_execution_line,
                    impact="Arbitrary code execution vulnerability",
                )
            )

        level = max_severity(r.severity for r in risks)
        types = {r.type for r in risks}
        recommendations: list[str] = []
        if level in (Severity.HIGH, Severity.CRITICAL):
            recommendations.append("Immediately secure any exposed secrets or credentials")
            recommendations.append("Review and validate all external API calls and data handling")
        if "dangerous_import" in types:
            recommendations.append("Audit dangerous module imports and consider safer alternatives")
        if "dynamic_execution" in types:
            recommendations.append("Remove eval() and dynamic code execution - critical security risk")
        return _category(RiskCategory.SECURITY, risks, recommendations)

    def analyze_business_risk(self, context: SemanticContext) -> CategoryRisk:
        risks: list[RiskItem] = []

        for match in context.business_logic:
            if match.risk_level == Severity.HIGH:
                risks.append(
                    RiskItem(
                        type="business_logic_exposure",
                        severity=Severity.HIGH,
                        likelihood=Likelihood.HIGH,
                        description=f"High-risk business logic detected: {match.rule_id}",
                        line=match.line or 1,
                        impact="Intellectual property theft or competitive disadvantage",
                    )
                )

        for function in context.functions:
            element = function.element
            if not element.contains_sensitive_logic:
                continue
            estimated = element.line_span + len(element.parameters)
            risks.append(
                RiskItem(
                    type="proprietary_algorithm",
                    severity=Severity.HIGH if estimated > PROPRIETARY_ALGORITHM_HIGH else Severity.MEDIUM,
                    likelihood=Likelihood.MEDIUM,
                    description=f"Potential proprietary algorithm: {function.name}",
                    line=element.start_line,
                    impact="Loss of competitive advantage",
                )
            )

        for function in context.functions:
            index = IdentifierIndex(function.name)
            if index.hits(FINANCIAL_NAME_WORDS) and not index.hits(VALIDATION_NAME_WORDS):
                risks.append(
                    RiskItem(
                        type="financial_calculation",
                        severity=Severity.HIGH,
                        likelihood=Likelihood.MEDIUM,
                        description=f"Financial calculation without apparent validation: {function.name}",
                        line=function.element.start_line,
                        impact="Financial loss or calculation errors",
                    )
                )

        if context.business_logic:
            for framework in context.frameworks:
                if framework.rule_id in QUICK_SERVER_FRAMEWORKS:
                    risks.append(
                        RiskItem(
                            type="server_business_exposure",
                            severity=Severity.MEDIUM,
                            likelihood=Likelihood.MEDIUM,
                            description=f"Server-side framework with business logic: {framework.rule_id}",
                            line=1,
                            impact="Server-side business logic exposure",
                        )
                    )

        level = max_severity(r.severity for r in risks)
        recommendations: list[str] = []
        if level == Severity.HIGH:
            recommendations.append("Abstract or remove proprietary business logic before AI analysis")
            recommendations.append("Ensure financial calculations have proper validation and testing")
        if any(r.type == "business_logic_exposure" for r in risks):
            recommendations.append("Consider creating sanitized versions of business-critical functions")
        return _category(RiskCategory.BUSINESS, risks, recommendations)

    def analyze_technical_risk(self, context: SemanticContext) -> CategoryRisk:
        risks: list[RiskItem] = []

        for function in context.functions:
            element = function.element
            estimated = element.line_span + len(element.parameters) * 2
            if estimated > TECHNICAL_COMPLEXITY_MEDIUM:
                risks.append(
                    RiskItem(
                        type="high_complexity",
                        severity=Severity.HIGH if estimated > TECHNICAL_COMPLEXITY_HIGH else Severity.MEDIUM,
                        likelihood=Likelihood.HIGH,
                        description=f"High complexity function: {function.name} (estimated: {estimated})",
                        line=element.start_line,
                        impact="Maintenance difficulties and potential bugs",
                    )
                )
            if len(element.parameters) > MAX_FUNCTION_PARAMETERS:
                risks.append(
                    RiskItem(
                        type="parameter_overload",
                        severity=Severity.MEDIUM,
                        likelihood=Likelihood.HIGH,
                        description=f"Too many parameters: {function.name} ({len(element.parameters)})",
                        line=element.start_line,
                        impact="Reduced readability and maintainability",
                    )
                )

        for cls in context.classes:
            element = cls.element
            if element.member_count > TIGHT_COUPLING_MEMBERS:
                risks.append(
                    RiskItem(
                        type="tight_coupling",
                        severity=Severity.MEDIUM,
                        likelihood=Likelihood.HIGH,
                        description=f"Potentially tightly coupled class: {element.name}",
                        line=element.start_line,
                        impact="Difficult to modify and test",
                    )
                )
            methods = len(element.methods)
            if methods > LOW_COHESION_METHODS and len(element.properties) < LOW_COHESION_MAX_PROPERTIES:
                risks.append(
                    RiskItem(
                        type="low_cohesion",
                        severity=Severity.MEDIUM if methods > LOW_COHESION_HIGH_METHODS else Severity.LOW,
                        likelihood=Likelihood.MEDIUM,
                        description=f"Potentially low cohesion class: {element.name}",
                        line=element.start_line,
                        impact="Unclear responsibilities and maintenance issues",
                    )
                )

        for variable in context.variables:
            if IdentifierIndex(variable.name).hits(PLACEHOLDER_NAME_WORDS):
                risks.append(
                    RiskItem(
                        type="unused_code",
                        severity=Severity.LOW,
                        likelihood=Likelihood.MEDIUM,
                        description=f"Potentially unused variable: {variable.name}",
                        line=variable.element.line,
                        impact="Code bloat and confusion",
                    )
                )

        debt = context.complexity.technical_debt
        if debt > TECHNICAL_DEBT_MEDIUM:
            risks.append(
                RiskItem(
                    type="technical_debt",
                    severity=Severity.HIGH if debt > TECHNICAL_DEBT_HIGH else Severity.MEDIUM,
                    likelihood=Likelihood.HIGH,
                    description=f"High technical debt score: {debt}",
                    line=1,
                    impact="Increased development time and bugs",
                )
            )

        level = max_severity(r.severity for r in risks)
        recommendations: list[str] = []
        if level in (Severity.MEDIUM, Severity.HIGH):
            recommendations.append("Refactor high-complexity functions to improve maintainability")
            recommendations.append("Reduce coupling and improve cohesion in class design")
        if any(r.type == "unused_code" for r in risks):
            recommendations.append("Remove unused variables and dead code")
        return _category(RiskCategory.TECHNICAL, risks, recommendations)

    def analyze_compliance_risk(self, context: SemanticContext) -> CategoryRisk:
        risks: list[RiskItem] = []

        for variable in context.variables:
            if IdentifierIndex(variable.name).hits(PII_NAME_WORDS):
                risks.append(
                    RiskItem(
                        type="pii_handling",
                        severity=Severity.HIGH if variable.element.scope is Scope.GLOBAL else Severity.MEDIUM,
                        likelihood=Likelihood.MEDIUM,
                        description=f"Potential PII in variable: {variable.name}",
                        line=variable.element.line,
                        impact="GDPR/CCPA violations and privacy breaches",
                    )
                )

        for function in context.functions:
            if not function.element.contains_sensitive_logic:
                continue
            logs = "console_output" in function.side_effects or IdentifierIndex(function.name).hits(
                LOGGING_NAME_WORDS
            )
            if logs:
                risks.append(
                    RiskItem(
                        type="sensitive_logging",
                        severity=Severity.MEDIUM,
                        likelihood=Likelihood.MEDIUM,
                        description=f"Potential sensitive data logging: {function.name}",
                        line=function.element.start_line,
                        impact="Data exposure in logs",
                    )
                )

        financial = [m for m in context.business_logic if m.rule_id in FINANCIAL_DOMAINS]
        if financial:
            risks.append(
                RiskItem(
                    type="financial_compliance",
                    severity=Severity.HIGH,
                    likelihood=Likelihood.MEDIUM,
                    description="Financial operations may require PCI DSS compliance",
                    line=financial[0].line or 1,
                    impact="Regulatory violations and fines",
                )
            )

        storage = [
            f for f in context.functions
            if "storage_access" in f.side_effects or IdentifierIndex(f.name).hits(STORAGE_NAME_WORDS)
        ]
        if storage and context.secrets.has_secrets:
            risks.append(
                RiskItem(
                    type="unencrypted_storage",
                    severity=Severity.HIGH,
                    likelihood=Likelihood.MEDIUM,
                    description="Potential unencrypted sensitive data storage",
                    line=storage[0].element.start_line,
                    impact="Data breach and compliance violations",
                )
            )

        level = max_severity(r.severity for r in risks)
        recommendations: list[str] = []
        if level == Severity.HIGH:
            recommendations.append("Ensure PII handling complies with relevant privacy regulations")
            recommendations.append("Implement proper encryption for sensitive data storage")
        if financial:
            recommendations.append("Review financial operations for PCI DSS compliance requirements")
        return _category(RiskCategory.COMPLIANCE, risks, recommendations)

    # -------------------------------------------------------------------------
    # Aggregation
    # -------------------------------------------------------------------------

    def calculate_overall_risk(self, categories: RiskCategories) -> OverallRisk:
        """Join the category results into one verdict.

        The overall level never drops below the highest category level; it is
        escalated to high by more than three high items and to medium by more
        than ten items in total.
        """
        all_categories = categories.all()
        counts = RiskCounts(
            total=sum(len(c.risks) for c in all_categories),
            critical=sum(c.count(Severity.CRITICAL) for c in all_categories),
            high=sum(c.count(Severity.HIGH) for c in all_categories),
            medium=sum(c.count(Severity.MEDIUM) for c in all_categories),
            low=sum(c.count(Severity.LOW) for c in all_categories),
        )
        average = sum(c.score for c in all_categories) / len(all_categories)

        level = max_severity(c.level for c in all_categories)
        if counts.critical > 0:
            level = Severity.CRITICAL
        elif counts.high > HIGH_ITEM_ESCALATION_COUNT:
            level = at_least(level, Severity.HIGH)
        elif counts.total > TOTAL_ITEM_ESCALATION_COUNT:
            level = at_least(level, Severity.MEDIUM)

        return OverallRisk(
            level=level,
            score=round_half_up(average),
            confidence=risk_confidence(counts.total, average),
            recommendation=OVERALL_RECOMMENDATIONS[level],
            should_block=level == Severity.CRITICAL or counts.critical > 0,
            requires_review=level == Severity.HIGH or counts.high > REVIEW_HIGH_ITEM_COUNT,
            risk_factors=counts,
        )

    def mitigation_strategies(self, overall: OverallRisk, context: SemanticContext) -> list[str]:
        if overall.should_block:
            strategies = [
                "Block AI analysis until critical issues are resolved",
                "Conduct manual security review",
                "Implement immediate fixes for critical vulnerabilities",
            ]
        elif overall.requires_review:
            strategies = [
                "Require senior developer review before AI analysis",
                "Create sanitized version for AI consumption",
                "Implement additional access controls",
            ]
        else:
            strategies = [
                "Proceed with standard AI analysis precautions",
                "Monitor for new risks in future analyses",
            ]

        if context.secrets.has_secrets:
            strategies.append("Implement automated secret scanning in CI/CD pipeline")
            strategies.append("Use secure secret management services")
        if any(m.risk_level == Severity.HIGH for m in context.business_logic):
            strategies.append("Create abstracted interfaces for sensitive business logic")
            strategies.append("Improve documentation for complex algorithms")
        return strategies

    # -------------------------------------------------------------------------
    # Quick path
    # -------------------------------------------------------------------------

    def quick_risk_scan(self, text: str, file_name: str | None = None) -> QuickRiskResult:
        """Fast verdict from a reduced set of checks.

        Blocks exactly when the text calls ``eval``/``Function``, the same
        idiom that makes the full analysis critical. Command execution and
        high-confidence pattern findings only raise the level and ask for
        review.
        """
        started = time.perf_counter()
        scan = self.pattern_matcher.quick_security_scan(text, file_name)
        findings = list(scan.high_risk_findings)
        recommendations = list(scan.recommendations)

        level = Severity.MEDIUM if findings else Severity.LOW
        if scan.requires_review:
            level = Severity.HIGH

        should_block = False
        if has_dynamic_execution(text):
            findings.append("Dynamic code execution detected")
            recommendations.append("Remove eval() and dynamic code execution - critical security risk")
            level = Severity.CRITICAL
            should_block = True

        if COMMAND_EXECUTION_RE.search(text):
            findings.append("System command execution detected")
            level = at_least(level, Severity.HIGH)

        if FILE_SYSTEM_RE.search(text) and findings:
            level = at_least(level, Severity.MEDIUM)

        return QuickRiskResult(
            risk_level=level,
            should_block=should_block,
            requires_review=scan.requires_review or level.rank >= Severity.HIGH.rank,
            findings=findings,
            recommendations=recommendations,
            processing_time_ms=round((time.perf_counter() - started) * 1000, 3),
        )


_risk_analyzer: RiskAnalyzer | None = None


def get_risk_analyzer() -> RiskAnalyzer:
    global _risk_analyzer
    if _risk_analyzer is None:
        _risk_analyzer = RiskAnalyzer()
    return _risk_analyzer


def analyze_risk(context: SemanticContext) -> RiskAnalysisResult:
    return get_risk_analyzer().analyze_risk(context)


def quick_risk_scan(text: str, file_name: str | None = None) -> QuickRiskResult:
    return get_risk_analyzer().quick_risk_scan(text, file_name)
