"""Unified pattern analysis over the secret, business-logic and framework catalogs."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from ..config import AnalysisSettings, get_settings
from ..constants import QUICK_FRAMEWORK_CONFIDENCE, QUICK_SERVER_FRAMEWORKS, SERVER_FRAMEWORKS
from ..core.levels import Severity
from .business_logic import BusinessLogicMatcher
from .frameworks import FrameworkMatcher
from .models import (
    BusinessLogicMatch,
    FrameworkMatch,
    PatternAnalysis,
    PatternSummary,
    QuickSecurityScan,
    SecretAnalysis,
)
from .secrets import SecretMatcher

logger = logging.getLogger(__name__)

CLEAN_RECOMMENDATIONS = (
    "Code analysis complete - no major security concerns detected",
    "Consider regular security reviews as part of your development process",
)
QUICK_REVIEW_RECOMMENDATIONS = (
    "HIGH RISK: Review before sharing this code with AI assistants",
    "Review and sanitize sensitive content",
)
QUICK_PASS_RECOMMENDATIONS = (
    "Code passed quick security scan",
    "Safe for AI analysis with standard precautions",
)

_EMPTY = MappingProxyType({})


@dataclass(frozen=True)
class PatternCatalogs:
    """The three matchers an analysis runs, each bound to its catalog."""

    secrets: SecretMatcher = field(default_factory=SecretMatcher)
    business_logic: BusinessLogicMatcher = field(default_factory=BusinessLogicMatcher)
    frameworks: FrameworkMatcher = field(default_factory=FrameworkMatcher)

    @classmethod
    def from_settings(cls, settings: AnalysisSettings | None = None) -> PatternCatalogs:
        """Default catalogs, with the ones disabled in ``settings`` left empty."""
        settings = settings or get_settings()
        return cls(
            secrets=SecretMatcher() if settings.enable_secret_detection else SecretMatcher(_EMPTY),
            business_logic=(
                BusinessLogicMatcher() if settings.enable_business_logic_detection else BusinessLogicMatcher(_EMPTY)
            ),
            frameworks=FrameworkMatcher() if settings.enable_framework_detection else FrameworkMatcher(_EMPTY),
        )


def summary_risk_level(
    secrets: SecretAnalysis,
    business_logic: Sequence[BusinessLogicMatch],
    frameworks: Sequence[FrameworkMatch],
) -> Severity:
    """Coarse risk of a pattern scan: high, medium or low."""
    if secrets.has_secrets and secrets.highest_severity in (Severity.HIGH, Severity.CRITICAL):
        return Severity.HIGH
    if any(m.risk_level == Severity.HIGH for m in business_logic):
        return Severity.HIGH
    if secrets.has_secrets and secrets.highest_severity == Severity.MEDIUM:
        return Severity.MEDIUM
    if any(m.risk_level == Severity.MEDIUM for m in business_logic):
        return Severity.MEDIUM
    if business_logic and any(f.rule_id in SERVER_FRAMEWORKS for f in frameworks):
        return Severity.MEDIUM
    return Severity.LOW


def combined_recommendations(
    secrets: SecretAnalysis,
    business_logic: Sequence[BusinessLogicMatch],
    frameworks: Sequence[FrameworkMatch],
) -> list[str]:
    """Recommendations of every scan, secrets first, without repeats."""
    recommendations: list[str] = []
    if secrets.has_secrets:
        recommendations.extend(secrets.recommendations)
    for match in business_logic:
        recommendations.extend(match.recommendations)
    for framework in frameworks:
        recommendations.extend(framework.recommendations)
    if not recommendations:
        recommendations.extend(CLEAN_RECOMMENDATIONS)
    return list(dict.fromkeys(recommendations))


class PatternMatcher:
    """Runs the three catalog matchers over one text and summarizes them."""

    def __init__(self, catalogs: PatternCatalogs | None = None):
        self.catalogs = catalogs or PatternCatalogs()

    def analyze_patterns(
        self,
        text: str,
        file_name: str | None = None,
        dependencies: Sequence[str] | None = None,
        function_names: Sequence[str] | None = None,
        imports: Sequence[str] | None = None,
    ) -> PatternAnalysis:
        """Scan ``text`` with every catalog.

        Args:
            text: Source text
            file_name: Name or path of the file the text came from
            dependencies: Declared package dependencies
            function_names: Declared function names, when already extracted
            imports: Imported module names, when already extracted

        Returns:
            PatternAnalysis with per-catalog results, summary and recommendations
        """
        secrets = self.catalogs.secrets.analyze(text, file_name)
        business_logic = self.catalogs.business_logic.analyze(text, function_names)
        frameworks = self.catalogs.frameworks.detect(text, file_name, dependencies, imports)

        summary = PatternSummary(
            risk_level=summary_risk_level(secrets, business_logic, frameworks),
            secret_count=len(secrets.matches),
            business_logic_count=len(business_logic),
            framework_count=len(frameworks),
            primary_framework=frameworks[0].rule_id if frameworks else None,
        )
        logger.debug(
            f"Pattern scan of {file_name or '<text>'}: {summary.secret_count} secrets, "
            f"{summary.business_logic_count} business domains, {summary.framework_count} frameworks"
        )

        return PatternAnalysis(
            secrets=secrets,
            business_logic=business_logic,
            frameworks=frameworks,
            summary=summary,
            recommendations=combined_recommendations(secrets, business_logic, frameworks),
        )

    def quick_security_scan(self, text: str, file_name: str | None = None) -> QuickSecurityScan:
        """High-confidence findings only, for a fast review signal."""
        findings: list[str] = []

        secret_matches = self.catalogs.secrets.quick_scan(text, file_name)
        if secret_matches:
            findings.append(f"{len(secret_matches)} high-confidence secrets detected")

        business_logic = self.catalogs.business_logic.analyze(text)
        high_business = [m for m in business_logic if m.risk_level == Severity.HIGH]
        if high_business:
            findings.append(f"{len(high_business)} high-risk business logic patterns detected")

        frameworks = self.catalogs.frameworks.detect(text, file_name)
        server = [
            f for f in frameworks
            if f.rule_id in QUICK_SERVER_FRAMEWORKS and f.confidence > QUICK_FRAMEWORK_CONFIDENCE
        ]
        if server and business_logic:
            findings.append("Server-side framework with business logic detected")

        requires_review = bool(secret_matches or high_business)
        recommendations = QUICK_REVIEW_RECOMMENDATIONS if requires_review else QUICK_PASS_RECOMMENDATIONS
        return QuickSecurityScan(
            high_risk_findings=findings,
            recommendations=list(recommendations),
            requires_review=requires_review,
        )


_pattern_matcher: PatternMatcher | None = None


def get_pattern_matcher() -> PatternMatcher:
    """Get or create the pattern matcher built from the current settings."""
    global _pattern_matcher
    if _pattern_matcher is None:
        _pattern_matcher = PatternMatcher(PatternCatalogs.from_settings())
    return _pattern_matcher


def analyze_patterns(
    text: str,
    file_name: str | None = None,
    dependencies: Sequence[str] | None = None,
) -> PatternAnalysis:
    return get_pattern_matcher().analyze_patterns(text, file_name, dependencies)


def quick_security_scan(text: str, file_name: str | None = None) -> QuickSecurityScan:
    return get_pattern_matcher().quick_security_scan(text, file_name)
