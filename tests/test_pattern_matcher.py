"""Tests for the unified pattern matcher."""

from contextguard.config import AnalysisSettings
from contextguard.core.levels import Severity
from contextguard.patterns.matcher import (
    CLEAN_RECOMMENDATIONS,
    QUICK_PASS_RECOMMENDATIONS,
    PatternCatalogs,
    PatternMatcher,
)

OPENAI_KEY = "sk-" + "Ab3" * 16
SECRET_SOURCE = f'const apiKey = "{OPENAI_KEY}";\n'
PRICING_SOURCE = "function calculatePrice(cost, margin) { return cost * (1+margin); }"
EXPRESS_SOURCE = """const express = require('express');
const app = express();
app.get('/', (req, res) => res.json({ ok: true }));
app.listen(3000);
"""


class TestPatternMatcher:
    """Test the combined secret, business-logic and framework scan."""

    def test_clean_text(self) -> None:
        """Test that neutral text is low risk with the clean recommendations."""
        result = PatternMatcher().analyze_patterns("const total = items.length;")

        assert result.summary.risk_level is Severity.LOW
        assert result.summary.secret_count == 0
        assert result.recommendations == list(CLEAN_RECOMMENDATIONS)

    def test_secret_raises_risk(self) -> None:
        """Test that a high-severity secret makes the scan high risk."""
        result = PatternMatcher().analyze_patterns(SECRET_SOURCE, file_name="client.ts")

        assert result.summary.risk_level is Severity.HIGH
        assert result.secrets.has_secrets is True
        assert result.recommendations == list(dict.fromkeys(result.recommendations))

    def test_business_logic_summary(self) -> None:
        """Test that a medium-risk domain makes the scan medium risk."""
        result = PatternMatcher().analyze_patterns(PRICING_SOURCE)

        assert result.summary.risk_level is Severity.MEDIUM
        assert result.summary.business_logic_count == 1
        assert result.recommendations[0] == "Review pricing logic before sharing with AI assistants"

    def test_primary_framework(self) -> None:
        """Test that the most confident framework is the primary one."""
        result = PatternMatcher().analyze_patterns(EXPRESS_SOURCE, file_name="server.js", dependencies=["express"])

        assert result.summary.primary_framework == "express"
        assert result.summary.framework_count == 2
        assert result.summary.risk_level is Severity.LOW


class TestQuickSecurityScan:
    """Test the high-confidence quick scan."""

    def test_secret_requires_review(self) -> None:
        """Test that a high-confidence secret requires review."""
        scan = PatternMatcher().quick_security_scan(SECRET_SOURCE, file_name="client.ts")

        assert scan.requires_review is True
        assert scan.high_risk_findings == ["1 high-confidence secrets detected"]

    def test_clean_text_passes(self) -> None:
        """Test that neutral text passes."""
        scan = PatternMatcher().quick_security_scan(PRICING_SOURCE)

        assert scan.requires_review is False
        assert scan.high_risk_findings == []
        assert scan.recommendations == list(QUICK_PASS_RECOMMENDATIONS)


class TestPatternCatalogs:
    """Test catalogs built from settings."""

    def test_disabled_detection_uses_empty_catalogs(self) -> None:
        """Test that disabled stages report nothing."""
        settings = AnalysisSettings(enable_secret_detection=False, enable_business_logic_detection=False)
        matcher = PatternMatcher(PatternCatalogs.from_settings(settings))

        result = matcher.analyze_patterns(SECRET_SOURCE + PRICING_SOURCE)

        assert result.secrets.has_secrets is False
        assert result.business_logic == []
        assert len(matcher.catalogs.frameworks.catalog) > 0
