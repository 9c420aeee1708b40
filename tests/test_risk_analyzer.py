"""Tests for the four-category risk analysis."""

import pytest

from contextguard.analyzers.models import CategoryRisk, RiskCategories, RiskItem
from contextguard.analyzers.risk import NO_RISK_RECOMMENDATIONS, RiskAnalyzer, category_score, category_summary
from contextguard.analyzers.semantic import SemanticAnalyzer
from contextguard.core.levels import Likelihood, RiskCategory, Severity, max_severity

EVAL_SOURCE = "function run(code) {\n  return eval(code);\n}\n"
PRICING_SOURCE = "function calculatePrice(cost, margin) { return cost * (1+margin); }"
CLEAN_SOURCE = "function add(a, b) {\n  return a + b;\n}\n"
PII_SOURCE = "const email = form.value;\nsend(email);\n"


def _analyze(source: str, file_name: str | None = None):
    context = SemanticAnalyzer().analyze_semantics(source, file_name=file_name)
    return RiskAnalyzer().analyze_risk(context)


def _items(*severities: Severity) -> list[RiskItem]:
    return [
        RiskItem(type="test_item", severity=s, likelihood=Likelihood.MEDIUM, description=f"{s.value} item")
        for s in severities
    ]


def _categories(**risks: list[RiskItem]) -> RiskCategories:
    def build(category: RiskCategory) -> CategoryRisk:
        items = risks.get(category.value, [])
        return CategoryRisk(
            category=category,
            level=max_severity(r.severity for r in items),
            score=category_score(items),
            risks=items,
        )

    return RiskCategories(
        security=build(RiskCategory.SECURITY),
        business=build(RiskCategory.BUSINESS),
        technical=build(RiskCategory.TECHNICAL),
        compliance=build(RiskCategory.COMPLIANCE),
    )


class TestRiskAnalyzer:
    """Test risk analysis of small sources."""

    def test_dynamic_execution_blocks(self) -> None:
        """Test that eval makes the result critical and blocking."""
        result = _analyze(EVAL_SOURCE)

        assert result.overall.level is Severity.CRITICAL
        assert result.overall.should_block is True
        assert result.categories.security.risks[-1].type == "dynamic_execution"
        assert result.categories.security.risks[-1].line == 2
        assert "Remove eval() and dynamic code execution - critical security risk" in result.recommendations
        assert result.mitigation_strategies[0] == "Block AI analysis until critical issues are resolved"

    def test_pricing_function_requires_review(self) -> None:
        """Test that an unvalidated pricing function is high business risk."""
        result = _analyze(PRICING_SOURCE, "pricing.js")
        business = result.categories.business

        assert [r.type for r in business.risks] == ["proprietary_algorithm", "financial_calculation"]
        assert business.risks[0].severity is Severity.MEDIUM
        assert business.level is Severity.HIGH
        assert business.score == 30
        assert result.overall.level is Severity.HIGH
        assert result.overall.requires_review is True
        assert result.overall.should_block is False
        assert result.overall.score == 8
        assert result.file_name == "pricing.js"
        assert result.mitigation_strategies[0] == "Require senior developer review before AI analysis"

    def test_clean_source(self) -> None:
        """Test that a small pure function carries no risk."""
        result = _analyze(CLEAN_SOURCE)

        assert result.overall.level is Severity.LOW
        assert result.overall.score == 0
        assert result.overall.confidence == 30
        assert result.overall.risk_factors.total == 0
        assert result.recommendations == list(NO_RISK_RECOMMENDATIONS)
        assert result.mitigation_strategies[0] == "Proceed with standard AI analysis precautions"
        assert result.file_name == "unknown"

    def test_global_pii_variable(self) -> None:
        """Test that a global PII variable is a high compliance risk."""
        result = _analyze(PII_SOURCE)
        compliance = result.categories.compliance

        assert [r.type for r in compliance.risks] == ["pii_handling"]
        assert compliance.level is Severity.HIGH
        assert "Ensure PII handling complies with relevant privacy regulations" in compliance.recommendations

    def test_unused_code_follows_placeholder_names(self) -> None:
        """Test that only placeholder-named variables are reported as unused code."""
        plain = _analyze("const retries = 3;\n")
        placeholder = _analyze("const tempValue = load();\nuse(tempValue);\n")

        assert "unused_code" not in [r.type for r in plain.categories.technical.risks]
        unused = [r for r in placeholder.categories.technical.risks if r.type == "unused_code"]
        assert [r.description for r in unused] == ["Potentially unused variable: tempValue"]

    def test_categories_are_independent(self) -> None:
        """Test that every category carries its own summary."""
        result = _analyze(EVAL_SOURCE)

        assert result.categories.security.summary.startswith("1 security risk identified")
        assert result.categories.business.summary == "No business risks detected"


class TestOverallRisk:
    """Test the aggregation of category results."""

    def test_critical_item_blocks(self) -> None:
        """Test that one critical item makes the overall level critical."""
        overall = RiskAnalyzer().calculate_overall_risk(_categories(security=_items(Severity.CRITICAL)))

        assert overall.level is Severity.CRITICAL
        assert overall.should_block is True
        assert overall.recommendation.startswith("CRITICAL")

    def test_many_items_escalate_to_medium(self) -> None:
        """Test that more than ten low items make the overall level medium."""
        overall = RiskAnalyzer().calculate_overall_risk(_categories(technical=_items(*[Severity.LOW] * 11)))

        assert overall.level is Severity.MEDIUM
        assert overall.should_block is False
        assert overall.risk_factors.low == 11

    def test_ten_items_do_not_escalate(self) -> None:
        """Test the exclusive item-count threshold."""
        overall = RiskAnalyzer().calculate_overall_risk(_categories(technical=_items(*[Severity.LOW] * 10)))

        assert overall.level is Severity.LOW

    def test_level_never_below_highest_category(self) -> None:
        """Test that the highest category level is kept."""
        overall = RiskAnalyzer().calculate_overall_risk(
            _categories(business=_items(Severity.HIGH), technical=_items(*[Severity.LOW] * 11))
        )

        assert overall.level is Severity.HIGH
        assert overall.requires_review is True

    def test_many_high_items_require_review(self) -> None:
        """Test that more than two high items require review."""
        overall = RiskAnalyzer().calculate_overall_risk(
            _categories(security=_items(Severity.HIGH), business=_items(Severity.HIGH, Severity.HIGH))
        )

        assert overall.risk_factors.high == 3
        assert overall.requires_review is True


class TestCategoryHelpers:
    """Test category scoring and summaries."""

    def test_category_score(self) -> None:
        """Test the mean weighted item score."""
        assert category_score([]) == 0
        assert category_score(_items(Severity.HIGH, Severity.MEDIUM)) == 30

    def test_category_summary(self) -> None:
        """Test severity counts in the summary."""
        summary = category_summary(RiskCategory.TECHNICAL, _items(Severity.HIGH, Severity.LOW, Severity.LOW))

        assert summary == "3 technical risks identified (1 high) (2 low)"


class TestQuickRiskScan:
    """Test the fast verdict."""

    def test_eval_blocks(self) -> None:
        """Test that dynamic execution blocks the quick verdict."""
        result = RiskAnalyzer().quick_risk_scan(EVAL_SOURCE)

        assert result.risk_level is Severity.CRITICAL
        assert result.should_block is True
        assert result.requires_review is True
        assert "Dynamic code execution detected" in result.findings

    def test_command_execution_reviews_without_blocking(self) -> None:
        """Test that command execution asks for review but does not block."""
        source = "const { exec } = require('child_process');\nexec('ls');\n"

        result = RiskAnalyzer().quick_risk_scan(source)

        assert result.risk_level is Severity.HIGH
        assert result.should_block is False
        assert result.requires_review is True
        assert result.findings == ["System command execution detected"]

    def test_clean_source_passes(self) -> None:
        """Test that clean code is low risk."""
        result = RiskAnalyzer().quick_risk_scan(CLEAN_SOURCE)

        assert result.risk_level is Severity.LOW
        assert result.should_block is False
        assert result.findings == []
        assert result.processing_time_ms >= 0

    @pytest.mark.parametrize("source", [EVAL_SOURCE, PRICING_SOURCE, CLEAN_SOURCE, PII_SOURCE])
    def test_quick_and_full_agree_on_blocking(self, source: str) -> None:
        """Test that both paths make the same block decision."""
        assert RiskAnalyzer().quick_risk_scan(source).should_block == _analyze(source).overall.should_block
