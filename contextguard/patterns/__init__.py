"""Static pattern catalogs and the matchers that score text against them.

Three independent catalogs are provided: credential signatures, business
logic domains and framework signatures. Each matcher is constructed with
its catalog, so a smaller catalog can be substituted::

    from contextguard.patterns import SecretMatcher, SecretRule, SecretCategory
    from contextguard.core.levels import Severity

    matcher = SecretMatcher([
        SecretRule(
            rule_id="internal_token",
            name="Internal token",
            pattern=r"itk_[a-z0-9]{24}",
            description="Internal service token",
            severity=Severity.HIGH,
            category=SecretCategory.TOKEN,
        )
    ])

Quick start::

    from contextguard.patterns import analyze_patterns

    result = analyze_patterns(source, file_name="server.js")
    print(result.summary.risk_level, result.recommendations)
"""

from .business_logic import (
    BUSINESS_DOMAIN_RULES,
    DEFAULT_BUSINESS_CATALOG,
    BusinessLogicMatcher,
    analyze_business_logic,
)
from .frameworks import DEFAULT_FRAMEWORK_CATALOG, FRAMEWORK_RULES, FrameworkMatcher, detect_frameworks
from .matcher import (
    PatternCatalogs,
    PatternMatcher,
    analyze_patterns,
    get_pattern_matcher,
    quick_security_scan,
)
from .models import (
    BusinessDomainRule,
    BusinessLogicMatch,
    FrameworkMatch,
    FrameworkRule,
    PatternAnalysis,
    PatternSummary,
    QuickSecurityScan,
    SecretAnalysis,
    SecretCategory,
    SecretMatch,
    SecretRule,
    build_catalog,
)
from .secrets import DEFAULT_SECRET_CATALOG, SECRET_RULES, SecretMatcher, analyze_secrets, quick_secret_scan
from .utils import (
    declared_function_names,
    extract_dependencies,
    extract_import_modules,
    get_file_type,
    is_config_file,
    is_test_file,
)

__all__ = [
    "BUSINESS_DOMAIN_RULES",
    "DEFAULT_BUSINESS_CATALOG",
    "DEFAULT_FRAMEWORK_CATALOG",
    "DEFAULT_SECRET_CATALOG",
    "FRAMEWORK_RULES",
    "SECRET_RULES",
    "BusinessDomainRule",
    "BusinessLogicMatch",
    "BusinessLogicMatcher",
    "FrameworkMatch",
    "FrameworkMatcher",
    "FrameworkRule",
    "PatternAnalysis",
    "PatternCatalogs",
    "PatternMatcher",
    "PatternSummary",
    "QuickSecurityScan",
    "SecretAnalysis",
    "SecretCategory",
    "SecretMatch",
    "SecretMatcher",
    "SecretRule",
    "analyze_business_logic",
    "analyze_patterns",
    "analyze_secrets",
    "build_catalog",
    "declared_function_names",
    "detect_frameworks",
    "extract_dependencies",
    "extract_import_modules",
    "get_file_type",
    "get_pattern_matcher",
    "is_config_file",
    "is_test_file",
    "quick_secret_scan",
    "quick_security_scan",
]
