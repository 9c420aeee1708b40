"""ContextGuard: risk scoring for JavaScript/TypeScript source before it is shared with an AI assistant.

The pipeline extracts code elements, matches them against secret, business
logic and framework catalogs, enriches them semantically and scores the
result across security, business, technical and compliance categories.

Quick start::

    from contextguard import analyze_comprehensively, quick_analyze

    result = analyze_comprehensively(source, file_name="billing.ts")
    if result.should_block:
        print(result.executive_summary.critical_issues)

    print(quick_analyze(source).risk_level)
"""

__version__ = "1.0.0"

from .config import AnalysisSettings, get_settings, reset_settings
from .core.exceptions import (
    CatalogError,
    ConfigurationError,
    ContextGuardError,
    InputError,
    InvalidConfigError,
    InvalidPatternError,
    SourceReadError,
    SourceTooLargeError,
)
from .core.levels import Likelihood, RiskCategory, RiskLevel, Severity
from .engine import (
    AIAnalysisContext,
    AIAnalysisResult,
    AnalysisEngine,
    ComprehensiveAnalysisResult,
    QuickAnalysisResult,
    SourceUnit,
    analyze_comprehensively,
    analyze_for_ai,
    analyze_many,
    get_engine,
    quick_analyze,
)
from .logging_config import configure_logging
from .patterns.matcher import PatternCatalogs

__all__ = [
    "__version__",
    # Engine
    "AnalysisEngine",
    "PatternCatalogs",
    "SourceUnit",
    "analyze_comprehensively",
    "quick_analyze",
    "analyze_for_ai",
    "analyze_many",
    "get_engine",
    # Results
    "ComprehensiveAnalysisResult",
    "QuickAnalysisResult",
    "AIAnalysisContext",
    "AIAnalysisResult",
    # Levels
    "Severity",
    "Likelihood",
    "RiskCategory",
    "RiskLevel",
    # Configuration
    "AnalysisSettings",
    "get_settings",
    "reset_settings",
    "configure_logging",
    # Errors
    "ContextGuardError",
    "ConfigurationError",
    "InvalidConfigError",
    "CatalogError",
    "InvalidPatternError",
    "InputError",
    "SourceReadError",
    "SourceTooLargeError",
]
