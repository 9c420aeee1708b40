"""Constants and configuration values for ContextGuard.

This module centralizes the thresholds, weights and limits that the
analysis pipeline uses so the scoring heuristics can be read in one place.
"""

import os

# =============================================================================
# Input Limits
# =============================================================================

# Largest source file the CLI will hand to the pipeline (5MB)
MAX_SOURCE_BYTES = int(os.environ.get("CONTEXTGUARD_MAX_SOURCE_BYTES", 5 * 1024 * 1024))

# Worker threads used by the async batch entry point
DEFAULT_BATCH_CONCURRENCY = int(os.environ.get("CONTEXTGUARD_BATCH_CONCURRENCY", 4))

ANALYSIS_VERSION = "1.0.0"


# =============================================================================
# Pattern Acceptance Thresholds
# =============================================================================

# Matches at or below these confidences are discarded
SECRET_CONFIDENCE_THRESHOLD = 0.3
BUSINESS_LOGIC_CONFIDENCE_THRESHOLD = 0.3
FRAMEWORK_CONFIDENCE_THRESHOLD = 0.3

# Quick secret scan keeps only confident high/medium hits
QUICK_SECRET_CONFIDENCE = 0.7

# Quick security scan counts a framework only above this confidence
QUICK_FRAMEWORK_CONFIDENCE = 0.8


# =============================================================================
# Secret Confidence Adjustments
# =============================================================================

SECRET_BASE_CONFIDENCE = 0.7
SECRET_COMMENT_PENALTY = 0.3
SECRET_TEST_FILE_PENALTY = 0.4
SECRET_CONFIG_CONTEXT_BONUS = 0.2
SECRET_TEST_TOKEN_PENALTY = 0.5
SECRET_HIGH_SEVERITY_BONUS = 0.1

# Secrets up to this length are masked entirely
SECRET_FULL_MASK_LENGTH = 8
# Characters kept at each end of a masked secret
SECRET_MAX_VISIBLE_CHARS = 4
SECRET_VISIBLE_RATIO = 0.2


# =============================================================================
# Business Logic Scoring
# =============================================================================

BUSINESS_KEYWORD_WEIGHT = 0.4
BUSINESS_FUNCTION_WEIGHT = 0.4
BUSINESS_PHRASE_WEIGHT = 0.2

# Hit counts at which each overlap fraction reaches 1.0
DEFAULT_KEYWORD_SATURATION = 3
DEFAULT_FUNCTION_SATURATION = 2
DEFAULT_PHRASE_SATURATION = 2

BUSINESS_HIGH_RISK_THRESHOLD = 0.7
BUSINESS_MEDIUM_RISK_THRESHOLD = 0.4

# Keywords at least this long also match as identifier prefixes
KEYWORD_PREFIX_MIN_LENGTH = 4


# =============================================================================
# Framework Scoring
# =============================================================================

FRAMEWORK_IMPORT_WEIGHT = 0.4
FRAMEWORK_IDIOM_WEIGHT = 0.3
FRAMEWORK_FILE_WEIGHT = 0.2
FRAMEWORK_DEPENDENCY_WEIGHT = 0.1

SERVER_FRAMEWORKS = ("node", "express", "nextjs", "nuxt")
QUICK_SERVER_FRAMEWORKS = ("node", "express")


# =============================================================================
# Extraction Limits
# =============================================================================

MIN_FUNCTION_NAME_LENGTH = 2
# Fallback body length when a function body cannot be balanced
FUNCTION_BODY_FALLBACK_CHARS = 100

# quick_extract complexity buckets: (lines, functions, classes)
QUICK_HIGH_COMPLEXITY_LIMITS = (500, 20, 5)
QUICK_MEDIUM_COMPLEXITY_LIMITS = (200, 10, 2)

MANY_EXTERNAL_DEPENDENCIES = 20
MANY_EXPORTS = 15


# =============================================================================
# Risk Analysis
# =============================================================================

MAX_FUNCTION_PARAMETERS = 5

# Estimated function complexity thresholds
PROPRIETARY_ALGORITHM_HIGH = 15
TECHNICAL_COMPLEXITY_MEDIUM = 25
TECHNICAL_COMPLEXITY_HIGH = 40

# Class shape thresholds
TIGHT_COUPLING_MEMBERS = 20
LOW_COHESION_METHODS = 15
LOW_COHESION_MAX_PROPERTIES = 3
LOW_COHESION_HIGH_METHODS = 20

# Aggregate technical debt thresholds
TECHNICAL_DEBT_MEDIUM = 20
TECHNICAL_DEBT_HIGH = 50

# Overall escalation
HIGH_ITEM_ESCALATION_COUNT = 3
TOTAL_ITEM_ESCALATION_COUNT = 10
REVIEW_HIGH_ITEM_COUNT = 2


# =============================================================================
# Semantic Complexity
# =============================================================================

TECHNICAL_DEBT_BASELINE = 50
TECHNICAL_DEBT_RATE = 0.1
SECRET_DEBT_PENALTY = 2
HOTSPOT_FUNCTION_COMPLEXITY = 10
HOTSPOT_CLASS_MEMBERS = 15


# =============================================================================
# Intelligence Analysis
# =============================================================================

EXCESSIVE_NETWORK_FUNCTIONS = 5
EXCESSIVE_FILE_FUNCTIONS = 3
BEHAVIOR_GROUP_WEIGHT = 0.2
ANOMALY_WEIGHT = 0.1
EXCESSIVE_ACTIVITY_PATTERNS = 10
MANY_SECRET_VARIABLES = 2
