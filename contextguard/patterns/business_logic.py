"""
Business logic pattern definitions.

Each domain rule lists keywords, characteristic function names and
phrases. A domain's score is the weighted sum of three overlap fractions
(keywords over identifier sub-words, function names over declared
functions, phrases over the text) times the domain's base confidence.
Each fraction saturates after a few hits so that a short, focused snippet
can reach the same score as a large file.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence

from ..constants import (
    BUSINESS_FUNCTION_WEIGHT,
    BUSINESS_HIGH_RISK_THRESHOLD,
    BUSINESS_KEYWORD_WEIGHT,
    BUSINESS_LOGIC_CONFIDENCE_THRESHOLD,
    BUSINESS_MEDIUM_RISK_THRESHOLD,
    BUSINESS_PHRASE_WEIGHT,
    KEYWORD_PREFIX_MIN_LENGTH,
)
from ..core.levels import Severity, max_severity
from ..core.text import IDENTIFIER_RE, IdentifierIndex, name_contains
from .models import BusinessDomainRule, BusinessLogicMatch, build_catalog
from .utils import declared_function_names

logger = logging.getLogger(__name__)

BUSINESS_DOMAIN_RULES: tuple[BusinessDomainRule, ...] = (
    BusinessDomainRule(
        rule_id="pricing",
        description="Pricing and billing logic that may contain proprietary business rules",
        keywords=(
            "price", "cost", "billing", "payment", "invoice", "discount", "tax", "fee",
            "subscription", "plan", "tier", "premium", "enterprise", "revenue", "margin",
            "profit", "commission", "refund", "checkout", "cart",
        ),
        functions=(
            "calculatePrice", "getPrice", "updatePrice", "applyDiscount", "calculateTax",
            "processPayment", "generateInvoice", "validatePayment", "calculateTotal",
            "applyPromoCode", "calculateShipping", "processRefund", "updateSubscription",
        ),
        phrases=(
            r"calculate.*price", r"pricing.*algorithm", r"price.*calculation", r"discount.*logic",
            r"tax.*calculation", r"billing.*process", r"payment.*flow", r"subscription.*model",
        ),
        base_confidence=0.9,
        severity=Severity.HIGH,
        recommendations=(
            "Review pricing logic before sharing with AI assistants",
            "Consider if pricing algorithms contain trade secrets",
            "Ensure pricing calculations are properly tested",
        ),
    ),
    BusinessDomainRule(
        rule_id="authentication",
        description="Authentication and authorization logic containing security-critical business rules",
        keywords=(
            "auth", "login", "password", "token", "session", "jwt", "oauth", "authenticate",
            "authorize", "permission", "role", "access", "security", "credential", "identity",
            "verification", "validation", "saml", "sso",
        ),
        functions=(
            "authenticate", "login", "logout", "validateToken", "hashPassword", "generateToken",
            "verifyPassword", "checkPermissions", "authorizeUser", "validateSession",
            "refreshToken", "encryptPassword", "validateUser", "generateApiKey", "verifyApiKey",
            "createSession", "destroySession",
        ),
        phrases=(
            r"auth.*logic", r"login.*process", r"password.*validation", r"token.*generation",
            r"session.*management", r"permission.*check", r"role.*based", r"access.*control",
        ),
        base_confidence=0.95,
        severity=Severity.HIGH,
        recommendations=(
            "Never share authentication logic with external systems",
            "Review security implications before AI analysis",
            "Ensure proper access controls are in place",
        ),
    ),
    BusinessDomainRule(
        rule_id="algorithm",
        description="Proprietary algorithms and computational logic",
        keywords=(
            "algorithm", "sort", "search", "optimize", "calculate", "compute", "formula",
            "equation", "model", "prediction", "recommendation", "scoring", "ranking",
            "matching", "filtering", "clustering", "ml",
        ),
        functions=(
            "algorithm", "optimize", "calculate", "process", "transform", "analyze", "predict",
            "recommend", "score", "rank", "match", "filter", "cluster", "classify", "segment",
            "aggregate",
        ),
        phrases=(
            r"proprietary.*algorithm", r"custom.*algorithm", r"optimization.*logic",
            r"recommendation.*engine", r"scoring.*algorithm", r"matching.*logic",
            r"prediction.*model", r"ranking.*algorithm",
        ),
        base_confidence=0.8,
        severity=Severity.MEDIUM,
        recommendations=(
            "Assess if algorithms contain proprietary intellectual property",
            "Consider patentability of novel algorithms",
            "Review competitive advantages before sharing",
        ),
    ),
    BusinessDomainRule(
        rule_id="financial",
        description="Financial calculations and transaction processing logic",
        keywords=(
            "money", "currency", "balance", "transaction", "account", "bank", "credit", "debit",
            "transfer", "exchange", "rate", "interest", "loan", "investment", "portfolio",
            "risk", "compliance", "audit",
        ),
        functions=(
            "transfer", "deposit", "withdraw", "getBalance", "processPayment", "calculateInterest",
            "exchangeCurrency", "validateTransaction", "processTransfer", "updateBalance",
            "checkFunds", "auditTransaction", "calculateRisk", "processLoan", "updatePortfolio",
        ),
        phrases=(
            r"financial.*calculation", r"transaction.*processing", r"balance.*calculation",
            r"interest.*calculation", r"currency.*conversion", r"risk.*assessment",
            r"compliance.*check", r"audit.*trail",
        ),
        base_confidence=0.9,
        severity=Severity.HIGH,
        recommendations=(
            "Ensure compliance with financial regulations",
            "Review transaction processing logic carefully",
            "Consider regulatory implications of data sharing",
        ),
    ),
    BusinessDomainRule(
        rule_id="encryption",
        description="Cryptographic implementations and security algorithms",
        keywords=(
            "encrypt", "decrypt", "cipher", "crypto", "hash", "secure", "key", "certificate",
            "signature", "digest", "salt", "iv", "aes", "rsa", "sha", "md5", "hmac", "pbkdf2",
            "scrypt",
        ),
        functions=(
            "encrypt", "decrypt", "hash", "generateKey", "sign", "verify", "createCipher",
            "createHash", "generateSalt", "deriveKey", "createSignature", "verifySignature",
            "encryptData", "decryptData",
        ),
        phrases=(
            r"encryption.*algorithm", r"crypto.*implementation", r"key.*generation",
            r"signature.*verification", r"hash.*function", r"cipher.*implementation",
            r"secure.*communication", r"digital.*signature",
        ),
        base_confidence=0.95,
        severity=Severity.HIGH,
        recommendations=(
            "Never expose cryptographic keys or secrets",
            "Review security implications thoroughly",
            "Ensure implementation follows security best practices",
        ),
    ),
    BusinessDomainRule(
        rule_id="validation",
        description="Data validation and sanitization business rules",
        keywords=(
            "validate", "sanitize", "filter", "clean", "escape", "normalize", "verify", "check",
            "constraint", "rule", "policy", "compliance", "regex", "pattern", "format", "schema",
            "whitelist", "blacklist",
        ),
        functions=(
            "validate", "sanitize", "filter", "clean", "escape", "normalize", "verifyInput",
            "checkFormat", "validateEmail", "validatePhone", "sanitizeHtml", "escapeString",
            "validateSchema", "checkConstraints",
        ),
        phrases=(
            r"validation.*logic", r"input.*sanitization", r"data.*validation", r"format.*checking",
            r"constraint.*validation", r"policy.*enforcement", r"compliance.*check",
            r"security.*validation",
        ),
        base_confidence=0.7,
        severity=Severity.MEDIUM,
        recommendations=(
            "Review validation rules for business logic exposure",
            "Consider if validation logic reveals system architecture",
            "Ensure proper input sanitization",
        ),
    ),
)

DEFAULT_BUSINESS_CATALOG = build_catalog(BUSINESS_DOMAIN_RULES)

FALLBACK_RECOMMENDATION = "Review business logic carefully before sharing"
SENIOR_REVIEW_RECOMMENDATION = "High confidence detection - requires senior review"
SANITIZE_RECOMMENDATION = "Consider code sanitization before AI interaction"


def risk_level_for(score: float) -> Severity:
    if score > BUSINESS_HIGH_RISK_THRESHOLD:
        return Severity.HIGH
    if score > BUSINESS_MEDIUM_RISK_THRESHOLD:
        return Severity.MEDIUM
    return Severity.LOW


def _fraction(hits: int, total: int, saturation: int) -> float:
    if hits == 0 or total == 0:
        return 0.0
    return min(1.0, hits / max(1, min(total, saturation)))


class BusinessLogicMatcher:
    """Scores business-logic domains against one text."""

    def __init__(self, rules: Mapping[str, BusinessDomainRule] | Iterable[BusinessDomainRule] | None = None):
        if rules is None:
            self.catalog = DEFAULT_BUSINESS_CATALOG
        elif isinstance(rules, Mapping):
            self.catalog = rules
        else:
            self.catalog = build_catalog(rules)

    def analyze(self, text: str, function_names: Sequence[str] | None = None) -> list[BusinessLogicMatch]:
        """Return the domains whose score exceeds the acceptance threshold.

        Args:
            text: Source text
            function_names: Declared function names; derived from the text
                when not given
        """
        names = list(function_names) if function_names is not None else declared_function_names(text)
        index = IdentifierIndex(text, prefix_min_length=KEYWORD_PREFIX_MIN_LENGTH)
        lines = text.split("\n")
        matches: list[BusinessLogicMatch] = []

        for rule in self.catalog.values():
            keywords = index.hits(rule.keywords)
            functions = [f for f in rule.functions if any(name_contains(n, f) for n in names)]
            phrase_hits = [p for p in rule.phrase_regexes if p.search(text)]

            score = (
                BUSINESS_KEYWORD_WEIGHT * _fraction(len(keywords), len(rule.keywords), rule.keyword_saturation)
                + BUSINESS_FUNCTION_WEIGHT * _fraction(len(functions), len(rule.functions), rule.function_saturation)
                + BUSINESS_PHRASE_WEIGHT * _fraction(len(phrase_hits), len(rule.phrases), rule.phrase_saturation)
            ) * rule.base_confidence
            score = min(1.0, score)

            if score <= BUSINESS_LOGIC_CONFIDENCE_THRESHOLD:
                continue

            indicators = []
            if keywords:
                indicators.append(f"Keywords: {', '.join(keywords)}")
            if functions:
                indicators.append(f"Functions: {', '.join(functions)}")
            if phrase_hits:
                indicators.append(f"Patterns: {len(phrase_hits)} matches")

            matches.append(
                BusinessLogicMatch(
                    rule_id=rule.rule_id,
                    description=rule.description,
                    severity=rule.severity,
                    confidence=round(score, 4),
                    risk_level=risk_level_for(score),
                    line=self._first_line(lines, keywords, functions, phrase_hits),
                    matched_keywords=keywords,
                    matched_functions=functions,
                    matched_phrases=len(phrase_hits),
                    indicators=indicators,
                    recommendations=self._recommendations(rule, score),
                )
            )

        if matches:
            logger.debug(f"Business logic domains detected: {[m.rule_id for m in matches]}")
        return matches

    def _first_line(
        self,
        lines: list[str],
        keywords: list[str],
        functions: list[str],
        phrase_hits: list[re.Pattern[str]],
    ) -> int | None:
        """1-based number of the first line carrying any of the signals."""
        for number, line in enumerate(lines, start=1):
            if any(p.search(line) for p in phrase_hits):
                return number
            if IdentifierIndex(line, prefix_min_length=KEYWORD_PREFIX_MIN_LENGTH).hits(keywords):
                return number
            if any(name_contains(word, f) for word in IDENTIFIER_RE.findall(line) for f in functions):
                return number
        return None

    def _recommendations(self, rule: BusinessDomainRule, score: float) -> list[str]:
        recommendations = list(rule.recommendations) or [FALLBACK_RECOMMENDATION]
        if score > 0.8:
            recommendations.append(SENIOR_REVIEW_RECOMMENDATION)
        if score > 0.6:
            recommendations.append(SANITIZE_RECOMMENDATION)
        return recommendations

    def highest_risk_level(self, matches: Sequence[BusinessLogicMatch]) -> Severity | None:
        if not matches:
            return None
        return max_severity(m.risk_level for m in matches)


_default_matcher = BusinessLogicMatcher()


def analyze_business_logic(text: str, function_names: Sequence[str] | None = None) -> list[BusinessLogicMatch]:
    """Score ``text`` against the default business-logic catalog."""
    return _default_matcher.analyze(text, function_names)
