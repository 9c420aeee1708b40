"""
Secret detection patterns.

Each :class:`SecretRule` recognizes one credential format. Hits are
filtered through the rule's false-positive patterns, scored for confidence
from their surrounding context and returned masked.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Mapping

from ..constants import (
    QUICK_SECRET_CONFIDENCE,
    SECRET_BASE_CONFIDENCE,
    SECRET_COMMENT_PENALTY,
    SECRET_CONFIDENCE_THRESHOLD,
    SECRET_CONFIG_CONTEXT_BONUS,
    SECRET_FULL_MASK_LENGTH,
    SECRET_HIGH_SEVERITY_BONUS,
    SECRET_MAX_VISIBLE_CHARS,
    SECRET_TEST_FILE_PENALTY,
    SECRET_TEST_TOKEN_PENALTY,
    SECRET_VISIBLE_RATIO,
)
from ..core.levels import Severity, max_severity
from ..core.text import LineIndex, is_comment_line
from .models import SecretAnalysis, SecretCategory, SecretMatch, SecretRule, build_catalog

logger = logging.getLogger(__name__)

H, M, L = Severity.HIGH, Severity.MEDIUM, Severity.LOW
C = SecretCategory

SECRET_RULES: tuple[SecretRule, ...] = (
    # API keys and tokens
    SecretRule("openai_api_key", "OpenAI API Key", r"sk-[a-zA-Z0-9]{48}",
               "OpenAI API key pattern", H, C.API_KEY, ("sk-test", "sk-fake", "sk-example")),
    SecretRule("github_token", "GitHub Personal Access Token", r"ghp_[a-zA-Z0-9]{36}",
               "GitHub personal access token", H, C.TOKEN, ("ghp_test", "ghp_fake", "ghp_example")),
    SecretRule("github_oauth_token", "GitHub OAuth Token", r"gho_[a-zA-Z0-9]{36}",
               "GitHub OAuth access token", H, C.TOKEN, ("gho_test", "gho_fake")),
    SecretRule("aws_access_key", "AWS Access Key", r"AKIA[0-9A-Z]{16}",
               "AWS access key identifier", H, C.CLOUD, ("AKIATEST", "AKIAFAKE")),
    SecretRule("aws_secret_key", "AWS Secret Key",
               r"(?:aws_secret_access_key|AWS_SECRET_ACCESS_KEY)\s*[:=]\s*[\"']?([A-Za-z0-9+/]{40})[\"']?",
               "AWS secret access key", H, C.CLOUD, ("test", "fake", "example")),
    SecretRule("google_api_key", "Google API Key", r"AIza[0-9A-Za-z\-_]{35}",
               "Google API key", H, C.API_KEY, ("AIzaTest", "AIzaFake")),
    SecretRule("stripe_api_key", "Stripe API Key", r"sk_(?:live|test)_[0-9A-Za-z]{24}",
               "Stripe API key (live or test)", H, C.API_KEY, ("sk_test_test", "sk_live_fake")),
    SecretRule("stripe_webhook_secret", "Stripe Webhook Secret", r"whsec_[0-9A-Za-z]{32}",
               "Stripe webhook endpoint secret", H, C.API_KEY, ("whsec_test", "whsec_fake")),
    SecretRule("slack_token", "Slack Token", r"xox[baprs]-[0-9]{12}-[0-9]{12}-[0-9a-zA-Z]{24}",
               "Slack API token", H, C.TOKEN, ("xoxb-test", "xoxb-fake")),
    SecretRule("discord_token", "Discord Bot Token", r"[MN][A-Za-z\d]{23}\.[\w-]{6}\.[\w-]{27}",
               "Discord bot token", H, C.TOKEN, ("test", "fake")),
    SecretRule("twilio_api_key", "Twilio API Key", r"SK[a-z0-9]{32}",
               "Twilio API key", H, C.API_KEY, ("SKtest", "SKfake")),
    SecretRule("mailgun_api_key", "Mailgun API Key", r"key-[a-zA-Z0-9]{32}",
               "Mailgun API key", H, C.API_KEY, ("key-test", "key-fake")),
    SecretRule("sendgrid_api_key", "SendGrid API Key", r"SG\.[a-zA-Z0-9_-]{22}\.[a-zA-Z0-9_-]{43}",
               "SendGrid API key", H, C.API_KEY, (r"SG\.test", r"SG\.fake")),
    # Database connection strings
    SecretRule("mongodb_connection", "MongoDB Connection String", r"mongodb(?:\+srv)?://[^\s\"']+",
               "MongoDB connection string", H, C.DATABASE, ("localhost", r"example\.com")),
    SecretRule("mysql_connection", "MySQL Connection String", r"mysql://[^\s\"']+",
               "MySQL connection string", H, C.DATABASE, ("localhost", r"example\.com")),
    SecretRule("postgresql_connection", "PostgreSQL Connection String", r"postgres(?:ql)?://[^\s\"']+",
               "PostgreSQL connection string", H, C.DATABASE, ("localhost", r"example\.com")),
    SecretRule("redis_connection", "Redis Connection String", r"redis://[^\s\"']+",
               "Redis connection string", M, C.DATABASE, ("localhost", r"example\.com")),
    # Private keys
    SecretRule("rsa_private_key", "RSA Private Key",
               r"-----BEGIN\s+(?:RSA\s+)?PRIVATE\s+KEY-----[\s\S]*?-----END\s+(?:RSA\s+)?PRIVATE\s+KEY-----",
               "RSA private key", H, C.PRIVATE_KEY, ("test", "example", "dummy")),
    SecretRule("openssh_private_key", "OpenSSH Private Key",
               r"-----BEGIN\s+OPENSSH\s+PRIVATE\s+KEY-----[\s\S]*?-----END\s+OPENSSH\s+PRIVATE\s+KEY-----",
               "OpenSSH private key", H, C.PRIVATE_KEY, ("test", "example", "dummy")),
    SecretRule("ec_private_key", "EC Private Key",
               r"-----BEGIN\s+EC\s+PRIVATE\s+KEY-----[\s\S]*?-----END\s+EC\s+PRIVATE\s+KEY-----",
               "Elliptic curve private key", H, C.PRIVATE_KEY, ("test", "example", "dummy")),
    # Generic assignments
    SecretRule("generic_api_key", "Generic API Key",
               r"(?:api[_-]?key|apikey)\s*[:=]\s*[\"']?([a-zA-Z0-9_\-\.]{20,})[\"']?",
               "Generic API key pattern", M, C.API_KEY,
               ("test", "fake", "example", "placeholder", "your_api_key"), ignore_case=True),
    SecretRule("generic_password", "Generic Password",
               r"(?:password|passwd|pwd)\s*[:=]\s*[\"']?([^\s\"']{8,})[\"']?",
               "Generic password pattern", M, C.PASSWORD,
               ("password", "test", "fake", "example", "placeholder", "your_password"), ignore_case=True),
    SecretRule("generic_token", "Generic Token",
               r"(?:token|bearer)\s*[:=]\s*[\"']?([a-zA-Z0-9_\-\.]{20,})[\"']?",
               "Generic token pattern", M, C.TOKEN,
               ("test", "fake", "example", "placeholder", "your_token"), ignore_case=True),
    SecretRule("generic_secret", "Generic Secret",
               r"(?:secret|SECRET)\s*[:=]\s*[\"']?([a-zA-Z0-9_\-\.]{12,})[\"']?",
               "Generic secret pattern", M, C.GENERIC,
               ("secret", "test", "fake", "example", "placeholder", "your_secret"), ignore_case=True),
    SecretRule("jwt_token", "JWT Token", r"eyJ[a-zA-Z0-9_-]+\.eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+",
               "JSON Web Token", H, C.TOKEN, ("test", "fake", "example")),
    SecretRule("email_with_password", "Email with Password",
               r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}\s*[:/]\s*[^\s\"']{6,}",
               "Email address with password or credentials", M, C.PASSWORD, ("test@", "fake@", "example@")),
    SecretRule("env_secret", "Environment Secret",
               r"(?:process\.env\.|ENV\[['\"])[A-Z_]*(?:SECRET|KEY|TOKEN|PASSWORD|PASS)[A-Z_]*['\"]?\]?",
               "Environment variable containing secrets", L, C.GENERIC, ("test", "fake", "example")),
)

DEFAULT_SECRET_CATALOG = build_catalog(SECRET_RULES)

_TEST_FILE_MARKERS = ("test", "spec", "mock")
_CONFIG_CONTEXT_MARKERS = ("config", "env", "settings")
_TEST_VALUE_MARKERS = ("test", "fake", "example", "placeholder", "dummy", "mock")

GENERAL_RECOMMENDATIONS = (
    "Remove all hardcoded secrets from your code",
    "Use environment variables or secure configuration management",
    "Consider using a secrets management service (AWS Secrets Manager, Azure Key Vault, etc.)",
)

CATEGORY_RECOMMENDATIONS: dict[SecretCategory, tuple[str, ...]] = {
    C.API_KEY: (
        "Store API keys in environment variables or secure key management systems",
        "Rotate any exposed API keys immediately",
    ),
    C.PASSWORD: (
        "Never store passwords in plain text",
        "Use secure password hashing for stored credentials",
    ),
    C.TOKEN: (
        "Store tokens securely and implement token rotation",
        "Use short-lived tokens where possible",
    ),
    C.PRIVATE_KEY: (
        "Store private keys in secure key management systems",
        "Never commit private keys to version control",
        "Generate new key pairs if private keys were exposed",
    ),
    C.DATABASE: (
        "Use connection pooling and secure database configuration",
        "Implement database access controls and monitoring",
    ),
    C.CLOUD: (
        "Use cloud-native identity and access management",
        "Implement least-privilege access policies",
    ),
    C.GENERIC: (),
}

HIGH_SEVERITY_RECOMMENDATIONS = (
    "HIGH RISK: This code contains high-severity secrets that should never be shared",
    "Review and rotate all exposed credentials immediately",
)

NO_SECRETS_RECOMMENDATION = "No secrets detected - code appears safe for AI analysis"


def mask_secret(secret: str) -> str:
    """Keep at most four characters at each end of ``secret`` and star the rest.

    Secrets of eight characters or fewer are starred entirely.
    """
    if len(secret) <= SECRET_FULL_MASK_LENGTH:
        return "*" * len(secret)
    visible = min(SECRET_MAX_VISIBLE_CHARS, math.floor(len(secret) * SECRET_VISIBLE_RATIO))
    return f"{secret[:visible]}{'*' * (len(secret) - visible * 2)}{secret[-visible:]}"


def redact_secrets(value: str, secrets: Iterable[str]) -> str:
    """Mask every occurrence of each raw secret in ``value``.

    ``secrets`` should be ordered longest first so a secret embedded in a
    longer one is masked as part of it. A value that is itself a fragment
    of a secret is masked whole.
    """
    redacted = value
    for secret in secrets:
        if secret in redacted:
            redacted = redacted.replace(secret, mask_secret(secret))
        elif len(value) > SECRET_FULL_MASK_LENGTH and value in secret:
            return mask_secret(value)
    return redacted


def secret_value(match: re.Match[str]) -> str:
    """The credential itself: the first capture group when the rule has one, else the whole hit."""
    if match.re.groups and match.group(1):
        return match.group(1)
    return match.group(0)


def is_test_file_name(file_name: str | None) -> bool:
    return bool(file_name) and any(marker in file_name for marker in _TEST_FILE_MARKERS)


def secret_confidence(match_text: str, rule: SecretRule, line: str, file_name: str | None = None) -> float:
    """Confidence that a raw hit is a real credential, clamped to [0, 1]."""
    confidence = SECRET_BASE_CONFIDENCE

    if is_comment_line(line):
        confidence -= SECRET_COMMENT_PENALTY

    if is_test_file_name(file_name):
        confidence -= SECRET_TEST_FILE_PENALTY

    if any(marker in line for marker in _CONFIG_CONTEXT_MARKERS):
        confidence += SECRET_CONFIG_CONTEXT_BONUS

    lower_match = match_text.lower()
    lower_line = line.lower()
    if any(marker in lower_match or marker in lower_line for marker in _TEST_VALUE_MARKERS):
        confidence -= SECRET_TEST_TOKEN_PENALTY

    if rule.severity is Severity.HIGH:
        confidence += SECRET_HIGH_SEVERITY_BONUS

    return max(0.0, min(1.0, confidence))


class SecretMatcher:
    """Scans text against a catalog of credential signatures."""

    def __init__(self, rules: Mapping[str, SecretRule] | Iterable[SecretRule] | None = None):
        if rules is None:
            self.catalog = DEFAULT_SECRET_CATALOG
        elif isinstance(rules, Mapping):
            self.catalog = rules
        else:
            self.catalog = build_catalog(rules)

    def analyze(self, text: str, file_name: str | None = None) -> SecretAnalysis:
        index = LineIndex(text)
        lines = text.split("\n")
        matches: list[SecretMatch] = []
        categories: list[SecretCategory] = []

        for rule, match, line_number, confidence in self._hits(text, index, lines, file_name):
            matches.append(
                SecretMatch(
                    rule_id=rule.rule_id,
                    name=rule.name,
                    category=rule.category,
                    severity=rule.severity,
                    description=rule.description,
                    masked_value=mask_secret(match.group(0)),
                    line=line_number,
                    column=index.column_of(match.start()),
                    confidence=round(confidence, 4),
                    context=self._context(index, lines, line_number, match.start(), match.end()),
                )
            )
            if rule.category not in categories:
                categories.append(rule.category)

        matches.sort(key=lambda m: (m.line, m.column, m.rule_id))
        if matches:
            logger.debug(f"Detected {len(matches)} potential secrets in {file_name or 'input'}")

        return SecretAnalysis(
            has_secrets=bool(matches),
            matches=matches,
            categories=categories,
            highest_severity=max_severity((m.severity for m in matches), default=Severity.LOW) if matches else None,
            recommendations=self._recommendations(matches, categories),
        )

    def exposed_values(self, text: str, file_name: str | None = None) -> list[str]:
        """Raw credential of every accepted hit, longest first, for masking it out of derived strings."""
        index = LineIndex(text)
        lines = text.split("\n")
        values = {secret_value(match) for _, match, _, _ in self._hits(text, index, lines, file_name)}
        return sorted(values, key=lambda v: (-len(v), v))

    def _hits(self, text: str, index: LineIndex, lines: list[str], file_name: str | None):
        """Yield ``(rule, match, line, confidence)`` for hits that pass false-positive and confidence filters.

        False-positive patterns are tested against the captured credential so
        a rule's own keyword prefix never disqualifies its hits.
        """
        for rule in self.catalog.values():
            for match in rule.regex.finditer(text):
                if rule.is_false_positive(secret_value(match)):
                    continue

                line_number = index.line_of(match.start())
                line = lines[line_number - 1]
                confidence = secret_confidence(match.group(0), rule, line, file_name)
                if confidence <= SECRET_CONFIDENCE_THRESHOLD:
                    continue
                yield rule, match, line_number, confidence

    def _context(self, index: LineIndex, lines: list[str], line_number: int, start: int, end: int) -> str:
        """The hit line and its neighbours as "N: line", with the hit starred out."""
        rendered = []
        for number in range(max(1, line_number - 1), min(len(lines), line_number + 1) + 1):
            line = lines[number - 1]
            line_start = index.line_start(number)
            lo = max(start, line_start) - line_start
            hi = min(end, line_start + len(line)) - line_start
            if lo < hi:
                line = line[:lo] + "*" * (hi - lo) + line[hi:]
            rendered.append(f"{number}: {line}")
        return "\n".join(rendered)

    def _recommendations(self, matches: list[SecretMatch], categories: list[SecretCategory]) -> list[str]:
        if not matches:
            return [NO_SECRETS_RECOMMENDATION]
        recommendations = list(GENERAL_RECOMMENDATIONS)
        for category in categories:
            recommendations.extend(CATEGORY_RECOMMENDATIONS[category])
        if any(m.severity is Severity.HIGH for m in matches):
            recommendations.extend(HIGH_SEVERITY_RECOMMENDATIONS)
        return recommendations

    def quick_scan(self, text: str, file_name: str | None = None) -> list[SecretMatch]:
        """High/medium matches with confidence above 0.7."""
        return [
            m
            for m in self.analyze(text, file_name).matches
            if m.confidence > QUICK_SECRET_CONFIDENCE and m.severity in (Severity.HIGH, Severity.MEDIUM)
        ]

    def has_secrets(self, text: str, file_name: str | None = None) -> bool:
        return self.analyze(text, file_name).has_secrets

    def rules_by_category(self, category: SecretCategory) -> list[SecretRule]:
        return [rule for rule in self.catalog.values() if rule.category is category]


_default_matcher = SecretMatcher()


def analyze_secrets(text: str, file_name: str | None = None) -> SecretAnalysis:
    """Scan ``text`` with the default secret catalog."""
    return _default_matcher.analyze(text, file_name)


def quick_secret_scan(text: str, file_name: str | None = None) -> list[SecretMatch]:
    return _default_matcher.quick_scan(text, file_name)
