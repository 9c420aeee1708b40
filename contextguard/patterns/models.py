"""Rule definitions and match results for the pattern libraries.

Rules are frozen dataclasses compiled once when a catalog is built; a rule
whose regular expression does not compile is rejected at that point with
:class:`~contextguard.core.exceptions.InvalidPatternError`. Match results
are pydantic models.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Protocol, TypeVar

from pydantic import BaseModel, Field

from ..constants import (
    DEFAULT_FUNCTION_SATURATION,
    DEFAULT_KEYWORD_SATURATION,
    DEFAULT_PHRASE_SATURATION,
)
from ..core.exceptions import CatalogError, InvalidPatternError
from ..core.levels import Severity


class SecretCategory(str, Enum):
    API_KEY = "api_key"
    PASSWORD = "password"
    TOKEN = "token"
    PRIVATE_KEY = "private_key"
    DATABASE = "database"
    CLOUD = "cloud"
    GENERIC = "generic"


def _compile(rule_id: str, pattern: str, flags: int = 0) -> re.Pattern[str]:
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise InvalidPatternError(
            f"Rule {rule_id} has an invalid pattern: {e}", rule_id=rule_id, pattern=pattern
        ) from e


@dataclass(frozen=True)
class SecretRule:
    """A credential signature.

    Attributes:
        rule_id: Unique identifier (e.g., "openai_api_key").
        name: Short human-readable name.
        pattern: Regular expression matching the credential.
        description: What the signature detects.
        severity: Severity of an exposed credential of this type.
        category: Credential family.
        false_positives: Case-insensitive patterns; a hit whose text matches
            any of them is discarded.
        ignore_case: Whether ``pattern`` itself matches case-insensitively.
    """

    rule_id: str
    name: str
    pattern: str
    description: str
    severity: Severity
    category: SecretCategory
    false_positives: tuple[str, ...] = ()
    ignore_case: bool = False
    regex: re.Pattern[str] = field(init=False, repr=False, compare=False)
    false_positive_regexes: tuple[re.Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "regex", _compile(self.rule_id, self.pattern, re.IGNORECASE if self.ignore_case else 0)
        )
        object.__setattr__(
            self,
            "false_positive_regexes",
            tuple(_compile(self.rule_id, fp, re.IGNORECASE) for fp in self.false_positives),
        )

    def is_false_positive(self, text: str) -> bool:
        return any(fp.search(text) for fp in self.false_positive_regexes)


@dataclass(frozen=True)
class BusinessDomainRule:
    """A business-logic domain and the signals that reveal it.

    Attributes:
        rule_id: Domain identifier (e.g., "pricing").
        description: What exposing this domain means.
        keywords: Words matched against identifier sub-words.
        functions: Characteristic function names, matched as lowercase
            substrings of declared function names.
        phrases: Regular expressions matched case-insensitively in the text.
        base_confidence: Multiplier applied to the weighted overlap score.
        severity: Severity of exposing this domain.
        recommendations: Domain-specific advice.
        keyword_saturation: Keyword hits at which the keyword fraction is 1.
        function_saturation: Function hits at which the function fraction is 1.
        phrase_saturation: Phrase hits at which the phrase fraction is 1.
    """

    rule_id: str
    description: str
    keywords: tuple[str, ...]
    functions: tuple[str, ...]
    phrases: tuple[str, ...]
    base_confidence: float
    severity: Severity
    recommendations: tuple[str, ...] = ()
    keyword_saturation: int = DEFAULT_KEYWORD_SATURATION
    function_saturation: int = DEFAULT_FUNCTION_SATURATION
    phrase_saturation: int = DEFAULT_PHRASE_SATURATION
    phrase_regexes: tuple[re.Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not 0 <= self.base_confidence <= 1:
            raise CatalogError(f"Rule {self.rule_id} has base confidence outside [0, 1]")
        object.__setattr__(
            self,
            "phrase_regexes",
            tuple(_compile(self.rule_id, p, re.IGNORECASE) for p in self.phrases),
        )


@dataclass(frozen=True)
class FrameworkRule:
    """A framework signature.

    Attributes:
        rule_id: Framework identifier (e.g., "react").
        name: Display name.
        imports: Module names whose import reveals the framework.
        idioms: Code fragments characteristic of the framework.
        files: Filename fragments used by the framework's conventions.
        dependencies: Package names in a dependency list.
        base_confidence: Multiplier applied to the weighted score.
        security_considerations: Review points for code on this framework.
        recommendations: Framework-specific advice.
        is_server: Whether the framework runs server-side.
        version_package: Package whose pinned version is reported.
    """

    rule_id: str
    name: str
    imports: tuple[str, ...]
    idioms: tuple[str, ...]
    files: tuple[str, ...]
    dependencies: tuple[str, ...]
    base_confidence: float
    security_considerations: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()
    is_server: bool = False
    version_package: str | None = None
    version_regexes: tuple[re.Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not 0 <= self.base_confidence <= 1:
            raise CatalogError(f"Rule {self.rule_id} has base confidence outside [0, 1]")
        regexes: list[re.Pattern[str]] = []
        if self.version_package:
            escaped = re.escape(self.version_package)
            regexes.append(_compile(self.rule_id, rf"{escaped}@(\d+\.\d+\.\d+)"))
            regexes.append(_compile(self.rule_id, rf"\"{escaped}\":\s*\"([^\"]+)\""))
        object.__setattr__(self, "version_regexes", tuple(regexes))


class _Rule(Protocol):
    rule_id: str


R = TypeVar("R", bound=_Rule)


def build_catalog(rules: Iterable[R]) -> MappingProxyType[str, R]:
    """Freeze ``rules`` into a read-only mapping keyed by rule id.

    Raises:
        CatalogError: If two rules share an id
    """
    catalog: dict[str, R] = {}
    for rule in rules:
        if rule.rule_id in catalog:
            raise CatalogError(f"Duplicate rule id in catalog: {rule.rule_id}")
        catalog[rule.rule_id] = rule
    return MappingProxyType(catalog)


# =============================================================================
# Match Results
# =============================================================================

class SecretMatch(BaseModel):
    """A credential found in the text.

    ``masked_value`` never contains the matched text verbatim when it is
    longer than eight characters, and ``context`` carries the same masking.
    """

    rule_id: str
    name: str
    category: SecretCategory
    severity: Severity
    description: str
    masked_value: str
    line: int
    column: int
    confidence: float = Field(ge=0.0, le=1.0)
    context: str = ""


class SecretAnalysis(BaseModel):
    has_secrets: bool = False
    matches: list[SecretMatch] = Field(default_factory=list)
    categories: list[SecretCategory] = Field(default_factory=list)
    highest_severity: Severity | None = None
    recommendations: list[str] = Field(default_factory=list)


class BusinessLogicMatch(BaseModel):
    """A business-logic domain detected in the text."""

    rule_id: str
    category: str = "business_logic"
    description: str
    severity: Severity
    confidence: float = Field(ge=0.0, le=1.0)
    risk_level: Severity
    line: int | None = None
    matched_keywords: list[str] = Field(default_factory=list)
    matched_functions: list[str] = Field(default_factory=list)
    matched_phrases: int = 0
    indicators: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class FrameworkMatch(BaseModel):
    """A framework detected from imports, idioms, filename and dependencies."""

    rule_id: str
    name: str
    category: str = "framework"
    severity: Severity = Severity.LOW
    confidence: float = Field(ge=0.0, le=1.0)
    version: str | None = None
    line: int | None = None
    is_server: bool = False
    indicators: list[str] = Field(default_factory=list)
    security_considerations: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class PatternSummary(BaseModel):
    risk_level: Severity = Severity.LOW
    secret_count: int = 0
    business_logic_count: int = 0
    framework_count: int = 0
    primary_framework: str | None = None


class PatternAnalysis(BaseModel):
    """Secrets, business logic and frameworks found in one text."""

    secrets: SecretAnalysis = Field(default_factory=SecretAnalysis)
    business_logic: list[BusinessLogicMatch] = Field(default_factory=list)
    frameworks: list[FrameworkMatch] = Field(default_factory=list)
    summary: PatternSummary = Field(default_factory=PatternSummary)
    recommendations: list[str] = Field(default_factory=list)


class QuickSecurityScan(BaseModel):
    high_risk_findings: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    requires_review: bool = False
