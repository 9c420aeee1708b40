"""Enumerated severity, likelihood and risk-category types.

Every scoring table in the pipeline is keyed by these enums, and the
tables below are checked at import time to cover every member.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from enum import Enum


class Severity(str, Enum):
    """Severity of a finding, also used as a risk level."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


class Likelihood(str, Enum):
    """How likely a risk item is to materialize."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RiskCategory(str, Enum):
    """The four independent axes of the risk model."""

    SECURITY = "security"
    BUSINESS = "business"
    TECHNICAL = "technical"
    COMPLIANCE = "compliance"


_SEVERITY_RANK: dict[Severity, int] = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}

SEVERITY_WEIGHTS: dict[Severity, float] = {
    Severity.LOW: 1,
    Severity.MEDIUM: 3,
    Severity.HIGH: 7,
    Severity.CRITICAL: 10,
}

LIKELIHOOD_WEIGHTS: dict[Likelihood, float] = {
    Likelihood.LOW: 0.3,
    Likelihood.MEDIUM: 0.6,
    Likelihood.HIGH: 1.0,
}

# Likelihood that mirrors a finding's own severity
SEVERITY_LIKELIHOOD: dict[Severity, Likelihood] = {
    Severity.LOW: Likelihood.LOW,
    Severity.MEDIUM: Likelihood.MEDIUM,
    Severity.HIGH: Likelihood.HIGH,
    Severity.CRITICAL: Likelihood.HIGH,
}

for _table, _enum in (
    (_SEVERITY_RANK, Severity),
    (SEVERITY_WEIGHTS, Severity),
    (LIKELIHOOD_WEIGHTS, Likelihood),
    (SEVERITY_LIKELIHOOD, Severity),
):
    if set(_table) != set(_enum):
        raise RuntimeError(f"Scoring table does not cover every {_enum.__name__} member")


def max_severity(levels: Iterable[Severity], default: Severity = Severity.LOW) -> Severity:
    """Return the most severe level in ``levels``, or ``default`` when empty."""
    result = default
    for level in levels:
        if level.rank > result.rank:
            result = level
    return result


def at_least(level: Severity, floor: Severity) -> Severity:
    """Raise ``level`` to ``floor`` if it is below it."""
    return level if level.rank >= floor.rank else floor


def risk_weight(severity: Severity, likelihood: Likelihood) -> float:
    """Combined weight of one risk item."""
    return SEVERITY_WEIGHTS[severity] * LIKELIHOOD_WEIGHTS[likelihood]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return math.floor(value + 0.5)


# Overall and per-category risk levels share the severity scale
RiskLevel = Severity
