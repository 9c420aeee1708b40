"""One-pass scan of raw source text for the idioms later stages score.

The semantic stage calls :func:`scan_idioms` once and stores the result on
the context, so the risk and intelligence stages never re-read the text.
The quick entry points share :data:`DYNAMIC_EXECUTION_RE` with this scan,
which keeps their block decision in line with the full pipeline.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..core.levels import Severity
from ..core.text import LineIndex
from .models import SourceIdioms

DYNAMIC_EXECUTION_RE = re.compile(r"\beval\s*\(|\bFunction\s*\(")


@dataclass(frozen=True)
class TextIdiom:
    """A named regular expression with the severity of what it indicates."""

    key: str
    regex: re.Pattern[str]
    severity: Severity
    description: str


KNOWN_THREAT_IDIOMS: tuple[TextIdiom, ...] = (
    TextIdiom(
        "sql_injection",
        re.compile(r"\b(?:SELECT|INSERT|UPDATE|DELETE)\b[^\n;]*(?:['\"`]\s*\+|\$\{)", re.IGNORECASE),
        Severity.HIGH,
        "Potential SQL injection vulnerability detected",
    ),
    TextIdiom(
        "command_injection",
        re.compile(r"\b(?:exec|execSync|execFile|execFileSync|spawn|spawnSync|system|eval)\s*\("),
        Severity.HIGH,
        "Potential command injection vulnerability",
    ),
    TextIdiom(
        "xss",
        re.compile(r"\.(?:inner|outer)HTML\s*=|\bdocument\.write(?:ln)?\s*\(|\beval\s*\("),
        Severity.MEDIUM,
        "Potential cross-site scripting vulnerability",
    ),
    TextIdiom(
        "path_traversal",
        re.compile(r"\.\.[/\\]|path\.(?:join|resolve)\([^)]*['\"]\.\.['\"]"),
        Severity.MEDIUM,
        "Potential path traversal vulnerability",
    ),
)

MALICIOUS_IDIOMS: tuple[TextIdiom, ...] = (
    TextIdiom(
        "code_obfuscation",
        re.compile(r"\\x[0-9a-f]{2}|\\u[0-9a-f]{4}|String\.fromCharCode", re.IGNORECASE),
        Severity.MEDIUM,
        "Code contains obfuscation patterns that may hide malicious intent",
    ),
    TextIdiom(
        "reverse_shell",
        re.compile(r"\bnc\s+-\S*\s.*-e\b|\bbash\s+-i\b|/bin/sh.*>&|\bsocket\.connect\b", re.IGNORECASE),
        Severity.HIGH,
        "Code contains patterns typical of reverse shell implementations",
    ),
    TextIdiom(
        "data_exfiltration",
        re.compile(r"\bbtoa\s*\(|\bbase64\b|fetch\(.*POST.*body|XMLHttpRequest.*\.send", re.IGNORECASE),
        Severity.MEDIUM,
        "Code contains patterns that could be used for data exfiltration",
    ),
    TextIdiom(
        "crypto_mining",
        re.compile(r"\bmining\b|\bhashrate\b|stratum\+tcp|\bcoinhive\b|\bcryptonight\b", re.IGNORECASE),
        Severity.LOW,
        "Code contains cryptocurrency mining patterns",
    ),
)

THREAT_IDIOMS_BY_KEY = {idiom.key: idiom for idiom in KNOWN_THREAT_IDIOMS}
MALICIOUS_IDIOMS_BY_KEY = {idiom.key: idiom for idiom in MALICIOUS_IDIOMS}

_ENCODING_RE = re.compile(
    r"\b(?:btoa|atob)\s*\(|\bbase64\b|\bencodeURI(?:Component)?\s*\(|JSON\.stringify\s*\(",
    re.IGNORECASE,
)
_TEMPLATE_RE = re.compile(r"\$\{[^}\n]*\}|<%.*?%>|\{\{.*?\}\}")
_SQL_CONCAT_RE = re.compile(r"\b(?:SELECT|INSERT|UPDATE|DELETE)\b[^\n;]*\+", re.IGNORECASE)
_STRING_TIMER_RE = re.compile(r"\bset(?:Timeout|Interval)\s*\(\s*['\"`]")
_ESCAPE_RE = re.compile(r"\\x[0-9a-f]{2}|\\u[0-9a-f]{4}", re.IGNORECASE)
_URL_RE = re.compile(r"https?://[^\s'\"`)]+")
_SCHEDULE_RE = re.compile(r"\bset(?:Timeout|Interval)\b|\bcron\b", re.IGNORECASE)
_DELAY_RE = re.compile(r"\bsetTimeout\b|\bsleep\b|\bdelay\b", re.IGNORECASE)
_PERIODIC_RE = re.compile(r"\bsetInterval\b|\brecurring\b", re.IGNORECASE)

PROTOCOL_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("HTTPS", re.compile(r"\bhttps:", re.IGNORECASE)),
    ("HTTP", re.compile(r"\bhttp:", re.IGNORECASE)),
    ("WebSocket", re.compile(r"\bwss?:", re.IGNORECASE)),
    ("FTP", re.compile(r"\bftp:", re.IGNORECASE)),
)


def has_dynamic_execution(text: str) -> bool:
    return DYNAMIC_EXECUTION_RE.search(text) is not None


def scan_idioms(text: str) -> SourceIdioms:
    """Scan ``text`` once for every idiom the downstream stages use."""
    dynamic = DYNAMIC_EXECUTION_RE.search(text)
    return SourceIdioms(
        dynamic_execution_line=LineIndex(text).line_of(dynamic.start()) if dynamic else None,
        known_threats=[i.key for i in KNOWN_THREAT_IDIOMS if i.regex.search(text)],
        malicious_patterns=[i.key for i in MALICIOUS_IDIOMS if i.regex.search(text)],
        data_encoding=bool(_ENCODING_RE.search(text)),
        template_interpolation=bool(_TEMPLATE_RE.search(text)),
        sql_concatenation=bool(_SQL_CONCAT_RE.search(text)),
        string_timers=bool(_STRING_TIMER_RE.search(text)),
        escaped_characters=bool(_ESCAPE_RE.search(text)),
        urls=list(dict.fromkeys(_URL_RE.findall(text))),
        protocols=[name for name, pattern in PROTOCOL_PATTERNS if pattern.search(text)],
        scheduled_operations=bool(_SCHEDULE_RE.search(text)),
        delayed_execution=bool(_DELAY_RE.search(text)),
        periodic_execution=bool(_PERIODIC_RE.search(text)),
    )
