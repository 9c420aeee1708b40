"""Heuristic function extraction.

Functions are recognized by one regular expression per syntactic shape.
Bodies are recovered by brace balancing from the signature, so nested
functions and string literals containing braces are handled without a
parser. Anything that does not fit a shape is skipped.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from ..constants import FUNCTION_BODY_FALLBACK_CHARS, MIN_FUNCTION_NAME_LENGTH
from ..core.text import (
    JS_RESERVED_WORDS,
    IdentifierIndex,
    LineIndex,
    extract_block,
    is_comment_line,
)
from .models import FunctionElement, FunctionKind

logger = logging.getLogger(__name__)

SIGNATURE_PATTERNS: tuple[tuple[FunctionKind, re.Pattern[str]], ...] = (
    (FunctionKind.DECLARATION, re.compile(r"(?:export\s+)?(?:async\s+)?function\s+(\w+)\s*\(([^)]*)\)")),
    (FunctionKind.ARROW, re.compile(r"(?:export\s+)?const\s+(\w+)\s*=\s*(?:async\s+)?\(([^)]*)\)\s*=>")),
    (FunctionKind.METHOD, re.compile(r"(?:async\s+)?(\w+)\s*\(([^)]*)\)\s*\{")),
    (
        FunctionKind.CLASS_METHOD,
        re.compile(r"(?:public|private|protected)?\s*(?:static\s+)?(?:async\s+)?(\w+)\s*\(([^)]*)\)\s*\{"),
    ),
    (FunctionKind.OBJECT_METHOD, re.compile(r"(\w+)\s*:\s*(?:async\s+)?function\s*\(([^)]*)\)")),
    (FunctionKind.SHORTHAND, re.compile(r"(\w+)\s*\(([^)]*)\)\s*\{")),
)

# Keyword groups that mark a function as handling sensitive logic
SENSITIVE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "security": (
        "password", "secret", "token", "api_key", "private_key", "auth", "encrypt",
        "decrypt", "hash", "sign", "verify", "authenticate", "authorize",
        "permission", "credential", "jwt", "oauth",
    ),
    "business": (
        "price", "cost", "payment", "billing", "invoice", "discount", "calculate",
        "algorithm", "formula", "business", "rule", "proprietary", "license",
        "subscription", "commission",
    ),
    "financial": (
        "money", "currency", "balance", "transaction", "bank", "credit", "debit",
        "interest", "rate", "fee",
    ),
    "infrastructure": (
        "database", "server", "config", "environment", "deploy", "internal",
        "admin", "system", "network",
    ),
}

BUSINESS_PHRASES: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"calculate.*price",
        r"process.*payment",
        r"validate.*user",
        r"generate.*token",
        r"encrypt.*data",
        r"business.*rule",
        r"proprietary.*algorithm",
    )
)

EXCLUDED_NAMES = JS_RESERVED_WORDS | {"constructor", "else", "catch", "finally", "try"}

# Calls that say nothing about what a function depends on
_IGNORED_CALLS = frozenset({
    "if", "for", "while", "switch", "catch", "typeof", "instanceof", "console",
    "parseInt", "parseFloat", "isNaN", "setTimeout", "setInterval", "require", "import",
})

_CALL_RE = re.compile(r"(\w+)\s*\(")
_RETURN_RE = re.compile(r"return\s+([^;}\n]+)")
_REQUIRE_RE = re.compile(r"require\s*\(\s*['\"]([^'\"]+)['\"]\s*\)")
_IMPORT_FROM_RE = re.compile(r"import\s+.*?from\s+['\"]([^'\"]+)['\"]")
_GLOBAL_RE = re.compile(r"\b(window|global|process)\.(\w+)")

# Decision tokens counted by both complexity measures
DECISION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bif\b"),
    re.compile(r"\belse\s+if\b"),
    re.compile(r"\bwhile\b"),
    re.compile(r"\bfor\b"),
    re.compile(r"\bswitch\b"),
    re.compile(r"\bcase\b"),
    re.compile(r"\bcatch\b"),
    re.compile(r"(?<!\?)\?(?![.?:])(?=[^:;\n]*:)"),  # ternary, never ?. or ??
    re.compile(r"&&"),
    re.compile(r"\|\|"),
)


def count_decision_points(code: str) -> int:
    return sum(len(p.findall(code)) for p in DECISION_PATTERNS)


def cyclomatic_complexity(body: str) -> int:
    """1 + number of decision tokens in ``body``."""
    return 1 + count_decision_points(body)


def cognitive_complexity(body: str) -> int:
    """Decision tokens weighted by brace nesting, accumulated line by line.

    A line containing ``{`` opens one nesting level before its tokens are
    counted and a line containing ``}`` closes one; each decision token on
    the line then counts ``nesting + 1``.
    """
    total = 0
    nesting = 0
    for raw_line in body.split("\n"):
        line = raw_line.strip()
        if not line:
            continue
        if "{" in line:
            nesting += 1
        if "}" in line:
            nesting = max(0, nesting - 1)
        total += count_decision_points(line) * (nesting + 1)
    return total


def is_valid_function_name(name: str) -> bool:
    return len(name) >= MIN_FUNCTION_NAME_LENGTH and name not in EXCLUDED_NAMES


def parse_parameters(raw: str) -> list[str]:
    return [p.strip() for p in raw.split(",") if p.strip()]


def contains_sensitive_logic(name: str, body: str) -> bool:
    """Whether the name or body mentions a sensitive keyword or business phrase."""
    index = IdentifierIndex(f"{name}\n{body}")
    for keywords in SENSITIVE_KEYWORDS.values():
        if index.hits(keywords):
            return True
    return any(p.search(name) or p.search(body) for p in BUSINESS_PHRASES)


def infer_return_type(name: str, body: str) -> str:
    returns = _RETURN_RE.findall(body)
    if returns:
        value = returns[-1].strip()
        if re.match(r"^['\"`]", value):
            return "string"
        if re.match(r"^-?\d+(\.\d+)?$", value):
            return "number"
        if value in ("true", "false"):
            return "boolean"
        if value.startswith("["):
            return "array"
        if value.startswith("{"):
            return "object"
        if value == "null":
            return "null"
        if value == "undefined":
            return "undefined"

    lower = name.lower()
    if lower.startswith(("is", "has", "can")):
        return "boolean"
    if lower.startswith("get") and "count" in lower:
        return "number"
    if lower.startswith("get") and "list" in lower:
        return "array"
    return "unknown"


def extract_calls(body: str) -> list[str]:
    calls = {
        name
        for name in _CALL_RE.findall(body)
        if len(name) > 1 and name not in _IGNORED_CALLS and name not in JS_RESERVED_WORDS
    }
    return sorted(calls)


def detect_dependencies(body: str) -> list[str]:
    found: list[str] = []
    for module in _REQUIRE_RE.findall(body) + _IMPORT_FROM_RE.findall(body):
        if module not in found:
            found.append(module)
    for owner, name in _GLOBAL_RE.findall(body):
        ref = f"{owner}.{name}"
        if ref not in found:
            found.append(ref)
    return found


def extract_documentation(lines: Sequence[str], start_line: int) -> str | None:
    """Collect the comment lines directly above ``start_line``."""
    collected: list[str] = []
    i = start_line - 2
    while i >= 0 and is_comment_line(lines[i]):
        collected.append(lines[i].strip())
        i -= 1
    if not collected:
        return None
    return "\n".join(reversed(collected))


class FunctionExtractor:
    """Extracts functions from JavaScript/TypeScript source text."""

    def __init__(self, patterns: Sequence[tuple[FunctionKind, re.Pattern[str]]] = SIGNATURE_PATTERNS):
        self.patterns = tuple(patterns)

    def extract(self, text: str) -> list[FunctionElement]:
        index = LineIndex(text)
        lines = text.split("\n")
        seen: set[tuple[str, int, int]] = set()
        functions: list[FunctionElement] = []

        for kind, pattern in self.patterns:
            for match in pattern.finditer(text):
                name = match.group(1)
                if not is_valid_function_name(name):
                    continue
                parameters = parse_parameters(match.group(2))
                start_line = index.line_of(match.start(1))
                key = (name, start_line, len(parameters))
                if key in seen:
                    continue
                seen.add(key)

                body, body_end = self._recover_body(text, match, kind)
                signature = match.group(0)
                functions.append(
                    FunctionElement(
                        name=name,
                        kind=kind,
                        parameters=parameters,
                        start_line=start_line,
                        end_line=index.line_of(max(body_end - 1, match.start(1))),
                        is_async=bool(re.search(r"\basync\b", signature)),
                        is_exported=bool(re.search(r"\bexport\b", signature)),
                        contains_sensitive_logic=contains_sensitive_logic(name, body),
                        return_type=infer_return_type(name, body),
                        calls=extract_calls(body),
                        dependencies=detect_dependencies(body),
                        documentation=extract_documentation(lines, start_line),
                        body=body,
                    )
                )

        functions.sort(key=lambda f: f.start_line)
        logger.debug(f"Extracted {len(functions)} functions")
        return functions

    def _recover_body(self, text: str, match: re.Match[str], kind: FunctionKind) -> tuple[str, int]:
        """Return the body text and the offset just past it."""
        after = match.end()

        if kind is FunctionKind.ARROW and not text[after:].lstrip().startswith("{"):
            terminator = re.search(r"[\n;]", text[after:])
            end = after + terminator.start() if terminator else len(text)
            return text[after:end].strip(), end

        # Signatures that matched up to their opening brace end just past it
        start = after - 1 if text[after - 1] == "{" else after
        open_index = text.find("{", start)
        if open_index != -1 and ";" not in text[start:open_index]:
            block = extract_block(text, open_index)
            if block is not None:
                return block, open_index + len(block)

        end = min(len(text), match.start() + FUNCTION_BODY_FALLBACK_CHARS)
        return text[match.start():end], end


_default_extractor = FunctionExtractor()


def extract_functions(text: str) -> list[FunctionElement]:
    """Extract functions with the default signature patterns."""
    return _default_extractor.extract(text)
