"""Heuristic variable extraction.

Covers ``const``/``let``/``var`` declarations, object and array
destructuring and modifier-prefixed class properties. Each variable is
tagged with its scope (from the braces enclosing it) and with whether it
looks like it holds a secret, in which case its value is redacted.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from ..core.text import IdentifierIndex, LineIndex
from .models import Scope, VariableElement, VariableKind

logger = logging.getLogger(__name__)

REDACTED = "[REDACTED]"

_NAME = r"[A-Za-z_$][\w$]*"

DECLARATION_RE = re.compile(rf"\b(const|let|var)\s+({_NAME})\s*=\s*([^;\n]+)")
OBJECT_DESTRUCTURING_RE = re.compile(r"\b(const|let|var)\s*\{\s*([^}]+)\s*\}\s*=\s*([^;\n]+)")
ARRAY_DESTRUCTURING_RE = re.compile(r"\b(const|let|var)\s*\[\s*([^\]]+)\s*\]\s*=\s*([^;\n]+)")
CLASS_PROPERTY_RE = re.compile(
    rf"^[ \t]*((?:(?:public|private|protected|static|readonly)\s+)+)({_NAME})"
    r"\s*(?::\s*([^=;\n]+?))?\s*(?:=\s*([^;\n]+?))?\s*;?[ \t]*$",
    re.MULTILINE,
)

_VALID_NAME_RE = re.compile(r"^[a-zA-Z_$][a-zA-Z0-9_$]*$")

RESERVED_NAMES = frozenset({
    "const", "let", "var", "function", "class", "if", "else", "for", "while", "do",
    "switch", "case", "default", "break", "continue", "return", "try", "catch",
    "finally", "throw", "new", "this", "super", "typeof", "instanceof", "in", "of",
})

SECRET_NAME_KEYWORDS: tuple[str, ...] = (
    "password", "secret", "token", "key", "api_key", "apikey", "auth", "credential",
    "private", "secret_key", "access_token", "refresh_token", "jwt", "bearer", "oauth",
)

SECRET_VALUE_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p)
    for p in (
        r"^['\"][a-zA-Z0-9_\-\.]{20,}['\"]$",  # long opaque literal
        r"^['\"](?:sk|pk)-[a-zA-Z0-9]{48}['\"]$",
        r"^['\"](?:ghp|gho)_[a-zA-Z0-9]{36}['\"]$",
        r"^['\"]AKIA[0-9A-Z]{16}['\"]$",
        r"^['\"]eyJ[a-zA-Z0-9_-]+\.eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+['\"]$",
        r"^['\"][A-Z0-9_]{32,}['\"]$",
        r"^['\"]\$2[aby]\$\d{2}\$[./A-Za-z0-9]{53}['\"]$",  # bcrypt
        r"^['\"][0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}['\"]$",
    )
)

SECRET_ENV_RE = re.compile(r"process\.env\.[A-Z_]*(?:SECRET|KEY|TOKEN|PASSWORD|PASS)[A-Z_]*", re.IGNORECASE)

_CONTROL_HEADER_RE = re.compile(r"\b(?:if|for|while|switch|catch|with)\s*\(")
_CALLABLE_HEADER_RE = re.compile(r"\)\s*(?::\s*[^{;)]+)?$")
_QUOTES = "\"'`"


def is_valid_variable_name(name: str) -> bool:
    return len(name) >= 2 and bool(_VALID_NAME_RE.match(name)) and name not in RESERVED_NAMES


def is_potential_secret(name: str, value: str) -> bool:
    """Whether a binding looks like it holds a credential.

    True when the name contains a secret-sounding word, when the value has
    the shape of a known key format, or when it reads a secret-sounding
    environment variable.
    """
    if IdentifierIndex(name).hits(SECRET_NAME_KEYWORDS):
        return True
    stripped = value.strip()
    if any(p.match(stripped) for p in SECRET_VALUE_PATTERNS):
        return True
    return bool(SECRET_ENV_RE.search(stripped))


def infer_variable_type(value: str) -> str:
    v = value.strip()
    if re.match(r"^['\"`]", v):
        return "string"
    if re.match(r"^-?\d+(\.\d+)?$", v):
        return "number"
    if v in ("true", "false"):
        return "boolean"
    if v == "null":
        return "null"
    if v == "undefined":
        return "undefined"
    if v.startswith("["):
        return "array"
    if v.startswith("{"):
        return "object"
    if v.startswith(("function", "async function")) or re.match(r"^(?:async\s+)?(?:\([^)]*\)|\w+)\s*=>", v):
        return "function"
    if re.match(r"^/.+/[gimsuy]*$", v):
        return "regexp"
    new_match = re.match(r"^new\s+(\w+)", v)
    if new_match:
        return new_match.group(1)
    if v.startswith("process.env"):
        return "string"
    if v.startswith(("require(", "import(")):
        return "module"
    return "unknown"


@dataclass(frozen=True)
class _Block:
    open: int
    close: int
    is_function: bool


class ScopeResolver:
    """Classifies positions of a text as global, function or block scope.

    Brace blocks are found in one string-aware pass. A block is a function
    body when the text between the previous statement boundary and its
    opening brace looks like a function header.
    """

    def __init__(self, text: str):
        self.text = text
        self.blocks = self._scan(text)

    def _scan(self, text: str) -> list[_Block]:
        blocks: list[_Block] = []
        stack: list[int] = []
        quote: str | None = None
        escaped = False
        for i, char in enumerate(text):
            if escaped:
                escaped = False
                continue
            if char == "\\":
                escaped = True
                continue
            if quote:
                if char == quote:
                    quote = None
                continue
            if char in _QUOTES:
                quote = char
            elif char == "{":
                stack.append(i)
            elif char == "}" and stack:
                start = stack.pop()
                blocks.append(_Block(start, i, self._opens_function(start)))
        for start in stack:
            blocks.append(_Block(start, len(text), self._opens_function(start)))
        return blocks

    def _opens_function(self, open_index: int) -> bool:
        preceding = self.text[max(0, open_index - 200):open_index]
        cut = max(preceding.rfind(";"), preceding.rfind("{"), preceding.rfind("}"))
        header = preceding[cut + 1:].strip()
        if not header:
            return False
        if re.search(r"\bfunction\b", header) or header.endswith("=>"):
            return True
        if _CONTROL_HEADER_RE.search(header):
            return False
        return bool(_CALLABLE_HEADER_RE.search(header))

    def scope_at(self, position: int) -> Scope:
        enclosing = [b for b in self.blocks if b.open < position <= b.close]
        if not enclosing:
            return Scope.GLOBAL
        if any(b.is_function for b in enclosing):
            return Scope.FUNCTION
        return Scope.BLOCK


def _destructured_names(raw: str, object_form: bool) -> list[str]:
    names: list[str] = []
    for part in raw.split(","):
        item = part.strip()
        if not item:
            continue
        item = item.removeprefix("...")
        if object_form and ":" in item:
            item = item.split(":", 1)[1]
        item = item.split("=", 1)[0].strip()
        names.append(item)
    return names


class VariableExtractor:
    """Extracts variables from JavaScript/TypeScript source text."""

    def extract(self, text: str) -> list[VariableElement]:
        index = LineIndex(text)
        scopes = ScopeResolver(text)
        seen: set[tuple[str, int, Scope]] = set()
        variables: list[VariableElement] = []

        def add(element: VariableElement) -> None:
            key = (element.name, element.line, element.scope)
            if key in seen:
                return
            seen.add(key)
            variables.append(element)

        for match in DECLARATION_RE.finditer(text):
            declaration, name, value = match.group(1), match.group(2), match.group(3).strip()
            if not is_valid_variable_name(name):
                continue
            secret = is_potential_secret(name, value)
            add(
                VariableElement(
                    name=name,
                    kind=VariableKind.DECLARATION,
                    declaration=declaration,
                    value=REDACTED if secret else value,
                    value_type=infer_variable_type(value),
                    line=index.line_of(match.start(2)),
                    column=index.column_of(match.start(2)),
                    scope=scopes.scope_at(match.start()),
                    is_const=declaration == "const",
                    is_potential_secret=secret,
                )
            )

        for pattern, kind, object_form in (
            (OBJECT_DESTRUCTURING_RE, VariableKind.OBJECT_DESTRUCTURING, True),
            (ARRAY_DESTRUCTURING_RE, VariableKind.ARRAY_DESTRUCTURING, False),
        ):
            for match in pattern.finditer(text):
                declaration, source = match.group(1), match.group(3).strip()
                for name in _destructured_names(match.group(2), object_form):
                    if not is_valid_variable_name(name):
                        continue
                    add(
                        VariableElement(
                            name=name,
                            kind=kind,
                            declaration=declaration,
                            value=source,
                            value_type="object_property" if object_form else "array_element",
                            line=index.line_of(match.start()),
                            column=index.column_of(match.start()),
                            scope=scopes.scope_at(match.start()),
                            is_const=declaration == "const",
                        )
                    )

        for match in CLASS_PROPERTY_RE.finditer(text):
            modifiers, name = match.group(1).split(), match.group(2)
            if not is_valid_variable_name(name):
                continue
            value = (match.group(4) or "").strip()
            secret = is_potential_secret(name, value)
            add(
                VariableElement(
                    name=name,
                    kind=VariableKind.CLASS_PROPERTY,
                    declaration=" ".join(modifiers),
                    value=REDACTED if secret else value,
                    value_type=(match.group(3) or "").strip() or infer_variable_type(value),
                    line=index.line_of(match.start(2)),
                    column=index.column_of(match.start(2)),
                    scope=Scope.CLASS,
                    is_const="readonly" in modifiers,
                    is_potential_secret=secret,
                )
            )

        variables.sort(key=lambda v: v.line)
        logger.debug(f"Extracted {len(variables)} variables")
        return variables


_default_extractor = VariableExtractor()


def extract_variables(text: str) -> list[VariableElement]:
    """Extract variables with the default extractor."""
    return _default_extractor.extract(text)
