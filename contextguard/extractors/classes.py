"""Heuristic class extraction.

Class headers are matched per syntactic shape (declaration, abstract
declaration, class expression) and their bodies recovered by brace
balancing. Members are read from the class body with nested blocks blanked
out, so statements inside method bodies never look like members.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from ..core.text import LineIndex, find_block_end
from .models import (
    ClassComplexity,
    ClassElement,
    ClassKind,
    ClassMethod,
    ClassProperty,
    InheritanceReport,
)

logger = logging.getLogger(__name__)

CLASS_DECLARATION_RE = re.compile(
    r"(?:(export)\s+)?(?:default\s+)?(?:(abstract)\s+)?class\s+(\w+)"
    r"(?:\s*<[^>{]*>)?(?:\s+extends\s+([\w.]+)(?:<[^>{]*>)?)?(?:\s+implements\s+([\w\s,.<>]+?))?\s*\{"
)
CLASS_EXPRESSION_RE = re.compile(
    r"(?:(export)\s+)?(?:const|let|var)\s+(\w+)\s*=\s*class(?:\s+\w+)?(?:\s+extends\s+([\w.]+))?\s*\{"
)

METHOD_RE = re.compile(
    r"^[ \t]*(?:(public|private|protected)\s+)?(?:(static)\s+)?(?:(abstract)\s+)?(?:(async)\s+)?"
    r"(?:(get|set)\s+)?(\w+)\s*\(([^)]*)\)(?:\s*:\s*([^{;\n]+?))?\s*[{;]",
    re.MULTILINE,
)
ARROW_METHOD_RE = re.compile(
    r"^[ \t]*(?:(public|private|protected)\s+)?(?:(static)\s+)?(\w+)\s*=\s*(?:(async)\s+)?\(([^)]*)\)"
    r"(?:\s*:\s*[^=\n]+?)?\s*=>",
    re.MULTILINE,
)
PROPERTY_RE = re.compile(
    r"^[ \t]*(?:(public|private|protected)\s+)?(?:(static)\s+)?(?:(readonly)\s+)?(\w+)[?!]?"
    r"(?:\s*:\s*([^=\n;]+?))?(?:\s*=\s*([^;\n]+?))?\s*;?[ \t]*$",
    re.MULTILINE,
)
THIS_PROPERTY_RE = re.compile(r"this\.(\w+)\s*=(?!=)")

_VALID_CLASS_NAME_RE = re.compile(r"^[A-Z][a-zA-Z0-9_$]*$")

INVALID_METHOD_NAMES = frozenset({
    "constructor", "prototype", "class", "extends", "super", "static", "public",
    "private", "protected", "abstract", "get", "set", "async", "await",
    "if", "for", "while", "switch", "catch", "return", "function",
})

INVALID_PROPERTY_NAMES = frozenset({
    "constructor", "prototype", "toString", "valueOf", "hasOwnProperty",
    "__proto__", "return", "break", "continue", "static", "async", "await",
})

OBSERVER_METHODS = frozenset({
    "subscribe", "unsubscribe", "notify", "addobserver", "removeobserver",
    "addlistener", "removelistener",
})


def is_valid_class_name(name: str) -> bool:
    return len(name) >= 2 and bool(_VALID_CLASS_NAME_RE.match(name))


def blank_nested_blocks(inner: str) -> str:
    """Replace the contents of nested brace blocks with spaces, keeping newlines."""
    chars = list(inner)
    depth = 0
    quote: str | None = None
    escaped = False
    for i, char in enumerate(inner):
        inside = depth > 0
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif quote:
            if char == quote:
                quote = None
        elif char in "\"'`":
            quote = char
        elif char == "{":
            depth += 1
            inside = depth > 1
        elif char == "}":
            depth = max(0, depth - 1)
            inside = depth > 0
        if inside and char != "\n":
            chars[i] = " "
    return "".join(chars)


def _parameters(raw: str) -> list[str]:
    return [p.strip() for p in raw.split(",") if p.strip()]


class ClassExtractor:
    """Extracts classes, their methods and their properties."""

    def extract(self, text: str) -> list[ClassElement]:
        index = LineIndex(text)
        seen: set[tuple[str, int]] = set()
        classes: list[ClassElement] = []

        for match in CLASS_DECLARATION_RE.finditer(text):
            kind = ClassKind.ABSTRACT if match.group(2) else ClassKind.REGULAR
            implements = [i.strip() for i in (match.group(5) or "").split(",") if i.strip()]
            self._add(
                classes, seen, text, index, match,
                name=match.group(3), kind=kind, extends=match.group(4),
                implements=implements, exported=bool(match.group(1)),
            )

        for match in CLASS_EXPRESSION_RE.finditer(text):
            self._add(
                classes, seen, text, index, match,
                name=match.group(2), kind=ClassKind.EXPRESSION, extends=match.group(3),
                implements=[], exported=bool(match.group(1)),
            )

        classes.sort(key=lambda c: c.start_line)
        logger.debug(f"Extracted {len(classes)} classes")
        return classes

    def _add(
        self,
        classes: list[ClassElement],
        seen: set[tuple[str, int]],
        text: str,
        index: LineIndex,
        match: re.Match[str],
        *,
        name: str,
        kind: ClassKind,
        extends: str | None,
        implements: list[str],
        exported: bool,
    ) -> None:
        if not is_valid_class_name(name):
            return
        start_line = index.line_of(match.start())
        if (name, start_line) in seen:
            return

        open_index = match.end() - 1
        close_index = find_block_end(text, open_index)
        if close_index is None:
            close_index = len(text) - 1
        body = text[open_index:close_index + 1]
        seen.add((name, start_line))

        classes.append(
            ClassElement(
                name=name,
                kind=kind,
                extends=extends,
                implements=implements,
                start_line=start_line,
                end_line=index.line_of(close_index),
                is_exported=exported,
                is_abstract=kind is ClassKind.ABSTRACT,
                methods=self._methods(body, open_index, index),
                properties=self._properties(body, open_index, index),
                body=body,
            )
        )

    def _methods(self, body: str, offset: int, index: LineIndex) -> list[ClassMethod]:
        shallow = blank_nested_blocks(body[1:-1])
        base = offset + 1
        methods: dict[str, ClassMethod] = {}

        for m in METHOD_RE.finditer(shallow):
            name = m.group(6)
            if name in INVALID_METHOD_NAMES:
                continue
            accessor = m.group(5)
            key = f"{accessor or ''}:{name}"
            if key in methods:
                continue
            methods[key] = ClassMethod(
                name=name,
                visibility=m.group(1) or "public",
                is_static=bool(m.group(2)),
                is_abstract=bool(m.group(3)),
                is_async=bool(m.group(4)),
                accessor=accessor,
                parameters=_parameters(m.group(7)),
                return_type=(m.group(8) or "").strip() or None,
                line=index.line_of(base + m.start(6)),
            )

        for m in ARROW_METHOD_RE.finditer(shallow):
            name = m.group(3)
            key = f":{name}"
            if name in INVALID_METHOD_NAMES or key in methods:
                continue
            methods[key] = ClassMethod(
                name=name,
                visibility=m.group(1) or "public",
                is_static=bool(m.group(2)),
                is_async=bool(m.group(4)),
                parameters=_parameters(m.group(5)),
                line=index.line_of(base + m.start(3)),
            )

        return sorted(methods.values(), key=lambda method: method.line)

    def _properties(self, body: str, offset: int, index: LineIndex) -> list[ClassProperty]:
        shallow = blank_nested_blocks(body[1:-1])
        base = offset + 1
        properties: dict[str, ClassProperty] = {}

        for m in PROPERTY_RE.finditer(shallow):
            name = m.group(4)
            value = (m.group(6) or "").strip() or None
            if name in INVALID_PROPERTY_NAMES or name in properties:
                continue
            if value and "=>" in value:
                continue
            # A bare word on its own line is not a declaration
            declared = (m.group(1), m.group(2), m.group(3), m.group(5), value)
            if not any(declared) and not m.group(0).rstrip().endswith(";"):
                continue
            properties[name] = ClassProperty(
                name=name,
                visibility=m.group(1) or "public",
                is_static=bool(m.group(2)),
                is_readonly=bool(m.group(3)),
                type_annotation=(m.group(5) or "").strip() or None,
                initial_value=value,
                line=index.line_of(base + m.start(4)),
            )

        for m in THIS_PROPERTY_RE.finditer(body):
            name = m.group(1)
            if name in INVALID_PROPERTY_NAMES or name in properties:
                continue
            properties[name] = ClassProperty(name=name, line=index.line_of(offset + m.start(1)))

        return sorted(properties.values(), key=lambda prop: prop.line)


def analyze_class_complexity(cls: ClassElement) -> ClassComplexity:
    method_count = len(cls.methods)
    property_count = len(cls.properties)
    static_count = sum(1 for m in cls.methods if m.is_static) + sum(1 for p in cls.properties if p.is_static)
    async_count = sum(1 for m in cls.methods if m.is_async)
    score = method_count * 1.5 + property_count + static_count * 0.5 + async_count * 0.5
    if cls.is_abstract:
        score += 1
    cohesion = min(property_count / method_count, 1.0) if method_count else 0.0
    return ClassComplexity(name=cls.name, score=score, cohesion=round(cohesion, 2))


def analyze_inheritance(classes: Sequence[ClassElement]) -> InheritanceReport:
    """Build ``extends`` chains between the classes of one file."""
    by_name = {c.name: c for c in classes}
    children = {c.extends for c in classes if c.extends}
    report = InheritanceReport()

    for cls in classes:
        if cls.extends is None or cls.extends not in by_name:
            report.roots.append(cls.name)
        if cls.extends and cls.extends not in by_name and cls.extends not in report.external_bases:
            report.external_bases.append(cls.extends)
        if cls.name not in children:
            report.leaves.append(cls.name)
            chain = inheritance_chain(cls.name, by_name)
            if len(chain) > 1:
                report.chains.append(chain)
            report.max_depth = max(report.max_depth, len(chain))
    return report


def inheritance_chain(name: str, by_name: dict[str, ClassElement]) -> list[str]:
    """Class names from ``name`` up through its base classes (bases outside the file included)."""
    chain = [name]
    current = by_name.get(name)
    while current is not None and current.extends and current.extends not in chain:
        chain.append(current.extends)
        current = by_name.get(current.extends)
    return chain


def detect_design_patterns(cls: ClassElement) -> list[str]:
    """Design-pattern hints from class and method names."""
    lower_name = cls.name.lower()
    method_names = [m.name for m in cls.methods]
    lowered = [n.lower() for n in method_names]
    patterns: list[str] = []

    private_constructor = bool(re.search(r"private\s+constructor\s*\(", cls.body))
    has_static_instance = any(p.is_static and "instance" in p.name.lower() for p in cls.properties)
    if "singleton" in lower_name or "getinstance" in lowered or private_constructor or has_static_instance:
        patterns.append("singleton")

    if "factory" in lower_name or any(n.startswith(("create", "make")) for n in lowered):
        patterns.append("factory")

    if "observer" in lower_name or OBSERVER_METHODS.intersection(lowered):
        patterns.append("observer")

    fluent = [
        m for m in cls.methods
        if m.accessor is None and re.match(r"^(?:set|with)[A-Z]", m.name)
    ]
    if "builder" in lower_name or "build" in lowered or len(fluent) >= 2:
        patterns.append("builder")

    return patterns


_default_extractor = ClassExtractor()


def extract_classes(text: str) -> list[ClassElement]:
    """Extract classes with the default extractor."""
    return _default_extractor.extract(text)
