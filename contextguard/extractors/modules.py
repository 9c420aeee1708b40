"""Heuristic import/export extraction for ES modules and CommonJS.

Besides the elements themselves this module derives the module-level
views used by later stages: a dependency graph, module metadata and the
import/export security reports.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from ..constants import MANY_EXPORTS, MANY_EXTERNAL_DEPENDENCIES
from ..core.text import LineIndex
from .models import (
    DependencyGraph,
    ExportElement,
    ExportKind,
    ExportSecurityReport,
    ImportElement,
    ImportKind,
    ImportSecurityReport,
    ModuleMetadata,
)

logger = logging.getLogger(__name__)

_Q = r"['\"]([^'\"]+)['\"]"

IMPORT_PATTERNS: tuple[tuple[ImportKind, re.Pattern[str]], ...] = (
    (ImportKind.DEFAULT, re.compile(rf"import\s+(\w+)\s+from\s+{_Q}")),
    (ImportKind.NAMED, re.compile(rf"import\s+\{{\s*([^}}]+)\s*\}}\s+from\s+{_Q}")),
    (ImportKind.NAMESPACE, re.compile(rf"import\s+\*\s+as\s+(\w+)\s+from\s+{_Q}")),
    (ImportKind.MIXED, re.compile(rf"import\s+(\w+)\s*,\s*\{{\s*([^}}]+)\s*\}}\s+from\s+{_Q}")),
    (ImportKind.SIDE_EFFECT, re.compile(rf"import\s+{_Q}")),
    (ImportKind.DYNAMIC, re.compile(rf"import\s*\(\s*{_Q}\s*\)")),
    (ImportKind.REQUIRE, re.compile(rf"(?:const|let|var)\s+(\w+)\s*=\s*require\s*\(\s*{_Q}\s*\)")),
    (
        ImportKind.REQUIRE_DESTRUCTURED,
        re.compile(rf"(?:const|let|var)\s*\{{\s*([^}}]+)\s*\}}\s*=\s*require\s*\(\s*{_Q}\s*\)"),
    ),
)

EXPORT_PATTERNS: tuple[tuple[ExportKind, re.Pattern[str]], ...] = (
    (ExportKind.FUNCTION, re.compile(r"export\s+(?:async\s+)?function\s+(\w+)")),
    (ExportKind.VARIABLE, re.compile(r"export\s+(?:const|let|var)\s+(\w+)")),
    (ExportKind.CLASS, re.compile(r"export\s+(?:abstract\s+)?class\s+(\w+)")),
    (ExportKind.DEFAULT, re.compile(r"export\s+default\s+(?:async\s+)?(function|class)\s*(\w*)")),
    (ExportKind.DEFAULT, re.compile(r"export\s+default\s+(\w+)\s*;?")),
    (ExportKind.NAMED, re.compile(r"export\s+\{\s*([^}]+)\s*\}(?!\s*from)")),
    (ExportKind.RE_EXPORT, re.compile(rf"export\s+\{{\s*([^}}]+)\s*\}}\s*from\s+{_Q}")),
    (ExportKind.RE_EXPORT, re.compile(rf"export\s+\*\s+from\s+{_Q}")),
    (ExportKind.RE_EXPORT, re.compile(rf"export\s+\*\s+as\s+(\w+)\s+from\s+{_Q}")),
    (ExportKind.COMMONJS, re.compile(r"module\.exports\s*=\s*(\w+|\{[^}]*\})")),
    (ExportKind.COMMONJS, re.compile(r"\bexports\.(\w+)\s*=")),
)

# Module names that mark test scaffolding rather than real dependencies
_TEST_MODULE_MARKERS = ("test", "spec", "mock", "__tests__", ".test.", ".spec.")

RISKY_NODE_MODULES: tuple[str, ...] = (
    "eval", "vm", "child_process", "fs", "path", "os", "crypto", "http", "https",
    "net", "dgram", "dns", "cluster", "worker_threads",
)

RISKY_MODULE_ADVICE: dict[str, str] = {
    "child_process": "child_process allows command execution - validate every argument",
    "vm": "vm runs dynamic code - avoid evaluating untrusted input",
    "eval": "eval-like modules execute arbitrary code - remove if possible",
    "fs": "fs grants file system access - restrict paths to known directories",
    "crypto": "crypto usage should rely on vetted algorithms and key management",
    "net": "net opens raw sockets - validate hosts and ports",
    "http": "http traffic is unencrypted - prefer https",
    "cluster": "cluster spawns processes - review worker lifecycle",
    "worker_threads": "worker_threads run code in parallel - review shared data",
}

SENSITIVE_EXPORT_WORDS: tuple[str, ...] = (
    "secret", "key", "password", "token", "auth", "private", "internal",
    "config", "credential", "admin", "debug",
)

_INVALID_EXPORT_NAMES = frozenset({"default", "undefined", "null"})


def normalize_module(module: str) -> str:
    return module.removeprefix("node:")


def parse_named_imports(raw: str) -> list[str]:
    """Split ``a, b as c, type D`` into local names (``a``, ``c``, ``D``)."""
    names: list[str] = []
    for part in raw.split(","):
        item = part.strip()
        if not item:
            continue
        item = item.removeprefix("type ").strip()
        if " as " in item:
            item = item.split(" as ", 1)[1].strip()
        if ":" in item:
            item = item.split(":", 1)[1].strip()
        names.append(item)
    return names


def is_valid_import(module: str) -> bool:
    return bool(module) and not any(marker in module for marker in _TEST_MODULE_MARKERS)


def is_valid_export(name: str) -> bool:
    return bool(name) and name not in _INVALID_EXPORT_NAMES


class ModuleExtractor:
    """Extracts import and export statements."""

    def extract_imports(self, text: str) -> list[ImportElement]:
        index = LineIndex(text)
        seen: set[tuple[str, str, int]] = set()
        imports: list[ImportElement] = []

        for kind, pattern in IMPORT_PATTERNS:
            for match in pattern.finditer(text):
                module = match.group(match.lastindex or 1)
                if not is_valid_import(module):
                    continue
                names = self._imported_names(kind, match)
                line = index.line_of(match.start())
                key = (module, ",".join(names), line)
                if key in seen:
                    continue
                # Side-effect and default shapes also match inside richer statements
                if kind is ImportKind.SIDE_EFFECT and any(
                    i.module == module and i.line == line for i in imports
                ):
                    continue
                seen.add(key)
                imports.append(
                    ImportElement(
                        module=module,
                        kind=kind,
                        imports=names,
                        line=line,
                        is_default=kind in (ImportKind.DEFAULT, ImportKind.MIXED, ImportKind.REQUIRE),
                        is_dynamic=kind is ImportKind.DYNAMIC,
                    )
                )

        imports.sort(key=lambda i: i.line)
        logger.debug(f"Extracted {len(imports)} imports")
        return imports

    def _imported_names(self, kind: ImportKind, match: re.Match[str]) -> list[str]:
        if kind in (ImportKind.DEFAULT, ImportKind.REQUIRE):
            return [match.group(1)]
        if kind in (ImportKind.NAMED, ImportKind.REQUIRE_DESTRUCTURED):
            return parse_named_imports(match.group(1))
        if kind is ImportKind.NAMESPACE:
            return [f"* as {match.group(1)}"]
        if kind is ImportKind.MIXED:
            return [match.group(1), *parse_named_imports(match.group(2))]
        return []

    def extract_exports(self, text: str) -> list[ExportElement]:
        index = LineIndex(text)
        seen: set[tuple[str, str, int]] = set()
        exports: list[ExportElement] = []

        def add(name: str, kind: ExportKind, export_type: str, line: int, is_default: bool = False) -> None:
            if not is_valid_export(name):
                return
            key = (name, export_type, line)
            if key in seen:
                return
            seen.add(key)
            exports.append(
                ExportElement(name=name, kind=kind, export_type=export_type, line=line, is_default=is_default)
            )

        for kind, pattern in EXPORT_PATTERNS:
            for match in pattern.finditer(text):
                line = index.line_of(match.start())
                if kind in (ExportKind.FUNCTION, ExportKind.VARIABLE, ExportKind.CLASS):
                    add(match.group(1), kind, kind.value, line)
                elif kind is ExportKind.DEFAULT:
                    if match.re.groups == 2:
                        add(match.group(2) or f"anonymous_{match.group(1)}", kind, match.group(1), line, True)
                    elif match.group(1) not in ("function", "class", "async"):
                        add(match.group(1), kind, "identifier", line, True)
                elif kind is ExportKind.NAMED:
                    for name in parse_named_imports(match.group(1)):
                        add(name, kind, "named", line)
                elif kind is ExportKind.RE_EXPORT:
                    if match.re.groups == 1:
                        add(f"* (from {match.group(1)})", kind, "re_export_all", line)
                    elif match.re.pattern.startswith(r"export\s+\*"):
                        add(f"{match.group(1)} (from {match.group(2)})", kind, "re_export", line)
                    else:
                        for name in parse_named_imports(match.group(1)):
                            add(f"{name} (from {match.group(2)})", kind, "re_export", line)
                else:
                    target = match.group(1)
                    export_type = "object" if target.startswith("{") else "commonjs"
                    name = "module.exports" if target.startswith("{") or target in ("function", "class") else target
                    add(name, kind, export_type, line, target.startswith("{") or "module.exports" in match.group(0))

        exports.sort(key=lambda e: e.line)
        logger.debug(f"Extracted {len(exports)} exports")
        return exports


def analyze_import_security(imports: Sequence[ImportElement]) -> ImportSecurityReport:
    """Flag risky Node.js builtins, dynamic imports and dependency sprawl."""
    report = ImportSecurityReport()
    for imp in imports:
        module = normalize_module(imp.module)
        root = module.split("/", 1)[0]
        if root in RISKY_NODE_MODULES and module not in report.risky_imports:
            report.risky_imports.append(module)
            if root in RISKY_MODULE_ADVICE:
                report.recommendations.append(RISKY_MODULE_ADVICE[root])
        if imp.is_dynamic:
            report.dynamic_imports.append(imp.module)

    report.external_dependency_count = len({i.module for i in imports if i.is_external})
    if report.dynamic_imports:
        report.recommendations.append("Dynamic imports detected - ensure module paths are not user-controlled")
    if report.external_dependency_count > MANY_EXTERNAL_DEPENDENCIES:
        report.recommendations.append(
            f"High number of external dependencies ({report.external_dependency_count}) - review supply chain exposure"
        )
    return report


def analyze_export_security(exports: Sequence[ExportElement]) -> ExportSecurityReport:
    """Flag exports whose names suggest sensitive internals."""
    report = ExportSecurityReport(export_count=len(exports))
    for exp in exports:
        lower = exp.name.lower()
        if any(word in lower for word in SENSITIVE_EXPORT_WORDS) and exp.name not in report.sensitive_exports:
            report.sensitive_exports.append(exp.name)
    if report.sensitive_exports:
        report.recommendations.append(
            f"Sensitive names exported: {', '.join(report.sensitive_exports)} - confirm they belong to the public API"
        )
    if len(exports) > MANY_EXPORTS:
        report.recommendations.append(
            f"Large export surface ({len(exports)} exports) - consider narrowing the module API"
        )
    return report


def dependency_graph(imports: Sequence[ImportElement], exports: Sequence[ExportElement]) -> DependencyGraph:
    graph = DependencyGraph()
    for imp in imports:
        bucket = graph.external if imp.is_external else graph.internal
        if imp.module not in bucket:
            bucket.append(imp.module)
        graph.imported_names.setdefault(imp.module, [])
        for name in imp.imports:
            if name not in graph.imported_names[imp.module]:
                graph.imported_names[imp.module].append(name)
    graph.exported_names = [e.name for e in exports]
    return graph


def module_metadata(imports: Sequence[ImportElement], exports: Sequence[ExportElement]) -> ModuleMetadata:
    external = {i.module for i in imports if i.is_external}
    has_dynamic = any(i.is_dynamic for i in imports)
    has_mixed = any(i.kind is ImportKind.MIXED for i in imports)

    uses_esm = any(i.kind not in (ImportKind.REQUIRE, ImportKind.REQUIRE_DESTRUCTURED) for i in imports) or any(
        e.kind is not ExportKind.COMMONJS for e in exports
    )
    uses_commonjs = any(i.kind in (ImportKind.REQUIRE, ImportKind.REQUIRE_DESTRUCTURED) for i in imports) or any(
        e.kind is ExportKind.COMMONJS for e in exports
    )
    if uses_esm and uses_commonjs:
        module_type = "mixed"
    elif uses_esm:
        module_type = "esm"
    elif uses_commonjs:
        module_type = "commonjs"
    else:
        module_type = "unknown"

    score = (
        len(imports) * 0.5
        + len(exports) * 0.3
        + (2 if has_dynamic else 0)
        + (1 if has_mixed else 0)
        + len(external) * 0.2
    )
    return ModuleMetadata(
        import_count=len(imports),
        export_count=len(exports),
        external_dependency_count=len(external),
        has_dynamic_imports=has_dynamic,
        has_mixed_imports=has_mixed,
        module_type=module_type,
        complexity_score=round(score, 2),
    )


_default_extractor = ModuleExtractor()


def extract_imports(text: str) -> list[ImportElement]:
    return _default_extractor.extract_imports(text)


def extract_exports(text: str) -> list[ExportElement]:
    return _default_extractor.extract_exports(text)
