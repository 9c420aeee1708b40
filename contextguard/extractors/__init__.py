"""Element extraction for JavaScript/TypeScript source text.

The extractors recognize functions, variables, imports, exports and classes
with one regular expression family per syntactic shape. They never build
an AST and never raise for malformed input: text that does not fit a shape
simply yields fewer elements.

Quick start::

    from contextguard.extractors import extract_all

    elements = extract_all("export function calculatePrice(cost) { return cost * 2; }")
    for fn in elements.functions:
        print(fn.name, fn.start_line, fn.contains_sensitive_logic)
"""

from __future__ import annotations

import logging
import re

from ..constants import QUICK_HIGH_COMPLEXITY_LIMITS, QUICK_MEDIUM_COMPLEXITY_LIMITS
from .classes import ClassExtractor, analyze_class_complexity, analyze_inheritance, detect_design_patterns
from .functions import FunctionExtractor, cognitive_complexity, cyclomatic_complexity
from .models import (
    ApiSurface,
    ClassElement,
    ExportElement,
    ExtractedElements,
    ExtractionMetadata,
    ExtractionRisks,
    ExtractionSummary,
    FunctionElement,
    ImportElement,
    QuickExtraction,
    Scope,
    VariableElement,
)
from .modules import (
    ModuleExtractor,
    analyze_export_security,
    analyze_import_security,
    dependency_graph,
    module_metadata,
    normalize_module,
)
from .variables import VariableExtractor

logger = logging.getLogger(__name__)

# Modules counted as risky in the extraction roll-up
METADATA_RISKY_MODULES = ("fs", "child_process", "vm", "eval", "crypto", "os", "path")

_QUICK_FUNCTION_RE = re.compile(r"function\s+\w+|\w+\s*=\s*\([^)]*\)\s*=>")
_QUICK_CLASS_RE = re.compile(r"\bclass\s+\w+")
_QUICK_IMPORT_RE = re.compile(r"\bimport\s+[\w{*'\"]|\brequire\s*\(")

QUICK_RISK_SIGNALS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"password|secret|token|api_key", re.IGNORECASE), "Potential secrets detected"),
    (re.compile(r"\beval\s*\(|\bFunction\s*\("), "Dynamic code execution detected"),
    (
        re.compile(r"require\s*\(\s*['\"](?:fs|child_process|vm)['\"]"),
        "Potentially risky Node.js modules detected",
    ),
)


class ElementExtractor:
    """Runs the four extractor families over one text and merges the results."""

    def __init__(
        self,
        functions: FunctionExtractor | None = None,
        variables: VariableExtractor | None = None,
        modules: ModuleExtractor | None = None,
        classes: ClassExtractor | None = None,
    ):
        self.functions = functions or FunctionExtractor()
        self.variables = variables or VariableExtractor()
        self.modules = modules or ModuleExtractor()
        self.classes = classes or ClassExtractor()

    def extract_all(self, text: str) -> ExtractedElements:
        functions = self.functions.extract(text)
        variables = self.variables.extract(text)
        imports = self.modules.extract_imports(text)
        exports = self.modules.extract_exports(text)
        classes = self.classes.extract(text)
        metadata = build_metadata(functions, variables, imports, exports, classes)
        logger.debug(
            f"Extraction complete: {len(functions)} functions, {len(variables)} variables, "
            f"{len(imports)} imports, {len(exports)} exports, {len(classes)} classes"
        )
        return ExtractedElements(
            functions=functions,
            variables=variables,
            imports=imports,
            exports=exports,
            classes=classes,
            metadata=metadata,
        )


def build_metadata(
    functions: list[FunctionElement],
    variables: list[VariableElement],
    imports: list[ImportElement],
    exports: list[ExportElement],
    classes: list[ClassElement],
) -> ExtractionMetadata:
    complexity = (
        len(functions) * 2
        + sum(c.member_count for c in classes)
        + len(variables) * 0.5
        + len(imports) * 0.3
    )

    external: list[str] = []
    internal: list[str] = []
    for imp in imports:
        bucket = external if imp.is_external else internal
        if imp.module not in bucket:
            bucket.append(imp.module)

    exported_names = [e.name for e in exports]
    public = [f.name for f in functions if f.is_exported or f.name in exported_names]
    public += [c.name for c in classes if c.is_exported or c.name in exported_names]

    risky = []
    for module in external:
        root = normalize_module(module).split("/", 1)[0]
        if root in METADATA_RISKY_MODULES and module not in risky:
            risky.append(module)

    return ExtractionMetadata(
        total_elements=len(functions) + len(variables) + len(imports) + len(exports) + len(classes),
        complexity=round(complexity, 2),
        external_modules=external,
        internal_modules=internal,
        api_surface=ApiSurface(public=public, exported=exported_names),
        risks=ExtractionRisks(
            sensitive_variables=[v.name for v in variables if v.is_potential_secret],
            sensitive_functions=[f.name for f in functions if f.contains_sensitive_logic],
            risky_imports=risky,
        ),
    )


def quick_extract(text: str) -> QuickExtraction:
    """Counts, a coarse complexity bucket and quick risk notes without full extraction."""
    line_count = text.count("\n") + 1
    function_count = len(_QUICK_FUNCTION_RE.findall(text))
    class_count = len(_QUICK_CLASS_RE.findall(text))
    import_count = len(_QUICK_IMPORT_RE.findall(text))

    counts = (line_count, function_count, class_count)
    if any(value > limit for value, limit in zip(counts, QUICK_HIGH_COMPLEXITY_LIMITS)):
        complexity = "high"
    elif any(value > limit for value, limit in zip(counts, QUICK_MEDIUM_COMPLEXITY_LIMITS)):
        complexity = "medium"
    else:
        complexity = "low"

    return QuickExtraction(
        function_count=function_count,
        class_count=class_count,
        import_count=import_count,
        line_count=line_count,
        complexity=complexity,
        quick_risks=[message for pattern, message in QUICK_RISK_SIGNALS if pattern.search(text)],
    )


def summarize_extraction(elements: ExtractedElements) -> ExtractionSummary:
    """One-paragraph summary and a 0-100 quality score for an extraction."""
    meta = elements.metadata
    parts = [
        f"{len(elements.functions)} functions",
        f"{len(elements.classes)} classes",
        f"{len(elements.variables)} variables",
        f"{len(elements.imports)} imports",
        f"{len(elements.exports)} exports",
    ]
    summary = f"Extracted {', '.join(parts)}."
    if meta.external_modules:
        summary += f" Depends on {len(meta.external_modules)} external modules."

    score = 100
    issues: list[str] = []

    secrets = meta.risks.sensitive_variables
    if secrets:
        score -= min(len(secrets) * 15, 30)
        issues.append(f"{len(secrets)} variables may hold secrets")

    if meta.risks.risky_imports:
        score -= min(len(meta.risks.risky_imports) * 10, 20)
        issues.append(f"Risky modules imported: {', '.join(meta.risks.risky_imports)}")

    overloaded = [f.name for f in elements.functions if len(f.parameters) > 5]
    if overloaded:
        score -= min(len(overloaded) * 5, 20)
        issues.append(f"Functions with too many parameters: {', '.join(overloaded)}")

    globals_ = [v for v in elements.variables if v.scope is Scope.GLOBAL]
    if len(globals_) > 10:
        score -= 10
        issues.append(f"{len(globals_)} global variables")

    if meta.complexity > 100:
        score -= 15
        issues.append(f"High structural complexity ({meta.complexity})")

    return ExtractionSummary(summary=summary, quality_score=max(score, 0), issues=issues)


_default_extractor: ElementExtractor | None = None


def get_element_extractor() -> ElementExtractor:
    """Get or create the shared default extractor."""
    global _default_extractor
    if _default_extractor is None:
        _default_extractor = ElementExtractor()
    return _default_extractor


def extract_all(text: str) -> ExtractedElements:
    """Extract every element kind from ``text``."""
    return get_element_extractor().extract_all(text)


__all__ = [
    "ClassExtractor",
    "ElementExtractor",
    "ExtractedElements",
    "ExtractionMetadata",
    "FunctionExtractor",
    "ModuleExtractor",
    "QuickExtraction",
    "VariableExtractor",
    "analyze_class_complexity",
    "analyze_export_security",
    "analyze_import_security",
    "analyze_inheritance",
    "build_metadata",
    "cognitive_complexity",
    "cyclomatic_complexity",
    "dependency_graph",
    "detect_design_patterns",
    "extract_all",
    "get_element_extractor",
    "module_metadata",
    "quick_extract",
    "summarize_extraction",
]
