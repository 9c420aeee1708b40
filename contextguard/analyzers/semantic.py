"""Semantic enrichment of extracted elements.

``SemanticAnalyzer.analyze_semantics`` runs the extractors and the pattern
matchers once, wraps every element in its enriched form and computes the
aggregate complexity, relationships and risk factors. The result is the
only input the risk and intelligence stages receive.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from ..constants import (
    HOTSPOT_CLASS_MEMBERS,
    HOTSPOT_FUNCTION_COMPLEXITY,
    MAX_FUNCTION_PARAMETERS,
    SECRET_DEBT_PENALTY,
    TECHNICAL_DEBT_BASELINE,
    TECHNICAL_DEBT_RATE,
)
from ..core.levels import Severity, at_least, round_half_up
from ..core.text import IDENTIFIER_RE, IdentifierIndex, word_pattern
from ..extractors import ElementExtractor, get_element_extractor
from ..extractors.classes import analyze_class_complexity, detect_design_patterns, inheritance_chain
from ..extractors.functions import cognitive_complexity, cyclomatic_complexity
from ..extractors.models import (
    ClassElement,
    ExportElement,
    ExtractedElements,
    FunctionElement,
    ImportElement,
    Scope,
    VariableElement,
    VariableKind,
)
from ..extractors.modules import analyze_export_security, analyze_import_security
from ..extractors.variables import REDACTED
from ..patterns.frameworks import module_matches
from ..patterns.matcher import PatternMatcher, get_pattern_matcher
from ..patterns.models import PatternAnalysis
from ..patterns.secrets import redact_secrets
from .idioms import scan_idioms
from .models import (
    AccessPattern,
    CodeComplexity,
    CodeRelationships,
    CouplingMetrics,
    DataFlow,
    DataFlowEdge,
    DependencyEdge,
    ElementRisk,
    EnrichedClass,
    EnrichedExport,
    EnrichedFunction,
    EnrichedImport,
    EnrichedVariable,
    ExportDocumentation,
    FunctionCall,
    FunctionComplexity,
    Hotspot,
    ImportUsage,
    InheritanceInfo,
    RiskFactor,
    SemanticContext,
    SemanticRole,
    VariableUsage,
)

logger = logging.getLogger(__name__)

# Modules whose import is a security risk on its own
DANGEROUS_MODULES = ("eval", "vm", "child_process", "fs")

ROLE_KEYWORDS: tuple[tuple[SemanticRole, tuple[str, ...]], ...] = (
    (SemanticRole.BUSINESS, ("price", "payment", "auth", "business", "calculate")),
    (SemanticRole.UI, ("render", "component", "element", "ui", "display", "show", "hide")),
    (
        SemanticRole.INFRASTRUCTURE,
        ("database", "server", "api", "request", "response", "connection", "config"),
    ),
    (SemanticRole.UTILITY, ("util", "helper", "format", "parse", "validate", "sanitize")),
)

SIDE_EFFECT_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("console_output", re.compile(r"\bconsole\.(?:log|error|warn|info|debug)\b")),
    ("storage_access", re.compile(r"\b(?:localStorage|sessionStorage|indexedDB)\b")),
    ("dom_manipulation", re.compile(r"\bdocument\.|\bwindow\.|\.(?:inner|outer)HTML\b")),
    ("network_request", re.compile(r"\bfetch\s*\(|\baxios\b|\bXMLHttpRequest\b")),
    ("file_system", re.compile(r"\bfs\.\w+|\b(?:readFile|writeFile|appendFile|unlink)(?:Sync)?\s*\(")),
)

_EXTERNAL_CALL_RE = re.compile(r"\b(?:fetch|axios|https?|request|api)(?:\.\w+)?\s*\(|\bnew\s+XMLHttpRequest\b")
_STATE_MUTATION_RE = re.compile(
    r"\bthis\.|\.(?:push|pop|shift|unshift|splice|sort|reverse)\(|\[[^\]\n]*\]\s*=(?![=>])|\.\w+\s*=(?![=>])"
)

_IMPORT_PURPOSES: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("testing", re.compile(r"test|spec|mock|jest|mocha|chai|vitest|sinon")),
    ("framework", re.compile(r"react|vue|angular|express|next|nuxt|svelte")),
    ("utility", re.compile(r"lodash|ramda|moment|axios|uuid|date-fns|dayjs")),
)
_BUSINESS_MODULE_RE = re.compile(r"business|logic|service|pricing|billing")

_ASSIGN_SUFFIX_RE = re.compile(r"\s*(?:\+\+|--|(?:\*\*|<<|>>>|>>|[-+*/%&|^])?=(?![=>]))")
_INCREMENT_PREFIX_RE = re.compile(r"(?:\+\+|--)\s*$")
_CALL_ARGS_RE = re.compile(r"([A-Za-z_$][\w$]*)\s*\(([^()\n]*)\)")
_ASSIGNMENT_RE = re.compile(r"(?<![\w$.])([A-Za-z_$][\w$]*)\s*=(?![=>])\s*([^;\n]+)")
_RETURN_RE = re.compile(r"\breturn\b([^;\n]*)")
_TRANSFORM_METHODS = (
    "map", "filter", "reduce", "toString", "toUpperCase", "toLowerCase", "trim", "split",
    "join", "replace", "slice", "concat",
)
_JSDOC_TAG_RE = re.compile(r"@(?:param|returns?|throws|example)\b")


@dataclass
class _TextFacts:
    """Calls, assignments and returns found in the text, with their line numbers."""

    lines: list[str]
    calls: list[tuple[str, str, int]] = field(default_factory=list)
    assignments: list[tuple[str, str, int]] = field(default_factory=list)
    returns: list[tuple[str, int]] = field(default_factory=list)

    @classmethod
    def scan(cls, text: str) -> _TextFacts:
        facts = cls(lines=text.split("\n"))
        for number, line in enumerate(facts.lines, start=1):
            facts.calls.extend((m.group(1), m.group(2), number) for m in _CALL_ARGS_RE.finditer(line))
            facts.assignments.extend((m.group(1), m.group(2), number) for m in _ASSIGNMENT_RE.finditer(line))
            facts.returns.extend((m.group(1), number) for m in _RETURN_RE.finditer(line))
        return facts


# =============================================================================
# Functions
# =============================================================================


def determine_semantic_role(function: FunctionElement) -> SemanticRole:
    if function.contains_sensitive_logic:
        return SemanticRole.BUSINESS
    index = IdentifierIndex(function.name)
    for role, keywords in ROLE_KEYWORDS:
        if index.hits(keywords):
            return role
    return SemanticRole.UNKNOWN


def detect_side_effects(body: str) -> list[str]:
    return [tag for tag, pattern in SIDE_EFFECT_PATTERNS if pattern.search(body)]


def enrich_function(function: FunctionElement) -> EnrichedFunction:
    body = function.body
    return EnrichedFunction(
        element=function,
        semantic_role=determine_semantic_role(function),
        calls_external=bool(_EXTERNAL_CALL_RE.search(body)),
        modifies_state=bool(_STATE_MUTATION_RE.search(body)),
        complexity=FunctionComplexity(
            cyclomatic=cyclomatic_complexity(body),
            cognitive=cognitive_complexity(body),
            parameters=len(function.parameters),
        ),
        dependencies=[c for c in function.calls if c != function.name],
        side_effects=detect_side_effects(body),
    )


# =============================================================================
# Variables
# =============================================================================


def analyze_variable_usage(variable: VariableElement, lines: Sequence[str]) -> VariableUsage:
    """Count reads and writes of ``variable`` outside its own declaration."""
    pattern = re.compile(word_pattern(variable.name))
    reads = writes = 0

    for number, line in enumerate(lines, start=1):
        occurrences = list(pattern.finditer(line))
        if number == variable.line:
            occurrences = occurrences[1:]
        for occurrence in occurrences:
            before = line[: occurrence.start()]
            if before.endswith(".") and not before.endswith("..."):
                # property access on another object
                continue
            if _ASSIGN_SUFFIX_RE.match(line, occurrence.end()) or _INCREMENT_PREFIX_RE.search(before):
                writes += 1
            else:
                reads += 1

    if reads and writes:
        access = AccessPattern.READ_WRITE
    elif reads:
        access = AccessPattern.READ_ONLY
    elif writes:
        access = AccessPattern.WRITE_ONLY
    else:
        access = AccessPattern.UNUSED
    return VariableUsage(read_count=reads, write_count=writes, access_pattern=access)


def _value_source(variable: VariableElement) -> str:
    if variable.kind in (VariableKind.OBJECT_DESTRUCTURING, VariableKind.ARRAY_DESTRUCTURING):
        return "destructuring"
    value = variable.value
    if "process.env" in value:
        return "environment"
    if value.startswith("await "):
        return "async_result"
    if variable.value_type in ("string", "number", "boolean", "null", "undefined", "regexp"):
        return "literal"
    if variable.value_type in ("array", "object", "function"):
        return f"{variable.value_type}_literal"
    if re.match(r"^(?:new\s+)?[\w$.]+\s*\(", value):
        return "function_call"
    return "expression"


def analyze_data_flow(variable: VariableElement, facts: _TextFacts) -> DataFlow:
    """Where a variable's value comes from, where it goes and how it is transformed."""
    pattern = re.compile(word_pattern(variable.name))
    destinations: list[str] = []

    if any(line != variable.line and pattern.search(expr) for expr, line in facts.returns):
        destinations.append("return_value")
    if any(pattern.search(args) for _, args, _ in facts.calls):
        destinations.append("function_argument")
    if any(
        target != variable.name and pattern.search(rhs)
        for target, rhs, line in facts.assignments
        if line != variable.line
    ):
        destinations.append("assignment")
    if any(re.search(rf"\bexport\b.*{word_pattern(variable.name)}", line) for line in facts.lines):
        destinations.append("export")

    name = re.escape(variable.name)
    transform_re = re.compile(rf"(?<![\w$]){name}\s*\.\s*({'|'.join(_TRANSFORM_METHODS)})\s*\(")
    transformations: list[str] = []
    for line in facts.lines:
        transformations.extend(m.group(1) for m in transform_re.finditer(line))
        if re.search(rf"JSON\.stringify\s*\(\s*{name}\b", line):
            transformations.append("json_stringify")
        if re.search(rf"JSON\.parse\s*\(\s*{name}\b", line):
            transformations.append("json_parse")

    return DataFlow(
        sources=[_value_source(variable)],
        destinations=destinations,
        transformations=list(dict.fromkeys(transformations)),
    )


def assess_variable_risk(variable: VariableElement, usage: VariableUsage) -> ElementRisk:
    level = Severity.LOW
    reasons: list[str] = []
    if variable.is_potential_secret:
        reasons.append("Contains potential secret")
        level = Severity.HIGH
    if variable.scope is Scope.GLOBAL:
        reasons.append("Global scope variable")
        level = at_least(level, Severity.MEDIUM)
    if usage.access_pattern is AccessPattern.UNUSED:
        reasons.append("Unused variable")
        level = at_least(level, Severity.MEDIUM)
    return ElementRisk(level=level, reasons=reasons)


# =============================================================================
# Imports, exports and classes
# =============================================================================


def is_dangerous_module(module: str) -> bool:
    return any(module_matches(module, candidate) for candidate in DANGEROUS_MODULES)


def determine_import_purpose(element: ImportElement) -> str:
    module = element.module.lower()
    for purpose, pattern in _IMPORT_PURPOSES:
        if pattern.search(module):
            return purpose
    if module.startswith(".") and _BUSINESS_MODULE_RE.search(module):
        return "business"
    return "unknown"


def analyze_import_usage(element: ImportElement, lines: Sequence[str]) -> ImportUsage:
    """Lines other than the import itself that mention an imported binding."""
    bindings = []
    for entry in element.imports:
        identifiers = IDENTIFIER_RE.findall(entry)
        if identifiers:
            bindings.append(identifiers[-1])
    if not bindings:
        return ImportUsage()

    pattern = re.compile("|".join(word_pattern(b) for b in dict.fromkeys(bindings)))
    locations = [
        number for number, line in enumerate(lines, start=1)
        if number != element.line and pattern.search(line)
    ]
    return ImportUsage(frequency=len(locations), locations=locations)


def assess_import_security(element: ImportElement) -> ElementRisk:
    level = Severity.LOW
    reasons: list[str] = []
    if is_dangerous_module(element.module):
        reasons.append("Potentially dangerous Node.js module")
        level = Severity.HIGH
    if element.is_dynamic:
        reasons.append("Dynamic import may affect security analysis")
        level = at_least(level, Severity.MEDIUM)
    return ElementRisk(level=level, reasons=reasons)


def categorize_export(element: ExportElement) -> str:
    name = element.name.split(" (from ", 1)[0]
    index = IdentifierIndex(name)
    if index.hits(("test", "mock", "stub")):
        return "testing"
    if index.hits(("deprecated", "legacy", "old")):
        return "legacy"
    if name.startswith("_") or index.hits(("internal", "private")):
        return "internal"
    return "public"


def analyze_export_documentation(element: ExportElement, lines: Sequence[str]) -> ExportDocumentation:
    """Look for a comment block in the five lines above the export."""
    start = element.line - 2
    block: list[str] = []
    for index in range(start, max(-1, start - 5), -1):
        stripped = lines[index].strip()
        if not stripped and not block:
            continue
        if stripped.startswith(("/**", "*", "//", "/*")) or stripped.endswith("*/"):
            block.append(stripped)
            continue
        break

    if not block:
        return ExportDocumentation()
    text = "\n".join(block)
    quality = "good" if any(line.startswith("/**") for line in block) and _JSDOC_TAG_RE.search(text) else "basic"
    return ExportDocumentation(has_documentation=True, quality=quality)


def enrich_export(element: ExportElement, lines: Sequence[str]) -> EnrichedExport:
    complexity = {"function": 3, "class": 5}.get(element.export_type, 1)
    return EnrichedExport(
        element=element,
        api_category=categorize_export(element),
        complexity=complexity,
        documentation=analyze_export_documentation(element, lines),
    )


def enrich_class(element: ClassElement, by_name: dict[str, ClassElement], import_count: int) -> EnrichedClass:
    methods = len(element.methods)
    properties = len(element.properties)

    if methods <= 5 and properties <= 3:
        responsibility = "single"
    elif methods > 15 or properties > 10:
        responsibility = "multiple"
    else:
        responsibility = "unclear"

    if import_count <= 3:
        coupling = "loose"
    elif import_count <= 8:
        coupling = "medium"
    else:
        coupling = "tight"

    ratio = properties / max(methods, 1)
    cohesion = "high" if ratio > 0.7 else "medium" if ratio > 0.3 else "low"

    return EnrichedClass(
        element=element,
        design_patterns=detect_design_patterns(element),
        responsibility=responsibility,
        coupling=coupling,
        cohesion=cohesion,
        inheritance=InheritanceInfo(
            depth=len(inheritance_chain(element.name, by_name)),
            complexity=analyze_class_complexity(element).score,
        ),
    )


# =============================================================================
# Aggregates
# =============================================================================


def calculate_complexity(elements: ExtractedElements, patterns: PatternAnalysis) -> CodeComplexity:
    functions, classes = elements.functions, elements.classes
    base = elements.metadata.complexity

    pattern_complexity = (
        len(patterns.business_logic) * 2
        + len(patterns.frameworks) * 1.5
        + (3 if patterns.secrets.has_secrets else 0)
    )
    relationship_complexity = (
        len(elements.imports) * 0.5
        + len(elements.exports) * 0.3
        + len(functions) * 1.2
        + len(classes) * 2
    )

    average_length = sum(f.line_span for f in functions) / len(functions) if functions else 0
    maintainability = max(0.0, 100 - min(base / 100, 1) * 50 - min(average_length / 50, 1) * 30)

    debt = max(0.0, base - TECHNICAL_DEBT_BASELINE) * TECHNICAL_DEBT_RATE
    debt += len(patterns.secrets.matches) * SECRET_DEBT_PENALTY
    debt += sum(1 for f in functions if len(f.parameters) > MAX_FUNCTION_PARAMETERS)

    return CodeComplexity(
        cyclomatic=round_half_up(len(functions) * 1.5 + len(classes) * 2),
        cognitive=round_half_up(base + pattern_complexity + relationship_complexity),
        maintainability=round(maintainability, 2),
        technical_debt=round_half_up(debt),
        hotspots=complexity_hotspots(elements),
    )


def complexity_hotspots(elements: ExtractedElements) -> list[Hotspot]:
    hotspots: list[Hotspot] = []
    for function in elements.functions:
        score = len(function.parameters) + function.line_span * 0.1
        if score > HOTSPOT_FUNCTION_COMPLEXITY:
            hotspots.append(
                Hotspot(kind="function", name=function.name, line=function.start_line, complexity=round_half_up(score))
            )
    for cls in elements.classes:
        if cls.member_count > HOTSPOT_CLASS_MEMBERS:
            hotspots.append(Hotspot(kind="class", name=cls.name, line=cls.start_line, complexity=cls.member_count))
    hotspots.sort(key=lambda h: h.complexity, reverse=True)
    return hotspots


def analyze_relationships(elements: ExtractedElements, facts: _TextFacts) -> CodeRelationships:
    """Call edges, variable data flow, dependency edges and file-level coupling."""
    names = {f.name for f in elements.functions}
    variable_names = {v.name for v in elements.variables}

    calls: list[FunctionCall] = []
    for function in elements.functions:
        called = set(function.calls)
        for target in sorted(names - {function.name}):
            if target in called:
                calls.append(FunctionCall(caller=function.name, callee=target, type="direct"))
            elif re.search(word_pattern(target), function.body):
                calls.append(FunctionCall(caller=function.name, callee=target, type="indirect"))

    flow: list[DataFlowEdge] = []
    seen: set[tuple[str, str, str]] = set()
    for variable in elements.variables:
        pattern = re.compile(word_pattern(variable.name))
        edges = [(callee, "argument") for callee, args, _ in facts.calls if callee in names and pattern.search(args)]
        edges += [
            (target, "assignment")
            for target, rhs, _ in facts.assignments
            if target != variable.name and target in variable_names and pattern.search(rhs)
        ]
        for target, via in edges:
            key = (variable.name, target, via)
            if key not in seen:
                seen.add(key)
                flow.append(DataFlowEdge(source=variable.name, target=target, via=via))

    dependencies = [
        DependencyEdge(dependent=call.caller, dependency=call.callee, strength="strong")
        for call in calls
        if call.type == "direct"
    ]
    for imp in elements.imports:
        bindings = [IDENTIFIER_RE.findall(entry)[-1] for entry in imp.imports if IDENTIFIER_RE.search(entry)]
        if not bindings:
            continue
        pattern = re.compile("|".join(word_pattern(b) for b in dict.fromkeys(bindings)))
        for function in elements.functions:
            if pattern.search(function.body):
                dependencies.append(DependencyEdge(dependent=function.name, dependency=imp.module, strength="weak"))

    efferent = len({imp.module for imp in elements.imports})
    afferent = len(elements.exports)
    coupling = CouplingMetrics(
        afferent=afferent,
        efferent=efferent,
        instability=round(efferent / max(afferent + efferent, 1), 4),
    )
    return CodeRelationships(function_calls=calls, data_flow=flow, dependencies=dependencies, coupling=coupling)


def identify_risk_factors(elements: ExtractedElements, patterns: PatternAnalysis) -> list[RiskFactor]:
    """Semantic risk factors, most severe first."""
    factors: list[RiskFactor] = []

    for secret in patterns.secrets.matches:
        factors.append(
            RiskFactor(
                type="security",
                severity=secret.severity,
                description=f"Potential secret detected: {secret.name}",
                line=secret.line,
                column=secret.column,
                recommendation="Move secrets to environment variables or secure storage",
            )
        )

    for function in elements.functions:
        if len(function.parameters) > MAX_FUNCTION_PARAMETERS:
            factors.append(
                RiskFactor(
                    type="maintainability",
                    severity=Severity.MEDIUM,
                    description=f"Function '{function.name}' has too many parameters ({len(function.parameters)})",
                    line=function.start_line,
                    recommendation="Consider using parameter objects or breaking down the function",
                )
            )

    for imp in elements.imports:
        if imp.is_dynamic:
            factors.append(
                RiskFactor(
                    type="performance",
                    severity=Severity.LOW,
                    description=f"Dynamic import may impact bundle size: {imp.module}",
                    line=imp.line,
                    recommendation="Consider static imports for better tree-shaking",
                )
            )

    for match in patterns.business_logic:
        if match.risk_level == Severity.HIGH:
            factors.append(
                RiskFactor(
                    type="reliability",
                    severity=Severity.HIGH,
                    description=f"High-risk business logic detected: {match.rule_id}",
                    line=match.line or 1,
                    recommendation="Add comprehensive testing and error handling",
                )
            )

    factors.sort(key=lambda f: f.severity.rank, reverse=True)
    return factors


# =============================================================================
# Redaction
# =============================================================================


def redact_elements(elements: ExtractedElements, secrets: Sequence[str]) -> ExtractedElements:
    """Copy of ``elements`` with every detected credential masked out of its text fields.

    A variable or class property whose value holds a credential has the whole
    value replaced by ``[REDACTED]``; the variable is also flagged as a
    potential secret. Other fields keep their text with the credential masked.
    """
    if not secrets:
        return elements

    def scrub(value: str) -> str:
        return redact_secrets(value, secrets)

    def holds_secret(value: str | None) -> bool:
        return bool(value) and scrub(value) != value

    variables = [
        v.model_copy(update={"value": REDACTED, "is_potential_secret": True}) if holds_secret(v.value) else v
        for v in elements.variables
    ]
    functions = [
        f.model_copy(
            update={
                "parameters": [scrub(p) for p in f.parameters],
                "documentation": scrub(f.documentation) if f.documentation else f.documentation,
            }
        )
        for f in elements.functions
    ]
    classes = [
        c.model_copy(
            update={
                "methods": [m.model_copy(update={"parameters": [scrub(p) for p in m.parameters]}) for m in c.methods],
                "properties": [
                    p.model_copy(update={"initial_value": REDACTED}) if holds_secret(p.initial_value) else p
                    for p in c.properties
                ],
            }
        )
        for c in elements.classes
    ]
    imports = [i.model_copy(update={"module": scrub(i.module)}) for i in elements.imports]
    exports = [e.model_copy(update={"name": scrub(e.name)}) for e in elements.exports]

    meta = elements.metadata
    metadata = meta.model_copy(
        update={
            "external_modules": [scrub(m) for m in meta.external_modules],
            "internal_modules": [scrub(m) for m in meta.internal_modules],
            "risks": meta.risks.model_copy(
                update={
                    "sensitive_variables": [v.name for v in variables if v.is_potential_secret],
                    "risky_imports": [scrub(m) for m in meta.risks.risky_imports],
                }
            ),
        }
    )
    redacted = sum(1 for old, new in zip(elements.variables, variables) if old is not new)
    if redacted:
        logger.debug(f"Redacted {redacted} variable values holding detected credentials")
    return ExtractedElements(
        functions=functions,
        variables=variables,
        imports=imports,
        exports=exports,
        classes=classes,
        metadata=metadata,
    )


# =============================================================================
# Analyzer
# =============================================================================


class SemanticAnalyzer:
    """Builds the :class:`SemanticContext` for one source text."""

    def __init__(
        self,
        extractor: ElementExtractor | None = None,
        pattern_matcher: PatternMatcher | None = None,
    ):
        self.extractor = extractor or get_element_extractor()
        self.pattern_matcher = pattern_matcher or get_pattern_matcher()

    def analyze_semantics(
        self,
        text: str,
        file_name: str | None = None,
        dependencies: Sequence[str] | None = None,
    ) -> SemanticContext:
        """Extract, match and enrich ``text``.

        Args:
            text: Source text
            file_name: Name or path of the file the text came from
            dependencies: Declared package dependencies

        Returns:
            SemanticContext holding every enriched element and pattern match
        """
        exposed = self.pattern_matcher.catalogs.secrets.exposed_values(text, file_name)
        elements = redact_elements(self.extractor.extract_all(text), exposed)
        patterns = self.pattern_matcher.analyze_patterns(
            text,
            file_name,
            dependencies,
            function_names=[f.name for f in elements.functions],
            imports=[i.module for i in elements.imports],
        )
        facts = _TextFacts.scan(text)
        idioms = scan_idioms(text)
        if exposed:
            idioms = idioms.model_copy(update={"urls": [redact_secrets(url, exposed) for url in idioms.urls]})

        variables = []
        for variable in elements.variables:
            usage = analyze_variable_usage(variable, facts.lines)
            variables.append(
                EnrichedVariable(
                    element=variable,
                    usage=usage,
                    data_flow=analyze_data_flow(variable, facts),
                    risk=assess_variable_risk(variable, usage),
                )
            )

        by_name = {c.name: c for c in elements.classes}
        context = SemanticContext(
            file_name=file_name,
            code_length=len(text),
            functions=[enrich_function(f) for f in elements.functions],
            variables=variables,
            imports=[
                EnrichedImport(
                    element=imp,
                    purpose=determine_import_purpose(imp),
                    usage=analyze_import_usage(imp, facts.lines),
                    security=assess_import_security(imp),
                )
                for imp in elements.imports
            ],
            exports=[enrich_export(e, facts.lines) for e in elements.exports],
            classes=[enrich_class(c, by_name, len(elements.imports)) for c in elements.classes],
            secrets=patterns.secrets,
            business_logic=patterns.business_logic,
            frameworks=patterns.frameworks,
            pattern_summary=patterns.summary,
            complexity=calculate_complexity(elements, patterns),
            relationships=analyze_relationships(elements, facts),
            risk_factors=identify_risk_factors(elements, patterns),
            import_security=analyze_import_security(elements.imports),
            export_security=analyze_export_security(elements.exports),
            extraction=elements.metadata,
            idioms=idioms,
        )

        logger.debug(
            f"Semantic context for {file_name or '<text>'}: cognitive complexity "
            f"{context.complexity.cognitive}, {len(context.risk_factors)} risk factors"
        )
        return context


_semantic_analyzer: SemanticAnalyzer | None = None


def get_semantic_analyzer() -> SemanticAnalyzer:
    global _semantic_analyzer
    if _semantic_analyzer is None:
        _semantic_analyzer = SemanticAnalyzer()
    return _semantic_analyzer


def analyze_semantics(
    text: str,
    file_name: str | None = None,
    dependencies: Sequence[str] | None = None,
) -> SemanticContext:
    """Build the semantic context of ``text`` with the default analyzer."""
    return get_semantic_analyzer().analyze_semantics(text, file_name, dependencies)
