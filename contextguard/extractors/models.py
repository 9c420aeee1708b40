"""Pydantic models for elements extracted from JavaScript/TypeScript text.

Extracted elements are frozen: once an extraction pass has produced them,
later stages wrap them instead of changing them.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FunctionKind(str, Enum):
    """Syntactic shape a function was recognized from."""

    DECLARATION = "declaration"
    ARROW = "arrow"
    METHOD = "method"
    CLASS_METHOD = "class_method"
    OBJECT_METHOD = "object_method"
    SHORTHAND = "shorthand"


class VariableKind(str, Enum):
    DECLARATION = "declaration"
    OBJECT_DESTRUCTURING = "object_destructuring"
    ARRAY_DESTRUCTURING = "array_destructuring"
    CLASS_PROPERTY = "class_property"


class Scope(str, Enum):
    GLOBAL = "global"
    FUNCTION = "function"
    BLOCK = "block"
    CLASS = "class"


class ImportKind(str, Enum):
    DEFAULT = "default"
    NAMED = "named"
    NAMESPACE = "namespace"
    MIXED = "mixed"
    SIDE_EFFECT = "side_effect"
    DYNAMIC = "dynamic"
    REQUIRE = "require"
    REQUIRE_DESTRUCTURED = "require_destructured"


class ExportKind(str, Enum):
    FUNCTION = "function"
    VARIABLE = "variable"
    CLASS = "class"
    DEFAULT = "default"
    NAMED = "named"
    RE_EXPORT = "re_export"
    COMMONJS = "commonjs"


class ClassKind(str, Enum):
    REGULAR = "regular"
    ABSTRACT = "abstract"
    EXPRESSION = "expression"


class _Element(BaseModel):
    model_config = ConfigDict(frozen=True)


class FunctionElement(_Element):
    """A function recognized in the source text.

    Attributes:
        name: Function name.
        kind: Syntactic shape that matched.
        parameters: Parameter texts in declaration order (defaults included).
        start_line: 1-based line of the signature.
        end_line: 1-based line where the recovered body ends.
        is_async: Whether the signature is marked ``async``.
        is_exported: Whether the signature is marked ``export``.
        contains_sensitive_logic: Name or body mentions a sensitive keyword.
        return_type: Inferred return type, ``unknown`` when nothing is known.
        calls: Names of functions called from the body.
        dependencies: Modules and globals referenced by the body.
        documentation: Leading JSDoc or line comments, if any.
        body: Recovered body text; kept out of serialized output.
    """

    name: str
    kind: FunctionKind
    parameters: list[str] = Field(default_factory=list)
    start_line: int
    end_line: int
    is_async: bool = False
    is_exported: bool = False
    contains_sensitive_logic: bool = False
    return_type: str = "unknown"
    calls: list[str] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)
    documentation: str | None = None
    body: str = Field(default="", exclude=True, repr=False)

    @property
    def line_span(self) -> int:
        return self.end_line - self.start_line


class VariableElement(_Element):
    """A variable, destructured binding or class property.

    ``value`` is ``[REDACTED]`` whenever ``is_potential_secret`` is set.
    """

    name: str
    kind: VariableKind
    declaration: str
    value: str
    value_type: str = "unknown"
    line: int
    column: int = 1
    scope: Scope
    is_const: bool = False
    is_potential_secret: bool = False

    @property
    def start_line(self) -> int:
        return self.line


class ImportElement(_Element):
    module: str
    kind: ImportKind
    imports: list[str] = Field(default_factory=list)
    line: int
    is_default: bool = False
    is_dynamic: bool = False

    @property
    def start_line(self) -> int:
        return self.line

    @property
    def is_external(self) -> bool:
        return not self.module.startswith((".", "/"))


class ExportElement(_Element):
    name: str
    kind: ExportKind
    export_type: str
    line: int
    is_default: bool = False

    @property
    def start_line(self) -> int:
        return self.line


class ClassMethod(_Element):
    name: str
    visibility: str = "public"
    is_static: bool = False
    is_async: bool = False
    is_abstract: bool = False
    accessor: str | None = None  # "get" / "set" for accessors
    parameters: list[str] = Field(default_factory=list)
    return_type: str | None = None
    line: int


class ClassProperty(_Element):
    name: str
    visibility: str = "public"
    is_static: bool = False
    is_readonly: bool = False
    type_annotation: str | None = None
    initial_value: str | None = None
    line: int


class ClassElement(_Element):
    """A class declaration or class expression."""

    name: str
    kind: ClassKind
    extends: str | None = None
    implements: list[str] = Field(default_factory=list)
    start_line: int
    end_line: int
    is_exported: bool = False
    is_abstract: bool = False
    methods: list[ClassMethod] = Field(default_factory=list)
    properties: list[ClassProperty] = Field(default_factory=list)
    body: str = Field(default="", exclude=True, repr=False)

    @property
    def member_count(self) -> int:
        return len(self.methods) + len(self.properties)


class ApiSurface(BaseModel):
    public: list[str] = Field(default_factory=list)
    exported: list[str] = Field(default_factory=list)


class ExtractionRisks(BaseModel):
    sensitive_variables: list[str] = Field(default_factory=list)
    sensitive_functions: list[str] = Field(default_factory=list)
    risky_imports: list[str] = Field(default_factory=list)


class ExtractionMetadata(BaseModel):
    """Counts and roll-ups computed over one extraction pass."""

    total_elements: int = 0
    complexity: float = 0.0
    external_modules: list[str] = Field(default_factory=list)
    internal_modules: list[str] = Field(default_factory=list)
    api_surface: ApiSurface = Field(default_factory=ApiSurface)
    risks: ExtractionRisks = Field(default_factory=ExtractionRisks)


class ExtractedElements(BaseModel):
    """All elements of one source text, each list sorted by line."""

    functions: list[FunctionElement] = Field(default_factory=list)
    variables: list[VariableElement] = Field(default_factory=list)
    imports: list[ImportElement] = Field(default_factory=list)
    exports: list[ExportElement] = Field(default_factory=list)
    classes: list[ClassElement] = Field(default_factory=list)
    metadata: ExtractionMetadata = Field(default_factory=ExtractionMetadata)


class QuickExtraction(BaseModel):
    function_count: int
    class_count: int
    import_count: int
    line_count: int
    complexity: str
    quick_risks: list[str] = Field(default_factory=list)


class ImportSecurityReport(BaseModel):
    risky_imports: list[str] = Field(default_factory=list)
    dynamic_imports: list[str] = Field(default_factory=list)
    external_dependency_count: int = 0
    recommendations: list[str] = Field(default_factory=list)


class ExportSecurityReport(BaseModel):
    sensitive_exports: list[str] = Field(default_factory=list)
    export_count: int = 0
    recommendations: list[str] = Field(default_factory=list)


class DependencyGraph(BaseModel):
    external: list[str] = Field(default_factory=list)
    internal: list[str] = Field(default_factory=list)
    imported_names: dict[str, list[str]] = Field(default_factory=dict)
    exported_names: list[str] = Field(default_factory=list)


class ModuleMetadata(BaseModel):
    import_count: int = 0
    export_count: int = 0
    external_dependency_count: int = 0
    has_dynamic_imports: bool = False
    has_mixed_imports: bool = False
    module_type: str = "unknown"  # esm / commonjs / mixed / unknown
    complexity_score: float = 0.0


class InheritanceReport(BaseModel):
    roots: list[str] = Field(default_factory=list)
    leaves: list[str] = Field(default_factory=list)
    external_bases: list[str] = Field(default_factory=list)
    chains: list[list[str]] = Field(default_factory=list)
    max_depth: int = 0


class ClassComplexity(BaseModel):
    name: str
    score: float
    cohesion: float


class ExtractionSummary(BaseModel):
    summary: str
    quality_score: int
    issues: list[str] = Field(default_factory=list)
