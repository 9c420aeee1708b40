"""Tests for function extraction."""

import pytest

from contextguard.extractors.functions import (
    FunctionExtractor,
    cognitive_complexity,
    contains_sensitive_logic,
    cyclomatic_complexity,
    extract_functions,
    infer_return_type,
)
from contextguard.extractors.models import FunctionKind

PRICING_SOURCE = """// Computes the price
export function calculatePrice(cost, margin) {
  if (cost > 0 && margin) {
    return cost * (1 + margin);
  }
  return 0;
}

const formatLabel = (value) => `${value}`;
"""


class TestFunctionExtractor:
    """Test FunctionExtractor on the recognized syntactic shapes."""

    def test_declaration(self) -> None:
        """Test a named function declaration with its metadata."""
        functions = extract_functions(PRICING_SOURCE)
        price = next(f for f in functions if f.name == "calculatePrice")

        assert price.kind is FunctionKind.DECLARATION
        assert price.parameters == ["cost", "margin"]
        assert price.start_line == 2
        assert price.end_line == 7
        assert price.is_exported is True
        assert price.is_async is False
        assert price.contains_sensitive_logic is True
        assert price.return_type == "number"
        assert price.documentation == "// Computes the price"

    def test_arrow_function(self) -> None:
        """Test an expression-bodied arrow function."""
        functions = extract_functions(PRICING_SOURCE)
        label = next(f for f in functions if f.name == "formatLabel")

        assert label.kind is FunctionKind.ARROW
        assert label.parameters == ["value"]
        assert label.start_line == 9
        assert label.body == "`${value}`"

    def test_overlapping_shapes_are_deduplicated(self) -> None:
        """Test that one function matched by several shapes is reported once."""
        functions = extract_functions(PRICING_SOURCE)

        assert [f.name for f in functions] == ["calculatePrice", "formatLabel"]

    def test_sorted_by_start_line(self) -> None:
        """Test that functions come back in source order."""
        source = """
const later = () => 1;
function first() {
  return 1;
}
"""
        functions = extract_functions(source)

        lines = [f.start_line for f in functions]
        assert lines == sorted(lines)

    def test_async_function(self) -> None:
        """Test async detection and call extraction."""
        source = "async function loadOrder(id) { return await fetch(id); }"
        function = extract_functions(source)[0]

        assert function.is_async is True
        assert function.calls == ["fetch"]

    def test_control_keywords_are_not_functions(self) -> None:
        """Test that if/for/while headers are skipped."""
        source = "if (ready) {\n  run();\n}\nwhile (busy) {\n  wait();\n}"

        assert extract_functions(source) == []

    def test_body_excluded_from_dump(self) -> None:
        """Test that function bodies are not serialized."""
        function = extract_functions(PRICING_SOURCE)[0]

        assert function.body
        assert "body" not in function.model_dump()

    def test_dependencies_detected(self) -> None:
        """Test module and global dependencies inside a body."""
        source = """function readConfig() {
  const fs = require('fs');
  return process.env.HOME;
}"""
        function = extract_functions(source)[0]

        assert function.dependencies == ["fs", "process.env"]

    def test_custom_patterns(self) -> None:
        """Test an extractor restricted to declarations only."""
        extractor = FunctionExtractor([p for p in FunctionExtractor().patterns if p[0] is FunctionKind.DECLARATION])
        source = "function alpha() {}\nconst beta = () => 2;"

        assert [f.name for f in extractor.extract(source)] == ["alpha"]

    def test_malformed_input_never_raises(self) -> None:
        """Test that unbalanced text yields elements without raising."""
        source = "function broken(a {\n  return a;\n"

        assert isinstance(extract_functions(source), list)


class TestComplexity:
    """Test the complexity heuristics."""

    def test_cyclomatic_baseline(self) -> None:
        """Test that straight-line code has complexity 1."""
        assert cyclomatic_complexity("return a;") == 1

    def test_cyclomatic_counts_decisions(self) -> None:
        """Test that each decision token adds one."""
        assert cyclomatic_complexity("if (a && b) { go(); }") == 3

    @pytest.mark.parametrize(
        "body, expected",
        [
            ("return a ? b : c;", 2),
            ("return a ? b ? c : d : e;", 3),
            ("return user?.name ?? fallback;", 1),
            ("return a?.b ? c : d;", 2),
        ],
    )
    def test_cyclomatic_counts_ternaries(self, body: str, expected: int) -> None:
        """Test that ternaries count while optional chaining and nullish coalescing do not."""
        assert cyclomatic_complexity(body) == expected

    def test_cognitive_weights_nesting(self) -> None:
        """Test that nested decisions weigh more."""
        body = "if (a) {\n  if (b) {\n  }\n}"

        assert cognitive_complexity(body) == 5


class TestHeuristics:
    """Test the name and body heuristics."""

    def test_sensitive_logic_from_name(self) -> None:
        """Test sub-word keyword matching on names."""
        assert contains_sensitive_logic("hashPassword", "return x;") is True
        assert contains_sensitive_logic("formatDate", "return d.toISOString();") is False

    def test_sensitive_words_do_not_match_inside_unrelated_words(self) -> None:
        """Test that 'sign' inside 'assign' is not sensitive."""
        assert contains_sensitive_logic("assignSlot", "return slot;") is False

    def test_return_type_from_literal(self) -> None:
        """Test return type inference from the last return."""
        assert infer_return_type("label", "return 'x';") == "string"
        assert infer_return_type("flags", "return [1, 2];") == "array"

    def test_return_type_from_name(self) -> None:
        """Test return type inference from naming conventions."""
        assert infer_return_type("isReady", "") == "boolean"
        assert infer_return_type("getItemCount", "") == "number"
        assert infer_return_type("render", "") == "unknown"
