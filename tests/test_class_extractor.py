"""Tests for class extraction and the class-level analyses."""

import pytest

from contextguard.extractors.classes import (
    analyze_class_complexity,
    analyze_inheritance,
    blank_nested_blocks,
    detect_design_patterns,
    extract_classes,
)
from contextguard.extractors.models import ClassKind

SERVICE_SOURCE = """export class PaymentService extends BaseService implements Auditable {
  private readonly apiUrl: string = "https://api.example.com";
  static instance;

  constructor(client) {
    this.client = client;
  }

  async processPayment(amount: number): Promise<Receipt> {
    if (amount > 0) {
      return this.client.charge(amount);
    }
  }

  get total() {
    return this.sum;
  }
}
"""

BUILDER_SOURCE = """class Query {
  withLimit(n) {
    return this;
  }
  withOffset(n) {
    return this;
  }
  static createDefault() {
    return new Query();
  }
}
"""

HIERARCHY_SOURCE = """class Base {}
class Middle extends Base {}
class Leaf extends Middle {}
class Widget extends React.Component {}
"""


@pytest.fixture
def service():
    return extract_classes(SERVICE_SOURCE)[0]


class TestClassExtractor:
    """Test ClassExtractor headers and members."""

    def test_header(self, service) -> None:
        """Test name, kind, heritage and span."""
        assert service.name == "PaymentService"
        assert service.kind is ClassKind.REGULAR
        assert service.extends == "BaseService"
        assert service.implements == ["Auditable"]
        assert service.is_exported is True
        assert service.start_line == 1
        assert service.end_line == 18

    def test_methods(self, service) -> None:
        """Test methods, accessors and signatures; constructors are skipped."""
        methods = {m.name: m for m in service.methods}

        assert list(methods) == ["processPayment", "total"]
        assert methods["processPayment"].is_async is True
        assert methods["processPayment"].parameters == ["amount: number"]
        assert methods["processPayment"].return_type == "Promise<Receipt>"
        assert methods["total"].accessor == "get"

    def test_properties(self, service) -> None:
        """Test declared fields and constructor assignments."""
        props = {p.name: p for p in service.properties}

        assert list(props) == ["apiUrl", "instance", "client"]
        assert props["apiUrl"].visibility == "private"
        assert props["apiUrl"].is_readonly is True
        assert props["apiUrl"].type_annotation == "string"
        assert props["instance"].is_static is True
        assert props["client"].line == 6

    def test_statements_in_method_bodies_are_not_members(self, service) -> None:
        """Test that nested block contents never become members."""
        names = {m.name for m in service.methods} | {p.name for p in service.properties}

        assert "charge" not in names
        assert "sum" not in names

    def test_abstract_and_expression(self) -> None:
        """Test abstract declarations and class expressions."""
        source = "abstract class Shape {\n}\nconst Mapper = class extends Shape {\n};"
        classes = extract_classes(source)

        assert [(c.name, c.kind) for c in classes] == [
            ("Shape", ClassKind.ABSTRACT),
            ("Mapper", ClassKind.EXPRESSION),
        ]
        assert classes[0].is_abstract is True
        assert classes[1].extends == "Shape"

    def test_lowercase_names_are_ignored(self) -> None:
        """Test that class names must start with a capital letter."""
        assert extract_classes("class helper {}") == []

    def test_blank_nested_blocks(self) -> None:
        """Test that nested blocks are blanked but newlines kept."""
        assert blank_nested_blocks("a() {\n  b;\n}") == "a() {\n    \n}"


class TestClassAnalyses:
    """Test complexity, inheritance and design-pattern hints."""

    def test_singleton_from_static_instance(self, service) -> None:
        """Test the static instance singleton hint."""
        assert detect_design_patterns(service) == ["singleton"]

    def test_factory_and_builder(self) -> None:
        """Test create* factories and fluent with* builders."""
        query = extract_classes(BUILDER_SOURCE)[0]

        assert detect_design_patterns(query) == ["factory", "builder"]

    def test_observer_needs_specific_methods(self) -> None:
        """Test that only observer method names trigger the observer hint."""
        source = "class Feed {\n  subscribe(fn) {\n  }\n  notice(msg) {\n  }\n}"
        feed = extract_classes(source)[0]

        assert detect_design_patterns(feed) == ["observer"]

    def test_complexity(self) -> None:
        """Test the member-weighted class complexity score."""
        query = extract_classes(BUILDER_SOURCE)[0]
        complexity = analyze_class_complexity(query)

        assert complexity.score == pytest.approx(5.0)
        assert complexity.cohesion == 0.0

    def test_inheritance(self) -> None:
        """Test chains, roots, leaves and external bases."""
        report = analyze_inheritance(extract_classes(HIERARCHY_SOURCE))

        assert report.roots == ["Base", "Widget"]
        assert report.leaves == ["Leaf", "Widget"]
        assert report.external_bases == ["React.Component"]
        assert ["Leaf", "Middle", "Base"] in report.chains
        assert report.max_depth == 3
