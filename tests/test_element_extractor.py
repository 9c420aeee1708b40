"""Tests for the combined element extractor."""

from contextguard.extractors import ElementExtractor, extract_all, quick_extract, summarize_extraction
from contextguard.extractors.variables import VariableExtractor

SOURCE = """import fs from 'fs';
const password = "hunter2hunter2";
export function readSecret(path) {
  return fs.readFileSync(path);
}
"""


class TestExtractAll:
    """Test extract_all and its metadata roll-up."""

    def test_elements(self) -> None:
        """Test that every element family is extracted."""
        elements = extract_all(SOURCE)

        assert [f.name for f in elements.functions] == ["readSecret"]
        assert [v.name for v in elements.variables] == ["password"]
        assert [i.module for i in elements.imports] == ["fs"]
        assert [e.name for e in elements.exports] == ["readSecret"]
        assert elements.classes == []

    def test_metadata(self) -> None:
        """Test counts, api surface and risk lists."""
        meta = extract_all(SOURCE).metadata

        assert meta.total_elements == 4
        assert meta.external_modules == ["fs"]
        assert meta.api_surface.public == ["readSecret"]
        assert meta.risks.sensitive_variables == ["password"]
        assert meta.risks.sensitive_functions == ["readSecret"]
        assert meta.risks.risky_imports == ["fs"]

    def test_injected_extractor(self) -> None:
        """Test that a substituted family extractor is used."""

        class NoVariables(VariableExtractor):
            def extract(self, text):
                return []

        elements = ElementExtractor(variables=NoVariables()).extract_all(SOURCE)

        assert elements.variables == []
        assert elements.metadata.risks.sensitive_variables == []

    def test_summary(self) -> None:
        """Test the quality score penalties."""
        summary = summarize_extraction(extract_all(SOURCE))

        assert summary.quality_score == 75
        assert "1 variables may hold secrets" in summary.issues
        assert summary.summary.startswith("Extracted 1 functions")


class TestQuickExtract:
    """Test quick_extract."""

    def test_counts_and_risks(self) -> None:
        """Test counts, complexity bucket and quick risk notes."""
        result = quick_extract("function a() {}\nclass B {}\nimport x from 'y';\neval(code);")

        assert result.function_count == 1
        assert result.class_count == 1
        assert result.import_count == 1
        assert result.line_count == 4
        assert result.complexity == "low"
        assert result.quick_risks == ["Dynamic code execution detected"]

    def test_complexity_bucket(self) -> None:
        """Test that long files land in a higher bucket."""
        assert quick_extract("x;\n" * 300).complexity == "medium"
        assert quick_extract("x;\n" * 600).complexity == "high"
