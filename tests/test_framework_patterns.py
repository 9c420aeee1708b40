"""Tests for framework detection and the pattern helpers."""

import pytest

from contextguard.core.exceptions import CatalogError
from contextguard.patterns.frameworks import FrameworkMatcher, detect_frameworks, module_matches
from contextguard.patterns.models import FrameworkRule
from contextguard.patterns.utils import (
    declared_function_names,
    extract_dependencies,
    extract_import_modules,
    get_file_type,
    is_config_file,
    is_test_file,
)

EXPRESS_SOURCE = """const express = require('express');
const app = express();
app.get('/', (req, res) => res.json({ ok: true }));
app.listen(3000);
"""

REACT_SOURCE = """import React, { useState } from 'react';

export function Counter() {
  const [count, setCount] = useState(0);
  return count;
}
"""


class TestFrameworkMatcher:
    """Test framework scoring with the default catalog."""

    def test_express_server(self) -> None:
        """Test that an Express server ranks Express above Node.js."""
        matches = detect_frameworks(EXPRESS_SOURCE, file_name="server.js", dependencies=["express"])

        assert [m.rule_id for m in matches] == ["express", "node"]
        assert matches[0].confidence == pytest.approx(0.646)
        assert matches[1].confidence == pytest.approx(0.5969, abs=1e-4)
        assert matches[0].is_server is True
        assert matches[0].line == 1
        assert "Imports: express" in matches[0].indicators
        assert "Dependencies: express" in matches[0].indicators

    def test_react_component(self) -> None:
        """Test that a React import with a hook is detected without a filename."""
        matches = detect_frameworks(REACT_SOURCE)

        assert [m.rule_id for m in matches] == ["react"]
        assert matches[0].confidence == pytest.approx(0.3759, abs=1e-4)
        assert matches[0].is_server is False
        assert matches[0].version is None

    def test_version_from_manifest_text(self) -> None:
        """Test that a pinned version in the text is reported."""
        source = 'import React from "react";\nconst pkg = { "react": "^18.2.0" };\n'

        matches = detect_frameworks(source)

        assert matches[0].rule_id == "react"
        assert matches[0].version == "18.2.0"

    def test_filename_alone_is_not_enough(self) -> None:
        """Test that a conventional filename without code signals reports nothing."""
        assert detect_frameworks("", file_name="App.tsx") == []

    def test_plain_code_reports_nothing(self) -> None:
        """Test that code without framework signals reports nothing."""
        assert detect_frameworks("const total = items.length;") == []

    def test_results_sorted_by_confidence(self) -> None:
        """Test descending confidence ordering."""
        matches = detect_frameworks(EXPRESS_SOURCE, file_name="server.js", dependencies=["express"])
        confidences = [m.confidence for m in matches]

        assert confidences == sorted(confidences, reverse=True)

    def test_explicit_imports(self) -> None:
        """Test that passed import names replace the ones found in the text."""
        matches = detect_frameworks("useState();", imports=["react"])

        assert matches[0].rule_id == "react"
        assert matches[0].line is None


class TestFrameworkCatalog:
    """Test substituted and invalid framework catalogs."""

    def test_substituted_catalog(self) -> None:
        """Test a matcher built from a one-framework catalog."""
        rule = FrameworkRule(
            rule_id="fastify",
            name="Fastify",
            imports=("fastify",),
            idioms=("fastify.register",),
            files=(),
            dependencies=("fastify",),
            base_confidence=1.0,
            is_server=True,
        )
        matcher = FrameworkMatcher([rule])
        source = "import Fastify from 'fastify';\nfastify.register(plugin);\n"

        matches = matcher.detect(source, dependencies=["fastify"])

        assert [m.rule_id for m in matches] == ["fastify"]
        assert matches[0].confidence == pytest.approx(0.8)
        assert matcher.primary(matches) is matches[0]
        assert matcher.primary([]) is None

    def test_base_confidence_out_of_range(self) -> None:
        """Test that base confidence must lie in [0, 1]."""
        with pytest.raises(CatalogError):
            FrameworkRule("bad", "Bad", (), (), (), (), -0.1)


class TestModuleMatching:
    """Test import specifier matching."""

    @pytest.mark.parametrize(
        "module,candidate,expected",
        [
            ("fs", "fs", True),
            ("node:fs", "fs", True),
            ("fs/promises", "fs", True),
            ("fsevents", "fs", False),
            ("next/router", "next/", True),
            ("nextra", "next/", False),
        ],
    )
    def test_module_matches(self, module: str, candidate: str, expected: bool) -> None:
        """Test exact, subpath and prefix matches."""
        assert module_matches(module, candidate) is expected


class TestPatternUtils:
    """Test the helpers shared by the matchers."""

    def test_extract_import_modules(self) -> None:
        """Test import, dynamic import and require specifiers in source order."""
        source = (
            "import fs from 'fs';\n"
            "const path = require('path');\n"
            "const lazy = import('./lazy');\n"
            "import 'fs';\n"
        )

        assert extract_import_modules(source) == ["fs", "path", "./lazy"]

    def test_extract_dependencies(self) -> None:
        """Test dependency names across manifest sections."""
        manifest = '{"dependencies": {"express": "^4.0.0"}, "devDependencies": {"jest": "^29.0.0"}}'

        assert extract_dependencies(manifest) == ["express", "jest"]

    def test_extract_dependencies_invalid_json(self) -> None:
        """Test that an unreadable manifest yields no dependencies."""
        assert extract_dependencies("{not json") == []
        assert extract_dependencies("[1, 2]") == []

    def test_declared_function_names(self) -> None:
        """Test declared names in order of appearance."""
        assert declared_function_names(REACT_SOURCE) == ["Counter"]

    @pytest.mark.parametrize(
        "file_name,expected",
        [("app.tsx", "typescriptreact"), ("lib.mjs", "javascript"), ("README", "javascript"), (None, "javascript")],
    )
    def test_get_file_type(self, file_name, expected: str) -> None:
        """Test editor language ids by extension."""
        assert get_file_type(file_name) == expected

    def test_file_name_classification(self) -> None:
        """Test config and test file detection."""
        assert is_config_file("webpack.config.js") is True
        assert is_config_file("server.js") is False
        assert is_config_file(None) is False
        assert is_test_file("client.test.ts") is True
        assert is_test_file("client.ts") is False
