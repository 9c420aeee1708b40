"""Tests for the command-line entry point."""

import json

import pytest

from contextguard.cli import EXIT_BLOCKED, EXIT_ERROR, EXIT_OK, build_parser, main, read_source
from contextguard.core.exceptions import SourceReadError, SourceTooLargeError

CLEAN_SOURCE = "function add(a, b) {\n  return a + b;\n}\n"
EVAL_SOURCE = "function handle(userInput) {\n  return eval(userInput);\n}\n"
EXPRESS_SOURCE = """const express = require('express');
const app = express();
app.get('/', (req, res) => res.json({ ok: true }));
app.listen(3000);
"""


@pytest.fixture
def write_source(tmp_path):
    """Write a source file into the temporary directory."""

    def _write(name: str, content: str):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


class TestReadSource:
    """Test source file loading."""

    def test_reads_text(self, write_source) -> None:
        """Test reading a UTF-8 file."""
        path = write_source("math.js", CLEAN_SOURCE)
        assert read_source(path, 1024) == CLEAN_SOURCE

    def test_too_large(self, write_source) -> None:
        """Test the size limit."""
        path = write_source("math.js", CLEAN_SOURCE)

        with pytest.raises(SourceTooLargeError) as exc_info:
            read_source(path, 10)

        assert exc_info.value.size == len(CLEAN_SOURCE)
        assert exc_info.value.limit == 10

    def test_missing(self, tmp_path) -> None:
        """Test a path that does not exist."""
        with pytest.raises(SourceReadError, match="Cannot read"):
            read_source(tmp_path / "missing.js", 1024)

    def test_not_utf8(self, tmp_path) -> None:
        """Test binary content."""
        path = tmp_path / "blob.js"
        path.write_bytes(b"\xff\xfe\xfa bad")

        with pytest.raises(SourceReadError, match="not UTF-8"):
            read_source(path, 1024)


class TestMain:
    """Test exit codes and output of the analyze command."""

    def test_clean_source(self, write_source, capsys) -> None:
        """Test that a clean file exits 0 and is allowed."""
        path = write_source("math.js", CLEAN_SOURCE)

        assert main(["analyze", str(path)]) == EXIT_OK

        out = capsys.readouterr().out
        assert "Risk: low" in out
        assert "Verdict: allow" in out

    def test_blocked_source(self, write_source, capsys) -> None:
        """Test that dynamic execution exits 1 and lists the critical issue."""
        path = write_source("handler.js", EVAL_SOURCE)

        assert main(["analyze", str(path)]) == EXIT_BLOCKED

        out = capsys.readouterr().out
        assert "Verdict: BLOCK" in out
        assert "Dynamic code execution detected (eval/Function)" in out

    def test_quick_json(self, write_source, capsys) -> None:
        """Test that the quick verdict can be printed as JSON."""
        path = write_source("handler.js", EVAL_SOURCE)

        assert main(["analyze", str(path), "--quick", "--json"]) == EXIT_BLOCKED

        result = json.loads(capsys.readouterr().out)
        assert result["should_block"] is True
        assert result["risk_level"] == "critical"

    def test_quick_text(self, write_source, capsys) -> None:
        """Test the quick text rendering."""
        path = write_source("math.js", CLEAN_SOURCE)

        assert main(["analyze", str(path), "--quick"]) == EXIT_OK
        assert "Verdict: allow" in capsys.readouterr().out

    def test_dependencies_file(self, write_source, capsys) -> None:
        """Test that --deps feeds declared dependencies to framework detection."""
        path = write_source("server.js", EXPRESS_SOURCE)
        deps = write_source("package.json", json.dumps({"dependencies": {"express": "^4.18.2"}}))

        assert main(["analyze", str(path), "--deps", str(deps), "--json"]) == EXIT_OK

        result = json.loads(capsys.readouterr().out)
        frameworks = {f["rule_id"]: f for f in result["semantic_context"]["frameworks"]}
        assert "Dependencies: express" in frameworks["express"]["indicators"]

    def test_missing_file(self, tmp_path, capsys) -> None:
        """Test that an unreadable file exits 2."""
        assert main(["analyze", str(tmp_path / "missing.js")]) == EXIT_ERROR
        assert "error: Cannot read" in capsys.readouterr().err

    def test_oversized_file(self, write_source, capsys, monkeypatch) -> None:
        """Test that the size limit from the environment is enforced."""
        monkeypatch.setenv("CONTEXTGUARD_MAX_SOURCE_BYTES", "10")
        path = write_source("math.js", CLEAN_SOURCE)

        assert main(["analyze", str(path)]) == EXIT_ERROR
        assert "larger than the 10 byte limit" in capsys.readouterr().err

    def test_invalid_settings(self, write_source, capsys, monkeypatch) -> None:
        """Test that an unusable environment setting exits 2."""
        monkeypatch.setenv("CONTEXTGUARD_JSON_LOGS", "maybe")
        path = write_source("math.js", CLEAN_SOURCE)

        assert main(["analyze", str(path)]) == EXIT_ERROR
        assert "CONTEXTGUARD_JSON_LOGS must be a boolean" in capsys.readouterr().err

    def test_requires_command(self) -> None:
        """Test that a subcommand is required."""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])
