"""Command-line entry point.

Usage::

    contextguard analyze src/billing.ts --deps package.json
    contextguard analyze src/billing.ts --quick --json

Exit status is 0 when the source may be shared, 1 when the verdict blocks it
and 2 when the source or settings could not be used.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from . import __version__
from .config import AnalysisSettings, get_settings
from .core.exceptions import ContextGuardError, SourceReadError, SourceTooLargeError
from .engine import AnalysisEngine, ComprehensiveAnalysisResult, QuickAnalysisResult
from .logging_config import configure_logging
from .patterns.utils import extract_dependencies

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BLOCKED = 1
EXIT_ERROR = 2


def read_source(path: Path, max_bytes: int) -> str:
    """Read a source file for analysis.

    Args:
        path: File to read
        max_bytes: Largest accepted file size

    Raises:
        SourceTooLargeError: If the file exceeds ``max_bytes``
        SourceReadError: If the file cannot be read or is not UTF-8 text
    """
    try:
        size = path.stat().st_size
    except OSError as e:
        raise SourceReadError(f"Cannot read {path}: {e.strerror or e}") from e

    if size > max_bytes:
        raise SourceTooLargeError(
            f"{path} is {size} bytes, larger than the {max_bytes} byte limit",
            size=size,
            limit=max_bytes,
        )

    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise SourceReadError(f"Cannot read {path}: {e.strerror or e}") from e
    except UnicodeDecodeError as e:
        raise SourceReadError(f"{path} is not UTF-8 text") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contextguard",
        description="Score the risk of sharing JavaScript/TypeScript source with an AI assistant",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Analyze one source file")
    analyze.add_argument("file", type=Path, help="Source file to analyze")
    analyze.add_argument("--deps", type=Path, default=None, help="package.json declaring the dependencies")
    analyze.add_argument("--quick", action="store_true", help="Fast verdict without the full pipeline")
    analyze.add_argument("--json", action="store_true", help="Print the full result as JSON")
    analyze.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override CONTEXTGUARD_LOG_LEVEL",
    )
    return parser


def format_comprehensive(result: ComprehensiveAnalysisResult) -> str:
    overall = result.risk_analysis.overall
    summary = result.executive_summary
    lines = [
        f"File: {result.analysis_metadata.file_name}",
        f"Risk: {overall.level.value} (score {overall.score}, confidence {overall.confidence}%)",
        f"Verdict: {'BLOCK' if overall.should_block else 'review' if overall.requires_review else 'allow'}",
        summary.executive_recommendation,
    ]
    if summary.critical_issues:
        lines.append("Critical issues:")
        lines.extend(f"  - {issue}" for issue in summary.critical_issues)
    if result.risk_analysis.recommendations:
        lines.append("Recommendations:")
        lines.extend(f"  - {r}" for r in result.risk_analysis.recommendations)
    return "\n".join(lines)


def format_quick(result: QuickAnalysisResult, file_name: str) -> str:
    lines = [
        f"File: {file_name}",
        f"Risk: {result.risk_level.value}",
        f"Verdict: {'BLOCK' if result.should_block else 'review' if result.requires_review else 'allow'}",
    ]
    lines.extend(f"  - {risk}" for risk in result.quick_risks)
    lines.extend(f"  * {rec}" for rec in result.quick_recommendations)
    return "\n".join(lines)


def run_analyze(args: argparse.Namespace, settings: AnalysisSettings) -> int:
    text = read_source(args.file, settings.max_source_bytes)
    file_name = str(args.file)
    engine = AnalysisEngine(settings)

    if args.quick:
        quick = engine.quick_analyze(text, file_name)
        print(quick.model_dump_json(indent=2) if args.json else format_quick(quick, file_name))
        return EXIT_BLOCKED if quick.should_block else EXIT_OK

    dependencies: list[str] = []
    if args.deps is not None:
        dependencies = extract_dependencies(read_source(args.deps, settings.max_source_bytes))

    result = engine.analyze_comprehensively(text, file_name, dependencies)
    print(result.model_dump_json(indent=2) if args.json else format_comprehensive(result))
    return EXIT_BLOCKED if result.should_block else EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
        configure_logging(
            log_file=settings.log_file,
            log_level=args.log_level or settings.log_level,
            json_format=settings.json_logs,
        )
        return run_analyze(args, settings)
    except ContextGuardError as e:
        logger.debug(f"Analysis aborted: {type(e).__name__}: {e}")
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
