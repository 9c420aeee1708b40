"""Helpers shared by the pattern matchers.

Usage::

    from contextguard.patterns.utils import extract_dependencies, extract_import_modules

    deps = extract_dependencies(Path("package.json").read_text())
    modules = extract_import_modules(source)
"""

from __future__ import annotations

import json
import logging
import re

from ..extractors.functions import SIGNATURE_PATTERNS, is_valid_function_name
from .secrets import is_test_file_name

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_IMPORT_MODULE_RE = re.compile(r"import\s+(?:[\w\s{},*$]*\s+from\s+)?['\"]([^'\"]+)['\"]")
_REQUIRE_MODULE_RE = re.compile(r"require\s*\(\s*['\"]([^'\"]+)['\"]\s*\)")
_DYNAMIC_IMPORT_RE = re.compile(r"import\s*\(\s*['\"]([^'\"]+)['\"]\s*\)")

DEPENDENCY_SECTIONS = ("dependencies", "devDependencies", "peerDependencies")

FILE_TYPES: dict[str, str] = {
    "js": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "jsx": "javascriptreact",
    "ts": "typescript",
    "tsx": "typescriptreact",
    "vue": "vue",
    "svelte": "svelte",
    "json": "json",
}

CONFIG_FILE_MARKERS = ("config", "settings", ".env", "package.json", "tsconfig", "webpack", "babel")


# ---------------------------------------------------------------------------
# Modules and dependencies
# ---------------------------------------------------------------------------


def extract_import_modules(text: str) -> list[str]:
    """Module specifiers named by import statements, dynamic imports and require calls.

    Order of first appearance is kept and duplicates are dropped.
    """
    found: list[tuple[int, str]] = []
    for pattern in (_IMPORT_MODULE_RE, _DYNAMIC_IMPORT_RE, _REQUIRE_MODULE_RE):
        found.extend((m.start(), m.group(1)) for m in pattern.finditer(text))
    found.sort()
    return list(dict.fromkeys(module for _, module in found))


def extract_dependencies(package_json: str) -> list[str]:
    """Dependency names declared in the text of a ``package.json`` file.

    Invalid JSON or an unexpected document shape yields an empty list.
    """
    try:
        data = json.loads(package_json)
    except json.JSONDecodeError as e:
        logger.warning(f"Ignoring invalid package.json content: {e}")
        return []

    if not isinstance(data, dict):
        logger.warning("Ignoring package.json content that is not an object")
        return []

    names: list[str] = []
    for section in DEPENDENCY_SECTIONS:
        entries = data.get(section)
        if isinstance(entries, dict):
            names.extend(str(name) for name in entries)
    return list(dict.fromkeys(names))


# ---------------------------------------------------------------------------
# File names
# ---------------------------------------------------------------------------


def get_file_type(file_name: str | None) -> str:
    """Editor language id for ``file_name``; JavaScript when the extension is unknown."""
    if not file_name or "." not in file_name:
        return "javascript"
    extension = file_name.rsplit(".", 1)[1].lower()
    return FILE_TYPES.get(extension, "javascript")


def is_test_file(file_name: str | None) -> bool:
    return is_test_file_name(file_name)


def is_config_file(file_name: str | None) -> bool:
    return bool(file_name) and any(marker in file_name for marker in CONFIG_FILE_MARKERS)


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


def declared_function_names(text: str) -> list[str]:
    """Names of the functions declared in ``text``, in order of appearance."""
    found: list[tuple[int, str]] = []
    for _, pattern in SIGNATURE_PATTERNS:
        for match in pattern.finditer(text):
            name = match.group(1)
            if is_valid_function_name(name):
                found.append((match.start(1), name))
    found.sort()
    return list(dict.fromkeys(name for _, name in found))
