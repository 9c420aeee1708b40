"""Text helpers shared by the extractors, matchers and analyzers.

None of these helpers parse JavaScript. They answer positional questions
(which line is this offset on, where does this brace block end) over raw
text so the heuristic matchers can stay small.
"""

from __future__ import annotations

import bisect
import re

IDENTIFIER_RE = re.compile(r"[A-Za-z_$][\w$]*")

# Boundaries inside camelCase / PascalCase / snake_case identifiers
_SUBWORD_SPLIT_RE = re.compile(r"_+|(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])|\$")

JS_RESERVED_WORDS = frozenset({
    "await", "break", "case", "catch", "class", "const", "continue", "debugger",
    "default", "delete", "do", "else", "export", "extends", "false", "finally",
    "for", "function", "if", "import", "in", "instanceof", "let", "new", "null",
    "of", "return", "static", "super", "switch", "this", "throw", "true", "try",
    "typeof", "undefined", "var", "void", "while", "with", "yield", "async",
})

_QUOTES = "\"'`"


class LineIndex:
    """Maps character offsets of a text to 1-based line and column numbers."""

    def __init__(self, text: str):
        self.text = text
        self._starts = [0]
        for match in re.finditer(r"\n", text):
            self._starts.append(match.end())

    def line_of(self, index: int) -> int:
        return bisect.bisect_right(self._starts, index)

    def column_of(self, index: int) -> int:
        line = self.line_of(index)
        return index - self._starts[line - 1] + 1

    def line_start(self, line: int) -> int:
        """Offset of the first character of 1-based ``line``."""
        return self._starts[line - 1]

    @property
    def line_count(self) -> int:
        return len(self._starts)


def line_of(text: str, index: int) -> int:
    """1-based line number of ``index`` in ``text``."""
    return text.count("\n", 0, index) + 1


def find_block_end(text: str, open_index: int) -> int | None:
    """Return the index of the brace closing the block opened at ``open_index``.

    Quote characters inside string literals, including escaped ones, do not
    affect the brace count. Returns ``None`` if the block never closes.
    """
    depth = 0
    quote: str | None = None
    escaped = False
    for i in range(open_index, len(text)):
        char = text[i]
        if escaped:
            escaped = False
            continue
        if char == "\\":
            escaped = True
            continue
        if quote:
            if char == quote:
                quote = None
            continue
        if char in _QUOTES:
            quote = char
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def extract_block(text: str, start: int) -> str | None:
    """Return the brace-balanced block starting at the first ``{`` at or after ``start``."""
    open_index = text.find("{", start)
    if open_index == -1:
        return None
    end = find_block_end(text, open_index)
    if end is None:
        return None
    return text[open_index:end + 1]


def split_identifier(name: str) -> list[str]:
    """Split an identifier into lowercase sub-words.

    ``calculateTotalPrice`` -> ``["calculate", "total", "price"]``,
    ``HTTPServer`` -> ``["http", "server"]``, ``api_key`` -> ``["api", "key"]``.
    """
    return [part.lower() for part in _SUBWORD_SPLIT_RE.split(name) if part]


def identifier_tokens(text: str) -> set[str]:
    """Lowercase sub-words of every non-reserved identifier in ``text``."""
    tokens: set[str] = set()
    for match in IDENTIFIER_RE.finditer(text):
        word = match.group(0)
        if word in JS_RESERVED_WORDS:
            continue
        tokens.update(split_identifier(word))
    return tokens


def word_pattern(name: str) -> str:
    """Regex source matching ``name`` as a whole JavaScript identifier."""
    return rf"(?<![\w$]){re.escape(name)}(?![\w$])"


def is_comment_line(line: str) -> bool:
    stripped = line.strip()
    return stripped.startswith(("//", "/*", "*"))


class IdentifierIndex:
    """Keyword lookup over the identifiers of a piece of text.

    A keyword hits when it equals an identifier sub-word, when it is a
    prefix of one (keywords of ``prefix_min_length`` or more characters),
    or, for compound keywords such as ``api_key``, when its underscore-free
    form occurs inside an underscore-free identifier.
    """

    def __init__(self, text: str, prefix_min_length: int = 4):
        self.prefix_min_length = prefix_min_length
        self.tokens: set[str] = set()
        self.squashed: set[str] = set()
        for match in IDENTIFIER_RE.finditer(text):
            word = match.group(0)
            if word in JS_RESERVED_WORDS:
                continue
            self.tokens.update(split_identifier(word))
            self.squashed.add(word.lower().replace("_", ""))

    def has(self, keyword: str) -> bool:
        keyword = keyword.lower()
        if "_" in keyword or " " in keyword:
            compact = keyword.replace("_", "").replace(" ", "")
            return any(compact in word for word in self.squashed)
        if keyword in self.tokens:
            return True
        if len(keyword) >= self.prefix_min_length:
            return any(token.startswith(keyword) for token in self.tokens)
        return False

    def hits(self, keywords) -> list[str]:
        return [keyword for keyword in keywords if self.has(keyword)]


def name_contains(name: str, fragment: str) -> bool:
    """Whether ``fragment``'s sub-words occur contiguously in ``name``'s.

    The last sub-word of ``fragment`` may be a prefix, so ``encrypt``
    matches ``encryptData`` and ``calculatePrice`` matches
    ``calculatePrices``, while ``sign`` does not match ``assign``.
    """
    needle = split_identifier(fragment)
    haystack = split_identifier(name)
    if not needle or len(needle) > len(haystack):
        return False
    for start in range(len(haystack) - len(needle) + 1):
        window = haystack[start:start + len(needle)]
        if window[:-1] == needle[:-1] and window[-1].startswith(needle[-1]):
            return True
    return False
