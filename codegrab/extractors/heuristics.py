"""Deterministic heuristics deciding whether a text blob looks like source code.

Pure functions, no DOM access.  Each verdict carries the rule that decided it
so rejections can be explained (and logged) without re-running the checks.

Usage::

    from codegrab.extractors.heuristics import assess_text

    verdict = assess_text("def add(a, b):\\n    return a + b")
    if verdict.is_code:
        print(verdict.indicators)   # ('keyword', 'key_value')
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MIN_LINES = 3
MIN_CHARS = 100
MIN_INDICATORS = 2

PROSE_AVG_LINE_LENGTH = 100
LONG_LINE_LENGTH = 80
PROSE_LONG_LINE_RATIO = 0.7

# (name, pattern); order is the order names are reported in
_CODE_INDICATORS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("punctuation", re.compile(r"[{}\[\];]")),
    ("keyword", re.compile(r"\b(?:function|class|def|public|private|const|let|var)\b")),
    ("tag_or_operator", re.compile(r"[<>/]=?")),
    ("comment", re.compile(r"^\s*[#/*].*", re.MULTILINE)),
    ("key_value", re.compile(r":\s*\w+")),
    ("method_call", re.compile(r"\w+\.\w+\(")),
    ("decimal", re.compile(r"\b\d+\.\d+\b")),
    ("array_access", re.compile(r"\w+\[\d+\]")),
)

# A keyword opening a declaration at the start of a line: `def f(`, `const x =`
_DECLARATION = re.compile(
    r"^\s*(?:function|class|def|const|let|var)\s+[A-Za-z_$][\w$]*\s*[(=:{<]",
    re.MULTILINE,
)


@dataclass(frozen=True)
class TextVerdict:
    """Outcome of :func:`assess_text`."""

    is_code: bool
    # "code"|"empty"|"too_short"|"few_indicators"|"prose_layout"
    reason: str
    indicators: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def code_indicators(text: str) -> tuple[str, ...]:
    """Return the names of the code-indicator patterns matching *text*."""
    return tuple(name for name, pattern in _CODE_INDICATORS if pattern.search(text))


def _looks_like_prose_layout(lines: list[str], total_chars: int) -> bool:
    avg_line_length = total_chars / len(lines)
    long_lines = sum(1 for line in lines if len(line) > LONG_LINE_LENGTH)
    return (
        avg_line_length > PROSE_AVG_LINE_LENGTH
        and long_lines > len(lines) * PROSE_LONG_LINE_RATIO
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def assess_text(text: str) -> TextVerdict:
    """Classify normalized *text* as code-like or not.

    Rules, in order:

    1. Empty text is rejected.
    2. Fewer than ``MIN_LINES`` lines and fewer than ``MIN_CHARS`` characters
       is too short to judge, unless a line opens with a declaration
       (``def f(``, ``const x =``) and has at least ``MIN_INDICATORS``
       indicators, so a two-line ``def`` is still code.
    3. Fewer than ``MIN_INDICATORS`` distinct indicators is rejected.
    4. Long, uniformly wide lines read as prose and are rejected.
    """
    if not text:
        return TextVerdict(is_code=False, reason="empty")

    lines = text.split("\n")
    hits = code_indicators(text)

    if len(lines) < MIN_LINES and len(text) < MIN_CHARS and not (
        _DECLARATION.search(text) and len(hits) >= MIN_INDICATORS
    ):
        return TextVerdict(is_code=False, reason="too_short", indicators=hits)

    if len(hits) < MIN_INDICATORS:
        return TextVerdict(is_code=False, reason="few_indicators", indicators=hits)

    if _looks_like_prose_layout(lines, len(text)):
        return TextVerdict(is_code=False, reason="prose_layout", indicators=hits)

    return TextVerdict(is_code=True, reason="code", indicators=hits)


def looks_like_code(text: str) -> bool:
    """Shorthand for ``assess_text(text).is_code``."""
    return assess_text(text).is_code
