"""Whitespace and line-ending cleanup for text pulled out of code elements."""

from __future__ import annotations

import re

_NBSP = "\u00a0"
_LINE_BREAK_RE = re.compile(r"\r\n?")


def normalize_text(raw: str | None) -> str:
    """Return *raw* with NBSPs turned into spaces, CR/CRLF into LF, and trimmed.

    Idempotent: ``normalize_text(normalize_text(x)) == normalize_text(x)``.
    """
    if not raw:
        return ""
    text = raw.replace(_NBSP, " ")
    text = _LINE_BREAK_RE.sub("\n", text)
    return text.strip()
