"""Human-readable labels and safe filenames for detected code blocks.

The context label comes from the nearest heading or filename banner that
precedes the block (searching up to five ancestor levels); failing that, the
page title or host.  Filenames are slugs of that label plus the extension of
the detected language.
"""

from __future__ import annotations

import re

from bs4 import Tag

from codegrab.extractors.dom import STOP_TAGS, element_classes, previous_element
from codegrab.language import extension_for

CONTEXT_MAX_LENGTH = 50
CONTEXT_SEARCH_DEPTH = 5
FILENAME_MAX_LENGTH = 50

_HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
_FILENAME_CLASS_HINTS: tuple[str, ...] = ("filename", "file-header", "code-header")

# Sanitized names that carry no information; replaced by code-<n>
_PLACEHOLDER_NAMES = frozenset({"", "code-block", "untitled"})

_ILLEGAL_CHARS_RE = re.compile(r'[<>:"/\\|?*]+')
_WHITESPACE_RE = re.compile(r"\s+")
_NON_NAME_RE = re.compile(r"[^\w\-.]", re.ASCII)
_MULTI_DASH_RE = re.compile(r"-{2,}")


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------

def _clip(text: str, limit: int = CONTEXT_MAX_LENGTH) -> str:
    return " ".join(text.split())[:limit]


def _label_of(sibling: Tag) -> str:
    """Return *sibling*'s text if it is a heading or a filename banner."""
    if sibling.name in _HEADING_TAGS:
        return _clip(sibling.get_text())
    class_str = element_classes(sibling).lower()
    if any(hint in class_str for hint in _FILENAME_CLASS_HINTS):
        return _clip(sibling.get_text())
    return ""


def fallback_context(title: str = "", host: str = "") -> str:
    """Page title (clipped), else host, else ``"untitled"``."""
    return _clip(title or "") or _clip(host or "") or "untitled"


def derive_context(element: Tag, *, title: str = "", host: str = "") -> str:
    """Return a short (≤ 50 chars), never-empty label for *element*."""
    current = element
    for _ in range(CONTEXT_SEARCH_DEPTH):
        sibling = previous_element(current)
        if sibling is not None:
            label = _label_of(sibling)
            if label:
                return label
        parent = current.parent
        if not isinstance(parent, Tag) or parent.name in STOP_TAGS:
            break
        current = parent
    return fallback_context(title, host)


# ---------------------------------------------------------------------------
# Filenames
# ---------------------------------------------------------------------------

def sanitize_filename(name: str | None, max_length: int = FILENAME_MAX_LENGTH) -> str:
    """Slugify *name* into ``[a-z0-9_.-]``; may return ``""``."""
    if not name:
        return ""
    slug = name.strip().lower()
    slug = _ILLEGAL_CHARS_RE.sub("", slug)
    slug = _WHITESPACE_RE.sub("-", slug)
    slug = _NON_NAME_RE.sub("", slug)
    slug = _MULTI_DASH_RE.sub("-", slug)
    return slug[:max_length].strip(".-")


def build_filename(context: str, language: str, sequence: int) -> str:
    """Filename for a block: ``<slug>.<ext>``, or ``code-<sequence>.<ext>``."""
    name = sanitize_filename(context)
    if name in _PLACEHOLDER_NAMES:
        name = f"code-{sequence}"
    return f"{name}.{extension_for(language)}"


def unique_filename(filename: str, used: set[str]) -> str:
    """Append -1, -2, … before the extension until *filename* is not in *used*.

    The returned name is added to *used*.
    """
    candidate = filename
    if candidate in used:
        base, dot, ext = filename.rpartition(".")
        if not dot:
            base, ext = filename, ""
        suffix = f".{ext}" if ext else ""
        counter = 1
        while candidate in used:
            candidate = f"{base}-{counter}{suffix}"
            counter += 1
    used.add(candidate)
    return candidate
