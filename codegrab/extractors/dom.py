"""Read-only BeautifulSoup traversal helpers shared by the extractors.

Nothing here mutates the tree: scans must leave the caller's document as
they found it.
"""

from __future__ import annotations

from collections.abc import Iterator

from bs4 import BeautifulSoup, Tag

# Ancestor walks stop here: page chrome above <body> never carries hints
STOP_TAGS = frozenset({"body", "html", "[document]"})


def element_classes(tag: Tag) -> str:
    """Return the class attribute as one space-joined string ("" if absent)."""
    value = tag.get("class")
    if not value:
        return ""
    if isinstance(value, str):
        return value
    return " ".join(str(v) for v in value)


def previous_element(tag: Tag) -> Tag | None:
    """Nearest preceding sibling that is an element (text nodes skipped)."""
    for sibling in tag.previous_siblings:
        if isinstance(sibling, Tag):
            return sibling
    return None


def ancestors(tag: Tag, limit: int | None = None) -> Iterator[Tag]:
    """Yield enclosing elements nearest first, stopping below ``<body>``."""
    count = 0
    for parent in tag.parents:
        if limit is not None and count >= limit:
            return
        if not isinstance(parent, Tag) or parent.name in STOP_TAGS:
            return
        yield parent
        count += 1


def document_of(tag: Tag) -> Tag:
    """Return the top-most node of the tree containing *tag*."""
    top = tag
    while top.parent is not None:
        top = top.parent
    return top


def page_title(root: Tag) -> str:
    """Text of the document's ``<title>``, whitespace-collapsed."""
    doc = root if isinstance(root, BeautifulSoup) else document_of(root)
    title_tag = doc.find("title")
    if not isinstance(title_tag, Tag):
        return ""
    return " ".join(title_tag.get_text().split())


def document_positions(root: Tag) -> dict[int, int]:
    """Map ``id(element)`` to its index in document order under *root*."""
    return {id(el): index for index, el in enumerate(root.find_all(True))}


def is_inside(tag: Tag, other: Tag) -> bool:
    """True if *other* is a proper ancestor of *tag*."""
    return any(parent is other for parent in tag.parents)
