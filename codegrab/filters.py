"""Search and filter detected code blocks.

    from codegrab.filters import filter_blocks

    python_blocks = filter_blocks(result.blocks, language="python")
    big_sql = filter_blocks(result.blocks, query="select", size="large")

Filters combine with AND; ``None`` or an empty value leaves that filter off.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

from codegrab.items import CodeBlock

SMALL_MAX_BYTES = 1024     # small: size < 1 KB
MEDIUM_MAX_BYTES = 10_240  # medium: 1 KB <= size <= 10 KB; large above


class SizeBucket(StrEnum):
    SMALL  = "small"
    MEDIUM = "medium"
    LARGE  = "large"


def size_bucket(size: int) -> SizeBucket:
    """Bucket a UTF-8 byte count."""
    if size < SMALL_MAX_BYTES:
        return SizeBucket.SMALL
    if size <= MEDIUM_MAX_BYTES:
        return SizeBucket.MEDIUM
    return SizeBucket.LARGE


def matches_query(block: CodeBlock, query: str) -> bool:
    """Case-insensitive substring match on code, context, filename or language."""
    needle = query.strip().lower()
    if not needle:
        return True
    return any(
        needle in field.lower()
        for field in (block.code, block.context, block.filename, block.language)
    )


def filter_blocks(
    blocks: Iterable[CodeBlock],
    query: str | None = None,
    language: str | None = None,
    size: SizeBucket | str | None = None,
) -> list[CodeBlock]:
    """Return the blocks matching every given filter, order preserved.

    Args:
        query:    Search text; see :func:`matches_query`.
        language: Exact language tag (``"python"``, ``"bash"`` ...).
        size:     ``"small"``, ``"medium"`` or ``"large"``.

    Raises:
        ValueError: for an unknown *size* bucket.
    """
    bucket = SizeBucket(size) if size else None
    selected: list[CodeBlock] = []
    for block in blocks:
        if language and block.language != language:
            continue
        if bucket is not None and size_bucket(block.size) is not bucket:
            continue
        if query and not matches_query(block, query):
            continue
        selected.append(block)
    return selected
