"""Duplicate removal and output capping for scan batches."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, TypeVar

DEDUP_KEY_LENGTH = 200


class _HasCode(Protocol):
    @property
    def code(self) -> str: ...


T = TypeVar("T", bound=_HasCode)


def dedup_key(code: str) -> str:
    """First 200 characters of the trimmed code."""
    return code.strip()[:DEDUP_KEY_LENGTH]


def deduplicate(items: Iterable[T], max_blocks: int | None = None) -> list[T]:
    """Drop items whose :func:`dedup_key` was already seen, then cap the list.

    First occurrence wins and order is preserved, so the function is
    idempotent.  ``max_blocks=None`` means no cap.
    """
    if max_blocks is not None and max_blocks < 0:
        raise ValueError(f"max_blocks must be >= 0, got {max_blocks}")

    seen: set[str] = set()
    unique: list[T] = []
    for item in items:
        if max_blocks is not None and len(unique) >= max_blocks:
            break
        key = dedup_key(item.code)
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique
