"""Extraction sub-package: read-only DOM traversal, text heuristics and block assembly."""

from .blocks import BlockExtractor, collect_candidates, is_excluded
from .context import build_filename, derive_context, sanitize_filename, unique_filename
from .dedup import dedup_key, deduplicate
from .heuristics import TextVerdict, assess_text, looks_like_code
from .normalize import normalize_text

__all__ = [
    "BlockExtractor",
    "TextVerdict",
    "assess_text",
    "build_filename",
    "collect_candidates",
    "dedup_key",
    "deduplicate",
    "derive_context",
    "is_excluded",
    "looks_like_code",
    "normalize_text",
    "sanitize_filename",
    "unique_filename",
]
