"""Candidate selection and per-element filtering for code-block scans.

Pipeline per candidate element::

    seen? -> excluded ancestor? -> normalize -> min length -> looks like code?
          -> overlaps an accepted block? -> classify -> derive context

Accepted candidates are collected in a :class:`BlockExtractor` and turned
into :class:`~codegrab.items.CodeBlock` records by :meth:`BlockExtractor.finish`
once every selector has been processed.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from bs4 import Tag

from codegrab.config import ScanConfig
from codegrab.errors import ElementProcessingError
from codegrab.extractors.context import build_filename, derive_context, unique_filename
from codegrab.extractors.dedup import deduplicate
from codegrab.extractors.dom import ancestors, element_classes, is_inside
from codegrab.extractors.heuristics import assess_text
from codegrab.extractors.normalize import normalize_text
from codegrab.items import CodeBlock
from codegrab.language import MAX_ANCESTOR_HINTS, classify_language, language_from_class

logger = logging.getLogger(__name__)

BLOCK_ID_PREFIX = "cg-"


@dataclass
class Candidate:
    """An accepted element waiting for its id and filename."""

    element: Tag
    code: str
    language: str
    context: str
    source_tag: str
    classes: str
    position: int


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

def collect_candidates(root: Tag, selectors: Iterable[str]) -> list[Tag]:
    """Return elements matching *selectors*, selector by selector.

    The same element may appear more than once when several selectors match
    it.  Invalid selectors are logged and skipped.
    """
    found: list[Tag] = []
    for selector in selectors:
        try:
            matches = root.select(selector)
        except Exception as exc:  # soupsieve.SelectorSyntaxError and friends
            logger.warning("Skipping invalid selector %r: %s", selector, exc)
            continue
        logger.debug("Selector %r matched %d elements", selector, len(matches))
        found.extend(matches)
    return found


def is_excluded(element: Tag, exclude_selectors: Sequence[str]) -> bool:
    """True if an ancestor of *element* matches an exclusion rule.

    ``"nav"`` matches an ancestor tag name; ``".ads"`` matches any ancestor
    whose class attribute contains ``ads``.  The element itself is not
    checked.
    """
    if not exclude_selectors:
        return False
    tag_rules = {s.lower() for s in exclude_selectors if not s.startswith(".")}
    class_rules = [s[1:].lower() for s in exclude_selectors if s.startswith(".") and len(s) > 1]
    for parent in ancestors(element):
        if parent.name and parent.name.lower() in tag_rules:
            return True
        if class_rules:
            class_str = element_classes(parent).lower()
            if class_str and any(rule in class_str for rule in class_rules):
                return True
    return False


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

class BlockExtractor:
    """Accumulates accepted candidates for one scan.

    Not thread-safe; create one per scan.

    Attributes:
        candidates -- number of elements passed to :meth:`process`
        skipped    -- reason -> count of rejected elements
    """

    def __init__(
        self,
        config: ScanConfig,
        *,
        threshold: float,
        title: str = "",
        host: str = "",
        positions: dict[int, int] | None = None,
    ) -> None:
        self.config = config
        self.threshold = threshold
        self.title = title
        self.host = host
        self._positions = positions or {}
        self._seen: set[int] = set()
        self._accepted: list[Candidate] = []
        self.candidates = 0
        self.skipped: Counter[str] = Counter()

    @property
    def accepted(self) -> int:
        return len(self._accepted)

    def _skip(self, reason: str) -> None:
        self.skipped[reason] += 1

    def _overlaps(self, element: Tag, code: str) -> bool:
        for accepted in self._accepted:
            if code in accepted.code:
                return True
            if is_inside(element, accepted.element) or is_inside(accepted.element, element):
                return True
        return False

    def process(self, element: Tag) -> bool:
        """Examine one element; return True if it was accepted.

        Never raises: failures are logged and counted under ``"error"``.
        """
        self.candidates += 1
        if id(element) in self._seen:
            self._skip("duplicate_element")
            return False
        self._seen.add(id(element))

        try:
            return self._process(element)
        except Exception as exc:
            err = exc if isinstance(exc, ElementProcessingError) else ElementProcessingError(
                str(exc) or type(exc).__name__,
                tag=(getattr(element, "name", "") or "").lower(),
                classes=element_classes(element) if isinstance(element, Tag) else "",
            )
            logger.warning(
                "Error processing <%s class=%r>: %s", err.tag or "?", err.classes, err,
            )
            self._skip("error")
            return False

    def _process(self, element: Tag) -> bool:
        config = self.config
        if is_excluded(element, config.exclude_selectors):
            self._skip("excluded")
            return False

        code = normalize_text(element.get_text())
        if len(code) < config.min_code_length:
            self._skip("too_short")
            return False

        classes = element_classes(element)
        trusted = config.trust_class_hints and language_from_class(classes) is not None
        if not trusted:
            verdict = assess_text(code)
            if not verdict.is_code:
                logger.debug(
                    "Rejected <%s> as %s (indicators: %s)",
                    element.name, verdict.reason, ", ".join(verdict.indicators) or "none",
                )
                self._skip("not_code")
                return False

        if self._overlaps(element, code):
            self._skip("overlap")
            return False

        ancestor_classes = [
            element_classes(parent) for parent in ancestors(element, MAX_ANCESTOR_HINTS)
        ]
        language = classify_language(
            code, classes, ancestor_classes, threshold=self.threshold,
        )
        context = derive_context(element, title=self.title, host=self.host)

        self._accepted.append(Candidate(
            element=element,
            code=code,
            language=language,
            context=context,
            source_tag=(element.name or "").lower(),
            classes=classes,
            position=self._positions.get(id(element), len(self._positions)),
        ))
        return True

    def finish(self) -> list[CodeBlock]:
        """Order, deduplicate, cap and label the accepted candidates."""
        ordered = sorted(self._accepted, key=lambda c: c.position)
        unique = deduplicate(ordered, self.config.max_blocks)
        dropped = len(ordered) - len(unique)
        if dropped:
            logger.debug("Dropped %d duplicate or over-limit blocks", dropped)

        used: set[str] = set()
        blocks: list[CodeBlock] = []
        for index, cand in enumerate(unique):
            filename = unique_filename(
                build_filename(cand.context, cand.language, index + 1), used,
            )
            blocks.append(CodeBlock.from_code(
                cand.code,
                id=f"{BLOCK_ID_PREFIX}{index}",
                language=cand.language,
                context=cand.context,
                filename=filename,
                source_tag=cand.source_tag,
                classes=cand.classes,
            ))
        return blocks

