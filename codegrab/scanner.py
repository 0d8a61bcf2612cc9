"""codegrab.scanner - page-level entry points.

Synchronous scan::

    from codegrab import scan

    result = scan(html, url="https://example.com/docs/intro")
    for block in result.blocks:
        print(block.filename, block.language, block.lines)

Batched scan with a wall-clock ceiling and progress reporting::

    from codegrab import scan_batched

    def report(progress):
        print(progress.status)

    result = scan_batched(html, {"maxProcessingTimeMs": 2000}, on_progress=report)
    if result.timed_out:
        print("partial results:", result.warnings)

Both functions take an HTML string/bytes, a BeautifulSoup document or any
``Tag`` as *root* and never mutate it.  They only raise for bad input
(:class:`~codegrab.errors.InvalidConfigError`, :class:`TypeError`); failures
on individual elements are logged and counted in ``ScanResult.skipped``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any, NamedTuple
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from codegrab.config import ScanConfig, resolve_config
from codegrab.extractors.blocks import BlockExtractor, collect_candidates
from codegrab.extractors.dom import document_positions, page_title
from codegrab.items import ScanResult

logger = logging.getLogger(__name__)

TIME_LIMIT_WARNING = "Processing stopped due to time limit"
SKIPPED_DOMAIN_WARNING = "Scanning is disabled for {host}"


class ScanProgress(NamedTuple):
    """Progress report passed to ``on_progress`` callbacks."""

    current: int
    total: int
    status: str


ProgressCallback = Callable[[ScanProgress], None]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _as_document(root: str | bytes | Tag) -> Tag:
    if isinstance(root, Tag):
        return root
    if isinstance(root, (str, bytes)):
        return BeautifulSoup(root, "lxml")
    raise TypeError(
        f"scan root must be HTML text or a BeautifulSoup Tag, got {type(root).__name__}",
    )


def _host_of(url: str) -> str:
    if not url:
        return ""
    return urlparse(url).hostname or ""


def _prepare(
    root: str | bytes | Tag,
    cfg: ScanConfig,
    url: str,
    title: str | None,
    threshold_field: str,
) -> tuple[Tag, BlockExtractor, str]:
    doc = _as_document(root)
    resolved_title = page_title(doc) if title is None else title
    extractor = BlockExtractor(
        cfg,
        threshold=getattr(cfg, threshold_field),
        title=resolved_title,
        host=_host_of(url),
        positions=document_positions(doc),
    )
    return doc, extractor, resolved_title


def _skipped_domain(cfg: ScanConfig, url: str, title: str | None) -> ScanResult | None:
    host = _host_of(url)
    if not cfg.skips_host(host):
        return None
    logger.info("Skipping %s: host %s is in skip_domains", url, host)
    return ScanResult(
        url=url,
        title=title or "",
        warnings=[SKIPPED_DOMAIN_WARNING.format(host=host)],
    )


def _notify(on_progress: ProgressCallback | None, progress: ScanProgress) -> None:
    if on_progress is None:
        return
    try:
        on_progress(progress)
    except Exception as exc:
        logger.warning("Progress callback failed: %s", exc)


def _result(
    extractor: BlockExtractor,
    *,
    url: str,
    title: str,
    timed_out: bool = False,
    warnings: list[str] | None = None,
) -> ScanResult:
    blocks = extractor.finish()
    result = ScanResult(
        blocks=blocks,
        url=url,
        title=title,
        candidates=extractor.candidates,
        skipped=dict(extractor.skipped),
        timed_out=timed_out,
        warnings=warnings or [],
    )
    logger.info(
        "Scan complete: %d unique code blocks from %d candidates%s",
        result.count, result.candidates, " (timed out)" if timed_out else "",
    )
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def scan(
    root: str | bytes | Tag,
    config: ScanConfig | Mapping[str, Any] | None = None,
    *,
    url: str = "",
    title: str | None = None,
) -> ScanResult:
    """Detect code blocks in *root* synchronously.

    Args:
        root:   HTML text or a parsed document/element.
        config: :class:`ScanConfig`, a mapping of config keys, or ``None``
                for defaults.
        url:    Page URL.  Its host is the last-resort context label; a
                host listed in ``skip_domains`` yields an empty result.
        title:  Page title override; read from ``<title>`` when ``None``.

    Returns:
        A :class:`ScanResult`.  Finding nothing is not an error.

    Raises:
        InvalidConfigError: for malformed *config*.
        TypeError:          when *root* is not HTML or a ``Tag``.
    """
    cfg = resolve_config(config)
    skipped = _skipped_domain(cfg, url, title)
    if skipped is not None:
        return skipped
    doc, extractor, resolved_title = _prepare(
        root, cfg, url, title, "language_threshold",
    )
    for element in collect_candidates(doc, cfg.all_selectors):
        extractor.process(element)
    return _result(extractor, url=url, title=resolved_title)


def scan_batched(
    root: str | bytes | Tag,
    config: ScanConfig | Mapping[str, Any] | None = None,
    *,
    url: str = "",
    title: str | None = None,
    on_progress: ProgressCallback | None = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> ScanResult:
    """Detect code blocks in bounded batches under a wall-clock ceiling.

    Candidates are processed ``batch_size`` at a time with a ``delay_ms``
    pause between batches.  Before each batch the elapsed time is checked;
    once it exceeds ``max_processing_time_ms`` the scan stops and returns
    what it has with ``timed_out=True``.  Language scoring uses
    ``batch_threshold``.

    *clock* and *sleep* are injectable for tests.
    """
    cfg = resolve_config(config)
    skipped = _skipped_domain(cfg, url, title)
    if skipped is not None:
        return skipped
    doc, extractor, resolved_title = _prepare(
        root, cfg, url, title, "batch_threshold",
    )
    elements = collect_candidates(doc, cfg.all_selectors)
    total = len(elements)
    budget = cfg.max_processing_time_ms / 1000.0
    start = clock()

    _notify(on_progress, ScanProgress(0, total, "Processing elements..."))

    timed_out = False
    warnings: list[str] = []
    done = 0
    for offset in range(0, total, cfg.batch_size):
        if clock() - start > budget:
            timed_out = True
            warnings.append(TIME_LIMIT_WARNING)
            logger.warning(
                "%s after %d of %d elements (%s)", TIME_LIMIT_WARNING, done, total,
                url or resolved_title or "document",
            )
            break

        for element in elements[offset:offset + cfg.batch_size]:
            extractor.process(element)
        done = min(offset + cfg.batch_size, total)
        _notify(on_progress, ScanProgress(done, total, f"Processed {done} of {total} elements"))

        if done < total and cfg.delay_ms:
            sleep(cfg.delay_ms / 1000.0)

    return _result(
        extractor, url=url, title=resolved_title, timed_out=timed_out, warnings=warnings,
    )
