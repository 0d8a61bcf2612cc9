"""Background scans on a thread pool.

``ScanWorker.submit()`` is fire-and-forget: it returns immediately with a
:class:`~concurrent.futures.Future` and, when given, calls *callback* with the
finished :class:`~codegrab.items.ScanResult`.  Finished results can be
recorded in a :class:`~codegrab.store.ScanStore` under a tab key.

    with ScanWorker(store=ScanStore()) as worker:
        future = worker.submit(html, key=tab_id, url=url)
        result = future.result()
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from bs4 import Tag

from codegrab.config import ScanConfig, resolve_config
from codegrab.items import ScanResult
from codegrab.language import classify_language
from codegrab.scanner import ProgressCallback, scan_batched
from codegrab.store import ScanStore

logger = logging.getLogger(__name__)


class ScanWorker:
    """Run :func:`~codegrab.scanner.scan_batched` off the caller's thread."""

    def __init__(
        self,
        config: ScanConfig | Mapping[str, Any] | None = None,
        *,
        max_workers: int = 2,
        store: ScanStore | None = None,
    ) -> None:
        self.config = resolve_config(config)
        self.store = store
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="codegrab-scan",
        )

    def submit(
        self,
        root: str | bytes | Tag,
        *,
        key: Hashable | None = None,
        url: str = "",
        title: str | None = None,
        config: ScanConfig | Mapping[str, Any] | None = None,
        on_progress: ProgressCallback | None = None,
        callback: Callable[[ScanResult], None] | None = None,
    ) -> Future[ScanResult]:
        """Queue a scan of *root*; config errors are raised here, not in the future."""
        cfg = self.config if config is None else resolve_config(config)

        def _run() -> ScanResult:
            result = scan_batched(
                root, cfg, url=url, title=title, on_progress=on_progress,
            )
            if self.store is not None and key is not None:
                self.store.put(key, result)
            return result

        future = self._executor.submit(_run)
        if callback is not None:
            future.add_done_callback(lambda f: _deliver(f, callback))
        return future

    def classify(self, code: str, class_hint: str = "") -> str:
        """Standalone language detection using the batched-path threshold."""
        return classify_language(
            code, class_hint, threshold=self.config.batch_threshold,
        )

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> ScanWorker:
        return self

    def __exit__(self, *exc: object) -> None:
        self.shutdown()


def _deliver(future: Future[ScanResult], callback: Callable[[ScanResult], None]) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.warning("Background scan failed: %s", exc)
        return
    try:
        callback(future.result())
    except Exception as cb_exc:
        logger.warning("Scan result callback failed: %s", cb_exc)

