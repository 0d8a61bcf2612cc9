"""Tests for codegrab.worker."""

from __future__ import annotations

import threading

import pytest

from codegrab.errors import InvalidConfigError
from codegrab.items import ScanResult
from codegrab.store import ScanStore
from codegrab.worker import ScanWorker

LENIENT_JS = "const a = 1;\nconsole.log(a === 1);\nlet b = 2;"


def test_submit_returns_result(docs_html):
    with ScanWorker() as worker:
        result = worker.submit(docs_html, url="https://docs.example.com").result(timeout=30)
    assert isinstance(result, ScanResult)
    assert result.count == 5


def test_result_recorded_in_store(docs_html):
    store = ScanStore()
    with ScanWorker(store=store) as worker:
        worker.submit(docs_html, key=42).result(timeout=30)
    assert store.get(42).count == 5


def test_no_key_no_store_entry(docs_html):
    store = ScanStore()
    with ScanWorker(store=store) as worker:
        worker.submit(docs_html).result(timeout=30)
    assert len(store) == 0


def test_callback_delivery(docs_html):
    delivered: list[ScanResult] = []
    done = threading.Event()

    def _on_result(result: ScanResult) -> None:
        delivered.append(result)
        done.set()

    with ScanWorker() as worker:
        worker.submit(docs_html, callback=_on_result)
        assert done.wait(timeout=30)
    assert delivered[0].count == 5


def test_per_call_config(many_blocks_html):
    with ScanWorker({"max_blocks": 50}) as worker:
        result = worker.submit(many_blocks_html, config={"max_blocks": 4}).result(timeout=30)
    assert result.count == 4


def test_bad_config_raised_at_submit(docs_html):
    with ScanWorker() as worker, pytest.raises(InvalidConfigError):
        worker.submit(docs_html, config={"batch_size": 0})


def test_bad_worker_config():
    with pytest.raises(InvalidConfigError):
        ScanWorker({"max_blocks": -3})


def test_classify_uses_batch_threshold():
    with ScanWorker() as worker:
        assert worker.classify(LENIENT_JS) == "javascript"
        assert worker.classify("anything at all", "language-rust") == "rust"
