"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from codegrab.language import reset_languages

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def docs_html() -> str:
    return _read_fixture("docs_page.html")


@pytest.fixture
def duplicates_html() -> str:
    return _read_fixture("duplicates.html")


@pytest.fixture
def docs_soup(docs_html: str) -> BeautifulSoup:
    return BeautifulSoup(docs_html, "lxml")


@pytest.fixture
def many_blocks_html() -> str:
    """Sixty distinct JavaScript-looking <pre> blocks and no title."""
    blocks = "\n".join(
        f"<pre>var x{i} = compute({i});\nvar y{i} = x{i} * 2;\nconsole.log(y{i});</pre>"
        for i in range(60)
    )
    return f"<html><body>{blocks}</body></html>"


@pytest.fixture(autouse=True)
def _restore_language_table() -> Iterator[None]:
    yield
    reset_languages()
