"""Tests for codegrab.extractors.normalize."""

from __future__ import annotations

import pytest

from codegrab.extractors.normalize import normalize_text


def test_nbsp_becomes_space():
    assert normalize_text("a\u00a0=\u00a01") == "a = 1"


def test_line_endings_unified():
    assert normalize_text("one\r\ntwo\rthree\n") == "one\ntwo\nthree"


def test_outer_whitespace_stripped_inner_kept():
    assert normalize_text("\n\n    indented\n        more\n\n") == "indented\n        more"


@pytest.mark.parametrize("raw", [None, "", "   \n\t  "])
def test_empty_input(raw):
    assert normalize_text(raw) == ""


@pytest.mark.parametrize(
    "raw",
    [
        "def f():\r\n\u00a0\u00a0return 1\r\n",
        "  \u00a0leading and trailing\u00a0 ",
        "plain",
    ],
)
def test_idempotent(raw):
    once = normalize_text(raw)
    assert normalize_text(once) == once
