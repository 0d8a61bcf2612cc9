"""Tests for codegrab.extractors.context."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from codegrab.extractors.context import (
    build_filename,
    derive_context,
    fallback_context,
    sanitize_filename,
    unique_filename,
)

LONG_TITLE = "A Very Long Page Title That Goes On And On Beyond Fifty Characters"


def _nested(depth: int) -> str:
    return (
        "<h2>Setup</h2>"
        + "<div>" * depth
        + "<pre>print('hi')</pre>"
        + "</div>" * depth
    )


def _pre(html: str):
    return BeautifulSoup(html, "lxml").find("pre")


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------

class TestDeriveContext:
    def test_previous_heading(self):
        pre = _pre("<h3>  Running   the server </h3><pre>npm start</pre>")
        assert derive_context(pre) == "Running the server"

    def test_filename_banner(self):
        pre = _pre('<div class="code-header">app/main.py</div><pre>x = 1</pre>')
        assert derive_context(pre) == "app/main.py"

    def test_nearest_label_wins(self):
        pre = _pre("<h2>Outer</h2><div><h4>Inner</h4><pre>x = 1</pre></div>")
        assert derive_context(pre) == "Inner"

    def test_paragraph_is_not_a_label(self):
        pre = _pre("<p>Some words</p><pre>x = 1</pre>")
        assert derive_context(pre, title="Docs") == "Docs"

    def test_found_within_five_levels(self):
        assert derive_context(_pre(_nested(4))) == "Setup"

    def test_not_found_beyond_five_levels(self):
        assert derive_context(_pre(_nested(6)), title="Docs") == "Docs"

    def test_label_clipped_to_fifty(self):
        pre = _pre(f"<h1>{LONG_TITLE}</h1><pre>x = 1</pre>")
        assert derive_context(pre) == LONG_TITLE[:50]

    def test_title_fallback_truncated(self):
        # nothing nearby, generic page
        pre = _pre("<pre>x = 1</pre>")
        context = derive_context(pre, title=LONG_TITLE, host="example.com")
        assert context == LONG_TITLE[:50]
        assert build_filename(context, "python", 1).endswith(".py")

    def test_host_fallback(self):
        pre = _pre("<pre>x = 1</pre>")
        assert derive_context(pre, host="docs.example.com") == "docs.example.com"

    def test_untitled_fallback(self):
        assert fallback_context() == "untitled"


# ---------------------------------------------------------------------------
# Filenames
# ---------------------------------------------------------------------------

class TestSanitizeFilename:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("My Cool Script!.py", "my-cool-script.py"),
            ("  ../etc/passwd ", "etcpasswd"),
            ('a<b>c:"d"|e?f*g', "abcdefg"),
            ("Getting Started  --  Part 2", "getting-started-part-2"),
            ("héllo wörld", "hllo-wrld"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_sanitize(self, raw, expected):
        assert sanitize_filename(raw) == expected

    def test_capped_at_fifty(self):
        assert len(sanitize_filename("x" * 80)) == 50


class TestBuildFilename:
    def test_slug_plus_extension(self):
        assert build_filename("Install", "bash", 1) == "install.sh"

    @pytest.mark.parametrize("context", ["", "Code Block", "untitled", "???"])
    def test_placeholder_uses_sequence(self, context):
        assert build_filename(context, "javascript", 3) == "code-3.js"

    def test_unknown_language_is_txt(self):
        assert build_filename("notes", "klingon", 1) == "notes.txt"

    @pytest.mark.parametrize(
        "context", ["a/b\\c", 'x:y*z?"', "<tag>|pipe", LONG_TITLE, "..."],
    )
    def test_never_unsafe(self, context):
        name = build_filename(context, "python", 1)
        assert not any(ch in name for ch in '<>:"/\\|?*')
        assert name.endswith(".py")


class TestUniqueFilename:
    def test_first_use_unchanged(self):
        used: set[str] = set()
        assert unique_filename("main.py", used) == "main.py"
        assert used == {"main.py"}

    def test_counter_before_extension(self):
        used = {"main.py"}
        assert unique_filename("main.py", used) == "main-1.py"
        assert unique_filename("main.py", used) == "main-2.py"

    def test_no_extension(self):
        used = {"Makefile"}
        assert unique_filename("Makefile", used) == "Makefile-1"
