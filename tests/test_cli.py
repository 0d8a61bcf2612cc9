"""Tests for the ``python -m codegrab`` entry point."""

from __future__ import annotations

import io
import json
import zipfile

import pytest

from codegrab.__main__ import main


@pytest.fixture
def page(tmp_path, docs_html):
    path = tmp_path / "page.html"
    path.write_text(docs_html, encoding="utf-8")
    return path


def test_files_export(page, tmp_path):
    out = tmp_path / "out"
    assert main(["--file", str(page), "--out", str(out)]) == 0
    assert "pip install widgets" in (out / "install.sh").read_text(encoding="utf-8")
    assert (out / "query.sql").exists()


def test_json_export(page, tmp_path):
    out = tmp_path / "out"
    assert main(["--file", str(page), "--out", str(out), "--format", "json"]) == 0
    data = json.loads((out / "code-blocks.json").read_text(encoding="utf-8"))
    assert len(data["blocks"]) == 5


def test_zip_export_with_cap(page, tmp_path):
    out = tmp_path / "out"
    argv = ["--file", str(page), "--out", str(out), "--format", "zip", "--max-blocks", "2"]
    assert main(argv) == 0
    with zipfile.ZipFile(out / "code-blocks.zip") as zf:
        assert sorted(zf.namelist()) == ["install.sh", "quick-example.py"]


def test_batched_mode(page, tmp_path):
    out = tmp_path / "out"
    assert main(["--file", str(page), "--out", str(out), "--format", "none", "--batched"]) == 0
    assert not out.exists()


def test_config_profile(page, tmp_path):
    profile = tmp_path / "profile.yaml"
    profile.write_text("default:\n  max_blocks: 1\n", encoding="utf-8")
    out = tmp_path / "out"
    assert main(["--file", str(page), "--out", str(out), "--config", str(profile)]) == 0
    assert [p.name for p in out.iterdir()] == ["install.sh"]


def test_invalid_override(page, tmp_path):
    assert main(["--file", str(page), "--max-blocks", "-1", "--format", "none"]) == 1


def test_missing_file(tmp_path):
    assert main(["--file", str(tmp_path / "nope.html"), "--format", "none"]) == 1


def test_reads_stdin(docs_html, tmp_path, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO(docs_html))
    out = tmp_path / "out"
    assert main(["--out", str(out), "--language", "sql"]) == 0
    assert [p.name for p in out.iterdir()] == ["query.sql"]


def test_filters(page, tmp_path):
    out = tmp_path / "out"
    argv = ["--file", str(page), "--out", str(out), "--grep", "EXPRESS", "--size", "small"]
    assert main(argv) == 0
    (written,) = out.iterdir()
    assert written.name.startswith("server")
    assert written.suffix == ".js"


def test_filters_apply_to_json_manifest(page, tmp_path):
    out = tmp_path / "out"
    argv = ["--file", str(page), "--out", str(out), "--format", "json", "--language", "css"]
    assert main(argv) == 0
    data = json.loads((out / "code-blocks.json").read_text(encoding="utf-8"))
    assert [b["language"] for b in data["blocks"]] == ["css"]


def test_no_match_writes_nothing(page, tmp_path):
    out = tmp_path / "out"
    assert main(["--file", str(page), "--out", str(out), "--language", "kotlin"]) == 0
    assert not out.exists()


def test_unknown_size_bucket(page):
    with pytest.raises(SystemExit):
        main(["--file", str(page), "--size", "huge"])


def test_url_selects_profile_section(page, tmp_path):
    profile = tmp_path / "profile.yaml"
    profile.write_text(
        "domains:\n  intranet.example.com:\n    excludedDomains: [intranet.example.com]\n",
        encoding="utf-8",
    )
    out = tmp_path / "out"
    argv = [
        "--file", str(page), "--out", str(out), "--config", str(profile),
        "--url", "https://intranet.example.com/wiki",
    ]
    assert main(argv) == 0
    assert not out.exists()


def test_bad_profile_key(page, tmp_path):
    profile = tmp_path / "profile.yaml"
    profile.write_text("default:\n  max_block: 3\n", encoding="utf-8")
    assert main(["--file", str(page), "--config", str(profile), "--format", "none"]) == 1
